from venuecal.venues import bottom_of_the_hill, rickshaw_stop, the_chapel, the_independent

# Processed in this order on every run.
VENUES = [
    {
        "id": "bottom-of-the-hill",
        "name": "Bottom of the Hill",
        "calendar_url": "https://www.bottomofthehill.com/calendar.html",
        "parser": bottom_of_the_hill.parse,
    },
    {
        "id": "the-independent",
        "name": "The Independent",
        "calendar_url": "https://www.theindependentsf.com",
        "parser": the_independent.parse,
    },
    {
        "id": "the-chapel",
        "name": "The Chapel",
        "calendar_url": "https://thechapelsf.com/music/?list1page=1",
        "parser": the_chapel.parse,
        "page_param": "list1page",
    },
    {
        "id": "rickshaw-stop",
        "name": "Rickshaw Stop",
        "calendar_url": "https://rickshawstop.com/calendar/",
        "parser": rickshaw_stop.parse,
    },
]


def get_venues(selection="all"):
    """Return registry entries for a venue id, or every venue for "all"."""
    if selection == "all":
        return list(VENUES)
    return [venue for venue in VENUES if venue["id"] == selection]


def venue_ids():
    return [venue["id"] for venue in VENUES]
