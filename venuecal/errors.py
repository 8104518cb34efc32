class VenueError(Exception):
    """Base class for failures that mark a single venue as failed for a run."""

    def __init__(self, venue_id, message):
        super().__init__(f"{venue_id}: {message}")
        self.venue_id = venue_id


class FetchError(VenueError):
    """Transport error or non-2xx response while fetching a calendar page."""


class ParseError(VenueError):
    """A venue parser raised, or produced no rows for a non-empty page."""
