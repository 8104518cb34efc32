from venuecal import config


def validate_row(row):
    """Check that a raw show row has a date, a known role and at least one artist."""
    for field in config.REQUIRED_ROW_FIELDS:
        if not row.get(field):
            return False
    if not any(name and name.strip() for name in row["artists"]):
        return False
    if row.get("role") and row["role"] not in config.ROLES:
        return False
    return True


def validate_show(show):
    """A normalized show needs a date, a venue, an id and a headliner."""
    return bool(show.get("date") and show.get("venue_id") and show.get("show_id") and show.get("headliners"))
