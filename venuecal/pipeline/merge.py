from datetime import datetime

from venuecal.pipeline.match import diff_shows, unmatched_previous
from venuecal.pipeline.normalize import show_sort_key
from venuecal.utils.dates import is_within_range, time_sort_key


def today_iso():
    return datetime.utcnow().date().isoformat()


def shows_from(shows, date_iso):
    """Shows dated on or after date_iso."""
    return [show for show in shows if show["date"] >= date_iso]


def should_write(previous_file, previous_shows, next_shows, today=None):
    """
    Decide whether a venue's batch is persisted.
    Always write when there is no previous file; otherwise only when the
    today-or-later slice gained, lost or changed a show. Churn in past dates
    never triggers a rewrite.
    Returns (should_write, counts_for_today_forward).
    """
    today = today or today_iso()
    counts = diff_shows(shows_from(previous_shows, today), shows_from(next_shows, today))
    if previous_file is None:
        return True, counts
    changed = counts["updated"] > 0 or counts["added"] > 0 or counts["removed"] > 0
    return changed, counts


def retain_past_shows(previous_shows, next_shows, today=None):
    """
    Merge the new batch with previous shows that have already happened.
    Venue pages stop listing past shows, so a previous show dated before
    today that matches nothing in the new batch is carried forward.
    """
    today = today or today_iso()
    carried = [
        show for show in unmatched_previous(previous_shows, next_shows)
        if show["date"] < today
    ]
    return sorted(list(next_shows) + carried, key=show_sort_key)


def all_venues_sort_key(show):
    return (
        show["date"],
        time_sort_key(show.get("start_time")),
        show.get("venue_name") or "",
        ",".join(show["headliners"]),
    )


def merge_venue_batches(batches):
    """Flatten venue files into one list sorted by date, time, venue, headliners."""
    shows = []
    for batch in batches:
        shows.extend(batch.get("shows", []))
    return sorted(shows, key=all_venues_sort_key)


def filter_rows_in_range(rows, start_iso, end_iso):
    """Drop raw rows outside the requested date range."""
    return [row for row in rows if is_within_range(row["date"], start_iso, end_iso)]
