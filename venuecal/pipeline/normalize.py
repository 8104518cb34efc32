from venuecal import config
from venuecal.utils.dates import format_time_12, time_sort_key

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193


def hash_string(value):
    """32-bit FNV-1a over UTF-16 code units, as 8 zero-padded hex digits."""
    h = FNV_OFFSET_BASIS
    data = value.encode("utf-16-le")
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h * FNV_PRIME) & 0xFFFFFFFF
    return f"{h:08x}"


def build_show_id(show):
    """Content-derived id from venue, date, url and sorted headliners."""
    canonical = "|".join([
        show["venue_id"],
        show["date"],
        show.get("show_url") or "",
        ",".join(show["headliners"]),
    ])
    return hash_string(canonical)


def build_show_key(show):
    """Key of every grouped field; equal keys mean byte-identical shows."""
    return "|".join([
        show["date"],
        show.get("start_time") or "",
        show["venue_id"],
        show.get("show_url") or "",
        ",".join(show["headliners"]),
        ",".join(show["openers"]),
    ])


def show_sort_key(show):
    return (
        show["date"],
        time_sort_key(show.get("start_time")),
        ",".join(show["headliners"]),
        build_show_key(show),
    )


def _group_key(row, role):
    if row.get("show_url"):
        return f"url:{row['show_url']}"
    if role == "opener":
        return None
    return f"date:{row['date']}|headliner:{','.join(row['artists'])}"


def normalize_shows(venue_id, venue_name, source_url, rows):
    """
    Group raw artist/role rows into one record per show.

    Rows sharing a show URL form one show. Without a URL, headliner rows are
    grouped by date and artist names, and opener rows join the latest earlier
    show on the same date that also has no URL (or start a show of their own).
    Names are de-duplicated and sorted, ids derived from content, exact
    duplicates dropped and the result sorted by date, time and headliners.
    """
    by_key = {}
    shows = []

    for row in rows:
        show_url = row.get("show_url") or None
        role = row.get("role") or config.DEFAULT_ROLE
        key = _group_key(row, role)

        show = by_key.get(key) if key else None
        if show is None and role == "opener":
            show = next(
                (s for s in reversed(shows) if s["date"] == row["date"] and s["show_url"] is None),
                None,
            )
        if show is None:
            show = {
                "show_id": "",
                "date": row["date"],
                "start_time": format_time_12(row.get("time")),
                "venue_id": venue_id,
                "venue_name": venue_name,
                "show_url": show_url,
                "source_url": source_url,
                "headliners": [],
                "openers": [],
            }
            shows.append(show)
            if key:
                by_key[key] = show

        if role == "opener":
            show["openers"].extend(row["artists"])
        else:
            show["headliners"].extend(row["artists"])

    deduped = {}
    for show in shows:
        show["headliners"] = sorted(set(show["headliners"]))
        show["openers"] = sorted(set(show["openers"]))
        if not show["headliners"]:
            continue
        show["show_id"] = build_show_id(show)
        deduped.setdefault(build_show_key(show), show)

    return sorted(deduped.values(), key=show_sort_key)
