from venuecal.utils.dates import parse_date_iso
from venuecal.utils.text import normalize_whitespace


def block_lines(block):
    """Non-empty, whitespace-normalized text lines of a tag."""
    lines = (normalize_whitespace(line) for line in block.get_text("\n").split("\n"))
    return [line for line in lines if line]


def text_of(tag):
    return normalize_whitespace(tag.get_text(" ")) if tag else ""


def first_text(block, *selectors):
    """Text of the first selector that finds a non-empty element."""
    for selector in selectors:
        text = text_of(block.select_one(selector))
        if text:
            return text
    return ""


def first_date(lines, pattern, reference_date):
    """First date parsed from a line matching pattern; lines like "$15.00" are passed over."""
    for line in lines:
        if pattern.search(line):
            parsed = parse_date_iso(line, reference_date)
            if parsed:
                return parsed
    return ""


def find_ancestor(tag, predicate, max_depth=None):
    """Walk up from tag (inclusive) and return the first ancestor matching predicate."""
    current = tag
    depth = 0
    while current is not None and current.name != "[document]":
        if predicate(current):
            return current
        if max_depth is not None and depth >= max_depth:
            break
        current = current.parent
        depth += 1
    return None


def class_string(tag):
    return " ".join(tag.get("class") or [])


def unique_tags(tags):
    """De-duplicate tags by identity while keeping document order."""
    seen = set()
    result = []
    for tag in tags:
        if id(tag) in seen:
            continue
        seen.add(id(tag))
        result.append(tag)
    return result


def to_rows(show, venue_id):
    """Expand one parsed listing into a headliner row plus one row per opener."""
    base = {
        "date": show["date"],
        "time": show["time"],
        "venue_id": venue_id,
        "show_url": show["show_url"],
        "source_page_url": show["source_page_url"],
    }
    rows = [{**base, "artists": [show["headliner"]], "role": "headliner"}]
    for opener in show["openers"]:
        rows.append({**base, "artists": [opener], "role": "opener"})
    return rows
