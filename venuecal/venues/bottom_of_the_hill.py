import re

from bs4 import BeautifulSoup

from venuecal.utils.dates import parse_date_iso, parse_show_time
from venuecal.utils.text import is_placeholder_name, normalize_whitespace, resolve_url, split_openers
from venuecal.venues.common import (
    block_lines,
    class_string,
    find_ancestor,
    first_date,
    text_of,
    to_rows,
    unique_tags,
)

VENUE_ID = "bottom-of-the-hill"

BLOCK_SELECTORS = [
    ".calendaritem",
    ".calendar-item",
    ".showlisting",
    ".show-listing",
    ".event",
    ".event-item",
    ".listing",
]
DATE_LINE_RE = re.compile(
    r"\d{1,2}\.\d{1,2}|\d{1,2}/\d{1,2}|\b(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)", re.IGNORECASE
)
TIME_LINE_RE = re.compile(r"\d{1,2}(?::\d{2})?\s*[ap]m", re.IGNORECASE)
MUSIC_AT_RE = re.compile(r"music at\s*(\d{1,2})(?::(\d{2}))?\s*([ap]m)?", re.IGNORECASE)
SHOW_PAGE_RE = re.compile(r"/\d{8}\.html$", re.IGNORECASE)
ANCHOR_NAME_RE = re.compile(r"^\d{8}$")


def pick_show_blocks(soup):
    """
    Calendar rows are table rows holding a dated anchor (name="YYYYMMDD").
    Older layouts are tried through class selectors, then through links back
    to the site grouped by their nearest listing-like container.
    """
    anchors = [a for a in soup.find_all("a") if re.search(r"\d{8}", a.get("name") or "")]
    rows = unique_tags(a.find_parent("tr") for a in anchors if a.find_parent("tr"))
    if rows:
        return rows

    blocks = unique_tags(tag for selector in BLOCK_SELECTORS for tag in soup.select(selector))
    if blocks:
        return blocks

    candidates = []
    for link in soup.find_all("a", href=True):
        if "bottomofthehill" not in link["href"] or not text_of(link):
            continue
        container = find_ancestor(
            link, lambda tag: re.search(r"show|event|listing|calendar|gig", class_string(tag), re.IGNORECASE)
        )
        if container is not None:
            candidates.append(container)
        if link.parent is not None:
            candidates.append(link.parent)
    return unique_tags(candidates)


def _date_from_anchor(block):
    for link in block.find_all("a"):
        name = link.get("name") or ""
        if ANCHOR_NAME_RE.match(name):
            return f"{name[:4]}-{name[4:6]}-{name[6:8]}"
    return ""


def _show_time(block, lines):
    time_line = next(
        (text_of(node) for node in block.select(".time") if TIME_LINE_RE.search(text_of(node))),
        "",
    ) or next((line for line in lines if TIME_LINE_RE.search(line)), "")

    music_at_line = next((line for line in lines if re.search(r"music at", line, re.IGNORECASE)), "")
    music_at = MUSIC_AT_RE.search(music_at_line)
    if music_at:
        hour, minutes, meridiem = music_at.groups()
        if not meridiem:
            found = re.search(r"[ap]m", time_line, re.IGNORECASE)
            meridiem = found.group(0) if found else ""
        if meridiem:
            return parse_show_time(f"show: {hour}{':' + minutes if minutes else ''} {meridiem}")
    return parse_show_time(time_line)


def _show_url(block, source_page_url):
    for link in block.find_all("a", href=True):
        href = link["href"]
        if SHOW_PAGE_RE.search(href) or SHOW_PAGE_RE.search(resolve_url(href, source_page_url)):
            return resolve_url(href, source_page_url)
    return source_page_url


def parse_listings(html, source_page_url, reference_date):
    """Yield one dict per calendar listing with a date and a headliner."""
    soup = BeautifulSoup(html, "html.parser")
    for block in pick_show_blocks(soup):
        lines = block_lines(block)

        date_text = " ".join(text_of(node) for node in block.select(".date")).strip()
        date = (
            parse_date_iso(date_text, reference_date)
            or first_date(lines, DATE_LINE_RE, reference_date)
            or _date_from_anchor(block)
        )

        bands = [text_of(node) for node in block.select(".band")]
        bands = [name for name in bands if name and not is_placeholder_name(name)]
        headliner = bands[0] if bands else text_of(block.select_one(".title"))

        if bands:
            opener_line = ", ".join(bands[1:])
        else:
            opener_line = text_of(block.select_one(".support")) or next(
                (line for line in lines if re.search(r"with\s+|w/", line, re.IGNORECASE)), ""
            )

        if not date or not headliner:
            continue

        yield {
            "date": date,
            "time": _show_time(block, lines),
            "headliner": normalize_whitespace(headliner),
            "openers": split_openers(opener_line),
            "show_url": _show_url(block, source_page_url),
            "source_page_url": source_page_url,
        }


def parse(html, source_page_url, reference_date):
    rows = []
    for show in parse_listings(html, source_page_url, reference_date):
        rows.extend(to_rows(show, VENUE_ID))
    return rows
