import re

from bs4 import BeautifulSoup

from venuecal.utils.dates import parse_date_iso, parse_show_time
from venuecal.utils.text import normalize_whitespace, resolve_url, split_openers
from venuecal.venues.common import block_lines, find_ancestor, text_of, to_rows, unique_tags

VENUE_ID = "the-chapel"

DATE_LINE_RE = re.compile(r"(mon|tue|wed|thu|fri|sat|sun)\s+[a-z]{3}\s+\d{1,2}", re.IGNORECASE)
SHOW_AT_RE = re.compile(r"show at\s*([0-9: ]+[ap]m)", re.IGNORECASE)
SUPPORT_LABEL_RE = re.compile(r"^supporting talent:\s*", re.IGNORECASE)
SEETICKETS_RE = re.compile(r"seetickets\.us", re.IGNORECASE)
BUY_TICKETS_RE = re.compile(r"buy tickets", re.IGNORECASE)
WITH_SPLIT_RE = re.compile(r"\s+with\s+", re.IGNORECASE)


def _holds_listing(tag):
    text = text_of(tag)
    return bool(DATE_LINE_RE.search(text)) and "show at" in text.lower()


def find_event_blocks(soup):
    """
    See Tickets list containers, excluding the "just announced" strip.
    Without them, climb from each "Buy Tickets" link to the nearest element
    holding both a date line and a "show at" time.
    """
    blocks = [
        block
        for block in soup.select(".seetickets-list-event-container")
        if block.find_parent(id="just-announced-events-list") is None
    ]
    if blocks:
        return blocks

    found = []
    for link in soup.find_all("a", href=True):
        if not (BUY_TICKETS_RE.search(link.get_text()) and SEETICKETS_RE.search(link["href"])):
            continue

        block = find_ancestor(link, _holds_listing, max_depth=8)
        if block is not None:
            found.append(block)
    return unique_tags(found)


def pick_title_link(block):
    link = block.select_one(".title a")
    if link is not None:
        return link
    return next(
        (
            a
            for a in block.find_all("a", href=True)
            if SEETICKETS_RE.search(a["href"]) and not BUY_TICKETS_RE.search(a.get_text())
        ),
        None,
    )


def parse_show_time_line(block, lines):
    show_line = (
        text_of(block.select_one(".doortime-showtime"))
        or next((line for line in lines if "show at" in line.lower()), "")
        or next((line for line in lines if "doors at" in line.lower()), "")
    )
    match = SHOW_AT_RE.search(show_line)
    if match:
        return parse_show_time(f"show: {match.group(1)}")
    return parse_show_time(show_line)


def parse_supporting_talent(block, lines):
    support_text = text_of(block.select_one(".supporting-talent"))
    if support_text:
        return split_openers(SUPPORT_LABEL_RE.sub("", support_text))

    for i, line in enumerate(lines):
        if SUPPORT_LABEL_RE.match(line):
            rest = SUPPORT_LABEL_RE.sub("", line)
            if rest:
                return split_openers(rest)
            return split_openers(lines[i + 1] if i + 1 < len(lines) else "")
    return []


def parse_listings(html, source_page_url, reference_date):
    soup = BeautifulSoup(html, "html.parser")
    for block in find_event_blocks(soup):
        lines = block_lines(block)

        date_text = text_of(block.select_one(".date")) or next(
            (line for line in lines if DATE_LINE_RE.search(line)), ""
        )
        date = parse_date_iso(date_text, reference_date)

        title_link = pick_title_link(block)
        title_text = text_of(title_link)
        headliner = normalize_whitespace(WITH_SPLIT_RE.split(title_text, maxsplit=1)[0]) or title_text
        if not date or not headliner:
            continue

        openers = parse_supporting_talent(block, lines)
        if not openers and WITH_SPLIT_RE.search(title_text):
            openers = split_openers(WITH_SPLIT_RE.split(title_text, maxsplit=1)[1])

        yield {
            "date": date,
            "time": parse_show_time_line(block, lines),
            "headliner": headliner,
            "openers": openers,
            "show_url": resolve_url(title_link.get("href") if title_link else None, source_page_url),
            "source_page_url": source_page_url,
        }


def parse(html, source_page_url, reference_date):
    rows = []
    for show in parse_listings(html, source_page_url, reference_date):
        rows.extend(to_rows(show, VENUE_ID))
    return rows
