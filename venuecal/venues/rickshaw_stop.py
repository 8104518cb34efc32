import re
from datetime import date

from bs4 import BeautifulSoup

from venuecal.utils.dates import MONTHS, parse_date_iso, parse_show_time
from venuecal.utils.text import normalize_whitespace, resolve_url, split_openers
from venuecal.venues.common import text_of, to_rows

VENUE_ID = "rickshaw-stop"

MONTH_HEADER_RE = re.compile(
    r"(January|February|March|April|May|June|July|August|September|October|November|December)\s+(\d{4})",
    re.IGNORECASE,
)
SHOW_AT_RE = re.compile(r"show at\s*([0-9: ]+[ap]m)", re.IGNORECASE)
SUPPORT_LABEL_RE = re.compile(r"^supporting talent:\s*", re.IGNORECASE)
SEETICKETS_RE = re.compile(r"seetickets\.us", re.IGNORECASE)
SHORT_DATE_RE = re.compile(r"[A-Za-z]{3}\s+\d{1,2}")


def normalize_headliner(value):
    # Emo Nite listings carry a different tour subtitle every month
    cleaned = normalize_whitespace(value)
    if re.search(r"emo nite", cleaned, re.IGNORECASE):
        return "EMO NITE"
    return cleaned


def pick_headliner(block):
    link = block.select_one("p.title a")
    if link is None:
        link = next(
            (a for a in block.select("p.fs-12.bold.m-0 a") if SEETICKETS_RE.search(a.get("href") or "")),
            None,
        )
    return normalize_headliner(text_of(link)) or normalize_headliner(text_of(block.select_one(".headliners")))


def pick_show_url(block, source_page_url):
    link = next((a for a in block.find_all("a", href=True) if SEETICKETS_RE.search(a["href"])), None)
    return resolve_url(link["href"] if link else None, source_page_url)


def parse_supporting_talent(block):
    support_text = text_of(block.select_one(".supporting-talent"))
    return split_openers(SUPPORT_LABEL_RE.sub("", support_text))


def parse_show_time_line(block):
    time_text = text_of(block.select_one(".doortime-showtime")) or text_of(block.select_one(".show-time"))
    match = SHOW_AT_RE.search(time_text)
    if match:
        return parse_show_time(f"show: {match.group(1)}")
    return parse_show_time(time_text)


def _listing(block, show_date, source_page_url):
    return {
        "date": show_date,
        "time": parse_show_time_line(block),
        "headliner": pick_headliner(block),
        "openers": parse_supporting_talent(block),
        "show_url": pick_show_url(block, source_page_url),
        "source_page_url": source_page_url,
    }


def parse_calendar_tables(soup, source_page_url):
    """Month-grid layout: a "Month YYYY" header followed by a table of day cells."""
    listings = []
    for header in soup.select(".seetickets-calendar-year-month-container"):
        match = MONTH_HEADER_RE.search(text_of(header))
        if not match:
            continue
        month = MONTHS[match.group(1).lower()]
        year = int(match.group(2))

        table = header.find_next_sibling("table")
        if table is None:
            continue

        for cell in table.find_all("td"):
            day_text = text_of(cell.select_one(".date-number"))
            if not day_text.isdigit():
                continue
            try:
                show_date = date(year, month, int(day_text)).isoformat()
            except ValueError:
                continue

            for event in cell.select(".seetickets-calendar-event-container"):
                listing = _listing(event, show_date, source_page_url)
                if listing["headliner"]:
                    listings.append(listing)
    return listings


def parse_listings(html, source_page_url, reference_date):
    soup = BeautifulSoup(html, "html.parser")
    listings = parse_calendar_tables(soup, source_page_url)
    if listings:
        return listings

    blocks = soup.select(".seetickets-list-event-container") or soup.select(
        ".seetickets-calendar-event-container"
    )
    for block in blocks:
        short_date = SHORT_DATE_RE.search(text_of(block))
        date_text = (
            text_of(block.select_one(".date"))
            or text_of(block.select_one(".event-date"))
            or (short_date.group(0) if short_date else "")
        )
        show_date = parse_date_iso(date_text, reference_date)
        if not show_date:
            continue
        listing = _listing(block, show_date, source_page_url)
        if listing["headliner"]:
            listings.append(listing)
    return listings


def parse(html, source_page_url, reference_date):
    rows = []
    for show in parse_listings(html, source_page_url, reference_date):
        rows.extend(to_rows(show, VENUE_ID))
    return rows
