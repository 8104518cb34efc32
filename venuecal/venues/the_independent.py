import re

from bs4 import BeautifulSoup

from venuecal.utils.dates import parse_date_iso, parse_show_time
from venuecal.utils.text import resolve_url, split_openers
from venuecal.venues.common import (
    block_lines,
    class_string,
    find_ancestor,
    first_date,
    first_text,
    text_of,
    to_rows,
    unique_tags,
)

VENUE_ID = "the-independent"

TITLE_SELECTORS = [".tw-name a", ".tw-name", ".show-title", ".event-title", ".title", "h1", "h2", "h3"]
DOT_DATE_RE = re.compile(r"\d{1,2}\.\d{1,2}")
WITH_RE = re.compile(r"with\s+", re.IGNORECASE)
SHOW_LINE_RE = re.compile(r"show:\s*\d{1,2}:\d{2}\s*[ap]m", re.IGNORECASE)
MORE_INFO_RE = re.compile(r"more info", re.IGNORECASE)


def pick_show_blocks(soup):
    blocks = soup.select(".tw-event-item")
    if blocks:
        return blocks

    blocks = soup.select(".show-card")
    if blocks:
        return blocks

    candidates = []
    for link in soup.find_all("a"):
        if not MORE_INFO_RE.search(link.get_text()):
            continue
        container = find_ancestor(
            link, lambda tag: re.search(r"show|event|listing|card", class_string(tag), re.IGNORECASE)
        )
        if container is not None:
            candidates.append(container)
        if link.parent is not None:
            candidates.append(link.parent)
    return unique_tags(candidates)


def _more_link(block):
    link = block.select_one(".tw-name a")
    if link is not None:
        return link
    return next((a for a in block.find_all("a") if MORE_INFO_RE.search(a.get_text())), None)


def parse_listings(html, source_page_url, reference_date):
    soup = BeautifulSoup(html, "html.parser")
    for block in pick_show_blocks(soup):
        lines = block_lines(block)

        date_text = first_text(block, ".tw-event-date", ".show-date")
        if date_text:
            date = parse_date_iso(date_text, reference_date)
        else:
            date = first_date(lines, DOT_DATE_RE, reference_date)
        headliner = first_text(block, *TITLE_SELECTORS)
        if not date or not headliner:
            continue

        opener_line = (
            first_text(block, ".tw-attractions", ".show-support")
            or next((text_of(p) for p in block.find_all("p") if WITH_RE.search(text_of(p))), "")
            or next((line for line in lines if WITH_RE.search(line)), "")
        )
        time_line = first_text(block, ".tw-event-time", ".show-time") or next(
            (line for line in lines if SHOW_LINE_RE.search(line)), ""
        )
        link = _more_link(block)

        yield {
            "date": date,
            "time": parse_show_time(time_line),
            "headliner": headliner,
            "openers": split_openers(opener_line),
            "show_url": resolve_url(link.get("href") if link else None, source_page_url),
            "source_page_url": source_page_url,
        }


def parse(html, source_page_url, reference_date):
    rows = []
    for show in parse_listings(html, source_page_url, reference_date):
        rows.extend(to_rows(show, VENUE_ID))
    return rows
