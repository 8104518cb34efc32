from datetime import date
from pathlib import Path

import pytest

from venuecal.registry import VENUES, get_venues
from venuecal.venues import bottom_of_the_hill, rickshaw_stop, the_chapel, the_independent

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"
REF = date(2026, 1, 5)


def load(name):
    return (FIXTURES / name).read_text()


def summarize(rows):
    return [(r["date"], r["time"], r["role"], r["artists"], r["show_url"]) for r in rows]


@pytest.mark.parametrize("venue", VENUES, ids=[v["id"] for v in VENUES])
def test_registered_parsers_produce_valid_rows(venue):
    html = load(f"{venue['id'].replace('-', '_')}.html")
    rows = venue["parser"](html, venue["calendar_url"], REF)

    assert len(rows) > 0
    for row in rows:
        assert row["date"]
        assert row["artists"] and all(row["artists"])
        assert row["venue_id"] == venue["id"]
        assert row["role"] in ("headliner", "opener")
        assert row["source_page_url"] == venue["calendar_url"]


def test_parsers_tolerate_empty_pages():
    for venue in VENUES:
        assert venue["parser"]("<html><body></body></html>", venue["calendar_url"], REF) == []


def test_get_venues():
    assert [v["id"] for v in get_venues("the-chapel")] == ["the-chapel"]
    assert len(get_venues("all")) == len(VENUES)
    assert get_venues("nowhere") == []


def test_bottom_of_the_hill():
    source = "https://www.bottomofthehill.com/calendar.html"
    rows = bottom_of_the_hill.parse(load("bottom_of_the_hill.html"), source, REF)

    assert summarize(rows) == [
        ("2026-01-10", "21:00", "headliner", ["Headliner One"], "https://www.bottomofthehill.com/20260110.html"),
        ("2026-01-10", "21:00", "opener", ["Opener A"], "https://www.bottomofthehill.com/20260110.html"),
        ("2026-01-11", "19:30", "headliner", ["Headliner Two"], source),
    ]


def test_the_independent():
    source = "https://www.theindependentsf.com"
    rows = the_independent.parse(load("the_independent.html"), source, REF)

    assert summarize(rows) == [
        ("2026-01-10", "20:00", "headliner", ["Big Headliner"], "https://www.theindependentsf.com/event/123-big-headliner"),
        ("2026-01-10", "20:00", "opener", ["Support One"], "https://www.theindependentsf.com/event/123-big-headliner"),
        ("2026-01-10", "20:00", "opener", ["Support Two"], "https://www.theindependentsf.com/event/123-big-headliner"),
        ("2026-12-04", "", "headliner", ["Late Year Band"], "https://www.theindependentsf.com/event/456"),
    ]


def test_the_chapel_skips_just_announced():
    source = "https://thechapelsf.com/music/?list1page=1"
    rows = the_chapel.parse(load("the_chapel.html"), source, REF)

    assert summarize(rows) == [
        ("2026-01-17", "20:00", "headliner", ["Chapel Act"], "https://wl.seetickets.us/event/chapel-act/100"),
        ("2026-01-17", "20:00", "opener", ["Friend Band"], "https://wl.seetickets.us/event/chapel-act/100"),
        ("2026-01-18", "19:30", "headliner", ["Solo Artist"], "https://wl.seetickets.us/event/solo-artist/101"),
        ("2026-01-18", "19:30", "opener", ["Guest Two"], "https://wl.seetickets.us/event/solo-artist/101"),
        ("2026-01-18", "19:30", "opener", ["Guest Three"], "https://wl.seetickets.us/event/solo-artist/101"),
    ]


def test_the_chapel_falls_back_to_buy_ticket_links():
    html = """
    <div class="listing">
      <div>Sat Jan 24</div>
      <a href="https://wl.seetickets.us/event/fallback/7">Fallback Act</a>
      <div>Doors at 7:00PM / Show at 8:00PM</div>
      <a href="https://wl.seetickets.us/event/fallback/7">Buy Tickets</a>
    </div>
    """
    rows = the_chapel.parse(html, "https://thechapelsf.com/music/", REF)
    assert summarize(rows) == [
        ("2026-01-24", "20:00", "headliner", ["Fallback Act"], "https://wl.seetickets.us/event/fallback/7"),
    ]


def test_rickshaw_stop_calendar_grid():
    rows = rickshaw_stop.parse(load("rickshaw_stop.html"), "https://rickshawstop.com/calendar/", REF)

    assert summarize(rows) == [
        ("2026-02-07", "21:00", "headliner", ["EMO NITE"], "https://wl.seetickets.us/event/emo-nite/1"),
        ("2026-02-08", "20:00", "headliner", ["Rickshaw Band"], "https://wl.seetickets.us/event/rickshaw-band/2"),
        ("2026-02-08", "20:00", "opener", ["Local One"], "https://wl.seetickets.us/event/rickshaw-band/2"),
        ("2026-02-08", "20:00", "opener", ["Local Two"], "https://wl.seetickets.us/event/rickshaw-band/2"),
    ]


def test_rickshaw_stop_list_layout():
    html = """
    <div class="seetickets-list-event-container">
      <p class="date">Thu Mar 5</p>
      <p class="title"><a href="https://wl.seetickets.us/event/list-act/3">List Act</a></p>
      <p class="doortime-showtime">Show at 8:30PM</p>
    </div>
    """
    rows = rickshaw_stop.parse(html, "https://rickshawstop.com/calendar/", REF)
    assert summarize(rows) == [
        ("2026-03-05", "20:30", "headliner", ["List Act"], "https://wl.seetickets.us/event/list-act/3"),
    ]


def test_the_independent_passes_over_price_lines():
    html = """
    <div class="show-card">
      <h2>Band A</h2>
      <p>Tickets $15.00</p>
      <p>Sat 1.10</p>
    </div>
    <div class="show-card">
      <h2>Band B</h2>
      <p>Open 24/7</p>
    </div>
    """
    source = "https://www.theindependentsf.com"
    rows = the_independent.parse(html, source, REF)

    assert summarize(rows) == [("2026-01-10", "", "headliner", ["Band A"], source)]
