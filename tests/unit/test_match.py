import pytest

from venuecal.pipeline.match import (
    STRATEGIES,
    MatchState,
    diff_shows,
    match_by_key,
    preserve_show_ids,
    run_cascade,
    unmatched_previous,
)
from venuecal.pipeline.normalize import build_show_id

URL = "https://www.bottomofthehill.com/20260110.html"


def show(show_id=None, **overrides):
    data = {
        "show_id": "",
        "date": "2026-01-10",
        "start_time": "8:00 PM",
        "venue_id": "bottom-of-the-hill",
        "venue_name": "Bottom of the Hill",
        "show_url": URL,
        "source_url": "https://www.bottomofthehill.com/calendar.html",
        "headliners": ["A"],
        "openers": [],
    }
    data.update(overrides)
    data["show_id"] = show_id or build_show_id(data)
    return data


def test_strategies_run_strictest_first():
    assert [name for name, _ in STRATEGIES] == ["exact", "stable", "url", "date_time", "headliner_time"]


def test_new_opener_keeps_previous_id():
    previous = [show("old")]
    next_shows = [show(openers=["NewOpener"])]
    assert next_shows[0]["show_id"] != "old"

    result = preserve_show_ids(next_shows, previous)

    assert result[0]["show_id"] == "old"
    assert result[0]["openers"] == ["NewOpener"]
    # inputs are left untouched
    assert next_shows[0]["show_id"] != "old"


def test_url_match_carries_id_across_date_change():
    previous = [show("old")]
    next_shows = [show(date="2026-01-17", headliners=["Renamed"])]
    assert preserve_show_ids(next_shows, previous)[0]["show_id"] == "old"
    assert diff_shows(previous, next_shows) == {"unchanged": 0, "updated": 1, "added": 0, "removed": 0}


def test_date_time_match_without_urls():
    previous = [show("old", show_url=None)]
    next_shows = [show(show_url=None, headliners=["Typo Fixed"])]
    assert preserve_show_ids(next_shows, previous)[0]["show_id"] == "old"


def test_unmatched_show_keeps_content_id():
    previous = [show("old")]
    fresh = show(date="2026-02-01", show_url="https://example.com/other", start_time="9:00 PM", headliners=["B"])
    result = preserve_show_ids([fresh], previous)
    assert result[0]["show_id"] == fresh["show_id"]


def test_ambiguous_key_is_skipped():
    previous = [
        show("p1", show_url="u1", headliners=["A"]),
        show("p2", show_url="u2", headliners=["B"]),
    ]
    # same venue/date/time as both previous shows, nothing stricter matches
    candidate = show(show_url="u3", headliners=["C"])

    result = preserve_show_ids([candidate], previous)

    assert result[0]["show_id"] == candidate["show_id"]
    assert diff_shows(previous, [candidate]) == {"unchanged": 0, "updated": 0, "added": 1, "removed": 2}


def test_headliner_time_match_when_date_time_is_ambiguous():
    previous = [
        show("p1", show_url="u1", headliners=["A"]),
        show("p2", show_url="u2", headliners=["B"]),
    ]
    # new url, so only the headliner at that date and time ties it to p1
    moved = show(show_url="u9", headliners=["A"])

    result = preserve_show_ids([moved], previous)

    assert result[0]["show_id"] == "p1"
    _, results = run_cascade(previous, [moved])
    assert results["date_time"] == []
    assert results["headliner_time"] == [(0, 0)]
    assert diff_shows(previous, [moved]) == {"unchanged": 0, "updated": 1, "added": 0, "removed": 1}


def test_matched_previous_show_is_not_reused():
    previous = [show("old")]
    first = show(openers=["X"])
    second = show(start_time="10:00 PM")

    result = preserve_show_ids([first, second], previous)

    assert result[0]["show_id"] == "old"
    assert result[1]["show_id"] != "old"


def test_match_by_key_records_state_and_skips_empty_keys():
    previous = [show("p", show_url=None)]
    next_shows = [show(show_url=None)]
    state = MatchState()
    url_key = dict(STRATEGIES)["url"]

    assert match_by_key(previous, next_shows, state, url_key) == []
    assert match_by_key(previous, next_shows, state, dict(STRATEGIES)["stable"]) == [(0, 0)]
    assert state.matched_prev == {0}
    assert state.matched_next == {0}


def test_diff_counts():
    s1 = show("s1")
    s2 = show("s2", date="2026-01-12", show_url="https://example.com/s2", headliners=["S2"])
    s1_updated = show(openers=["Added Opener"])
    s3 = show(date="2026-01-20", show_url="https://example.com/s3", start_time="9:00 PM", headliners=["S3"])

    assert diff_shows([s1, s2], [s1_updated, s3]) == {"unchanged": 0, "updated": 1, "added": 1, "removed": 1}


@pytest.mark.parametrize(
    "previous,next_shows,expected",
    [
        ([], [], {"unchanged": 0, "updated": 0, "added": 0, "removed": 0}),
        ([], [show()], {"unchanged": 0, "updated": 0, "added": 1, "removed": 0}),
        ([show("x")], [], {"unchanged": 0, "updated": 0, "added": 0, "removed": 1}),
        ([show("x")], [show("y")], {"unchanged": 1, "updated": 0, "added": 0, "removed": 0}),
    ],
)
def test_diff_edge_cases(previous, next_shows, expected):
    assert diff_shows(previous, next_shows) == expected


def test_diff_does_not_change_ids():
    previous = [show("old")]
    next_shows = [show(openers=["X"])]
    before = next_shows[0]["show_id"]
    diff_shows(previous, next_shows)
    assert next_shows[0]["show_id"] == before


def test_unmatched_previous():
    kept = show("kept")
    gone = show("gone", date="2026-01-03", show_url="https://example.com/gone", start_time="7:00 PM", headliners=["G"])
    assert unmatched_previous([kept, gone], [show()]) == [gone]
