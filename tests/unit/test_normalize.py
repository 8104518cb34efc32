import itertools
import random

from venuecal.pipeline.normalize import build_show_id, build_show_key, hash_string, normalize_shows

VENUE = "bottom-of-the-hill"
SOURCE = "https://www.bottomofthehill.com/calendar.html"


def row(date, artists, role="headliner", url="", time="20:00"):
    return {
        "date": date,
        "time": time,
        "artists": artists,
        "role": role,
        "venue_id": VENUE,
        "show_url": url,
        "source_page_url": SOURCE,
    }


def normalize(rows):
    return normalize_shows(VENUE, "Bottom of the Hill", SOURCE, rows)


def test_hash_string_matches_fnv1a_vectors():
    assert hash_string("") == "811c9dc5"
    assert hash_string("a") == "e40c292c"
    assert hash_string("foobar") == "bf9cf968"


def test_rows_sharing_a_url_form_one_show():
    url = "https://www.bottomofthehill.com/20260110.html"
    shows = normalize([
        row("2026-01-10", ["Band A"], url=url),
        row("2026-01-10", ["Opener Z"], role="opener", url=url),
        row("2026-01-10", ["Opener B"], role="opener", url=url),
        row("2026-01-10", ["Opener B"], role="opener", url=url),
    ])

    assert len(shows) == 1
    show = shows[0]
    assert show["headliners"] == ["Band A"]
    assert show["openers"] == ["Opener B", "Opener Z"]
    assert show["start_time"] == "8:00 PM"
    assert show["show_url"] == url
    assert show["source_url"] == SOURCE
    assert show["venue_name"] == "Bottom of the Hill"
    assert show["show_id"] == hash_string(f"{VENUE}|2026-01-10|{url}|Band A")


def test_show_id_ignores_openers_and_time():
    base = {"venue_id": VENUE, "date": "2026-01-10", "show_url": "u", "headliners": ["A"]}
    assert build_show_id(base) == build_show_id({**base, "openers": ["X"], "start_time": "9:00 PM"})
    assert build_show_id(base) != build_show_id({**base, "show_url": "v"})
    assert len(build_show_id(base)) == 8


def test_opener_without_url_joins_same_date_show_without_url():
    shows = normalize([
        row("2026-01-10", ["Band A"]),
        row("2026-01-10", ["Support"], role="opener"),
    ])
    assert len(shows) == 1
    assert shows[0]["openers"] == ["Support"]
    assert shows[0]["show_url"] is None


def test_orphan_opener_without_headliner_is_dropped():
    shows = normalize([
        row("2026-01-11", ["Lonely Opener"], role="opener"),
        row("2026-01-12", ["Band B"]),
    ])
    assert [s["headliners"] for s in shows] == [["Band B"]]


def test_missing_role_counts_as_headliner():
    r = row("2026-01-10", ["Band A"])
    del r["role"]
    shows = normalize([r])
    assert shows[0]["headliners"] == ["Band A"]


def test_exact_duplicates_are_dropped():
    shows = normalize([
        row("2026-01-10", ["Band A"]),
        row("2026-01-10", ["Band A", "Band A"]),
    ])
    assert len(shows) == 1


def test_sorted_by_date_then_time_with_unknown_last():
    shows = normalize([
        row("2026-01-11", ["Next Day"], url="u4"),
        row("2026-01-10", ["No Time"], url="u1", time=""),
        row("2026-01-10", ["Late"], url="u2", time="22:00"),
        row("2026-01-10", ["Early"], url="u3", time="21:00"),
    ])
    assert [s["headliners"][0] for s in shows] == ["Early", "Late", "No Time", "Next Day"]
    assert shows[2]["start_time"] is None


def test_output_is_independent_of_row_order():
    rows = [
        row("2026-01-10", ["Band A"], url="u1"),
        row("2026-01-10", ["Opener 1"], role="opener", url="u1"),
        row("2026-01-10", ["Opener 2"], role="opener", url="u1"),
        row("2026-01-12", ["Band C"]),
        row("2026-01-11", ["Band B"], url="u2"),
    ]
    expected = normalize(rows)

    for permutation in itertools.permutations(rows):
        assert normalize(list(permutation)) == expected

    shuffled = rows * 2
    random.Random(7).shuffle(shuffled)
    assert normalize(shuffled) == expected


def test_names_are_sorted_and_unique():
    shows = normalize([
        row("2026-01-10", ["Zed", "Alpha", "Zed"], url="u1"),
        row("2026-01-10", ["Beta", "Beta"], role="opener", url="u1"),
    ])
    assert shows[0]["headliners"] == ["Alpha", "Zed"]
    assert shows[0]["openers"] == ["Beta"]
    assert build_show_key(shows[0]).endswith("|Alpha,Zed|Beta")
