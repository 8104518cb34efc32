"""
Show matching across runs.

A batch is matched against the previous batch for the same venue with an
ordered cascade of key functions, strictest first. Each pass only considers
records left unmatched by earlier passes, and a record is paired only when its
key points at exactly one candidate; ambiguous keys are left for looser passes.
"""

from venuecal.pipeline.normalize import build_show_key


def build_stable_show_key(show):
    return "|".join([
        show["date"],
        show["venue_id"],
        show.get("show_url") or "",
        ",".join(show["headliners"]),
    ])


def build_url_key(show):
    if not show.get("show_url"):
        return ""
    return f"{show['venue_id']}|{show['show_url']}"


def build_date_time_key(show):
    return f"{show['venue_id']}|{show['date']}|{show.get('start_time') or ''}"


def build_headliner_time_key(show):
    return f"{build_date_time_key(show)}|{','.join(show['headliners'])}"


STRATEGIES = [
    ("exact", build_show_key),
    ("stable", build_stable_show_key),
    ("url", build_url_key),
    ("date_time", build_date_time_key),
    ("headliner_time", build_headliner_time_key),
]


class MatchState:
    """Indices already paired on each side."""

    def __init__(self):
        self.matched_prev = set()
        self.matched_next = set()


def match_by_key(previous, next_shows, state, key_func):
    """
    Pair unmatched next shows with unmatched previous shows sharing a key.
    Returns a list of (prev_index, next_index) and records them in state.
    """
    candidates = {}
    for i, show in enumerate(previous):
        if i in state.matched_prev:
            continue
        key = key_func(show)
        if key:
            candidates.setdefault(key, []).append(i)

    pairs = []
    for j, show in enumerate(next_shows):
        if j in state.matched_next:
            continue
        key = key_func(show)
        if not key:
            continue
        indices = candidates.get(key)
        if not indices or len(indices) != 1:
            continue
        prev_index = indices[0]
        if prev_index in state.matched_prev:
            continue
        state.matched_prev.add(prev_index)
        state.matched_next.add(j)
        pairs.append((prev_index, j))
    return pairs


def run_cascade(previous, next_shows, state=None):
    """Run every strategy in order. Returns (state, {strategy_name: pairs})."""
    state = state or MatchState()
    results = {}
    for name, key_func in STRATEGIES:
        results[name] = match_by_key(previous, next_shows, state, key_func)
    return state, results


def preserve_show_ids(next_shows, previous_shows):
    """
    Return copies of next_shows carrying the show_id of their matched
    predecessor. Unmatched shows keep their content-derived id.
    """
    result = [dict(show) for show in next_shows]
    _, results = run_cascade(previous_shows, result)
    for pairs in results.values():
        for prev_index, next_index in pairs:
            result[next_index]["show_id"] = previous_shows[prev_index]["show_id"]
    return result


def diff_shows(previous, next_shows):
    """Count unchanged, updated, added and removed shows between two batches."""
    state, results = run_cascade(previous, next_shows)
    updated = sum(len(pairs) for name, pairs in results.items() if name != "exact")
    return {
        "unchanged": len(results["exact"]),
        "updated": updated,
        "added": len(next_shows) - len(state.matched_next),
        "removed": len(previous) - len(state.matched_prev),
    }


def unmatched_previous(previous, next_shows):
    """Previous shows that no strategy pairs with anything in next_shows."""
    state, _ = run_cascade(previous, next_shows)
    return [show for i, show in enumerate(previous) if i not in state.matched_prev]
