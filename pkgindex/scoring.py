"""String scoring for package search.

Implements the string_score algorithm (Joshaven Potter, string_score.js
0.1.22): greedy left-to-right character matching where contiguous matches,
start-of-word matches and exact-case matches earn more, normalized by both
string lengths. A fuzziness tolerance lets queries with characters absent
from the candidate still score, at a penalty.
"""
from __future__ import annotations

from typing import Iterable, List

from .model import Package

RELEVANCE_THRESHOLD = 0.3


def _fold(text: str) -> str:
    """Lowercase one character at a time, keeping positions aligned with text.

    Characters whose lowercase form is longer than one code point (e.g. "İ")
    are left as they are.
    """
    return "".join(c.lower() if len(c.lower()) == 1 else c for c in text)


def score(candidate: str, query: str, fuzziness: float = 0.0) -> float:
    """Score how well query matches candidate.

    Args:
        candidate: String being scored (e.g. a package name)
        query: What the user typed
        fuzziness: 0.0 rejects any query character missing from candidate;
            values in (0, 1] tolerate misses with a shrinking penalty

    Returns:
        1.0 for an exact match, 0.0 for no match, otherwise a value that
        can slightly exceed 1.0 for very short candidates

    Raises:
        ValueError: If fuzziness is outside [0, 1]
    """
    if not 0.0 <= fuzziness <= 1.0:
        raise ValueError(f"fuzziness must be between 0 and 1, got {fuzziness}")

    if candidate == query:
        return 1.0
    if query == "" or candidate == "":
        return 0.0

    l_candidate = _fold(candidate)
    l_query = _fold(query)

    start_at = 0
    running_score = 0.0
    fuzzy_factor = 1 - fuzziness
    fuzzies = 1.0

    for i, ch in enumerate(l_query):
        idx = l_candidate.find(ch, start_at)

        if idx == -1:
            if fuzziness > 0.0:
                fuzzies += fuzzy_factor
                continue
            return 0.0

        if idx == start_at:
            char_score = 0.7
        elif idx > 0 and candidate[idx - 1] == " ":
            char_score = 0.9
        else:
            char_score = 0.1

        # same case bonus
        if candidate[idx] == query[i]:
            char_score += 0.1

        running_score += char_score
        start_at = idx + 1

    # Reduce penalty for longer strings
    final_score = 0.5 * (running_score / len(candidate) + running_score / len(query)) / fuzzies

    if l_query[0] == l_candidate[0] and final_score < 0.85:
        final_score += 0.15

    return final_score


def rank(
    packages: Iterable[Package],
    query: str,
    fuzziness: float = 0.0,
    threshold: float = RELEVANCE_THRESHOLD,
) -> List[Package]:
    """Score packages by name and keep those above threshold.

    Sets ``score`` on every package in place. The sort is stable, so packages
    with equal scores keep their listing order.

    Returns:
        Packages with score > threshold, best first
    """
    kept: List[Package] = []
    for pkg in packages:
        pkg.score = score(pkg.name, query, fuzziness)
        if pkg.score > threshold:
            kept.append(pkg)
    return sorted(kept, key=lambda p: p.score, reverse=True)
