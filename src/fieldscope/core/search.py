"""
Fuzzy search.

Stateless ranking of candidate names (fields, schemas or endpoint labels)
against a query. A candidate matches when the query is a case-insensitive
subsequence of it; the score then rewards tight, early, word-aligned
matches.

Score components:
    MATCH        per matched character
    CONSECUTIVE  match directly after the previous match
    BOUNDARY     match at a word start (after `_ - / . {` or space, or a camelCase hump)
    FIRST_CHAR   match at position 0
    EXACT        whole candidate equals the query
    minus the leading gap and a small length penalty.

Any subsequence match scores at least 1; a non-match scores 0.
"""

from typing import List, Protocol, Sequence

from .snapshot import ReverseIndex

MATCH = 10
CONSECUTIVE = 15
BOUNDARY = 10
FIRST_CHAR = 15
EXACT = 100
MAX_GAP_PENALTY = 15

BOUNDARY_CHARS = frozenset("_-/. {")


class CandidateSource(Protocol):
    def candidates(self, index: ReverseIndex) -> List[str]:
        ...


def _is_boundary(candidate: str, i: int) -> bool:
    if i == 0:
        return True
    prev, ch = candidate[i - 1], candidate[i]
    if prev in BOUNDARY_CHARS:
        return True
    return prev.islower() and ch.isupper()


def score(query: str, candidate: str) -> int:
    """
    Fuzzy match score of `candidate` for `query`.

    Returns:
        0 when the query is not a subsequence of the candidate, otherwise a
        positive integer. Larger is better.
    """
    if not query:
        return 0

    q = query.lower()
    c = candidate.lower()
    if len(q) > len(c):
        return 0

    total = 0
    prev = -2
    first = -1
    pos = 0

    for qc in q:
        i = c.find(qc, pos)
        if i < 0:
            return 0
        if first < 0:
            first = i
        total += MATCH
        if i == prev + 1:
            total += CONSECUTIVE
        if _is_boundary(candidate, i):
            total += BOUNDARY
        if i == 0:
            total += FIRST_CHAR
        prev = i
        pos = i + 1

    if c == q:
        total += EXACT

    total -= min(first, MAX_GAP_PENALTY)
    total -= (len(c) - len(q)) // 4

    return max(total, 1)


def search(query: str, candidates: Sequence[str]) -> List[str]:
    """
    Rank candidates against a query.

    An empty query returns the candidates unchanged. Otherwise only
    matching candidates are returned, by descending score and then by
    name, so the order never depends on sort stability.
    """
    if not query:
        return list(candidates)

    scored = [(score(query, name), name) for name in candidates]
    ranked = sorted(
        ((s, name) for s, name in scored if s > 0),
        key=lambda pair: (-pair[0], pair[1]),
    )
    return [name for _, name in ranked]


def search_view(query: str, view: CandidateSource, index: ReverseIndex) -> List[str]:
    """Search a view's full candidate set."""
    return search(query, view.candidates(index))
