"""Multi-tier ranking of index entries against a free-text query."""

import posixpath
from typing import Iterable

from codenav.errors import InvalidQueryError
from codenav.indexing.models import Entry, ScoredEntry

MAX_EDIT_DISTANCE = 2

SCORE_EXACT_STEM = 100.0
SCORE_EXACT_NAME = 95.0
SCORE_PREFIX = 80.0
SCORE_NAME_SUBSTRING = 60.0
SCORE_PATH_SUBSTRING = 40.0
SCORE_FUZZY_BASE = 35.0
SCORE_FUZZY_STEP = 7.5


def validate_query(query: str) -> str:
    if not query or not query.strip():
        raise InvalidQueryError("query must not be empty")
    return query.strip()


def levenshtein(a: str, b: str, max_dist: int) -> int:
    """Edit distance between ``a`` and ``b``, or ``max_dist + 1`` once it is exceeded."""
    if not a:
        return len(b)
    if not b:
        return len(a)
    if abs(len(a) - len(b)) > max_dist:
        return max_dist + 1

    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        cur = [i] + [0] * len(b)
        row_min = i
        for j, cb in enumerate(b, 1):
            cost = 0 if ca == cb else 1
            cur[j] = min(cur[j - 1] + 1, prev[j] + 1, prev[j - 1] + cost)
            row_min = min(row_min, cur[j])
        if row_min > max_dist:
            return max_dist + 1
        prev = cur
    return prev[-1]


def score_name(query: str, name: str, path: str) -> float:
    """Relevance of one entry; 0 means no match at all."""
    q = query.lower()
    name_lower = name.lower()
    stem = posixpath.splitext(name_lower)[0]

    if q == stem:
        return SCORE_EXACT_STEM
    if q == name_lower:
        return SCORE_EXACT_NAME
    if stem.startswith(q):
        return SCORE_PREFIX
    if q in name_lower:
        return SCORE_NAME_SUBSTRING
    if q in path.lower():
        return SCORE_PATH_SUBSTRING

    # Length window keeps the edit-distance pass off clearly unrelated names
    if len(stem) <= len(q) + MAX_EDIT_DISTANCE and len(q) <= len(stem) + MAX_EDIT_DISTANCE:
        dist = levenshtein(q, stem, MAX_EDIT_DISTANCE)
        if dist <= MAX_EDIT_DISTANCE:
            return SCORE_FUZZY_BASE - dist * SCORE_FUZZY_STEP
    return 0.0


def match_scored(entries: Iterable[Entry], query: str) -> list[ScoredEntry]:
    """Entries with a positive score, best first; ties go to the shorter path."""
    query = validate_query(query)
    scored = []
    for entry in entries:
        score = score_name(query, entry.name, entry.path)
        if score > 0:
            scored.append(ScoredEntry(entry=entry, score=score))
    # sorted() is stable, so equal keys keep index order
    return sorted(scored, key=lambda s: (-s.score, len(s.entry.path)))


def match(entries: Iterable[Entry], query: str) -> list[Entry]:
    return [s.entry for s in match_scored(entries, query)]


def match_exact(entries: Iterable[Entry], query: str) -> list[Entry]:
    """Unranked case-insensitive substring filter over name and path."""
    q = validate_query(query).lower()
    return [e for e in entries if q in e.name.lower() or q in e.path.lower()]
