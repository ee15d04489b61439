"""Edit-distance search over task description, details and tags."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from rapidfuzz.distance import Levenshtein

from .task import Task

DEFAULT_THRESHOLD = 0.7
DEFAULT_FIELD_WEIGHTS: Dict[str, float] = {
    "description": 1.0,
    "details": 0.8,
    "tags": 0.6,
}


@dataclass
class FieldMatch:
    field: str
    text: str
    similarity: float


@dataclass
class FuzzyMatch:
    task: Task
    score: float
    matches: List[FieldMatch] = field(default_factory=list)


def levenshtein(a: str, b: str) -> int:
    return Levenshtein.distance(a, b)


def field_similarity(query: str, text: str) -> float:
    """Similarity of ``query`` against the best same-length window of ``text``.

    A case-insensitive substring hit scores 1.0. Otherwise each window of
    ``len(query)`` characters is scored as ``1 - distance / len(query)``.
    """
    if not query or not text:
        return 0.0
    q = query.lower()
    t = text.lower()
    if q in t:
        return 1.0
    size = len(q)
    if len(t) < size:
        return 0.0
    best = 0.0
    for start in range(len(t) - size + 1):
        similarity = 1.0 - levenshtein(q, t[start:start + size]) / size
        if similarity > best:
            best = similarity
    return best


def _searchable_fields(task: Task) -> Iterable[Tuple[str, str]]:
    if task.description:
        yield "description", task.description
    if task.details:
        yield "details", task.details
    for tag in task.tags or []:
        yield "tags", tag


def search(
    tasks: Sequence[Task],
    query: str,
    threshold: float = DEFAULT_THRESHOLD,
    field_weights: Optional[Dict[str, float]] = None,
) -> List[FuzzyMatch]:
    """Rank tasks by weighted field similarity; tasks with no qualifying field are dropped."""
    weights = dict(DEFAULT_FIELD_WEIGHTS)
    if field_weights:
        weights.update(field_weights)
    results: List[FuzzyMatch] = []
    if not query or not query.strip():
        return results
    for task in tasks:
        matches: List[FieldMatch] = []
        score = 0.0
        for name, text in _searchable_fields(task):
            similarity = field_similarity(query, text)
            if similarity < threshold:
                continue
            score += similarity * weights.get(name, 0.0)
            matches.append(FieldMatch(field=name, text=text, similarity=similarity))
        if matches:
            results.append(FuzzyMatch(task=task, score=score, matches=matches))
    # sorted() is stable: equal scores keep input order.
    return sorted(results, key=lambda r: r.score, reverse=True)


def matches_fuzzy(task: Task, query: str, threshold: float = DEFAULT_THRESHOLD) -> bool:
    return any(field_similarity(query, text) >= threshold for _, text in _searchable_fields(task))


__all__ = [
    "DEFAULT_THRESHOLD",
    "DEFAULT_FIELD_WEIGHTS",
    "FieldMatch",
    "FuzzyMatch",
    "levenshtein",
    "field_similarity",
    "search",
    "matches_fuzzy",
]
