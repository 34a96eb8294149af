"""Weighted rank fusion of the vector and lexical result lists.

For a vector list of length N, the hit at 0-based position i contributes
    vector_weight * max(similarity_i, 0) * (N - i)
For a lexical list of length M, the document at position j contributes
    lexical_weight * (M - j)
Contributions are summed per resource (type + id). The output is the union of
both inputs, ordered by descending score; ties keep first-appearance order
(vector list first, then lexical).

Negative similarities contribute nothing, so appearing in an extra list never
lowers a resource's score.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from notefuse.db.models import Document
from notefuse.errors import InvalidConfiguration
from notefuse.rag.vector_search import VectorHit


@dataclass
class SearchResult:
    """One fused, per-resource search result.

    Attributes:
        resource_id: Owning document id.
        resource_type: Owning document kind.
        score: Fused rank score (higher = more relevant; not a probability).
        document: Enriched document payload, or None if it no longer exists.
        vector_rank: 1-based position of the resource's best vector hit (None if absent).
        lexical_rank: 1-based position in the lexical list (None if absent).
    """

    resource_id: str
    resource_type: str
    score: float
    document: Document | None = None
    vector_rank: int | None = None
    lexical_rank: int | None = None


def fuse(
    vector_results: Sequence[VectorHit],
    lexical_results: Sequence[Document],
    limit: int,
    *,
    vector_weight: float = 1.0,
    lexical_weight: float = 0.5,
) -> list[SearchResult]:
    """Merge both channels into one ranked list of at most *limit* results.

    Raises:
        InvalidConfiguration: If *limit* or a weight is negative.
    """
    if limit < 0:
        raise InvalidConfiguration(f"limit must be >= 0, got {limit}")
    if vector_weight < 0 or lexical_weight < 0:
        raise InvalidConfiguration("fusion weights must be >= 0")

    merged: dict[tuple[str, str], SearchResult] = {}

    def _entry(resource_id: str, resource_type: str) -> SearchResult:
        key = (str(resource_id), resource_type)
        if key not in merged:
            merged[key] = SearchResult(resource_id=key[0], resource_type=resource_type, score=0.0)
        return merged[key]

    n_vector = len(vector_results)
    for i, hit in enumerate(vector_results):
        result = _entry(hit.resource_id, hit.resource_type)
        result.score += vector_weight * max(hit.similarity, 0.0) * (n_vector - i)
        if result.vector_rank is None:
            result.vector_rank = i + 1
        if result.document is None:
            result.document = hit.document

    n_lexical = len(lexical_results)
    for j, doc in enumerate(lexical_results):
        result = _entry(doc.resource_id, doc.resource_type)
        result.score += lexical_weight * (n_lexical - j)
        if result.lexical_rank is None:
            result.lexical_rank = j + 1
        # The lexical hit is the freshly read document; prefer it.
        result.document = doc

    # sorted() is stable: equal scores keep first-appearance order
    ranked = sorted(merged.values(), key=lambda r: r.score, reverse=True)
    return ranked[:limit]
