"""Autocomplete suggestion scoring and ranking.

Each candidate source produces ``TermScore`` values. Scores for the same term
are summed across sources, then terms are ranked with prefix matches of the raw
query first. Everything here is pure; the search service does the store reads.
"""

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence

from directory_index.schemas.business import Business
from directory_index.schemas.category import Category

MAX_SUGGESTIONS = 10

# Indexed search terms
TERM_BASE = 1
TERM_PREFIX = 3
TERM_EXACT = 5

# Category names and descriptions
CATEGORY_BASE = 2
CATEGORY_PREFIX = 2
CATEGORY_DESCRIPTION = 1

# Business names
BUSINESS_BASE = 1
BUSINESS_PREFIX = 4
BUSINESS_FEATURED = 2


@dataclass(frozen=True, slots=True)
class TermScore:
    """A suggested term and the score one source gave it."""

    term: str
    score: float


def combine(existing: Optional[TermScore], incoming: TermScore) -> TermScore:
    """Merge two scores for the same term by summing them."""
    if existing is None:
        return incoming
    if existing.term != incoming.term:
        raise ValueError(f"Cannot combine scores of '{existing.term}' and '{incoming.term}'")
    return TermScore(existing.term, existing.score + incoming.score)


def aggregate(*sources: Iterable[TermScore]) -> dict[str, float]:
    """Sum scores per term across sources, keeping first-seen term order."""
    merged: dict[str, TermScore] = {}
    for source in sources:
        for candidate in source:
            merged[candidate.term] = combine(merged.get(candidate.term), candidate)
    return {term: candidate.score for term, candidate in merged.items()}


def rank(scores: Mapping[str, float], query: str, limit: int = MAX_SUGGESTIONS) -> list[str]:
    """Order terms: prefixes of the query first, then by score descending.

    Terms with equal rank keep their order in ``scores``.
    """
    prefix = query.lower()
    ordered = sorted(
        scores.items(),
        key=lambda item: (not item[0].lower().startswith(prefix), -item[1]),
    )
    return [term for term, _ in ordered[:limit]]


def indexed_term_scores(token: str, words: Iterable[str]) -> list[TermScore]:
    """Score indexed search terms that contain a query token."""
    results = []
    for word in words:
        if token not in word:
            continue
        score = TERM_BASE
        if word.startswith(token):
            score += TERM_PREFIX
        if word == token:
            score += TERM_EXACT
        results.append(TermScore(word, score))
    return results


def category_scores(category: Category, tokens: Sequence[str]) -> list[TermScore]:
    """Score a category name against query tokens.

    A description match is a separate, smaller entry for the same name.
    """
    name = category.name.lower()
    description = (category.description or "").lower()
    results = []
    for token in tokens:
        if token in name:
            score = CATEGORY_BASE
            if name.startswith(token):
                score += CATEGORY_PREFIX
            results.append(TermScore(category.name, score))

        if description and token in description:
            results.append(TermScore(category.name, CATEGORY_DESCRIPTION))
    return results


def business_name_score(business: Business, query: str) -> Optional[TermScore]:
    """Score a business name containing the raw query, or None when it does not."""
    name = business.name.lower()
    needle = query.lower()
    if needle not in name:
        return None

    score = float(BUSINESS_BASE)
    if name.startswith(needle):
        score += BUSINESS_PREFIX
    if business.featured:
        score += BUSINESS_FEATURED
    score += business.rating
    return TermScore(business.name, score)
