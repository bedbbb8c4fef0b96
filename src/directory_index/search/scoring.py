"""Relevance scoring for free-text search results."""

import re
from typing import Sequence

from directory_index.schemas.business import Business

NAME_MATCH = 10
NAME_WORD_MATCH = 5
NAME_PREFIX_MATCH = 7
DESCRIPTION_MATCH = 5
KEYWORD_MATCH = 7
OCCURRENCE = 2
FEATURED_BOOST = 5


def relevance_score(business: Business, terms: Sequence[str]) -> float:
    """Score a business against normalized query terms.

    Bonuses add up per term: a name substring match, a whole-word name match and
    a name prefix match can all apply to the same term. Every raw occurrence of
    the term across name, description and keywords adds a further
    ``OCCURRENCE`` points, including occurrences already rewarded above. Featured
    businesses get a flat boost and the rating is added once.

    Args:
        business: Business to score
        terms: Lower-cased query terms, as produced by ``tokenize``

    Returns:
        A non-negative score, higher is more relevant
    """
    name = business.name.lower()
    name_words = name.split(" ")
    description = (business.description or "").lower()
    keywords = [keyword.lower() for keyword in business.keywords or []]
    text = f"{name} {description} {' '.join(keywords)}"

    score = 0.0
    for term in terms:
        if term in name:
            score += NAME_MATCH
            if term in name_words:
                score += NAME_WORD_MATCH
            if name.startswith(term):
                score += NAME_PREFIX_MATCH

        if description and term in description:
            score += DESCRIPTION_MATCH

        if any(term in keyword for keyword in keywords):
            score += KEYWORD_MATCH

        score += len(re.findall(re.escape(term), text)) * OCCURRENCE

    if business.featured:
        score += FEATURED_BOOST

    score += business.rating
    return score
