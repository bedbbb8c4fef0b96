"""Free-text search and autocomplete over the search index."""

import asyncio
from typing import Any, Callable, List, Optional, Sequence

from loguru import logger

from directory_index.repository.entity_store import EntityStore
from directory_index.schemas.business import Business
from directory_index.schemas.category import Category, CategoryMatch
from directory_index.schemas.query import SearchQuery, SearchResult
from directory_index.search import keys
from directory_index.search.scoring import relevance_score
from directory_index.search.suggestions import (
    MAX_SUGGESTIONS,
    TermScore,
    aggregate,
    business_name_score,
    category_scores,
    indexed_term_scores,
    rank,
)
from directory_index.search.tokenizer import tokenize
from directory_index.services.query_planner import (
    DEFAULT_LOAD_CONCURRENCY,
    gather_limited,
    load_businesses,
)

MAX_CATEGORY_MATCHES = 5

# Sort key and direction per search sort field, applied to (score, business) pairs
_SEARCH_SORTS: dict[str, tuple[Callable[[tuple[float, Business]], Any], bool]] = {
    "relevance": (lambda pair: pair[0], True),
    "name": (lambda pair: pair[1].name, False),
    "rating": (lambda pair: pair[1].rating, True),
    "createdAt": (lambda pair: pair[1].created_at.timestamp(), True),
}


class SearchService:
    """Runs AND searches over term buckets and merges suggestion sources."""

    def __init__(
        self,
        entity_store: EntityStore,
        max_categories: int = MAX_CATEGORY_MATCHES,
        max_suggestions: int = MAX_SUGGESTIONS,
        load_concurrency: int = DEFAULT_LOAD_CONCURRENCY,
    ):
        self.entity_store = entity_store
        self.max_categories = max_categories
        self.max_suggestions = max_suggestions
        self.load_concurrency = load_concurrency

    async def _categories(self) -> List[Category]:
        category_ids = await self.entity_store.members_of(keys.CATEGORY_LIST_KEY)

        async def fetch(category_id: str) -> Optional[Category]:
            blob = await self.entity_store.get_field(keys.category_key(category_id), keys.RECORD_FIELD)
            return Category.model_validate_json(blob) if blob is not None else None

        categories = await gather_limited(
            (fetch(category_id) for category_id in category_ids), self.load_concurrency
        )
        return [category for category in categories if category is not None]

    # Search

    async def candidate_ids(
        self,
        terms: Sequence[str],
        category: Optional[str] = None,
        subcategory: Optional[str] = None,
    ) -> List[str]:
        """Ids present in every term bucket, narrowed by category and subcategory."""
        if not terms:
            return []
        selected = [keys.search_index(term) for term in terms]
        if category:
            selected.append(keys.category_index(category))
        if subcategory:
            selected.append(keys.subcategory_index(subcategory))
        return await self.entity_store.intersect_sets(*selected)

    async def matching_categories(self, terms: Sequence[str]) -> List[CategoryMatch]:
        """Categories whose name or description contains a term.

        Name prefix matches come first, then categories with more businesses.
        """
        if not terms:
            return []

        def matches(category: Category) -> bool:
            name = category.name.lower()
            description = (category.description or "").lower()
            return any(term in name or term in description for term in terms)

        matched = [category for category in await self._categories() if matches(category)]
        counts = await gather_limited(
            (self.entity_store.set_size(keys.category_index(category.id)) for category in matched),
            self.load_concurrency,
        )

        results = [
            (
                any(category.name.lower().startswith(term) for term in terms),
                CategoryMatch(
                    id=category.id,
                    name=category.name,
                    icon=category.icon,
                    description=category.description,
                    count=count,
                ),
            )
            for category, count in zip(matched, counts)
        ]
        results.sort(key=lambda item: (not item[0], -item[1].count))
        return [match for _, match in results[: self.max_categories]]

    async def search(self, query: SearchQuery) -> SearchResult:
        """Search businesses matching every query term.

        A query without usable terms returns an empty result rather than every
        business.
        """
        terms = tokenize(query.q)
        candidates, categories = await asyncio.gather(
            self.candidate_ids(terms, query.category, query.subcategory),
            self.matching_categories(terms),
        )

        loaded = await load_businesses(self.entity_store, candidates, self.load_concurrency)
        scored = [(relevance_score(business, terms), business) for business in loaded.businesses]

        sort_key, reverse = _SEARCH_SORTS[query.sort_by]
        scored.sort(key=sort_key, reverse=reverse)

        start = query.offset
        end = start + query.limit if query.limit is not None else None
        page = [business for _, business in scored[start:end]]

        logger.debug(
            f"Search q={query.q!r} terms={terms} candidates={len(candidates)} "
            f"categories={len(categories)}"
        )
        return SearchResult(
            data=page,
            categories=categories,
            total=len(scored),
            page=query.offset // (query.limit or 1) + 1,
            limit=query.limit,
            query=query.q,
            stale_ids=loaded.stale_ids,
        )

    # Suggestions

    async def _indexed_term_suggestions(self, tokens: Sequence[str]) -> List[TermScore]:
        results: List[TermScore] = []
        for token in tokens:
            term_keys = await self.entity_store.keys_matching(f"{keys.SEARCH_INDEX_PREFIX}:*{token}*")
            words = [keys.search_term_from_key(key) for key in term_keys]
            results.extend(indexed_term_scores(token, words))
        return results

    async def _category_suggestions(self, tokens: Sequence[str]) -> List[TermScore]:
        results: List[TermScore] = []
        for category in await self._categories():
            results.extend(category_scores(category, tokens))
        return results

    async def _business_name_suggestions(self, query: str) -> List[TermScore]:
        business_keys = await self.entity_store.keys_matching(f"{keys.BUSINESS_PREFIX}:*")
        loaded = await load_businesses(
            self.entity_store,
            [keys.business_id_from_key(key) for key in business_keys],
            self.load_concurrency,
        )
        scores = (business_name_score(business, query) for business in loaded.businesses)
        return [score for score in scores if score is not None]

    async def suggest(self, q: str) -> List[str]:
        """Ranked autocomplete terms for a partial query.

        Sources are merged in a fixed order so equal-ranked terms come out the
        same way for the same store contents.
        """
        query = q.strip()
        if not query:
            return []

        tokens = tokenize(query)
        indexed, categories, names = await asyncio.gather(
            self._indexed_term_suggestions(tokens),
            self._category_suggestions(tokens),
            self._business_name_suggestions(query),
        )
        suggestions = rank(aggregate(indexed, categories, names), query, self.max_suggestions)
        logger.debug(f"Suggestions for {query!r}: {suggestions}")
        return suggestions
