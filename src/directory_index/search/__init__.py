"""Pure search building blocks: tokenization, key layout, scoring and suggestion ranking."""

from directory_index.search.scoring import relevance_score
from directory_index.search.suggestions import TermScore, aggregate, combine, rank
from directory_index.search.tokenizer import (
    INDEX_MIN_LENGTH,
    QUERY_MIN_LENGTH,
    index_terms,
    tokenize,
)

__all__ = [
    "INDEX_MIN_LENGTH",
    "QUERY_MIN_LENGTH",
    "TermScore",
    "aggregate",
    "combine",
    "index_terms",
    "rank",
    "relevance_score",
    "tokenize",
]
