"""Text normalization for the search index and query parsing."""

import re
from typing import Iterable, List, Optional

# Index terms must be longer than two characters, query terms longer than one.
INDEX_MIN_LENGTH = 3
QUERY_MIN_LENGTH = 2

_NON_WORD = re.compile(r"[^\w\s]")


def tokenize(text: Optional[str], min_length: int = QUERY_MIN_LENGTH) -> List[str]:
    """Lower-case text, strip punctuation and split it into terms.

    Tokens shorter than ``min_length`` are dropped. Duplicates are kept in
    order of appearance.

    Examples:
        >>> tokenize("Joe's Coffee-House, Downtown")
        ['joes', 'coffeehouse', 'downtown']
        >>> tokenize("a b cd", min_length=2)
        ['cd']
    """
    if not text:
        return []
    cleaned = _NON_WORD.sub("", text.lower())
    return [token for token in cleaned.split() if len(token) >= min_length]


def index_terms(name: str, keywords: Optional[Iterable[str]] = None) -> List[str]:
    """Distinct search-index terms for a business name and its keywords."""
    terms: dict[str, None] = {}
    for text in [name, *(keywords or [])]:
        for token in tokenize(text, min_length=INDEX_MIN_LENGTH):
            terms.setdefault(token)
    return list(terms)
