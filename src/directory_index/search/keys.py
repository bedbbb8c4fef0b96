"""Namespaced entity store keys.

All keys the services read or write are built here so that index families
never collide with record keys.
"""

RECORD_FIELD = "data"

BUSINESS_PREFIX = "business"
BUSINESS_LIST_KEY = "businesses:list"
RECENCY_KEY = "businesses:score"

INDEX_PREFIX = "index"
CATEGORY_INDEX_PREFIX = "index:category"
SUBCATEGORY_INDEX_PREFIX = "index:subcategory"
FEATURED_INDEX_PREFIX = "index:featured"
ACTIVE_INDEX_PREFIX = "index:active"
SEARCH_INDEX_PREFIX = "index:search"

CATEGORY_PREFIX = "category"
CATEGORY_LIST_KEY = "categories:list"
CATEGORY_SLUG_KEY = "category:slug"
CATEGORY_SUBCATEGORIES_PREFIX = "category:subcategories"

SUBCATEGORY_PREFIX = "subcategory"
SUBCATEGORY_LIST_KEY = "subcategories:list"
SUBCATEGORY_SLUG_PREFIX = "subcategory:slug"


def _flag(value: bool) -> str:
    return "true" if value else "false"


def business_key(business_id: str) -> str:
    return f"{BUSINESS_PREFIX}:{business_id}"


def business_id_from_key(key: str) -> str:
    return key[len(BUSINESS_PREFIX) + 1 :]


def category_index(category_id: str) -> str:
    return f"{CATEGORY_INDEX_PREFIX}:{category_id}"


def subcategory_index(subcategory_id: str) -> str:
    return f"{SUBCATEGORY_INDEX_PREFIX}:{subcategory_id}"


def featured_index(featured: bool) -> str:
    return f"{FEATURED_INDEX_PREFIX}:{_flag(featured)}"


def active_index(active: bool) -> str:
    return f"{ACTIVE_INDEX_PREFIX}:{_flag(active)}"


def search_index(term: str) -> str:
    return f"{SEARCH_INDEX_PREFIX}:{term}"


def search_term_from_key(key: str) -> str:
    return key[len(SEARCH_INDEX_PREFIX) + 1 :]


def category_key(category_id: str) -> str:
    return f"{CATEGORY_PREFIX}:{category_id}"


def category_subcategories_key(category_id: str) -> str:
    return f"{CATEGORY_SUBCATEGORIES_PREFIX}:{category_id}"


def subcategory_key(subcategory_id: str) -> str:
    return f"{SUBCATEGORY_PREFIX}:{subcategory_id}"


def subcategory_slug_key(category_id: str) -> str:
    return f"{SUBCATEGORY_SLUG_PREFIX}:{category_id}"
