"""Tests for entity store key layout."""

from directory_index.search import keys


def test_record_keys():
    assert keys.business_key("b1") == "business:b1"
    assert keys.business_id_from_key("business:b1") == "b1"
    assert keys.category_key("c1") == "category:c1"
    assert keys.subcategory_key("s1") == "subcategory:s1"


def test_index_keys():
    assert keys.category_index("c1") == "index:category:c1"
    assert keys.subcategory_index("s1") == "index:subcategory:s1"
    assert keys.featured_index(True) == "index:featured:true"
    assert keys.active_index(False) == "index:active:false"
    assert keys.search_index("pizza") == "index:search:pizza"
    assert keys.search_term_from_key("index:search:pizza") == "pizza"


def test_business_prefix_does_not_match_list_keys():
    # "business:*" must not pick up "businesses:list" or "businesses:score"
    assert not keys.BUSINESS_LIST_KEY.startswith(f"{keys.BUSINESS_PREFIX}:")
    assert not keys.RECENCY_KEY.startswith(f"{keys.BUSINESS_PREFIX}:")
