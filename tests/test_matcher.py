from __future__ import annotations

from conftest import product

from stockbridge.core.text import tokenize
from stockbridge.services.matcher import search


CATALOG = [
    product("001", "Big Blue Coffee Mug"),
    product("002", "Blue Plate"),
    product("003", "Recuperator"),
    product("004", "blue MUG small"),
    product("005", ""),
]


def _codes(items):
    return [p.barcode for p in items]


def test_tokenize_lowercases_and_drops_empties():
    assert tokenize("  Blue\t MUG \n") == ["blue", "mug"]
    assert tokenize("") == []
    assert tokenize(None) == []


def test_all_tokens_must_be_present():
    assert _codes(search("blue mug", CATALOG)) == ["001", "004"]


def test_token_order_does_not_matter():
    assert _codes(search("mug blue", CATALOG)) == ["001", "004"]


def test_empty_query_returns_nothing():
    assert search("", CATALOG) == []
    assert search("   \t", CATALOG) == []


def test_substring_match_without_word_boundaries():
    assert _codes(search("cup era", CATALOG)) == ["003"]


def test_products_without_name_never_match():
    assert "005" not in _codes(search("e", CATALOG))


def test_result_keeps_catalog_order():
    reordered = list(reversed(CATALOG))
    assert _codes(search("blue", reordered)) == ["004", "002", "001"]


def test_search_does_not_touch_catalog():
    before = [p.model_dump() for p in CATALOG]
    search("blue", CATALOG)
    assert [p.model_dump() for p in CATALOG] == before
