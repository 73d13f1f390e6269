from __future__ import annotations

import pytest

from stockbridge.core.errors import InvalidInput
from stockbridge.services.feed import decode_feed, parse_feed


def _pairs(result):
    return [(r.barcode, r.name) for r in result.rows]


def test_parses_header_and_rows():
    result = parse_feed("ean,name\n001,Widget\n002,Gadget\n")

    assert _pairs(result) == [("001", "Widget"), ("002", "Gadget")]
    assert result.errors == []


def test_header_is_case_insensitive_and_order_free():
    result = parse_feed("Name , EAN\nWidget,001\n")
    assert _pairs(result) == [("001", "Widget")]


def test_barcode_header_alias():
    result = parse_feed("barcode,name\n001,Widget\n")
    assert _pairs(result) == [("001", "Widget")]


def test_strips_bom_and_skips_blank_lines():
    result = parse_feed("\ufeffean,name\r\n\r\n001,Widget\r\n,\r\n002,Gadget\r\n")
    assert _pairs(result) == [("001", "Widget"), ("002", "Gadget")]


def test_quoted_fields_with_commas():
    result = parse_feed('ean,name\n001,"Widget, large"\n')
    assert _pairs(result) == [("001", "Widget, large")]


def test_semicolon_delimited_feed():
    result = parse_feed("ean;name\n001;Widget\n")
    assert _pairs(result) == [("001", "Widget")]


def test_malformed_lines_reported_without_blocking():
    result = parse_feed("ean,name\n001,Widget\n002\n003,Thing,extra\n004,Gizmo\n")

    assert _pairs(result) == [("001", "Widget"), ("004", "Gizmo")]
    assert [e.row for e in result.errors] == [3, 4]
    assert result.errors[0].barcode == "002"


def test_blank_barcodes_pass_through_for_merge_to_reject():
    result = parse_feed("ean,name\n,Nameless\n")
    assert _pairs(result) == [("", "Nameless")]


def test_missing_name_column_gives_no_names():
    result = parse_feed("ean,price\n001,2.50\n")
    assert _pairs(result) == [("001", None)]


def test_missing_barcode_column_is_invalid():
    with pytest.raises(InvalidInput):
        parse_feed("sku,name\n001,Widget\n")


def test_empty_feed_is_invalid():
    with pytest.raises(InvalidInput):
        parse_feed("\n\n")


def test_decode_accepts_utf8_with_bom():
    assert decode_feed("\ufeffean,name\n001,Café\n".encode("utf-8")) == "ean,name\n001,Café\n"


def test_decode_rejects_other_encodings():
    with pytest.raises(InvalidInput) as exc:
        decode_feed("ean,name\n001,Café\n".encode("latin-1"))
    assert "byte 16" in str(exc.value)
