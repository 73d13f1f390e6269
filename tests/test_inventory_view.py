from __future__ import annotations

import csv
import io

from conftest import event, product

from stockbridge.models.inventory import InventoryFilter
from stockbridge.services.inventory_view import (
    EXPORT_COLUMNS,
    build_view,
    export_rows,
    on_hand,
    parse_timestamp,
    to_csv,
)

T1 = "2025-03-01T09:00:00+00:00"
T2 = "2025-03-02T09:00:00+00:00"
T3 = "2025-03-03T09:00:00+00:00"

CATALOG = [
    product("001", "Widget"),
    product("002", "Gadget", added_by_app=True),
]

# newest first, the way the event store returns them
EVENTS = [
    event("002", 3, T3, source="added_by_app"),
    event("001", 5, T2),
    event("999", 2, T1, source="feed"),
]


def test_join_fills_name_and_flag():
    view = build_view(EVENTS, CATALOG)
    by_code = {r.barcode: r for r in view.rows}

    assert by_code["001"].product_name == "Widget"
    assert by_code["001"].added_by_app is False
    assert by_code["002"].product_name == "Gadget"
    assert by_code["002"].added_by_app is True


def test_join_tolerates_unknown_barcode():
    view = build_view(EVENTS, CATALOG)
    orphan = [r for r in view.rows if r.barcode == "999"][0]

    assert orphan.product_name == ""
    assert orphan.added_by_app is False


def test_no_filter_keeps_order_and_totals():
    view = build_view(EVENTS, CATALOG)

    assert [r.barcode for r in view.rows] == ["002", "001", "999"]
    assert view.total_count == 3
    assert view.total_quantity == 10


def test_date_from_is_inclusive():
    view = build_view(EVENTS, CATALOG, InventoryFilter(date_from=T2))

    assert sorted(r.timestamp for r in view.rows) == [T2, T3]
    assert view.total_count == 2
    assert view.total_quantity == 8


def test_date_to_is_inclusive():
    view = build_view(EVENTS, CATALOG, InventoryFilter(date_to=T2))
    assert sorted(r.timestamp for r in view.rows) == [T1, T2]


def test_date_only_bound_means_midnight_utc():
    view = build_view(EVENTS, CATALOG, InventoryFilter(date_from="2025-03-02"))
    assert sorted(r.timestamp for r in view.rows) == [T2, T3]


def test_malformed_bound_is_unbounded():
    view = build_view(EVENTS, CATALOG, InventoryFilter(date_from="yesterday", date_to="not a date"))
    assert view.total_count == 3


def test_search_matches_name_case_insensitively():
    view = build_view(EVENTS, CATALOG, InventoryFilter(search="wIdG"))
    assert [r.barcode for r in view.rows] == ["001"]


def test_search_matches_barcode_substring():
    view = build_view(EVENTS, CATALOG, InventoryFilter(search="99"))
    assert [r.barcode for r in view.rows] == ["999"]


def test_filters_are_and_combined():
    view = build_view(EVENTS, CATALOG, InventoryFilter(search="gadget", date_to=T2))
    assert view.rows == []
    assert view.total_count == 0
    assert view.total_quantity == 0


def test_blank_search_is_ignored():
    view = build_view(EVENTS, CATALOG, InventoryFilter(search="   "))
    assert view.total_count == 3


def test_unparseable_event_timestamp_only_dropped_under_date_bounds():
    evs = EVENTS + [event("001", 1, "garbage")]

    assert build_view(evs, CATALOG).total_count == 4
    assert build_view(evs, CATALOG, InventoryFilter(date_from=T1)).total_count == 3


def test_aggregates_follow_the_data():
    first = build_view(EVENTS[:1], CATALOG)
    second = build_view(EVENTS, CATALOG)
    assert (first.total_count, first.total_quantity) == (1, 3)
    assert (second.total_count, second.total_quantity) == (3, 10)


def test_parse_timestamp_handles_z_and_naive():
    assert parse_timestamp("2025-03-01T09:00:00Z") == parse_timestamp(T1)
    assert parse_timestamp("2025-03-01T09:00:00") == parse_timestamp(T1)
    assert parse_timestamp("") is None
    assert parse_timestamp(None) is None


def test_on_hand_sums_per_barcode():
    evs = EVENTS + [event("001", 4, T3, id="again")]
    rows = {r.barcode: r for r in on_hand(evs, CATALOG)}

    assert rows["001"].quantity == 9
    assert rows["001"].events == 2
    assert rows["001"].product_name == "Widget"
    assert rows["999"].product_name == ""
    assert all(r.quantity >= 0 for r in rows.values())


def test_export_rows_column_order_and_labels():
    rows = export_rows(build_view(EVENTS, CATALOG).rows)

    assert list(rows[0].keys()) == list(EXPORT_COLUMNS)
    assert rows[0]["Added by App"] == "Yes"
    assert rows[1]["Added by App"] == ""
    assert rows[1]["Name"] == "Widget"
    assert rows[1]["Quantity"] == 5


def test_to_csv_header_and_rows():
    text = to_csv(build_view(EVENTS, CATALOG).rows)
    lines = text.split("\r\n")

    assert lines[0] == "EAN,Name,Quantity,Timestamp,Source,Added by App"

    parsed = list(csv.DictReader(io.StringIO(text)))
    assert len(parsed) == 3
    assert parsed[0]["EAN"] == "002"
    assert parsed[0]["Source"] == "added_by_app"
    assert parsed[2]["Name"] == ""


def test_to_csv_quotes_names_with_delimiters():
    cat = [product("001", 'Widget, large "XL"')]
    text = to_csv(build_view([event("001", 1, T1)], cat).rows)
    assert '"Widget, large ""XL"""' in text
