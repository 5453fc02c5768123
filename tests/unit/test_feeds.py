"""Unit tests for JSON feed decoding."""

import json

import pytest

from storefront_feed.models.data_models import FeedFormat
from storefront_feed.models.errors import ParseError
from storefront_feed.processor.feeds import (
    decode_table,
    detect_format,
    table_from_entries,
    table_from_values,
)
from tests.fixtures.sample_data import entries_feed, values_feed


class TestValuesFeed:

    def test_rows_as_strings(self):
        table = table_from_values(values_feed())
        assert table == [
            ["name", "price", "category", "stock"],
            ["Lamp", "25.00", "Home", "4"],
            ["Chair", "$80", "Home"],
        ]

    def test_cell_types(self):
        table = table_from_values({"values": [["a", None, True, False, 1.5]]})
        assert table == [["a", "", "TRUE", "FALSE", "1.5"]]

    def test_empty_sheet(self):
        assert table_from_values({"range": "Sheet1!A1:Z1000", "majorDimension": "ROWS"}) == []

    def test_missing_values(self):
        with pytest.raises(ParseError):
            table_from_values({"rows": []})

    def test_values_not_a_list(self):
        with pytest.raises(ParseError):
            table_from_values({"values": "a,b"})

    def test_row_not_a_list(self):
        with pytest.raises(ParseError, match="row must be an array"):
            table_from_values({"values": [["a"], "b"]})


class TestEntriesFeed:

    def test_union_of_columns(self):
        assert table_from_entries(entries_feed()) == [
            ["nombre", "precio", "categoria"],
            ["Taza", "350", ""],
            ["Plato", "500", "Cocina"],
        ]

    def test_non_gsx_keys_ignored(self):
        table = table_from_entries({"feed": {"entry": [{"title": {"$t": "x"}}]}})
        assert table == []

    def test_bare_entry_list(self):
        table = table_from_entries({"entry": [{"gsx$name": {"$t": "Cup"}}]})
        assert table == [["name"], ["Cup"]]

    def test_no_entries(self):
        assert table_from_entries({"feed": {}}) == []

    def test_entry_not_a_list(self):
        with pytest.raises(ParseError):
            table_from_entries({"feed": {"entry": {"gsx$name": "x"}}})


class TestDetectFormat:

    def test_csv(self):
        assert detect_format("name,price\nA,1") is FeedFormat.CSV

    def test_values(self):
        assert detect_format(json.dumps(values_feed())) is FeedFormat.VALUES

    def test_entries(self):
        assert detect_format(json.dumps(entries_feed())) is FeedFormat.ENTRIES

    def test_broken_json_is_csv(self):
        assert detect_format("{name,price") is FeedFormat.CSV


class TestDecodeTable:

    def test_csv(self):
        assert decode_table("a,b\n1,2") == [["a", "b"], ["1", "2"]]

    def test_values_detected(self):
        table = decode_table(json.dumps({"values": [[" name "], [" Lamp "]]}))
        assert table == [["name"], ["Lamp"]]

    def test_values_untrimmed(self):
        table = decode_table(json.dumps({"values": [[" Lamp "]]}), trim=False)
        assert table == [[" Lamp "]]

    def test_explicit_entries(self):
        table = decode_table(json.dumps(entries_feed()), FeedFormat.ENTRIES)
        assert table[0] == ["nombre", "precio", "categoria"]

    def test_malformed_json(self):
        with pytest.raises(ParseError, match="Malformed JSON"):
            decode_table("{not json", FeedFormat.VALUES)

    def test_feed_through_processor(self, processor):
        products, rejected = processor.process_text(json.dumps(values_feed()))

        assert rejected == []
        lamp, chair = products
        assert (lamp.name, lamp.price, lamp.category, lamp.stock) == ("Lamp", 25.0, "Home", 4)
        assert (chair.name, chair.price, chair.stock) == ("Chair", 80.0, None)

    def test_entries_through_processor(self, processor):
        products, _ = processor.process_text(json.dumps(entries_feed()), FeedFormat.ENTRIES)

        assert [(p.name, p.price, p.category) for p in products] == [
            ("Taza", 350.0, "uncategorized"),
            ("Plato", 500.0, "Cocina"),
        ]
