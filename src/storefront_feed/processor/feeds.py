"""Decoders turning raw payloads into a RawTable.

Supports plain CSV, the row-major ``{"values": [[...]]}`` feed and the
legacy entry feed where each entry exposes ``gsx$<column>`` cells wrapping
``{"$t": value}``.
"""

import json
from typing import Any, Dict, List, Optional

from storefront_feed.models.data_models import FeedFormat, RawTable
from storefront_feed.models.errors import ParseError
from storefront_feed.processor.splitter import parse_csv

GSX_PREFIX = "gsx$"


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, dict):
        return _cell(value.get("$t"))
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


def table_from_values(payload: Dict[str, Any]) -> RawTable:
    """
    Convert a ``{"values": [[cell, ...], ...]}`` payload to a table.

    Raises:
        ParseError: If ``values`` is missing or not a list of rows
    """
    values = payload.get("values") if isinstance(payload, dict) else None
    if values is None:
        # A sheet with no data is returned without a values key
        if isinstance(payload, dict) and "range" in payload:
            return []
        raise ParseError("Feed payload has no 'values' array")
    if not isinstance(values, list):
        raise ParseError("Feed 'values' must be an array of rows")

    table: RawTable = []
    for row in values:
        if not isinstance(row, list):
            raise ParseError(f"Feed row must be an array, got {type(row).__name__}")
        table.append([_cell(value) for value in row])
    return table


def _entries(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    if not isinstance(payload, dict):
        raise ParseError("Entry feed payload must be an object")
    container = payload.get("feed", payload)
    if not isinstance(container, dict):
        raise ParseError("Entry feed 'feed' must be an object")
    entries = container.get("entry", [])
    if not isinstance(entries, list):
        raise ParseError("Entry feed 'entry' must be an array")
    return entries


def table_from_entries(payload: Dict[str, Any]) -> RawTable:
    """
    Convert a legacy entry feed to a table.

    The header row is the union of ``gsx$`` columns in first-seen order with
    the prefix removed; entries missing a column get an empty cell.
    """
    entries = _entries(payload)
    columns: List[str] = []
    seen = set()
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        for key in entry:
            if key.startswith(GSX_PREFIX) and key not in seen:
                seen.add(key)
                columns.append(key)

    if not columns:
        return []

    table: RawTable = [[column[len(GSX_PREFIX):] for column in columns]]
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        table.append([_cell(entry.get(column)) for column in columns])
    return table


def detect_format(text: str) -> FeedFormat:
    """Guess the payload shape; anything that is not a JSON object is CSV."""
    stripped = text.lstrip("\ufeff \t\r\n")
    if not stripped.startswith("{"):
        return FeedFormat.CSV
    try:
        payload = json.loads(stripped)
    except ValueError:
        return FeedFormat.CSV
    if isinstance(payload, dict):
        if "values" in payload or "range" in payload:
            return FeedFormat.VALUES
        if "feed" in payload or "entry" in payload:
            return FeedFormat.ENTRIES
    return FeedFormat.CSV


def decode_table(text: str, feed_format: Optional[FeedFormat] = None, trim: bool = True) -> RawTable:
    """
    Decode a raw payload into a table.

    Args:
        text: Raw CSV or JSON text
        feed_format: Payload shape, detected from the text when None
        trim: Strip whitespace around CSV fields

    Raises:
        ParseError: If a JSON payload is malformed
    """
    if feed_format is None:
        feed_format = detect_format(text)

    if feed_format is FeedFormat.CSV:
        return parse_csv(text, trim=trim)

    try:
        payload = json.loads(text.lstrip("\ufeff"))
    except ValueError as e:
        raise ParseError(f"Malformed JSON feed: {e}") from e

    if feed_format is FeedFormat.VALUES:
        table = table_from_values(payload)
    else:
        table = table_from_entries(payload)

    if trim:
        table = [[cell.strip() for cell in row] for row in table]
    return table
