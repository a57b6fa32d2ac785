"""Converters between CSV, JSON and YAML notations."""

from __future__ import annotations

import csv
import io
import json

import yaml

from fragstore.conversion._text import decode_text

# Key types json.dumps accepts as-is.
_JSON_KEY_TYPES = (str, int, float, bool, type(None))


def _string_keys(value: object) -> object:
    """Stringify mapping keys JSON cannot represent, such as YAML dates or binary."""
    if isinstance(value, dict):
        return {
            key if isinstance(key, _JSON_KEY_TYPES) else str(key): _string_keys(item) for key, item in value.items()
        }
    if isinstance(value, list):
        return [_string_keys(item) for item in value]
    return value


def _load_json(data: bytes) -> object:
    try:
        return json.loads(decode_text(data))
    except (ValueError, RecursionError) as exc:
        msg = f"invalid JSON: {exc}"
        raise ValueError(msg) from exc


def _load_yaml(data: bytes) -> object:
    try:
        return _string_keys(yaml.safe_load(decode_text(data)))
    except (yaml.YAMLError, ValueError, RecursionError) as exc:
        msg = f"invalid YAML: {exc}"
        raise ValueError(msg) from exc


def _dump_json(value: object, *, indent: int | None = None) -> bytes:
    # default=str renders YAML-only scalars such as dates.
    try:
        text = json.dumps(value, indent=indent, ensure_ascii=False, default=str)
    except (TypeError, ValueError, RecursionError) as exc:
        msg = f"unable to encode JSON: {exc}"
        raise ValueError(msg) from exc
    return text.encode("utf-8")


def csv_to_json(data: bytes) -> bytes:
    """Convert CSV to a JSON array of objects keyed by the header row.

    Missing trailing fields become empty strings and surplus fields are
    dropped. Blank lines are skipped.
    """
    try:
        reader = csv.reader(io.StringIO(decode_text(data), newline=""))
        rows = [row for row in reader if any(cell.strip() for cell in row)]
    except csv.Error as exc:
        msg = f"invalid CSV: {exc}"
        raise ValueError(msg) from exc
    if not rows:
        return b"[]"

    headers = [header.strip() for header in rows[0]]
    records = [
        {header: row[index].strip() if index < len(row) else "" for index, header in enumerate(headers)}
        for row in rows[1:]
    ]
    return _dump_json(records, indent=2)


def json_to_text(data: bytes) -> bytes:
    """Re-serialize JSON with two-space indentation."""
    return _dump_json(_load_json(data), indent=2)


def json_to_yaml(data: bytes) -> bytes:
    """Convert JSON to YAML."""
    value = _load_json(data)
    try:
        text = yaml.safe_dump(value, sort_keys=False, allow_unicode=True)
    except (yaml.YAMLError, RecursionError) as exc:
        msg = f"unable to encode YAML: {exc}"
        raise ValueError(msg) from exc
    return text.encode("utf-8")


def yaml_to_json(data: bytes) -> bytes:
    """Convert YAML to compact JSON."""
    return _dump_json(_load_yaml(data))


def yaml_to_text(data: bytes) -> bytes:
    """Convert YAML to JSON with two-space indentation."""
    return _dump_json(_load_yaml(data), indent=2)
