"""
JSON column helpers.

JSON-valued columns are TEXT so the schema runs on both PostgreSQL and SQLite.
Encode on the way in, decode on the way out.
"""

import json
from typing import Any, Iterable, Optional


def encode_json(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value)


def decode_json(value: Any, default: Any = None) -> Any:
    if value is None:
        return default
    if not isinstance(value, str):
        return value  # driver already decoded it
    try:
        return json.loads(value)
    except ValueError:
        # plain text written by hand (e.g. requirements typed into psql)
        return value


def decode_row(row: dict, fields: Iterable[str], default: Any = None) -> dict:
    """Decode the given JSON fields of a row dict in place and return it."""
    for field in fields:
        if field in row:
            row[field] = decode_json(row[field], default)
    return row
