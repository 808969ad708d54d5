"""
Keyset pagination for any SQLAlchemy query.

The caller names the ordering columns (newest first); the cursor is an
opaque url-safe base64 token holding the last row's values for those
columns. Nothing here knows about a particular model.
"""
from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional, Sequence

from sqlalchemy import DateTime, and_, or_

MAX_LIMIT = 100
DEFAULT_LIMIT = 20


class PaginationError(ValueError):
    """Bad cursor or limit."""


@dataclass
class Page:
    items: List[Any]
    next_cursor: Optional[str]


def clamp_limit(limit, default: int = DEFAULT_LIMIT) -> int:
    try:
        value = int(limit) if limit not in (None, "") else default
    except (TypeError, ValueError):
        raise PaginationError("limit must be an integer")
    return max(1, min(value, MAX_LIMIT))


def encode_cursor(values: Sequence[Any]) -> str:
    raw = [v.isoformat() if isinstance(v, datetime) else v for v in values]
    return base64.urlsafe_b64encode(json.dumps(raw).encode()).decode().rstrip("=")


def decode_cursor(token: str, columns: Sequence) -> list:
    padded = token + "=" * (-len(token) % 4)
    try:
        raw = json.loads(base64.urlsafe_b64decode(padded.encode()))
    except (binascii.Error, ValueError, UnicodeDecodeError) as exc:
        raise PaginationError("Malformed cursor") from exc
    if not isinstance(raw, list) or len(raw) != len(columns):
        raise PaginationError("Malformed cursor")

    values = []
    for column, value in zip(columns, raw):
        if isinstance(column.type, DateTime):
            try:
                value = datetime.fromisoformat(value)
            except (TypeError, ValueError) as exc:
                raise PaginationError("Malformed cursor") from exc
        values.append(value)
    return values


def _after(columns: Sequence, values: Sequence):
    # (c0 < v0) OR (c0 = v0 AND c1 < v1) OR ...
    clauses = []
    for i, column in enumerate(columns):
        equal_prefix = [columns[j] == values[j] for j in range(i)]
        clauses.append(and_(*equal_prefix, column < values[i]))
    return or_(*clauses)


def paginate(query, columns: Sequence, cursor: Optional[str] = None, limit=None) -> Page:
    """Return one page of `query` ordered by `columns` descending."""
    limit = clamp_limit(limit)
    if cursor:
        query = query.filter(_after(columns, decode_cursor(cursor, columns)))
    rows = query.order_by(*[c.desc() for c in columns]).limit(limit + 1).all()

    next_cursor = None
    if len(rows) > limit:
        rows = rows[:limit]
        last = rows[-1]
        next_cursor = encode_cursor([getattr(last, c.key) for c in columns])
    return Page(items=rows, next_cursor=next_cursor)
