# dropstream/utils/pagination.py
from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple, TypedDict, Type, Any

from sqlalchemy.orm import Query
from sqlalchemy.sql import or_, and_

from dropstream.errors import ValidationError


class CursorMeta(TypedDict):
    """
    Strongly-typed cursor pagination metadata.

    Explicit keys prevent contract drift across list_* endpoints.
    """
    has_more: bool
    next_cursor: Optional[str]


def encode_cursor(ts: datetime, row_id: Any) -> str:
    """
    Encode a cursor using a stable, deterministic sort key.

    Format: ISO8601|<id>
    """
    if not isinstance(ts, datetime) or row_id is None:
        raise ValueError("timestamp and row_id are required to encode cursor")

    return f"{ts.isoformat()}|{row_id}"


def decode_cursor(cursor: str) -> Tuple[datetime, str]:
    """
    Decode a cursor into (timestamp, id).

    Raises:
    - ValidationError if cursor format or timestamp is invalid
    """
    if not cursor or "|" not in cursor:
        raise ValidationError("Invalid cursor format")

    ts_str, row_id = cursor.split("|", 1)
    try:
        return datetime.fromisoformat(ts_str), row_id
    except ValueError as exc:
        raise ValidationError("Invalid cursor format") from exc


def apply_cursor(
    query: Query,
    *,
    model: Type[Any],
    cursor: Optional[str],
    order_field: str = "created_at",
) -> Query:
    """
    Keep only rows strictly after the cursor.

    Ordering contract (MANDATORY):
      ORDER BY <order_field> DESC, id DESC
    """
    if not cursor:
        return query

    cursor_ts, cursor_id = decode_cursor(cursor)
    column = getattr(model, order_field)

    return query.filter(
        or_(
            column < cursor_ts,
            and_(
                column == cursor_ts,
                model.id < cursor_id,
            ),
        )
    )


def paginate_cursor(
    query: Query,
    *,
    model: Type[Any],
    limit: int,
    order_field: str = "created_at",
) -> tuple[list[Any], CursorMeta]:
    """
    Execute a cursor-paginated query.

    Strategy:
    - Fetch limit + 1 rows to detect continuation
    - Trim extra row from result set
    - Generate the next cursor from the last returned row
    """
    if limit <= 0:
        raise ValidationError("Limit must be greater than zero")

    column = getattr(model, order_field)
    rows = (
        query.order_by(column.desc(), model.id.desc())
        .limit(limit + 1)
        .all()
    )

    has_more = len(rows) > limit
    items = rows[:limit]

    next_cursor: Optional[str] = None
    if items and has_more:
        last = items[-1]
        next_cursor = encode_cursor(getattr(last, order_field), last.id)

    return items, {
        "has_more": has_more,
        "next_cursor": next_cursor,
    }
