# pagebuilder/utils/pagination.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Tuple, Type, TypedDict

from sqlalchemy.sql import and_, or_

from pagebuilder.domain.exceptions import ValidationError


class CursorMeta(TypedDict):
    has_more: bool
    next_cursor: Optional[str]


def encode_cursor(created_at: datetime, row_id: str) -> str:
    """Format: ISO8601|<id>"""
    return f"{created_at.isoformat()}|{row_id}"


def decode_cursor(cursor: str) -> Tuple[datetime, str]:
    if not cursor or "|" not in cursor:
        raise ValidationError("INVALID_CURSOR", "Invalid cursor format")

    ts_str, row_id = cursor.split("|", 1)
    try:
        return datetime.fromisoformat(ts_str), row_id
    except ValueError as exc:
        raise ValidationError("INVALID_CURSOR", "Invalid cursor format") from exc


def paginate_cursor(
    query,
    *,
    model: Type[Any],
    cursor: Optional[str],
    limit: int,
) -> tuple[list[Any], CursorMeta]:
    """
    Newest first. Fetches limit + 1 rows to detect continuation.

    Ordering contract: created_at DESC, id DESC
    """
    if limit <= 0:
        raise ValidationError("INVALID_LIMIT", "Limit must be greater than zero")

    if cursor:
        cursor_ts, cursor_id = decode_cursor(cursor)
        query = query.filter(
            or_(
                model.created_at < cursor_ts,
                and_(model.created_at == cursor_ts, model.id < cursor_id),
            )
        )

    rows = query.order_by(model.created_at.desc(), model.id.desc()).limit(limit + 1).all()

    has_more = len(rows) > limit
    items = rows[:limit]

    next_cursor = None
    if has_more and items:
        next_cursor = encode_cursor(items[-1].created_at, items[-1].id)

    return items, {"has_more": has_more, "next_cursor": next_cursor}
