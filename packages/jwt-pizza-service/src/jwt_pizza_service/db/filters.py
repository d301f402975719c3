"""Shared query helpers for name filters and page windows."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select


def like_pattern(name: str | None) -> str | None:
    """Turn a ``*`` glob into a LIKE pattern.

    ``None``, ``""`` and ``"*"`` mean no filter. A name without ``*`` matches
    as a substring. ``%``, ``_`` and ``\\`` in the input are matched literally.
    """
    if not name or name.strip("*") == "":
        return None
    escaped = name.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    if "*" not in escaped:
        return f"%{escaped}%"
    return escaped.replace("*", "%")


def filter_by_name(query: Select, column: Any, name: str | None) -> Select:
    pattern = like_pattern(name)
    if pattern is None:
        return query
    return query.where(column.ilike(pattern, escape="\\"))


def page_window(query: Select, page: int, limit: int) -> Select:
    """Fetch one row past the page so callers can report ``more``."""
    return query.offset(max(page, 0) * limit).limit(limit + 1)


def split_page(rows: list, limit: int) -> tuple[list, bool]:
    return rows[:limit], len(rows) > limit
