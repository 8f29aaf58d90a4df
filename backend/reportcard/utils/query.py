"""Small builders for list endpoints: status filters, search, sorting and paging."""

from math import ceil
from typing import Any, Dict, Optional, Sequence, Tuple

from pydantic.alias_generators import to_snake
from sqlalchemy import or_

STATUS_VALUES = ("active", "inactive", "all")


def normalize_status(status: Optional[str]) -> str:
    """Map anything other than ``active``/``inactive`` to ``all``."""
    if status in STATUS_VALUES:
        return status
    return "all"


def build_status_filter(status: Optional[str], status_field: str) -> Dict[str, Any]:
    """Return an equality filter on `status_field`, or `{}` for ``all``."""
    status = normalize_status(status)
    if status == "all":
        return {}
    return {status_field: status == "active"}


def build_pagination(page: int = 1, limit: int = 10) -> Tuple[int, int]:
    """Return ``(offset, limit)`` for a 1-based page number."""
    page = max(1, page)
    limit = max(1, limit)
    return (page - 1) * limit, limit


def total_pages(total: int, limit: int) -> int:
    return ceil(total / limit) if limit else 0


def build_search(columns: Sequence, term: Optional[str]):
    """Case-insensitive "contains" match of `term` on any of `columns`.

    Returns None when there is nothing to search for.
    """
    if not term or not term.strip():
        return None
    pattern = f"%{term.strip()}%"
    return or_(*[col.ilike(pattern) for col in columns])


def build_sort(model, sort_by: Optional[str], sort_order: str, default_field: str, joined: Sequence = ()):
    """Return an ORDER BY clause for `sort_by` (camelCase or snake_case).

    The field is looked up on `model` first, then on the `joined` models
    of the query. Unknown or missing fields fall back to `default_field`
    so a bad query string never reaches the database as raw SQL.
    """
    field = to_snake(sort_by) if sort_by else default_field
    column = None
    for candidate in (model, *joined):
        column = candidate.__table__.columns.get(field)
        if column is not None:
            break
    if column is None:
        column = model.__table__.columns[default_field]
    return column.desc() if sort_order == "desc" else column.asc()
