"""
Pagination and filter composition.

Every list endpoint accepts a PageRequest subclass with optional filter
fields, builds a conjunctive WHERE clause from whichever filters are present,
and returns the {pagination, data} envelope produced by ``paginate``.
"""

import math
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Generic, Iterable, List, Literal, Optional, Sequence, Type, TypeVar

from pydantic import AfterValidator, BaseModel, Field
from sqlalchemy import and_, or_
from sqlalchemy.orm import Query

T = TypeVar("T", bound=BaseModel)

SortDirection = Literal["asc", "desc"]


class PageRequest(BaseModel):
    """Base request body for paginated search endpoints."""

    page: int = Field(default=1, ge=1, description="1-based page number")
    limit: int = Field(default=100, ge=1, le=1000, description="Records per page")


class Pagination(BaseModel):
    """Pagination metadata."""

    current: int = Field(..., description="Current page number")
    limit: int = Field(..., description="Records per page")
    records: int = Field(..., description="Total records matching the filters")
    pages: int = Field(..., description="Total number of pages")


class Page(BaseModel, Generic[T]):
    """Pagination envelope returned by every list endpoint."""

    pagination: Pagination
    data: List[T]


def page_count(records: int, limit: int) -> int:
    """Number of pages needed for ``records`` rows at ``limit`` per page."""
    if limit <= 0:
        raise ValueError("limit must be positive")
    return math.ceil(records / limit)


def offset_for(page: int, limit: int) -> int:
    return (page - 1) * limit


def to_naive_utc(value: datetime) -> datetime:
    """Aware datetimes become naive UTC; naive ones are taken to be UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# Client-supplied datetimes; columns hold naive UTC
UTCDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]


def equals(column, value: Any):
    """``column == value`` when value was supplied."""
    if value is None:
        return None
    return column == value


def one_of(column, values: Optional[Sequence[Any]]):
    """``column IN values`` when a non-empty list was supplied."""
    if not values:
        return None
    return column.in_(list(values))


def between(column, start: Optional[datetime] = None, end: Optional[datetime] = None):
    """Inclusive range on ``column``; either bound may be omitted."""
    criteria = []
    if start is not None:
        criteria.append(column >= start)
    if end is not None:
        criteria.append(column <= end)
    if not criteria:
        return None
    return and_(*criteria)


def contains(columns: Iterable, text: Optional[str]):
    """Case-insensitive substring match OR-ed across ``columns``."""
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None
    pattern = f"%{text}%"
    return or_(*[column.ilike(pattern) for column in columns])


def conjunction(*criteria) -> list:
    """Drop absent criteria so the remaining ones can be AND-ed by ``filter``."""
    return [criterion for criterion in criteria if criterion is not None]


def resolve_order(
    sortable: Dict[str, Any],
    sort_by: Optional[str],
    direction: Optional[str],
    default: str,
    tie_breaker=None,
    default_direction: str = "desc",
) -> list:
    """
    Build ORDER BY clauses for a whitelisted sort key.

    Args:
        sortable: Map of public sort key to column (or list of columns)
        sort_by: Requested key, falls back to ``default``
        direction: "asc" or "desc", falls back to ``default_direction``
        tie_breaker: Unique column appended so pages never overlap

    Returns:
        List of ORDER BY clauses
    """
    key = sort_by or default
    if key not in sortable:
        raise ValueError(f"Unsupported sort key: {key}")

    direction = direction or default_direction
    columns = sortable[key]
    if not isinstance(columns, (list, tuple)):
        columns = [columns]

    clauses = [col.asc() if direction == "asc" else col.desc() for col in columns]
    if tie_breaker is not None:
        clauses.append(tie_breaker.asc() if direction == "asc" else tie_breaker.desc())
    return clauses


def paginate(
    query: Query,
    request: PageRequest,
    schema: Type[T],
    order_by: Optional[list] = None,
) -> Page[T]:
    """
    Run the count and the page query, then wrap both in the envelope.

    Args:
        query: Filtered query (no ORDER BY / LIMIT yet)
        request: Page request with ``page`` and ``limit``
        schema: Response model each row is validated into
        order_by: ORDER BY clauses from ``resolve_order``

    Returns:
        Page with pagination metadata and one page of rows
    """
    records = query.order_by(None).count()

    page_query = query
    if order_by:
        page_query = page_query.order_by(*order_by)
    rows = page_query.offset(offset_for(request.page, request.limit)).limit(request.limit).all()

    return Page[schema](
        pagination=Pagination(
            current=request.page,
            limit=request.limit,
            records=records,
            pages=page_count(records, request.limit),
        ),
        data=[schema.model_validate(row) for row in rows],
    )
