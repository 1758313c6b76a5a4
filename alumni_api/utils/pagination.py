"""
Pagination Utility Module

Provides standardized pagination helpers for the list endpoints.
"""
import math
from typing import List, Any, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from alumni_api.schemas.common import Pagination


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    """``pages`` is ceil(total / limit); an empty result has zero pages"""
    pages = math.ceil(total / limit) if total > 0 else 0
    return Pagination(page=page, limit=limit, total=total, pages=pages)


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[Any], Pagination]:
    """
    Apply pagination to a SQLAlchemy query.

    Args:
        db: Database session
        query: Filtered and ordered query selecting a single entity
        page: Page number (1-indexed)
        limit: Items per page

    Returns:
        (items for the page, pagination metadata)
    """
    page = max(1, page)
    limit = max(1, limit)

    count_stmt = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_stmt)).scalar() or 0

    result = await db.execute(query.offset((page - 1) * limit).limit(limit))
    items = list(result.scalars().all())

    return items, build_pagination(page, limit, total)
