"""
Pagination Helpers
"""

import math
from typing import Union
from vector_ai.models.schemas import OffsetPagination, Pagination


def build_pagination(
    limit: int,
    offset: int,
    total: int,
    with_pages: bool = True
) -> Union[Pagination, OffsetPagination]:
    """
    Build pagination metadata for a limit/offset window.

    Args:
        limit: Page size (must be positive)
        offset: Rows skipped
        total: Total rows available
        with_pages: Include currentPage/totalPages

    Returns:
        Pagination, or OffsetPagination when with_pages is False
    """
    has_more = (offset + limit) < total
    if not with_pages:
        return OffsetPagination(limit=limit, offset=offset, total=total, has_more=has_more)

    return Pagination(
        limit=limit,
        offset=offset,
        total=total,
        has_more=has_more,
        current_page=offset // limit + 1,
        total_pages=math.ceil(total / limit)
    )
