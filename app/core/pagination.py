"""
Response envelopes and pagination helpers shared by feature routers.

Single resources are returned as ``{"data": ...}`` and lists as
``{"data": [...], "meta": {...}}``.
"""
from typing import Annotated, Any, Generic, List, TypeVar

from fastapi import Query
from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import config


T = TypeVar("T")


class PageParams(BaseModel):
    """Page selection parsed from the query string."""
    page: int = 1
    per_page: int = config.DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


def get_page_params(
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=config.MAX_PAGE_SIZE)] = config.DEFAULT_PAGE_SIZE,
) -> PageParams:
    return PageParams(page=page, per_page=per_page)


class PageMeta(BaseModel):
    page: int
    per_page: int
    total: int
    pages: int


class Resource(BaseModel, Generic[T]):
    data: T


class PaginatedResource(BaseModel, Generic[T]):
    data: List[T]
    meta: PageMeta


def create_paginated_resource(items: List[Any], params: PageParams, total: int) -> dict:
    pages = (total + params.per_page - 1) // params.per_page
    return {
        "data": items,
        "meta": {
            "page": params.page,
            "per_page": params.per_page,
            "total": total,
            "pages": pages,
        },
    }


async def paginate(db: AsyncSession, stmt: Select, params: PageParams) -> dict:
    """
    Run ``stmt`` for one page and count the full result set.

    Returns a dict shaped like ``PaginatedResource``.
    """
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = (await db.execute(count_stmt)).scalar() or 0

    result = await db.execute(stmt.offset(params.offset).limit(params.per_page))
    items = list(result.scalars().all())
    return create_paginated_resource(items, params, total)
