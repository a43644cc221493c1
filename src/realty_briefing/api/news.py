"""News CRUD endpoints.

Endpoints (prefix /api/news):
- POST   ""             create (auth)
- GET    ""             paginated list with search and date filters
- GET    "/latest"      newest active items
- GET    "/{id}"        single item
- PUT    "/{id}"        partial update (auth)
- DELETE "/{id}"        soft delete (auth)
- DELETE "/{id}/hard"   hard delete (auth)
"""
from __future__ import annotations
import math
import re
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict

from realty_briefing.api.deps import get_current_user, get_news_repo
from realty_briefing.common.schema import UserContext
from realty_briefing.store.news import NewsRepository

URL_PATTERN = re.compile(r"^(https?://)?([\da-z.-]+)\.([a-z.]{2,6})([/\w .-]*)/?$")

router = APIRouter(prefix="/api/news", tags=["news"])


class NewsIn(BaseModel):
    title: str | None = None
    subtitle: str | None = None
    publish_date: datetime | None = None
    link_url: str | None = None


class NewsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    subtitle: str
    publish_date: datetime
    link_url: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


def _check_url(url: str) -> None:
    if not URL_PATTERN.match(url.strip()):
        raise HTTPException(status_code=400, detail="Invalid URL format.")


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="News item not found.")


@router.post("", status_code=201)
async def create_news(
    body: NewsIn,
    _user: UserContext = Depends(get_current_user),
    repo: NewsRepository = Depends(get_news_repo),
) -> dict[str, Any]:
    if not body.title or body.publish_date is None or not body.link_url:
        raise HTTPException(
            status_code=400, detail="title, publish_date and link_url are required."
        )
    _check_url(body.link_url)
    row = await repo.create(
        title=body.title,
        subtitle=body.subtitle or "",
        publish_date=body.publish_date,
        link_url=body.link_url,
    )
    return {"success": True, "message": "News created.", "data": NewsOut.model_validate(row)}


@router.get("")
async def list_news(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = "publish_date",
    sort_order: str = "desc",
    search: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    repo: NewsRepository = Depends(get_news_repo),
) -> dict[str, Any]:
    rows, total = await repo.find(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        search=search,
        start_date=start_date,
        end_date=end_date,
    )
    return {
        "success": True,
        "data": [NewsOut.model_validate(r) for r in rows],
        "pagination": {
            "current_page": page,
            "total_pages": math.ceil(total / limit),
            "total_items": total,
            "items_per_page": limit,
        },
    }


@router.get("/latest")
async def latest_news(
    limit: int = Query(5, ge=1, le=100),
    repo: NewsRepository = Depends(get_news_repo),
) -> dict[str, Any]:
    rows = await repo.latest(limit)
    return {"success": True, "data": [NewsOut.model_validate(r) for r in rows]}


@router.get("/{news_id}")
async def get_news(news_id: int, repo: NewsRepository = Depends(get_news_repo)) -> dict[str, Any]:
    row = await repo.get(news_id)
    if row is None:
        raise _not_found()
    return {"success": True, "data": NewsOut.model_validate(row)}


@router.put("/{news_id}")
async def update_news(
    news_id: int,
    body: NewsIn,
    _user: UserContext = Depends(get_current_user),
    repo: NewsRepository = Depends(get_news_repo),
) -> dict[str, Any]:
    if body.link_url:
        _check_url(body.link_url)
    changes: dict[str, Any] = {}
    if body.title:
        changes["title"] = body.title
    if body.subtitle is not None:
        changes["subtitle"] = body.subtitle
    if body.publish_date is not None:
        changes["publish_date"] = body.publish_date
    if body.link_url:
        changes["link_url"] = body.link_url
    row = await repo.update(news_id, changes)
    if row is None:
        raise _not_found()
    return {"success": True, "message": "News updated.", "data": NewsOut.model_validate(row)}


@router.delete("/{news_id}")
async def delete_news(
    news_id: int,
    _user: UserContext = Depends(get_current_user),
    repo: NewsRepository = Depends(get_news_repo),
) -> dict[str, Any]:
    if not await repo.soft_delete(news_id):
        raise _not_found()
    return {"success": True, "message": "News deleted."}


@router.delete("/{news_id}/hard")
async def hard_delete_news(
    news_id: int,
    _user: UserContext = Depends(get_current_user),
    repo: NewsRepository = Depends(get_news_repo),
) -> dict[str, Any]:
    if not await repo.hard_delete(news_id):
        raise _not_found()
    return {"success": True, "message": "News permanently deleted."}
