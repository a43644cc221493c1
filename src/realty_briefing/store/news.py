"""News persistence."""
from __future__ import annotations
import logging
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, or_, select

from realty_briefing.store.database import Database, NewsRow

LOGGER = logging.getLogger("realty_briefing.store.news")

SORTABLE = {
    "publish_date": NewsRow.publish_date,
    "title": NewsRow.title,
    "created_at": NewsRow.created_at,
    "updated_at": NewsRow.updated_at,
}
UPDATABLE = ("title", "subtitle", "publish_date", "link_url")


class NewsRepository:

    def __init__(self, db: Database) -> None:
        self._db = db

    async def create(
        self, *, title: str, publish_date: datetime, link_url: str, subtitle: str = ""
    ) -> NewsRow:
        row = NewsRow(
            title=title.strip(),
            subtitle=subtitle.strip(),
            publish_date=publish_date,
            link_url=link_url.strip(),
        )
        async with self._db.session() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
        LOGGER.info("Created news %s", row.id)
        return row

    async def find(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "publish_date",
        sort_order: str = "desc",
        search: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> tuple[list[NewsRow], int]:
        """
        Page through active news.

        Args:
            page: 1-based page number.
            limit: Page size.
            sort_by: Column name; unknown names sort by publish date.
            sort_order: "asc" for ascending, anything else descending.
            search: Case-insensitive substring of title or subtitle.
            start_date: Inclusive lower bound on publish date.
            end_date: Inclusive upper bound on publish date.

        Returns:
            The page of rows and the total number of matching rows.
        """
        conditions: list[Any] = [NewsRow.is_active.is_(True)]
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(NewsRow.title.ilike(pattern), NewsRow.subtitle.ilike(pattern)))
        if start_date is not None:
            conditions.append(NewsRow.publish_date >= start_date)
        if end_date is not None:
            conditions.append(NewsRow.publish_date <= end_date)

        column = SORTABLE.get(sort_by, NewsRow.publish_date)
        order = column.asc() if sort_order == "asc" else column.desc()
        stmt = (
            select(NewsRow)
            .where(*conditions)
            .order_by(order, NewsRow.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        count_stmt = select(func.count()).select_from(NewsRow).where(*conditions)
        async with self._db.session() as session:
            rows = list((await session.execute(stmt)).scalars())
            total = (await session.execute(count_stmt)).scalar_one()
        return rows, total

    async def latest(self, limit: int = 5) -> list[NewsRow]:
        stmt = (
            select(NewsRow)
            .where(NewsRow.is_active.is_(True))
            .order_by(NewsRow.publish_date.desc(), NewsRow.id.desc())
            .limit(limit)
        )
        async with self._db.session() as session:
            return list((await session.execute(stmt)).scalars())

    async def get(self, news_id: int) -> NewsRow | None:
        async with self._db.session() as session:
            return await session.get(NewsRow, news_id)

    async def update(self, news_id: int, changes: dict[str, Any]) -> NewsRow | None:
        async with self._db.session() as session:
            row = await session.get(NewsRow, news_id)
            if row is None:
                return None
            for key in UPDATABLE:
                if key in changes:
                    value = changes[key]
                    setattr(row, key, value.strip() if isinstance(value, str) else value)
            row.updated_at = datetime.now()
            await session.commit()
            await session.refresh(row)
        LOGGER.info("Updated news %s", news_id)
        return row

    async def soft_delete(self, news_id: int) -> bool:
        async with self._db.session() as session:
            row = await session.get(NewsRow, news_id)
            if row is None:
                return False
            row.is_active = False
            await session.commit()
        LOGGER.info("Deactivated news %s", news_id)
        return True

    async def hard_delete(self, news_id: int) -> bool:
        async with self._db.session() as session:
            result = await session.execute(delete(NewsRow).where(NewsRow.id == news_id))
            await session.commit()
        deleted = result.rowcount > 0
        if deleted:
            LOGGER.info("Deleted news %s", news_id)
        return deleted
