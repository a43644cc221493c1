"""Schedule persistence and projection into ``ScheduleSummary`` records."""
from __future__ import annotations
import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import select

from realty_briefing.common.schema import (
    ContractRef,
    CustomerRef,
    PropertyRef,
    PublisherRef,
    ScheduleSummary,
    UserContext,
)
from realty_briefing.store.database import Database, ScheduleRow

LOGGER = logging.getLogger("realty_briefing.store.schedules")


def _to_summary(row: ScheduleRow) -> ScheduleSummary:
    return ScheduleSummary(
        id=str(row.id),
        title=row.title,
        type=row.type,
        date=row.date,
        time=row.time,
        location=row.location,
        description=row.description,
        priority=row.priority,
        status=row.status,
        publisher=PublisherRef(**row.publisher) if row.publisher else None,
        related_customers=tuple(CustomerRef(**c) for c in row.related_customers or []),
        related_properties=tuple(PropertyRef(**p) for p in row.related_properties or []),
        related_contracts=tuple(ContractRef(**c) for c in row.related_contracts or []),
        by_company_number=row.by_company_number,
        created_at=row.created_at,
    )


class ScheduleRepository:

    def __init__(self, db: Database) -> None:
        self._db = db

    async def add(
        self,
        *,
        title: str,
        date: datetime,
        publisher: PublisherRef | None = None,
        related_customers: Sequence[CustomerRef] = (),
        related_properties: Sequence[PropertyRef] = (),
        related_contracts: Sequence[ContractRef] = (),
        by_company_number: str | None = None,
        **fields: Any,
    ) -> ScheduleSummary:
        """Store a schedule; ``fields`` covers type, time, location, description, priority, status."""
        row = ScheduleRow(
            title=title,
            date=date,
            publisher_id=publisher.id if publisher else None,
            publisher=asdict(publisher) if publisher else None,
            related_customers=[asdict(c) for c in related_customers],
            related_properties=[asdict(p) for p in related_properties],
            related_contracts=[asdict(c) for c in related_contracts],
            by_company_number=by_company_number,
            **fields,
        )
        async with self._db.session() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
        return _to_summary(row)

    async def get(self, schedule_id: str) -> ScheduleSummary | None:
        try:
            key = int(schedule_id)
        except ValueError:
            return None
        async with self._db.session() as session:
            row = await session.get(ScheduleRow, key)
        return _to_summary(row) if row is not None else None

    async def find(
        self,
        start: datetime,
        end: datetime,
        user: UserContext,
        *,
        by_time_only: bool = False,
    ) -> list[ScheduleSummary]:
        """
        Schedules between ``start`` and ``end`` (inclusive) visible to ``user``.

        Sorted by date then time, or by time alone when ``by_time_only`` is set.
        """
        stmt = select(ScheduleRow).where(ScheduleRow.date >= start, ScheduleRow.date <= end)
        if user.sees_company:
            stmt = stmt.where(ScheduleRow.by_company_number == user.business_number)
        else:
            stmt = stmt.where(ScheduleRow.publisher_id == user.id)
        if by_time_only:
            stmt = stmt.order_by(ScheduleRow.time, ScheduleRow.id)
        else:
            stmt = stmt.order_by(ScheduleRow.date, ScheduleRow.time, ScheduleRow.id)
        async with self._db.session() as session:
            rows = (await session.execute(stmt)).scalars().all()
        LOGGER.info("Loaded %d schedules for user %s (%s - %s)", len(rows), user.id, start, end)
        return [_to_summary(r) for r in rows]
