from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Iterator

import pytest
from fastapi.testclient import TestClient

from realty_briefing.api.deps import get_current_user
from realty_briefing.api.fastapi_app import create_app
from realty_briefing.common.config import GeminiConfig, Settings
from realty_briefing.common.schema import (
    CustomerRef,
    GenerationOptions,
    PropertyRef,
    PublisherRef,
    ScheduleSummary,
    UserContext,
)
from realty_briefing.store.database import Database
from realty_briefing.store.schedules import ScheduleRepository

AGENT = UserContext(id="u-1", name="Kim Agent", level=1, business_number="B-100")
PUBLISHER = PublisherRef(id="u-1", name="Kim Agent", email="kim@example.com", level=1, business_number="B-100")


class FakeGenerator:
    """Records prompts; returns numbered replies or raises ``error``."""

    def __init__(self, reply: str = "generated", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, GenerationOptions | None]] = []

    async def generate(self, prompt: str, options: GenerationOptions | None = None) -> str:
        self.calls.append((prompt, options))
        if self.error is not None:
            raise self.error
        return f"{self.reply} #{len(self.calls)}"


def make_summary(title: str = "Apartment viewing", **overrides: Any) -> ScheduleSummary:
    fields: dict[str, Any] = dict(
        id="s-1",
        title=title,
        type="viewing",
        date=datetime(2026, 10, 19, 10, 0),
        time="10:00",
        location="Gangnam station exit 3",
        description="Budget 900M KRW, needs two bedrooms",
        priority="high",
        status="scheduled",
        publisher=PUBLISHER,
        related_customers=(CustomerRef(id="c-1", name="Lee Customer", phone="010-1234-5678", email="lee@example.com"),),
        related_properties=(PropertyRef(id="p-1", title="Raemian 101", address="Seoul Gangnam-gu"),),
        by_company_number="B-100",
        created_at=datetime(2026, 10, 1, 9, 0),
    )
    fields.update(overrides)
    return ScheduleSummary(**fields)


def seed_schedules(settings: Settings, *schedules: dict[str, Any]) -> list[ScheduleSummary]:
    """Insert schedules before the app starts, on a separate engine."""

    async def _seed() -> list[ScheduleSummary]:
        db = Database(settings.database_url)
        await db.connect()
        try:
            repo = ScheduleRepository(db)
            return [await repo.add(**s) for s in schedules]
        finally:
            await db.close()

    return asyncio.run(_seed())


@pytest.fixture
def settings(tmp_path) -> Settings:  # noqa: ANN001
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        gemini=GeminiConfig(api_key="test-key"),
    )


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def app(settings: Settings, generator: FakeGenerator):  # noqa: ANN201
    return create_app(settings, generator=generator)


@pytest.fixture
def client(app) -> Iterator[TestClient]:  # noqa: ANN001
    app.dependency_overrides[get_current_user] = lambda: AGENT
    with TestClient(app) as c:
        yield c
