"""FastAPI dependencies: current user, repositories and the text generator."""
from __future__ import annotations
import logging
from typing import Mapping, Protocol

from fastapi import HTTPException, Request

from realty_briefing.common.schema import GenerationOptions, UserContext
from realty_briefing.store.news import NewsRepository
from realty_briefing.store.schedules import ScheduleRepository

LOGGER = logging.getLogger("realty_briefing.api.deps")


class TextGenerator(Protocol):
    async def generate(self, prompt: str, options: GenerationOptions | None = None) -> str: ...


def get_current_user(request: Request) -> UserContext:
    """
    Return the user the auth middleware placed on ``request.state.user``.

    The middleware may store either a ``UserContext`` or a plain mapping with
    ``id``, ``name``, ``level`` and ``business_number`` keys.
    """
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required.")
    if isinstance(user, UserContext):
        return user
    if isinstance(user, Mapping):
        try:
            return UserContext(
                id=str(user["id"]),
                name=str(user.get("name", "")),
                level=int(user.get("level", 1)),
                business_number=user.get("business_number"),
            )
        except (KeyError, TypeError, ValueError) as e:
            LOGGER.warning("Rejecting malformed request user: %s: %s", type(e).__name__, e)
            raise HTTPException(status_code=401, detail="Authentication required.") from e
    raise HTTPException(status_code=401, detail="Authentication required.")


def get_news_repo(request: Request) -> NewsRepository:
    return request.app.state.news


def get_schedule_repo(request: Request) -> ScheduleRepository:
    return request.app.state.schedules


def get_generator(request: Request) -> TextGenerator:
    return request.app.state.generator
