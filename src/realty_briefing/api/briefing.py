"""Schedule briefing endpoints (prefix /api/schedule-briefing, all authenticated).

- GET /weekly-briefing                  this week's briefing plus schedule analysis
- GET /daily-briefing?date=YYYY-MM-DD   one day's briefing (default today)
- GET /meeting-message/{schedule_id}    phone/SMS/email drafts for the first customer
- GET /analysis?start_date&end_date     analysis over a range (default this month)
"""
from __future__ import annotations
import asyncio
import calendar
import logging
from datetime import date, datetime, time, timedelta
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from realty_briefing.api.deps import (
    TextGenerator,
    get_current_user,
    get_generator,
    get_schedule_repo,
)
from realty_briefing.common.schema import GenerationOptions, UserContext
from realty_briefing.common.templates import (
    ANALYSIS_OPTIONS,
    DAILY_OPTIONS,
    MEETING_OPTIONS,
    WEEKLY_OPTIONS,
    assemble_daily_briefing,
    assemble_meeting_message,
    assemble_schedule_analysis,
    assemble_weekly_briefing,
    format_date_label,
)
from realty_briefing.store.schedules import ScheduleRepository

LOGGER = logging.getLogger("realty_briefing.api.briefing")

NO_WEEKLY_SCHEDULES = (
    "There are no schedules registered for this week. "
    "Add a new schedule or check another week."
)
NO_WEEKLY_ANALYSIS = "There are no schedules to analyze."
NO_ANALYSIS_SCHEDULES = "There are no schedules to analyze. Try adding a new schedule."

router = APIRouter(
    prefix="/api/schedule-briefing",
    tags=["briefing"],
    dependencies=[Depends(get_current_user)],
)


def _now() -> datetime:
    return datetime.now()


def _day_bounds(day: date) -> tuple[datetime, datetime]:
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def week_bounds(today: date) -> tuple[datetime, datetime]:
    """Sunday 00:00 through Saturday 23:59:59.999999 of the week containing ``today``."""
    sunday = today - timedelta(days=(today.weekday() + 1) % 7)
    return datetime.combine(sunday, time.min), datetime.combine(sunday + timedelta(days=6), time.max)


def month_bounds(today: date) -> tuple[datetime, datetime]:
    last = calendar.monthrange(today.year, today.month)[1]
    return (
        datetime.combine(today.replace(day=1), time.min),
        datetime.combine(today.replace(day=last), time.max),
    )


async def _generate_together(
    generator: TextGenerator, *requests: tuple[str, GenerationOptions]
) -> list[str]:
    """Run generations concurrently; the first failure cancels the rest."""
    tasks = [asyncio.ensure_future(generator.generate(prompt, opts)) for prompt, opts in requests]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


@router.get("/weekly-briefing")
async def weekly_briefing(
    user: UserContext = Depends(get_current_user),
    repo: ScheduleRepository = Depends(get_schedule_repo),
    generator: TextGenerator = Depends(get_generator),
) -> dict[str, Any]:
    start, end = week_bounds(_now().date())
    LOGGER.info("Weekly briefing for %s (%s - %s)", user.name, start.isoformat(), end.isoformat())
    schedules = await repo.find(start, end, user)
    if not schedules:
        return {
            "success": True,
            "data": {
                "briefing": NO_WEEKLY_SCHEDULES,
                "schedules": [],
                "analysis": NO_WEEKLY_ANALYSIS,
            },
        }

    briefing, analysis = await _generate_together(
        generator,
        (assemble_weekly_briefing(schedules, user.name), WEEKLY_OPTIONS),
        (assemble_schedule_analysis(schedules), ANALYSIS_OPTIONS),
    )
    return {
        "success": True,
        "data": {
            "briefing": briefing,
            "analysis": analysis,
            "schedules": schedules,
            "week_range": {"start": start, "end": end},
        },
    }


@router.get("/daily-briefing")
async def daily_briefing(
    day: date | None = Query(None, alias="date"),
    user: UserContext = Depends(get_current_user),
    repo: ScheduleRepository = Depends(get_schedule_repo),
    generator: TextGenerator = Depends(get_generator),
) -> dict[str, Any]:
    target = day or _now().date()
    start, end = _day_bounds(target)
    label = format_date_label(target)
    LOGGER.info("Daily briefing for %s (%s)", user.name, target.isoformat())
    schedules = await repo.find(start, end, user, by_time_only=True)
    if not schedules:
        return {
            "success": True,
            "data": {
                "briefing": f"There are no schedules registered for {label}",
                "schedules": [],
                "date": target,
            },
        }

    briefing = await generator.generate(
        assemble_daily_briefing(schedules, user.name, label), DAILY_OPTIONS
    )
    return {"success": True, "data": {"briefing": briefing, "schedules": schedules, "date": target}}


@router.get("/meeting-message/{schedule_id}")
async def meeting_message(
    schedule_id: str,
    user: UserContext = Depends(get_current_user),
    repo: ScheduleRepository = Depends(get_schedule_repo),
    generator: TextGenerator = Depends(get_generator),
) -> dict[str, Any]:
    schedule = await repo.get(schedule_id)
    if schedule is None:
        raise HTTPException(status_code=404, detail="Schedule not found.")
    if not user.can_access(schedule):
        raise HTTPException(status_code=403, detail="You do not have access to this schedule.")
    if not schedule.related_customers:
        raise HTTPException(status_code=400, detail="This schedule has no related customer.")

    customer = schedule.related_customers[0]
    message = await generator.generate(assemble_meeting_message(schedule, customer), MEETING_OPTIONS)
    return {
        "success": True,
        "data": {"schedule": schedule, "customer": customer, "message_recommendation": message},
    }


@router.get("/analysis")
async def schedule_analysis(
    start_date: date | None = None,
    end_date: date | None = None,
    user: UserContext = Depends(get_current_user),
    repo: ScheduleRepository = Depends(get_schedule_repo),
    generator: TextGenerator = Depends(get_generator),
) -> dict[str, Any]:
    if start_date is not None and end_date is not None:
        start = datetime.combine(start_date, time.min)
        end = datetime.combine(end_date, time.max)
    else:
        start, end = month_bounds(_now().date())

    schedules = await repo.find(start, end, user)
    if not schedules:
        return {"success": True, "data": {"analysis": NO_ANALYSIS_SCHEDULES, "schedules": []}}

    analysis = await generator.generate(assemble_schedule_analysis(schedules), ANALYSIS_OPTIONS)
    return {
        "success": True,
        "data": {"analysis": analysis, "schedules": schedules, "period": {"start": start, "end": end}},
    }
