"""Prompt templating helpers.

Each ``assemble_*`` function turns schedule records into the prompt text sent
to the generation client. They do no I/O and read no clock: anything
time-dependent (such as the daily date label) is passed in by the caller.
"""
from __future__ import annotations
import json
import re
from datetime import date, datetime
from typing import Any, Sequence

from realty_briefing.common.schema import (
    CustomerRef,
    GenerationOptions,
    ScheduleSummary,
)

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")

WEEKLY_OPTIONS = GenerationOptions(temperature=0.6, max_output_tokens=2000)
ANALYSIS_OPTIONS = GenerationOptions(temperature=0.6, max_output_tokens=2000)
DAILY_OPTIONS = GenerationOptions(temperature=0.8, max_output_tokens=1536)
MEETING_OPTIONS = GenerationOptions(temperature=0.65, max_output_tokens=1000)

WEEKLY_TEMPLATE = """
You are the AI assistant of a real-estate CRM system.
Analyze this week's schedule for user "{{user_name}}" and write a weekly briefing for efficient work management.

Schedule data:
{{schedules}}

Write the weekly briefing in the following format:

## 📅 This Week's Work Briefing

### 📊 Schedule Overview
- Total schedules: X
- Completed: X
- In progress: X
- Upcoming: X

### 🎯 Key Work Points
- High-priority schedules
- Urgent schedules
- Customer meetings

### ⏰ Time Management Advice
- Suggestions for efficient time allocation
- Travel time considerations
- Recommended breaks

### 💼 Customer Management Strategy
- Approach per customer
- Preparation before each meeting
- Follow-up plan

### 🔄 Improvement Suggestions
- Schedule optimization
- Ways to work more efficiently
- Ways to raise customer satisfaction

Provide professional, practical advice in Korean.
"""

ANALYSIS_TEMPLATE = """
Analyze the user's schedule and give detailed advice for efficient work management.

Full schedule data (JSON):
{{schedules}}

Write a detailed analysis report in the following format:

## 📊 Schedule Analysis Report

### 📈 Work Pattern Analysis
- Distribution and characteristics by work type
- Workload density by time of day
- Distribution by priority
- Consultation patterns per customer

### ⏰ Time Management Improvements
- Efficient time allocation
- Travel time considerations
- Recommended breaks
- Ways to improve focus

### 🎯 Priority Suggestions
- Identify the most important work
- Reorder by urgency
- Time slots that need focus
- Priority strategy per customer

### 💼 Customer Management Strategy
- Approach per customer
- Analysis of each customer's specific requirements
- Preparation before meetings
- Follow-up plan
- Property recommendation strategy

### 🔄 Improvement Suggestions
- Schedule optimization
- Ways to work more efficiently
- Ways to raise customer satisfaction
- Stress management tips
- Better use of the CRM system

Provide professional, practical advice in Korean.
"""

DAILY_TEMPLATE = """
You are the AI assistant of a real-estate CRM system.
Analyze the schedule of user "{{user_name}}" for {{date_label}} and write today's work briefing.

Schedule data:
{{schedules}}

Write the briefing in the following format:

## 📅 Today's Work Briefing ({{date_label}})

### 🌅 Today's Main Tasks
- Main tasks in chronological order

### ⏰ Hour-by-Hour Schedule
For each schedule:
- Time and place
- What to prepare
- Points to watch

### 👥 People You Will Meet
- Customer/partner information
- Purpose and importance of each meeting

### 💡 Keys to Today's Success
- Advice for getting work done efficiently
- Ways to raise customer satisfaction

### ⚠️ Cautions
- Anything that needs special attention

Write in Korean with a friendly and professional tone.
"""

MEETING_TEMPLATE = """
You are the AI assistant of a real-estate CRM system.
Recommend suitable messages to send to the customer before the meeting.

Schedule:
- Title: {{title}}
- Type: {{type}}
- Date: {{date}}
- Time: {{time}}
- Location: {{location}}
- Description: {{description}}
- Priority: {{priority}}
- Status: {{status}}

Customer:
- Name: {{customer_name}}
- Phone: {{customer_phone}}
- Email: {{customer_email}}

Related properties:
{{properties}}

Write the messages in the following format:

## 📱 Recommended Messages

### 📞 For a phone call (quick confirmation)
"Hello, [customer name]! I'm calling to confirm our meeting tomorrow at [time] at [place]. Please let me know if anything about the time or place has changed. See you tomorrow!"

### 💬 For a text message (detailed notice)
"Hello, [customer name]! We have a [work type] consultation scheduled tomorrow, [date] at [time], at [place]. If you have documents ready or any questions, please let me know in advance. See you tomorrow! 😊"

### 📧 For email (formal notice)
"Subject: [date] [work type] consultation schedule

Dear [customer name],

We will hold a [work type] consultation tomorrow, [date] at [time], at [place].

Please prepare:
- [item 1]
- [item 2]

Feel free to contact me with any questions.
Thank you."

Adjust each message to the customer's situation and the type of work.
Keep the tone friendly yet professional, and write the messages in Korean.
"""

NO_PROPERTIES = "No related properties"
MISSING = "none"


def render_prompt(template: str, **values: str) -> str:
    """
    Render values into the template.

    Args:
        template: Template content containing ``{{name}}`` placeholders.
        values: Replacement text per placeholder name.

    Returns:
        Rendered prompt. Substituted text is never re-scanned for placeholders.
    """
    return _PLACEHOLDER.sub(lambda m: values[m.group(1)], template)


def format_date_label(day: date) -> str:
    """Korean locale short date, e.g. ``2026. 10. 19.``"""
    return f"{day.year}. {day.month}. {day.day}."


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _full_projection(s: ScheduleSummary, *, with_company: bool) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": s.id,
        "title": s.title,
        "type": s.type,
        "date": _iso(s.date),
        "time": s.time,
        "location": s.location,
        "description": s.description,
        "priority": s.priority,
        "status": s.status,
        "related_customers": [
            {"id": c.id, "name": c.name, "phone": c.phone, "email": c.email}
            for c in s.related_customers
        ],
        "related_properties": [
            {"id": p.id, "title": p.title, "address": p.address}
            for p in s.related_properties
        ],
        "related_contracts": [
            {"id": c.id, "contract_number": c.contract_number, "type": c.type, "status": c.status}
            for c in s.related_contracts
        ],
        "publisher": (
            {"id": s.publisher.id, "name": s.publisher.name, "level": s.publisher.level}
            if s.publisher is not None else None
        ),
    }
    if with_company:
        out["by_company_number"] = s.by_company_number
    out["created_at"] = _iso(s.created_at)
    return out


def _weekly_projection(s: ScheduleSummary) -> dict[str, Any]:
    return {
        "title": s.title,
        "date": _iso(s.date),
        "time": s.time,
        "type": s.type,
        "priority": s.priority,
        "status": s.status,
        "description": s.description,
        "publisher": s.publisher.name if s.publisher is not None else None,
        "customers": [c.name for c in s.related_customers],
        "properties": [p.title for p in s.related_properties],
        "contracts": [c.contract_number for c in s.related_contracts],
    }


def assemble_weekly_briefing(summaries: Sequence[ScheduleSummary], user_name: str) -> str:
    """Weekly briefing prompt over a field-projected view of each schedule."""
    data = [_weekly_projection(s) for s in summaries]
    return render_prompt(WEEKLY_TEMPLATE, user_name=user_name, schedules=_to_json(data))


def assemble_schedule_analysis(summaries: Sequence[ScheduleSummary]) -> str:
    data = [_full_projection(s, with_company=False) for s in summaries]
    return render_prompt(ANALYSIS_TEMPLATE, schedules=_to_json(data))


def assemble_daily_briefing(
    summaries: Sequence[ScheduleSummary], user_name: str, date_label: str
) -> str:
    """
    Daily briefing prompt.

    Args:
        summaries: The day's schedules, already in display order.
        user_name: Display name of the requesting user.
        date_label: Pre-formatted date, embedded verbatim (see ``format_date_label``).
    """
    data = [_full_projection(s, with_company=True) for s in summaries]
    return render_prompt(
        DAILY_TEMPLATE,
        user_name=user_name,
        date_label=date_label,
        schedules=_to_json(data),
    )


def assemble_meeting_message(summary: ScheduleSummary, customer: CustomerRef) -> str:
    if summary.related_properties:
        properties = "\n".join(
            f"- {p.title} ({p.address or MISSING})" for p in summary.related_properties
        )
    else:
        properties = NO_PROPERTIES
    return render_prompt(
        MEETING_TEMPLATE,
        title=summary.title,
        type=summary.type or MISSING,
        date=summary.date.date().isoformat(),
        time=summary.time or MISSING,
        location=summary.location or MISSING,
        description=summary.description or MISSING,
        priority=summary.priority or MISSING,
        status=summary.status or MISSING,
        customer_name=customer.name,
        customer_phone=customer.phone or MISSING,
        customer_email=customer.email or MISSING,
        properties=properties,
    )
