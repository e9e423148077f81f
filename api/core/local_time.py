"""Caller-local "today" as a FastAPI dependency.

Day and week boundaries are decided in the caller's timezone, sent by the
client as an IANA name in the ``X-Timezone`` header. Everything downstream
receives the resulting calendar date, never a clock.
"""

from datetime import date
from typing import Annotated

from fastapi import Depends, Header

from core.config import get_settings
from core.wide_event import set_wide_event_fields
from services.calendar_service import is_valid_timezone, local_today


def resolve_timezone(header_value: str | None) -> str:
    """Header value when it names a real zone, else the configured default."""
    if header_value and is_valid_timezone(header_value.strip()):
        return header_value.strip()
    return get_settings().default_timezone


def get_user_today(
    x_timezone: Annotated[str | None, Header()] = None,
) -> date:
    tz_name = resolve_timezone(x_timezone)
    today = local_today(tz_name)
    set_wide_event_fields(user_timezone=tz_name, user_today=today.isoformat())
    return today


UserToday = Annotated[date, Depends(get_user_today)]
