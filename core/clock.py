"""Local wall-clock helpers.

Schedules and trips are stored as naive local times in the operating
timezone (SCHEDULING_TIMEZONE), so "now" must be taken in that zone and
stripped of tzinfo before comparing with stored values.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from core.config import settings


def local_now() -> datetime:
    return datetime.now(ZoneInfo(settings.scheduling.SCHEDULING_TIMEZONE)).replace(tzinfo=None)


def local_today() -> date:
    return local_now().date()
