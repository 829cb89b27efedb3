"""Recurrence rule expansion and helpers.

Rules use the iCalendar RRULE grammar (FREQ, INTERVAL, BYDAY, BYMONTHDAY,
BYMONTH, COUNT, UNTIL) and are expanded with ``dateutil.rrule``. Schedules
run on local wall-clock time, so every rule is evaluated against a naive
anchor at midnight of the schedule's ``valid_from``. An explicit DTSTART or
UNTIL written in UTC form is read as local time.
"""

import logging
import re
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional

from dateutil.rrule import rrulestr

from core.clock import local_today
from core.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 365

FREQUENCIES = ("DAILY", "WEEKLY", "MONTHLY", "YEARLY")

DAY_NAMES = {
    "MO": "Monday",
    "TU": "Tuesday",
    "WE": "Wednesday",
    "TH": "Thursday",
    "FR": "Friday",
    "SA": "Saturday",
    "SU": "Sunday",
}

# UNTIL=20261231T235959Z -> UNTIL=20261231T235959
_UTC_UNTIL = re.compile(r"UNTIL=(\d{8}(T\d{6})?)Z", re.IGNORECASE)


def _normalize(rule: str) -> str:
    rule = rule.strip()
    if rule.upper().startswith("RRULE:"):
        rule = rule[len("RRULE:"):]
    return _UTC_UNTIL.sub(r"UNTIL=\1", rule)


def _parse(rule: str, anchor: date):
    normalized = _normalize(rule)
    if "DTSTART" in normalized.upper():
        return rrulestr(normalized, ignoretz=True)
    return rrulestr(normalized, dtstart=datetime.combine(anchor, time.min))


def expand_recurrence(
    rule: str,
    valid_from: date,
    valid_to: Optional[date] = None,
    exclusions: Iterable[date] = (),
    window_start: Optional[date] = None,
    window_end: Optional[date] = None,
    default_window_days: int = DEFAULT_WINDOW_DAYS,
) -> List[date]:
    """Expand a rule into ascending dates within the validity window.

    The rule is anchored at valid_from; window_start/window_end only clip the
    output, so INTERVAL and COUNT are counted from the anchor regardless of
    the window asked for. Bounds are inclusive. A rule that cannot be parsed
    yields an empty list and a warning.

    Args:
        rule: RRULE body, e.g. "FREQ=WEEKLY;BYDAY=MO,WE,FR"
        valid_from: First valid date and rule anchor
        valid_to: Last valid date. When None the end is window_end, or
            valid_from + default_window_days if no window is given
        exclusions: Dates to drop from the result
        window_start: Optional lower clip
        window_end: Optional upper clip

    Returns:
        Sorted list of dates
    """
    if valid_to:
        end = valid_to
    elif window_end:
        end = window_end
    else:
        end = valid_from + timedelta(days=default_window_days)

    start = valid_from
    if window_start and window_start > start:
        start = window_start
    if window_end and window_end < end:
        end = window_end
    if start > end:
        return []

    try:
        parsed = _parse(rule, valid_from)
        occurrences = parsed.between(
            datetime.combine(start, time.min),
            datetime.combine(end, time.max),
            inc=True,
        )
    except (ValueError, TypeError) as e:
        logger.warning(f"Could not expand recurrence rule '{rule}': {e}")
        return []

    excluded = set(exclusions)
    return sorted({o.date() for o in occurrences if o.date() not in excluded})


def single_occurrence(valid_from: date) -> List[date]:
    """Candidate dates of a single (non-recurring) schedule."""
    return [valid_from]


def validate_rrule(rule: Optional[str], anchor: Optional[date] = None) -> None:
    """Raise ValidationError if the rule cannot be parsed or expanded.

    The rule is expanded over one default window from the anchor, so rules
    that parse but fail during expansion are rejected up front.
    """
    if not rule or not rule.strip():
        raise ValidationError("Recurring schedules require a recurrence rule")
    anchor = anchor or local_today()
    start = datetime.combine(anchor, time.min)
    try:
        _parse(rule, anchor).between(start, start + timedelta(days=DEFAULT_WINDOW_DAYS), inc=True)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"Invalid recurrence rule '{rule}': {e}")


def build_rrule(
    frequency: str,
    interval: Optional[int] = None,
    by_day: Optional[List[str]] = None,
    by_month_day: Optional[List[int]] = None,
    by_month: Optional[List[int]] = None,
    count: Optional[int] = None,
    until: Optional[date] = None,
) -> str:
    """Build a rule string from its components."""
    frequency = frequency.upper()
    if frequency not in FREQUENCIES:
        raise ValidationError(f"Unsupported frequency '{frequency}'")

    parts = [f"FREQ={frequency}"]
    if interval and interval > 1:
        parts.append(f"INTERVAL={interval}")
    if by_day:
        parts.append(f"BYDAY={','.join(d.upper() for d in by_day)}")
    if by_month_day:
        parts.append(f"BYMONTHDAY={','.join(str(d) for d in by_month_day)}")
    if by_month:
        parts.append(f"BYMONTH={','.join(str(m) for m in by_month)}")
    if count:
        parts.append(f"COUNT={count}")
    if until:
        # Local end of day, the same clock the anchor uses
        parts.append(f"UNTIL={until.strftime('%Y%m%d')}T235959")
    return ";".join(parts)


def describe_rrule(rule: str) -> str:
    """Human-readable English description, e.g. "Weekly on Monday, Friday".

    Falls back to the raw rule for frequencies it does not know.
    """
    parts = {}
    for part in _normalize(rule).split(";"):
        if "=" in part:
            key, value = part.split("=", 1)
            parts[key.upper()] = value

    freq = parts.get("FREQ", "").upper()
    try:
        interval = int(parts.get("INTERVAL", 1))
    except ValueError:
        interval = 1

    if freq == "DAILY":
        return "Every day" if interval == 1 else f"Every {interval} days"

    if freq == "WEEKLY":
        by_day = parts.get("BYDAY")
        if by_day:
            days = ", ".join(DAY_NAMES.get(d.upper(), d) for d in by_day.split(","))
            return f"Weekly on {days}" if interval == 1 else f"Every {interval} weeks on {days}"
        return "Weekly" if interval == 1 else f"Every {interval} weeks"

    if freq == "MONTHLY":
        return "Monthly" if interval == 1 else f"Every {interval} months"

    if freq == "YEARLY":
        return "Yearly" if interval == 1 else f"Every {interval} years"

    return rule
