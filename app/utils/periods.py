"""Date helpers for analytics windows and date query parameters."""
import calendar
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Optional, Tuple

from app.core.errors import BadRequestError
from app.models.transaction import to_iso, utcnow


def months_ago(moment: datetime, months: int) -> datetime:
    """Same day-of-month ``months`` calendar months earlier, clamped to the month's last day."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def analysis_window(months: int, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    end = now or utcnow()
    return months_ago(end, months), end


def analysis_period(start: datetime, end: datetime, months: int) -> Dict[str, Any]:
    return {
        "startDate": start.date().isoformat(),
        "endDate": end.date().isoformat(),
        "months": months,
    }


def parse_date_param(value: Optional[str], name: str, end_of_day: bool = False) -> Optional[datetime]:
    """
    Parse a ``YYYY-MM-DD`` or full ISO datetime query parameter.

    A bare date used as a range end covers that whole day.
    """
    if not value:
        return None
    try:
        if len(value) == 10:
            day = date.fromisoformat(value)
            parsed = datetime.combine(day, time.max if end_of_day else time.min)
        else:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise BadRequestError(f"Invalid {name}: expected YYYY-MM-DD or an ISO 8601 datetime")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def iso_bound(value: Optional[datetime]) -> Optional[str]:
    return to_iso(value) if value is not None else None
