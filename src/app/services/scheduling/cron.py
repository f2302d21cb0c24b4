from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from zoneinfo import ZoneInfo

from celery.schedules import crontab
from croniter import croniter


DEFAULT_TIMEZONE = "UTC"


def validate_cron(cron_expr: str) -> None:
    """Validate a 5-field cron expression.

    Raises ValueError if invalid.
    """
    if len(cron_expr.split()) != 5:
        raise ValueError(f"Invalid cron expression: {cron_expr}. Expected 5 fields")
    try:
        # croniter itself validates format
        croniter(cron_expr, datetime.now(dt_timezone.utc))
    except Exception as exc:
        raise ValueError(f"Invalid cron expression: {cron_expr}. Error: {exc}") from exc


def _get_timezone(tz_name: str) -> ZoneInfo:
    """Resolve timezone name to ZoneInfo with validation."""
    try:
        return ZoneInfo(tz_name)
    except Exception as exc:
        raise ValueError(f"Invalid timezone: {tz_name}. Error: {exc}") from exc


def compute_next_run(cron_expr: str, timezone: str, from_dt: datetime) -> datetime:
    """Compute next run datetime in UTC for given cron and timezone.

    Args:
        cron_expr: 5-field cron expression (minute, hour, dom, month, dow)
        timezone: IANA timezone string
        from_dt: current reference time (assumed UTC, tz-aware or naive)

    Returns:
        next run in UTC as aware datetime
    """
    validate_cron(cron_expr)

    # Ensure `from_dt` is timezone-aware UTC
    if from_dt.tzinfo is None:
        from_dt_utc = from_dt.replace(tzinfo=ZoneInfo("UTC"))
    else:
        from_dt_utc = from_dt.astimezone(ZoneInfo("UTC"))

    tz = _get_timezone(timezone or DEFAULT_TIMEZONE)

    # Convert reference time to schedule timezone
    from_local = from_dt_utc.astimezone(tz)

    itr = croniter(cron_expr, from_local)
    next_local = itr.get_next(datetime)

    return next_local.astimezone(ZoneInfo("UTC"))


def to_crontab(cron_expr: str) -> crontab:
    """Build a Celery beat `crontab` from a validated 5-field cron expression."""
    validate_cron(cron_expr)
    minute, hour, day_of_month, month_of_year, day_of_week = cron_expr.split()
    return crontab(
        minute=minute,
        hour=hour,
        day_of_month=day_of_month,
        month_of_year=month_of_year,
        day_of_week=day_of_week,
    )


def format_cron_human_readable(cron_expr: str) -> str:
    """Convert common cron expressions to a short English description.

    Examples:
        "*/5 * * * *" -> "every 5 minutes"
        "0 */4 * * *" -> "every 4 hours"
        "30 3 * * *" -> "daily at 03:30"
    """
    parts = cron_expr.strip().split()
    if len(parts) != 5:
        return cron_expr

    minute, hour, day_of_month, month, day_of_week = parts
    rest_any = day_of_month == "*" and month == "*" and day_of_week == "*"

    # Every N minutes
    if minute.startswith("*/") and hour == "*" and rest_any:
        try:
            n = int(minute[2:])
            if n == 1:
                return "every minute"
            elif n < 60:
                return f"every {n} minutes"
        except ValueError:
            pass

    # Every N hours (at minute 0)
    if minute == "0" and hour.startswith("*/") and rest_any:
        try:
            n = int(hour[2:])
            return "every hour" if n == 1 else f"every {n} hours"
        except ValueError:
            pass

    # Daily at specific time
    if minute.isdigit() and hour.isdigit() and rest_any:
        return f"daily at {int(hour):02d}:{int(minute):02d}"

    return cron_expr
