import math
from datetime import date, datetime, timezone


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from zero for positive values (``round(2.5) == 3``)."""
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    return int(round_half_up(value))


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def format_day(day: date) -> str:
    return day.isoformat()


def parse_day(value: str) -> date | None:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None
