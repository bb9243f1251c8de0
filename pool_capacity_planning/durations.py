import math
import sys
from datetime import timedelta
from decimal import Decimal
from typing import Union

from isodate import parse_duration  # type: ignore

from pool_capacity_planning.units import parse_number

SECONDS_IN_DAY = 3600 * 24
DURATION_1M = 2592000
DURATION_1Y = 31536000
D_YEAR = Decimal(DURATION_1Y)
D_MONTH = Decimal(DURATION_1M)

# Multiplier that brings a time variant to seconds
_TIME_VARIANTS = {
    "s": 1.0,
    "ms": 0.001,
    "ns": 0.000000001,
}


def _plural(count: float, noun: str) -> str:
    return f"{_format_number(count)} {noun}{'' if count == 1 else 's'}"


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def iso_to_seconds(iso_duration: str) -> int:
    """Whole seconds in an ISO 8601 duration such as "P1Y2M" or "pt36h".

    Calendar parts have fixed lengths (365 day years, 30 day months) so the
    result does not depend on a start date. Fractions of a second are dropped.
    """
    parsed = parse_duration(iso_duration.strip().upper())
    if isinstance(parsed, timedelta):
        return math.floor(parsed.total_seconds())
    calendar = Decimal(parsed.years) * D_YEAR + Decimal(parsed.months) * D_MONTH
    return math.floor(calendar + Decimal(parsed.tdelta.total_seconds()))


def nice_days(value: Union[int, float, str], time_variant: str = "s") -> str:
    """Describes a duration with its coarsest sensible unit.

    value is in seconds unless time_variant is "ms" or "ns", both of which are
    truncated to whole seconds first. Durations over a year are shown in
    years (one decimal at most), over thirty days in months and leftover days,
    from a week in weeks, from a day in days and otherwise in the largest of
    hours, minutes or seconds.
    """
    seconds = parse_number(value)
    if not math.isfinite(seconds):
        return ""
    if time_variant != "s":
        seconds = math.floor(seconds * _TIME_VARIANTS.get(time_variant, 1.0))

    days = math.floor(seconds / SECONDS_IN_DAY)
    seconds -= days * SECONDS_IN_DAY
    hours = math.floor(seconds / 3600)
    seconds -= hours * 3600
    minutes = math.floor(seconds / 60)
    seconds -= minutes * 60

    if days > 365:
        return _plural(round(days / 365, 1), "year")

    if days > 30:
        months = days // 30
        leftover = days - months * 30
        if leftover > 0:
            return f"{_plural(months, 'month')} {_plural(leftover, 'day')}"
        return _plural(months, "month")

    if days >= 7:
        return _plural(days // 7, "week")

    if days >= 1:
        return _plural(days, "day")

    if hours >= 1:
        return _plural(hours, "hour")
    if minutes >= 1:
        return _plural(minutes, "minute")
    if seconds >= 1:
        return _plural(seconds, "second")
    return ""


def nice_duration(iso_duration: str) -> str:
    """nice_days for an ISO 8601 duration such as "P2W" or "PT36H" """
    return nice_days(iso_to_seconds(iso_duration))


def ns_to_seconds(nanoseconds: Union[int, float]) -> str:
    conversion = nanoseconds * 0.000000001
    rounded = round(conversion + sys.float_info.epsilon, 4)
    return f"{_format_number(rounded)} s"
