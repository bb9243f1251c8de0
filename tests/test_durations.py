import pytest

from pool_capacity_planning.durations import iso_to_seconds
from pool_capacity_planning.durations import nice_days
from pool_capacity_planning.durations import nice_duration
from pool_capacity_planning.durations import ns_to_seconds

DAY = 24 * 3600


@pytest.mark.parametrize(
    "seconds,expected",
    [
        (0, ""),
        (1, "1 second"),
        (45, "45 seconds"),
        (120, "2 minutes"),
        (3 * 3600 + 60, "3 hours"),
        (3600, "1 hour"),
        (DAY, "1 day"),
        (4 * DAY + 5, "4 days"),
        (14 * DAY, "2 weeks"),
        (30 * DAY, "4 weeks"),
        (33 * DAY, "1 month 3 days"),
        (60 * DAY, "2 months"),
        (366 * DAY, "1 year"),
        (548 * DAY, "1.5 years"),
        (730 * DAY, "2 years"),
    ],
)
def test_nice_days(seconds, expected):
    assert nice_days(seconds) == expected


@pytest.mark.parametrize(
    "days,expected",
    [
        (383, "1 year"),
        (384, "1.1 years"),
        (401, "1.1 years"),
        (419, "1.1 years"),
    ],
)
def test_fractional_years_are_plural(days, expected):
    # Only exactly one year (after rounding) is singular
    assert nice_days(days * DAY) == expected


def test_nice_days_time_variants():
    assert nice_days(90_000, "ms") == "1 minute"
    assert nice_days(5_000_000_000, "ns") == "5 seconds"
    assert nice_days(str(2 * DAY)) == "2 days"


def test_nice_days_not_a_number():
    assert nice_days("soon") == ""


def test_iso_durations():
    assert iso_to_seconds("P1M") == 2592000
    assert iso_to_seconds("PT90S") == 90
    assert iso_to_seconds(" p1y ") == 31536000
    assert iso_to_seconds("P1Y1D") == 31536000 + DAY
    assert iso_to_seconds("PT1.5S") == 1
    assert nice_duration("P2W") == "2 weeks"
    assert nice_duration("PT36H") == "1 day"
    # A year of 365 days is not more than a year
    assert nice_duration("P1Y") == "12 months 5 days"


def test_ns_to_seconds():
    assert ns_to_seconds(1_500_000_000) == "1.5 s"
    assert ns_to_seconds(2_000_000_000) == "2 s"
    assert ns_to_seconds(123_456_789) == "0.1235 s"
