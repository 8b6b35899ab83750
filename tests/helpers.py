"""Fixed reference clock shared by the test modules."""

from datetime import datetime, timedelta, timezone

T0 = datetime(2024, 1, 10, 10, 0, tzinfo=timezone.utc)


def hours(n: float) -> timedelta:
    return timedelta(hours=n)
