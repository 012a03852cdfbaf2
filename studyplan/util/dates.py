# studyplan/util/dates.py
from __future__ import annotations

import datetime as dt
from typing import List


def day_key(d: dt.date) -> str:
    return d.isoformat()


def add_days(d: dt.date, n: int) -> dt.date:
    return d + dt.timedelta(days=int(n))


def weekday_index(d: dt.date) -> int:
    """Day of week with Sunday = 0 ... Saturday = 6."""
    return (d.weekday() + 1) % 7


def today_date() -> dt.date:
    return dt.datetime.now().date()


def week_dates(d: dt.date) -> List[dt.date]:
    """Monday..Sunday of the week containing `d`."""
    monday = d - dt.timedelta(days=d.weekday())
    return [monday + dt.timedelta(days=i) for i in range(7)]
