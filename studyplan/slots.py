"""Free-slot calendar for the scheduling horizon.

Design goals:
  - The weekly template is authoritative; calendar display hours are not.
  - Tolerate unsorted and overlapping user-entered blocks (merge first).
  - Days without availability are simply absent.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .interval import Interval, carve, union_intervals
from .model import HORIZON_DAYS, MIN_SLOT_MINUTES, MINUTES_PER_DAY, ScheduledTime, WeeklySchedule
from .util.dates import add_days, day_key, weekday_index


@dataclass
class DayFreeSlots:
    """Free intervals of one calendar day; mutated while a run places work."""

    day: str
    slots: List[Interval] = field(default_factory=list)

    @property
    def free_minutes(self) -> int:
        return sum(e - s for s, e in self.slots)


def merged_blocks(weekly: WeeklySchedule, dow: int) -> List[Interval]:
    blocks = weekly.get(dow) or ()
    ints = []
    for b in blocks:
        s = max(0, int(b.start_time))
        e = min(MINUTES_PER_DAY, int(b.end_time))
        if e > s:
            ints.append((s, e))
    return union_intervals(ints)


def build_free_slots(
    weekly: WeeklySchedule,
    anchor: dt.date,
    *,
    horizon_days: int = HORIZON_DAYS,
) -> List[DayFreeSlots]:
    """Return free slots for [anchor, anchor + horizon_days - 1] in day order."""
    out: List[DayFreeSlots] = []
    for i in range(max(0, int(horizon_days))):
        d = add_days(anchor, i)
        merged = merged_blocks(weekly, weekday_index(d))
        if not merged:
            continue
        out.append(DayFreeSlots(day=day_key(d), slots=merged))
    return out


def carve_preserved(
    free: List[DayFreeSlots],
    preserved: Iterable[ScheduledTime],
    *,
    min_minutes: int = MIN_SLOT_MINUTES,
) -> None:
    """Remove preserved slot intervals from the matching day, in place."""
    by_day: Dict[str, DayFreeSlots] = {d.day: d for d in free}
    for st in preserved:
        day = by_day.get(st.day)
        if day is None:
            continue
        day.slots = carve(day.slots, (int(st.start_time), int(st.end_time)), min_minutes=min_minutes)
