# studyplan/placement.py
"""Placement policies: pick a day and a free slot for one block of work.

Both policies are first-fit within a day (slots in list order) and commit by
shrinking the chosen slot from its start.

  A (compact): days on/before the due boundary, latest first; if nothing
     fits, any day in the horizon, earliest first.
  B (spread): days on/before the due boundary only, scanned from a random
     offset so equally valid days share the load. No fallback.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from .model import MIN_SLOT_MINUTES
from .slots import DayFreeSlots


class RandomSource(Protocol):
    def randrange(self, stop: int) -> int:
        """Return a random int in [0, stop)."""


@dataclass(frozen=True)
class Placement:
    day: str
    start_time: int
    end_time: int
    fallback: bool = False  # placed after the due boundary (policy A second pass)


def _first_fit(day: DayFreeSlots, need_min: int) -> Optional[int]:
    for i, (s, e) in enumerate(day.slots):
        if e - s >= need_min:
            return i
    return None


def _commit(day: DayFreeSlots, idx: int, need_min: int, *, fallback: bool = False) -> Placement:
    s, e = day.slots[idx]
    end = s + need_min
    if e - end < MIN_SLOT_MINUTES:
        del day.slots[idx]
    else:
        day.slots[idx] = (end, e)
    return Placement(day=day.day, start_time=s, end_time=end, fallback=fallback)


def _scan(days: Sequence[DayFreeSlots], need_min: int, *, fallback: bool = False) -> Optional[Placement]:
    for d in days:
        idx = _first_fit(d, need_min)
        if idx is not None:
            return _commit(d, idx, need_min, fallback=fallback)
    return None


def place_compact(
    free: List[DayFreeSlots],
    need_min: int,
    due_boundary: str,
    rng: Optional[RandomSource] = None,
) -> Optional[Placement]:
    before_due = [d for d in free if d.day <= due_boundary]
    placed = _scan(list(reversed(before_due)), need_min)
    if placed is not None:
        return placed
    return _scan(free, need_min, fallback=True)


def place_spread(
    free: List[DayFreeSlots],
    need_min: int,
    due_boundary: str,
    rng: Optional[RandomSource] = None,
) -> Optional[Placement]:
    candidates = [d for d in free if d.day <= due_boundary]
    if not candidates:
        return None
    if rng is None:
        raise ValueError("policy B needs a random source")
    n = len(candidates)
    offset = rng.randrange(n)
    rotated = [candidates[(offset + i) % n] for i in range(n)]
    return _scan(rotated, need_min)


PlacementPolicy = Callable[[List[DayFreeSlots], int, str, Optional[RandomSource]], Optional[Placement]]

POLICIES: Dict[str, PlacementPolicy] = {
    "A": place_compact,
    "B": place_spread,
}
