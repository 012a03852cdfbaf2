# studyplan/interval.py
"""Minute-interval algebra on a single day.

Intervals are half-open (start, end) pairs in minutes since midnight.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from .model import MIN_SLOT_MINUTES

Interval = Tuple[int, int]


def union_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """Sort and merge intervals; touching intervals (next.start == end) merge too."""
    ints = sorted((int(s), int(e)) for s, e in intervals if e > s)
    if not ints:
        return []
    out: List[Interval] = []
    cur_s, cur_e = ints[0]
    for s, e in ints[1:]:
        if s <= cur_e:
            cur_e = max(cur_e, e)
        else:
            out.append((cur_s, cur_e))
            cur_s, cur_e = s, e
    out.append((cur_s, cur_e))
    return out


def subtract(base: Interval, blocks: List[Interval]) -> List[Interval]:
    """Subtract unioned, sorted blocks from base and return the free pieces."""
    a, b = base
    if a >= b:
        return []
    out: List[Interval] = []
    cur = a
    for s, e in blocks:
        if e <= cur:
            continue
        if s >= b:
            break
        if s > cur:
            out.append((cur, min(s, b)))
        cur = max(cur, e)
        if cur >= b:
            break
    if cur < b:
        out.append((cur, b))
    return [(s, e) for s, e in out if e > s]


def overlaps(a: Interval, b: Interval) -> bool:
    return a[0] < b[1] and b[0] < a[1]


def carve(slots: List[Interval], busy: Interval, *, min_minutes: int = MIN_SLOT_MINUTES) -> List[Interval]:
    """Remove `busy` from every slot it touches.

    A slot may be split in two, shrunk, or deleted. Fragments shorter than
    `min_minutes` are dropped; slots the busy interval does not overlap are
    returned unchanged, whatever their length.
    """
    out: List[Interval] = []
    for slot in slots:
        if not overlaps(slot, busy):
            out.append(slot)
            continue
        for s, e in subtract(slot, [busy]):
            if e - s >= min_minutes:
                out.append((s, e))
    return out
