# app/services/snake.py
from __future__ import annotations
from typing import List, Optional, Sequence


def manager_on_clock(roster_asc: Sequence[str], pick_number: int) -> Optional[str]:
    """
    Manager who owns `pick_number` in a snake draft.
    Even rounds run first->last through the ascending roster, odd rounds last->first.
    Returns None for an empty roster.
    """
    n = len(roster_asc)
    if n == 0:
        return None
    rnd, within = divmod(pick_number, n)
    if rnd % 2 == 0:
        return roster_asc[within]
    return roster_asc[n - 1 - within]


def draft_order(roster_asc: Sequence[str], total_picks: int) -> List[Optional[str]]:
    return [manager_on_clock(roster_asc, i) for i in range(total_picks)]
