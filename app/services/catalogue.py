# app/services/catalogue.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import Goal


class Cadence(str, Enum):
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"


SLOT_COUNTS: Dict[Cadence, int] = {Cadence.weekly: 3, Cadence.monthly: 2, Cadence.yearly: 2}
PICKS_PER_MANAGER = sum(SLOT_COUNTS.values())  # 7

# weekly < monthly < yearly; declaration order, not alphabetical
CADENCE_RANK: Dict[Cadence, int] = {c: i for i, c in enumerate(Cadence)}

SlotKey = Tuple[str, Cadence, int]  # (owner, cadence, slot_index)


@dataclass(frozen=True)
class GoalSlot:
    owner: str
    cadence: Cadence
    slot_index: int
    title: str

    @property
    def key(self) -> SlotKey:
        return (self.owner, self.cadence, self.slot_index)


def placeholder_title(slot_index: int) -> str:
    return f"(goal slot {slot_index + 1})"


def parse_cadence(value: str | Cadence) -> Optional[Cadence]:
    try:
        return Cadence(value)
    except ValueError:
        return None


def slot_sort_key(key: SlotKey) -> Tuple[str, int, int]:
    owner, cadence, slot_index = key
    return (owner, CADENCE_RANK[cadence], slot_index)


def slot_keys(owners: Iterable[str]) -> List[SlotKey]:
    """Every draftable (owner, cadence, slot_index), in catalogue order."""
    keys = [
        (owner, cadence, i)
        for owner in set(owners)
        for cadence, count in SLOT_COUNTS.items()
        for i in range(count)
    ]
    return sorted(keys, key=slot_sort_key)


def is_known_slot(owners: Sequence[str], owner: str, cadence: str | Cadence, slot_index: int) -> bool:
    cad = parse_cadence(cadence)
    if cad is None or owner not in owners:
        return False
    return 0 <= slot_index < SLOT_COUNTS[cad]


def goal_titles(db: Session, owners: Iterable[str]) -> Dict[SlotKey, str]:
    owners = list(owners)
    if not owners:
        return {}
    rows = db.execute(select(Goal).where(Goal.user_id.in_(owners))).scalars().all()
    titles: Dict[SlotKey, str] = {}
    for g in rows:
        cad = parse_cadence(g.timeframe)
        if cad is None:
            continue
        titles[(g.user_id, cad, g.slot_index)] = g.title
    return titles


def list_slots(db: Session, owners: Iterable[str]) -> List[GoalSlot]:
    """Catalogue for the given owners with display titles, in catalogue order."""
    owners = list(owners)
    titles = goal_titles(db, owners)
    return [
        GoalSlot(owner=o, cadence=c, slot_index=i, title=titles.get((o, c, i)) or placeholder_title(i))
        for (o, c, i) in slot_keys(owners)
    ]


def set_goal_title(db: Session, owner: str, cadence: Cadence, slot_index: int, title: str) -> Goal:
    if not 0 <= slot_index < SLOT_COUNTS[cadence]:
        raise ValueError(f"{cadence.value} slot_index must be in 0..{SLOT_COUNTS[cadence] - 1}")
    goal = db.get(Goal, (owner, cadence.value, slot_index))
    if goal:
        goal.title = title
    else:
        goal = Goal(user_id=owner, timeframe=cadence.value, slot_index=slot_index, title=title)
    db.add(goal)
    db.commit()
    return goal
