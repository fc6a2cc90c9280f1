# app/services/draft.py
"""
Draft scheduler: snake-order allocation of goal slots to league managers.

State lives in `draft_state` (one row per league) and `draft_picks` (one row per
committed pick). Only `start`, `make_pick` and `autopick` write; every write
broadcasts a change event after commit. Deadlines are advisory: nothing here
advances a stalled draft unless `autopick` is called.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import (
    DraftConflict,
    DraftNotActive,
    EmptyRoster,
    DeadlineNotExpired,
    NotYourTurn,
    SlotAlreadyDrafted,
    UnknownSlot,
)
from app.db.models import DraftManager, DraftPick, DraftStateRow
from app.services.catalogue import (
    PICKS_PER_MANAGER,
    Cadence,
    SlotKey,
    goal_titles,
    is_known_slot,
    parse_cadence,
    placeholder_title,
    slot_keys,
)
from app.services.events import events
from app.services.roster import frozen_roster, league_members
from app.services.snake import manager_on_clock

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(dt: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if dt is None:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _pick_budget() -> timedelta:
    return timedelta(seconds=settings.DRAFT_PICK_SECONDS)


def _load_state(db: Session, league_id: str) -> Optional[DraftStateRow]:
    # always re-read; another writer may have advanced the draft since this session last looked
    return db.get(DraftStateRow, league_id, populate_existing=True)


def _drafted_keys(db: Session, league_id: str) -> Set[SlotKey]:
    rows = db.execute(
        select(DraftPick.drafted_user_id, DraftPick.timeframe, DraftPick.slot_index)
        .where(DraftPick.league_id == league_id)
    ).all()
    return {(owner, Cadence(tf), idx) for owner, tf, idx in rows}


def _not_active(state: Optional[DraftStateRow]) -> DraftNotActive:
    status = state.status if state else "not_started"
    if status == "done":
        return DraftNotActive("Draft is done. Start a new draft to pick again.")
    return DraftNotActive("Draft is not running. Start it first.")


# ---------------- reads ----------------

def get_state(db: Session, league_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Current draft state plus derived fields (who is on the clock, seconds left).
    A league that never started reports not_started / pick 0 against its live membership.
    """
    now = now or _utcnow()
    state = _load_state(db, league_id)

    if state is None or state.status == "not_started":
        roster = league_members(db, league_id)
        status, pick_number, deadline = "not_started", 0, None
    else:
        roster = frozen_roster(db, league_id)
        status, pick_number, deadline = state.status, state.pick_number, _aware(state.pick_deadline)

    seconds_left = None
    if deadline is not None:
        seconds_left = max(0, math.ceil((deadline - now).total_seconds()))

    return {
        "league_id": league_id,
        "status": status,
        "pick_number": pick_number,
        "pick_deadline": deadline,
        "on_the_clock": manager_on_clock(roster, pick_number) if status == "active" else None,
        "total_picks": len(roster) * PICKS_PER_MANAGER,
        "seconds_left": seconds_left,
        "roster": roster,
    }


def _pick_dict(p: DraftPick, titles: Dict[SlotKey, str]) -> Dict[str, Any]:
    key = (p.drafted_user_id, Cadence(p.timeframe), p.slot_index)
    return {
        "league_id": p.league_id,
        "pick_number": p.pick_number,
        "manager_id": p.manager_id,
        "drafted_user_id": p.drafted_user_id,
        "timeframe": p.timeframe,
        "slot_index": p.slot_index,
        "title": titles.get(key) or placeholder_title(p.slot_index),
        "created_at": _aware(p.created_at),
    }


def list_picks(db: Session, league_id: str) -> List[Dict[str, Any]]:
    """Committed picks in pick order. Always a gap-free prefix 0..n-1."""
    rows = db.execute(
        select(DraftPick).where(DraftPick.league_id == league_id).order_by(DraftPick.pick_number)
    ).scalars().all()
    titles = goal_titles(db, {p.drafted_user_id for p in rows})
    return [_pick_dict(p, titles) for p in rows]


# ---------------- writes ----------------

def start(db: Session, league_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Start (or restart) the league's draft: discards every prior pick,
    freezes the current membership as the draft roster and puts pick 0 on the clock.
    """
    now = now or _utcnow()
    roster = league_members(db, league_id)
    if not roster:
        raise EmptyRoster("League has no members. Add managers before starting the draft.")

    try:
        db.execute(delete(DraftPick).where(DraftPick.league_id == league_id))
        db.execute(delete(DraftManager).where(DraftManager.league_id == league_id))
        db.add_all([DraftManager(league_id=league_id, manager_id=m) for m in roster])

        state = _load_state(db, league_id)
        if state is None:
            state = DraftStateRow(league_id=league_id)
            db.add(state)
        state.status = "active"
        state.pick_number = 0
        state.pick_deadline = now + _pick_budget()
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("draft start raced another start league=%s", league_id)
        raise DraftConflict("Draft was started concurrently. Refresh and try again.")

    logger.info("draft started league=%s managers=%d", league_id, len(roster))
    events.publish(league_id, "picks")
    events.publish(league_id, "state")
    return get_state(db, league_id, now=now)


def _commit_pick(
    db: Session,
    league_id: str,
    expected_pick: int,
    roster_size: int,
    manager_id: str,
    slot: SlotKey,
    now: datetime,
) -> Dict[str, Any]:
    """
    Compare-and-swap the cursor from `expected_pick` to the next pick, then record the pick,
    in one transaction. Losing the swap means another pick landed first.
    """
    owner, cadence, slot_index = slot
    next_pick = expected_pick + 1
    if next_pick < roster_size * PICKS_PER_MANAGER:
        values = {"pick_number": next_pick, "pick_deadline": now + _pick_budget()}
    else:
        values = {"pick_number": next_pick, "status": "done", "pick_deadline": None}

    result = db.execute(
        update(DraftStateRow)
        .where(
            DraftStateRow.league_id == league_id,
            DraftStateRow.status == "active",
            DraftStateRow.pick_number == expected_pick,
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        logger.warning("pick conflict league=%s pick=%d manager=%s", league_id, expected_pick, manager_id)
        raise DraftConflict("Another pick was committed first. Refresh and try again.")

    pick = DraftPick(
        league_id=league_id,
        pick_number=expected_pick,
        manager_id=manager_id,
        drafted_user_id=owner,
        timeframe=cadence.value,
        slot_index=slot_index,
        created_at=now,
    )
    db.add(pick)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("pick conflict on insert league=%s pick=%d", league_id, expected_pick)
        raise DraftConflict("Another pick was committed first. Refresh and try again.")

    logger.info(
        "pick committed league=%s pick=%d manager=%s slot=%s/%s/%d",
        league_id, expected_pick, manager_id, owner, cadence.value, slot_index,
    )
    events.publish(league_id, "picks")
    events.publish(league_id, "state")

    titles = goal_titles(db, [owner])
    return {"pick": _pick_dict(pick, titles), "state": get_state(db, league_id, now=now)}


def make_pick(
    db: Session,
    league_id: str,
    manager_id: str,
    owner_id: str,
    cadence: str | Cadence,
    slot_index: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    `manager_id` drafts the goal slot (owner_id, cadence, slot_index).
    Checked in order: draft active, slot not yet drafted, manager on the clock, slot exists.
    Rejections never touch state.
    """
    now = now or _utcnow()
    state = _load_state(db, league_id)
    if state is None or state.status != "active":
        raise _not_active(state)

    cad = parse_cadence(cadence)
    if cad is not None and (owner_id, cad, slot_index) in _drafted_keys(db, league_id):
        raise SlotAlreadyDrafted("That goal is already drafted.")

    roster = frozen_roster(db, league_id)
    on_clock = manager_on_clock(roster, state.pick_number)
    if on_clock != manager_id:
        raise NotYourTurn(f"Not your turn. On the clock: {on_clock}.")

    if cad is None or not is_known_slot(roster, owner_id, cad, slot_index):
        raise UnknownSlot(f"No draftable goal slot {owner_id}/{cadence}/{slot_index} in this league.")

    return _commit_pick(db, league_id, state.pick_number, len(roster), manager_id, (owner_id, cad, slot_index), now)


def autopick(
    db: Session,
    league_id: str,
    now: Optional[datetime] = None,
    only_if_expired: bool = False,
) -> Dict[str, Any]:
    """
    Pick for whoever is on the clock: the lowest undrafted slot by
    (owner, cadence weekly<monthly<yearly, slot_index). Same input state, same pick,
    so racing callers can only collide on the commit, never disagree on the choice.
    """
    now = now or _utcnow()
    state = _load_state(db, league_id)
    if state is None or state.status != "active":
        raise _not_active(state)

    deadline = _aware(state.pick_deadline)
    if only_if_expired and deadline is not None and deadline > now:
        raise DeadlineNotExpired("The current pick is still on the clock.")

    pick_number = state.pick_number
    roster = frozen_roster(db, league_id)
    on_clock = manager_on_clock(roster, pick_number)
    drafted = _drafted_keys(db, league_id)
    choice = next((k for k in slot_keys(roster) if k not in drafted), None)
    if on_clock is None or choice is None:
        # active with nothing left to draft would mean the done transition was skipped
        raise RuntimeError(f"draft state inconsistent for league {league_id}: active with nothing to pick")

    result = _commit_pick(db, league_id, pick_number, len(roster), on_clock, choice, now)
    result["autopicked"] = True
    logger.info("autopick league=%s pick=%d manager=%s", league_id, pick_number, on_clock)
    return result
