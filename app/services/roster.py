from __future__ import annotations
from typing import List
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import RosterLocked
from app.db.models import DraftManager, DraftStateRow, LeagueMember
from app.services.events import events

def league_members(db: Session, league_id: str) -> List[str]:
    """Current league membership, ascending and deduplicated."""
    rows = db.execute(select(LeagueMember.user_id).where(LeagueMember.league_id == league_id)).scalars().all()
    return sorted(set(rows))

def frozen_roster(db: Session, league_id: str) -> List[str]:
    """Roster captured at draft start. Snake order is always computed from this."""
    rows = db.execute(select(DraftManager.manager_id).where(DraftManager.league_id == league_id)).scalars().all()
    return sorted(set(rows))

def _ensure_unlocked(db: Session, league_id: str) -> None:
    state = db.get(DraftStateRow, league_id)
    if state and state.status == "active":
        raise RosterLocked("League roster is locked while the draft is running.")

def add_member(db: Session, league_id: str, user_id: str) -> List[str]:
    user_id = user_id.strip()
    if not user_id:
        raise ValueError("user_id must not be empty")
    _ensure_unlocked(db, league_id)
    if db.get(LeagueMember, (league_id, user_id)) is None:
        db.add(LeagueMember(league_id=league_id, user_id=user_id))
        db.commit()
        events.publish(league_id, "members")
    return league_members(db, league_id)

def remove_member(db: Session, league_id: str, user_id: str) -> List[str]:
    _ensure_unlocked(db, league_id)
    existing = db.get(LeagueMember, (league_id, user_id))
    if existing is not None:
        db.delete(existing)
        db.commit()
        events.publish(league_id, "members")
    return league_members(db, league_id)
