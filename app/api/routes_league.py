# app/api/routes_league.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.core.errors import DraftError
from app.db.session import get_db
from app.deps import backend_unavailable, draft_http_error
from app.schemas.league import GoalSlotOut, GoalTitleIn, MemberIn, Members, SlotCatalogue
from app.services.catalogue import SLOT_COUNTS, Cadence, list_slots, set_goal_title
from app.services.roster import add_member, league_members, remove_member

router = APIRouter(prefix="/league", tags=["league"])


# ---------------- MEMBERS ----------------
@router.get("/{league_id}/members", response_model=Members)
def members_list(league_id: str, db: Session = Depends(get_db)):
    try:
        return {"league_id": league_id, "members": league_members(db, league_id)}
    except OperationalError:
        raise backend_unavailable()


@router.post("/{league_id}/members", response_model=Members)
def members_add(league_id: str, body: MemberIn, db: Session = Depends(get_db)):
    """
    Adds a manager. Rejected while the league's draft is running.
    """
    try:
        return {"league_id": league_id, "members": add_member(db, league_id, body.user_id)}
    except DraftError as e:
        raise draft_http_error(e)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except OperationalError:
        raise backend_unavailable()


@router.delete("/{league_id}/members/{user_id}", response_model=Members)
def members_remove(league_id: str, user_id: str, db: Session = Depends(get_db)):
    try:
        return {"league_id": league_id, "members": remove_member(db, league_id, user_id)}
    except DraftError as e:
        raise draft_http_error(e)
    except OperationalError:
        raise backend_unavailable()


# ---------------- SLOT CATALOGUE ----------------
@router.get("/{league_id}/slots", response_model=SlotCatalogue)
def league_slots(league_id: str, db: Session = Depends(get_db)):
    """
    Every draftable goal slot of the league's current members, in autopick order.
    """
    try:
        slots = list_slots(db, league_members(db, league_id))
    except OperationalError:
        raise backend_unavailable()
    return {
        "league_id": league_id,
        "slot_counts": {c.value: n for c, n in SLOT_COUNTS.items()},
        "items": [
            GoalSlotOut(owner_id=s.owner, cadence=s.cadence, slot_index=s.slot_index, title=s.title)
            for s in slots
        ],
    }


# ---------------- GOAL TITLES ----------------
goals_router = APIRouter(prefix="/goals", tags=["goals"])


@goals_router.put("/{owner_id}/{cadence}/{slot_index}", response_model=GoalSlotOut)
def goal_set_title(
    owner_id: str,
    cadence: Cadence,
    slot_index: int,
    body: GoalTitleIn,
    db: Session = Depends(get_db),
):
    """
    Sets the display title of a goal slot. Titles are free to change during a draft.
    """
    try:
        goal = set_goal_title(db, owner_id, cadence, slot_index, body.title)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except OperationalError:
        raise backend_unavailable()
    return GoalSlotOut(owner_id=goal.user_id, cadence=cadence, slot_index=goal.slot_index, title=goal.title)
