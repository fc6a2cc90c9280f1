# app/services/board.py
from __future__ import annotations
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.services.catalogue import SLOT_COUNTS, Cadence, list_slots
from app.services.draft import get_state, list_picks
from app.services.snake import draft_order


def _picks_by_slot(picks: List[Dict[str, Any]]) -> Dict[tuple, Dict[str, Any]]:
    return {(p["drafted_user_id"], p["timeframe"], p["slot_index"]): p for p in picks}


def draft_board(db: Session, league_id: str) -> Dict[str, Any]:
    """
    Every draftable goal of the league grouped by cadence, marked drafted/available.
    """
    state = get_state(db, league_id)
    picks = _picks_by_slot(list_picks(db, league_id))
    groups: Dict[str, List[Dict[str, Any]]] = {c.value: [] for c in Cadence}

    for slot in list_slots(db, state["roster"]):
        p = picks.get((slot.owner, slot.cadence.value, slot.slot_index))
        groups[slot.cadence.value].append({
            "owner_id": slot.owner,
            "cadence": slot.cadence.value,
            "slot_index": slot.slot_index,
            "title": slot.title,
            "drafted": p is not None,
            "drafted_by": p["manager_id"] if p else None,
            "pick_number": p["pick_number"] if p else None,
        })

    return {"league_id": league_id, "status": state["status"], "groups": groups}


def draft_order_rows(db: Session, league_id: str) -> List[Dict[str, Any]]:
    """One row per pick number: who owns it, what they took (if anything), and whether it's live."""
    state = get_state(db, league_id)
    by_number = {p["pick_number"]: p for p in list_picks(db, league_id)}
    rows = []
    for i, manager in enumerate(draft_order(state["roster"], state["total_picks"])):
        rows.append({
            "pick_number": i,
            "manager_id": manager,
            "pick": by_number.get(i),
            "is_current": state["status"] == "active" and state["pick_number"] == i,
        })
    return rows


def manager_team(db: Session, league_id: str, manager_id: str) -> Dict[str, Any]:
    """
    A manager's 7 roster slots (W1-3, M1-2, Y1-2). Drafted goals fill the
    first open slot of their cadence, in pick order.
    """
    mine = [p for p in list_picks(db, league_id) if p["manager_id"] == manager_id]

    slots: List[Dict[str, Any]] = []
    for cadence, count in SLOT_COUNTS.items():
        for i in range(count):
            slots.append({
                "cadence": cadence.value,
                "roster_slot_index": i,
                "filled": False,
                "owner_id": None,
                "title": None,
                "pick_number": None,
            })

    def _next_empty(cadence: str) -> Optional[Dict[str, Any]]:
        return next((s for s in slots if s["cadence"] == cadence and not s["filled"]), None)

    for p in mine:
        slot = _next_empty(p["timeframe"])
        if slot is None:
            continue
        slot.update(filled=True, owner_id=p["drafted_user_id"], title=p["title"], pick_number=p["pick_number"])

    remaining = {c.value: 0 for c in Cadence}
    for s in slots:
        if not s["filled"]:
            remaining[s["cadence"]] += 1

    return {"league_id": league_id, "manager_id": manager_id, "slots": slots, "remaining": remaining}
