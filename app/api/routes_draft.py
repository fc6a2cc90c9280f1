# app/api/routes_draft.py
from __future__ import annotations

import asyncio
import json
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.core.errors import DraftError
from app.db.session import get_db
from app.deps import backend_unavailable, draft_http_error, get_manager_id
from app.schemas.draft import DraftBoard, DraftOrderRow, DraftPick, DraftState, ManagerTeam, PickIn, PickResult
from app.services import board as board_svc
from app.services import draft as draft_svc
from app.services.events import events

router = APIRouter(prefix="/draft", tags=["draft"])

# seconds between SSE keepalive comments
KEEPALIVE_SECONDS = 15


# ---------------- STATE ----------------
@router.get("/{league_id}/state", response_model=DraftState)
def draft_state(league_id: str, db: Session = Depends(get_db)):
    try:
        return draft_svc.get_state(db, league_id)
    except OperationalError:
        raise backend_unavailable()


@router.get("/{league_id}/picks", response_model=List[DraftPick])
def draft_picks(league_id: str, db: Session = Depends(get_db)):
    try:
        return draft_svc.list_picks(db, league_id)
    except OperationalError:
        raise backend_unavailable()


# ---------------- COMMANDS ----------------
@router.post("/{league_id}/start", response_model=DraftState)
def draft_start(league_id: str, db: Session = Depends(get_db)):
    """
    Starts a fresh draft. Any existing picks for the league are discarded.
    """
    try:
        return draft_svc.start(db, league_id)
    except DraftError as e:
        raise draft_http_error(e)
    except OperationalError:
        raise backend_unavailable()


@router.post("/{league_id}/picks", response_model=PickResult)
def draft_make_pick(
    league_id: str,
    body: PickIn,
    db: Session = Depends(get_db),
    manager_id: str = Depends(get_manager_id),
):
    try:
        return draft_svc.make_pick(db, league_id, manager_id, body.owner_id, body.cadence, body.slot_index)
    except DraftError as e:
        raise draft_http_error(e)
    except OperationalError:
        raise backend_unavailable()


@router.post("/{league_id}/autopick", response_model=PickResult)
def draft_autopick(
    league_id: str,
    only_if_expired: bool = Query(default=False, description="No-op unless the current pick's deadline has passed"),
    db: Session = Depends(get_db),
):
    """
    Picks for the manager on the clock. Safe to call redundantly.
    """
    try:
        return draft_svc.autopick(db, league_id, only_if_expired=only_if_expired)
    except DraftError as e:
        raise draft_http_error(e)
    except OperationalError:
        raise backend_unavailable()


# ---------------- VIEWS ----------------
@router.get("/{league_id}/board", response_model=DraftBoard)
def draft_board(league_id: str, db: Session = Depends(get_db)):
    try:
        return board_svc.draft_board(db, league_id)
    except OperationalError:
        raise backend_unavailable()


@router.get("/{league_id}/order", response_model=List[DraftOrderRow])
def draft_order(league_id: str, db: Session = Depends(get_db)):
    try:
        return board_svc.draft_order_rows(db, league_id)
    except OperationalError:
        raise backend_unavailable()


@router.get("/{league_id}/team/{manager_id}", response_model=ManagerTeam)
def draft_team(league_id: str, manager_id: str, db: Session = Depends(get_db)):
    try:
        return board_svc.manager_team(db, league_id, manager_id)
    except OperationalError:
        raise backend_unavailable()


# ---------------- CHANGE FEED (SSE) ----------------
@router.get("/{league_id}/events")
async def draft_events(league_id: str, request: Request):
    """
    Server-Sent Events: one event per change ("state", "picks", "members").
    Payloads carry no state; re-fetch /state or /picks on receipt.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    # writers publish from threadpool threads
    unsubscribe = events.subscribe(league_id, lambda ev: loop.call_soon_threadsafe(queue.put_nowait, ev))

    async def _stream():
        try:
            yield "event: ready\ndata: {}\n\n"
            while not await request.is_disconnected():
                try:
                    ev = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                yield f"event: {ev['kind']}\ndata: {json.dumps(ev)}\n\n"
        finally:
            unsubscribe()

    return StreamingResponse(_stream(), media_type="text/event-stream", headers={"Cache-Control": "no-cache"})
