from __future__ import annotations
from datetime import datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel

from app.services.catalogue import Cadence

DraftStatus = Literal["not_started", "active", "done"]

class DraftState(BaseModel):
    league_id: str
    status: DraftStatus
    pick_number: int                       # the NEXT pick to be made
    pick_deadline: Optional[datetime] = None
    on_the_clock: Optional[str] = None     # derived from roster + pick_number, never stored
    total_picks: int
    seconds_left: Optional[int] = None
    roster: List[str] = []

class DraftPick(BaseModel):
    league_id: str
    pick_number: int
    manager_id: str
    drafted_user_id: str
    timeframe: Cadence
    slot_index: int
    title: str
    created_at: datetime

class PickIn(BaseModel):
    owner_id: str
    cadence: str                           # validated against the catalogue, not here
    slot_index: int                        # negatives fall through to unknown_slot

class PickResult(BaseModel):
    ok: bool = True
    autopicked: bool = False
    pick: DraftPick
    state: DraftState

class BoardItem(BaseModel):
    owner_id: str
    cadence: Cadence
    slot_index: int
    title: str
    drafted: bool
    drafted_by: Optional[str] = None
    pick_number: Optional[int] = None

class DraftBoard(BaseModel):
    league_id: str
    status: DraftStatus
    groups: Dict[str, List[BoardItem]]

class DraftOrderRow(BaseModel):
    pick_number: int
    manager_id: Optional[str] = None
    pick: Optional[DraftPick] = None
    is_current: bool = False

class TeamSlot(BaseModel):
    cadence: Cadence
    roster_slot_index: int
    filled: bool
    owner_id: Optional[str] = None
    title: Optional[str] = None
    pick_number: Optional[int] = None

class ManagerTeam(BaseModel):
    league_id: str
    manager_id: str
    slots: List[TeamSlot]
    remaining: Dict[str, int]
