from typing import Dict, List
from pydantic import BaseModel, Field

from app.services.catalogue import Cadence

class Members(BaseModel):
    league_id: str
    members: List[str]

class MemberIn(BaseModel):
    user_id: str = Field(min_length=1, max_length=128)

class GoalSlotOut(BaseModel):
    owner_id: str
    cadence: Cadence
    slot_index: int
    title: str

class GoalTitleIn(BaseModel):
    title: str = Field(max_length=500)

class SlotCatalogue(BaseModel):
    league_id: str
    slot_counts: Dict[str, int]
    items: List[GoalSlotOut]
