from datetime import datetime

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, Text, Integer, DateTime, UniqueConstraint, func

class Base(DeclarativeBase):
    pass

class LeagueMember(Base):
    __tablename__ = "league_members"
    league_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

class Goal(Base):
    """A user's goal in one cadence slot. Owned by the goals feature, read by the draft."""
    __tablename__ = "goals"
    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    timeframe: Mapped[str] = mapped_column(String(16), primary_key=True)  # weekly | monthly | yearly
    slot_index: Mapped[int] = mapped_column(Integer, primary_key=True)

    title: Mapped[str] = mapped_column(Text, default="")
    done_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

class DraftStateRow(Base):
    __tablename__ = "draft_state"
    league_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[str] = mapped_column(String(16), default="not_started")  # not_started | active | done
    pick_number: Mapped[int] = mapped_column(Integer, default=0)  # the NEXT pick to be made
    pick_deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

class DraftManager(Base):
    """Roster snapshot taken at draft start; snake order is computed from these rows."""
    __tablename__ = "draft_managers"
    league_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    manager_id: Mapped[str] = mapped_column(String(128), primary_key=True)

class DraftPick(Base):
    __tablename__ = "draft_picks"
    __table_args__ = (
        UniqueConstraint("league_id", "pick_number", name="uq_draft_picks_number"),
        UniqueConstraint("league_id", "drafted_user_id", "timeframe", "slot_index", name="uq_draft_picks_slot"),
    )
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    league_id: Mapped[str] = mapped_column(String(64), index=True)
    pick_number: Mapped[int] = mapped_column(Integer)
    manager_id: Mapped[str] = mapped_column(String(128))

    # the drafted goal slot
    drafted_user_id: Mapped[str] = mapped_column(String(128))
    timeframe: Mapped[str] = mapped_column(String(16))
    slot_index: Mapped[int] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
