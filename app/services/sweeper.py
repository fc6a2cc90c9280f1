# app/services/sweeper.py
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import DraftConflict, DraftValidationError
from app.db.models import DraftStateRow
from app.services.draft import autopick

logger = logging.getLogger(__name__)


def sweep_expired(session_factory: Callable[[], Session], now: Optional[datetime] = None) -> List[str]:
    """
    Autopick once for every active draft whose pick deadline has passed.
    Returns the league ids that advanced. Losing a race to a human pick is fine.
    """
    now = now or datetime.now(timezone.utc)
    advanced: List[str] = []
    with session_factory() as db:
        rows = db.execute(select(DraftStateRow).where(DraftStateRow.status == "active").order_by(DraftStateRow.league_id)).scalars().all()
        due = []
        for row in rows:
            deadline = row.pick_deadline
            if deadline is not None and deadline.tzinfo is None:
                deadline = deadline.replace(tzinfo=timezone.utc)
            if deadline is None or deadline <= now:
                due.append(row.league_id)

        for league_id in due:
            try:
                autopick(db, league_id, now=now, only_if_expired=True)
                advanced.append(league_id)
            except (DraftValidationError, DraftConflict) as e:
                logger.info("sweep skipped league=%s reason=%s", league_id, e.reason)
            except Exception:
                # one broken league must not starve the rest of the tick
                db.rollback()
                logger.warning("sweep failed league=%s", league_id, exc_info=True)
    return advanced


async def run_sweeper(session_factory: Callable[[], Session], interval: float, stop: asyncio.Event) -> None:
    logger.info("deadline sweeper running every %.1fs", interval)
    while not stop.is_set():
        try:
            await asyncio.to_thread(sweep_expired, session_factory)
        except Exception:
            logger.warning("deadline sweep failed", exc_info=True)
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval)
        except asyncio.TimeoutError:
            pass
    logger.info("deadline sweeper stopped")
