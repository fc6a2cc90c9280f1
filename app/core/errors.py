# app/core/errors.py
from __future__ import annotations


class DraftError(Exception):
    """Base for everything the draft layer raises on purpose."""

    reason: str = "draft_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def as_detail(self) -> dict:
        return {"reason": self.reason, "message": self.message}


class DraftValidationError(DraftError):
    """Request rejected against current state. Never retried; caller refreshes and re-decides."""


class DraftNotActive(DraftValidationError):
    reason = "not_active"


class SlotAlreadyDrafted(DraftValidationError):
    reason = "already_drafted"


class NotYourTurn(DraftValidationError):
    reason = "not_your_turn"


class UnknownSlot(DraftValidationError):
    reason = "unknown_slot"


class DeadlineNotExpired(DraftValidationError):
    reason = "not_expired"


class EmptyRoster(DraftValidationError):
    reason = "empty_roster"


class RosterLocked(DraftValidationError):
    reason = "roster_locked"


class DraftConflict(DraftError):
    """A concurrent writer committed first. Safe to re-fetch and retry."""

    reason = "conflict"
