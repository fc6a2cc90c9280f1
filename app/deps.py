from fastapi import Header, Query, HTTPException, status

from app.core.errors import DraftError

def get_manager_id(
    manager_id: str | None = Query(None, description="Acting manager id"),
    x_manager_id: str | None = Header(None, alias="X-Manager-Id"),
) -> str:
    """
    The manager acting on this request. Identity is explicit per request;
    there is no server-side "active user".
    """
    mid = (manager_id or x_manager_id or "").strip()
    if not mid:
        raise HTTPException(
            status_code=400,
            detail="manager_id is required (use ?manager_id=<id> or header X-Manager-Id: <id>)."
        )
    return mid


# reason -> HTTP status
DRAFT_ERROR_STATUS = {
    "not_active": status.HTTP_409_CONFLICT,
    "already_drafted": status.HTTP_409_CONFLICT,
    "not_your_turn": status.HTTP_403_FORBIDDEN,
    "unknown_slot": status.HTTP_400_BAD_REQUEST,
    "not_expired": status.HTTP_409_CONFLICT,
    "empty_roster": status.HTTP_400_BAD_REQUEST,
    "roster_locked": status.HTTP_409_CONFLICT,
    "conflict": status.HTTP_409_CONFLICT,
}

def draft_http_error(e: DraftError) -> HTTPException:
    return HTTPException(status_code=DRAFT_ERROR_STATUS.get(e.reason, 400), detail=e.as_detail())

def backend_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"reason": "backend_unavailable", "message": "Draft storage is unavailable. Try again shortly."},
    )
