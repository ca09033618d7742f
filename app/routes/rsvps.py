"""RSVP routes for the current member's attendance intent."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session, SQLModel

from app.core.database import get_session
from app.core.identity import get_current_user_id
from app.scheduling.rsvp import get_rsvp, list_rsvps, rsvp_counts, set_rsvp, withdraw_rsvp

router = APIRouter(prefix="/sessions/{session_id}", tags=["rsvps"])


class RsvpRequest(SQLModel):
    status: str
    note: str | None = None


@router.get("/rsvp")
async def my_rsvp(
    session_id: UUID,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Get the current member's RSVP for this session (``data`` is null if none)."""
    rsvp = get_rsvp(session, session_id, user_id)
    if rsvp is None:
        return {"data": None, "message": "No RSVP found"}
    return {"data": rsvp}


@router.post("/rsvp")
async def save_rsvp(
    session_id: UUID,
    body: RsvpRequest,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """
    Create or update the current member's RSVP (YES, NO or MAYBE).

    Returns 409 with reason ``session_full``, ``session_cancelled`` or
    ``session_past`` when the session cannot take the RSVP.
    """
    rsvp = set_rsvp(session, session_id, user_id, body.status, body.note)
    return {"data": rsvp, "message": "RSVP saved successfully"}


@router.delete("/rsvp")
async def remove_rsvp(
    session_id: UUID,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Withdraw the current member's RSVP. Returns 404 if there is none."""
    withdraw_rsvp(session, session_id, user_id)
    return {"message": "RSVP removed successfully"}


@router.get("/rsvps")
async def session_rsvps(
    session_id: UUID,
    status: str | None = None,
    page: int = 1,
    page_size: int = 50,
    session: Session = Depends(get_session),
):
    """
    List all RSVPs for a session.

    YES first, then MAYBE, then NO. Includes per-status counts and
    pagination metadata.
    """
    rsvps, total = list_rsvps(session, session_id, status=status, page=page, page_size=page_size)
    return {
        "data": rsvps,
        "counts": rsvp_counts(session, session_id).to_dict(),
        "pagination": {
            "page": page,
            "page_size": page_size,
            "total": total,
            "total_pages": -(-total // page_size),
        },
    }
