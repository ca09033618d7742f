"""Session routes for viewing and administering scheduled sessions."""
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session, SQLModel

from app.core.database import get_session
from app.core.identity import get_current_user_id
from app.scheduling.sessions import cancel_session, reschedule_session, session_detail

router = APIRouter(prefix="/sessions", tags=["sessions"])


class SessionReschedule(SQLModel):
    start_time: datetime
    end_time: datetime


class SessionCancel(SQLModel):
    reason: str | None = None


@router.get("/{session_id}")
async def get_session_detail(session_id: UUID, session: Session = Depends(get_session)):
    """
    Get a single session.

    Includes RSVP counts by status and the number of members checked in.
    Individual RSVPs are listed by ``GET /sessions/{id}/rsvps``.
    """
    detail = session_detail(session, session_id)
    return {
        "data": {
            **detail.session.model_dump(),
            "rsvp_counts": detail.rsvp_counts.to_dict(),
            "attendance_count": detail.attendance_count,
        }
    }


@router.patch("/{session_id}")
async def update_session_times(
    session_id: UUID,
    body: SessionReschedule,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Reschedule a session (club admin only)."""
    club_session = reschedule_session(
        session, session_id, user_id, body.start_time, body.end_time
    )
    return {"data": club_session, "message": "Session updated successfully"}


@router.post("/{session_id}/cancel")
async def cancel(
    session_id: UUID,
    body: SessionCancel | None = None,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """
    Cancel an upcoming session (club admin only).

    The session is kept with ``is_cancelled`` set so its RSVP history
    survives. Sessions that already started cannot be cancelled.
    """
    reason = body.reason if body else None
    club_session = cancel_session(session, session_id, user_id, reason=reason)
    return {"data": club_session, "message": "Session cancelled successfully"}
