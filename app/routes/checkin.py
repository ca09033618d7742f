"""Check-in route."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session, SQLModel

from app.core.database import get_session
from app.core.identity import get_current_user_id
from app.geo.distance import Coordinate
from app.scheduling.checkin import check_in

router = APIRouter(prefix="/sessions/{session_id}", tags=["checkin"])


class CheckInRequest(SQLModel):
    method: str = "MANUAL"
    latitude: float | None = None
    longitude: float | None = None


@router.post("/checkin", status_code=201)
async def checkin(
    session_id: UUID,
    body: CheckInRequest | None = None,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """
    Check in to a session.

    Open from 30 minutes before the start until 30 minutes after the end.
    GPS check-ins that include a position must be within 500 m of the
    venue. A second check-in for the same session returns 409.
    """
    body = body or CheckInRequest()
    coordinate = None
    if body.latitude is not None and body.longitude is not None:
        coordinate = Coordinate(body.latitude, body.longitude)

    attendance = check_in(session, session_id, user_id, body.method, coordinate)
    return {"data": attendance, "message": "Checked in successfully"}
