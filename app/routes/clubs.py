"""Club routes: nearby search, club detail and session scheduling."""
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session, SQLModel

from app.core.database import get_session
from app.core.errors import NotFoundError, Reason
from app.core.identity import get_current_user_id
from app.geo.distance import Coordinate
from app.geo.nearby import NearbyClub, search_nearby, validate_radius
from app.models import Club
from app.scheduling.sessions import create_session

router = APIRouter(prefix="/clubs", tags=["clubs"])


class SessionCreate(SQLModel):
    title: str
    description: str | None = None
    venue_id: UUID | None = None
    start_time: datetime
    end_time: datetime
    max_attendees: int | None = None


def _nearby_to_dict(hit: NearbyClub) -> dict:
    next_session = None
    if hit.next_session:
        next_session = {
            "id": hit.next_session.id,
            "title": hit.next_session.title,
            "start_time": hit.next_session.start_time,
        }
    return {
        **hit.club.model_dump(),
        "distance_km": hit.distance_km,
        "next_session": next_session,
    }


@router.get("/nearby")
async def nearby_clubs(
    lat: float,
    lng: float,
    radius: float | None = None,
    limit: int | None = None,
    welcomes_beginners: bool | None = None,
    is_verified: bool | None = None,
    session: Session = Depends(get_session),
):
    """
    Geospatial search for clubs near a point.

    Returns active clubs within ``radius`` km (default 50, max 500) of
    (lat, lng), nearest first, each annotated with its distance and next
    upcoming session. Optional boolean filters narrow by beginner
    friendliness and verification.
    """
    center = Coordinate(lat, lng)
    radius_km = validate_radius(radius)
    hits = search_nearby(
        session,
        center,
        radius_km=radius_km,
        limit=limit,
        welcomes_beginners=welcomes_beginners,
        is_verified=is_verified,
    )
    data = [_nearby_to_dict(hit) for hit in hits]
    return {
        "data": data,
        "search": {"lat": lat, "lng": lng, "radius": radius_km},
        "count": len(data),
    }


@router.get("/{club_id}")
async def club_detail(club_id: UUID, session: Session = Depends(get_session)):
    """Get a single club."""
    club = session.get(Club, club_id)
    if not club:
        raise NotFoundError("Club not found", Reason.CLUB_NOT_FOUND)
    return {"data": club}


@router.post("/{club_id}/sessions", status_code=201)
async def schedule_session(
    club_id: UUID,
    body: SessionCreate,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """
    Schedule a session for a club (club admin only).

    Returns 403 when the caller is not the club admin and 400 when the
    times, capacity or venue are invalid.
    """
    club_session = create_session(
        session,
        club_id,
        user_id,
        title=body.title,
        start_time=body.start_time,
        end_time=body.end_time,
        venue_id=body.venue_id,
        description=body.description,
        max_attendees=body.max_attendees,
    )
    return {"data": club_session, "message": "Session created successfully"}
