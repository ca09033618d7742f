"""Session detail and club-admin operations.

Sessions are created, rescheduled and cancelled by the club's admin. A
future session is never deleted: cancelling it keeps the RSVP history and
blocks new RSVPs and check-ins.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from sqlmodel import Session, func, select

from app.core.clock import as_utc, utcnow
from app.core.config import settings
from app.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    Reason,
    ValidationError,
)
from app.models import Attendance, Club, ClubSession, Venue
from app.scheduling.lookup import load_session
from app.scheduling.rsvp import RsvpCounts, rsvp_counts

logger = logging.getLogger(__name__)


@dataclass
class SessionDetail:
    session: ClubSession
    rsvp_counts: RsvpCounts
    attendance_count: int


def session_detail(db: Session, session_id: UUID) -> SessionDetail:
    club_session = load_session(db, session_id)
    return SessionDetail(
        session=club_session,
        rsvp_counts=rsvp_counts(db, session_id),
        attendance_count=_attendance_count(db, session_id),
    )


def _attendance_count(db: Session, session_id: UUID) -> int:
    return db.exec(
        select(func.count(Attendance.id)).where(Attendance.session_id == session_id)
    ).one()


def _require_club_admin(db: Session, club_id: UUID, user_id: str) -> Club:
    club = db.get(Club, club_id)
    if not club:
        raise NotFoundError("Club not found", Reason.CLUB_NOT_FOUND)
    if club.admin_user_id != user_id:
        raise PermissionDeniedError(
            "Only the club admin can manage sessions", Reason.NOT_CLUB_ADMIN
        )
    return club


def _validate_times(
    start_time: datetime, end_time: datetime, now: datetime
) -> tuple[datetime, datetime]:
    if not isinstance(start_time, datetime) or not isinstance(end_time, datetime):
        raise ValidationError("Start and end time are required", Reason.INVALID_TIMES)
    start_time, end_time = as_utc(start_time), as_utc(end_time)
    if end_time <= start_time:
        raise ValidationError("End time must be after start time", Reason.INVALID_TIMES)
    if start_time <= now:
        raise ValidationError("Start time must be in the future", Reason.INVALID_TIMES)
    return start_time, end_time


def create_session(
    db: Session,
    club_id: UUID,
    user_id: str,
    title: str,
    start_time: datetime,
    end_time: datetime,
    venue_id: UUID | None = None,
    description: str | None = None,
    max_attendees: int | None = None,
    now: datetime | None = None,
) -> ClubSession:
    """
    Schedule a new session for a club.

    Raises:
        NotFoundError: club does not exist.
        PermissionDeniedError: caller is not the club admin.
        ValidationError: bad times, capacity or venue.
    """
    now = as_utc(now) if now else utcnow()
    _require_club_admin(db, club_id, user_id)

    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required", Reason.INVALID_TITLE)
    start_time, end_time = _validate_times(start_time, end_time, now)
    if max_attendees is not None and (
        isinstance(max_attendees, bool) or not isinstance(max_attendees, int) or max_attendees <= 0
    ):
        raise ValidationError("Max attendees must be a positive integer", Reason.INVALID_CAPACITY)

    if venue_id is not None:
        venue = db.get(Venue, venue_id)
        if not venue or venue.club_id != club_id:
            raise ValidationError("Invalid venue for this club", Reason.INVALID_VENUE)

    club_session = ClubSession(
        club_id=club_id,
        venue_id=venue_id,
        title=title,
        description=description,
        start_time=start_time,
        end_time=end_time,
        max_attendees=max_attendees,
    )
    db.add(club_session)
    db.commit()
    db.refresh(club_session)

    logger.info(f"Session created: {club_session.title} ({club_session.id}) for club {club_id}")
    return club_session


def reschedule_session(
    db: Session,
    session_id: UUID,
    user_id: str,
    start_time: datetime,
    end_time: datetime,
    now: datetime | None = None,
) -> ClubSession:
    """Move a session to new future start/end times. Cancelled sessions stay cancelled."""
    now = as_utc(now) if now else utcnow()
    club_session = load_session(db, session_id)
    _require_club_admin(db, club_session.club_id, user_id)

    if club_session.is_cancelled:
        raise ConflictError(
            "Cannot reschedule a cancelled session", Reason.SESSION_CANCELLED
        )
    start_time, end_time = _validate_times(start_time, end_time, now)

    club_session.start_time = start_time
    club_session.end_time = end_time
    db.add(club_session)
    db.commit()
    db.refresh(club_session)

    logger.info(f"Session rescheduled: {club_session.id} now {start_time} - {end_time}")
    return club_session


def cancel_session(
    db: Session,
    session_id: UUID,
    user_id: str,
    reason: str | None = None,
    now: datetime | None = None,
) -> ClubSession:
    """
    Cancel an upcoming session.

    Once the check-in window has opened, or anyone has checked in, the
    session is part of the attendance record and cannot be cancelled.
    """
    now = as_utc(now) if now else utcnow()
    club_session = load_session(db, session_id)
    _require_club_admin(db, club_session.club_id, user_id)

    if club_session.is_cancelled:
        raise ConflictError("Session is already cancelled", Reason.SESSION_CANCELLED)
    if as_utc(club_session.start_time) <= now:
        raise ConflictError("Cannot cancel a past session", Reason.SESSION_PAST)
    window = timedelta(minutes=settings.checkin_window_minutes)
    if now >= as_utc(club_session.start_time) - window:
        raise ConflictError(
            "Cannot cancel a session once check-in has opened", Reason.CHECKIN_OPEN
        )
    if _attendance_count(db, session_id):
        raise ConflictError(
            "Cannot cancel a session with recorded check-ins", Reason.ATTENDANCE_RECORDED
        )

    club_session.is_cancelled = True
    club_session.cancel_reason = reason or "Cancelled by admin"
    db.add(club_session)
    db.commit()
    db.refresh(club_session)

    logger.info(f"Session cancelled: {club_session.id} ({club_session.cancel_reason})")
    return club_session
