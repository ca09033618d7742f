"""Session check-in.

A check-in is accepted from ``checkin_window_minutes`` before the session
starts until the same interval after it ends. Each member checks in at
most once per session; the resulting Attendance row is never changed.
"""
import logging
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.clock import as_utc, utcnow
from app.core.config import settings
from app.core.errors import AlreadyExistsError, ConflictError, Reason, ValidationError
from app.geo.distance import Coordinate, haversine_km
from app.models import Attendance, CheckInMethod
from app.scheduling.lookup import load_session

logger = logging.getLogger(__name__)


def parse_method(method) -> CheckInMethod:
    if isinstance(method, CheckInMethod):
        return method
    try:
        return CheckInMethod(method)
    except ValueError:
        raise ValidationError(
            f"Method must be one of QR, GPS, MANUAL, got {method!r}", Reason.INVALID_METHOD
        ) from None


def _find_attendance(db: Session, session_id: UUID, user_id: str) -> Attendance | None:
    statement = (
        select(Attendance)
        .where(Attendance.session_id == session_id)
        .where(Attendance.user_id == user_id)
    )
    return db.exec(statement).first()


def check_in(
    db: Session,
    session_id: UUID,
    user_id: str,
    method=CheckInMethod.MANUAL,
    coordinate: Coordinate | None = None,
    now: datetime | None = None,
) -> Attendance:
    """
    Record the caller's physical attendance at a session.

    For GPS check-ins the submitted position must be within
    ``gps_checkin_radius_km`` of the venue. The check is skipped when the
    session has no venue or no position was submitted; QR and MANUAL
    check-ins never use it.

    Raises:
        ValidationError: unknown method.
        NotFoundError: session does not exist.
        ConflictError: cancelled, outside the window, already checked in,
            or too far from the venue.
    """
    method = parse_method(method)
    now = as_utc(now) if now else utcnow()

    club_session = load_session(db, session_id)

    if club_session.is_cancelled:
        raise ConflictError(
            "Cannot check in to a cancelled session", Reason.SESSION_CANCELLED
        )

    window = timedelta(minutes=settings.checkin_window_minutes)
    opens_at = as_utc(club_session.start_time) - window
    closes_at = as_utc(club_session.end_time) + window

    if now < opens_at:
        raise ConflictError(
            f"Check-in is not open yet. Check-in opens "
            f"{settings.checkin_window_minutes} minutes before the session.",
            Reason.CHECKIN_NOT_OPEN,
        )
    if now > closes_at:
        raise ConflictError("Check-in window has closed", Reason.CHECKIN_CLOSED)

    if _find_attendance(db, session_id, user_id):
        raise ConflictError(
            "Already checked in to this session", Reason.ALREADY_CHECKED_IN
        )

    venue = club_session.venue
    if method == CheckInMethod.GPS and coordinate is not None and venue is not None:
        distance = haversine_km(coordinate, Coordinate(venue.latitude, venue.longitude))
        if distance > settings.gps_checkin_radius_km:
            logger.info(
                f"GPS check-in rejected for session {session_id}: "
                f"{distance:.3f} km from venue"
            )
            raise ConflictError(
                "You are too far from the venue for GPS check-in",
                Reason.TOO_FAR_FROM_VENUE,
            )

    attendance = Attendance(
        session_id=session_id,
        user_id=user_id,
        checked_in_at=now,
        method=method,
    )
    db.add(attendance)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Duplicate check-in raced for session {session_id}, user {user_id}")
        raise AlreadyExistsError(
            "Already checked in to this session", Reason.ALREADY_CHECKED_IN
        ) from None

    db.refresh(attendance)
    logger.info(
        f"Checked in: session {session_id}, user {user_id}, method {method.value}"
    )
    return attendance
