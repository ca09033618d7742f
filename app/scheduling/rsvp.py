"""RSVP workflow: set, withdraw and list a member's attendance intent.

Per (session, user) there is at most one Rsvp row. ``set_rsvp`` is an
upsert; the unique constraint on (session_id, user_id) is the backstop when
two requests for the same pair race past the existence check.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import case
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, func, select

from app.core.clock import as_utc, utcnow
from app.core.config import settings
from app.core.errors import ConflictError, NotFoundError, Reason, ValidationError
from app.models import Rsvp, RsvpStatus
from app.scheduling.lookup import load_session

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


@dataclass
class RsvpCounts:
    yes: int = 0
    no: int = 0
    maybe: int = 0

    @property
    def total(self) -> int:
        return self.yes + self.no + self.maybe

    def to_dict(self) -> dict:
        return {"yes": self.yes, "no": self.no, "maybe": self.maybe, "total": self.total}


def parse_status(status) -> RsvpStatus:
    if isinstance(status, RsvpStatus):
        return status
    try:
        return RsvpStatus(status)
    except ValueError:
        raise ValidationError(
            f"Status must be one of YES, NO, MAYBE, got {status!r}", Reason.INVALID_STATUS
        ) from None


def _validate_note(note: str | None) -> str | None:
    if note is None:
        return None
    if not isinstance(note, str) or len(note) > settings.rsvp_note_max_length:
        raise ValidationError(
            f"Note must be at most {settings.rsvp_note_max_length} characters",
            Reason.INVALID_NOTE,
        )
    return note


def _find_rsvp(db: Session, session_id: UUID, user_id: str) -> Rsvp | None:
    statement = (
        select(Rsvp)
        .where(Rsvp.session_id == session_id)
        .where(Rsvp.user_id == user_id)
    )
    return db.exec(statement).first()


def count_yes(db: Session, session_id: UUID, exclude_user_id: str | None = None) -> int:
    """Number of YES RSVPs for a session, optionally ignoring one member."""
    statement = (
        select(func.count(Rsvp.id))
        .where(Rsvp.session_id == session_id)
        .where(Rsvp.status == RsvpStatus.YES)
    )
    if exclude_user_id is not None:
        statement = statement.where(Rsvp.user_id != exclude_user_id)
    return db.exec(statement).one()


def set_rsvp(
    db: Session,
    session_id: UUID,
    user_id: str,
    status,
    note: str | None = None,
    now: datetime | None = None,
) -> Rsvp:
    """
    Create or update the caller's RSVP for an upcoming session.

    Moving into YES is subject to the session's capacity unless the member
    already holds YES, in which case only the note changes and the count is
    untouched.

    Raises:
        ValidationError: unknown status or note too long.
        NotFoundError: session does not exist.
        ConflictError: session cancelled, already started, or full.
    """
    status = parse_status(status)
    note = _validate_note(note)
    now = as_utc(now) if now else utcnow()

    club_session = load_session(db, session_id, for_update=status == RsvpStatus.YES)

    if club_session.is_cancelled:
        raise ConflictError("Cannot RSVP to a cancelled session", Reason.SESSION_CANCELLED)
    if as_utc(club_session.start_time) <= now:
        raise ConflictError("Cannot RSVP to a past session", Reason.SESSION_PAST)

    existing = _find_rsvp(db, session_id, user_id)

    if status == RsvpStatus.YES and club_session.max_attendees is not None:
        already_yes = existing is not None and existing.status == RsvpStatus.YES
        if not already_yes:
            taken = count_yes(db, session_id, exclude_user_id=user_id)
            if taken >= club_session.max_attendees:
                logger.info(
                    f"RSVP rejected, session {session_id} full "
                    f"({taken}/{club_session.max_attendees})"
                )
                raise ConflictError("Session is at maximum capacity", Reason.SESSION_FULL)

    if existing:
        rsvp = _update_rsvp(db, existing, status, note, now)
    else:
        rsvp = Rsvp(
            session_id=session_id,
            user_id=user_id,
            status=status,
            note=note,
            created_at=now,
            updated_at=now,
        )
        db.add(rsvp)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent request created the row first; apply ours as an update
            db.rollback()
            logger.warning(f"RSVP insert raced for session {session_id}, user {user_id}")
            existing = _find_rsvp(db, session_id, user_id)
            if existing is None:
                raise
            rsvp = _update_rsvp(db, existing, status, note, now)

    db.refresh(rsvp)
    logger.info(f"RSVP saved: session {session_id}, user {user_id}, status {status.value}")
    return rsvp


def _update_rsvp(
    db: Session, rsvp: Rsvp, status: RsvpStatus, note: str | None, now: datetime
) -> Rsvp:
    rsvp.status = status
    rsvp.note = note
    rsvp.updated_at = now
    db.add(rsvp)
    db.commit()
    return rsvp


def withdraw_rsvp(db: Session, session_id: UUID, user_id: str) -> None:
    """
    Delete the caller's RSVP.

    There is no timing rule: a member may withdraw after the session started.

    Raises:
        NotFoundError: the member has no RSVP for this session.
    """
    rsvp = _find_rsvp(db, session_id, user_id)
    if not rsvp:
        raise NotFoundError("No RSVP found for this session", Reason.RSVP_NOT_FOUND)

    db.delete(rsvp)
    db.commit()
    logger.info(f"RSVP withdrawn: session {session_id}, user {user_id}")


def get_rsvp(db: Session, session_id: UUID, user_id: str) -> Rsvp | None:
    """The caller's RSVP, or None. The session itself must exist."""
    load_session(db, session_id)
    return _find_rsvp(db, session_id, user_id)


def rsvp_counts(db: Session, session_id: UUID) -> RsvpCounts:
    statement = (
        select(Rsvp.status, func.count(Rsvp.id))
        .where(Rsvp.session_id == session_id)
        .group_by(Rsvp.status)
    )
    by_status = {status: count for status, count in db.exec(statement).all()}
    return RsvpCounts(
        yes=by_status.get(RsvpStatus.YES, 0),
        no=by_status.get(RsvpStatus.NO, 0),
        maybe=by_status.get(RsvpStatus.MAYBE, 0),
    )


def list_rsvps(
    db: Session,
    session_id: UUID,
    status=None,
    page: int = 1,
    page_size: int = 50,
) -> tuple[list[Rsvp], int]:
    """
    Page through a session's RSVPs.

    Ordered YES first, then MAYBE, then NO; newest first within a status.

    Returns:
        (rsvps on this page, total matching rsvps)
    """
    if page < 1 or page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise ValidationError(
            f"page must be >= 1 and page_size between 1 and {MAX_PAGE_SIZE}",
            Reason.INVALID_LIMIT,
        )
    load_session(db, session_id)

    filters = [Rsvp.session_id == session_id]
    if status is not None:
        filters.append(Rsvp.status == parse_status(status))

    total = db.exec(select(func.count(Rsvp.id)).where(*filters)).one()

    status_order = case(
        (Rsvp.status == RsvpStatus.YES, 0),
        (Rsvp.status == RsvpStatus.MAYBE, 1),
        else_=2,
    )
    statement = (
        select(Rsvp)
        .where(*filters)
        .order_by(status_order, Rsvp.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(db.exec(statement).all()), total
