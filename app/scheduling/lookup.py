"""Session lookup shared by the RSVP, check-in and admin workflows."""
from uuid import UUID

from sqlmodel import Session, select

from app.core.errors import NotFoundError, Reason
from app.models import ClubSession


def load_session(db: Session, session_id: UUID, for_update: bool = False) -> ClubSession:
    """
    Fetch a session or raise NotFoundError.

    With ``for_update`` the row is locked (SELECT ... FOR UPDATE) until the
    transaction ends, serialising concurrent capacity checks on backends
    that support row locks. SQLite ignores it; there the transaction already
    holds the database write lock (see ``app.core.database``).
    """
    statement = select(ClubSession).where(ClubSession.id == session_id)
    if for_update:
        statement = statement.with_for_update()
    club_session = db.exec(statement).first()
    if not club_session:
        raise NotFoundError("Session not found", Reason.SESSION_NOT_FOUND)
    return club_session
