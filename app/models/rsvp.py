"""RSVP model for a member's intent to attend a session.

There is at most one Rsvp per (session, user). The table constraint is
what guarantees it; the workflow in ``app.scheduling.rsvp`` upserts against
it and treats a violation as a lost race rather than a failure.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.session import ClubSession


class RsvpStatus(str, Enum):
    YES = "YES"
    NO = "NO"
    MAYBE = "MAYBE"


class Rsvp(SQLModel, table=True):
    """A member's RSVP to a session.

    Attributes:
        id: Unique identifier (UUID).
        session_id: Foreign key to the ClubSession.
        user_id: Stable id of the member, from the identity provider.
        status: YES, NO or MAYBE. Only YES counts toward capacity.
        note: Optional free text ("bringing a spare stick").
        created_at: When the RSVP was first submitted.
        updated_at: When the status or note last changed.
    """
    __table_args__ = (
        UniqueConstraint("session_id", "user_id", name="uq_rsvp_session_user"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    session_id: UUID = Field(foreign_key="clubsession.id", index=True)
    user_id: str = Field(index=True)
    status: RsvpStatus
    note: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationship
    session: Optional["ClubSession"] = Relationship(back_populates="rsvps")
