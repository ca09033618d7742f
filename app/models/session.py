"""Club session model.

A session is a scheduled club event (training, scrimmage, pickup game).
Club admins create, reschedule and cancel sessions; members RSVP to them
and check in when they arrive at the pool. Future sessions are cancelled
rather than deleted so their RSVP history is preserved.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.attendance import Attendance
    from app.models.club import Club, Venue
    from app.models.rsvp import Rsvp


class ClubSession(SQLModel, table=True):
    """A scheduled club event.

    Attributes:
        id: Unique identifier (UUID).
        club_id: Foreign key to the organising Club.
        venue_id: Optional foreign key to the Venue; sessions without a
            venue skip the GPS proximity check on check-in.
        title: Short display title.
        description: Free-text details.
        start_time: When the session starts (UTC). Always before end_time.
        end_time: When the session ends (UTC).
        is_cancelled: Cancelled sessions accept no RSVPs or check-ins.
        cancel_reason: Optional explanation shown to members.
        max_attendees: Capacity for YES RSVPs; None means unlimited.
        created_at: When the session was scheduled.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    club_id: UUID = Field(foreign_key="club.id", index=True)
    venue_id: UUID | None = Field(default=None, foreign_key="venue.id")
    title: str
    description: str | None = None
    start_time: datetime = Field(index=True)
    end_time: datetime
    is_cancelled: bool = Field(default=False)
    cancel_reason: str | None = None
    max_attendees: int | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationships
    club: Optional["Club"] = Relationship(back_populates="sessions")
    venue: Optional["Venue"] = Relationship()
    rsvps: list["Rsvp"] = Relationship(back_populates="session")
    attendances: list["Attendance"] = Relationship(back_populates="session")
