"""Attendance model for session check-ins.

This module defines the Attendance model which creates an immutable record
when a member checks in at the pool. Once written, an attendance row is
never updated or deleted.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.session import ClubSession


class CheckInMethod(str, Enum):
    QR = "QR"
    GPS = "GPS"
    MANUAL = "MANUAL"


class Attendance(SQLModel, table=True):
    """A record of a member's physical presence at a session.

    Attributes:
        id: Unique identifier (UUID).
        session_id: Foreign key to the ClubSession.
        user_id: Stable id of the member who checked in.
        checked_in_at: Server-observed check-in time.
        method: How the member checked in (QR, GPS or MANUAL).
        session: Reference to the parent ClubSession.
    """
    __table_args__ = (
        UniqueConstraint("session_id", "user_id", name="uq_attendance_session_user"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    session_id: UUID = Field(foreign_key="clubsession.id", index=True)
    user_id: str = Field(index=True)
    checked_in_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    method: CheckInMethod = Field(default=CheckInMethod.MANUAL)

    # Relationship
    session: Optional["ClubSession"] = Relationship(back_populates="attendances")
