"""Club and venue models.

Clubs are the entities returned by the nearby search. Their lifecycle
(creation, verification, deactivation) is managed by the directory part of
the platform; this service only reads them. Venues are the pools a club
plays at and give sessions their location for GPS check-in.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.session import ClubSession


class Club(SQLModel, table=True):
    """An underwater-hockey club listed in the directory.

    Attributes:
        id: Unique identifier (UUID).
        name: Display name.
        slug: URL-safe unique name.
        city: City the club is based in.
        country: Country the club is based in.
        latitude: Club location latitude in decimal degrees.
        longitude: Club location longitude in decimal degrees.
        is_active: Inactive clubs never appear in search results.
        welcomes_beginners: Searchable flag for clubs that run intro sessions.
        is_verified: Searchable flag set by platform moderators.
        admin_user_id: Identity of the user allowed to manage the club's sessions.
        created_at: When the club was listed.
        venues: Pools the club uses.
        sessions: Sessions scheduled by the club.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    slug: str = Field(index=True, unique=True)
    city: str | None = None
    country: str | None = None
    latitude: float = Field(index=True)
    longitude: float = Field(index=True)
    is_active: bool = Field(default=True)
    welcomes_beginners: bool = Field(default=False)
    is_verified: bool = Field(default=False)
    admin_user_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationships
    venues: list["Venue"] = Relationship(back_populates="club")
    sessions: list["ClubSession"] = Relationship(back_populates="club")


class Venue(SQLModel, table=True):
    """A pool where a club holds sessions."""
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    club_id: UUID = Field(foreign_key="club.id", index=True)
    name: str
    address: str | None = None
    latitude: float
    longitude: float

    # Relationships
    club: Optional[Club] = Relationship(back_populates="venues")
