"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.core.database import get_session
from app.main import app
from app.models import Club, ClubSession, Venue

ADMIN_ID = "user_admin"
MEMBER_ID = "user_member"

SYDNEY = (-33.8688, 151.2093)


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Create a test client with the test database session."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="now")
def now_fixture() -> datetime:
    return datetime.now(UTC).replace(microsecond=0)


def make_club(session: Session, name: str, lat: float, lng: float, **kwargs) -> Club:
    club = Club(
        name=name,
        slug=kwargs.pop("slug", name.lower().replace(" ", "-")),
        latitude=lat,
        longitude=lng,
        admin_user_id=kwargs.pop("admin_user_id", ADMIN_ID),
        **kwargs,
    )
    session.add(club)
    session.commit()
    session.refresh(club)
    return club


def make_session(
    session: Session,
    club: Club,
    start_time: datetime,
    duration: timedelta = timedelta(hours=2),
    **kwargs,
) -> ClubSession:
    club_session = ClubSession(
        id=uuid4(),
        club_id=club.id,
        title=kwargs.pop("title", "Tuesday Training"),
        start_time=start_time,
        end_time=start_time + duration,
        **kwargs,
    )
    session.add(club_session)
    session.commit()
    session.refresh(club_session)
    return club_session


@pytest.fixture(name="club")
def club_fixture(session: Session) -> Club:
    """A Sydney club administered by ADMIN_ID."""
    return make_club(session, "Sydney Stingrays", *SYDNEY, city="Sydney", country="AU")


@pytest.fixture(name="venue")
def venue_fixture(session: Session, club: Club) -> Venue:
    venue = Venue(
        club_id=club.id,
        name="Andrew Boy Charlton Pool",
        latitude=SYDNEY[0],
        longitude=SYDNEY[1],
    )
    session.add(venue)
    session.commit()
    session.refresh(venue)
    return venue


@pytest.fixture(name="upcoming_session")
def upcoming_session_fixture(session: Session, club: Club, venue: Venue, now: datetime) -> ClubSession:
    """A session starting tomorrow with room for two YES RSVPs."""
    return make_session(
        session,
        club,
        now + timedelta(days=1),
        venue_id=venue.id,
        max_attendees=2,
    )


@pytest.fixture(name="cancelled_session")
def cancelled_session_fixture(session: Session, club: Club, now: datetime) -> ClubSession:
    return make_session(
        session,
        club,
        now + timedelta(days=2),
        is_cancelled=True,
        cancel_reason="Pool closed",
    )


@pytest.fixture(name="past_session")
def past_session_fixture(session: Session, club: Club, now: datetime) -> ClubSession:
    return make_session(session, club, now - timedelta(days=7))
