"""Tests for database models."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.models import Attendance, CheckInMethod, Club, ClubSession, Rsvp, RsvpStatus, Venue
from conftest import make_club, make_session


class TestClubModel:
    """Tests for the Club and Venue models."""

    def test_create_club_defaults(self, session: Session):
        """Test creating a club with default flags."""
        club = make_club(session, "Auckland Orcas", -36.8485, 174.7633)

        retrieved = session.exec(select(Club).where(Club.slug == "auckland-orcas")).first()

        assert retrieved is not None
        assert retrieved.is_active is True
        assert retrieved.welcomes_beginners is False
        assert retrieved.is_verified is False
        assert retrieved.id == club.id

    def test_club_unique_slug(self, session: Session):
        """Test that slug must be unique."""
        make_club(session, "Duplicate", 0.0, 0.0, slug="dup")
        session.add(Club(name="Other", slug="dup", latitude=1.0, longitude=1.0, admin_user_id="x"))

        with pytest.raises(IntegrityError):
            session.commit()

    def test_club_venues_relationship(self, session: Session, club: Club, venue: Venue):
        """Test the club-venue relationship."""
        session.refresh(club)
        assert [v.id for v in club.venues] == [venue.id]
        assert venue.club.id == club.id


class TestClubSessionModel:
    """Tests for the ClubSession model."""

    def test_session_defaults(self, session: Session, upcoming_session: ClubSession):
        """Test a new session is not cancelled."""
        assert upcoming_session.is_cancelled is False
        assert upcoming_session.cancel_reason is None
        assert upcoming_session.created_at is not None

    def test_session_relationships(self, session: Session, club: Club, venue: Venue, upcoming_session: ClubSession):
        """Test session links to its club and venue."""
        assert upcoming_session.club.id == club.id
        assert upcoming_session.venue.id == venue.id

        session.refresh(club)
        assert upcoming_session.id in [s.id for s in club.sessions]


class TestRsvpModel:
    """Tests for the Rsvp model."""

    def test_create_rsvp(self, session: Session, upcoming_session: ClubSession):
        """Test creating an RSVP linked to a session."""
        rsvp = Rsvp(session_id=upcoming_session.id, user_id="user_1", status=RsvpStatus.MAYBE)
        session.add(rsvp)
        session.commit()

        session.refresh(upcoming_session)
        assert len(upcoming_session.rsvps) == 1
        assert upcoming_session.rsvps[0].status == RsvpStatus.MAYBE
        assert rsvp.session.id == upcoming_session.id

    def test_one_rsvp_per_member(self, session: Session, upcoming_session: ClubSession):
        """Test that (session_id, user_id) is unique."""
        session.add(Rsvp(session_id=upcoming_session.id, user_id="user_1", status=RsvpStatus.YES))
        session.commit()

        session.add(Rsvp(session_id=upcoming_session.id, user_id="user_1", status=RsvpStatus.NO))
        with pytest.raises(IntegrityError):
            session.commit()

    def test_same_member_different_sessions(self, session: Session, club: Club, upcoming_session: ClubSession, now):
        """Test a member may RSVP to several sessions."""
        other = make_session(session, club, now + timedelta(days=4))
        session.add(Rsvp(session_id=upcoming_session.id, user_id="user_1", status=RsvpStatus.YES))
        session.add(Rsvp(session_id=other.id, user_id="user_1", status=RsvpStatus.YES))
        session.commit()

        rows = session.exec(select(Rsvp).where(Rsvp.user_id == "user_1")).all()
        assert len(rows) == 2


class TestAttendanceModel:
    """Tests for the Attendance model."""

    def test_create_attendance(self, session: Session, upcoming_session: ClubSession):
        """Test an attendance row defaults to MANUAL with a timestamp."""
        attendance = Attendance(session_id=upcoming_session.id, user_id="user_1")
        session.add(attendance)
        session.commit()
        session.refresh(attendance)

        assert attendance.method == CheckInMethod.MANUAL
        assert attendance.checked_in_at is not None

        session.refresh(upcoming_session)
        assert len(upcoming_session.attendances) == 1

    def test_one_check_in_per_member(self, session: Session, upcoming_session: ClubSession):
        """Test that (session_id, user_id) is unique."""
        session.add(Attendance(session_id=upcoming_session.id, user_id="user_1"))
        session.commit()

        session.add(Attendance(session_id=upcoming_session.id, user_id="user_1", method=CheckInMethod.QR))
        with pytest.raises(IntegrityError):
            session.commit()
