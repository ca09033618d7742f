"""Tests for session check-in."""

import math
from datetime import timedelta
from uuid import uuid4

import pytest
from sqlmodel import Session, select

from app.core.clock import as_utc
from app.core.errors import AlreadyExistsError, ConflictError, NotFoundError, Reason, ValidationError
from app.geo.distance import EARTH_RADIUS_KM, Coordinate
from app.models import Attendance, CheckInMethod, ClubSession, RsvpStatus
from app.scheduling import checkin as checkin_module
from app.scheduling.checkin import check_in
from app.scheduling.rsvp import get_rsvp
from conftest import MEMBER_ID, SYDNEY, make_session


def north_of_venue(km: float) -> Coordinate:
    return Coordinate(SYDNEY[0] + math.degrees(km / EARTH_RADIUS_KM), SYDNEY[1])


def attendance_rows(session: Session, club_session: ClubSession) -> list[Attendance]:
    return session.exec(
        select(Attendance).where(Attendance.session_id == club_session.id)
    ).all()


@pytest.fixture(name="start")
def start_fixture(upcoming_session: ClubSession):
    return as_utc(upcoming_session.start_time)


@pytest.fixture(name="end")
def end_fixture(upcoming_session: ClubSession):
    return as_utc(upcoming_session.end_time)


class TestCheckInWindow:
    def test_window_scenario(self, session: Session, upcoming_session: ClubSession, start, end):
        with pytest.raises(ConflictError) as exc_info:
            check_in(session, upcoming_session.id, MEMBER_ID, now=start - timedelta(minutes=31))
        assert exc_info.value.reason == Reason.CHECKIN_NOT_OPEN

        attendance = check_in(
            session, upcoming_session.id, MEMBER_ID, now=start - timedelta(minutes=29)
        )
        assert attendance.user_id == MEMBER_ID

        with pytest.raises(ConflictError) as exc_info:
            check_in(
                session,
                upcoming_session.id,
                "user_late",
                now=start + timedelta(hours=2, minutes=31),
            )
        assert exc_info.value.reason == Reason.CHECKIN_CLOSED

    def test_window_edges_are_inclusive(self, session: Session, upcoming_session: ClubSession, start, end):
        check_in(session, upcoming_session.id, "user_early", now=start - timedelta(minutes=30))
        check_in(session, upcoming_session.id, "user_late", now=end + timedelta(minutes=30))
        assert len(attendance_rows(session, upcoming_session)) == 2

    def test_closed_window_rejected_regardless_of_method(
        self, session: Session, upcoming_session: ClubSession, end
    ):
        for method in CheckInMethod:
            with pytest.raises(ConflictError) as exc_info:
                check_in(
                    session,
                    upcoming_session.id,
                    MEMBER_ID,
                    method=method,
                    coordinate=north_of_venue(0),
                    now=end + timedelta(minutes=31),
                )
            assert exc_info.value.reason == Reason.CHECKIN_CLOSED

    def test_records_server_time_and_method(self, session: Session, upcoming_session: ClubSession, start):
        attendance = check_in(
            session, upcoming_session.id, MEMBER_ID, method="QR", now=start
        )
        assert attendance.method == CheckInMethod.QR
        assert as_utc(attendance.checked_in_at) == start


class TestCheckInRules:
    def test_duplicate_check_in_rejected(self, session: Session, upcoming_session: ClubSession, start):
        check_in(session, upcoming_session.id, MEMBER_ID, now=start)

        with pytest.raises(ConflictError) as exc_info:
            check_in(session, upcoming_session.id, MEMBER_ID, now=start + timedelta(minutes=5))
        assert exc_info.value.reason == Reason.ALREADY_CHECKED_IN
        assert len(attendance_rows(session, upcoming_session)) == 1

    def test_cancelled_session(self, session: Session, cancelled_session: ClubSession):
        with pytest.raises(ConflictError) as exc_info:
            check_in(
                session,
                cancelled_session.id,
                MEMBER_ID,
                now=as_utc(cancelled_session.start_time),
            )
        assert exc_info.value.reason == Reason.SESSION_CANCELLED
        assert attendance_rows(session, cancelled_session) == []

    def test_session_not_found(self, session: Session):
        with pytest.raises(NotFoundError) as exc_info:
            check_in(session, uuid4(), MEMBER_ID)
        assert exc_info.value.reason == Reason.SESSION_NOT_FOUND

    def test_invalid_method(self, session: Session, upcoming_session: ClubSession):
        with pytest.raises(ValidationError) as exc_info:
            check_in(session, upcoming_session.id, MEMBER_ID, method="NFC")
        assert exc_info.value.reason == Reason.INVALID_METHOD

    def test_check_in_does_not_touch_rsvp(self, session: Session, upcoming_session: ClubSession, start):
        check_in(session, upcoming_session.id, MEMBER_ID, now=start)
        assert get_rsvp(session, upcoming_session.id, MEMBER_ID) is None

    def test_race_translated_to_already_exists(
        self, session: Session, upcoming_session: ClubSession, start, monkeypatch
    ):
        session.add(Attendance(session_id=upcoming_session.id, user_id=MEMBER_ID))
        session.commit()
        monkeypatch.setattr(checkin_module, "_find_attendance", lambda db, session_id, user_id: None)

        with pytest.raises(AlreadyExistsError) as exc_info:
            check_in(session, upcoming_session.id, MEMBER_ID, now=start)
        assert exc_info.value.reason == Reason.ALREADY_CHECKED_IN
        assert len(attendance_rows(session, upcoming_session)) == 1


class TestGpsCheckIn:
    def test_gps_scenario(self, session: Session, upcoming_session: ClubSession, start):
        with pytest.raises(ConflictError) as exc_info:
            check_in(
                session,
                upcoming_session.id,
                MEMBER_ID,
                method="GPS",
                coordinate=north_of_venue(0.6),
                now=start,
            )
        assert exc_info.value.reason == Reason.TOO_FAR_FROM_VENUE

        attendance = check_in(
            session,
            upcoming_session.id,
            MEMBER_ID,
            method="GPS",
            coordinate=north_of_venue(0.4),
            now=start,
        )
        assert attendance.method == CheckInMethod.GPS

    def test_gps_from_antipode_is_too_far(self, session: Session, upcoming_session: ClubSession, start):
        antipode = Coordinate(-SYDNEY[0], SYDNEY[1] - 180)
        with pytest.raises(ConflictError) as exc_info:
            check_in(session, upcoming_session.id, MEMBER_ID, "GPS", antipode, now=start)
        assert exc_info.value.reason == Reason.TOO_FAR_FROM_VENUE

    def test_manual_and_qr_skip_proximity(self, session: Session, upcoming_session: ClubSession, start):
        far_away = north_of_venue(50)
        check_in(session, upcoming_session.id, "user_manual", "MANUAL", far_away, now=start)
        check_in(session, upcoming_session.id, "user_qr", "QR", far_away, now=start)
        assert len(attendance_rows(session, upcoming_session)) == 2

    def test_gps_without_position_skips_proximity(
        self, session: Session, upcoming_session: ClubSession, start
    ):
        attendance = check_in(session, upcoming_session.id, MEMBER_ID, "GPS", None, now=start)
        assert attendance.method == CheckInMethod.GPS

    def test_gps_without_venue_skips_proximity(self, session: Session, club, now):
        club_session = make_session(session, club, now + timedelta(minutes=10))
        attendance = check_in(
            session, club_session.id, MEMBER_ID, "GPS", north_of_venue(50), now=now
        )
        assert attendance.method == CheckInMethod.GPS


def test_enum_values():
    assert {m.value for m in CheckInMethod} == {"QR", "GPS", "MANUAL"}
    assert {s.value for s in RsvpStatus} == {"YES", "NO", "MAYBE"}
