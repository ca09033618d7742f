from app.models.attendance import Attendance, CheckInMethod
from app.models.club import Club, Venue
from app.models.rsvp import Rsvp, RsvpStatus
from app.models.session import ClubSession

__all__ = [
    "Attendance",
    "CheckInMethod",
    "Club",
    "ClubSession",
    "Rsvp",
    "RsvpStatus",
    "Venue",
]
