"""Nearby club search."""
import logging
import math
from dataclasses import dataclass
from datetime import datetime

from sqlmodel import Session, select

from app.core.clock import as_utc, utcnow
from app.core.config import settings
from app.core.errors import Reason, ValidationError
from app.geo.distance import Coordinate, bounding_box, haversine_km
from app.models import Club, ClubSession

logger = logging.getLogger(__name__)


@dataclass
class NearbyClub:
    """A search hit: the club, its distance from the query centre, and its next session."""

    club: Club
    distance_km: float
    next_session: ClubSession | None = None


def validate_radius(radius_km) -> float:
    if radius_km is None:
        return settings.default_search_radius_km
    if (
        isinstance(radius_km, bool)
        or not isinstance(radius_km, (int, float))
        or not math.isfinite(radius_km)
        or radius_km <= 0
        or radius_km > settings.max_search_radius_km
    ):
        raise ValidationError(
            f"Radius must be greater than 0 and at most "
            f"{settings.max_search_radius_km:g} km, got {radius_km!r}",
            Reason.INVALID_RADIUS,
        )
    return float(radius_km)


def validate_limit(limit) -> int:
    if limit is None:
        return settings.default_search_limit
    if (
        isinstance(limit, bool)
        or not isinstance(limit, int)
        or limit <= 0
        or limit > settings.max_search_limit
    ):
        raise ValidationError(
            f"Limit must be an integer between 1 and {settings.max_search_limit}, got {limit!r}",
            Reason.INVALID_LIMIT,
        )
    return limit


def search_nearby(
    db: Session,
    center: Coordinate,
    radius_km: float | None = None,
    limit: int | None = None,
    welcomes_beginners: bool | None = None,
    is_verified: bool | None = None,
    now: datetime | None = None,
) -> list[NearbyClub]:
    """
    Find active clubs within ``radius_km`` of ``center``, nearest first.

    Two phases: a bounding-box range query narrows the candidates using the
    latitude/longitude indexes, then the exact Haversine distance decides
    membership. Distances are rounded to one decimal for presentation;
    filtering and ordering use the unrounded value.

    Raises:
        ValidationError: radius or limit out of range (before any query).
    """
    radius_km = validate_radius(radius_km)
    limit = validate_limit(limit)
    now = as_utc(now) if now else utcnow()

    box = bounding_box(center, radius_km)
    statement = (
        select(Club)
        .where(Club.is_active == True)  # noqa: E712
        .where(Club.latitude >= box.min_lat)
        .where(Club.latitude <= box.max_lat)
        .where(Club.longitude >= box.min_lng)
        .where(Club.longitude <= box.max_lng)
    )
    if welcomes_beginners is not None:
        statement = statement.where(Club.welcomes_beginners == welcomes_beginners)
    if is_verified is not None:
        statement = statement.where(Club.is_verified == is_verified)

    candidates = db.exec(statement).all()

    hits = []
    for club in candidates:
        distance = haversine_km(center, Coordinate(club.latitude, club.longitude))
        if distance > radius_km:
            continue
        hits.append((distance, club))

    hits.sort(key=lambda hit: hit[0])
    hits = hits[:limit]

    logger.debug(
        f"Nearby search at {center} r={radius_km}km: "
        f"{len(candidates)} in box, {len(hits)} returned"
    )

    return [
        NearbyClub(
            club=club,
            distance_km=round(distance, 1),
            next_session=_next_session(db, club, now),
        )
        for distance, club in hits
    ]


def _next_session(db: Session, club: Club, now: datetime) -> ClubSession | None:
    """Earliest upcoming, non-cancelled session for a club."""
    statement = (
        select(ClubSession)
        .where(ClubSession.club_id == club.id)
        .where(ClubSession.is_cancelled == False)  # noqa: E712
        .where(ClubSession.start_time >= now)
        .order_by(ClubSession.start_time)
        .limit(1)
    )
    return db.exec(statement).first()
