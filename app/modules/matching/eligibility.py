"""Eligibility filter: which photographers *can* take a booking request."""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable
from uuid import UUID

from app.modules.matching.availability import daily_load, has_contiguous_free_span, requested_range
from app.modules.matching.domain import (
    BookingRequest,
    ClientSnapshot,
    EligiblePhotographer,
    PhotographerSnapshot,
)
from app.modules.matching.geo import distance_km, validate_point

logger = logging.getLogger(__name__)


def validate_request(request: BookingRequest) -> None:
    """Reject malformed requests before any candidate is evaluated."""
    validate_point(request.location)
    requested_range(request.day, request.start_time, request.required_minutes)


def _evaluate(
    candidate: PhotographerSnapshot,
    request: BookingRequest,
    client: ClientSnapshot | None,
) -> tuple[str | None, float]:
    """Return (rejection reason or None, distance) stopping at the first failed check."""
    if not candidate.is_active:
        return "inactive", 0.0
    if client is not None and candidate.id in client.blocked_photographer_ids:
        return "blocked by client", 0.0
    if not request.service_ids <= candidate.services:
        return f"missing services {sorted(request.service_ids - candidate.services)}", 0.0

    distance = distance_km(candidate.base, request.location)
    if distance > candidate.radius_km:
        return f"outside radius ({distance:.2f} km > {candidate.radius_km} km)", distance

    if not has_contiguous_free_span(
        candidate,
        request.day,
        request.required_minutes,
        request.start_time,
        excluding_booking_id=request.excluding_booking_id,
    ):
        return "no contiguous free slot", distance
    return None, distance


def find_eligible(
    request: BookingRequest,
    roster: Iterable[PhotographerSnapshot],
    client: ClientSnapshot | None = None,
    *,
    exclude_photographer_ids: Collection[UUID] = (),
) -> list[EligiblePhotographer]:
    """Return photographers able to take ``request``, in roster order.

    Predicates run cheapest first and stop at the first failure: active,
    not blocked by the client, offers every requested service, base within
    radius (inclusive), and a contiguous free span at the requested start.
    An empty list means no coverage and is not an error.
    """
    validate_request(request)

    eligible: list[EligiblePhotographer] = []
    for candidate in roster:
        if candidate.id in exclude_photographer_ids:
            continue

        reason, distance = _evaluate(candidate, request, client)
        if reason is not None:
            logger.debug("Photographer %s (%s) rejected: %s", candidate.name, candidate.id, reason)
            continue

        eligible.append(
            EligiblePhotographer(
                photographer=candidate,
                distance_km=distance,
                daily_load=daily_load(candidate, request.day, request.excluding_booking_id),
            ),
        )

    logger.info(
        "Eligibility for %s %s (%d min): %d photographer(s)",
        request.day.isoformat(),
        request.start_time.strftime("%H:%M"),
        request.required_minutes,
        len(eligible),
    )
    return eligible
