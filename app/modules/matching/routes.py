"""Route optimization: photographer swaps that cut total travel on a day."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import time
from itertools import combinations
from uuid import UUID

from app.modules.matching.domain import OptimizationSuggestion, PhotographerSnapshot
from app.modules.matching.geo import GeoPoint, distance_km


@dataclass(frozen=True, slots=True)
class AssignedBooking:
    booking_id: UUID
    photographer_id: UUID
    start_time: time
    location: GeoPoint
    service_ids: frozenset[str]


def find_route_optimizations(
    bookings: Sequence[AssignedBooking],
    photographers: Mapping[UUID, PhotographerSnapshot],
    min_saving_km: float,
) -> list[OptimizationSuggestion]:
    """Suggest swaps between simultaneous bookings held by different photographers.

    A pair qualifies when both start at the same time, each photographer offers
    the other booking's services, and swapping cuts the summed base-to-address
    distance by more than ``min_saving_km``. Largest saving first.
    """
    suggestions: list[OptimizationSuggestion] = []
    for first, second in combinations(bookings, 2):
        if first.start_time != second.start_time or first.photographer_id == second.photographer_id:
            continue
        photographer_a = photographers.get(first.photographer_id)
        photographer_b = photographers.get(second.photographer_id)
        if photographer_a is None or photographer_b is None:
            continue
        if not (photographer_a.is_active and photographer_b.is_active):
            continue
        if not (second.service_ids <= photographer_a.services and first.service_ids <= photographer_b.services):
            continue

        current = distance_km(photographer_a.base, first.location) + distance_km(photographer_b.base, second.location)
        swapped = distance_km(photographer_a.base, second.location) + distance_km(photographer_b.base, first.location)
        saving = current - swapped
        if saving > min_saving_km:
            suggestions.append(
                OptimizationSuggestion(
                    booking_a_id=first.booking_id,
                    booking_b_id=second.booking_id,
                    photographer_a_id=photographer_a.id,
                    photographer_b_id=photographer_b.id,
                    saving_km=round(saving, 3),
                    start_time=first.start_time,
                ),
            )

    suggestions.sort(key=lambda item: (-item.saving_km, str(item.booking_a_id), str(item.booking_b_id)))
    return suggestions
