"""Ranking of eligible photographers."""

from __future__ import annotations

from collections.abc import Sequence

from app.modules.matching.domain import EligiblePhotographer


def ranking_key(item: EligiblePhotographer) -> tuple[float, int, str]:
    return item.distance_km, item.daily_load, str(item.photographer.id)


def rank(eligible: Sequence[EligiblePhotographer]) -> list[EligiblePhotographer]:
    """Closest first, then lightest daily load, then photographer id.

    The id tie-break makes the order fully deterministic. Returns a new list.
    """
    return sorted(eligible, key=ranking_key)
