from __future__ import annotations

from datetime import UTC, date, datetime, time
from uuid import uuid4

import pytest

import app.modules.matching.service as matching_service_module
from app.core.enums import BookingStatusEnum, RoleEnum
from app.core.permissions import Actor
from app.modules.matching.schemas import AvailableTimesRequest, FlashRequest, MatchRequest
from app.shared.exceptions import ConflictException, NoEligiblePhotographerException, UnauthorizedException

MONDAY = date(2030, 1, 7)
ADMIN = Actor(id=uuid4(), role=RoleEnum.ADMIN)


def _match_request(client, services=("foto",), at=(0.1, 0.1), start=time(9)) -> MatchRequest:
    return MatchRequest(
        client_id=client.id,
        service_ids=list(services),
        lat=at[0],
        lng=at[1],
        date=MONDAY,
        start_time=start,
    )


def _freeze_local_time(monkeypatch: pytest.MonkeyPatch, utc_instant: datetime) -> None:
    monkeypatch.setattr(matching_service_module, "utc_now", lambda: utc_instant)


@pytest.mark.asyncio
async def test_suggest_ranks_by_distance_and_reports_coverage(world) -> None:
    client = world.add_client()
    far = world.add_photographer(name="Far")
    near = world.add_photographer(name="Near", base=(0.1, 0.1))

    result = await world.matching_service().suggest(_match_request(client), ADMIN)

    assert result.has_coverage is True
    assert result.required_minutes == 60
    assert [item.photographer_id for item in result.items] == [near.id, far.id]
    assert result.items[0].distance_km == 0.0
    assert result.items[1].distance_km == pytest.approx(15.725, abs=0.05)


@pytest.mark.asyncio
async def test_suggest_without_coverage_returns_empty_list(world) -> None:
    client = world.add_client()
    world.add_photographer(radius_km=10)

    result = await world.matching_service().suggest(_match_request(client), ADMIN)

    assert result.has_coverage is False
    assert result.items == []


@pytest.mark.asyncio
async def test_suggest_respects_max_suggestions(world) -> None:
    client = world.add_client()
    for index in range(3):
        world.add_photographer(name=f"P{index}")

    result = await world.matching_service(max_suggestions=2).suggest(_match_request(client), ADMIN)

    assert result.has_coverage is True
    assert len(result.items) == 2


@pytest.mark.asyncio
async def test_fee_only_services_do_not_need_a_skilled_photographer(world) -> None:
    client = world.add_client()
    photographer = world.add_photographer(services=["foto"])

    result = await world.matching_service().suggest(_match_request(client, services=("foto", "travel_fee")), ADMIN)

    assert [item.photographer_id for item in result.items] == [photographer.id]


@pytest.mark.asyncio
async def test_key_pickup_moves_search_center_to_client_office(world) -> None:
    client = world.add_client(location=(0.5, 0.5))
    photographer = world.add_photographer(base=(0.5, 0.5), radius_km=5)
    service = world.matching_service()

    without_pickup = await service.suggest(_match_request(client, at=(0.0, 0.0)), ADMIN)
    with_pickup = await service.suggest(_match_request(client, services=("foto", "key_pickup"), at=(0.0, 0.0)), ADMIN)

    assert without_pickup.has_coverage is False
    assert (with_pickup.search_lat, with_pickup.search_lng) == (0.5, 0.5)
    assert [item.photographer_id for item in with_pickup.items] == [photographer.id]


@pytest.mark.asyncio
async def test_key_pickup_without_client_location_uses_address(world) -> None:
    client = world.add_client()
    world.add_photographer()

    result = await world.matching_service().suggest(_match_request(client, services=("foto", "key_pickup")), ADMIN)

    assert (result.search_lat, result.search_lng) == (0.1, 0.1)
    assert result.has_coverage is True


@pytest.mark.asyncio
async def test_client_cannot_query_for_another_client(world) -> None:
    client = world.add_client()
    other = world.add_client()
    actor = Actor(id=uuid4(), role=RoleEnum.CLIENT, client_id=client.id)

    with pytest.raises(UnauthorizedException):
        await world.matching_service().suggest(_match_request(other), actor)


@pytest.mark.asyncio
async def test_suggestions_for_booking_only_for_drafts(world) -> None:
    client = world.add_client()
    photographer = world.add_photographer()
    draft = world.add_booking(client)
    confirmed = world.add_booking(client, start=time(10), photographer=photographer, status=BookingStatusEnum.CONFIRMED)
    service = world.matching_service()

    result = await service.suggest_for_booking(draft.id, ADMIN)
    assert [item.photographer_id for item in result.items] == [photographer.id]
    assert result.items[0].daily_load == 1

    with pytest.raises(ConflictException):
        await service.suggest_for_booking(confirmed.id, ADMIN)


@pytest.mark.asyncio
async def test_swap_candidates_exclude_current_photographer(world) -> None:
    client = world.add_client()
    current = world.add_photographer(name="Current")
    other = world.add_photographer(name="Other")
    booking = world.add_booking(client, photographer=current, status=BookingStatusEnum.CONFIRMED)
    service = world.matching_service()

    result = await service.swap_candidates(booking.id, ADMIN)
    assert [item.photographer_id for item in result.items] == [other.id]

    with pytest.raises(UnauthorizedException):
        await service.swap_candidates(booking.id, Actor(id=uuid4(), role=RoleEnum.CLIENT, client_id=client.id))


@pytest.mark.asyncio
async def test_available_start_times_skip_busy_slots(world) -> None:
    client = world.add_client()
    first = world.add_photographer(name="First")
    world.add_photographer(name="Second", availability={"monday": ["11:00"]})
    world.add_booking(client, start=time(10), photographer=first, status=BookingStatusEnum.CONFIRMED)

    result = await world.matching_service().available_start_times(
        AvailableTimesRequest(client_id=client.id, service_ids=["foto"], lat=0.1, lng=0.1, date=MONDAY),
        ADMIN,
    )

    assert [(item.start_time, item.photographer_count) for item in result.items] == [
        (time(9), 1),
        (time(11), 2),
    ]


@pytest.mark.asyncio
async def test_available_start_times_need_contiguous_slots(world) -> None:
    client = world.add_client()
    world.add_photographer(services=("foto", "video"), availability={"monday": ["09:00", "10:00", "14:00"]})

    result = await world.matching_service().available_start_times(
        AvailableTimesRequest(client_id=client.id, service_ids=["foto", "video"], lat=0.1, lng=0.1, date=MONDAY),
        ADMIN,
    )

    assert result.required_minutes == 90
    assert [item.start_time for item in result.items] == [time(9)]


@pytest.mark.asyncio
async def test_available_start_times_drop_starts_already_past(monkeypatch: pytest.MonkeyPatch, world) -> None:
    # 12:30 UTC is 09:30 in Sao Paulo
    _freeze_local_time(monkeypatch, datetime(2030, 1, 7, 12, 30, tzinfo=UTC))
    client = world.add_client()
    world.add_photographer()
    request = AvailableTimesRequest(client_id=client.id, service_ids=["foto"], lat=0.1, lng=0.1, date=MONDAY)
    service = world.matching_service()

    today = await service.available_start_times(request, ADMIN)
    last_week = await service.available_start_times(request.model_copy(update={"date": date(2029, 12, 31)}), ADMIN)

    assert [item.start_time for item in today.items] == [time(10), time(11)]
    assert last_week.items == []


@pytest.mark.asyncio
async def test_flash_booking_returns_earliest_slot_after_lead_time(monkeypatch: pytest.MonkeyPatch, world) -> None:
    # 11:15 UTC is 08:15 in Sao Paulo, so the earliest start is 09:15
    _freeze_local_time(monkeypatch, datetime(2030, 1, 7, 11, 15, tzinfo=UTC))
    client = world.add_client()
    photographer = world.add_photographer()

    result = await world.matching_service().nearest_available(
        FlashRequest(client_id=client.id, service_ids=["foto"], lat=0.1, lng=0.1),
        ADMIN,
    )

    assert result.date == MONDAY
    assert result.start_time == time(10)
    assert result.photographer.photographer_id == photographer.id


@pytest.mark.asyncio
async def test_flash_booking_late_in_the_day_has_no_candidate(monkeypatch: pytest.MonkeyPatch, world) -> None:
    _freeze_local_time(monkeypatch, datetime(2030, 1, 7, 15, 30, tzinfo=UTC))
    client = world.add_client()
    world.add_photographer()

    with pytest.raises(NoEligiblePhotographerException):
        await world.matching_service().nearest_available(
            FlashRequest(client_id=client.id, service_ids=["foto"], lat=0.1, lng=0.1),
            ADMIN,
        )


@pytest.mark.asyncio
async def test_route_optimizations_suggest_swap_for_crossed_assignments(world) -> None:
    client = world.add_client()
    west = world.add_photographer(name="West", base=(0.0, 0.0), radius_km=100)
    east = world.add_photographer(name="East", base=(0.0, 0.5), radius_km=100)
    east_booking = world.add_booking(
        client,
        location=(0.0, 0.5),
        services=("foto", "travel_fee"),
        photographer=west,
        status=BookingStatusEnum.CONFIRMED,
    )
    west_booking = world.add_booking(
        client,
        location=(0.0, 0.0),
        photographer=east,
        status=BookingStatusEnum.CONFIRMED,
    )

    suggestions = await world.matching_service().route_optimizations(MONDAY, ADMIN)

    assert len(suggestions) == 1
    suggestion = suggestions[0]
    assert {suggestion.booking_a_id, suggestion.booking_b_id} == {east_booking.id, west_booking.id}
    assert suggestion.saving_km == pytest.approx(111.19, abs=0.1)


@pytest.mark.asyncio
async def test_route_optimizations_need_two_bookings_and_permission(world) -> None:
    client = world.add_client()
    photographer = world.add_photographer()
    world.add_booking(client, photographer=photographer, status=BookingStatusEnum.CONFIRMED)
    service = world.matching_service()

    assert await service.route_optimizations(MONDAY, ADMIN) == []
    with pytest.raises(UnauthorizedException):
        await service.route_optimizations(MONDAY, Actor(id=uuid4(), role=RoleEnum.EDITOR))
