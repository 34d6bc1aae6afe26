"""HTTP + DB integration tests for the draft -> confirm -> cancel flow."""

from __future__ import annotations

import asyncio
import os
from collections.abc import AsyncIterator
from datetime import date, timedelta
from uuid import uuid4

import httpx
import pytest
import pytest_asyncio

from app.core.security import create_access_token

API_BASE_URL = os.getenv("INTEGRATION_BASE_URL", "http://localhost:8000/api/v1").rstrip("/")
HEALTHCHECK_URL = os.getenv("INTEGRATION_HEALTH_URL", "http://localhost:8000/health")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("INTEGRATION_TIMEOUT_SECONDS", "15"))

WEEK = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

_INTEGRATION_STACK_HEALTHY: bool | None = None
_INTEGRATION_STACK_ERROR: str | None = None


def _assert_status(response: httpx.Response, expected_status: int) -> None:
    assert response.status_code == expected_status, (
        f"{response.request.method} {response.request.url} -> "
        f"{response.status_code}, body={response.text}"
    )


def _admin_headers() -> dict[str, str]:
    token = create_access_token(str(uuid4()), role="admin")
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture()
async def api_client() -> AsyncIterator[httpx.AsyncClient]:
    global _INTEGRATION_STACK_HEALTHY, _INTEGRATION_STACK_ERROR  # noqa: PLW0603

    if _INTEGRATION_STACK_HEALTHY is None:
        async with httpx.AsyncClient(timeout=min(REQUEST_TIMEOUT_SECONDS, 3.0)) as probe:
            try:
                health_response = await probe.get(HEALTHCHECK_URL)
            except httpx.HTTPError as exc:
                _INTEGRATION_STACK_HEALTHY = False
                _INTEGRATION_STACK_ERROR = f"Integration stack unavailable at {HEALTHCHECK_URL}: {exc}"
            else:
                _INTEGRATION_STACK_HEALTHY = health_response.status_code == 200
                _INTEGRATION_STACK_ERROR = (
                    None
                    if _INTEGRATION_STACK_HEALTHY
                    else f"Integration stack returned {health_response.status_code} for {HEALTHCHECK_URL}"
                )

    if not _INTEGRATION_STACK_HEALTHY:
        pytest.skip(_INTEGRATION_STACK_ERROR or "Integration stack is unavailable")
        return

    async with httpx.AsyncClient(base_url=API_BASE_URL, timeout=REQUEST_TIMEOUT_SECONDS) as client:
        yield client


async def _create_fixture_data(client: httpx.AsyncClient, headers: dict[str, str]) -> tuple[str, str, str]:
    service_code = f"foto_{uuid4().hex[:8]}"
    _assert_status(
        await client.post(
            "/catalog/services",
            headers=headers,
            json={"code": service_code, "name": "Fotos do imovel", "duration_minutes": 60},
        ),
        201,
    )

    # remote coordinates keep this photographer away from other test data
    lat, lng = -70.0 + (uuid4().int % 1000) / 1000, 100.0
    photographer_response = await client.post(
        "/photographers",
        headers=headers,
        json={
            "name": "Integration Photographer",
            "email": f"photographer-{uuid4().hex}@fotoagenda.dev",
            "services": [service_code],
            "base_lat": lat,
            "base_lng": lng,
            "radius_km": 25,
            "slot_minutes": 60,
            "availability": {weekday: ["09:00", "10:00", "11:00"] for weekday in WEEK},
        },
    )
    _assert_status(photographer_response, 201)

    client_response = await client.post("/clients", headers=headers, json={"name": "Imobiliaria Teste"})
    _assert_status(client_response, 201)
    return service_code, photographer_response.json()["id"], client_response.json()["id"]


@pytest.mark.asyncio
async def test_concurrent_confirms_book_the_slot_once(api_client: httpx.AsyncClient) -> None:
    headers = _admin_headers()
    service_code, photographer_id, client_id = await _create_fixture_data(api_client, headers)
    photographer = (await api_client.get(f"/photographers/{photographer_id}", headers=headers)).json()
    shoot_day = (date.today() + timedelta(days=30)).isoformat()

    drafts = []
    for _ in range(2):
        response = await api_client.post(
            "/booking",
            headers=headers,
            json={
                "client_id": client_id,
                "service_ids": [service_code],
                "lat": photographer["base_lat"],
                "lng": photographer["base_lng"],
                "date": shoot_day,
                "start_time": "10:00",
            },
        )
        _assert_status(response, 201)
        drafts.append(response.json()["id"])

    suggestions = await api_client.get(f"/matching/bookings/{drafts[0]}/suggestions", headers=headers)
    _assert_status(suggestions, 200)
    assert suggestions.json()["has_coverage"] is True
    assert photographer_id in [item["photographer_id"] for item in suggestions.json()["items"]]

    responses = await asyncio.gather(
        *[
            api_client.post(f"/booking/{draft_id}/confirm", headers=headers, json={"photographer_id": photographer_id})
            for draft_id in drafts
        ],
    )
    statuses = sorted(response.status_code for response in responses)
    assert statuses[0] == 200
    # the loser either lost the lock race or already saw the slot taken
    assert statuses[1] in {409, 422}

    winner = next(response.json() for response in responses if response.status_code == 200)
    assert winner["status"] == "confirmed"
    assert winner["end_time"] == "11:00:00"

    cancel_response = await api_client.post(
        f"/booking/{winner['id']}/cancel",
        headers=headers,
        json={"reason": "integration"},
    )
    _assert_status(cancel_response, 200)

    loser_id = next(draft_id for draft_id in drafts if draft_id != winner["id"])
    retry = await api_client.post(f"/booking/{loser_id}/auto-assign", headers=headers)
    _assert_status(retry, 200)
    assert retry.json()["photographer_id"] == photographer_id


@pytest.mark.asyncio
async def test_invalid_coordinates_are_reported_as_business_errors(api_client: httpx.AsyncClient) -> None:
    headers = _admin_headers()
    service_code, _, client_id = await _create_fixture_data(api_client, headers)

    response = await api_client.post(
        "/booking",
        headers=headers,
        json={
            "client_id": client_id,
            "service_ids": [service_code],
            "lat": 123.0,
            "lng": 0.0,
            "date": (date.today() + timedelta(days=30)).isoformat(),
            "start_time": "10:00",
        },
    )

    _assert_status(response, 422)
    assert response.json()["error"]["code"] == "invalid_coordinate"
