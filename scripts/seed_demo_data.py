"""Seed idempotent demo data for local/non-production environments."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import SessionLocal, close_engine
from app.core.enums import RoleEnum
from app.core.security import create_access_token
from app.modules.catalog.models import ServiceOffering
from app.modules.clients.models import Client
from app.modules.photographers.repository import PhotographersRepository

# code, name, minutes, fee only, uses client location
DEMO_SERVICES = (
    ("foto", "Fotos do imovel", 60, False, False),
    ("video", "Video", 30, False, False),
    ("drone", "Fotos aereas com drone", 30, False, False),
    ("tour_360", "Tour virtual 360", 30, False, False),
    ("travel_fee", "Taxa de deslocamento", 0, True, False),
    ("express_fee", "Taxa de urgencia", 0, True, False),
    ("key_pickup", "Retirada de chaves", 0, True, True),
)

WEEKDAY_STARTS = ["08:00", "09:00", "10:00", "11:00", "13:00", "14:00", "15:00", "16:00", "17:00"]
DEMO_AVAILABILITY = {
    weekday: WEEKDAY_STARTS
    for weekday in ("monday", "tuesday", "wednesday", "thursday", "friday")
} | {"saturday": ["09:00", "10:00", "11:00"]}

# name, email, services, base lat/lng, radius
DEMO_PHOTOGRAPHERS = (
    ("Ana Paulista", "demo-ana@fotoagenda.dev", ["foto", "video", "tour_360"], (-23.5614, -46.6559), 12.0),
    ("Bruno Pinheiros", "demo-bruno@fotoagenda.dev", ["foto", "drone"], (-23.5670, -46.6920), 15.0),
    ("Carla Santana", "demo-carla@fotoagenda.dev", ["foto", "video", "drone", "tour_360"], (-23.5020, -46.6250), 20.0),
)

DEMO_CLIENT_EMAIL = "demo-imobiliaria@fotoagenda.dev"


@dataclass(slots=True)
class SeedStats:
    services_created: int = 0
    photographers_created: int = 0
    photographers_updated: int = 0
    client_created: bool = False
    client_id: str | None = None


async def _ensure_services(session: AsyncSession) -> int:
    created = 0
    for code, name, minutes, is_fee_only, uses_client_location in DEMO_SERVICES:
        existing = await session.scalar(select(ServiceOffering).where(ServiceOffering.code == code))
        if existing is None:
            session.add(
                ServiceOffering(
                    code=code,
                    name=name,
                    duration_minutes=minutes,
                    is_fee_only=is_fee_only,
                    uses_client_location=uses_client_location,
                ),
            )
            created += 1
    await session.flush()
    return created


async def _ensure_photographers(session: AsyncSession) -> tuple[int, int]:
    repository = PhotographersRepository(session)
    created = updated = 0
    for name, email, services, (lat, lng), radius_km in DEMO_PHOTOGRAPHERS:
        fields = {
            "name": name,
            "services": services,
            "base_lat": lat,
            "base_lng": lng,
            "radius_km": radius_km,
            "slot_minutes": 60,
            "availability": DEMO_AVAILABILITY,
            "is_active": True,
        }
        photographer = await repository.get_by_email(email)
        if photographer is None:
            await repository.create_photographer(email=email, **fields)
            created += 1
        else:
            await repository.update_photographer(photographer, **fields)
            updated += 1
    return created, updated


async def _ensure_client(session: AsyncSession) -> tuple[Client, bool]:
    client = await session.scalar(select(Client).where(Client.email == DEMO_CLIENT_EMAIL))
    if client is not None:
        return client, False

    client = Client(
        name="Imobiliaria Demo",
        email=DEMO_CLIENT_EMAIL,
        address="Av. Paulista, 1000 - Sao Paulo",
        lat=-23.5651,
        lng=-46.6525,
    )
    session.add(client)
    await session.flush()
    return client, True


async def _run_seed(*, allow_production: bool) -> SeedStats:
    settings = get_settings()
    app_env = settings.app_env.strip().lower()
    if app_env in {"production", "prod"} and not allow_production:
        raise RuntimeError(
            "Refusing to seed demo data in production. "
            "Re-run with --allow-production only if you are absolutely sure.",
        )

    stats = SeedStats()

    async with SessionLocal() as session:
        try:
            stats.services_created = await _ensure_services(session)
            stats.photographers_created, stats.photographers_updated = await _ensure_photographers(session)
            client, stats.client_created = await _ensure_client(session)
            stats.client_id = str(client.id)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    return stats


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Seed idempotent demo data for FotoAgenda (service catalog, photographers, one client).",
    )
    parser.add_argument(
        "--allow-production",
        action="store_true",
        help="Allow seeding even when APP_ENV is production/prod.",
    )
    return parser


def _print_summary(stats: SeedStats) -> None:
    print("Demo seed completed.")
    print(f"- Services created: {stats.services_created}")
    print(f"- Photographers created: {stats.photographers_created}")
    print(f"- Photographers updated: {stats.photographers_updated}")
    print(f"- Client created: {stats.client_created}")
    print(f"- Client id: {stats.client_id}")
    print("")
    print("Demo admin bearer token (non-production only, valid 12h):")
    print(create_access_token(str(uuid4()), expires_minutes=12 * 60, role=RoleEnum.ADMIN))


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()

    try:
        stats = asyncio.run(_run_seed(allow_production=args.allow_production))
    except Exception as exc:
        print(f"Demo seed failed: {exc}")
        return 1
    finally:
        asyncio.run(close_engine())

    _print_summary(stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
