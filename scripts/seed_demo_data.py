"""Seed idempotent demo data for local/non-production environments."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass
from datetime import time, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agenda.core.config import get_settings
from agenda.core.database import SessionLocal, close_engine
from agenda.core.security import hash_password
from agenda.modules.scheduling.repository import SchedulingRepository
from agenda.modules.scheduling.schemas import BulkSlotCreate
from agenda.modules.scheduling.service import SchedulingService
from agenda.modules.units.models import Unit
from agenda.modules.units.repository import UnitsRepository
from agenda.shared.utils import local_now

DEMO_UNITS = (
    ("Unidade Centro", "Rua XV de Novembro, 100 - Centro", 60),
    ("Unidade Jardim", "Avenida das Flores, 2500 - Jardim", 45),
)

DEMO_SLOT_DAYS = 7
DEMO_SLOT_START = time(hour=8)
DEMO_SLOT_END = time(hour=18)
DEMO_SLOT_INTERVAL_MINUTES = 60
DEMO_SLOT_EXCEPTIONS = "12:00-13:00"


@dataclass(slots=True)
class SeedStats:
    units_created: int = 0
    slots_requested: int = 0
    slots_created: int = 0


async def _ensure_unit(session: AsyncSession, *, name: str, address: str, duration: int) -> tuple[Unit, bool]:
    unit = await session.scalar(select(Unit).where(Unit.name == name))
    if unit is not None:
        return unit, False

    unit = Unit(name=name, address=address, duration=duration)
    session.add(unit)
    await session.flush()
    return unit, True


async def _run_seed(*, allow_production: bool) -> SeedStats:
    settings = get_settings()
    app_env = settings.app_env.strip().lower()
    if app_env in {"production", "prod"} and not allow_production:
        raise RuntimeError(
            "Refusing to seed demo data in production. "
            "Re-run with --allow-production only if you are absolutely sure.",
        )

    stats = SeedStats()
    today = local_now().date()

    async with SessionLocal() as session:
        try:
            scheduling_service = SchedulingService(SchedulingRepository(session), UnitsRepository(session))
            for name, address, duration in DEMO_UNITS:
                unit, created = await _ensure_unit(session, name=name, address=address, duration=duration)
                stats.units_created += int(created)

                # existing slots are rejected by the unique constraint and reported as failed
                result = await scheduling_service.bulk_create_slots(
                    BulkSlotCreate(
                        unit_id=unit.id,
                        start_date=today,
                        end_date=today + timedelta(days=DEMO_SLOT_DAYS - 1),
                        start_time=DEMO_SLOT_START,
                        end_time=DEMO_SLOT_END,
                        interval_minutes=DEMO_SLOT_INTERVAL_MINUTES,
                        exceptions=DEMO_SLOT_EXCEPTIONS,
                    ),
                )
                stats.slots_requested += result.requested
                stats.slots_created += result.created

            await session.commit()
        except Exception:
            await session.rollback()
            raise

    return stats


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Seed idempotent demo data for Agenda (units and a week of open slots).",
    )
    parser.add_argument(
        "--allow-production",
        action="store_true",
        help="Allow seeding even when APP_ENV is production/prod.",
    )
    parser.add_argument(
        "--hash-password",
        metavar="PASSWORD",
        help="Print the bcrypt hash for COORDINATOR_PASSWORD_HASH and exit.",
    )
    return parser


def _print_summary(stats: SeedStats) -> None:
    print("Demo seed completed.")
    print(f"- Units created: {stats.units_created}")
    print(f"- Slots requested: {stats.slots_requested}")
    print(f"- Slots created: {stats.slots_created}")


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()

    if args.hash_password:
        print(hash_password(args.hash_password))
        return 0

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
