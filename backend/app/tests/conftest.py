"""
Shared fixtures for the device registry test suite.
"""

import os
import tempfile

# Must be set before any app module reads its configuration
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PHOTO_DIR", tempfile.mkdtemp(prefix="device-photos-"))
os.environ.setdefault("PUBLIC_BASE_URL", "http://registry.test")

from datetime import datetime, timezone
from typing import Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from app.domains.device.adapters.memory_device_repository import InMemoryDeviceRepository
from app.domains.device.adapters.sqlmodel_device_repository import (
    SQLModelDeviceRepository,
)
from app.domains.device.models.device_model import (
    Computer,
    FrequentComputer,
    MedicalDevice,
    Owner,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def make_computer(device_id: str = "comp-1", **overrides) -> Computer:
    data = dict(
        id=device_id,
        brand="Dell",
        model="XPS",
        owner=Owner(id="owner-1", name="Alice"),
        photo_url="http://example.com/photo.png",
        updated_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )
    data.update(overrides)
    return Computer(**data)


def make_medical_device(device_id: str = "med-1", **overrides) -> MedicalDevice:
    data = dict(
        id=device_id,
        brand="MedTech",
        model="HeartMonitor",
        owner=Owner(id="clinic-1", name="Clinic"),
        photo_url="http://example.com/photo2.png",
        serial="7312-1712-0719",
        updated_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )
    data.update(overrides)
    return MedicalDevice(**data)


def make_frequent_computer(
    device_id: str = "freq-1",
    checkin_url: str = "http://x/checkin",
    checkout_url: str = "http://x/checkout",
    **overrides,
) -> FrequentComputer:
    return FrequentComputer(
        device=make_computer(device_id, **overrides),
        checkin_url=checkin_url,
        checkout_url=checkout_url,
    )


async def create_sqlite_factory(db_path, tables: Optional[list] = None):
    """Create a file-backed SQLite engine and session factory.

    A file database gives every session its own connection, which the
    concurrent queries of get_entered_devices rely on.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all, tables=tables)
    factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return engine, factory


@pytest.fixture
def memory_repository():
    return InMemoryDeviceRepository()


@pytest.fixture
async def sqlmodel_repository(tmp_path):
    engine, factory = await create_sqlite_factory(tmp_path / "devices.db")
    yield SQLModelDeviceRepository(session_factory=factory)
    await engine.dispose()


@pytest.fixture(params=["memory", "sqlmodel"])
async def repository(request, tmp_path):
    """Every DeviceRepository implementation, for contract tests."""
    if request.param == "memory":
        yield InMemoryDeviceRepository()
        return
    engine, factory = await create_sqlite_factory(tmp_path / "contract.db")
    yield SQLModelDeviceRepository(session_factory=factory)
    await engine.dispose()
