"""
Pytest configuration and fixtures per i test dei service.

I test girano su un database SQLite in memoria (aiosqlite) creato da
zero per ogni test, con le stesse opzioni di sessione dell'applicazione.
"""

import datetime
import uuid
from decimal import Decimal
from typing import AsyncGenerator, Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.storage import FileStorage
from app.models import (
    Base,
    FuelingRecord,
    MaintenanceRecord,
    MileageCheck,
    TripLog,
    User,
    Vehicle,
)
from app.models.user import UserRole


# ============================================================
# Fixtures database
# ============================================================


@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """Sessione su un database SQLite in memoria con schema completo."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def storage(tmp_path) -> FileStorage:
    """Archivio file su cartella temporanea."""
    return FileStorage(str(tmp_path / "uploads"), "/uploads/documents")


# ============================================================
# Factory
# ============================================================


async def make_user(
    db: AsyncSession,
    role: UserRole = UserRole.EMPLOYEE,
    email: Optional[str] = None,
    full_name: str = "Mario Rossi",
) -> User:
    # Hash fittizio: i test dei service non verificano password
    user = User(
        email=email or f"{uuid.uuid4().hex[:8]}@example.com",
        hashed_password="not-a-real-hash",
        full_name=full_name,
        role=role.value,
        is_active=True,
    )
    db.add(user)
    await db.flush()
    return user


async def make_vehicle(
    db: AsyncSession,
    plate: Optional[str] = None,
    name: str = "Fiat Doblò",
    registration_date: Optional[datetime.date] = None,
    service_interval_km: int = 15000,
    status: str = "ACTIVE",
) -> Vehicle:
    vehicle = Vehicle(
        plate=plate or f"AA{uuid.uuid4().hex[:3].upper()}BB",
        name=name,
        type="Furgone",
        status=status,
        ownership_type="OWNED",
        service_interval_km=service_interval_km,
        registration_date=registration_date,
    )
    db.add(vehicle)
    await db.flush()
    return vehicle


async def make_trip_log(
    db: AsyncSession,
    vehicle: Vehicle,
    user: User,
    date: datetime.date,
    initial_km: int,
    final_km: Optional[int] = None,
    has_anomaly: bool = False,
    anomaly_description: Optional[str] = None,
    is_resolved: bool = False,
) -> TripLog:
    log = TripLog(
        vehicle_id=vehicle.id,
        user_id=user.id,
        date=date,
        initial_km=initial_km,
        final_km=final_km,
        start_time="08:00",
        has_anomaly=has_anomaly,
        anomaly_description=anomaly_description,
        is_resolved=is_resolved,
    )
    db.add(log)
    await db.flush()
    return log


async def make_fueling(
    db: AsyncSession,
    vehicle: Vehicle,
    user: User,
    date: datetime.date,
    mileage: int,
    liters: str = "40.00",
    cost: str = "70.00",
) -> FuelingRecord:
    record = FuelingRecord(
        vehicle_id=vehicle.id,
        user_id=user.id,
        date=date,
        mileage=mileage,
        liters=Decimal(liters),
        cost=Decimal(cost),
    )
    db.add(record)
    await db.flush()
    return record


async def make_maintenance(
    db: AsyncSession,
    vehicle: Vehicle,
    date: datetime.date,
    mileage: int,
    type: str = "TAGLIANDO",
    cost: Optional[str] = "250.00",
) -> MaintenanceRecord:
    record = MaintenanceRecord(
        vehicle_id=vehicle.id,
        date=date,
        mileage=mileage,
        type=type,
        cost=Decimal(cost) if cost is not None else None,
    )
    db.add(record)
    await db.flush()
    return record


async def make_mileage_check(
    db: AsyncSession,
    vehicle: Vehicle,
    user: User,
    date: datetime.date,
    km: int,
) -> MileageCheck:
    check = MileageCheck(vehicle_id=vehicle.id, user_id=user.id, date=date, km=km)
    db.add(check)
    await db.flush()
    return check


# ============================================================
# Fixtures di base
# ============================================================


@pytest.fixture
async def admin(db) -> User:
    return await make_user(db, role=UserRole.ADMIN, full_name="Anna Admin")


@pytest.fixture
async def employee(db) -> User:
    return await make_user(db, role=UserRole.EMPLOYEE, full_name="Luca Bianchi")


@pytest.fixture
async def vehicle(db) -> Vehicle:
    return await make_vehicle(db, plate="AB123CD")
