"""
Test per il MaintenanceService: registrazione di un intervento che
risolve anomalie, atomicità e aggiornamento del banner.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import (
    BusinessValidationError,
    MileageRegressionError,
    NotFoundError,
    TransactionFailure,
)
from app.models import MaintenanceRecord, TripLog, Vehicle
from app.schemas.maintenance import MaintenanceCreate, MaintenanceType, MaintenanceUpdate, TireType
from app.services.anomaly_service import anomaly_service
from app.services.maintenance_service import maintenance_service, resolution_timestamp

from conftest import make_trip_log, make_vehicle


async def _flat_tire_and_brakes(db, vehicle, user):
    flat_tire = await make_trip_log(
        db, vehicle, user, date(2024, 3, 1), 1000, 1100,
        has_anomaly=True, anomaly_description="Gomma a terra",
    )
    brakes = await make_trip_log(
        db, vehicle, user, date(2024, 3, 2), 1100, 1200,
        has_anomaly=True, anomaly_description="Rumore ai freni",
    )
    vehicle.current_anomaly = "Rumore ai freni"
    await db.flush()
    return flat_tire, brakes


def _maintenance(resolved_ids, **overrides) -> MaintenanceCreate:
    data = {
        "date": date(2024, 3, 10),
        "type": MaintenanceType.GOMME,
        "cost": Decimal("120.00"),
        "mileage": 1250,
        "tire_type": TireType.INVERNALI,
        "tire_storage_location": "Magazzino A",
        "resolved_anomaly_ids": resolved_ids,
    }
    data.update(overrides)
    return MaintenanceCreate(**data)


# ============================================================
# Registrazione con risoluzione
# ============================================================


class TestRecordWithResolutions:
    """Test per la registrazione di un intervento con anomalie risolte."""

    async def test_resolves_and_recomputes_banner(self, db, vehicle, employee):
        """Risolta la gomma a terra, il banner mostra il rumore ai freni."""
        flat_tire, brakes = await _flat_tire_and_brakes(db, vehicle, employee)

        record = await maintenance_service.record_with_resolutions(
            db, vehicle.id, _maintenance([flat_tire.id])
        )

        assert record.resolved_anomaly_ids == [flat_tire.id]
        assert flat_tire.is_resolved is True
        assert flat_tire.resolved_at.date() == date(2024, 3, 10)
        assert brakes.is_resolved is False
        assert vehicle.current_anomaly == "Rumore ai freni"

    async def test_resolving_all_clears_banner(self, db, vehicle, employee):
        flat_tire, brakes = await _flat_tire_and_brakes(db, vehicle, employee)

        record = await maintenance_service.record_with_resolutions(
            db, vehicle.id, _maintenance([flat_tire.id, brakes.id, flat_tire.id])
        )

        assert len(record.resolved_anomalies) == 2
        assert vehicle.current_anomaly is None

    async def test_without_anomalies(self, db, vehicle, employee):
        await _flat_tire_and_brakes(db, vehicle, employee)

        record = await maintenance_service.record_with_resolutions(
            db, vehicle.id, _maintenance([], type=MaintenanceType.TAGLIANDO)
        )

        assert record.resolved_anomalies == []
        assert record.tire_type is None
        assert record.tire_storage_location is None
        # Banner ricalcolato: la più vecchia ancora aperta
        assert vehicle.current_anomaly == "Gomma a terra"

    async def test_already_resolved_keeps_timestamp(self, db, vehicle, employee):
        flat_tire, _ = await _flat_tire_and_brakes(db, vehicle, employee)
        await anomaly_service.resolve_anomaly(
            db, flat_tire.id, resolved_at=datetime(2024, 3, 5, 9, 30, tzinfo=timezone.utc)
        )

        record = await maintenance_service.record_with_resolutions(
            db, vehicle.id, _maintenance([flat_tire.id])
        )

        assert record.resolved_anomaly_ids == [flat_tire.id]
        assert flat_tire.resolved_at.date() == date(2024, 3, 5)

    async def test_missing_log_changes_nothing(self, db, vehicle, employee):
        flat_tire, _ = await _flat_tire_and_brakes(db, vehicle, employee)
        missing_id = uuid.uuid4()

        with pytest.raises(NotFoundError) as exc_info:
            await maintenance_service.record_with_resolutions(
                db, vehicle.id, _maintenance([flat_tire.id, missing_id])
            )

        assert exc_info.value.extra == {"missing_ids": [str(missing_id)]}
        assert flat_tire.is_resolved is False
        count = await db.execute(select(func.count(MaintenanceRecord.id)))
        assert count.scalar() == 0
        assert vehicle.current_anomaly == "Rumore ai freni"

    async def test_log_of_other_vehicle(self, db, vehicle, employee):
        other = await make_vehicle(db, plate="ZZ999ZZ")
        foreign = await make_trip_log(
            db, other, employee, date(2024, 3, 1), 0, 10,
            has_anomaly=True, anomaly_description="Specchietto rotto",
        )

        with pytest.raises(BusinessValidationError):
            await maintenance_service.record_with_resolutions(
                db, vehicle.id, _maintenance([foreign.id])
            )

    async def test_log_without_anomaly(self, db, vehicle, employee):
        log = await make_trip_log(db, vehicle, employee, date(2024, 3, 1), 1000, 1100)

        with pytest.raises(BusinessValidationError):
            await maintenance_service.record_with_resolutions(
                db, vehicle.id, _maintenance([log.id])
            )

    async def test_mileage_regression(self, db, vehicle, employee):
        flat_tire, _ = await _flat_tire_and_brakes(db, vehicle, employee)

        with pytest.raises(MileageRegressionError):
            await maintenance_service.record_with_resolutions(
                db, vehicle.id, _maintenance([flat_tire.id], mileage=900)
            )

        assert flat_tire.is_resolved is False

    async def test_missing_vehicle(self, db):
        with pytest.raises(NotFoundError):
            await maintenance_service.record_with_resolutions(db, uuid.uuid4(), _maintenance([]))

    async def test_database_failure_rolls_back_everything(self, db, vehicle, employee, monkeypatch):
        """Un errore del database a metà operazione annulla intervento e risoluzioni."""
        flat_tire, _ = await _flat_tire_and_brakes(db, vehicle, employee)
        await db.commit()
        vehicle_id, flat_tire_id = vehicle.id, flat_tire.id

        # L'intervento è già stato scritto con il flush quando fallisce il ricalcolo
        async def failing_refresh(*args, **kwargs):
            raise SQLAlchemyError("connessione persa")

        monkeypatch.setattr(anomaly_service, "refresh_vehicle_banner", failing_refresh)

        with pytest.raises(TransactionFailure):
            await maintenance_service.record_with_resolutions(
                db, vehicle_id, _maintenance([flat_tire_id])
            )

        monkeypatch.undo()

        count = await db.execute(select(func.count(MaintenanceRecord.id)))
        assert count.scalar() == 0
        resolved = await db.execute(select(TripLog.is_resolved).where(TripLog.id == flat_tire_id))
        assert resolved.scalar() is False
        banner = await db.execute(select(Vehicle.current_anomaly).where(Vehicle.id == vehicle_id))
        assert banner.scalar() == "Rumore ai freni"


# ============================================================
# Aggiornamento ed eliminazione
# ============================================================


class TestUpdateDelete:
    """Test per aggiornamento ed eliminazione degli interventi."""

    async def test_update_clears_tire_fields(self, db, vehicle, employee):
        record = await maintenance_service.record_with_resolutions(db, vehicle.id, _maintenance([]))

        updated = await maintenance_service.update(db, record.id, MaintenanceUpdate(
            date=date(2024, 3, 10),
            type=MaintenanceType.MECCANICA,
            mileage=1250,
            tire_type=TireType.ESTIVE,
            tire_storage_location="Magazzino B",
        ))

        assert updated.type == "MECCANICA"
        assert updated.tire_type is None
        assert updated.tire_storage_location is None
        assert updated.cost is None

    async def test_delete_keeps_resolutions(self, db, vehicle, employee):
        flat_tire, _ = await _flat_tire_and_brakes(db, vehicle, employee)
        record = await maintenance_service.record_with_resolutions(
            db, vehicle.id, _maintenance([flat_tire.id])
        )

        await maintenance_service.delete(db, record.id)

        assert flat_tire.is_resolved is True
        with pytest.raises(NotFoundError):
            await maintenance_service.get_by_id(db, record.id)


class TestResolutionTimestamp:
    def test_midnight_utc(self):
        assert resolution_timestamp(date(2024, 3, 10)) == datetime(2024, 3, 10, tzinfo=timezone.utc)
