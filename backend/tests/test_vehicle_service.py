"""
Test per il VehicleService: anagrafica, eliminazione a cascata,
panoramica flotta e cronologia unificata.
"""

import uuid
from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import DuplicateError, NotFoundError
from app.models import FuelingRecord, MaintenanceRecord, MileageCheck, TripLog, VehicleDocument
from app.schemas.document import DocumentCreate, DocumentType
from app.schemas.maintenance import MaintenanceCreate, MaintenanceType
from app.schemas.mileage import DueBand, HistoryKind
from app.schemas.vehicle import VehicleCreate, VehicleStatus, VehicleUpdate
from app.services.document_service import DocumentService
from app.services.maintenance_service import maintenance_service
from app.services.vehicle_service import vehicle_service

from conftest import (
    make_fueling,
    make_maintenance,
    make_mileage_check,
    make_trip_log,
    make_vehicle,
)


def _vehicle_data(**overrides) -> VehicleCreate:
    data = {"plate": "ab 123 cd", "name": "Fiat Panda", "type": "Auto"}
    data.update(overrides)
    return VehicleCreate(**data)


# ============================================================
# Anagrafica
# ============================================================


class TestVehicleCrud:
    """Test per creazione, modifica e ricerca."""

    async def test_create_normalizes_plate(self, db):
        vehicle = await vehicle_service.create(db, _vehicle_data())

        assert vehicle.plate == "AB123CD"
        assert vehicle.status == "ACTIVE"
        assert vehicle.ownership_type == "OWNED"
        assert vehicle.service_interval_km == 15000
        assert vehicle.current_anomaly is None

    async def test_duplicate_plate(self, db):
        await vehicle_service.create(db, _vehicle_data())

        with pytest.raises(DuplicateError) as exc_info:
            await vehicle_service.create(db, _vehicle_data(plate="AB123CD", name="Altro"))

        assert exc_info.value.status_code == 409

    async def test_partial_update(self, db):
        vehicle = await vehicle_service.create(db, _vehicle_data())

        updated = await vehicle_service.update(
            db, vehicle.id, VehicleUpdate(status=VehicleStatus.MAINTENANCE, service_interval_km=20000)
        )

        assert updated.status == "MAINTENANCE"
        assert updated.service_interval_km == 20000
        assert updated.name == "Fiat Panda"

    async def test_search_and_status_filter(self, db):
        await make_vehicle(db, plate="AA111AA", name="Ducato")
        await make_vehicle(db, plate="BB222BB", name="Panda", status="OUT_OF_SERVICE")

        by_name, total = await vehicle_service.get_all(db, search="duc")
        inactive, inactive_total = await vehicle_service.get_all(db, status=VehicleStatus.OUT_OF_SERVICE)

        assert [v.plate for v in by_name] == ["AA111AA"]
        assert total == 1
        assert [v.plate for v in inactive] == ["BB222BB"]
        assert inactive_total == 1

    async def test_missing_vehicle(self, db):
        with pytest.raises(NotFoundError):
            await vehicle_service.get_by_id(db, uuid.uuid4())

    @pytest.mark.parametrize("field", ["plate", "name", "type", "status", "service_interval_km"])
    def test_update_rejects_null_on_required_field(self, field):
        with pytest.raises(PydanticValidationError):
            VehicleUpdate.model_validate({field: None})

    async def test_not_null_violation_is_not_a_duplicate(self, db):
        """Solo il vincolo sulla targa diventa DuplicateError."""
        vehicle = await vehicle_service.create(db, _vehicle_data())

        with pytest.raises(IntegrityError):
            await vehicle_service.update(db, vehicle.id, VehicleUpdate.model_construct(name=None))

    async def test_update_to_existing_plate(self, db):
        await vehicle_service.create(db, _vehicle_data())
        other = await vehicle_service.create(db, _vehicle_data(plate="ZZ999ZZ"))

        with pytest.raises(DuplicateError):
            await vehicle_service.update(db, other.id, VehicleUpdate(plate="AB123CD"))


# ============================================================
# Eliminazione
# ============================================================


class TestVehicleDelete:
    """Test per l'eliminazione a cascata."""

    async def test_delete_removes_events_and_files(self, db, vehicle, employee, storage, monkeypatch):
        service = DocumentService(storage=storage)
        monkeypatch.setattr("app.services.vehicle_service.document_service", service)

        log = await make_trip_log(
            db, vehicle, employee, date(2024, 5, 1), 0, 100,
            has_anomaly=True, anomaly_description="Gomma a terra",
        )
        await maintenance_service.record_with_resolutions(db, vehicle.id, MaintenanceCreate(
            date=date(2024, 5, 2),
            type=MaintenanceType.GOMME,
            mileage=150,
            resolved_anomaly_ids=[log.id],
        ))
        await make_fueling(db, vehicle, employee, date(2024, 5, 3), 200)
        await make_mileage_check(db, vehicle, employee, date(2024, 5, 4), 250)
        document = await service.upload(
            db, vehicle.id, DocumentCreate(type=DocumentType.LIBRETTO_CIRCOLAZIONE),
            file_name="libretto.pdf", content_type="application/pdf", content=b"%PDF-1.4",
        )
        file_path = storage.path_for(document.file_url)
        assert file_path.exists()

        other = await make_vehicle(db, plate="ZZ999ZZ")
        await make_trip_log(db, other, employee, date(2024, 5, 1), 0, 50)

        vehicle_id = vehicle.id
        await vehicle_service.delete(db, vehicle_id)

        for model in (TripLog, FuelingRecord, MaintenanceRecord, MileageCheck, VehicleDocument):
            count = await db.execute(
                select(func.count(model.id)).where(model.vehicle_id == vehicle_id)
            )
            assert count.scalar() == 0

        remaining = await db.execute(select(func.count(TripLog.id)))
        assert remaining.scalar() == 1
        assert not file_path.exists()


# ============================================================
# Viste derivate
# ============================================================


class TestDerivedViews:
    """Test per veicoli attivi, panoramica flotta e cronologia."""

    async def test_list_active_with_last_mileage(self, db, employee):
        active = await make_vehicle(db, plate="AA111AA", name="Ducato")
        await make_vehicle(db, plate="BB222BB", name="Panda", status="OUT_OF_SERVICE")
        await make_trip_log(db, active, employee, date(2024, 5, 1), 1000, 1250)

        items = await vehicle_service.list_active(db)

        assert [item.plate for item in items] == ["AA111AA"]
        assert items[0].last_mileage == 1250

    async def test_fleet_uses_wider_threshold(self, db, employee):
        """1200 km al tagliando: in scadenza nella panoramica flotta."""
        vehicle = await make_vehicle(db, plate="AA111AA", service_interval_km=15000)
        await make_mileage_check(db, vehicle, employee, date(2024, 5, 1), 13800)

        overview = await vehicle_service.fleet_overview(db, today=date(2024, 6, 1))

        assert overview[0].km_to_next_service == 1200
        assert overview[0].due_band == DueBand.DUE_SOON

    async def test_history_merges_streams(self, db, vehicle, employee):
        await make_trip_log(db, vehicle, employee, date(2024, 5, 1), 0, 100)
        await make_fueling(db, vehicle, employee, date(2024, 5, 2), 150)
        await make_maintenance(db, vehicle, date(2024, 5, 3), 200)
        await make_mileage_check(db, vehicle, employee, date(2024, 5, 3), 180)

        history = await vehicle_service.get_history(db, vehicle.id)

        assert [item.kind for item in history] == [
            HistoryKind.MAINTENANCE,
            HistoryKind.MILEAGE_CHECK,
            HistoryKind.REFUEL,
            HistoryKind.LOG,
        ]
        assert history[-1].km == 100
        assert history[-1].data["driver"] == "Luca Bianchi"
