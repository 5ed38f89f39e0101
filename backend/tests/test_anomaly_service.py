"""
Test per l'AnomalyService: segnalazione, risoluzione manuale e
coerenza del banner anomalia del veicolo.
"""

import uuid
from datetime import date, datetime, timezone

import pytest

from app.core.exceptions import BusinessValidationError, NotFoundError
from app.schemas.trip_log import TripLogCreate
from app.services.anomaly_service import anomaly_service
from app.services.trip_log_service import trip_log_service

from conftest import make_trip_log, make_vehicle


async def _open_logs(db, vehicle, user):
    """Tre viaggi con anomalia in giorni diversi, dal più vecchio."""
    first = await make_trip_log(
        db, vehicle, user, date(2024, 3, 1), 1000, 1100,
        has_anomaly=True, anomaly_description="Gomma a terra",
    )
    second = await make_trip_log(
        db, vehicle, user, date(2024, 3, 2), 1100, 1200,
        has_anomaly=True, anomaly_description="Rumore ai freni",
    )
    third = await make_trip_log(
        db, vehicle, user, date(2024, 3, 3), 1200, 1300,
        has_anomaly=True, anomaly_description="Spia motore accesa",
    )
    vehicle.current_anomaly = third.anomaly_description
    await db.flush()
    return first, second, third


# ============================================================
# Segnalazione
# ============================================================


class TestReportAnomaly:
    """Test per la segnalazione delle anomalie."""

    async def test_latest_report_overwrites_banner(self, db, vehicle, employee):
        """Scenario gomma a terra / rumore ai freni: il banner mostra l'ultima segnalazione."""
        first = await trip_log_service.create(db, employee, TripLogCreate(
            vehicle_id=vehicle.id,
            date=date(2024, 3, 1),
            initial_km=1000,
            final_km=1100,
            start_time="08:00",
            has_anomaly=True,
            anomaly_description="Gomma a terra",
        ))
        assert vehicle.current_anomaly == "Gomma a terra"

        second = await trip_log_service.create(db, employee, TripLogCreate(
            vehicle_id=vehicle.id,
            date=date(2024, 3, 2),
            initial_km=1100,
            final_km=1200,
            start_time="08:00",
            has_anomaly=True,
            anomaly_description="Rumore ai freni",
        ))
        assert vehicle.current_anomaly == "Rumore ai freni"

        unresolved = await anomaly_service.list_unresolved(db, vehicle.id)
        assert [log.id for log in unresolved] == [first.id, second.id]

    async def test_report_on_existing_log(self, db, vehicle, employee):
        log = await make_trip_log(db, vehicle, employee, date(2024, 3, 1), 1000, 1100)

        updated = await anomaly_service.report_anomaly(db, log.id, "  Vetro scheggiato  ")

        assert updated.has_anomaly is True
        assert updated.anomaly_description == "Vetro scheggiato"
        assert updated.is_resolved is False
        assert vehicle.current_anomaly == "Vetro scheggiato"

    async def test_empty_description(self, db, vehicle, employee):
        log = await make_trip_log(db, vehicle, employee, date(2024, 3, 1), 1000, 1100)

        with pytest.raises(BusinessValidationError):
            await anomaly_service.report_anomaly(db, log.id, "   ")

    async def test_missing_log(self, db):
        with pytest.raises(NotFoundError):
            await anomaly_service.report_anomaly(db, uuid.uuid4(), "Gomma a terra")


# ============================================================
# Risoluzione
# ============================================================


class TestResolveAnomaly:
    """Test per la risoluzione manuale."""

    async def test_banner_shows_oldest_remaining(self, db, vehicle, employee):
        first, second, third = await _open_logs(db, vehicle, employee)

        await anomaly_service.resolve_anomaly(db, third.id)
        assert vehicle.current_anomaly == "Gomma a terra"

        await anomaly_service.resolve_anomaly(db, first.id)
        assert vehicle.current_anomaly == "Rumore ai freni"

        await anomaly_service.resolve_anomaly(db, second.id)
        assert vehicle.current_anomaly is None

    async def test_resolution_order_does_not_matter(self, db, vehicle, employee):
        first, second, third = await _open_logs(db, vehicle, employee)

        await anomaly_service.resolve_anomaly(db, second.id)
        assert vehicle.current_anomaly == "Gomma a terra"

        await anomaly_service.resolve_anomaly(db, first.id)
        assert vehicle.current_anomaly == "Spia motore accesa"

        await anomaly_service.resolve_anomaly(db, third.id)
        assert vehicle.current_anomaly is None
        assert await anomaly_service.list_unresolved(db, vehicle.id) == []

    async def test_resolve_is_idempotent(self, db, vehicle, employee):
        log = await make_trip_log(
            db, vehicle, employee, date(2024, 3, 1), 1000, 1100,
            has_anomaly=True, anomaly_description="Gomma a terra",
        )
        first_time = datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc)

        resolved = await anomaly_service.resolve_anomaly(db, log.id, resolved_at=first_time)
        stamp = resolved.resolved_at

        again = await anomaly_service.resolve_anomaly(db, log.id)

        assert again.is_resolved is True
        assert again.resolved_at == stamp

    async def test_log_without_anomaly(self, db, vehicle, employee):
        log = await make_trip_log(db, vehicle, employee, date(2024, 3, 1), 1000, 1100)

        with pytest.raises(BusinessValidationError):
            await anomaly_service.resolve_anomaly(db, log.id)

    async def test_refresh_other_vehicle_untouched(self, db, vehicle, employee):
        """Il ricalcolo considera solo le anomalie del veicolo indicato."""
        other = await make_vehicle(db, plate="ZZ999ZZ")
        await make_trip_log(
            db, other, employee, date(2024, 3, 1), 0, 10,
            has_anomaly=True, anomaly_description="Specchietto rotto",
        )

        banner = await anomaly_service.refresh_vehicle_banner(db, vehicle.id)

        assert banner is None
        assert vehicle.current_anomaly is None
