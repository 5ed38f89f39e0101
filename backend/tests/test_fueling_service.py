"""
Test per rifornimenti e verifiche del contachilometri.
"""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import MileageRegressionError, NotFoundError
from app.schemas.fueling import FuelingCreate, FuelingUpdate
from app.schemas.mileage_check import MileageCheckCreate
from app.services.fueling_service import fueling_service
from app.services.mileage_check_service import mileage_check_service
from app.services.mileage_service import mileage_service

from conftest import make_fueling, make_trip_log


def _fueling(**overrides) -> FuelingCreate:
    data = {
        "date": date(2024, 2, 1),
        "liters": Decimal("45.50"),
        "cost": Decimal("80.00"),
        "mileage": 12000,
    }
    data.update(overrides)
    return FuelingCreate(**data)


# ============================================================
# Rifornimenti
# ============================================================


class TestFuelingService:
    """Test per registrazione e modifica dei rifornimenti."""

    async def test_create_updates_last_known(self, db, vehicle, employee):
        record = await fueling_service.create(db, vehicle.id, employee, _fueling())

        last_known = await mileage_service.resolve_last_known_mileage(db, vehicle.id)

        assert record.user_id == employee.id
        assert last_known.km == 12000
        assert last_known.as_of == date(2024, 2, 1)

    async def test_create_rejects_regression(self, db, vehicle, employee):
        await make_trip_log(db, vehicle, employee, date(2024, 2, 1), 12000, 12300)

        with pytest.raises(MileageRegressionError) as exc_info:
            await fueling_service.create(db, vehicle.id, employee, _fueling(mileage=12100))

        assert exc_info.value.extra["last_known"] == 12300

    async def test_backdated_fueling_accepted(self, db, vehicle, employee):
        await make_trip_log(db, vehicle, employee, date(2024, 2, 10), 12000, 12300)

        record = await fueling_service.create(
            db, vehicle.id, employee, _fueling(date=date(2024, 1, 20), mileage=11000)
        )

        assert record.mileage == 11000

    async def test_create_on_missing_vehicle(self, db, employee):
        with pytest.raises(NotFoundError):
            await fueling_service.create(db, uuid.uuid4(), employee, _fueling())

    async def test_list_most_recent_first(self, db, vehicle, employee):
        await make_fueling(db, vehicle, employee, date(2024, 1, 1), 1000)
        await make_fueling(db, vehicle, employee, date(2024, 3, 1), 3000)
        await make_fueling(db, vehicle, employee, date(2024, 2, 1), 2000)

        records = await fueling_service.list_by_vehicle(db, vehicle.id)

        assert [r.mileage for r in records] == [3000, 2000, 1000]

    async def test_partial_update_and_delete(self, db, vehicle, employee):
        record = await fueling_service.create(db, vehicle.id, employee, _fueling())

        updated = await fueling_service.update(
            db, record.id, FuelingUpdate(cost=Decimal("82.30"))
        )
        assert updated.cost == Decimal("82.30")
        assert updated.mileage == 12000

        await fueling_service.delete(db, record.id)
        with pytest.raises(NotFoundError):
            await fueling_service.get_by_id(db, record.id)

    @pytest.mark.parametrize("field", ["date", "liters", "cost", "mileage"])
    def test_update_rejects_null_on_required_field(self, field):
        with pytest.raises(PydanticValidationError):
            FuelingUpdate.model_validate({field: None})

    def test_update_allows_clearing_notes(self):
        data = FuelingUpdate.model_validate({"notes": None})
        assert data.model_dump(exclude_unset=True) == {"notes": None}


# ============================================================
# Verifiche km
# ============================================================


class TestMileageCheckService:
    """Test per le letture manuali del contachilometri."""

    async def test_create_and_list(self, db, vehicle, admin):
        await mileage_check_service.create(
            db, vehicle.id, admin, MileageCheckCreate(date=date(2024, 4, 1), km=500)
        )
        await mileage_check_service.create(
            db, vehicle.id, admin, MileageCheckCreate(date=date(2024, 5, 1), km=900)
        )

        checks = await mileage_check_service.list_by_vehicle(db, vehicle.id)

        assert [c.km for c in checks] == [900, 500]

    async def test_create_rejects_regression(self, db, vehicle, admin):
        await mileage_check_service.create(
            db, vehicle.id, admin, MileageCheckCreate(date=date(2024, 4, 1), km=500)
        )

        with pytest.raises(MileageRegressionError):
            await mileage_check_service.create(
                db, vehicle.id, admin, MileageCheckCreate(date=date(2024, 4, 1), km=499)
            )

    async def test_list_on_missing_vehicle(self, db):
        with pytest.raises(NotFoundError):
            await mileage_check_service.list_by_vehicle(db, uuid.uuid4())
