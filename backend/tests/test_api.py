"""
Test degli endpoint HTTP: autenticazione, permessi e formato degli errori.

Il database dell'applicazione viene sostituito con la sessione di test.
"""

from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.database import get_db
from app.core.security import create_access_token, create_refresh_token
from app.main import app


@pytest.fixture
async def client(db):
    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def _auth(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id), user.role)}"}


class TestSystem:
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestAuthentication:
    """Test per token e ruoli."""

    async def test_missing_token(self, client):
        response = await client.get("/api/v1/trip-logs/")
        assert response.status_code == 401

    async def test_refresh_token_not_accepted_as_access(self, client, admin):
        token = create_refresh_token(str(admin.id), admin.role)

        response = await client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401

    async def test_me(self, client, employee):
        response = await client.get("/api/v1/auth/me", headers=_auth(employee))

        assert response.status_code == 200
        assert response.json()["role"] == "employee"

    async def test_employee_cannot_manage_vehicles(self, client, employee):
        response = await client.get("/api/v1/vehicles/", headers=_auth(employee))
        assert response.status_code == 403

    async def test_register_closed_after_first_user(self, client, admin):
        response = await client.post("/api/v1/auth/register", json={
            "email": "nuovo@example.com",
            "password": "password-sicura",
            "full_name": "Nuovo Utente",
        })

        assert response.status_code == 403
        assert response.json()["error_code"] == "FORBIDDEN"


class TestFleetFlow:
    """Flusso completo: veicolo, viaggio, rifornimento con regressione."""

    async def test_mileage_regression_response(self, client, admin, employee):
        created = await client.post("/api/v1/vehicles/", headers=_auth(admin), json={
            "plate": "ab 123 cd",
            "name": "Fiat Doblò",
            "type": "Furgone",
        })
        assert created.status_code == 201
        vehicle_id = created.json()["id"]
        assert created.json()["plate"] == "AB123CD"

        trip = await client.post("/api/v1/trip-logs/", headers=_auth(employee), json={
            "vehicle_id": vehicle_id,
            "date": "2024-01-10",
            "initial_km": 9800,
            "final_km": 10000,
            "start_time": "08:00",
            "end_time": "12:00",
        })
        assert trip.status_code == 201
        assert trip.json()["vehicle"]["plate"] == "AB123CD"

        fueling = await client.post(
            f"/api/v1/vehicles/{vehicle_id}/fuelings",
            headers=_auth(employee),
            json={"date": "2024-01-10", "liters": "40.00", "cost": "72.50", "mileage": 9500},
        )
        assert fueling.status_code == 422
        body = fueling.json()
        assert body["error_code"] == "MILEAGE_REGRESSION"
        assert body["extra"] == {
            "attempted": 9500,
            "last_known": 10000,
            "last_known_date": "2024-01-10",
        }

        mileage = await client.get(f"/api/v1/vehicles/{vehicle_id}/mileage", headers=_auth(employee))
        assert mileage.status_code == 200
        assert mileage.json()["km"] == 10000
        assert mileage.json()["as_of"] == date(2024, 1, 10).isoformat()

    async def test_duplicate_plate_conflict(self, client, admin, vehicle):
        response = await client.post("/api/v1/vehicles/", headers=_auth(admin), json={
            "plate": "AB123CD",
            "name": "Doppione",
            "type": "Auto",
        })

        assert response.status_code == 409
        assert response.json()["error_code"] == "DUPLICATE_RESOURCE"

    async def test_unknown_vehicle(self, client, admin):
        response = await client.get(
            "/api/v1/vehicles/00000000-0000-0000-0000-000000000000", headers=_auth(admin)
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "RESOURCE_NOT_FOUND"

    async def test_null_on_required_field_is_rejected(self, client, admin, vehicle, employee):
        response = await client.put(
            f"/api/v1/vehicles/{vehicle.id}", headers=_auth(admin), json={"name": None}
        )
        assert response.status_code == 422

        response = await client.patch(
            f"/api/v1/users/{employee.id}", headers=_auth(admin), json={"role": None}
        )
        assert response.status_code == 422
