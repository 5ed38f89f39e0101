"""
API v1 Routes
Progetto: Fleet Manager (Gestione Flotta)

Router versione 1 dell'API.
"""

from fastapi import APIRouter

from app.api.v1 import (
    auth, users, vehicles, trip_logs, fuelings, maintenance, mileage_checks, documents
)

# Router aggregato per v1
api_v1_router = APIRouter(prefix="/api/v1")

# Includi i router dei moduli
api_v1_router.include_router(auth.router)
api_v1_router.include_router(users.router)
api_v1_router.include_router(vehicles.router)
api_v1_router.include_router(trip_logs.router)
api_v1_router.include_router(fuelings.router)
api_v1_router.include_router(maintenance.router)
api_v1_router.include_router(mileage_checks.router)
api_v1_router.include_router(documents.router)

# Esportazione
__all__ = ["api_v1_router"]
