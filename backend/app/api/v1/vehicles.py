"""
Router FastAPI per l'entità Vehicle
Progetto: Fleet Manager (Gestione Flotta)

Definisce gli endpoint API per anagrafica veicoli e viste derivate:
chilometraggio, statistiche, scadenze, cronologia e anomalie aperte.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import AdminUser, CurrentUser
from app.schemas.mileage import (
    FleetVehicleSummary,
    HistoryItem,
    LastKnownMileage,
    MileageStatistics,
    ServiceStatus,
)
from app.schemas.trip_log import UnresolvedAnomalyRead
from app.schemas.vehicle import (
    ActiveVehicleRead,
    VehicleCreate,
    VehicleList,
    VehicleRead,
    VehicleStatus,
    VehicleUpdate,
)
from app.services.anomaly_service import anomaly_service
from app.services.mileage_service import mileage_service
from app.services.service_due import compute_service_status
from app.services.vehicle_service import vehicle_service

# Logger per questo modulo
logger = logging.getLogger(__name__)

# Router con prefix e tag
router = APIRouter(
    prefix="/vehicles",
    tags=["Veicoli"],
)


# -------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------

# IMPORTANTE: /active e /fleet devono precedere /{vehicle_id}
# per evitare che FastAPI li interpreti come UUID.

@router.get(
    "/",
    name="veicoli_lista",
    summary="Lista veicoli",
    description="Recupera la lista paginata dei veicoli con ricerca per targa o nome.",
    response_model=VehicleList,
    status_code=status.HTTP_200_OK,
)
async def get_vehicles(
    admin: AdminUser,
    page: int = Query(1, ge=1, description="Numero pagina"),
    per_page: int = Query(10, ge=1, le=100, description="Elementi per pagina"),
    search: Optional[str] = Query(None, description="Ricerca su targa e nome"),
    vehicle_status: Optional[VehicleStatus] = Query(None, alias="status", description="Filtro stato"),
    db: AsyncSession = Depends(get_db),
) -> VehicleList:
    vehicles, total = await vehicle_service.get_all(
        db=db,
        page=page,
        per_page=per_page,
        search=search,
        status=vehicle_status,
    )

    return VehicleList(
        items=[VehicleRead.model_validate(v) for v in vehicles],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get(
    "/active",
    name="veicoli_attivi",
    summary="Veicoli attivi",
    description="Veicoli in servizio con l'ultimo chilometraggio noto, per i moduli di viaggio.",
    response_model=list[ActiveVehicleRead],
)
async def get_active_vehicles(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> list[ActiveVehicleRead]:
    return await vehicle_service.list_active(db)


@router.get(
    "/fleet",
    name="veicoli_panoramica",
    summary="Panoramica flotta",
    description="Tutti i veicoli con km attuali, km al prossimo tagliando e fascia di scadenza.",
    response_model=list[FleetVehicleSummary],
)
async def get_fleet_overview(
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> list[FleetVehicleSummary]:
    return await vehicle_service.fleet_overview(db)


@router.get(
    "/{vehicle_id}",
    name="veicolo_dettaglio",
    summary="Dettaglio veicolo",
    response_model=VehicleRead,
)
async def get_vehicle(
    vehicle_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> VehicleRead:
    vehicle = await vehicle_service.get_by_id(db, vehicle_id)
    return VehicleRead.model_validate(vehicle)


@router.post(
    "/",
    name="veicolo_crea",
    summary="Crea veicolo",
    description="Crea un nuovo veicolo. La targa deve essere univoca.",
    response_model=VehicleRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> VehicleRead:
    """
    Raises:
        409 Conflict: Se la targa è già in uso
    """
    vehicle = await vehicle_service.create(db=db, vehicle_data=vehicle_data)
    await db.commit()
    return VehicleRead.model_validate(vehicle)


@router.put(
    "/{vehicle_id}",
    name="veicolo_aggiorna",
    summary="Aggiorna veicolo",
    description="Aggiorna i dati di un veicolo esistente.",
    response_model=VehicleRead,
)
async def update_vehicle(
    vehicle_id: uuid.UUID,
    vehicle_data: VehicleUpdate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> VehicleRead:
    vehicle = await vehicle_service.update(
        db=db,
        vehicle_id=vehicle_id,
        vehicle_data=vehicle_data,
    )
    await db.commit()
    return VehicleRead.model_validate(vehicle)


@router.delete(
    "/{vehicle_id}",
    name="veicolo_elimina",
    summary="Elimina veicolo",
    description="Elimina un veicolo con viaggi, rifornimenti, manutenzioni, verifiche e documenti.",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_vehicle(
    vehicle_id: uuid.UUID,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    await vehicle_service.delete(db=db, vehicle_id=vehicle_id)
    await db.commit()


# -------------------------------------------------------------------
# Viste derivate
# -------------------------------------------------------------------

@router.get(
    "/{vehicle_id}/mileage",
    name="veicolo_chilometraggio",
    summary="Ultimo chilometraggio noto",
    description="Chilometraggio più recente tra viaggi, rifornimenti, manutenzioni e verifiche km.",
    response_model=LastKnownMileage,
)
async def get_vehicle_mileage(
    vehicle_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> LastKnownMileage:
    return await mileage_service.resolve_last_known_mileage(db, vehicle_id)


@router.get(
    "/{vehicle_id}/statistics",
    name="veicolo_statistiche",
    summary="Statistiche veicolo",
    description="Media km annua, consumo medio e totali dei costi.",
    response_model=MileageStatistics,
)
async def get_vehicle_statistics(
    vehicle_id: uuid.UUID,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> MileageStatistics:
    return await mileage_service.get_mileage_statistics(db, vehicle_id)


@router.get(
    "/{vehicle_id}/service-status",
    name="veicolo_scadenze",
    summary="Scadenze tagliando e revisione",
    response_model=ServiceStatus,
)
async def get_vehicle_service_status(
    vehicle_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> ServiceStatus:
    return await compute_service_status(db, vehicle_id)


@router.get(
    "/{vehicle_id}/history",
    name="veicolo_cronologia",
    summary="Cronologia veicolo",
    description="Viaggi, rifornimenti, manutenzioni e verifiche km in ordine cronologico inverso.",
    response_model=list[HistoryItem],
)
async def get_vehicle_history(
    vehicle_id: uuid.UUID,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> list[HistoryItem]:
    return await vehicle_service.get_history(db, vehicle_id)


@router.get(
    "/{vehicle_id}/anomalies",
    name="veicolo_anomalie_aperte",
    summary="Anomalie non risolte",
    description="Anomalie aperte del veicolo, dalla più vecchia, risolvibili con un intervento.",
    response_model=list[UnresolvedAnomalyRead],
)
async def get_vehicle_unresolved_anomalies(
    vehicle_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> list[UnresolvedAnomalyRead]:
    logs = await anomaly_service.list_unresolved(db, vehicle_id)
    return [UnresolvedAnomalyRead.model_validate(log) for log in logs]
