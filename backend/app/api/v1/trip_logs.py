"""
Router FastAPI per le registrazioni di viaggio
Progetto: Fleet Manager (Gestione Flotta)

Endpoint per apertura, chiusura, eliminazione dei viaggi e per la
segnalazione e risoluzione manuale delle anomalie.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import CurrentUser
from app.schemas.trip_log import (
    AnomalyReport,
    AnomalyResolve,
    TripLogCreate,
    TripLogList,
    TripLogRead,
    TripLogUpdate,
)
from app.services.anomaly_service import anomaly_service
from app.services.trip_log_service import trip_log_service

# Logger per questo modulo
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/trip-logs",
    tags=["Registro Viaggi"],
)


@router.get(
    "/",
    name="viaggi_lista",
    summary="Lista viaggi",
    description=(
        "Ultime registrazioni di viaggio. I dipendenti vedono solo le proprie; "
        "gli amministratori possono filtrare per utente."
    ),
    response_model=TripLogList,
)
async def get_trip_logs(
    current_user: CurrentUser,
    user_id: Optional[uuid.UUID] = Query(None, description="Filtro per conducente (solo admin)"),
    vehicle_id: Optional[uuid.UUID] = Query(None, description="Filtro per veicolo"),
    db: AsyncSession = Depends(get_db),
) -> TripLogList:
    logs = await trip_log_service.get_all(
        db=db,
        current_user=current_user,
        user_id=user_id,
        vehicle_id=vehicle_id,
    )
    return TripLogList(
        items=[TripLogRead.model_validate(log) for log in logs],
        total=len(logs),
    )


@router.post(
    "/",
    name="viaggio_crea",
    summary="Registra viaggio",
    description="Apre un viaggio (o lo registra già chiuso) verificando il chilometraggio.",
    response_model=TripLogRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_trip_log(
    data: TripLogCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> TripLogRead:
    """
    Raises:
        404 Not Found: Se il veicolo non esiste
        409 Conflict: Se il veicolo ha già un viaggio aperto
        422: Se il chilometraggio regredisce (MILEAGE_REGRESSION)
    """
    log = await trip_log_service.create(db=db, current_user=current_user, data=data)
    await db.commit()
    return TripLogRead.model_validate(log)


@router.put(
    "/{trip_log_id}",
    name="viaggio_aggiorna",
    summary="Aggiorna viaggio",
    description="Chiusura del viaggio, segnalazione o risoluzione di un'anomalia.",
    response_model=TripLogRead,
)
async def update_trip_log(
    trip_log_id: uuid.UUID,
    data: TripLogUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> TripLogRead:
    log = await trip_log_service.update(
        db=db,
        trip_log_id=trip_log_id,
        current_user=current_user,
        data=data,
    )
    await db.commit()
    return TripLogRead.model_validate(log)


@router.delete(
    "/{trip_log_id}",
    name="viaggio_elimina",
    summary="Elimina viaggio",
    description="Elimina una registrazione (solo il conducente o un amministratore).",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_trip_log(
    trip_log_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    await trip_log_service.delete(db=db, trip_log_id=trip_log_id, current_user=current_user)
    await db.commit()


# -------------------------------------------------------------------
# Anomalie
# -------------------------------------------------------------------

@router.post(
    "/{trip_log_id}/anomaly",
    name="viaggio_segnala_anomalia",
    summary="Segnala anomalia",
    description="Segnala un'anomalia e aggiorna il banner del veicolo.",
    response_model=TripLogRead,
)
async def report_trip_log_anomaly(
    trip_log_id: uuid.UUID,
    data: AnomalyReport,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> TripLogRead:
    await trip_log_service.get_for_user(db, trip_log_id, current_user)
    log = await anomaly_service.report_anomaly(db, trip_log_id, data.description)
    await db.commit()
    return TripLogRead.model_validate(log)


@router.post(
    "/{trip_log_id}/resolve",
    name="viaggio_risolvi_anomalia",
    summary="Risolvi anomalia",
    description="Segna l'anomalia come risolta e ricalcola il banner del veicolo.",
    response_model=TripLogRead,
)
async def resolve_trip_log_anomaly(
    trip_log_id: uuid.UUID,
    current_user: CurrentUser,
    data: Optional[AnomalyResolve] = None,
    db: AsyncSession = Depends(get_db),
) -> TripLogRead:
    await trip_log_service.get_for_user(db, trip_log_id, current_user)
    log = await anomaly_service.resolve_anomaly(
        db,
        trip_log_id,
        resolved_at=data.resolved_at if data else None,
    )
    await db.commit()
    return TripLogRead.model_validate(log)
