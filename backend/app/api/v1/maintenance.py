"""
Router FastAPI per gli interventi di manutenzione
Progetto: Fleet Manager (Gestione Flotta)
"""

import logging
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import AdminUser
from app.schemas.maintenance import MaintenanceCreate, MaintenanceRead, MaintenanceUpdate
from app.services.maintenance_service import maintenance_service

# Logger per questo modulo
logger = logging.getLogger(__name__)

router = APIRouter(tags=["Manutenzioni"])


@router.get(
    "/vehicles/{vehicle_id}/maintenance",
    name="manutenzioni_lista",
    summary="Interventi del veicolo",
    response_model=list[MaintenanceRead],
)
async def get_vehicle_maintenance(
    vehicle_id: uuid.UUID,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> list[MaintenanceRead]:
    records = await maintenance_service.list_by_vehicle(db, vehicle_id)
    return [MaintenanceRead.model_validate(r) for r in records]


@router.post(
    "/vehicles/{vehicle_id}/maintenance",
    name="manutenzione_crea",
    summary="Registra intervento",
    description=(
        "Registra un intervento e risolve in un'unica transazione le anomalie "
        "indicate in resolved_anomaly_ids, ricalcolando il banner del veicolo."
    ),
    response_model=MaintenanceRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_maintenance(
    vehicle_id: uuid.UUID,
    data: MaintenanceCreate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> MaintenanceRead:
    """
    Raises:
        404 Not Found: Veicolo o registrazioni inesistenti
        422: Chilometraggio in regressione o anomalie non risolvibili
        500: Transazione fallita, nessuna modifica salvata
    """
    record = await maintenance_service.record_with_resolutions(db, vehicle_id, data)
    await db.commit()
    return MaintenanceRead.model_validate(record)


@router.put(
    "/maintenance/{maintenance_id}",
    name="manutenzione_aggiorna",
    summary="Aggiorna intervento",
    response_model=MaintenanceRead,
)
async def update_maintenance(
    maintenance_id: uuid.UUID,
    data: MaintenanceUpdate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> MaintenanceRead:
    record = await maintenance_service.update(db, maintenance_id, data)
    await db.commit()
    return MaintenanceRead.model_validate(record)


@router.delete(
    "/maintenance/{maintenance_id}",
    name="manutenzione_elimina",
    summary="Elimina intervento",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_maintenance(
    maintenance_id: uuid.UUID,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    await maintenance_service.delete(db, maintenance_id)
    await db.commit()
