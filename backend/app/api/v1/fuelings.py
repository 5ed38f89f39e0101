"""
Router FastAPI per i rifornimenti
Progetto: Fleet Manager (Gestione Flotta)
"""

import logging
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import AdminUser, CurrentUser
from app.schemas.fueling import FuelingCreate, FuelingRead, FuelingUpdate
from app.services.fueling_service import fueling_service

# Logger per questo modulo
logger = logging.getLogger(__name__)

router = APIRouter(tags=["Rifornimenti"])


@router.get(
    "/vehicles/{vehicle_id}/fuelings",
    name="rifornimenti_lista",
    summary="Rifornimenti del veicolo",
    response_model=list[FuelingRead],
)
async def get_vehicle_fuelings(
    vehicle_id: uuid.UUID,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> list[FuelingRead]:
    records = await fueling_service.list_by_vehicle(db, vehicle_id)
    return [FuelingRead.model_validate(r) for r in records]


@router.post(
    "/vehicles/{vehicle_id}/fuelings",
    name="rifornimento_crea",
    summary="Registra rifornimento",
    description="Registra un rifornimento; il chilometraggio non può regredire.",
    response_model=FuelingRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_fueling(
    vehicle_id: uuid.UUID,
    data: FuelingCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> FuelingRead:
    record = await fueling_service.create(db, vehicle_id, current_user, data)
    await db.commit()
    return FuelingRead.model_validate(record)


@router.put(
    "/fuelings/{fueling_id}",
    name="rifornimento_aggiorna",
    summary="Aggiorna rifornimento",
    response_model=FuelingRead,
)
async def update_fueling(
    fueling_id: uuid.UUID,
    data: FuelingUpdate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> FuelingRead:
    record = await fueling_service.update(db, fueling_id, data)
    await db.commit()
    return FuelingRead.model_validate(record)


@router.delete(
    "/fuelings/{fueling_id}",
    name="rifornimento_elimina",
    summary="Elimina rifornimento",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_fueling(
    fueling_id: uuid.UUID,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    await fueling_service.delete(db, fueling_id)
    await db.commit()
