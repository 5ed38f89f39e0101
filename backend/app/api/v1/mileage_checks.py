"""
Router FastAPI per le verifiche del contachilometri
Progetto: Fleet Manager (Gestione Flotta)
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import CurrentUser
from app.schemas.mileage_check import MileageCheckCreate, MileageCheckRead
from app.services.mileage_check_service import mileage_check_service

router = APIRouter(
    prefix="/vehicles/{vehicle_id}/mileage-checks",
    tags=["Verifiche Km"],
)


@router.get(
    "/",
    name="verifiche_km_lista",
    summary="Verifiche km del veicolo",
    response_model=list[MileageCheckRead],
)
async def get_mileage_checks(
    vehicle_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> list[MileageCheckRead]:
    checks = await mileage_check_service.list_by_vehicle(db, vehicle_id)
    return [MileageCheckRead.model_validate(c) for c in checks]


@router.post(
    "/",
    name="verifica_km_crea",
    summary="Registra verifica km",
    description="Lettura manuale del contachilometri; rifiutata se inferiore all'ultimo valore noto.",
    response_model=MileageCheckRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_mileage_check(
    vehicle_id: uuid.UUID,
    data: MileageCheckCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> MileageCheckRead:
    check = await mileage_check_service.create(db, vehicle_id, current_user, data)
    await db.commit()
    return MileageCheckRead.model_validate(check)
