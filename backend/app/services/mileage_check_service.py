"""
Service Layer per le verifiche del contachilometri
Progetto: Fleet Manager (Gestione Flotta)
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.models import MileageCheck, User, Vehicle
from app.schemas.mileage_check import MileageCheckCreate
from app.services.mileage_service import mileage_service

# Logger per questo modulo
logger = logging.getLogger(__name__)


class MileageCheckService:
    """Service per le letture manuali del contachilometri."""

    async def list_by_vehicle(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
    ) -> list[MileageCheck]:
        if await db.get(Vehicle, vehicle_id) is None:
            raise NotFoundError("Veicolo non trovato")

        result = await db.execute(
            select(MileageCheck)
            .where(MileageCheck.vehicle_id == vehicle_id)
            .order_by(MileageCheck.date.desc(), MileageCheck.km.desc())
        )
        return list(result.scalars().all())

    async def create(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        current_user: User,
        data: MileageCheckCreate,
    ) -> MileageCheck:
        """
        Registra una lettura del contachilometri.

        Raises:
            NotFoundError: Se il veicolo non esiste
            MileageRegressionError: Se i km sono inferiori all'ultimo valore noto
        """
        await mileage_service.validate_new_reading(db, vehicle_id, data.date, data.km)

        check = MileageCheck(
            vehicle_id=vehicle_id,
            user_id=current_user.id,
            **data.model_dump(),
        )
        db.add(check)
        await db.flush()
        await db.refresh(check)

        logger.info(f"Registrata verifica km {check.id}: {check.km} km il {check.date}")
        return check


# Istanza globale del service
mileage_check_service = MileageCheckService()
