"""
Service Layer per i rifornimenti
Progetto: Fleet Manager (Gestione Flotta)
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.models import FuelingRecord, User, Vehicle
from app.schemas.fueling import FuelingCreate, FuelingUpdate
from app.services.mileage_service import mileage_service

# Logger per questo modulo
logger = logging.getLogger(__name__)


class FuelingService:
    """Service per la gestione dei rifornimenti."""

    async def get_by_id(self, db: AsyncSession, fueling_id: uuid.UUID) -> FuelingRecord:
        """
        Raises:
            NotFoundError: Se il rifornimento non esiste
        """
        record = await db.get(FuelingRecord, fueling_id)
        if record is None:
            logger.warning(f"Rifornimento non trovato: {fueling_id}")
            raise NotFoundError("Rifornimento non trovato")
        return record

    async def list_by_vehicle(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
    ) -> list[FuelingRecord]:
        """Rifornimenti del veicolo dal più recente."""
        if await db.get(Vehicle, vehicle_id) is None:
            raise NotFoundError("Veicolo non trovato")

        result = await db.execute(
            select(FuelingRecord)
            .where(FuelingRecord.vehicle_id == vehicle_id)
            .order_by(FuelingRecord.date.desc(), FuelingRecord.mileage.desc())
        )
        return list(result.scalars().all())

    async def create(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        current_user: User,
        data: FuelingCreate,
    ) -> FuelingRecord:
        """
        Registra un rifornimento dopo aver verificato il chilometraggio.

        Raises:
            NotFoundError: Se il veicolo non esiste
            MileageRegressionError: Se il chilometraggio regredisce
        """
        await mileage_service.validate_new_reading(db, vehicle_id, data.date, data.mileage)

        record = FuelingRecord(
            vehicle_id=vehicle_id,
            user_id=current_user.id,
            **data.model_dump(),
        )
        db.add(record)
        await db.flush()
        await db.refresh(record)

        logger.info(
            f"Registrato rifornimento {record.id}: {record.liters} l a {record.mileage} km"
        )
        return record

    async def update(
        self,
        db: AsyncSession,
        fueling_id: uuid.UUID,
        data: FuelingUpdate,
    ) -> FuelingRecord:
        """Modifica un rifornimento esistente (nessuna nuova verifica km)."""
        record = await self.get_by_id(db, fueling_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(record, field, value)

        await db.flush()
        await db.refresh(record)

        logger.info(f"Aggiornato rifornimento: {record.id}")
        return record

    async def delete(self, db: AsyncSession, fueling_id: uuid.UUID) -> None:
        record = await self.get_by_id(db, fueling_id)
        await db.delete(record)
        await db.flush()
        logger.info(f"Eliminato rifornimento: {fueling_id}")


# Istanza globale del service
fueling_service = FuelingService()
