"""
Service Layer per il chilometraggio dei veicoli
Progetto: Fleet Manager (Gestione Flotta)

Il chilometraggio corrente non è memorizzato: viene ricavato a ogni
richiesta confrontando l'ultimo evento di ciascuno dei quattro flussi
(viaggi, rifornimenti, manutenzioni, verifiche km).
"""

import datetime
import logging
import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import MileageRegressionError, NotFoundError
from app.models import FuelingRecord, MaintenanceRecord, MileageCheck, TripLog, Vehicle
from app.schemas.mileage import (
    LastKnownMileage,
    MileageReading,
    MileageSource,
    MileageStatistics,
)
from app.services import mileage_calculations

# Logger per questo modulo
logger = logging.getLogger(__name__)


class MileageService:
    """
    Service per il calcolo e la validazione del chilometraggio.

    Le letture sono aggregazioni al momento della query: non esiste
    un secondo valore memorizzato da tenere allineato.
    """

    async def _ensure_vehicle(self, db: AsyncSession, vehicle_id: uuid.UUID) -> Vehicle:
        vehicle = await db.get(Vehicle, vehicle_id)
        if vehicle is None:
            logger.warning(f"Veicolo non trovato: {vehicle_id}")
            raise NotFoundError(f"Veicolo con ID {vehicle_id} non trovato")
        return vehicle

    # ------------------------------------------------------------
    # Ultima lettura per flusso
    # ------------------------------------------------------------
    async def _latest_trip_log(
        self, db: AsyncSession, vehicle_id: uuid.UUID
    ) -> Optional[MileageReading]:
        # Un viaggio aperto contribuisce con i km di partenza
        km = func.coalesce(TripLog.final_km, TripLog.initial_km)
        result = await db.execute(
            select(TripLog.date, km.label("km"))
            .where(TripLog.vehicle_id == vehicle_id)
            .order_by(TripLog.date.desc(), km.desc())
            .limit(1)
        )
        row = result.first()
        if row is None:
            return None
        return MileageReading(km=row.km, date=row.date, source=MileageSource.TRIP_LOG)

    async def _latest_reading(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        model,
        km_column,
        source: MileageSource,
    ) -> Optional[MileageReading]:
        result = await db.execute(
            select(model.date, km_column)
            .where(model.vehicle_id == vehicle_id)
            .order_by(model.date.desc(), km_column.desc())
            .limit(1)
        )
        row = result.first()
        if row is None:
            return None
        return MileageReading(km=row[1], date=row[0], source=source)

    async def _stream_candidates(
        self, db: AsyncSession, vehicle_id: uuid.UUID
    ) -> list[Optional[MileageReading]]:
        return [
            await self._latest_trip_log(db, vehicle_id),
            await self._latest_reading(
                db, vehicle_id, FuelingRecord, FuelingRecord.mileage, MileageSource.FUELING
            ),
            await self._latest_reading(
                db, vehicle_id, MaintenanceRecord, MaintenanceRecord.mileage, MileageSource.MAINTENANCE
            ),
            await self._latest_reading(
                db, vehicle_id, MileageCheck, MileageCheck.km, MileageSource.MILEAGE_CHECK
            ),
        ]

    # ------------------------------------------------------------
    # API pubblica
    # ------------------------------------------------------------
    async def resolve_last_known_mileage(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
    ) -> LastKnownMileage:
        """
        Calcola l'ultimo chilometraggio noto del veicolo.

        Args:
            db: Sessione database
            vehicle_id: UUID del veicolo

        Returns:
            LastKnownMileage (km=0, as_of=None se il veicolo non ha eventi)

        Raises:
            NotFoundError: Se il veicolo non esiste
        """
        await self._ensure_vehicle(db, vehicle_id)
        candidates = await self._stream_candidates(db, vehicle_id)
        last_known = mileage_calculations.pick_last_known(candidates)

        logger.debug(
            f"Ultimo chilometraggio veicolo {vehicle_id}: "
            f"{last_known.km} km al {last_known.as_of} ({last_known.source})"
        )
        return last_known

    async def validate_new_reading(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        reading_date: datetime.date,
        km: int,
    ) -> LastKnownMileage:
        """
        Verifica che una nuova lettura non faccia regredire il contachilometri.

        Le letture retrodatate (data precedente all'ultimo valore noto)
        sono accettate senza controlli.

        Returns:
            L'ultimo chilometraggio noto usato per il confronto

        Raises:
            NotFoundError: Se il veicolo non esiste
            MileageRegressionError: Se km è inferiore all'ultimo valore noto
        """
        last_known = await self.resolve_last_known_mileage(db, vehicle_id)

        if mileage_calculations.is_regression(last_known, reading_date, km):
            logger.warning(
                f"Regressione chilometraggio veicolo {vehicle_id}: "
                f"{km} km il {reading_date} < {last_known.km} km il {last_known.as_of}"
            )
            raise MileageRegressionError(
                attempted=km,
                last_known=last_known.km,
                last_known_date=last_known.as_of,
            )

        return last_known

    async def get_first_record_date(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
    ) -> Optional[datetime.date]:
        """Data del primo evento registrato su uno qualsiasi dei flussi."""
        dates = []
        for model in (TripLog, FuelingRecord, MaintenanceRecord, MileageCheck):
            result = await db.execute(
                select(func.min(model.date)).where(model.vehicle_id == vehicle_id)
            )
            value = result.scalar()
            if value is not None:
                dates.append(value)
        return min(dates) if dates else None

    async def get_mileage_statistics(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        today: Optional[datetime.date] = None,
    ) -> MileageStatistics:
        """
        Statistiche derivate dallo storico del veicolo.

        Args:
            db: Sessione database
            vehicle_id: UUID del veicolo
            today: Data di riferimento (default: oggi)

        Raises:
            NotFoundError: Se il veicolo non esiste
        """
        today = today or datetime.date.today()
        last_known = await self.resolve_last_known_mileage(db, vehicle_id)
        first_date = await self.get_first_record_date(db, vehicle_id)

        fuel_rows = await db.execute(
            select(FuelingRecord.mileage, FuelingRecord.liters, FuelingRecord.cost)
            .where(FuelingRecord.vehicle_id == vehicle_id)
        )
        fuelings = fuel_rows.all()

        maintenance_cost = await db.execute(
            select(func.coalesce(func.sum(MaintenanceRecord.cost), 0))
            .where(MaintenanceRecord.vehicle_id == vehicle_id)
        )
        trip_count = await db.execute(
            select(func.count(TripLog.id)).where(TripLog.vehicle_id == vehicle_id)
        )

        total_fuel_cost = sum(
            (Decimal(str(row.cost)) for row in fuelings),
            Decimal("0"),
        )

        return MileageStatistics(
            last_known_km=last_known.km,
            first_record_date=first_date,
            average_annual_km=mileage_calculations.average_annual_km(
                last_known.km, first_date, today
            ),
            average_consumption_l_100km=mileage_calculations.average_consumption(
                [(row.mileage, row.liters) for row in fuelings]
            ),
            total_fuel_cost=total_fuel_cost,
            total_maintenance_cost=Decimal(str(maintenance_cost.scalar() or 0)),
            fueling_count=len(fuelings),
            trip_count=trip_count.scalar() or 0,
        )


# Istanza globale del service
mileage_service = MileageService()
