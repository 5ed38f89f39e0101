"""
Service Layer per gli interventi di manutenzione
Progetto: Fleet Manager (Gestione Flotta)

La registrazione di un intervento può chiudere una o più anomalie:
creazione, collegamento delle anomalie, risoluzione e ricalcolo del
banner avvengono in un'unica transazione.
"""

import datetime
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BusinessValidationError, NotFoundError, TransactionFailure
from app.models import MaintenanceRecord, TripLog, Vehicle
from app.schemas.maintenance import MaintenanceCreate, MaintenanceUpdate
from app.services.anomaly_service import anomaly_service
from app.services.mileage_service import mileage_service

# Logger per questo modulo
logger = logging.getLogger(__name__)


def resolution_timestamp(maintenance_date: datetime.date) -> datetime.datetime:
    """Le anomalie risolte da un intervento risultano chiuse alla data dell'intervento."""
    return datetime.datetime.combine(
        maintenance_date,
        datetime.time.min,
        tzinfo=datetime.timezone.utc,
    )


class MaintenanceService:
    """
    Service per la gestione degli interventi di manutenzione.
    """

    async def _get_vehicle(self, db: AsyncSession, vehicle_id: uuid.UUID) -> Vehicle:
        vehicle = await db.get(Vehicle, vehicle_id)
        if vehicle is None:
            logger.warning(f"Veicolo non trovato: {vehicle_id}")
            raise NotFoundError(f"Veicolo con ID {vehicle_id} non trovato")
        return vehicle

    async def get_by_id(
        self,
        db: AsyncSession,
        maintenance_id: uuid.UUID,
    ) -> MaintenanceRecord:
        """
        Recupera un intervento tramite ID.

        Raises:
            NotFoundError: Se l'intervento non esiste
        """
        result = await db.execute(
            select(MaintenanceRecord).where(MaintenanceRecord.id == maintenance_id)
        )
        record = result.scalar_one_or_none()

        if record is None:
            logger.warning(f"Intervento non trovato: {maintenance_id}")
            raise NotFoundError("Intervento non trovato")

        return record

    async def list_by_vehicle(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
    ) -> list[MaintenanceRecord]:
        """Interventi del veicolo dal più recente."""
        await self._get_vehicle(db, vehicle_id)
        result = await db.execute(
            select(MaintenanceRecord)
            .where(MaintenanceRecord.vehicle_id == vehicle_id)
            .order_by(MaintenanceRecord.date.desc(), MaintenanceRecord.mileage.desc())
        )
        return list(result.scalars().all())

    async def _load_resolvable_logs(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        log_ids: list[uuid.UUID],
    ) -> list[TripLog]:
        """
        Carica tutte le registrazioni da risolvere prima di qualunque scrittura.

        Raises:
            NotFoundError: Se uno o più ID non esistono
            BusinessValidationError: Se una registrazione è di un altro
                veicolo o non riporta anomalie
        """
        if not log_ids:
            return []

        result = await db.execute(select(TripLog).where(TripLog.id.in_(log_ids)))
        logs = {log.id: log for log in result.scalars().all()}

        missing = [log_id for log_id in log_ids if log_id not in logs]
        if missing:
            logger.warning(f"Anomalie da risolvere non trovate: {missing}")
            raise NotFoundError(
                "Registrazioni con anomalia non trovate",
                extra={"missing_ids": [str(log_id) for log_id in missing]},
            )

        for log in logs.values():
            if log.vehicle_id != vehicle_id:
                raise BusinessValidationError(
                    f"La registrazione {log.id} appartiene a un altro veicolo"
                )
            if not log.has_anomaly:
                raise BusinessValidationError(
                    f"La registrazione {log.id} non riporta alcuna anomalia"
                )

        return [logs[log_id] for log_id in log_ids]

    async def record_with_resolutions(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        data: MaintenanceCreate,
    ) -> MaintenanceRecord:
        """
        Registra un intervento risolvendo le anomalie indicate.

        Tutte le verifiche (veicolo, chilometraggio, anomalie) precedono
        le scritture; un errore del database durante le scritture annulla
        l'intera transazione.

        Args:
            db: Sessione database
            vehicle_id: UUID del veicolo
            data: Dati dell'intervento con resolved_anomaly_ids

        Returns:
            L'intervento creato, con le anomalie risolte caricate

        Raises:
            NotFoundError: Se il veicolo o una delle registrazioni non esiste
            MileageRegressionError: Se il chilometraggio regredisce
            BusinessValidationError: Se una registrazione non è risolvibile
            TransactionFailure: Se il database fallisce durante le scritture
        """
        await self._get_vehicle(db, vehicle_id)
        await mileage_service.validate_new_reading(db, vehicle_id, data.date, data.mileage)
        logs = await self._load_resolvable_logs(db, vehicle_id, data.resolved_anomaly_ids)

        resolved_at = resolution_timestamp(data.date)

        try:
            record = MaintenanceRecord(
                vehicle_id=vehicle_id,
                **data.model_dump(exclude={"resolved_anomaly_ids"}),
            )
            record.resolved_anomalies = logs

            for log in logs:
                # Le anomalie già chiuse mantengono la data di risoluzione originale
                if not log.is_resolved:
                    log.is_resolved = True
                    log.resolved_at = resolved_at

            db.add(record)
            await db.flush()

            await anomaly_service.refresh_vehicle_banner(db, vehicle_id)
            await db.refresh(record)

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                f"Registrazione intervento fallita per il veicolo {vehicle_id}: {e}",
                exc_info=True,
            )
            raise TransactionFailure() from e

        logger.info(
            f"Creato intervento {record.id} ({record.type}) sul veicolo {vehicle_id}, "
            f"anomalie risolte: {len(logs)}"
        )
        return record

    async def update(
        self,
        db: AsyncSession,
        maintenance_id: uuid.UUID,
        data: MaintenanceUpdate,
    ) -> MaintenanceRecord:
        """
        Aggiorna un intervento esistente.

        I campi pneumatici arrivano già normalizzati dallo schema: passando
        a un tipo diverso da GOMME vengono azzerati.
        """
        record = await self.get_by_id(db, maintenance_id)

        for field, value in data.model_dump().items():
            setattr(record, field, value)

        await db.flush()
        await db.refresh(record)

        logger.info(f"Aggiornato intervento: {record.id}")
        return record

    async def delete(
        self,
        db: AsyncSession,
        maintenance_id: uuid.UUID,
    ) -> None:
        """
        Elimina un intervento.

        Le anomalie risolte dall'intervento restano risolte.
        """
        record = await self.get_by_id(db, maintenance_id)
        await db.delete(record)
        await db.flush()

        logger.info(f"Eliminato intervento: {maintenance_id}")


# Istanza globale del service
maintenance_service = MaintenanceService()
