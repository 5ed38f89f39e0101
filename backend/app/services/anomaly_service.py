"""
Service Layer per le anomalie dei veicoli
Progetto: Fleet Manager (Gestione Flotta)

Il banner Vehicle.current_anomaly è una proiezione dell'insieme delle
registrazioni con has_anomaly=True e is_resolved=False: viene
aggiornato da questo service a ogni modifica di quell'insieme, nella
stessa transazione della modifica.
"""

import datetime
import logging
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BusinessValidationError, NotFoundError
from app.models import TripLog, Vehicle

# Logger per questo modulo
logger = logging.getLogger(__name__)


def _unresolved_filter(vehicle_id: uuid.UUID, exclude_log_id: Optional[uuid.UUID] = None):
    conditions = [
        TripLog.vehicle_id == vehicle_id,
        TripLog.has_anomaly.is_(True),
        TripLog.is_resolved.is_(False),
    ]
    if exclude_log_id is not None:
        conditions.append(TripLog.id != exclude_log_id)
    return conditions


class AnomalyService:
    """
    Service per segnalazione e risoluzione delle anomalie.

    I metodi eseguono solo flush: il commit resta al chiamante, così
    l'aggiornamento del banner fa parte della stessa transazione.
    """

    async def _get_log(self, db: AsyncSession, trip_log_id: uuid.UUID) -> TripLog:
        log = await db.get(TripLog, trip_log_id)
        if log is None:
            logger.warning(f"Registrazione non trovata: {trip_log_id}")
            raise NotFoundError(f"Registrazione con ID {trip_log_id} non trovata")
        return log

    async def _get_vehicle(self, db: AsyncSession, vehicle_id: uuid.UUID) -> Vehicle:
        vehicle = await db.get(Vehicle, vehicle_id)
        if vehicle is None:
            logger.warning(f"Veicolo non trovato: {vehicle_id}")
            raise NotFoundError(f"Veicolo con ID {vehicle_id} non trovato")
        return vehicle

    async def set_banner(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        description: str,
    ) -> None:
        """
        Imposta il banner con l'ultima anomalia segnalata.

        L'ultima segnalazione sovrascrive il testo del banner anche se
        anomalie più vecchie restano non risolte.
        """
        vehicle = await self._get_vehicle(db, vehicle_id)
        vehicle.current_anomaly = description
        logger.info(f"Banner anomalia veicolo {vehicle.plate}: {description}")

    async def report_anomaly(
        self,
        db: AsyncSession,
        trip_log_id: uuid.UUID,
        description: str,
    ) -> TripLog:
        """
        Segnala un'anomalia su una registrazione esistente.

        Args:
            db: Sessione database
            trip_log_id: UUID della registrazione
            description: Descrizione dell'anomalia

        Returns:
            La registrazione aggiornata

        Raises:
            NotFoundError: Se la registrazione non esiste
            BusinessValidationError: Se la descrizione è vuota
        """
        description = (description or "").strip()
        if not description:
            raise BusinessValidationError("La descrizione dell'anomalia è obbligatoria")

        log = await self._get_log(db, trip_log_id)
        log.has_anomaly = True
        log.anomaly_description = description
        log.is_resolved = False
        log.resolved_at = None

        await self.set_banner(db, log.vehicle_id, description)
        await db.flush()
        await db.refresh(log)

        logger.info(f"Anomalia segnalata sulla registrazione {log.id}")
        return log

    async def resolve_anomaly(
        self,
        db: AsyncSession,
        trip_log_id: uuid.UUID,
        resolved_at: Optional[datetime.datetime] = None,
    ) -> TripLog:
        """
        Risolve manualmente un'anomalia.

        Una seconda risoluzione della stessa registrazione non modifica
        resolved_at.

        Raises:
            NotFoundError: Se la registrazione non esiste
            BusinessValidationError: Se la registrazione non riporta anomalie
        """
        log = await self._get_log(db, trip_log_id)

        if not log.has_anomaly:
            raise BusinessValidationError("La registrazione non riporta alcuna anomalia")

        if log.is_resolved:
            logger.info(f"Anomalia già risolta: {log.id}")
            return log

        log.is_resolved = True
        log.resolved_at = resolved_at or datetime.datetime.now(datetime.timezone.utc)
        await db.flush()

        await self.refresh_vehicle_banner(db, log.vehicle_id, exclude_log_id=log.id)
        await db.refresh(log)

        logger.info(f"Anomalia risolta: {log.id}")
        return log

    async def refresh_vehicle_banner(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        exclude_log_id: Optional[uuid.UUID] = None,
    ) -> Optional[str]:
        """
        Ricalcola il banner dalle anomalie non risolte.

        Nessuna anomalia aperta: banner a None. Altrimenti il banner
        mostra la più vecchia (data, poi ordine di inserimento).

        Returns:
            Il nuovo testo del banner
        """
        await db.flush()
        vehicle = await self._get_vehicle(db, vehicle_id)
        conditions = _unresolved_filter(vehicle_id, exclude_log_id)

        count_result = await db.execute(
            select(func.count(TripLog.id)).where(*conditions)
        )
        unresolved = count_result.scalar() or 0

        if unresolved == 0:
            vehicle.current_anomaly = None
        else:
            oldest = await db.execute(
                select(TripLog.anomaly_description)
                .where(*conditions)
                .order_by(TripLog.date.asc(), TripLog.created_at.asc())
                .limit(1)
            )
            vehicle.current_anomaly = oldest.scalar()

        await db.flush()
        logger.debug(
            f"Banner veicolo {vehicle_id} ricalcolato: {unresolved} anomalie aperte"
        )
        return vehicle.current_anomaly

    async def list_unresolved(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
    ) -> list[TripLog]:
        """Anomalie non risolte del veicolo, dalla più vecchia."""
        await self._get_vehicle(db, vehicle_id)
        result = await db.execute(
            select(TripLog)
            .where(*_unresolved_filter(vehicle_id))
            .order_by(TripLog.date.asc(), TripLog.created_at.asc())
        )
        return list(result.scalars().all())


# Istanza globale del service
anomaly_service = AnomalyService()
