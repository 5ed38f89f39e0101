"""
Service Layer per le registrazioni di viaggio
Progetto: Fleet Manager (Gestione Flotta)

Definisce la logica di business per apertura, chiusura, modifica ed
eliminazione dei viaggi. Le anomalie passano dal service anomalie.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    AuthorizationError,
    BusinessValidationError,
    ConflictError,
    NotFoundError,
)
from app.models import TripLog, User, Vehicle
from app.schemas.trip_log import TripLogCreate, TripLogUpdate
from app.services.anomaly_service import anomaly_service
from app.services.mileage_service import mileage_service

# Logger per questo modulo
logger = logging.getLogger(__name__)


class TripLogService:
    """
    Service per la gestione delle registrazioni di viaggio.

    I dipendenti operano solo sulle proprie registrazioni; gli
    amministratori su tutte.
    """

    async def get_all(
        self,
        db: AsyncSession,
        current_user: User,
        user_id: Optional[uuid.UUID] = None,
        vehicle_id: Optional[uuid.UUID] = None,
        limit: Optional[int] = None,
    ) -> list[TripLog]:
        """
        Recupera le registrazioni più recenti.

        Un dipendente vede solo le proprie; un amministratore può
        filtrare per utente.

        Args:
            db: Sessione database
            current_user: Utente autenticato
            user_id: Filtro per conducente (solo admin)
            vehicle_id: Filtro per veicolo
            limit: Numero massimo di righe (default: settings.trip_log_list_limit)
        """
        limit = limit or settings.trip_log_list_limit

        query = select(TripLog)
        if not current_user.is_admin:
            query = query.where(TripLog.user_id == current_user.id)
        elif user_id is not None:
            query = query.where(TripLog.user_id == user_id)

        if vehicle_id is not None:
            query = query.where(TripLog.vehicle_id == vehicle_id)

        query = query.order_by(
            TripLog.date.desc(),
            TripLog.final_km.desc().nulls_last(),
        ).limit(limit)

        result = await db.execute(query)
        logs = list(result.scalars().all())

        logger.debug(f"Recuperate {len(logs)} registrazioni per l'utente {current_user.id}")
        return logs

    async def get_by_id(
        self,
        db: AsyncSession,
        trip_log_id: uuid.UUID,
    ) -> TripLog:
        """
        Recupera una registrazione tramite ID.

        Raises:
            NotFoundError: Se la registrazione non esiste
        """
        log = await db.get(TripLog, trip_log_id)
        if log is None:
            logger.warning(f"Registrazione non trovata: {trip_log_id}")
            raise NotFoundError("Registrazione non trovata")
        return log

    async def get_for_user(
        self,
        db: AsyncSession,
        trip_log_id: uuid.UUID,
        current_user: User,
    ) -> TripLog:
        """
        Recupera una registrazione verificando che l'utente possa modificarla.

        Raises:
            NotFoundError: Se la registrazione non esiste
            AuthorizationError: Se l'utente non è il conducente né un admin
        """
        log = await self.get_by_id(db, trip_log_id)
        if not current_user.is_admin and log.user_id != current_user.id:
            logger.warning(
                f"Utente {current_user.id} non autorizzato sulla registrazione {trip_log_id}"
            )
            raise AuthorizationError("Non hai i permessi per modificare questa registrazione")
        return log

    async def get_open_trip(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
    ) -> Optional[TripLog]:
        """Viaggio ancora aperto sul veicolo, se presente."""
        result = await db.execute(
            select(TripLog)
            .where(TripLog.vehicle_id == vehicle_id, TripLog.final_km.is_(None))
            .order_by(TripLog.date.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        db: AsyncSession,
        current_user: User,
        data: TripLogCreate,
    ) -> TripLog:
        """
        Apre (o registra già chiuso) un viaggio.

        Raises:
            NotFoundError: Se il veicolo non esiste
            ConflictError: Se il veicolo ha già un viaggio aperto
            MileageRegressionError: Se i km regrediscono
        """
        vehicle = await db.get(Vehicle, data.vehicle_id)
        if vehicle is None:
            logger.warning(f"Veicolo non trovato per creazione viaggio: {data.vehicle_id}")
            raise NotFoundError("Veicolo non trovato")

        if data.final_km is None:
            open_trip = await self.get_open_trip(db, data.vehicle_id)
            if open_trip is not None:
                logger.warning(f"Viaggio già aperto sul veicolo {vehicle.plate}: {open_trip.id}")
                raise ConflictError(
                    "Esiste già un viaggio aperto per questo veicolo",
                    extra={"open_trip_id": str(open_trip.id)},
                )

        await mileage_service.validate_new_reading(
            db, data.vehicle_id, data.date, data.initial_km
        )
        if data.final_km is not None:
            await mileage_service.validate_new_reading(
                db, data.vehicle_id, data.date, data.final_km
            )

        log = TripLog(user_id=current_user.id, **data.model_dump())
        db.add(log)

        if data.has_anomaly:
            await anomaly_service.set_banner(db, data.vehicle_id, data.anomaly_description)

        await db.flush()
        await db.refresh(log)

        logger.info(f"Creato viaggio {log.id} sul veicolo {vehicle.plate}")
        return log

    async def update(
        self,
        db: AsyncSession,
        trip_log_id: uuid.UUID,
        current_user: User,
        data: TripLogUpdate,
    ) -> TripLog:
        """
        Aggiorna un viaggio: chiusura, segnalazione o risoluzione anomalia.

        Raises:
            NotFoundError: Se la registrazione non esiste
            AuthorizationError: Se l'utente non può modificarla
            BusinessValidationError: Se i km finali sono minori degli iniziali
        """
        log = await self.get_for_user(db, trip_log_id, current_user)
        update_data = data.model_dump(exclude_unset=True)

        final_km = update_data.get("final_km")
        if final_km is not None and final_km < log.initial_km:
            raise BusinessValidationError(
                "I km finali devono essere maggiori o uguali ai km iniziali"
            )

        for field in ("final_km", "end_time", "route", "notes"):
            if field in update_data:
                setattr(log, field, update_data[field])

        if update_data.get("has_anomaly"):
            await anomaly_service.report_anomaly(db, log.id, data.anomaly_description)
        elif update_data.get("has_anomaly") is False and log.has_anomaly:
            # Segnalazione ritirata: l'anomalia esce dall'insieme delle aperte
            log.has_anomaly = False
            log.anomaly_description = None
            log.is_resolved = False
            log.resolved_at = None
            await anomaly_service.refresh_vehicle_banner(db, log.vehicle_id)

        if update_data.get("is_resolved"):
            await anomaly_service.resolve_anomaly(db, log.id)

        await db.flush()
        await db.refresh(log)

        logger.info(f"Aggiornato viaggio: {log.id}")
        return log

    async def delete(
        self,
        db: AsyncSession,
        trip_log_id: uuid.UUID,
        current_user: User,
    ) -> None:
        """
        Elimina un viaggio (solo conducente o admin).

        Se il viaggio riportava un'anomalia aperta il banner viene ricalcolato.
        """
        log = await self.get_for_user(db, trip_log_id, current_user)
        vehicle_id = log.vehicle_id
        had_open_anomaly = log.has_anomaly and not log.is_resolved

        await db.delete(log)
        await db.flush()

        if had_open_anomaly:
            await anomaly_service.refresh_vehicle_banner(db, vehicle_id)

        logger.info(f"Eliminato viaggio: {trip_log_id}")


# Istanza globale del service
trip_log_service = TripLogService()
