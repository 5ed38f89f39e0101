"""
Service Layer per l'entità Vehicle
Progetto: Fleet Manager (Gestione Flotta)

Definisce la logica di business per anagrafica veicoli, panoramica
flotta e cronologia unificata degli eventi.
"""

import datetime
import logging
import uuid
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import DuplicateError, NotFoundError
from app.models import (
    FuelingRecord,
    MaintenanceRecord,
    MileageCheck,
    TripLog,
    Vehicle,
    VehicleDocument,
    maintenance_resolved_anomalies,
)
from app.schemas.mileage import FleetVehicleSummary, HistoryItem, HistoryKind
from app.schemas.vehicle import ActiveVehicleRead, VehicleCreate, VehicleStatus, VehicleUpdate
from app.services.document_service import document_service
from app.services.mileage_service import mileage_service
from app.services.service_due import compute_service_status

# Logger per questo modulo
logger = logging.getLogger(__name__)

DUPLICATE_PLATE_MESSAGE = "Un veicolo con questa targa esiste già"


def _is_plate_conflict(error: IntegrityError) -> bool:
    """True se a scattare è il vincolo di unicità sulla targa."""
    return "plate" in str(error.orig).lower()


class VehicleService:
    """
    Service per la gestione delle operazioni CRUD sui veicoli.

    Fornisce metodi asincroni per interagire con il database
    in modo centralizzato, senza dipendenze da FastAPI.
    """

    async def get_all(
        self,
        db: AsyncSession,
        page: int = 1,
        per_page: int = 10,
        search: Optional[str] = None,
        status: Optional[VehicleStatus] = None,
    ) -> tuple[list[Vehicle], int]:
        """
        Recupera la lista paginata dei veicoli.

        Args:
            db: Sessione database
            page: Numero pagina (default 1)
            per_page: Elementi per pagina (default 10)
            search: Ricerca su targa e nome
            status: Filtro per stato operativo

        Returns:
            Tuple di (lista veicoli, totale count)
        """
        filter_conditions = []

        if search:
            search_term = f"%{search}%"
            filter_conditions.append(
                Vehicle.plate.ilike(search_term) | Vehicle.name.ilike(search_term)
            )

        if status is not None:
            filter_conditions.append(Vehicle.status == status.value)

        query = select(Vehicle).where(*filter_conditions).order_by(Vehicle.plate.asc())
        query = query.offset((page - 1) * per_page).limit(per_page)
        result = await db.execute(query)
        vehicles = list(result.scalars().all())

        count_query = select(func.count()).select_from(Vehicle).where(*filter_conditions)
        total = (await db.execute(count_query)).scalar() or 0

        logger.debug(f"Recuperati {len(vehicles)} veicoli su {total} totali")
        return vehicles, total

    async def get_by_id(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
    ) -> Vehicle:
        """
        Recupera un veicolo tramite ID.

        Raises:
            NotFoundError: Se il veicolo non esiste
        """
        vehicle = await db.get(Vehicle, vehicle_id)

        if vehicle is None:
            logger.warning(f"Veicolo non trovato: {vehicle_id}")
            raise NotFoundError(f"Veicolo con ID {vehicle_id} non trovato")

        return vehicle

    async def create(
        self,
        db: AsyncSession,
        vehicle_data: VehicleCreate,
    ) -> Vehicle:
        """
        Crea un nuovo veicolo.

        Raises:
            DuplicateError: Se la targa è già in uso
        """
        vehicle = Vehicle(**vehicle_data.model_dump())

        try:
            db.add(vehicle)
            await db.flush()
            await db.refresh(vehicle)
        except IntegrityError as e:
            await db.rollback()
            if not _is_plate_conflict(e):
                raise
            logger.warning(f"Errore creazione veicolo - targa duplicata: {e.orig}")
            raise DuplicateError(DUPLICATE_PLATE_MESSAGE)

        logger.info(f"Creato nuovo veicolo: {vehicle.id} - {vehicle.plate}")
        return vehicle

    async def update(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        vehicle_data: VehicleUpdate,
    ) -> Vehicle:
        """
        Aggiorna un veicolo esistente (update parziale).

        Raises:
            NotFoundError: Se il veicolo non esiste
            DuplicateError: Se la nuova targa è già in uso
        """
        vehicle = await self.get_by_id(db, vehicle_id)

        for field, value in vehicle_data.model_dump(exclude_unset=True).items():
            setattr(vehicle, field, value)

        try:
            await db.flush()
            await db.refresh(vehicle)
        except IntegrityError as e:
            await db.rollback()
            if not _is_plate_conflict(e):
                raise
            logger.warning(f"Errore aggiornamento veicolo - targa duplicata: {e.orig}")
            raise DuplicateError(DUPLICATE_PLATE_MESSAGE)

        logger.info(f"Aggiornato veicolo: {vehicle.id} - {vehicle.plate}")
        return vehicle

    async def delete(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
    ) -> None:
        """
        Elimina un veicolo con tutti i suoi eventi e documenti.

        I file dei documenti vengono rimossi in best effort: un errore
        sul filesystem non blocca l'eliminazione.

        Raises:
            NotFoundError: Se il veicolo non esiste
        """
        vehicle = await self.get_by_id(db, vehicle_id)

        file_urls = (
            await db.execute(
                select(VehicleDocument.file_url).where(VehicleDocument.vehicle_id == vehicle_id)
            )
        ).scalars().all()

        maintenance_ids = select(MaintenanceRecord.id).where(
            MaintenanceRecord.vehicle_id == vehicle_id
        )
        await db.execute(
            delete(maintenance_resolved_anomalies).where(
                maintenance_resolved_anomalies.c.maintenance_id.in_(maintenance_ids)
            )
        )
        for model in (MaintenanceRecord, TripLog, FuelingRecord, MileageCheck, VehicleDocument):
            await db.execute(delete(model).where(model.vehicle_id == vehicle_id))

        await db.delete(vehicle)
        await db.flush()

        for file_url in file_urls:
            document_service.storage.delete(file_url)

        logger.info(f"Eliminato veicolo {vehicle_id} e {len(file_urls)} documenti")

    # ------------------------------------------------------------
    # Viste derivate
    # ------------------------------------------------------------
    async def list_active(self, db: AsyncSession) -> list[ActiveVehicleRead]:
        """Veicoli attivi con l'ultimo chilometraggio noto, per i moduli di viaggio."""
        result = await db.execute(
            select(Vehicle)
            .where(Vehicle.status == VehicleStatus.ACTIVE.value)
            .order_by(Vehicle.name.asc())
        )
        items = []
        for vehicle in result.scalars().all():
            last_known = await mileage_service.resolve_last_known_mileage(db, vehicle.id)
            items.append(
                ActiveVehicleRead(
                    id=vehicle.id,
                    plate=vehicle.plate,
                    name=vehicle.name,
                    type=vehicle.type,
                    current_anomaly=vehicle.current_anomaly,
                    last_mileage=last_known.km,
                )
            )
        return items

    async def fleet_overview(
        self,
        db: AsyncSession,
        today: Optional[datetime.date] = None,
    ) -> list[FleetVehicleSummary]:
        """
        Panoramica della flotta con lo stato tagliando di ogni veicolo.

        Usa la soglia "in scadenza" della vista flotta
        (settings.fleet_service_due_soon_km).
        """
        result = await db.execute(select(Vehicle).order_by(Vehicle.plate.asc()))
        overview = []
        for vehicle in result.scalars().all():
            status = await compute_service_status(
                db,
                vehicle.id,
                due_soon_km=settings.fleet_service_due_soon_km,
                today=today,
            )
            overview.append(
                FleetVehicleSummary(
                    id=vehicle.id,
                    plate=vehicle.plate,
                    name=vehicle.name,
                    type=vehicle.type,
                    status=vehicle.status,
                    ownership_type=vehicle.ownership_type,
                    current_anomaly=vehicle.current_anomaly,
                    last_known_km=status.last_known_km,
                    last_service_km=status.last_service_km,
                    km_to_next_service=status.km_to_next_service,
                    due_band=status.due_band,
                    next_revision_date=status.next_revision_date,
                )
            )
        return overview

    async def get_history(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
    ) -> list[HistoryItem]:
        """
        Cronologia unificata: viaggi, rifornimenti, manutenzioni e
        verifiche km, dalla più recente.
        """
        await self.get_by_id(db, vehicle_id)
        items: list[HistoryItem] = []

        logs = await db.execute(select(TripLog).where(TripLog.vehicle_id == vehicle_id))
        for log in logs.scalars().all():
            items.append(HistoryItem(
                id=log.id,
                date=log.date,
                kind=HistoryKind.LOG,
                km=log.reading_km,
                data={
                    "initial_km": log.initial_km,
                    "final_km": log.final_km,
                    "route": log.route,
                    "driver": log.user.full_name if log.user else None,
                    "has_anomaly": log.has_anomaly,
                    "anomaly_description": log.anomaly_description,
                    "is_resolved": log.is_resolved,
                },
            ))

        fuelings = await db.execute(
            select(FuelingRecord).where(FuelingRecord.vehicle_id == vehicle_id)
        )
        for record in fuelings.scalars().all():
            items.append(HistoryItem(
                id=record.id,
                date=record.date,
                kind=HistoryKind.REFUEL,
                km=record.mileage,
                data={"liters": str(record.liters), "cost": str(record.cost)},
            ))

        maintenance = await db.execute(
            select(MaintenanceRecord).where(MaintenanceRecord.vehicle_id == vehicle_id)
        )
        for record in maintenance.scalars().all():
            items.append(HistoryItem(
                id=record.id,
                date=record.date,
                kind=HistoryKind.MAINTENANCE,
                km=record.mileage,
                data={
                    "type": record.type,
                    "cost": str(record.cost) if record.cost is not None else None,
                    "notes": record.notes,
                    "resolved_anomalies": len(record.resolved_anomalies),
                },
            ))

        checks = await db.execute(
            select(MileageCheck).where(MileageCheck.vehicle_id == vehicle_id)
        )
        for check in checks.scalars().all():
            items.append(HistoryItem(
                id=check.id,
                date=check.date,
                kind=HistoryKind.MILEAGE_CHECK,
                km=check.km,
                data={"notes": check.notes},
            ))

        items.sort(key=lambda item: (item.date, item.km or 0), reverse=True)
        return items


# Istanza globale del service
vehicle_service = VehicleService()
