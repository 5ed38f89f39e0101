"""
Scadenze tagliando e revisione
Progetto: Fleet Manager (Gestione Flotta)

Proiezione di sola lettura, ricalcolata a ogni richiesta a partire
dallo storico manutenzioni e dalla data di immatricolazione.
"""

import datetime
import logging
import uuid
from typing import Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.models import MaintenanceRecord, Vehicle
from app.schemas.maintenance import MaintenanceType
from app.schemas.mileage import DueBand, ServiceStatus
from app.services.mileage_service import mileage_service

# Logger per questo modulo
logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Funzioni pure
# ------------------------------------------------------------
def next_service_km(last_service_km: Optional[int], interval_km: int) -> int:
    """Km del prossimo tagliando: ultimo tagliando (o 0) + intervallo."""
    return (last_service_km or 0) + interval_km


def service_due_band(km_to_service: int, due_soon_km: int) -> DueBand:
    """
    Fascia di scadenza del tagliando.

    Args:
        km_to_service: Km mancanti al prossimo tagliando (negativo se superato)
        due_soon_km: Soglia sotto la quale il tagliando è "in scadenza"
    """
    if km_to_service < 0:
        return DueBand.OVERDUE
    if km_to_service < due_soon_km:
        return DueBand.DUE_SOON
    return DueBand.REGULAR


def next_revision_date(
    last_revision_date: Optional[datetime.date],
    registration_date: Optional[datetime.date],
    today: datetime.date,
    first_years: Optional[int] = None,
    interval_years: Optional[int] = None,
) -> Optional[datetime.date]:
    """
    Data della prossima revisione di legge.

    Con una revisione registrata: ultima revisione + intervallo.
    Altrimenti prima revisione a immatricolazione + first_years, poi
    ogni interval_years fino a raggiungere una data non passata.

    Returns:
        La data calcolata, None senza revisioni né immatricolazione
    """
    first_years = settings.revision_first_years if first_years is None else first_years
    interval_years = settings.revision_interval_years if interval_years is None else interval_years

    if last_revision_date is not None:
        return last_revision_date + relativedelta(years=interval_years)

    if registration_date is None:
        return None

    # Offset sempre calcolati dall'immatricolazione: un 29 febbraio non slitta
    years = first_years
    candidate = registration_date + relativedelta(years=years)
    while candidate < today:
        years += interval_years
        candidate = registration_date + relativedelta(years=years)
    return candidate


# ------------------------------------------------------------
# Calcolo su database
# ------------------------------------------------------------
async def get_last_service_km(db: AsyncSession, vehicle_id: uuid.UUID) -> Optional[int]:
    """Km dell'ultimo TAGLIANDO registrato."""
    result = await db.execute(
        select(MaintenanceRecord.mileage)
        .where(
            MaintenanceRecord.vehicle_id == vehicle_id,
            MaintenanceRecord.type == MaintenanceType.TAGLIANDO.value,
        )
        .order_by(MaintenanceRecord.date.desc(), MaintenanceRecord.mileage.desc())
        .limit(1)
    )
    return result.scalar()


async def get_last_revision_date(
    db: AsyncSession, vehicle_id: uuid.UUID
) -> Optional[datetime.date]:
    result = await db.execute(
        select(func.max(MaintenanceRecord.date)).where(
            MaintenanceRecord.vehicle_id == vehicle_id,
            MaintenanceRecord.type == MaintenanceType.REVISIONE.value,
        )
    )
    return result.scalar()


async def compute_service_status(
    db: AsyncSession,
    vehicle_id: uuid.UUID,
    due_soon_km: Optional[int] = None,
    today: Optional[datetime.date] = None,
) -> ServiceStatus:
    """
    Stato tagliando e revisione di un veicolo.

    Args:
        db: Sessione database
        vehicle_id: UUID del veicolo
        due_soon_km: Soglia "in scadenza" (default: settings.service_due_soon_km)
        today: Data di riferimento (default: oggi)

    Raises:
        NotFoundError: Se il veicolo non esiste
    """
    vehicle = await db.get(Vehicle, vehicle_id)
    if vehicle is None:
        logger.warning(f"Veicolo non trovato: {vehicle_id}")
        raise NotFoundError(f"Veicolo con ID {vehicle_id} non trovato")

    due_soon_km = settings.service_due_soon_km if due_soon_km is None else due_soon_km
    today = today or datetime.date.today()

    last_known = await mileage_service.resolve_last_known_mileage(db, vehicle_id)
    last_service_km = await get_last_service_km(db, vehicle_id)
    last_revision = await get_last_revision_date(db, vehicle_id)

    target_km = next_service_km(last_service_km, vehicle.service_interval_km)
    km_to_service = target_km - last_known.km

    return ServiceStatus(
        last_known_km=last_known.km,
        last_service_km=last_service_km,
        next_service_km=target_km,
        km_to_next_service=km_to_service,
        due_band=service_due_band(km_to_service, due_soon_km),
        next_revision_date=next_revision_date(
            last_revision, vehicle.registration_date, today
        ),
    )
