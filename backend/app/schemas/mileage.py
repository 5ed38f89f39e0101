"""
Schemas Pydantic per chilometraggio, statistiche e scadenze
Progetto: Fleet Manager (Gestione Flotta)

Modelli di sola lettura calcolati a ogni richiesta: nessuno di questi
valori è memorizzato nel database.
"""

from enum import Enum
import datetime
import uuid
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class MileageSource(str, Enum):
    """Flusso di eventi da cui proviene l'ultimo chilometraggio noto."""
    TRIP_LOG = "TRIP_LOG"
    FUELING = "FUELING"
    MAINTENANCE = "MAINTENANCE"
    MILEAGE_CHECK = "MILEAGE_CHECK"


class DueBand(str, Enum):
    """Fascia di scadenza del tagliando."""
    OVERDUE = "OVERDUE"
    DUE_SOON = "DUE_SOON"
    REGULAR = "REGULAR"


class HistoryKind(str, Enum):
    """Tipo di evento nella cronologia del veicolo."""
    LOG = "LOG"
    REFUEL = "REFUEL"
    MAINTENANCE = "MAINTENANCE"
    MILEAGE_CHECK = "MILEAGE_CHECK"


class MileageReading(BaseModel):
    """Candidato chilometraggio di un singolo flusso."""

    model_config = ConfigDict(frozen=True)

    km: int
    date: datetime.date
    source: MileageSource


class LastKnownMileage(BaseModel):
    """
    Ultimo chilometraggio noto del veicolo.

    as_of è None se il veicolo non ha alcun evento (km = 0).
    """

    km: int = Field(..., ge=0, description="Ultimo chilometraggio noto")
    as_of: Optional[datetime.date] = Field(None, description="Data della lettura")
    source: Optional[MileageSource] = Field(None, description="Flusso di provenienza")


class MileageStatistics(BaseModel):
    """Statistiche derivate dallo storico del veicolo."""

    last_known_km: int
    first_record_date: Optional[datetime.date] = None
    average_annual_km: Optional[int] = Field(None, description="Media km annua")
    average_consumption_l_100km: Optional[Decimal] = Field(
        None,
        description="Consumo medio (l/100km), None se non disponibile",
    )
    total_fuel_cost: Decimal = Decimal("0")
    total_maintenance_cost: Decimal = Decimal("0")
    fueling_count: int = 0
    trip_count: int = 0


class ServiceStatus(BaseModel):
    """Stato tagliando e revisione del veicolo."""

    last_known_km: int
    last_service_km: Optional[int] = Field(None, description="Km dell'ultimo tagliando")
    next_service_km: int
    km_to_next_service: int
    due_band: DueBand
    next_revision_date: Optional[datetime.date] = None


class HistoryItem(BaseModel):
    """Voce della cronologia unificata del veicolo."""

    id: uuid.UUID
    date: datetime.date
    kind: HistoryKind
    km: Optional[int] = None
    data: dict[str, Any] = Field(default_factory=dict)


class FleetVehicleSummary(BaseModel):
    """Riga della panoramica flotta."""

    id: uuid.UUID
    plate: str
    name: str
    type: str
    status: str
    ownership_type: str
    current_anomaly: Optional[str] = None
    last_known_km: int
    last_service_km: Optional[int] = None
    km_to_next_service: int
    due_band: DueBand
    next_revision_date: Optional[datetime.date] = None
