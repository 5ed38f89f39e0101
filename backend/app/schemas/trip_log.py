"""
Schemas Pydantic per le registrazioni di viaggio
Progetto: Fleet Manager (Gestione Flotta)

Include gli schemi per segnalazione e risoluzione delle anomalie.
"""

import datetime
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.schemas.vehicle import VehicleSummary, reject_null

# Formato orario HH:mm (00:00 - 23:59)
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def _clean_description(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


# -------------------------------------------------------------------
# Schemas per Creazione
# -------------------------------------------------------------------
class TripLogCreate(BaseModel):
    """
    Schema per l'apertura (o registrazione completa) di un viaggio.

    Se final_km è omesso il viaggio resta aperto.
    """

    vehicle_id: uuid.UUID = Field(..., description="UUID del veicolo")
    date: datetime.date = Field(..., description="Data del viaggio")
    initial_km: int = Field(..., ge=0, description="Km alla partenza")
    final_km: Optional[int] = Field(None, ge=0, description="Km all'arrivo")
    start_time: str = Field(..., pattern=TIME_PATTERN, description="Ora di partenza (HH:mm)")
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN, description="Ora di arrivo (HH:mm)")
    route: Optional[str] = Field(None, max_length=255, description="Tratta percorsa")
    notes: Optional[str] = Field(None, description="Note libere")
    has_anomaly: bool = Field(False, description="Segnala un'anomalia del veicolo")
    anomaly_description: Optional[str] = Field(None, description="Descrizione dell'anomalia")

    @model_validator(mode="after")
    def check_consistency(self) -> "TripLogCreate":
        """Verifica km finali e coerenza dell'anomalia."""
        if self.final_km is not None and self.final_km < self.initial_km:
            raise ValueError("I km finali devono essere maggiori o uguali ai km iniziali")

        self.anomaly_description = _clean_description(self.anomaly_description)
        if self.has_anomaly and not self.anomaly_description:
            raise ValueError("La descrizione dell'anomalia è obbligatoria")
        if not self.has_anomaly:
            self.anomaly_description = None
        return self


# -------------------------------------------------------------------
# Schemas per Aggiornamento
# -------------------------------------------------------------------
class TripLogUpdate(BaseModel):
    """
    Schema per l'aggiornamento di un viaggio.

    Copre la chiusura (final_km, end_time), la segnalazione di
    un'anomalia e la risoluzione manuale (is_resolved=True).
    """

    final_km: Optional[int] = Field(None, ge=0, description="Km all'arrivo")
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN, description="Ora di arrivo (HH:mm)")
    route: Optional[str] = Field(None, max_length=255, description="Tratta percorsa")
    notes: Optional[str] = Field(None, description="Note libere")
    has_anomaly: Optional[bool] = Field(None, description="Segnala un'anomalia")
    anomaly_description: Optional[str] = Field(None, description="Descrizione dell'anomalia")
    is_resolved: Optional[bool] = Field(None, description="Segna l'anomalia come risolta")

    # Un viaggio chiuso non si riapre azzerando i km finali
    _reject_null = field_validator("final_km", "end_time", mode="before")(reject_null)

    @model_validator(mode="after")
    def check_anomaly(self) -> "TripLogUpdate":
        self.anomaly_description = _clean_description(self.anomaly_description)
        if self.has_anomaly and not self.anomaly_description:
            raise ValueError("La descrizione dell'anomalia è obbligatoria")
        return self


class AnomalyReport(BaseModel):
    """Segnalazione di un'anomalia su una registrazione esistente."""

    description: str = Field(..., min_length=1, description="Descrizione dell'anomalia")


class AnomalyResolve(BaseModel):
    """Risoluzione manuale di un'anomalia."""

    resolved_at: Optional[datetime.datetime] = Field(
        None,
        description="Data/ora di risoluzione (default: adesso)",
    )


# -------------------------------------------------------------------
# Schemas per Lettura (API Response)
# -------------------------------------------------------------------
class TripLogRead(BaseModel):
    """Registrazione di viaggio restituita dall'API."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    vehicle_id: uuid.UUID
    user_id: uuid.UUID
    date: datetime.date
    initial_km: int
    final_km: Optional[int] = None
    start_time: str
    end_time: Optional[str] = None
    route: Optional[str] = None
    notes: Optional[str] = None
    has_anomaly: bool
    anomaly_description: Optional[str] = None
    is_resolved: bool
    resolved_at: Optional[datetime.datetime] = None
    distance_km: Optional[int] = Field(None, description="Km percorsi (None se aperto)")
    vehicle: Optional[VehicleSummary] = None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class UnresolvedAnomalyRead(BaseModel):
    """Anomalia non ancora risolta, proposta nel modulo di manutenzione."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    vehicle_id: uuid.UUID
    date: datetime.date
    anomaly_description: Optional[str] = None
    created_at: datetime.datetime


class TripLogList(BaseModel):
    """Lista delle registrazioni (limitata alle più recenti)."""

    items: list[TripLogRead] = Field(default_factory=list)
    total: int = Field(..., ge=0, description="Numero di elementi restituiti")
