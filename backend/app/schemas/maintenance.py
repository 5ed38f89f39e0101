"""
Schemas Pydantic per gli interventi di manutenzione
Progetto: Fleet Manager (Gestione Flotta)

Definisce gli schemi di validazione e serializzazione per l'API,
inclusa la lista delle anomalie risolte dall'intervento.
"""

from enum import Enum
import datetime
import uuid
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class MaintenanceType(str, Enum):
    """Tipi di intervento."""
    TAGLIANDO = "TAGLIANDO"
    GOMME = "GOMME"
    MECCANICA = "MECCANICA"
    REVISIONE = "REVISIONE"
    ALTRO = "ALTRO"


class TireType(str, Enum):
    """Tipi di pneumatici."""
    ESTIVE = "ESTIVE"
    INVERNALI = "INVERNALI"
    QUATTRO_STAGIONI = "QUATTRO_STAGIONI"


# -------------------------------------------------------------------
# Schemas Base
# -------------------------------------------------------------------
class MaintenanceBase(BaseModel):
    """
    Campi comuni degli interventi.

    I campi pneumatici vengono normalizzati: conservati solo per il
    tipo GOMME, il deposito solo se i pneumatici non sono quattro stagioni.
    """

    # L'ORM riceve le stringhe, non gli oggetti Enum
    model_config = ConfigDict(use_enum_values=True)

    date: datetime.date = Field(..., description="Data dell'intervento")
    type: MaintenanceType = Field(..., description="Tipo di intervento")
    cost: Optional[Decimal] = Field(
        None,
        ge=0,
        max_digits=10,
        decimal_places=2,
        description="Costo (EUR)",
    )
    mileage: int = Field(..., gt=0, description="Chilometraggio all'intervento")
    notes: Optional[str] = Field(None, description="Note libere")
    tire_type: Optional[TireType] = Field(None, description="Tipo di pneumatici (solo GOMME)")
    tire_storage_location: Optional[str] = Field(
        None,
        max_length=150,
        description="Deposito pneumatici smontati",
    )

    @field_validator("notes", "tire_storage_location", mode="before")
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def normalize_tire_fields(self):
        """Azzera i campi pneumatici dove non pertinenti."""
        if self.type != MaintenanceType.GOMME:
            self.tire_type = None
            self.tire_storage_location = None
        elif self.tire_type is None or self.tire_type == TireType.QUATTRO_STAGIONI:
            self.tire_storage_location = None
        return self


# -------------------------------------------------------------------
# Schemas per Creazione / Aggiornamento
# -------------------------------------------------------------------
class MaintenanceCreate(MaintenanceBase):
    """
    Schema per la registrazione di un intervento.

    resolved_anomaly_ids elenca le registrazioni di viaggio con
    anomalia che l'intervento risolve.
    """

    resolved_anomaly_ids: list[uuid.UUID] = Field(
        default_factory=list,
        description="UUID delle registrazioni con anomalia risolte dall'intervento",
    )

    @field_validator("resolved_anomaly_ids")
    @classmethod
    def dedupe_ids(cls, v: list[uuid.UUID]) -> list[uuid.UUID]:
        return list(dict.fromkeys(v))


class MaintenanceUpdate(MaintenanceBase):
    """
    Aggiornamento completo di un intervento.

    Le anomalie risolte non si modificano in aggiornamento.
    """
    pass


# -------------------------------------------------------------------
# Schemas per Lettura (API Response)
# -------------------------------------------------------------------
class ResolvedAnomalyRead(BaseModel):
    """Anomalia risolta dall'intervento."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    date: datetime.date
    anomaly_description: Optional[str] = None
    resolved_at: Optional[datetime.datetime] = None


class MaintenanceRead(BaseModel):
    """Intervento restituito dall'API."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    vehicle_id: uuid.UUID
    date: datetime.date
    type: MaintenanceType
    cost: Optional[Decimal] = None
    mileage: int
    notes: Optional[str] = None
    tire_type: Optional[TireType] = None
    tire_storage_location: Optional[str] = None
    resolved_anomalies: list[ResolvedAnomalyRead] = Field(default_factory=list)
    created_at: datetime.datetime
    updated_at: datetime.datetime
