"""
Schemas Pydantic per l'entità Vehicle
Progetto: Fleet Manager (Gestione Flotta)

Definisce gli schemi di validazione e serializzazione per l'API.
"""

from enum import Enum
import datetime
import re
import uuid
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)


class VehicleStatus(str, Enum):
    """Stati operativi del veicolo."""
    ACTIVE = "ACTIVE"
    MAINTENANCE = "MAINTENANCE"
    OUT_OF_SERVICE = "OUT_OF_SERVICE"


class OwnershipType(str, Enum):
    """Tipo di possesso del veicolo."""
    OWNED = "OWNED"
    RENTAL = "RENTAL"


# -------------------------------------------------------------------
# Funzioni di normalizzazione e validazione
# -------------------------------------------------------------------

def normalize_plate(plate: Optional[str]) -> Optional[str]:
    """
    Normalizza la targa del veicolo.

    Converte in maiuscolo, rimuove spazi e valida il formato.
    Accetta formati italiani (es. "AB 123 CD", "AB123CD") e europei.

    Args:
        plate: Targa da normalizzare

    Returns:
        Targa normalizzata (maiuscolo, senza spazi) o None

    Raises:
        ValueError: Se il formato non è valido
    """
    if plate is None:
        return None

    normalized = plate.strip().upper().replace(" ", "")

    if not re.match(r"^[A-Z0-9]{2,20}$", normalized):
        raise ValueError(
            "Targa non valida: deve contenere 2-20 caratteri alfanumerici"
        )

    return normalized


def reject_null(value):
    """
    Rifiuta un null esplicito negli update parziali.

    Un campo omesso resta invariato; un campo inviato a null su una
    colonna obbligatoria è un errore di validazione.
    """
    if value is None:
        raise ValueError("Il campo non può essere nullo")
    return value


# -------------------------------------------------------------------
# Schemas Base
# -------------------------------------------------------------------
class VehicleBase(BaseModel):
    """
    Schema base per i dati del veicolo.

    Include tutti i campi condivisi tra creazione e lettura.
    """

    plate: str = Field(
        ...,
        min_length=2,
        max_length=20,
        description="Targa del veicolo",
    )

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Nome descrittivo del veicolo",
    )

    type: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Tipologia del veicolo (es. Furgone, Auto)",
    )

    status: VehicleStatus = Field(
        default=VehicleStatus.ACTIVE,
        description="Stato operativo",
    )

    ownership_type: OwnershipType = Field(
        default=OwnershipType.OWNED,
        description="Proprietà o noleggio",
    )

    service_interval_km: int = Field(
        default=15000,
        gt=0,
        description="Intervallo tagliando in km",
    )

    registration_date: Optional[datetime.date] = Field(
        default=None,
        description="Data di immatricolazione",
    )

    notes: Optional[str] = Field(
        default=None,
        description="Note aggiuntive sul veicolo",
    )

    _normalize_plate = field_validator("plate", mode="before")(normalize_plate)


# -------------------------------------------------------------------
# Schemas per Creazione
# -------------------------------------------------------------------
class VehicleCreate(VehicleBase):
    """Schema per la creazione di un nuovo veicolo."""

    # L'ORM riceve le stringhe, non gli oggetti Enum
    model_config = ConfigDict(use_enum_values=True)


# -------------------------------------------------------------------
# Schemas per Aggiornamento
# -------------------------------------------------------------------
class VehicleUpdate(BaseModel):
    """
    Schema per l'aggiornamento di un veicolo esistente.

    Tutti i campi sono opzionali per supportare update parziali.
    Il banner anomalia non è modificabile da qui: è mantenuto
    esclusivamente dal servizio anomalie.
    """

    model_config = ConfigDict(use_enum_values=True)

    plate: Optional[str] = Field(None, min_length=2, max_length=20, description="Targa del veicolo")
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="Nome descrittivo")
    type: Optional[str] = Field(None, min_length=1, max_length=50, description="Tipologia")
    status: Optional[VehicleStatus] = Field(None, description="Stato operativo")
    ownership_type: Optional[OwnershipType] = Field(None, description="Proprietà o noleggio")
    service_interval_km: Optional[int] = Field(None, gt=0, description="Intervallo tagliando in km")
    registration_date: Optional[datetime.date] = Field(None, description="Data di immatricolazione")
    notes: Optional[str] = Field(None, description="Note aggiuntive")

    _normalize_plate = field_validator("plate", mode="before")(normalize_plate)
    _reject_null = field_validator(
        "plate", "name", "type", "status", "ownership_type", "service_interval_km",
        mode="before",
    )(reject_null)


# -------------------------------------------------------------------
# Schemas per Lettura (API Response)
# -------------------------------------------------------------------
class VehicleRead(VehicleBase):
    """
    Schema per la risposta API che include i campi di sistema.

    Nota: model_config con from_attributes=True è necessario per
    la conversione da oggetto ORM a schema Pydantic.
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(..., description="UUID del veicolo")

    current_anomaly: Optional[str] = Field(
        default=None,
        description="Anomalia corrente non risolta (banner)",
    )

    created_at: datetime.datetime = Field(..., description="Data/ora di creazione")
    updated_at: datetime.datetime = Field(..., description="Data/ora ultimo aggiornamento")


class VehicleSummary(BaseModel):
    """Dati minimi del veicolo, annidati nelle registrazioni."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    plate: str
    name: str


class ActiveVehicleRead(BaseModel):
    """
    Veicolo attivo con l'ultimo chilometraggio noto.

    Usato per precompilare i moduli di viaggio e rifornimento.
    """

    id: uuid.UUID
    plate: str
    name: str
    type: str
    current_anomaly: Optional[str] = None
    last_mileage: int = Field(..., ge=0, description="Ultimo chilometraggio noto")


# -------------------------------------------------------------------
# Schemas per Lista Paginata
# -------------------------------------------------------------------
class VehicleList(BaseModel):
    """
    Schema per risposte paginate.

    Include la lista dei veicoli con metadati di paginazione.
    """

    items: list[VehicleRead] = Field(
        default_factory=list,
        description="Lista dei veicoli",
    )

    total: int = Field(..., ge=0, description="Numero totale di veicoli")
    page: int = Field(..., ge=1, description="Numero pagina corrente")
    per_page: int = Field(..., ge=1, description="Numero elementi per pagina")

    @computed_field
    def total_pages(self) -> int:
        """Numero totale di pagine: ceil(total / per_page)."""
        if self.per_page > 0:
            return (self.total + self.per_page - 1) // self.per_page
        return 0
