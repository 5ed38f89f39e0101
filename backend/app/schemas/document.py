"""
Schemas Pydantic per i documenti del veicolo
Progetto: Fleet Manager (Gestione Flotta)
"""

from enum import Enum
import datetime
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DocumentType(str, Enum):
    """Tipi di documento del veicolo."""
    LIBRETTO_CIRCOLAZIONE = "LIBRETTO_CIRCOLAZIONE"
    ASSICURAZIONE = "ASSICURAZIONE"
    ALTRO = "ALTRO"


def derive_title(
    document_type: DocumentType,
    year: Optional[int],
    title: Optional[str],
) -> str:
    """
    Calcola il titolo del documento.

    Libretto e assicurazione hanno un titolo fisso; per ALTRO il titolo
    è quello fornito dall'utente.

    Raises:
        ValueError: Se mancano anno (ASSICURAZIONE) o titolo (ALTRO)
    """
    if document_type == DocumentType.LIBRETTO_CIRCOLAZIONE:
        return "Libretto di circolazione"
    if document_type == DocumentType.ASSICURAZIONE:
        if year is None:
            raise ValueError("L'anno è obbligatorio per l'assicurazione")
        return f"Assicurazione {year}"
    if not title or not title.strip():
        raise ValueError("Il titolo è obbligatorio")
    return title.strip()


class DocumentCreate(BaseModel):
    """
    Metadati di un documento caricato.

    Il titolo viene derivato dal tipo di documento.
    """

    type: DocumentType = Field(..., description="Tipo di documento")
    title: Optional[str] = Field(None, max_length=255, description="Titolo (solo per ALTRO)")
    year: Optional[int] = Field(None, ge=1900, le=2100, description="Anno (obbligatorio per ASSICURAZIONE)")
    expiry_date: Optional[datetime.date] = Field(None, description="Data di scadenza")
    notes: Optional[str] = Field(None, description="Note libere")

    @model_validator(mode="after")
    def fill_title(self) -> "DocumentCreate":
        self.title = derive_title(self.type, self.year, self.title)
        return self


class DocumentRead(BaseModel):
    """Documento restituito dall'API."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    vehicle_id: uuid.UUID
    type: DocumentType
    title: str
    year: Optional[int] = None
    file_url: str
    file_type: str
    expiry_date: Optional[datetime.date] = None
    notes: Optional[str] = None
    created_at: datetime.datetime
