"""
Schemas Pydantic per le verifiche del contachilometri
Progetto: Fleet Manager (Gestione Flotta)
"""

import datetime
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MileageCheckCreate(BaseModel):
    """Lettura manuale del contachilometri."""

    date: datetime.date = Field(..., description="Data della lettura")
    km: int = Field(..., ge=0, description="Chilometri letti")
    notes: Optional[str] = Field(None, description="Note libere")


class MileageCheckRead(MileageCheckCreate):
    """Verifica km restituita dall'API."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    vehicle_id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime.datetime
