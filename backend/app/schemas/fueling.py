"""
Schemas Pydantic per i rifornimenti
Progetto: Fleet Manager (Gestione Flotta)
"""

import datetime
import uuid
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.vehicle import VehicleSummary, reject_null


class FuelingBase(BaseModel):
    """Campi comuni dei rifornimenti."""

    date: datetime.date = Field(..., description="Data del rifornimento")
    liters: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Litri erogati")
    cost: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="Importo (EUR)")
    mileage: int = Field(..., gt=0, description="Chilometraggio al rifornimento")
    notes: Optional[str] = Field(None, description="Note libere")


class FuelingCreate(FuelingBase):
    """Schema per la registrazione di un rifornimento."""
    pass


class FuelingUpdate(BaseModel):
    """Aggiornamento parziale di un rifornimento (solo admin)."""

    date: Optional[datetime.date] = None
    liters: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    cost: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    mileage: Optional[int] = Field(None, gt=0)
    notes: Optional[str] = None

    _reject_null = field_validator("date", "liters", "cost", "mileage", mode="before")(reject_null)


class FuelingRead(FuelingBase):
    """Rifornimento restituito dall'API."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    vehicle_id: uuid.UUID
    user_id: uuid.UUID
    vehicle: Optional[VehicleSummary] = None
    created_at: datetime.datetime
    updated_at: datetime.datetime
