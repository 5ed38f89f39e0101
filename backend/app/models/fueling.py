"""
Modello SQLAlchemy per i rifornimenti
Progetto: Fleet Manager (Gestione Flotta)
"""

import datetime
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.vehicle import Vehicle


class FuelingRecord(Base, UUIDMixin, TimestampMixin):
    """
    Modello per i rifornimenti di carburante.

    Attributes:
        vehicle_id: UUID del veicolo
        user_id: UUID dell'utente che ha effettuato il rifornimento
        date: Data del rifornimento
        liters: Litri erogati
        cost: Importo pagato in euro
        mileage: Km del veicolo al momento del rifornimento
        notes: Note libere
    """

    __tablename__ = "fueling_records"

    vehicle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vehicles.id", ondelete="CASCADE"),
        nullable=False,
        doc="UUID del veicolo",
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        doc="UUID dell'utente",
    )

    date: Mapped[datetime.date] = mapped_column(
        Date,
        nullable=False,
        doc="Data del rifornimento",
    )

    liters: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Litri erogati",
    )

    cost: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Importo pagato (EUR)",
    )

    mileage: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Chilometraggio al rifornimento",
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Note libere",
    )

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    vehicle: Mapped["Vehicle"] = relationship(
        "Vehicle",
        back_populates="fuelings",
        lazy="joined",
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="fuelings",
        lazy="joined",
    )

    __table_args__ = (
        CheckConstraint("liters > 0", name="ck_fueling_records_liters_positive"),
        CheckConstraint("cost >= 0", name="ck_fueling_records_cost_positive"),
        CheckConstraint("mileage >= 0", name="ck_fueling_records_mileage_positive"),
        Index("ix_fueling_records_vehicle_date", "vehicle_id", "date"),
    )

    def __repr__(self) -> str:
        return (
            f"<FuelingRecord(id={self.id}, vehicle_id={self.vehicle_id}, "
            f"date={self.date}, mileage={self.mileage})>"
        )
