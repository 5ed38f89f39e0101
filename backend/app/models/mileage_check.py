"""
Modello SQLAlchemy per le verifiche del contachilometri
Progetto: Fleet Manager (Gestione Flotta)
"""

import datetime
import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.vehicle import Vehicle


class MileageCheck(Base, UUIDMixin, TimestampMixin):
    """
    Lettura manuale del contachilometri, registrata fuori da viaggi,
    rifornimenti e manutenzioni.
    """

    __tablename__ = "mileage_checks"

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
        doc="UUID dell'utente che ha effettuato la lettura",
    )

    date: Mapped[datetime.date] = mapped_column(
        Date,
        nullable=False,
        doc="Data della lettura",
    )

    km: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Chilometri letti",
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Note libere",
    )

    vehicle: Mapped["Vehicle"] = relationship(
        "Vehicle",
        back_populates="mileage_checks",
        lazy="joined",
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="mileage_checks",
        lazy="joined",
    )

    __table_args__ = (
        CheckConstraint("km >= 0", name="ck_mileage_checks_km_positive"),
        Index("ix_mileage_checks_vehicle_date", "vehicle_id", "date"),
    )

    def __repr__(self) -> str:
        return f"<MileageCheck(id={self.id}, vehicle_id={self.vehicle_id}, date={self.date}, km={self.km})>"
