"""
Modello SQLAlchemy per i documenti del veicolo
Progetto: Fleet Manager (Gestione Flotta)
"""

import datetime
import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.vehicle import Vehicle


class VehicleDocument(Base, UUIDMixin, TimestampMixin):
    """
    Documento allegato a un veicolo (libretto, assicurazione, altro).

    Il file vive nello storage su disco; qui si conserva solo l'URL
    pubblico restituito dallo storage.
    """

    __tablename__ = "vehicle_documents"

    vehicle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vehicles.id", ondelete="CASCADE"),
        nullable=False,
        doc="UUID del veicolo",
    )

    type: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        doc="Tipo documento: LIBRETTO_CIRCOLAZIONE, ASSICURAZIONE, ALTRO",
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Titolo del documento",
    )

    file_url: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        doc="URL pubblico del file",
    )

    year: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        doc="Anno di riferimento (obbligatorio per ASSICURAZIONE)",
    )

    file_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Content-type del file caricato",
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Note libere",
    )

    expiry_date: Mapped[Optional[datetime.date]] = mapped_column(
        Date,
        nullable=True,
        doc="Data di scadenza (es. polizza assicurativa)",
    )

    vehicle: Mapped["Vehicle"] = relationship(
        "Vehicle",
        back_populates="documents",
        lazy="joined",
    )

    __table_args__ = (
        Index("ix_vehicle_documents_vehicle", "vehicle_id"),
    )

    def __repr__(self) -> str:
        return f"<VehicleDocument(id={self.id}, vehicle_id={self.vehicle_id}, type={self.type})>"
