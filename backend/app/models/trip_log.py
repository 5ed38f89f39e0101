"""
Modello SQLAlchemy per le registrazioni di viaggio
Progetto: Fleet Manager (Gestione Flotta)

Una registrazione rappresenta una sessione di utilizzo di un veicolo:
viene creata alla partenza e chiusa all'arrivo (km finali, ora fine).
Può riportare un'anomalia del veicolo da risolvere.
"""

from __future__ import annotations
import datetime
import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.vehicle import Vehicle


class TripLog(Base, UUIDMixin, TimestampMixin):
    """
    Modello per le registrazioni di utilizzo del veicolo.

    Un viaggio con final_km NULL è "aperto" (in corso). Per veicolo
    dovrebbe esistere al massimo un viaggio aperto: il vincolo è
    verificato dal service alla creazione, non dal database.

    Attributes:
        vehicle_id: UUID del veicolo utilizzato
        user_id: UUID del conducente
        date: Data del viaggio
        initial_km: Km alla partenza
        final_km: Km all'arrivo (NULL = viaggio aperto)
        start_time / end_time: Orari HH:mm
        route: Tratta percorsa
        notes: Note libere
        has_anomaly: True se è stata segnalata un'anomalia
        anomaly_description: Descrizione dell'anomalia
        is_resolved: True se l'anomalia è stata risolta
        resolved_at: Data/ora di risoluzione
    """

    __tablename__ = "trip_logs"

    # ------------------------------------------------------------
    # Colonne Relazioni
    # ------------------------------------------------------------
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
        doc="UUID del conducente",
    )

    # ------------------------------------------------------------
    # Colonne Viaggio
    # ------------------------------------------------------------
    date: Mapped[datetime.date] = mapped_column(
        Date,
        nullable=False,
        doc="Data del viaggio",
    )

    initial_km: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Chilometraggio alla partenza",
    )

    final_km: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        doc="Chilometraggio all'arrivo (NULL se il viaggio è in corso)",
    )

    start_time: Mapped[str] = mapped_column(
        String(5),
        nullable=False,
        doc="Ora di partenza (HH:mm)",
    )

    end_time: Mapped[Optional[str]] = mapped_column(
        String(5),
        nullable=True,
        doc="Ora di arrivo (HH:mm)",
    )

    route: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="Tratta percorsa",
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Note libere",
    )

    # ------------------------------------------------------------
    # Colonne Anomalia
    # ------------------------------------------------------------
    has_anomaly: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        doc="Indica se è stata segnalata un'anomalia",
    )

    anomaly_description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Descrizione dell'anomalia segnalata",
    )

    is_resolved: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        doc="Indica se l'anomalia è stata risolta",
    )

    resolved_at: Mapped[Optional[datetime.datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="Data/ora di risoluzione dell'anomalia",
    )

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    vehicle: Mapped["Vehicle"] = relationship(
        "Vehicle",
        back_populates="trip_logs",
        lazy="joined",
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="trip_logs",
        lazy="joined",
    )

    __table_args__ = (
        CheckConstraint(
            "final_km IS NULL OR final_km >= initial_km",
            name="ck_trip_logs_final_km_ge_initial",
        ),
        CheckConstraint("initial_km >= 0", name="ck_trip_logs_initial_km_positive"),
        Index("ix_trip_logs_vehicle_date", "vehicle_id", "date"),
        Index("ix_trip_logs_user_date", "user_id", "date"),
        Index("ix_trip_logs_vehicle_unresolved", "vehicle_id", "has_anomaly", "is_resolved"),
    )

    @property
    def is_open(self) -> bool:
        """True se il viaggio è ancora in corso."""
        return self.final_km is None

    @property
    def reading_km(self) -> int:
        """Chilometraggio rappresentativo: finale se presente, altrimenti iniziale."""
        return self.final_km if self.final_km is not None else self.initial_km

    @property
    def distance_km(self) -> Optional[int]:
        """Km percorsi, None se il viaggio è aperto."""
        if self.final_km is None:
            return None
        return self.final_km - self.initial_km

    def __repr__(self) -> str:
        return (
            f"<TripLog(id={self.id}, vehicle_id={self.vehicle_id}, date={self.date}, "
            f"initial_km={self.initial_km}, final_km={self.final_km})>"
        )
