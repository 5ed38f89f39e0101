"""
Modello SQLAlchemy per gli interventi di manutenzione
Progetto: Fleet Manager (Gestione Flotta)

Un intervento può risolvere una o più anomalie segnalate nelle
registrazioni di viaggio: il legame è memorizzato nella tabella
associativa maintenance_resolved_anomalies.
"""

import datetime
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.trip_log import TripLog
    from app.models.vehicle import Vehicle


# ------------------------------------------------------------
# Tabella associativa intervento <-> anomalie risolte
# ------------------------------------------------------------
maintenance_resolved_anomalies = Table(
    "maintenance_resolved_anomalies",
    Base.metadata,
    Column(
        "maintenance_id",
        Uuid,
        ForeignKey("maintenance_records.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "trip_log_id",
        Uuid,
        ForeignKey("trip_logs.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class MaintenanceRecord(Base, UUIDMixin, TimestampMixin):
    """
    Modello per gli interventi di manutenzione.

    I campi pneumatici (tire_type, tire_storage_location) hanno senso
    solo per interventi di tipo GOMME: la normalizzazione è a carico
    dello schema di input.

    Attributes:
        vehicle_id: UUID del veicolo
        date: Data dell'intervento
        type: Tipo intervento (TAGLIANDO, GOMME, MECCANICA, REVISIONE, ALTRO)
        cost: Costo dell'intervento (opzionale)
        mileage: Km del veicolo all'intervento
        tire_type: Tipo pneumatici (ESTIVE, INVERNALI, QUATTRO_STAGIONI)
        tire_storage_location: Deposito pneumatici smontati
        notes: Note libere

    Relationships:
        vehicle: Veicolo (many-to-one)
        resolved_anomalies: Registrazioni con anomalia risolte (many-to-many)
    """

    __tablename__ = "maintenance_records"

    vehicle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vehicles.id", ondelete="CASCADE"),
        nullable=False,
        doc="UUID del veicolo",
    )

    date: Mapped[datetime.date] = mapped_column(
        Date,
        nullable=False,
        doc="Data dell'intervento",
    )

    type: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        doc="Tipo di intervento",
    )

    cost: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2),
        nullable=True,
        doc="Costo dell'intervento (EUR)",
    )

    mileage: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Chilometraggio all'intervento",
    )

    # ------------------------------------------------------------
    # Colonne Pneumatici (solo tipo GOMME)
    # ------------------------------------------------------------
    tire_type: Mapped[Optional[str]] = mapped_column(
        String(30),
        nullable=True,
        doc="Tipo di pneumatici montati",
    )

    tire_storage_location: Mapped[Optional[str]] = mapped_column(
        String(150),
        nullable=True,
        doc="Dove sono depositati i pneumatici smontati",
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
        back_populates="maintenance_records",
        lazy="joined",
    )

    resolved_anomalies: Mapped[List["TripLog"]] = relationship(
        "TripLog",
        secondary=maintenance_resolved_anomalies,
        lazy="selectin",
        order_by="TripLog.date",
    )

    __table_args__ = (
        Index("ix_maintenance_records_vehicle_date", "vehicle_id", "date"),
        Index("ix_maintenance_records_type", "type"),
    )

    @property
    def resolved_anomaly_ids(self) -> List[uuid.UUID]:
        """UUID delle registrazioni risolte da questo intervento."""
        return [log.id for log in self.resolved_anomalies]

    def __repr__(self) -> str:
        return (
            f"<MaintenanceRecord(id={self.id}, vehicle_id={self.vehicle_id}, "
            f"type={self.type}, date={self.date})>"
        )
