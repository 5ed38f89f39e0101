"""
Modello SQLAlchemy per l'entità Vehicle
Progetto: Fleet Manager (Gestione Flotta)

Rappresenta i veicoli della flotta aziendale.
"""

import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Date, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin

# Import per type hinting relazioni (evita circular import)
if TYPE_CHECKING:
    from app.models.trip_log import TripLog
    from app.models.fueling import FuelingRecord
    from app.models.maintenance import MaintenanceRecord
    from app.models.mileage_check import MileageCheck
    from app.models.document import VehicleDocument


class Vehicle(Base, UUIDMixin, TimestampMixin):
    """
    Modello per i veicoli della flotta.

    Il chilometraggio corrente NON è memorizzato sul veicolo: viene
    ricavato a ogni lettura dai quattro flussi di eventi (viaggi,
    rifornimenti, manutenzioni, verifiche km).

    Attributes:
        id: UUID primary key, generato automaticamente
        plate: Targa del veicolo (obbligatoria, univoca)
        name: Nome descrittivo (es. "Fiat Doblò bianco")
        type: Tipologia (es. furgone, auto)
        status: Stato operativo (ACTIVE, MAINTENANCE, OUT_OF_SERVICE)
        ownership_type: Proprietà (OWNED) o noleggio (RENTAL)
        service_interval_km: Intervallo tagliando in km
        registration_date: Data di immatricolazione (opzionale)
        current_anomaly: Banner anomalia corrente, proiezione delle
            anomalie non risolte mantenuta dal servizio anomalie
        notes: Note aggiuntive (opzionale)

    Relationships:
        trip_logs, fuelings, maintenance_records, mileage_checks, documents
    """

    __tablename__ = "vehicles"

    # ------------------------------------------------------------
    # Colonne Dati Veicolo
    # ------------------------------------------------------------
    plate: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
        doc="Targa del veicolo",
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Nome descrittivo del veicolo",
    )

    type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        doc="Tipologia del veicolo",
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="ACTIVE",
        doc="Stato operativo del veicolo",
    )

    ownership_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="OWNED",
        doc="Tipo di possesso: OWNED o RENTAL",
    )

    service_interval_km: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=15000,
        doc="Intervallo tagliando in km",
    )

    registration_date: Mapped[Optional[datetime.date]] = mapped_column(
        Date,
        nullable=True,
        doc="Data di immatricolazione",
    )

    # ------------------------------------------------------------
    # Colonne Derivate
    # ------------------------------------------------------------
    current_anomaly: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Descrizione dell'anomalia mostrata nel banner del veicolo",
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Note aggiuntive sul veicolo",
    )

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    trip_logs: Mapped[List["TripLog"]] = relationship(
        "TripLog",
        back_populates="vehicle",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    fuelings: Mapped[List["FuelingRecord"]] = relationship(
        "FuelingRecord",
        back_populates="vehicle",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    maintenance_records: Mapped[List["MaintenanceRecord"]] = relationship(
        "MaintenanceRecord",
        back_populates="vehicle",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    mileage_checks: Mapped[List["MileageCheck"]] = relationship(
        "MileageCheck",
        back_populates="vehicle",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    documents: Mapped[List["VehicleDocument"]] = relationship(
        "VehicleDocument",
        back_populates="vehicle",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    # ------------------------------------------------------------
    # Indici
    # ------------------------------------------------------------
    __table_args__ = (
        Index("ix_vehicles_plate", "plate"),
        Index("ix_vehicles_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Vehicle(id={self.id}, plate={self.plate}, name={self.name})>"
