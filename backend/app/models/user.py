"""
Modello SQLAlchemy per l'entità User
Progetto: Fleet Manager (Gestione Flotta)

Modello per l'autenticazione e gestione utenti del sistema.
"""

from __future__ import annotations
from enum import Enum
from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.trip_log import TripLog
    from app.models.fueling import FuelingRecord
    from app.models.mileage_check import MileageCheck


class UserRole(str, Enum):
    """Ruoli utente nel sistema."""
    ADMIN = "admin"
    EMPLOYEE = "employee"


class User(Base, UUIDMixin, TimestampMixin):
    """
    Modello per gli utenti del sistema.

    Gli amministratori gestiscono la flotta; i dipendenti registrano
    viaggi, rifornimenti e verifiche del contachilometri.

    Attributes:
        id: UUID primary key, generato automaticamente
        email: Email univoca dell'utente
        hashed_password: Password hashata
        full_name: Nome completo dell'utente
        role: Ruolo dell'utente (admin, employee)
        is_active: Indica se l'utente è attivo
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        doc="Email univoca dell'utente",
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Password hashata",
    )

    full_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Nome completo dell'utente",
    )

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.EMPLOYEE.value,
        doc="Ruolo dell'utente",
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        doc="Indica se l'utente è attivo",
    )

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    trip_logs: Mapped[List["TripLog"]] = relationship(
        "TripLog",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    fuelings: Mapped[List["FuelingRecord"]] = relationship(
        "FuelingRecord",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    mileage_checks: Mapped[List["MileageCheck"]] = relationship(
        "MileageCheck",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    __table_args__ = (
        Index("ix_users_email", "email"),
        Index("ix_users_role", "role"),
    )

    @property
    def is_admin(self) -> bool:
        """True se l'utente è amministratore."""
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
