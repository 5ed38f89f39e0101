"""
Modelli Database SQLAlchemy
Progetto: Fleet Manager (Gestione Flotta)

Import centralizzato di tutti i modelli per Alembic e usage generico.

Modelli:
- User: Utenti (admin / dipendenti)
- Vehicle: Veicoli della flotta
- TripLog: Registrazioni di utilizzo (viaggi) con eventuali anomalie
- FuelingRecord: Rifornimenti
- MaintenanceRecord: Interventi di manutenzione
- MileageCheck: Verifiche manuali del contachilometri
- VehicleDocument: Documenti (libretto, assicurazione, altro)
"""

# SQLAlchemy 2.0 Base declarativa
# Importato qui per essere disponibile per tutti i modelli
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class per tutti i modelli SQLAlchemy."""
    pass


from app.models.user import User
from app.models.vehicle import Vehicle
from app.models.trip_log import TripLog
from app.models.fueling import FuelingRecord
from app.models.maintenance import MaintenanceRecord, maintenance_resolved_anomalies
from app.models.mileage_check import MileageCheck
from app.models.document import VehicleDocument

# Esportazione di tutti i modelli per Alembic
__all__ = [
    "Base",
    "User",
    "Vehicle",
    "TripLog",
    "FuelingRecord",
    "MaintenanceRecord",
    "maintenance_resolved_anomalies",
    "MileageCheck",
    "VehicleDocument",
]
