"""
Schemas Pydantic per il progetto Fleet Manager

Questo modulo contiene tutti gli schemi Pydantic utilizzati per la validazione
e serializzazione delle richieste e risposte API.
"""

from app.schemas.user import UserCreate, UserLogin, UserUpdate, UserResponse
from app.schemas.token import TokenResponse, TokenRefresh, TokenPayload
from app.schemas.vehicle import (
    ActiveVehicleRead,
    OwnershipType,
    VehicleCreate,
    VehicleList,
    VehicleRead,
    VehicleStatus,
    VehicleSummary,
    VehicleUpdate,
)
from app.schemas.trip_log import (
    AnomalyReport,
    AnomalyResolve,
    TripLogCreate,
    TripLogList,
    TripLogRead,
    TripLogUpdate,
    UnresolvedAnomalyRead,
)
from app.schemas.fueling import FuelingCreate, FuelingRead, FuelingUpdate
from app.schemas.maintenance import (
    MaintenanceCreate,
    MaintenanceRead,
    MaintenanceType,
    MaintenanceUpdate,
    ResolvedAnomalyRead,
    TireType,
)
from app.schemas.mileage_check import MileageCheckCreate, MileageCheckRead
from app.schemas.document import DocumentCreate, DocumentRead, DocumentType
from app.schemas.mileage import (
    DueBand,
    FleetVehicleSummary,
    HistoryItem,
    HistoryKind,
    LastKnownMileage,
    MileageReading,
    MileageSource,
    MileageStatistics,
    ServiceStatus,
)

__all__ = [
    # User / Auth
    "UserCreate",
    "UserLogin",
    "UserUpdate",
    "UserResponse",
    "TokenResponse",
    "TokenRefresh",
    "TokenPayload",
    # Vehicle
    "ActiveVehicleRead",
    "OwnershipType",
    "VehicleCreate",
    "VehicleList",
    "VehicleRead",
    "VehicleStatus",
    "VehicleSummary",
    "VehicleUpdate",
    # TripLog
    "AnomalyReport",
    "AnomalyResolve",
    "TripLogCreate",
    "TripLogList",
    "TripLogRead",
    "TripLogUpdate",
    "UnresolvedAnomalyRead",
    # Fueling
    "FuelingCreate",
    "FuelingRead",
    "FuelingUpdate",
    # Maintenance
    "MaintenanceCreate",
    "MaintenanceRead",
    "MaintenanceType",
    "MaintenanceUpdate",
    "ResolvedAnomalyRead",
    "TireType",
    # MileageCheck
    "MileageCheckCreate",
    "MileageCheckRead",
    # Document
    "DocumentCreate",
    "DocumentRead",
    "DocumentType",
    # Mileage / scadenze
    "DueBand",
    "FleetVehicleSummary",
    "HistoryItem",
    "HistoryKind",
    "LastKnownMileage",
    "MileageReading",
    "MileageSource",
    "MileageStatistics",
    "ServiceStatus",
]
