# Re-export every model under training_pay.models
from .mixins import TimeStampedModel

from .directory import Unit, Trainee, Batch, BatchTrainee
from .training import TrainingSession, AttendanceOutcome
from .compensation import CompensationRow
from .transport import TransportRecord, TransportStatus
from .settlement import DisbursementProcess, ClawbackProcess
from .commuting import GeoReferenceLocation, CommutingRecord
from .audit import AuditLog

__all__ = [
    "TimeStampedModel",
    "Unit", "Trainee", "Batch", "BatchTrainee",
    "TrainingSession", "AttendanceOutcome",
    "CompensationRow",
    "TransportRecord", "TransportStatus",
    "DisbursementProcess", "ClawbackProcess",
    "GeoReferenceLocation", "CommutingRecord",
    "AuditLog",
]
