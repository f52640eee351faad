"""Models package - imports all models for the application"""
from ..extensions import db

from .user import User
from .drug_lot import DrugLot, NOT_APPLICABLE_EXPIRY
from .service import Service
from .distribution import Distribution, ImmutableLedgerError
from .alert_read_marker import AlertReadMarker

__all__ = [
    'db',
    'User',
    'DrugLot',
    'NOT_APPLICABLE_EXPIRY',
    'Service',
    'Distribution',
    'ImmutableLedgerError',
    'AlertReadMarker',
]
