"""
Services package

Business logic for identity, ledger, projection and assignment operations.
"""

from .assignment_service import AssignmentService
from .auth_service import MagicLinkService
from .ledger_service import LedgerService
from .notification_service import NotificationService
from .projection_service import ProjectionService
from .transaction_service import TransactionService, validate_splits

__all__ = [
    "AssignmentService",
    "LedgerService",
    "MagicLinkService",
    "NotificationService",
    "ProjectionService",
    "TransactionService",
    "validate_splits",
]
