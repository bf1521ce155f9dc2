"""
Safety Service Business Logic

All services for drill, document, acknowledgment and certificate compliance.
"""

from .exceptions import (
    SafetyServiceError,
    ComplianceValidationError,
    InvalidTransitionError,
    ConcurrentModificationError,
    DuplicateAcknowledgmentError,
    SafetyNotFoundError,
    DrillNotFoundError,
    DrillTypeNotFoundError,
    DocumentNotFoundError,
    CertificateNotFoundError,
)
from .recurrence import (
    NEVER_SATISFIED_DAYS,
    RECURRENCE_SCALE,
    REVIEW_SCALE,
    Obligation,
    RecurrenceStatus,
    Tier,
    TierScale,
    calculate_recurrence,
    classify_anchor,
    compliance_today,
    days_until,
)
from .drill_service import DrillService
from .document_workflow_service import DocumentWorkflowService
from .acknowledgment_service import AcknowledgmentService
from .certificate_service import CertificateService
from .fleet_service import FleetComplianceService

__all__ = [
    # Services
    'DrillService',
    'DocumentWorkflowService',
    'AcknowledgmentService',
    'CertificateService',
    'FleetComplianceService',

    # Calculator
    'NEVER_SATISFIED_DAYS',
    'RECURRENCE_SCALE',
    'REVIEW_SCALE',
    'Obligation',
    'RecurrenceStatus',
    'Tier',
    'TierScale',
    'calculate_recurrence',
    'classify_anchor',
    'compliance_today',
    'days_until',

    # Exceptions
    'SafetyServiceError',
    'ComplianceValidationError',
    'InvalidTransitionError',
    'ConcurrentModificationError',
    'DuplicateAcknowledgmentError',
    'SafetyNotFoundError',
    'DrillNotFoundError',
    'DrillTypeNotFoundError',
    'DocumentNotFoundError',
    'CertificateNotFoundError',
]
