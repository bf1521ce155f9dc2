# services/safety-service/src/apps/core/services/exceptions.py
"""
Safety Service Exceptions

Custom exceptions for drill, document, acknowledgment and certificate
operations.
"""

from typing import Optional, Dict, Any


class SafetyServiceError(Exception):
    """Base exception for safety service errors."""

    def __init__(
        self,
        message: str,
        code: str = "SAFETY_SERVICE_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ComplianceValidationError(SafetyServiceError):
    """Raised when a required field is missing or malformed."""

    def __init__(
        self,
        message: str,
        field: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details=error_details
        )


class InvalidTransitionError(SafetyServiceError):
    """Raised when a status change is not allowed from the current state."""

    def __init__(
        self,
        current_state: str,
        target_state: str,
        message: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        msg = message or f"Cannot transition from {current_state} to {target_state}"
        error_details = details or {}
        error_details.update({
            "current_state": current_state,
            "target_state": target_state
        })
        super().__init__(
            message=msg,
            code="INVALID_TRANSITION",
            details=error_details
        )
        self.current_state = current_state
        self.target_state = target_state


class ConcurrentModificationError(SafetyServiceError):
    """Raised when the record changed between read and conditional write."""

    def __init__(self, entity: str, entity_id, details: Optional[Dict[str, Any]] = None):
        error_details = details or {}
        error_details.update({"entity": entity, "id": str(entity_id)})
        super().__init__(
            message=f"{entity} {entity_id} was modified concurrently; reload and retry",
            code="CONCURRENT_MODIFICATION",
            details=error_details
        )


class DuplicateAcknowledgmentError(SafetyServiceError):
    """Raised when a user has already acknowledged a document."""

    def __init__(self, acknowledgment):
        super().__init__(
            message=f"User {acknowledgment.user_id} already acknowledged document {acknowledgment.document_id}",
            code="DUPLICATE_ACKNOWLEDGMENT",
            details={
                "document_id": str(acknowledgment.document_id),
                "user_id": str(acknowledgment.user_id),
            }
        )
        self.acknowledgment = acknowledgment


class SafetyNotFoundError(SafetyServiceError):
    """Base for missing-record errors."""

    entity = "Record"
    error_code = "NOT_FOUND"

    def __init__(self, entity_id=None, message: str = None):
        super().__init__(
            message=message or f"{self.entity} not found: {entity_id}",
            code=self.error_code,
            details={"id": str(entity_id) if entity_id else None}
        )


class DrillNotFoundError(SafetyNotFoundError):
    entity = "Drill"
    error_code = "DRILL_NOT_FOUND"


class DrillTypeNotFoundError(SafetyNotFoundError):
    entity = "Drill type"
    error_code = "DRILL_TYPE_NOT_FOUND"


class DocumentNotFoundError(SafetyNotFoundError):
    entity = "Document"
    error_code = "DOCUMENT_NOT_FOUND"


class CertificateNotFoundError(SafetyNotFoundError):
    entity = "Certificate"
    error_code = "CERTIFICATE_NOT_FOUND"
