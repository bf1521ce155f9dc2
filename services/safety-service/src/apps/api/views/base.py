# services/safety-service/src/apps/api/views/base.py
"""
Base Views and Mixins

Common functionality for Safety Service API views.
"""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from rest_framework import status, viewsets
from rest_framework.response import Response

from apps.core.services import (
    ComplianceValidationError,
    ConcurrentModificationError,
    InvalidTransitionError,
    SafetyNotFoundError,
    SafetyServiceError,
    compliance_today,
)

logger = logging.getLogger(__name__)


def retry_on_conflict(func, *args, **kwargs):
    """
    Call a service operation, retrying once if it lost an optimistic
    concurrency race. A second loss propagates to the caller.
    """
    try:
        return func(*args, **kwargs)
    except ConcurrentModificationError as e:
        logger.warning(f"Retrying after concurrent modification: {e.message}")
        return func(*args, **kwargs)


def _parse_uuid(value, field: str) -> UUID:
    try:
        return UUID(str(value))
    except ValueError:
        raise ComplianceValidationError(message=f"Invalid {field} format", field=field)


def _parse_id_list(value: str, field: str):
    """Comma-separated UUIDs from a query parameter."""
    return [_parse_uuid(item.strip(), field) for item in value.split(',') if item.strip()]


class OrganizationMixin:
    """
    Mixin for extracting organization context from request.

    Expects organization_id to be provided via:
    - Request header: X-Organization-ID (resolved by TenantMiddleware)
    - Request query param: organization_id
    """

    def get_organization_id(self) -> UUID:
        org_id = getattr(self.request, 'organization_id', None)

        if not org_id:
            org_id = self.request.headers.get('X-Organization-ID')

        if not org_id:
            org_id = self.request.query_params.get('organization_id')

        if not org_id:
            raise ComplianceValidationError(
                message="Organization ID is required",
                field="organization_id"
            )

        return _parse_uuid(org_id, 'organization_id')


class UserContextMixin:
    """
    Mixin for extracting user context from the X-User-ID header.
    """

    def get_user_id(self) -> UUID:
        user_id = getattr(self.request, 'user_id', None) or self.request.headers.get('X-User-ID')

        if not user_id:
            raise ComplianceValidationError(
                message="User ID is required",
                field="user_id"
            )

        return _parse_uuid(user_id, 'user_id')

    def get_optional_user_id(self) -> Optional[UUID]:
        try:
            return self.get_user_id()
        except ComplianceValidationError:
            return None


class ReportingDateMixin:
    """Reporting date for compliance reads: ``?as_of=YYYY-MM-DD`` or today."""

    def get_today(self) -> date:
        as_of = self.request.query_params.get('as_of')
        if not as_of:
            return compliance_today()
        try:
            return date.fromisoformat(as_of)
        except ValueError:
            raise ComplianceValidationError(message="as_of must be YYYY-MM-DD", field="as_of")


class ExceptionHandlerMixin:
    """Mixin for handling service layer exceptions."""

    def handle_exception(self, exc):
        """Convert service exceptions to appropriate HTTP responses."""

        if isinstance(exc, SafetyNotFoundError):
            return Response(exc.to_dict(), status=status.HTTP_404_NOT_FOUND)

        if isinstance(exc, ComplianceValidationError):
            return Response(exc.to_dict(), status=status.HTTP_400_BAD_REQUEST)

        if isinstance(exc, (InvalidTransitionError, ConcurrentModificationError)):
            return Response(exc.to_dict(), status=status.HTTP_409_CONFLICT)

        if isinstance(exc, SafetyServiceError):
            return Response(exc.to_dict(), status=status.HTTP_400_BAD_REQUEST)

        return super().handle_exception(exc)


class TenantModelViewSet(
    OrganizationMixin,
    UserContextMixin,
    ReportingDateMixin,
    ExceptionHandlerMixin,
    viewsets.ModelViewSet
):
    """
    ModelViewSet scoped to the caller's organization.

    Records are always read and written within the organization from the
    request; clients never choose it in the payload.
    """

    lookup_value_regex = '[0-9a-fA-F-]{36}'

    def get_queryset(self):
        return super().get_queryset().filter(organization_id=self.get_organization_id())

    def perform_create(self, serializer):
        serializer.save(organization_id=self.get_organization_id())
