# services/safety-service/src/apps/core/services/certificate_service.py
"""
Certificate Service

Certificate validity windows classified on the review scale: an expired
certificate is overdue, then urgent (<30 days), warning (<60), normal.
"""

import uuid
import logging
from datetime import date, timedelta
from typing import Optional, List

from django.conf import settings

from apps.core.models import Certificate
from .exceptions import CertificateNotFoundError
from .recurrence import REVIEW_SCALE, Obligation, RecurrenceStatus, classify_anchor

logger = logging.getLogger(__name__)


class CertificateService:

    def get_certificate(self, certificate_id: uuid.UUID, organization_id: uuid.UUID = None) -> Certificate:
        queryset = Certificate.objects.all()
        if organization_id:
            queryset = queryset.filter(organization_id=organization_id)
        try:
            return queryset.get(id=certificate_id)
        except Certificate.DoesNotExist:
            raise CertificateNotFoundError(certificate_id)

    def expiry_status(self, certificate: Certificate, today: date) -> Optional[RecurrenceStatus]:
        """Days until expiry and urgency; None for certificates without expiry."""
        return classify_anchor(certificate.expiry_date, today, REVIEW_SCALE)

    def tracked(self, organization_id: uuid.UUID, vessel_id: Optional[uuid.UUID] = None):
        certificates = Certificate.objects.filter(
            organization_id=organization_id,
            status=Certificate.Status.VALID,
            expiry_date__isnull=False,
        )
        if vessel_id:
            certificates = certificates.filter(vessel_id=vessel_id)
        return certificates

    def obligations(
        self,
        organization_id: uuid.UUID,
        today: date,
        vessel_id: Optional[uuid.UUID] = None
    ) -> List[Obligation]:
        return [
            Obligation(
                kind='certificates',
                reference_id=certificate.id,
                label=certificate.name,
                vessel_id=certificate.vessel_id,
                status=self.expiry_status(certificate, today),
                extra={
                    'certificate_type': certificate.certificate_type,
                    'certificate_number': certificate.certificate_number,
                    'crew_id': str(certificate.crew_id) if certificate.crew_id else None,
                },
            )
            for certificate in self.tracked(organization_id, vessel_id).order_by('expiry_date')
        ]

    def expiring(
        self,
        organization_id: uuid.UUID,
        today: date,
        within_days: Optional[int] = None,
        vessel_id: Optional[uuid.UUID] = None
    ) -> List[Obligation]:
        """
        Valid certificates expiring within ``within_days``, including already
        expired. Defaults to CERTIFICATE_EXPIRY_HORIZON_DAYS.
        """
        if within_days is None:
            within_days = settings.CERTIFICATE_EXPIRY_HORIZON_DAYS
        horizon = today + timedelta(days=within_days)
        return [
            obligation for obligation in self.obligations(organization_id, today, vessel_id)
            if obligation.due_date <= horizon
        ]
