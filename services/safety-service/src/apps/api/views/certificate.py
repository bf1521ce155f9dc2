# services/safety-service/src/apps/api/views/certificate.py
"""
Certificate API Views
"""

from django.conf import settings
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.models import Certificate
from apps.core.services import CertificateService, ComplianceValidationError
from apps.api.serializers import CertificateSerializer
from .base import TenantModelViewSet, _parse_uuid


class CertificateViewSet(TenantModelViewSet):
    queryset = Certificate.objects.all()
    serializer_class = CertificateSerializer
    filterset_fields = ['certificate_type', 'status', 'vessel_id', 'crew_id']
    search_fields = ['name', 'certificate_number', 'issuing_authority']
    ordering_fields = ['expiry_date', 'issue_date', 'name']
    ordering = ['expiry_date']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.service = CertificateService()

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['service'] = self.service
        context['today'] = self.get_today()
        return context

    @action(detail=False, methods=['get'])
    def expiring(self, request):
        """
        Valid certificates expiring within ``within_days`` (default
        CERTIFICATE_EXPIRY_HORIZON_DAYS), expired ones included.
        """
        today = self.get_today()
        within_days = request.query_params.get('within_days', settings.CERTIFICATE_EXPIRY_HORIZON_DAYS)
        try:
            within_days = int(within_days)
        except ValueError:
            raise ComplianceValidationError("within_days must be an integer", field='within_days')

        vessel_id = request.query_params.get('vessel_id')
        obligations = self.service.expiring(
            self.get_organization_id(),
            today,
            within_days=within_days,
            vessel_id=_parse_uuid(vessel_id, 'vessel_id') if vessel_id else None
        )
        return Response({
            'as_of': today.isoformat(),
            'within_days': within_days,
            'results': [obligation.to_dict() for obligation in obligations],
        })
