# services/safety-service/src/apps/api/views/emergency.py
"""
Emergency reference data views.
"""

from django.db.models import Q

from common.pagination import ReferenceDataPagination
from apps.core.models import EmergencyContact, EmergencyProcedure
from apps.api.serializers import EmergencyContactSerializer, EmergencyProcedureSerializer
from .base import TenantModelViewSet, _parse_uuid


class VesselReferenceViewSet(TenantModelViewSet):
    """
    ``?vessel_id=`` returns the vessel's entries together with the
    company-wide ones.
    """

    pagination_class = ReferenceDataPagination

    def get_queryset(self):
        queryset = super().get_queryset()
        vessel_id = self.request.query_params.get('vessel_id')
        if vessel_id:
            vessel_id = _parse_uuid(vessel_id, 'vessel_id')
            queryset = queryset.filter(Q(vessel_id=vessel_id) | Q(vessel_id__isnull=True))
        return queryset


class EmergencyContactViewSet(VesselReferenceViewSet):
    queryset = EmergencyContact.objects.all()
    serializer_class = EmergencyContactSerializer
    filterset_fields = ['category', 'available_24_7']
    search_fields = ['organization_name', 'contact_name']


class EmergencyProcedureViewSet(VesselReferenceViewSet):
    queryset = EmergencyProcedure.objects.all()
    serializer_class = EmergencyProcedureSerializer
    filterset_fields = ['emergency_type']
    search_fields = ['title']
