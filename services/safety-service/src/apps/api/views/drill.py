# services/safety-service/src/apps/api/views/drill.py
"""
Drill API Views
"""

from django.db.models import ProtectedError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.models import Drill, DrillType
from apps.core.services import DrillService, ComplianceValidationError, SafetyServiceError
from apps.api.serializers import (
    DrillTypeSerializer,
    DrillSerializer,
    DrillDetailSerializer,
    DrillScheduleSerializer,
    DrillCompleteSerializer,
    DrillReasonSerializer,
)
from .base import TenantModelViewSet, retry_on_conflict, _parse_uuid


class DrillTypeViewSet(TenantModelViewSet):
    """
    ViewSet for drill types.

    Reference data; a type referenced by drills cannot be deleted, only
    deactivated.
    """

    queryset = DrillType.objects.all()
    serializer_class = DrillTypeSerializer
    filterset_fields = ['category', 'is_active']
    search_fields = ['name', 'solas_reference']
    ordering_fields = ['name', 'minimum_frequency', 'created_at']
    ordering = ['name']

    def perform_create(self, serializer):
        organization_id = self.get_organization_id()
        name = serializer.validated_data['name']
        if DrillType.objects.filter(organization_id=organization_id, name=name).exists():
            raise ComplianceValidationError(f"Drill type {name} already exists", field='name')
        serializer.save(organization_id=organization_id)

    def perform_destroy(self, instance):
        try:
            instance.delete()
        except ProtectedError:
            raise SafetyServiceError(
                f"Drill type {instance.name} has drills on record; deactivate it instead",
                code='DRILL_TYPE_IN_USE'
            )


class DrillViewSet(TenantModelViewSet):
    """
    ViewSet for drills.

    Drills are created by scheduling and change only through the
    lifecycle actions; there is no generic update.
    """

    queryset = Drill.objects.select_related('drill_type')
    serializer_class = DrillSerializer
    http_method_names = ['get', 'post', 'delete', 'head', 'options']
    filterset_fields = ['vessel_id', 'drill_type', 'status']
    search_fields = ['drill_number', 'scenario_description']
    ordering_fields = ['drill_date_scheduled', 'drill_date_actual', 'drill_number', 'created_at']
    ordering = ['-drill_date_scheduled']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.service = DrillService()

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return DrillDetailSerializer
        elif self.action == 'create':
            return DrillScheduleSerializer
        return DrillSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == 'retrieve':
            queryset = queryset.prefetch_related(
                'participants', 'evaluations', 'deficiencies__corrective_action',
                'equipment_checks', 'corrective_actions',
            )
        return queryset

    def create(self, request, *args, **kwargs):
        """Schedule a drill."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        drill = self.service.schedule(
            organization_id=self.get_organization_id(),
            **serializer.validated_data
        )
        return Response(DrillDetailSerializer(drill).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        self.service.delete_drill(kwargs['pk'], organization_id=self.get_organization_id())
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ==========================================================================
    # Lifecycle Actions
    # ==========================================================================

    @action(detail=True, methods=['post'])
    def start(self, request, pk=None):
        drill = retry_on_conflict(
            self.service.start, pk, organization_id=self.get_organization_id()
        )
        return Response(DrillDetailSerializer(drill).data)

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        """Record the drill's outcome and sub-records."""
        serializer = DrillCompleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        drill = retry_on_conflict(
            self.service.complete,
            pk,
            completed_by_id=self.get_optional_user_id(),
            organization_id=self.get_organization_id(),
            **serializer.validated_data
        )
        return Response(DrillDetailSerializer(drill).data)

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        serializer = DrillReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        drill = retry_on_conflict(
            self.service.cancel,
            pk,
            serializer.validated_data['reason'],
            organization_id=self.get_organization_id()
        )
        return Response(DrillDetailSerializer(drill).data)

    @action(detail=True, methods=['post'])
    def postpone(self, request, pk=None):
        serializer = DrillReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        drill = retry_on_conflict(
            self.service.postpone,
            pk,
            serializer.validated_data['reason'],
            organization_id=self.get_organization_id()
        )
        return Response(DrillDetailSerializer(drill).data)

    # ==========================================================================
    # Compliance
    # ==========================================================================

    @action(detail=False, methods=['get'])
    def compliance(self, request):
        """
        Drill compliance.

        With ``vessel_id`` and ``drill_type_id`` returns the status of that
        one obligation; otherwise every active drill type per vessel.
        """
        organization_id = self.get_organization_id()
        today = self.get_today()
        vessel_id = request.query_params.get('vessel_id')
        drill_type_id = request.query_params.get('drill_type_id')

        if vessel_id:
            vessel_id = _parse_uuid(vessel_id, 'vessel_id')

        if vessel_id and drill_type_id:
            result = self.service.compliance_for(
                organization_id,
                vessel_id,
                _parse_uuid(drill_type_id, 'drill_type_id'),
                today
            )
            return Response({
                'vessel_id': str(vessel_id),
                'drill_type_id': drill_type_id,
                'as_of': today.isoformat(),
                **result.to_dict(),
            })

        obligations = self.service.compliance_overview(organization_id, vessel_id, today)
        return Response({
            'as_of': today.isoformat(),
            'results': [obligation.to_dict() for obligation in obligations],
        })
