# services/safety-service/src/apps/api/views/document.py
"""
Document API Views

Controlled documents, their approval workflow and read acknowledgments.
"""

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from common.middleware import get_client_ip
from apps.core.models import Document
from apps.core.services import (
    AcknowledgmentService,
    ComplianceValidationError,
    DocumentWorkflowService,
    DuplicateAcknowledgmentError,
)
from apps.api.serializers import (
    DocumentSerializer,
    DocumentDetailSerializer,
    DocumentCreateSerializer,
    DocumentUpdateSerializer,
    DocumentSubmitSerializer,
    DocumentApproveSerializer,
    DocumentRejectSerializer,
    DocumentMarkReviewedSerializer,
    DocumentAcknowledgmentSerializer,
    AcknowledgeSerializer,
)
from .base import TenantModelViewSet, retry_on_conflict, _parse_id_list, _parse_uuid


class DocumentViewSet(TenantModelViewSet):
    """
    ViewSet for controlled documents.

    Documents are never deleted through the API; they are retired with
    the obsolete action.
    """

    queryset = Document.objects.select_related('category')
    serializer_class = DocumentSerializer
    http_method_names = ['get', 'post', 'put', 'patch', 'head', 'options']
    filterset_fields = ['status', 'vessel_id', 'category', 'is_mandatory_read']
    search_fields = ['document_number', 'title']
    ordering_fields = ['document_number', 'next_review_date', 'created_at']
    ordering = ['document_number']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.service = DocumentWorkflowService()
        self.acknowledgment_service = AcknowledgmentService()

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return DocumentDetailSerializer
        elif self.action == 'create':
            return DocumentCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return DocumentUpdateSerializer
        return DocumentSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['service'] = self.service
        context['today'] = self.get_today()
        return context

    def _detail(self, document):
        return DocumentDetailSerializer(document, context=self.get_serializer_context()).data

    def _check_category(self, category):
        if category and category.organization_id != self.get_organization_id():
            raise ComplianceValidationError("Unknown document category", field='category')

    def create(self, request, *args, **kwargs):
        """Create a draft document."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        self._check_category(data.get('category'))
        document = self.service.create_document(
            organization_id=self.get_organization_id(),
            author_id=self.get_optional_user_id(),
            **data
        )
        return Response(self._detail(document), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """Update descriptive fields of a non-obsolete document."""
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        if instance.is_obsolete:
            raise ComplianceValidationError("Obsolete documents cannot be edited", field='status')

        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self._check_category(serializer.validated_data.get('category'))

        document = retry_on_conflict(
            self.service.update_details,
            instance.id,
            organization_id=self.get_organization_id(),
            **serializer.validated_data
        )
        return Response(self._detail(document))

    # ==========================================================================
    # Workflow Actions
    # ==========================================================================

    @action(detail=True, methods=['post'])
    def submit(self, request, pk=None):
        serializer = DocumentSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        document = retry_on_conflict(
            self.service.submit_for_review,
            pk,
            organization_id=self.get_organization_id(),
            **serializer.validated_data
        )
        return Response(self._detail(document))

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        """Approve, or forward to the approver when the reviewer signs off."""
        serializer = DocumentApproveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        document = retry_on_conflict(
            self.service.approve,
            pk,
            self.get_user_id(),
            today=self.get_today(),
            comments=serializer.validated_data['comments'],
            organization_id=self.get_organization_id()
        )
        return Response(self._detail(document))

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        serializer = DocumentRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        document = retry_on_conflict(
            self.service.reject,
            pk,
            self.get_user_id(),
            serializer.validated_data['feedback'],
            today=self.get_today(),
            organization_id=self.get_organization_id()
        )
        return Response(self._detail(document))

    @action(detail=True, methods=['post'], url_path='mark-reviewed')
    def mark_reviewed(self, request, pk=None):
        serializer = DocumentMarkReviewedSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        document = retry_on_conflict(
            self.service.mark_reviewed,
            pk,
            serializer.validated_data['next_review_date'],
            comments=serializer.validated_data['comments'],
            reviewer_id=self.get_optional_user_id(),
            today=self.get_today(),
            organization_id=self.get_organization_id()
        )
        return Response(self._detail(document))

    @action(detail=True, methods=['post'])
    def obsolete(self, request, pk=None):
        document = retry_on_conflict(
            self.service.obsolete, pk, organization_id=self.get_organization_id()
        )
        return Response(self._detail(document))

    # ==========================================================================
    # Acknowledgments
    # ==========================================================================

    @action(detail=True, methods=['post'])
    def acknowledge(self, request, pk=None):
        """
        Record that the calling user has read the document.

        Acknowledging twice is harmless: the stored acknowledgment is
        returned with 200 instead of 201.
        """
        serializer = AcknowledgeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            acknowledgment = self.acknowledgment_service.acknowledge(
                pk,
                self.get_user_id(),
                acknowledged_at=serializer.validated_data.get('acknowledged_at'),
                ip_address=get_client_ip(request),
                organization_id=self.get_organization_id()
            )
        except DuplicateAcknowledgmentError as e:
            return Response(
                DocumentAcknowledgmentSerializer(e.acknowledgment).data,
                status=status.HTTP_200_OK
            )

        return Response(
            DocumentAcknowledgmentSerializer(acknowledgment).data,
            status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=['get'])
    def acknowledgments(self, request, pk=None):
        """
        Acknowledgments of a document.

        Query params:
        - total_required_crew: crew size for completion stats
        - crew_ids: comma-separated crew to report as pending
        """
        document = self.get_object()
        acknowledgments = self.acknowledgment_service.list_for_document(document.id)

        data = {
            'document_id': str(document.id),
            'results': DocumentAcknowledgmentSerializer(acknowledgments, many=True).data,
        }

        crew_ids = request.query_params.get('crew_ids')
        total_required = request.query_params.get('total_required_crew')
        if crew_ids is not None:
            crew = _parse_id_list(crew_ids, 'crew_ids')
            data['pending_user_ids'] = self.acknowledgment_service.pending_user_ids(document.id, crew)
            if total_required is None:
                total_required = len(crew)

        if total_required is not None:
            try:
                total_required = int(total_required)
            except ValueError:
                raise ComplianceValidationError(
                    "total_required_crew must be an integer", field='total_required_crew'
                )
            if total_required < 0:
                raise ComplianceValidationError(
                    "total_required_crew cannot be negative", field='total_required_crew'
                )
            data['stats'] = self.acknowledgment_service.stats_for(document.id, total_required)

        return Response(data)

    @action(detail=False, methods=['get'], url_path='pending-acknowledgments')
    def pending_acknowledgments(self, request):
        """Mandatory-read documents the calling user has not acknowledged."""
        vessel_id = request.query_params.get('vessel_id')
        documents = self.acknowledgment_service.pending_documents_for_user(
            self.get_organization_id(),
            self.get_user_id(),
            vessel_id=_parse_uuid(vessel_id, 'vessel_id') if vessel_id else None
        )
        return Response(DocumentSerializer(documents, many=True, context=self.get_serializer_context()).data)

    # ==========================================================================
    # Review Cycle
    # ==========================================================================

    @action(detail=False, methods=['get'], url_path='review-schedule')
    def review_schedule(self, request):
        """Approved documents by next review date, with urgency."""
        today = self.get_today()
        vessel_id = request.query_params.get('vessel_id')
        horizon_days = request.query_params.get('horizon_days')
        if horizon_days is not None:
            try:
                horizon_days = int(horizon_days)
            except ValueError:
                raise ComplianceValidationError("horizon_days must be an integer", field='horizon_days')

        obligations = self.service.review_schedule(
            self.get_organization_id(),
            today,
            vessel_id=_parse_uuid(vessel_id, 'vessel_id') if vessel_id else None,
            horizon_days=horizon_days
        )
        return Response({
            'as_of': today.isoformat(),
            'results': [obligation.to_dict() for obligation in obligations],
        })

    @action(detail=False, methods=['get'], url_path='pending-reviews')
    def pending_reviews(self, request):
        """Documents under review waiting on the calling user."""
        documents = self.service.pending_reviews(self.get_organization_id(), self.get_user_id())
        return Response(DocumentSerializer(documents, many=True, context=self.get_serializer_context()).data)
