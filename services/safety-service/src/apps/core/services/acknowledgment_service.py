# services/safety-service/src/apps/core/services/acknowledgment_service.py
"""
Acknowledgment Service

Tracks which crew members confirmed reading a document and how far a
mandatory-read campaign has progressed.
"""

import uuid
import logging
from datetime import datetime
from typing import Optional, Dict, Any, Iterable, List

from django.db import IntegrityError, transaction
from django.db.models import Count, Q

from apps.core.events import event_publisher
from apps.core.models import Document, DocumentAcknowledgment
from .exceptions import DocumentNotFoundError, DuplicateAcknowledgmentError

logger = logging.getLogger(__name__)


def completion_stats(acknowledged: int, total_required: int) -> Dict[str, int]:
    """
    Acknowledged / pending / percent complete for a crew of ``total_required``.

    An empty crew is 0% complete.
    """
    pending = max(total_required - acknowledged, 0)
    percent = round(100 * acknowledged / total_required) if total_required > 0 else 0
    return {
        'acknowledged': acknowledged,
        'pending': pending,
        'percent_complete': percent,
    }


class AcknowledgmentService:
    """
    Service for document acknowledgments.

    At most one acknowledgment exists per (document, user); the database
    constraint holds that under concurrent retries.
    """

    def acknowledge(
        self,
        document_id: uuid.UUID,
        user_id: uuid.UUID,
        acknowledged_at: Optional[datetime] = None,
        ip_address: Optional[str] = None,
        organization_id: uuid.UUID = None
    ) -> DocumentAcknowledgment:
        """
        Record that ``user_id`` has read the document.

        Raises DuplicateAcknowledgmentError carrying the stored row when the
        user already acknowledged it.
        """
        documents = Document.objects.all()
        if organization_id:
            documents = documents.filter(organization_id=organization_id)
        try:
            document = documents.get(id=document_id)
        except Document.DoesNotExist:
            raise DocumentNotFoundError(document_id)

        fields = {
            'organization_id': document.organization_id,
            'document': document,
            'user_id': user_id,
            'ip_address': ip_address,
        }
        if acknowledged_at:
            fields['acknowledged_at'] = acknowledged_at

        try:
            with transaction.atomic():
                acknowledgment = DocumentAcknowledgment.objects.create(**fields)
        except IntegrityError:
            existing = DocumentAcknowledgment.objects.get(document=document, user_id=user_id)
            logger.info(f"User {user_id} already acknowledged {document.document_number}")
            raise DuplicateAcknowledgmentError(existing)

        logger.info(f"User {user_id} acknowledged {document.document_number}")
        transaction.on_commit(lambda: event_publisher.acknowledgment_recorded(acknowledgment))
        return acknowledgment

    def list_for_document(self, document_id: uuid.UUID) -> List[DocumentAcknowledgment]:
        return list(DocumentAcknowledgment.objects.filter(document_id=document_id))

    def stats_for(self, document_id: uuid.UUID, total_required_crew: int) -> Dict[str, int]:
        acknowledged = DocumentAcknowledgment.objects.filter(document_id=document_id).count()
        return completion_stats(acknowledged, total_required_crew)

    def pending_user_ids(self, document_id: uuid.UUID, crew_ids: Iterable) -> List[str]:
        """Crew members who have not acknowledged the document, in input order."""
        acknowledged = {
            str(user_id) for user_id in DocumentAcknowledgment.objects.filter(
                document_id=document_id
            ).values_list('user_id', flat=True)
        }
        return [str(crew_id) for crew_id in crew_ids if str(crew_id) not in acknowledged]

    @staticmethod
    def _mandatory_documents(organization_id: uuid.UUID, vessel_id: Optional[uuid.UUID] = None):
        documents = Document.objects.filter(
            organization_id=organization_id,
            status=Document.Status.APPROVED,
            is_mandatory_read=True,
        )
        if vessel_id:
            documents = documents.filter(Q(vessel_id=vessel_id) | Q(vessel_id__isnull=True))
        return documents

    def mandatory_stats(
        self,
        organization_id: uuid.UUID,
        crew_ids: Iterable,
        vessel_id: Optional[uuid.UUID] = None
    ) -> Dict[str, Any]:
        """
        Completion of every approved mandatory-read document across ``crew_ids``.

        Only acknowledgments by listed crew count towards completion.
        """
        crew = [str(crew_id) for crew_id in crew_ids]
        documents = list(
            self._mandatory_documents(organization_id, vessel_id)
            .filter(acknowledgments__user_id__in=crew)
            .annotate(acknowledged=Count('acknowledgments'))
        )
        counts = {document.id: document.acknowledged for document in documents}

        rows = []
        total_pending = 0
        for document in self._mandatory_documents(organization_id, vessel_id).order_by('document_number'):
            stats = completion_stats(counts.get(document.id, 0), len(crew))
            total_pending += stats['pending']
            rows.append({
                'document_id': str(document.id),
                'document_number': document.document_number,
                'title': document.title,
                **stats,
            })

        return {
            'crew_count': len(crew),
            'documents': rows,
            'total_pending': total_pending,
            'fully_acknowledged': sum(1 for row in rows if row['pending'] == 0),
        }

    def pending_documents_for_user(
        self,
        organization_id: uuid.UUID,
        user_id: uuid.UUID,
        vessel_id: Optional[uuid.UUID] = None
    ) -> List[Document]:
        """Approved mandatory-read documents the user has not acknowledged."""
        return list(
            self._mandatory_documents(organization_id, vessel_id)
            .exclude(acknowledgments__user_id=user_id)
            .order_by('document_number')
        )
