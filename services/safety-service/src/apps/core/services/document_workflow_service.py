# services/safety-service/src/apps/core/services/document_workflow_service.py
"""
Document Workflow Service

Approval workflow and periodic review cycle of controlled documents.
"""

import uuid
import logging
from datetime import date, timedelta
from typing import Optional, List, Tuple

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F, Q

from apps.core.events import SafetyEventTypes, event_publisher
from apps.core.models import Document, DocumentReview
from .exceptions import (
    ComplianceValidationError,
    ConcurrentModificationError,
    DocumentNotFoundError,
    InvalidTransitionError,
)
from .recurrence import REVIEW_SCALE, Obligation, RecurrenceStatus, classify_anchor, compliance_today

logger = logging.getLogger(__name__)


class DocumentWorkflowService:
    """
    Service for controlled documents.

    Status flow: draft -> under_review -> approved, with rejection back
    to draft. Any non-obsolete document can be made obsolete; obsolete is
    final.
    """

    DETAIL_FIELDS = ('title', 'description', 'revision', 'category', 'vessel_id', 'is_mandatory_read')

    def get_document(self, document_id: uuid.UUID, organization_id: uuid.UUID = None) -> Document:
        queryset = Document.objects.all()
        if organization_id:
            queryset = queryset.filter(organization_id=organization_id)
        try:
            return queryset.get(id=document_id)
        except Document.DoesNotExist:
            raise DocumentNotFoundError(document_id)

    @transaction.atomic
    def create_document(
        self,
        organization_id: uuid.UUID,
        document_number: str,
        title: str,
        author_id: Optional[uuid.UUID] = None,
        **kwargs
    ) -> Document:
        """Create a draft document. Numbers are unique per organization."""
        if not document_number or not document_number.strip():
            raise ComplianceValidationError("Document number is required", field='document_number')
        if not title or not title.strip():
            raise ComplianceValidationError("Title is required", field='title')

        document_number = document_number.strip()
        duplicate = ComplianceValidationError(
            f"Document number {document_number} already exists", field='document_number'
        )
        if Document.objects.filter(
            organization_id=organization_id, document_number=document_number
        ).exists():
            raise duplicate

        try:
            with transaction.atomic():
                document = Document.objects.create(
                    organization_id=organization_id,
                    document_number=document_number,
                    title=title.strip(),
                    author_id=author_id,
                    status=Document.Status.DRAFT,
                    **kwargs
                )
        except IntegrityError:
            raise duplicate

        logger.info(f"Created document {document.document_number}")
        return document

    # ==========================================================================
    # Transitions
    # ==========================================================================

    def _transition(
        self,
        document: Document,
        allowed_from: Tuple[str, ...],
        target: str,
        **changes
    ) -> Document:
        if document.status not in allowed_from:
            logger.warning(
                f"Rejected document transition {document.document_number}: "
                f"{document.status} -> {target}"
            )
            raise InvalidTransitionError(document.status, target)

        self._write(document, **{'status': target, **changes})
        return document

    def _write(self, document: Document, **changes) -> None:
        """Conditional update against the status and version that were read."""
        if not document.compare_and_set(expected={'status': document.status}, **changes):
            logger.warning(f"Concurrent modification of document {document.document_number}")
            raise ConcurrentModificationError('Document', document.id)

    def _publish(self, document: Document, event_type: str, actor_id=None, comments: str = None):
        transaction.on_commit(
            lambda: event_publisher.document_status_changed(document, event_type, actor_id, comments)
        )

    @transaction.atomic
    def submit_for_review(
        self,
        document_id: uuid.UUID,
        reviewer_id: Optional[uuid.UUID] = None,
        approver_id: Optional[uuid.UUID] = None,
        organization_id: uuid.UUID = None
    ) -> Document:
        document = self.get_document(document_id, organization_id)
        self._transition(
            document,
            (Document.Status.DRAFT,),
            Document.Status.UNDER_REVIEW,
            reviewer_id=reviewer_id,
            approver_id=approver_id,
        )
        logger.info(f"Document {document.document_number} submitted for review")
        self._publish(document, SafetyEventTypes.DOCUMENT_SUBMITTED)
        return document

    @transaction.atomic
    def approve(
        self,
        document_id: uuid.UUID,
        approver_id: uuid.UUID,
        today: date = None,
        comments: str = '',
        organization_id: uuid.UUID = None
    ) -> Document:
        """
        Approve a document under review.

        When the assigned reviewer approves and a different approver is
        assigned, the document is forwarded: it stays under review and the
        approver becomes the only pending reviewer.
        """
        today = today or compliance_today()
        document = self.get_document(document_id, organization_id)
        if document.status != Document.Status.UNDER_REVIEW:
            raise InvalidTransitionError(document.status, Document.Status.APPROVED)

        actor = str(approver_id) if approver_id else None
        reviewer = str(document.reviewer_id) if document.reviewer_id else None
        approver = str(document.approver_id) if document.approver_id else None

        if actor and actor == reviewer and approver and approver != actor:
            self._write(document, reviewer_id=None)
            DocumentReview.objects.create(
                organization_id=document.organization_id,
                document=document,
                kind=DocumentReview.Kind.FORWARDED,
                reviewer_id=approver_id,
                comments=comments or '',
                review_date=today,
            )
            logger.info(f"Document {document.document_number} forwarded to approver {approver}")
            self._publish(document, SafetyEventTypes.DOCUMENT_FORWARDED, approver_id, comments)
            return document

        self._transition(
            document,
            (Document.Status.UNDER_REVIEW,),
            Document.Status.APPROVED,
            approved_by_id=approver_id,
            approved_date=today,
            issue_date=document.issue_date or today,
            next_review_date=today + timedelta(days=settings.DOCUMENT_REVIEW_INTERVAL_DAYS),
        )
        logger.info(f"Document {document.document_number} approved, next review {document.next_review_date}")
        self._publish(document, SafetyEventTypes.DOCUMENT_APPROVED, approver_id, comments)
        return document

    @transaction.atomic
    def reject(
        self,
        document_id: uuid.UUID,
        approver_id: uuid.UUID,
        feedback: str,
        today: date = None,
        organization_id: uuid.UUID = None
    ) -> Document:
        """Send a document back to draft with mandatory feedback for the author."""
        if not feedback or not feedback.strip():
            raise ComplianceValidationError("Rejection feedback is required", field='feedback')

        document = self.get_document(document_id, organization_id)
        self._transition(
            document,
            (Document.Status.UNDER_REVIEW,),
            Document.Status.DRAFT,
            reviewer_id=None,
            approver_id=None,
        )
        DocumentReview.objects.create(
            organization_id=document.organization_id,
            document=document,
            kind=DocumentReview.Kind.REJECTION,
            reviewer_id=approver_id,
            comments=feedback.strip(),
            review_date=today or compliance_today(),
        )
        logger.info(f"Document {document.document_number} rejected back to draft")
        self._publish(document, SafetyEventTypes.DOCUMENT_REJECTED, approver_id, feedback.strip())
        return document

    @transaction.atomic
    def mark_reviewed(
        self,
        document_id: uuid.UUID,
        next_review_date: date,
        comments: str = '',
        reviewer_id: Optional[uuid.UUID] = None,
        today: date = None,
        organization_id: uuid.UUID = None
    ) -> Document:
        """Record a periodic review of an approved document."""
        today = today or compliance_today()
        if not next_review_date:
            raise ComplianceValidationError("Next review date is required", field='next_review_date')
        if next_review_date <= today:
            raise ComplianceValidationError(
                "Next review date must be in the future", field='next_review_date'
            )

        document = self.get_document(document_id, organization_id)
        due_date = document.next_review_date
        self._transition(
            document,
            (Document.Status.APPROVED,),
            Document.Status.APPROVED,
            next_review_date=next_review_date,
        )
        DocumentReview.objects.create(
            organization_id=document.organization_id,
            document=document,
            kind=DocumentReview.Kind.PERIODIC_REVIEW,
            reviewer_id=reviewer_id,
            comments=comments or '',
            review_date=today,
            due_date=due_date,
            next_review_date=next_review_date,
        )
        logger.info(f"Document {document.document_number} reviewed, next review {next_review_date}")
        self._publish(document, SafetyEventTypes.DOCUMENT_REVIEWED, reviewer_id, comments)
        return document

    @transaction.atomic
    def update_details(
        self,
        document_id: uuid.UUID,
        organization_id: uuid.UUID = None,
        **fields
    ) -> Document:
        """
        Edit descriptive fields. Workflow columns are never written here,
        so an edit cannot undo a concurrent approval or rejection.
        """
        unknown = set(fields) - set(self.DETAIL_FIELDS)
        if unknown:
            raise ComplianceValidationError(
                f"Cannot edit {', '.join(sorted(unknown))}", field=sorted(unknown)[0]
            )

        document = self.get_document(document_id, organization_id)
        if document.is_obsolete:
            raise ComplianceValidationError("Obsolete documents cannot be edited", field='status')
        if 'title' in fields and not (fields['title'] or '').strip():
            raise ComplianceValidationError("Title is required", field='title')

        if fields:
            self._write(document, **fields)
            logger.info(f"Updated {', '.join(sorted(fields))} of document {document.document_number}")
        return document

    @transaction.atomic
    def obsolete(self, document_id: uuid.UUID, organization_id: uuid.UUID = None) -> Document:
        document = self.get_document(document_id, organization_id)
        self._transition(
            document,
            (Document.Status.DRAFT, Document.Status.UNDER_REVIEW, Document.Status.APPROVED),
            Document.Status.OBSOLETE,
        )
        logger.info(f"Document {document.document_number} made obsolete")
        self._publish(document, SafetyEventTypes.DOCUMENT_OBSOLETED)
        return document

    # ==========================================================================
    # Review cycle
    # ==========================================================================

    @staticmethod
    def review_status(document: Document, today: date) -> Optional[RecurrenceStatus]:
        return classify_anchor(document.next_review_date, today, REVIEW_SCALE)

    def review_urgency(self, document: Document, today: date) -> Optional[str]:
        """overdue / urgent / warning / normal, or None without a review date."""
        status = self.review_status(document, today)
        return status.tier if status else None

    def review_schedule(
        self,
        organization_id: uuid.UUID,
        today: date,
        vessel_id: Optional[uuid.UUID] = None,
        horizon_days: Optional[int] = None
    ) -> List[Obligation]:
        """
        Approved documents with a review date, soonest first.

        A vessel view includes company-wide documents.
        """
        documents = Document.objects.filter(
            organization_id=organization_id,
            status=Document.Status.APPROVED,
            next_review_date__isnull=False,
        )
        if vessel_id:
            documents = documents.filter(Q(vessel_id=vessel_id) | Q(vessel_id__isnull=True))
        if horizon_days is not None:
            documents = documents.filter(next_review_date__lte=today + timedelta(days=horizon_days))

        return [
            Obligation(
                kind='document_reviews',
                reference_id=document.id,
                label=f"{document.document_number} {document.title}",
                vessel_id=document.vessel_id,
                status=self.review_status(document, today),
                extra={'document_number': document.document_number},
            )
            for document in documents.order_by('next_review_date', 'document_number')
        ]

    def pending_reviews(self, organization_id: uuid.UUID, user_id: uuid.UUID) -> List[Document]:
        """Documents under review waiting on this user."""
        return list(
            Document.objects.filter(
                organization_id=organization_id,
                status=Document.Status.UNDER_REVIEW,
            ).filter(
                Q(reviewer_id=user_id) | Q(approver_id=user_id)
            ).order_by('created_at')
        )

    def review_completion_stats(
        self,
        organization_id: uuid.UUID,
        today: date,
        window_days: int,
        vessel_id: Optional[uuid.UUID] = None
    ) -> Tuple[int, int, int]:
        """(reviews on time, reviews done, reviews currently overdue) in the window."""
        window_start = today - timedelta(days=window_days)
        reviews = DocumentReview.objects.filter(
            organization_id=organization_id,
            kind=DocumentReview.Kind.PERIODIC_REVIEW,
            review_date__gte=window_start,
            review_date__lte=today,
        )
        overdue = Document.objects.filter(
            organization_id=organization_id,
            status=Document.Status.APPROVED,
            next_review_date__lt=today,
        )
        if vessel_id:
            reviews = reviews.filter(
                Q(document__vessel_id=vessel_id) | Q(document__vessel_id__isnull=True)
            )
            overdue = overdue.filter(Q(vessel_id=vessel_id) | Q(vessel_id__isnull=True))

        on_time = reviews.filter(
            Q(due_date__isnull=True) | Q(review_date__lte=F('due_date'))
        ).count()
        return on_time, reviews.count(), overdue.count()
