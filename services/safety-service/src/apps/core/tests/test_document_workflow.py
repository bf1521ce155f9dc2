# services/safety-service/src/apps/core/tests/test_document_workflow.py
"""
Tests for DocumentWorkflowService
"""

import uuid
from datetime import date, timedelta
from unittest import mock

import pytest

from apps.core.events import SafetyEventTypes
from apps.core.models import Document, DocumentReview
from apps.core.services import (
    ComplianceValidationError,
    ConcurrentModificationError,
    DocumentNotFoundError,
    DocumentWorkflowService,
    InvalidTransitionError,
    Tier,
)


@pytest.fixture
def service():
    return DocumentWorkflowService()


@pytest.fixture
def reviewer_id():
    return uuid.uuid4()


@pytest.fixture
def approver_id():
    return uuid.uuid4()


@pytest.fixture
def under_review(service, document, reviewer_id, approver_id):
    return service.submit_for_review(document.id, reviewer_id=reviewer_id, approver_id=approver_id)


@pytest.mark.django_db
class TestCreateDocument:

    def test_creates_draft(self, service, org_id, user_id):
        document = service.create_document(org_id, ' ISM-7 ', 'Drug and Alcohol Policy', author_id=user_id)

        assert document.status == Document.Status.DRAFT
        assert document.document_number == 'ISM-7'
        assert document.author_id == user_id
        assert document.version == 1

    def test_duplicate_number_rejected(self, service, org_id, document):
        with pytest.raises(ComplianceValidationError) as exc_info:
            service.create_document(org_id, document.document_number, 'Another')

        assert exc_info.value.details['field'] == 'document_number'

    def test_same_number_in_other_tenant(self, service, document):
        other = service.create_document(uuid.uuid4(), document.document_number, 'Copy')
        assert other.status == Document.Status.DRAFT

    def test_title_required(self, service, org_id):
        with pytest.raises(ComplianceValidationError):
            service.create_document(org_id, 'X-1', '  ')


@pytest.mark.django_db
class TestApprovalWorkflow:

    def test_submit_records_assignment(self, under_review, reviewer_id, approver_id):
        assert under_review.status == Document.Status.UNDER_REVIEW
        assert under_review.reviewer_id == reviewer_id
        assert under_review.approver_id == approver_id

    def test_submit_only_from_draft(self, service, under_review):
        with pytest.raises(InvalidTransitionError):
            service.submit_for_review(under_review.id)

    def test_approve_sets_dates(self, service, under_review, approver_id, today, settings):
        settings.DOCUMENT_REVIEW_INTERVAL_DAYS = 180

        document = service.approve(under_review.id, approver_id, today=today)

        assert document.status == Document.Status.APPROVED
        assert document.approved_by_id == approver_id
        assert document.approved_date == today
        assert document.issue_date == today
        assert document.next_review_date == today + timedelta(days=180)

    def test_approve_keeps_existing_issue_date(self, service, under_review, approver_id, today):
        Document.objects.filter(id=under_review.id).update(issue_date=date(2020, 1, 1))

        document = service.approve(under_review.id, approver_id, today=today)

        assert document.issue_date == date(2020, 1, 1)

    def test_reviewer_forwards_to_approver(self, service, under_review, reviewer_id, approver_id, today):
        document = service.approve(under_review.id, reviewer_id, today=today, comments='Looks fine')

        assert document.status == Document.Status.UNDER_REVIEW
        assert document.reviewer_id is None
        review = DocumentReview.objects.get(document=document)
        assert review.kind == DocumentReview.Kind.FORWARDED
        assert review.comments == 'Looks fine'

        assert service.pending_reviews(document.organization_id, reviewer_id) == []
        assert service.pending_reviews(document.organization_id, approver_id) == [document]

        approved = service.approve(document.id, approver_id, today=today)
        assert approved.status == Document.Status.APPROVED

    def test_reject_with_blank_feedback_keeps_status(self, service, under_review, approver_id):
        with pytest.raises(ComplianceValidationError):
            service.reject(under_review.id, approver_id, '')

        under_review.refresh_from_db()
        assert under_review.status == Document.Status.UNDER_REVIEW
        assert not DocumentReview.objects.exists()

    def test_reject_returns_to_draft_with_feedback(self, service, under_review, approver_id, today):
        document = service.reject(under_review.id, approver_id, ' Update section 4 ', today=today)

        assert document.status == Document.Status.DRAFT
        assert document.reviewer_id is None
        assert document.approver_id is None
        review = DocumentReview.objects.get(document=document)
        assert review.kind == DocumentReview.Kind.REJECTION
        assert review.comments == 'Update section 4'
        assert review.reviewer_id == approver_id

    def test_reject_draft_is_invalid(self, service, document, approver_id):
        with pytest.raises(InvalidTransitionError):
            service.reject(document.id, approver_id, 'No')

    def test_stale_write_conflicts(self, service, under_review, approver_id, today):
        stale = Document.objects.get(id=under_review.id)
        service.reject(under_review.id, approver_id, 'Rework', today=today)

        with pytest.raises(ConcurrentModificationError):
            service._write(stale, status=Document.Status.APPROVED)

    def test_events_published_on_commit(
        self, service, under_review, approver_id, today, django_capture_on_commit_callbacks
    ):
        with mock.patch('apps.core.services.document_workflow_service.event_publisher') as publisher:
            with django_capture_on_commit_callbacks(execute=True):
                service.approve(under_review.id, approver_id, today=today)

        args = publisher.document_status_changed.call_args[0]
        assert args[1] == SafetyEventTypes.DOCUMENT_APPROVED
        assert args[2] == approver_id

    def test_not_found(self, service):
        with pytest.raises(DocumentNotFoundError):
            service.submit_for_review(uuid.uuid4())


@pytest.mark.django_db
class TestObsolete:

    @pytest.mark.parametrize('status', [
        Document.Status.DRAFT,
        Document.Status.UNDER_REVIEW,
        Document.Status.APPROVED,
    ])
    def test_reachable_from_any_live_state(self, service, document, status):
        Document.objects.filter(id=document.id).update(status=status)

        obsolete = service.obsolete(document.id)

        assert obsolete.status == Document.Status.OBSOLETE
        assert obsolete.is_obsolete

    def test_obsolete_is_final(self, service, document, today):
        service.obsolete(document.id)

        with pytest.raises(InvalidTransitionError):
            service.obsolete(document.id)
        with pytest.raises(InvalidTransitionError):
            service.submit_for_review(document.id)
        with pytest.raises(InvalidTransitionError):
            service.mark_reviewed(document.id, today + timedelta(days=30), today=today)

        document.refresh_from_db()
        assert document.status == Document.Status.OBSOLETE


@pytest.mark.django_db
class TestReviewCycle:

    def test_mark_reviewed(self, service, approved_document, user_id, today):
        old_due = approved_document.next_review_date
        new_date = today + timedelta(days=400)

        document = service.mark_reviewed(
            approved_document.id, new_date, comments='No changes', reviewer_id=user_id, today=today
        )

        assert document.next_review_date == new_date
        assert document.status == Document.Status.APPROVED
        review = DocumentReview.objects.get(document=document)
        assert review.kind == DocumentReview.Kind.PERIODIC_REVIEW
        assert review.due_date == old_due
        assert review.on_time

    def test_mark_reviewed_requires_approved(self, service, document, today):
        with pytest.raises(InvalidTransitionError):
            service.mark_reviewed(document.id, today + timedelta(days=30), today=today)

    def test_next_review_must_be_future(self, service, approved_document, today):
        with pytest.raises(ComplianceValidationError):
            service.mark_reviewed(approved_document.id, today, today=today)

    @pytest.mark.parametrize('offset, urgency', [
        (-3, Tier.OVERDUE),
        (15, Tier.URGENT),
        (45, Tier.WARNING),
        (120, Tier.NORMAL),
    ])
    def test_review_urgency(self, service, approved_document, today, offset, urgency):
        approved_document.next_review_date = today + timedelta(days=offset)
        assert service.review_urgency(approved_document, today) == urgency

    def test_no_review_date_has_no_urgency(self, service, document, today):
        assert service.review_urgency(document, today) is None

    def test_review_schedule_orders_by_due_date(self, service, org_id, vessel_id, today):
        for number, offset, vessel in [('A', 100, None), ('B', 10, vessel_id), ('C', 50, uuid.uuid4())]:
            Document.objects.create(
                organization_id=org_id,
                document_number=number,
                title=number,
                status=Document.Status.APPROVED,
                vessel_id=vessel,
                next_review_date=today + timedelta(days=offset),
            )
        Document.objects.create(
            organization_id=org_id, document_number='D', title='Draft', next_review_date=today,
        )

        fleet = service.review_schedule(org_id, today)
        assert [o.extra['document_number'] for o in fleet] == ['B', 'C', 'A']
        assert [o.status.tier for o in fleet] == [Tier.URGENT, Tier.WARNING, Tier.NORMAL]

        vessel = service.review_schedule(org_id, today, vessel_id=vessel_id)
        assert [o.extra['document_number'] for o in vessel] == ['B', 'A']

        soon = service.review_schedule(org_id, today, horizon_days=60)
        assert [o.extra['document_number'] for o in soon] == ['B', 'C']

    def test_review_completion_stats(self, service, approved_document, org_id, today):
        late = Document.objects.create(
            organization_id=org_id,
            document_number='LATE',
            title='Late review',
            status=Document.Status.APPROVED,
            next_review_date=today - timedelta(days=10),
        )
        Document.objects.create(
            organization_id=org_id,
            document_number='OVERDUE',
            title='Still overdue',
            status=Document.Status.APPROVED,
            next_review_date=today - timedelta(days=1),
        )

        service.mark_reviewed(late.id, today + timedelta(days=365), today=today)
        service.mark_reviewed(
            approved_document.id, today + timedelta(days=400), today=today
        )

        assert service.review_completion_stats(org_id, today, 365) == (1, 2, 1)

    def test_vessel_stats_include_company_wide_documents(self, service, org_id, vessel_id, today):
        Document.objects.create(
            organization_id=org_id,
            document_number='FLEET-1',
            title='Company-wide procedure',
            status=Document.Status.APPROVED,
            next_review_date=today - timedelta(days=3),
        )
        reviewed = Document.objects.create(
            organization_id=org_id,
            document_number='FLEET-2',
            title='Company-wide plan',
            status=Document.Status.APPROVED,
            next_review_date=today - timedelta(days=1),
        )
        service.mark_reviewed(reviewed.id, today + timedelta(days=365), today=today)

        stats = service.review_completion_stats(org_id, today, 365, vessel_id=vessel_id)
        schedule = service.review_schedule(org_id, today, vessel_id=vessel_id)

        assert stats == (0, 1, 1)
        assert [o.status.tier for o in schedule].count(Tier.OVERDUE) == stats[2]


@pytest.mark.django_db
class TestUpdateDetails:

    def test_updates_descriptive_fields(self, service, document):
        updated = service.update_details(document.id, title='Safety Management Manual rev B', revision='B')

        assert updated.title == 'Safety Management Manual rev B'
        assert updated.version == 2
        document.refresh_from_db()
        assert document.revision == 'B'
        assert document.status == Document.Status.DRAFT

    def test_workflow_fields_rejected(self, service, document):
        with pytest.raises(ComplianceValidationError):
            service.update_details(document.id, status=Document.Status.APPROVED)

    def test_blank_title_rejected(self, service, document):
        with pytest.raises(ComplianceValidationError):
            service.update_details(document.id, title=' ')

    def test_obsolete_not_editable(self, service, document):
        service.obsolete(document.id)

        with pytest.raises(ComplianceValidationError):
            service.update_details(document.id, title='New')

    def test_edit_does_not_revert_concurrent_approval(self, service, under_review, approver_id, today):
        stale = Document.objects.get(id=under_review.id)
        service.approve(under_review.id, approver_id, today=today)

        with mock.patch.object(service, 'get_document', return_value=stale):
            with pytest.raises(ConcurrentModificationError):
                service.update_details(under_review.id, title='Edited from a stale read')

        current = Document.objects.get(id=under_review.id)
        assert current.status == Document.Status.APPROVED
        assert current.title == under_review.title
        assert current.version == under_review.version + 1
