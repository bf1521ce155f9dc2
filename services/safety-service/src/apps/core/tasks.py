# services/safety-service/src/apps/core/tasks.py
"""
Safety Service Celery Tasks

Scheduled compliance digests and acknowledgment reminders. The tasks
compute the figures and publish events; delivery is the notification
service's job.
"""

import logging
from typing import List, Optional
from uuid import UUID

from celery import shared_task
from django.db import DatabaseError

logger = logging.getLogger(__name__)


def _organization_ids(organization_id: Optional[str]) -> List[UUID]:
    from .models import Drill, Document

    if organization_id:
        return [UUID(organization_id)]
    ids = set(Drill.objects.order_by().values_list('organization_id', flat=True).distinct())
    ids.update(Document.objects.order_by().values_list('organization_id', flat=True).distinct())
    return sorted(ids, key=str)


@shared_task(bind=True, max_retries=3)
def publish_compliance_digest(self, organization_id: Optional[str] = None):
    """
    Publish each organization's fleet compliance summary.

    Args:
        organization_id: Optional organization filter
    """
    try:
        from .services import FleetComplianceService, compliance_today
        from .events import event_publisher

        service = FleetComplianceService()
        today = compliance_today()
        published = 0

        for org_id in _organization_ids(organization_id):
            summary = service.summary(org_id, today)
            if event_publisher.compliance_digest(org_id, summary):
                published += 1

        logger.info(f"Published {published} compliance digests")
        return {'published': published}

    except DatabaseError as e:
        logger.error(f"Error publishing compliance digest: {e}")
        raise self.retry(countdown=60, exc=e)


@shared_task(bind=True, max_retries=3)
def send_acknowledgment_reminders(
    self,
    organization_id: str,
    crew_ids: List[str],
    vessel_id: Optional[str] = None
):
    """
    Publish a reminder per mandatory-read document listing crew who have
    not acknowledged it.

    Args:
        organization_id: Organization whose documents are checked
        crew_ids: Crew members required to read the documents
        vessel_id: Optional vessel; company-wide documents are included
    """
    try:
        from .models import Document
        from .services import AcknowledgmentService
        from .events import event_publisher

        service = AcknowledgmentService()
        stats = service.mandatory_stats(UUID(organization_id), crew_ids, vessel_id)
        reminders = 0

        for row in stats['documents']:
            if row['pending'] == 0:
                continue
            document = Document.objects.get(id=row['document_id'])
            pending = service.pending_user_ids(document.id, crew_ids)
            if event_publisher.acknowledgment_reminder(document, pending):
                reminders += 1

        logger.info(f"Sent {reminders} acknowledgment reminders for {organization_id}")
        return {'reminders': reminders, 'total_pending': stats['total_pending']}

    except DatabaseError as e:
        logger.error(f"Error sending acknowledgment reminders: {e}")
        raise self.retry(countdown=60, exc=e)
