# services/safety-service/src/apps/core/events.py
"""
Safety Service Events

Event definitions for inter-service communication. The notification
service subscribes to these channels and handles delivery.
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Any, Iterable, Optional
from uuid import UUID

import redis
from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)


class SafetyEncoder(json.JSONEncoder):
    """JSON encoder for UUID, date and Decimal values."""

    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return super().default(obj)


class SafetyEventTypes:
    """Event type constants for safety service."""

    # Drill Events
    DRILL_SCHEDULED = 'safety.drill.scheduled'
    DRILL_STARTED = 'safety.drill.started'
    DRILL_COMPLETED = 'safety.drill.completed'
    DRILL_CANCELLED = 'safety.drill.cancelled'
    DRILL_POSTPONED = 'safety.drill.postponed'
    CORRECTIVE_ACTION_RAISED = 'safety.drill.corrective_action_raised'

    # Document Events
    DOCUMENT_SUBMITTED = 'safety.document.submitted'
    DOCUMENT_FORWARDED = 'safety.document.forwarded'
    DOCUMENT_APPROVED = 'safety.document.approved'
    DOCUMENT_REJECTED = 'safety.document.rejected'
    DOCUMENT_REVIEWED = 'safety.document.reviewed'
    DOCUMENT_OBSOLETED = 'safety.document.obsoleted'

    # Acknowledgment Events
    ACKNOWLEDGMENT_RECORDED = 'safety.acknowledgment.recorded'
    ACKNOWLEDGMENT_REMINDER = 'safety.acknowledgment.reminder'

    # Compliance Events
    COMPLIANCE_DIGEST = 'safety.compliance.digest'


class SafetyEventPublisher:
    """
    Publisher for safety service events.

    Events go to Redis pub/sub when SAFETY_EVENT_BROKER_URL is configured;
    otherwise they are only logged.
    """

    def __init__(self, broker_url: str = None):
        self.broker_url = broker_url
        self._connection = None

    def _get_connection(self) -> Optional[redis.Redis]:
        """Get or create broker connection."""
        url = self.broker_url or getattr(settings, 'SAFETY_EVENT_BROKER_URL', None)
        if url and self._connection is None:
            self._connection = redis.Redis.from_url(url)
        return self._connection

    def _serialize_event(self, event_type: str, data: Dict[str, Any]) -> str:
        """Serialize event to JSON."""
        event = {
            'event_type': event_type,
            'timestamp': timezone.now().isoformat(),
            'service': 'safety-service',
            'data': data,
        }
        return json.dumps(event, cls=SafetyEncoder)

    def publish(self, event_type: str, data: Dict[str, Any]) -> bool:
        """Publish an event to the message broker."""
        try:
            message = self._serialize_event(event_type, data)
            logger.info(f"Publishing event: {event_type}")
            logger.debug(f"Event data: {message}")

            connection = self._get_connection()
            if connection is not None:
                connection.publish(event_type, message)
            return True
        except (redis.RedisError, TypeError, ValueError) as e:
            logger.error(f"Failed to publish event {event_type}: {e}")
            return False

    # ==========================================================================
    # Drill Events
    # ==========================================================================

    def drill_scheduled(self, drill) -> bool:
        return self.publish(SafetyEventTypes.DRILL_SCHEDULED, {
            'drill_id': drill.id,
            'drill_number': drill.drill_number,
            'organization_id': drill.organization_id,
            'vessel_id': drill.vessel_id,
            'drill_type': drill.drill_type.name,
            'scheduled_date': drill.drill_date_scheduled,
        })

    def drill_status_changed(self, drill, old_status: str) -> bool:
        """Publish the event matching the drill's new status."""
        event_map = {
            'in_progress': SafetyEventTypes.DRILL_STARTED,
            'completed': SafetyEventTypes.DRILL_COMPLETED,
            'cancelled': SafetyEventTypes.DRILL_CANCELLED,
            'postponed': SafetyEventTypes.DRILL_POSTPONED,
        }
        event_type = event_map.get(drill.status)
        if event_type is None:
            return False

        return self.publish(event_type, {
            'drill_id': drill.id,
            'drill_number': drill.drill_number,
            'organization_id': drill.organization_id,
            'vessel_id': drill.vessel_id,
            'old_status': old_status,
            'new_status': drill.status,
            'actual_date': drill.drill_date_actual,
            'overall_rating': drill.overall_rating,
        })

    def corrective_action_raised(self, action, deficiency) -> bool:
        return self.publish(SafetyEventTypes.CORRECTIVE_ACTION_RAISED, {
            'action_id': action.id,
            'action_number': action.action_number,
            'organization_id': action.organization_id,
            'drill_id': deficiency.drill_id,
            'severity': deficiency.severity,
            'due_date': action.due_date,
        })

    # ==========================================================================
    # Document Events
    # ==========================================================================

    def document_status_changed(
        self,
        document,
        event_type: str,
        actor_id: Optional[UUID] = None,
        comments: str = None
    ) -> bool:
        return self.publish(event_type, {
            'document_id': document.id,
            'document_number': document.document_number,
            'organization_id': document.organization_id,
            'status': document.status,
            'author_id': document.author_id,
            'reviewer_id': document.reviewer_id,
            'approver_id': document.approver_id,
            'actor_id': actor_id,
            'next_review_date': document.next_review_date,
            'comments': comments,
        })

    # ==========================================================================
    # Acknowledgment Events
    # ==========================================================================

    def acknowledgment_recorded(self, acknowledgment) -> bool:
        return self.publish(SafetyEventTypes.ACKNOWLEDGMENT_RECORDED, {
            'acknowledgment_id': acknowledgment.id,
            'document_id': acknowledgment.document_id,
            'organization_id': acknowledgment.organization_id,
            'user_id': acknowledgment.user_id,
            'acknowledged_at': acknowledgment.acknowledged_at,
        })

    def acknowledgment_reminder(self, document, pending_user_ids: Iterable) -> bool:
        return self.publish(SafetyEventTypes.ACKNOWLEDGMENT_REMINDER, {
            'document_id': document.id,
            'document_number': document.document_number,
            'organization_id': document.organization_id,
            'pending_user_ids': list(pending_user_ids),
        })

    # ==========================================================================
    # Compliance Events
    # ==========================================================================

    def compliance_digest(self, organization_id: UUID, summary: Dict[str, Any]) -> bool:
        return self.publish(SafetyEventTypes.COMPLIANCE_DIGEST, {
            'organization_id': organization_id,
            'summary': summary,
        })


# Singleton instance
event_publisher = SafetyEventPublisher()
