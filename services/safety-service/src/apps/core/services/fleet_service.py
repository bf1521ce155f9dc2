# services/safety-service/src/apps/core/services/fleet_service.py
"""
Fleet Compliance Service

Read-only rollup of every obligation kind across the fleet or one vessel.
"""

import uuid
import logging
from collections import Counter
from datetime import date, timedelta
from typing import Optional, Dict, Any, Iterable, List

from django.conf import settings

from .acknowledgment_service import AcknowledgmentService
from .certificate_service import CertificateService
from .document_workflow_service import DocumentWorkflowService
from .drill_service import DrillService
from .recurrence import Obligation, Tier

logger = logging.getLogger(__name__)

# Fleet-wide totals fold both tier scales into three buckets
TOTALS_BUCKET = {
    Tier.OVERDUE: 'overdue',
    Tier.DUE_SOON: 'due_soon',
    Tier.URGENT: 'due_soon',
    Tier.ON_SCHEDULE: 'on_track',
    Tier.WARNING: 'on_track',
    Tier.NORMAL: 'on_track',
}


def compliance_rate(on_time: int, completed: int, currently_due: int) -> float:
    """Share of obligations met on time; 100 when nothing was due."""
    denominator = completed + currently_due
    if denominator == 0:
        return 100.0
    return round(100 * on_time / denominator, 1)


class FleetComplianceService:
    """
    Aggregates drill, document review, certificate and acknowledgment
    compliance. Never writes.
    """

    def __init__(
        self,
        drill_service: DrillService = None,
        document_service: DocumentWorkflowService = None,
        acknowledgment_service: AcknowledgmentService = None,
        certificate_service: CertificateService = None
    ):
        self.drill_service = drill_service or DrillService()
        self.document_service = document_service or DocumentWorkflowService()
        self.acknowledgment_service = acknowledgment_service or AcknowledgmentService()
        self.certificate_service = certificate_service or CertificateService()

    def obligations(
        self,
        organization_id: uuid.UUID,
        today: date,
        vessel_id: Optional[uuid.UUID] = None
    ) -> Dict[str, List[Obligation]]:
        return {
            'drills': self.drill_service.compliance_overview(organization_id, vessel_id, today),
            'document_reviews': self.document_service.review_schedule(
                organization_id, today, vessel_id=vessel_id
            ),
            'certificates': self.certificate_service.obligations(organization_id, today, vessel_id),
        }

    def summary(
        self,
        organization_id: uuid.UUID,
        today: date,
        vessel_id: Optional[uuid.UUID] = None,
        window_days: Optional[int] = None,
        crew_ids: Optional[Iterable] = None
    ) -> Dict[str, Any]:
        window_days = window_days or settings.COMPLIANCE_REPORT_WINDOW_DAYS
        by_kind = self.obligations(organization_id, today, vessel_id)

        tiers: Dict[str, Any] = {}
        totals = Counter({'overdue': 0, 'due_soon': 0, 'on_track': 0})
        nearest_due = {}
        for kind, items in by_kind.items():
            counts = Counter(item.status.tier for item in items)
            tiers[kind] = dict(counts)
            for tier, count in counts.items():
                totals[TOTALS_BUCKET[tier]] += count
            nearest = min(items, key=lambda item: item.days_until_due, default=None)
            nearest_due[kind] = nearest.to_dict() if nearest else None
        tiers['totals'] = dict(totals)

        drill_stats = self.drill_service.completion_stats(
            organization_id, today, window_days, vessel_id
        )
        review_stats = self.document_service.review_completion_stats(
            organization_id, today, window_days, vessel_id
        )
        on_time, completed, currently_due = (a + b for a, b in zip(drill_stats, review_stats))

        result = {
            'organization_id': str(organization_id),
            'vessel_id': str(vessel_id) if vessel_id else None,
            'as_of': today.isoformat(),
            'window': {
                'start': (today - timedelta(days=window_days)).isoformat(),
                'end': today.isoformat(),
                'days': window_days,
            },
            'tiers': tiers,
            'nearest_due': nearest_due,
            'compliance_rate': compliance_rate(on_time, completed, currently_due),
            'compliance_breakdown': {
                'drills': compliance_rate(*drill_stats),
                'document_reviews': compliance_rate(*review_stats),
                'completed_on_time': on_time,
                'completed': completed,
                'currently_due': currently_due,
            },
            'acknowledgments': None,
        }

        if crew_ids is not None:
            result['acknowledgments'] = self.acknowledgment_service.mandatory_stats(
                organization_id, crew_ids, vessel_id
            )

        logger.debug(
            f"Compliance summary for {organization_id}: "
            f"{result['tiers']['totals']} rate {result['compliance_rate']}"
        )
        return result
