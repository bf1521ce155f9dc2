# services/safety-service/src/apps/core/services/drill_service.py
"""
Drill Service

Drill scheduling, lifecycle transitions, outcome recording and drill
compliance per vessel and drill type.
"""

import uuid
import logging
from datetime import date, timedelta
from typing import Optional, Dict, Any, List, Tuple

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F, Max, Q
from django.db.models.functions import Coalesce

from apps.core.events import event_publisher
from apps.core.models import (
    CorrectiveAction,
    Drill,
    DrillDeficiency,
    DrillEquipmentCheck,
    DrillEvaluation,
    DrillNumberSequence,
    DrillParticipant,
    DrillType,
)
from .exceptions import (
    ComplianceValidationError,
    ConcurrentModificationError,
    DrillNotFoundError,
    DrillTypeNotFoundError,
    InvalidTransitionError,
)
from .recurrence import Obligation, RecurrenceStatus, calculate_recurrence, compliance_today

logger = logging.getLogger(__name__)

MAX_NUMBER_ATTEMPTS = 5


class DrillService:
    """
    Service for managing drills.

    Handles:
    - Scheduling with per-tenant drill numbers
    - Status transitions (start, complete, cancel, postpone)
    - Outcome sub-records and corrective actions
    - Drill compliance per vessel and drill type
    """

    # ==========================================================================
    # Lookup
    # ==========================================================================

    def get_drill(self, drill_id: uuid.UUID, organization_id: uuid.UUID = None) -> Drill:
        queryset = Drill.objects.select_related('drill_type')
        if organization_id:
            queryset = queryset.filter(organization_id=organization_id)
        try:
            return queryset.get(id=drill_id)
        except Drill.DoesNotExist:
            raise DrillNotFoundError(drill_id)

    def get_drill_type(self, drill_type_id: uuid.UUID, organization_id: uuid.UUID) -> DrillType:
        try:
            return DrillType.objects.get(id=drill_type_id, organization_id=organization_id)
        except DrillType.DoesNotExist:
            raise DrillTypeNotFoundError(drill_type_id)

    # ==========================================================================
    # Scheduling
    # ==========================================================================

    @transaction.atomic
    def schedule(
        self,
        organization_id: uuid.UUID,
        vessel_id: uuid.UUID,
        drill_type_id: uuid.UUID,
        scheduled_date: date,
        scenario_description: str = '',
        objectives: Optional[List[str]] = None,
        today: Optional[date] = None,
        **kwargs
    ) -> Drill:
        """
        Schedule a drill and allocate its drill number.

        When no objectives are given the drill type's defaults are used.
        The equipment checklist is pre-filled from the drill type's default
        equipment, marked unused until the drill is completed.
        """
        if not vessel_id:
            raise ComplianceValidationError("Vessel is required", field='vessel_id')
        if not scheduled_date:
            raise ComplianceValidationError("Scheduled date is required", field='drill_date_scheduled')

        drill_type = self.get_drill_type(drill_type_id, organization_id)
        if not drill_type.is_active:
            raise ComplianceValidationError(
                f"Drill type {drill_type.name} is inactive", field='drill_type_id'
            )

        year = (today or compliance_today()).year
        if objectives is None:
            objectives = drill_type.get_default_objectives()

        for attempt in range(1, MAX_NUMBER_ATTEMPTS + 1):
            sequence = self._next_sequence_value(organization_id)
            drill_number = f"DRILL-{year}-{sequence:03d}"
            try:
                with transaction.atomic():
                    drill = Drill.objects.create(
                        organization_id=organization_id,
                        vessel_id=vessel_id,
                        drill_type=drill_type,
                        drill_number=drill_number,
                        drill_date_scheduled=scheduled_date,
                        scenario_description=scenario_description or '',
                        objectives=list(objectives),
                        status=Drill.Status.SCHEDULED,
                        **kwargs
                    )
                break
            except IntegrityError:
                logger.warning(
                    f"Drill number {drill_number} already taken "
                    f"(attempt {attempt}/{MAX_NUMBER_ATTEMPTS})"
                )
        else:
            raise ConcurrentModificationError('DrillNumberSequence', organization_id)

        DrillEquipmentCheck.objects.bulk_create([
            DrillEquipmentCheck(drill=drill, equipment_name=name, used=False)
            for name in drill_type.get_default_equipment()
        ])

        logger.info(f"Scheduled drill {drill.drill_number} for vessel {vessel_id}")
        transaction.on_commit(lambda: event_publisher.drill_scheduled(drill))
        return drill

    def _next_sequence_value(self, organization_id: uuid.UUID) -> int:
        """Atomically increment and return the tenant's drill counter."""
        DrillNumberSequence.objects.get_or_create(
            organization_id=organization_id,
            defaults={
                'last_value': Drill.objects.filter(organization_id=organization_id).count(),
            },
        )
        DrillNumberSequence.objects.filter(organization_id=organization_id).update(
            last_value=F('last_value') + 1
        )
        return DrillNumberSequence.objects.values_list('last_value', flat=True).get(
            organization_id=organization_id
        )

    # ==========================================================================
    # Transitions
    # ==========================================================================

    def _transition(self, drill: Drill, target: str, **changes) -> Drill:
        """
        Move a drill to ``target`` with a conditional update on the status
        and version that were read.
        """
        if not drill.can_transition_to(target):
            logger.warning(
                f"Rejected drill transition {drill.drill_number}: {drill.status} -> {target}"
            )
            raise InvalidTransitionError(drill.status, target)

        old_status = drill.status
        if not drill.compare_and_set(expected={'status': old_status}, status=target, **changes):
            logger.warning(f"Concurrent modification of drill {drill.drill_number}")
            raise ConcurrentModificationError('Drill', drill.id)

        logger.info(f"Drill {drill.drill_number}: {old_status} -> {target}")
        transaction.on_commit(lambda: event_publisher.drill_status_changed(drill, old_status))
        return drill

    @transaction.atomic
    def start(self, drill_id: uuid.UUID, organization_id: uuid.UUID = None) -> Drill:
        drill = self.get_drill(drill_id, organization_id)
        return self._transition(drill, Drill.Status.IN_PROGRESS)

    @transaction.atomic
    def cancel(self, drill_id: uuid.UUID, reason: str, organization_id: uuid.UUID = None) -> Drill:
        if not reason or not reason.strip():
            raise ComplianceValidationError("Cancellation reason is required", field='reason')
        drill = self.get_drill(drill_id, organization_id)
        return self._transition(drill, Drill.Status.CANCELLED, cancellation_reason=reason.strip())

    @transaction.atomic
    def postpone(self, drill_id: uuid.UUID, reason: str, organization_id: uuid.UUID = None) -> Drill:
        if not reason or not reason.strip():
            raise ComplianceValidationError("Postponement reason is required", field='reason')
        drill = self.get_drill(drill_id, organization_id)
        return self._transition(drill, Drill.Status.POSTPONED, postponement_reason=reason.strip())

    @transaction.atomic
    def complete(
        self,
        drill_id: uuid.UUID,
        actual_date: date,
        overall_rating: int,
        duration_minutes: Optional[int] = None,
        lessons_learned_positive: str = None,
        lessons_learned_improvement: str = None,
        recommendations: str = None,
        weather_conditions: str = None,
        participants: Optional[List[Dict[str, Any]]] = None,
        evaluations: Optional[List[Dict[str, Any]]] = None,
        equipment_checks: Optional[List[Dict[str, Any]]] = None,
        deficiencies: Optional[List[Dict[str, Any]]] = None,
        completed_by_id: Optional[uuid.UUID] = None,
        organization_id: uuid.UUID = None,
    ) -> Drill:
        """
        Record a drill's outcome.

        The status change and every sub-record are written in one
        transaction. Sub-records replace any rows stored earlier; when
        equipment_checks is omitted the scheduled checklist is kept.
        Critical and serious deficiencies open a corrective action due
        CORRECTIVE_ACTION_DUE_DAYS after the drill.
        """
        if not actual_date:
            raise ComplianceValidationError("Actual drill date is required", field='actual_date')
        if overall_rating is None or not 1 <= int(overall_rating) <= 5:
            raise ComplianceValidationError("Overall rating must be between 1 and 5", field='overall_rating')

        user_ids = [str(row['user_id']) for row in participants or []]
        duplicates = sorted({u for u in user_ids if user_ids.count(u) > 1})
        if duplicates:
            raise ComplianceValidationError(
                "Each participant may be listed once",
                field='participants',
                details={'duplicate_user_ids': duplicates}
            )

        drill = self.get_drill(drill_id, organization_id)
        changes = {
            'drill_date_actual': actual_date,
            'overall_rating': int(overall_rating),
            'drill_duration_minutes': duration_minutes,
            'lessons_learned_positive': lessons_learned_positive,
            'lessons_learned_improvement': lessons_learned_improvement,
            'recommendations': recommendations,
        }
        if completed_by_id:
            changes['conducted_by_id'] = completed_by_id
        if weather_conditions:
            changes['weather_conditions'] = weather_conditions

        self._transition(drill, Drill.Status.COMPLETED, **changes)

        self._replace_participants(drill, participants or [])
        self._replace_evaluations(drill, evaluations or [], completed_by_id)
        if equipment_checks is not None:
            self._replace_equipment_checks(drill, equipment_checks)
        self._replace_deficiencies(drill, deficiencies or [], completed_by_id)

        return drill

    # ==========================================================================
    # Sub-records
    # ==========================================================================

    def _replace_participants(self, drill: Drill, rows: List[Dict[str, Any]]) -> None:
        drill.participants.all().delete()
        DrillParticipant.objects.bulk_create([
            DrillParticipant(drill=drill, **row) for row in rows
        ])

    def _replace_evaluations(
        self,
        drill: Drill,
        rows: List[Dict[str, Any]],
        evaluator_id: Optional[uuid.UUID]
    ) -> None:
        drill.evaluations.all().delete()
        evaluations = []
        for row in rows:
            row = dict(row)
            index = row['objective_index']
            if not row.get('objective_text'):
                if index >= len(drill.objectives):
                    raise ComplianceValidationError(
                        f"No objective at index {index}", field='evaluations'
                    )
                row['objective_text'] = drill.objectives[index]
            row.setdefault('evaluator_id', evaluator_id)
            evaluations.append(DrillEvaluation(drill=drill, **row))
        DrillEvaluation.objects.bulk_create(evaluations)

    def _replace_equipment_checks(self, drill: Drill, rows: List[Dict[str, Any]]) -> None:
        drill.equipment_checks.all().delete()
        DrillEquipmentCheck.objects.bulk_create([
            DrillEquipmentCheck(drill=drill, **row) for row in rows
        ])

    def _replace_deficiencies(
        self,
        drill: Drill,
        rows: List[Dict[str, Any]],
        assigned_by_id: Optional[uuid.UUID]
    ) -> None:
        drill.deficiencies.all().delete()
        due_date = drill.drill_date_actual + timedelta(days=settings.CORRECTIVE_ACTION_DUE_DAYS)

        for position, row in enumerate(rows, start=1):
            deficiency = DrillDeficiency.objects.create(drill=drill, **row)
            if not deficiency.requires_corrective_action:
                continue

            action = CorrectiveAction.objects.create(
                organization_id=drill.organization_id,
                action_number=f"CAPA-{drill.drill_number}-{position:02d}",
                action_type=CorrectiveAction.ActionType.CORRECTIVE,
                description=deficiency.description,
                source_drill=drill,
                assigned_by_id=assigned_by_id,
                due_date=due_date,
            )
            deficiency.corrective_action = action
            deficiency.save(update_fields=['corrective_action'])

            logger.info(f"Raised {action.action_number} from {deficiency.severity} deficiency")
            transaction.on_commit(
                lambda a=action, d=deficiency: event_publisher.corrective_action_raised(a, d)
            )

    @transaction.atomic
    def delete_drill(self, drill_id: uuid.UUID, organization_id: uuid.UUID = None) -> None:
        """Delete a drill together with all of its sub-records."""
        drill = self.get_drill(drill_id, organization_id)
        number = drill.drill_number
        drill.delete()
        logger.info(f"Deleted drill {number}")

    # ==========================================================================
    # Compliance
    # ==========================================================================

    @staticmethod
    def _completed(organization_id: uuid.UUID):
        return Drill.objects.filter(
            organization_id=organization_id,
            status=Drill.Status.COMPLETED,
        )

    def last_completed_date(
        self,
        organization_id: uuid.UUID,
        vessel_id: uuid.UUID,
        drill_type_id: uuid.UUID
    ) -> Optional[date]:
        return self._completed(organization_id).filter(
            vessel_id=vessel_id,
            drill_type_id=drill_type_id,
        ).aggregate(
            last=Max(Coalesce('drill_date_actual', 'drill_date_scheduled'))
        )['last']

    def compliance_for(
        self,
        organization_id: uuid.UUID,
        vessel_id: uuid.UUID,
        drill_type_id: uuid.UUID,
        today: date
    ) -> RecurrenceStatus:
        """
        Compliance of one drill type on one vessel.

        Only completed drills count; a type never completed is overdue.
        """
        drill_type = self.get_drill_type(drill_type_id, organization_id)
        last = self.last_completed_date(organization_id, vessel_id, drill_type.id)
        return calculate_recurrence(last, drill_type.minimum_frequency, today)

    def compliance_overview(
        self,
        organization_id: uuid.UUID,
        vessel_id: Optional[uuid.UUID],
        today: date
    ) -> List[Obligation]:
        """
        Compliance of every active drill type, per vessel.

        Without a vessel, covers every vessel that has drills on record.
        """
        drill_types = list(DrillType.objects.filter(organization_id=organization_id, is_active=True))
        if vessel_id:
            vessel_ids = [uuid.UUID(str(vessel_id))]
        else:
            vessel_ids = list(
                Drill.objects.filter(organization_id=organization_id)
                .order_by()
                .values_list('vessel_id', flat=True)
                .distinct()
            )

        last_dates = {
            (row['vessel_id'], row['drill_type_id']): row['last']
            for row in self._completed(organization_id)
            .filter(vessel_id__in=vessel_ids)
            .order_by()
            .values('vessel_id', 'drill_type_id')
            .annotate(last=Max(Coalesce('drill_date_actual', 'drill_date_scheduled')))
        }

        obligations = []
        for vessel in vessel_ids:
            for drill_type in drill_types:
                last = last_dates.get((vessel, drill_type.id))
                obligations.append(Obligation(
                    kind='drills',
                    reference_id=drill_type.id,
                    label=drill_type.name,
                    vessel_id=vessel,
                    frequency_days=drill_type.minimum_frequency,
                    last_satisfied=last,
                    status=calculate_recurrence(last, drill_type.minimum_frequency, today),
                    extra={'category': drill_type.category},
                ))
        return obligations

    def completion_stats(
        self,
        organization_id: uuid.UUID,
        today: date,
        window_days: int,
        vessel_id: Optional[uuid.UUID] = None
    ) -> Tuple[int, int, int]:
        """
        (completed on time, completed, currently due) within the window.

        A drill is on time when it was carried out no later than scheduled;
        currently due means still open with its scheduled date reached.
        """
        window_start = today - timedelta(days=window_days)
        drills = Drill.objects.filter(organization_id=organization_id)
        if vessel_id:
            drills = drills.filter(vessel_id=vessel_id)

        completed = drills.filter(
            status=Drill.Status.COMPLETED,
            drill_date_actual__gte=window_start,
            drill_date_actual__lte=today,
        )
        on_time = completed.filter(drill_date_actual__lte=F('drill_date_scheduled')).count()
        currently_due = drills.filter(
            Q(status=Drill.Status.SCHEDULED) | Q(status=Drill.Status.IN_PROGRESS),
            drill_date_scheduled__gte=window_start,
            drill_date_scheduled__lte=today,
        ).count()
        return on_time, completed.count(), currently_due
