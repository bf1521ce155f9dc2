# services/safety-service/src/apps/core/tests/test_drill_service.py
"""
Tests for DrillService
"""

import uuid
from datetime import date, timedelta
from unittest import mock

from django.test import TestCase, override_settings

from apps.core.models import (
    CorrectiveAction,
    Drill,
    DrillDeficiency,
    DrillEvaluation,
    DrillNumberSequence,
    DrillParticipant,
    DrillType,
)
from apps.core.services import (
    ComplianceValidationError,
    ConcurrentModificationError,
    DrillNotFoundError,
    DrillService,
    InvalidTransitionError,
    NEVER_SATISFIED_DAYS,
    Tier,
)

TODAY = date(2024, 6, 15)


class DrillServiceTestBase(TestCase):

    def setUp(self):
        self.service = DrillService()
        self.org_id = uuid.uuid4()
        self.vessel_id = uuid.uuid4()
        self.drill_type = DrillType.objects.create(
            organization_id=self.org_id,
            name='Fire',
            minimum_frequency=30,
            default_objectives=['Raise alarm', 'Muster fire party', 'Boundary cooling'],
        )

    def schedule(self, scheduled_date=TODAY, **kwargs):
        return self.service.schedule(
            organization_id=self.org_id,
            vessel_id=self.vessel_id,
            drill_type_id=self.drill_type.id,
            scheduled_date=scheduled_date,
            today=TODAY,
            **kwargs
        )

    def completed_drill(self, actual_date, scheduled_date=None, vessel_id=None, drill_type=None):
        return Drill.objects.create(
            organization_id=self.org_id,
            vessel_id=vessel_id or self.vessel_id,
            drill_type=drill_type or self.drill_type,
            drill_number=f"HIST-{uuid.uuid4().hex[:8]}",
            drill_date_scheduled=scheduled_date or actual_date,
            drill_date_actual=actual_date,
            status=Drill.Status.COMPLETED,
            overall_rating=4,
        )


class DrillSchedulingTest(DrillServiceTestBase):

    def test_schedule_allocates_number(self):
        drill = self.schedule(scenario_description='Engine room fire')

        self.assertEqual(drill.drill_number, 'DRILL-2024-001')
        self.assertEqual(drill.status, Drill.Status.SCHEDULED)
        self.assertEqual(drill.scenario_description, 'Engine room fire')
        self.assertIsNone(drill.drill_date_actual)

    def test_next_number_follows_existing_drills(self):
        for n in range(2):
            Drill.objects.create(
                organization_id=self.org_id,
                vessel_id=self.vessel_id,
                drill_type=self.drill_type,
                drill_number=f"LEGACY-{n}",
                drill_date_scheduled=TODAY,
            )

        drill = self.schedule()

        self.assertTrue(drill.drill_number.endswith('-003'))

    def test_numbers_are_sequential(self):
        numbers = [self.schedule().drill_number for _ in range(3)]

        self.assertEqual(numbers, ['DRILL-2024-001', 'DRILL-2024-002', 'DRILL-2024-003'])
        self.assertEqual(
            DrillNumberSequence.objects.get(organization_id=self.org_id).last_value, 3
        )

    def test_numbers_are_per_tenant(self):
        self.schedule()
        other_org = uuid.uuid4()
        other_type = DrillType.objects.create(
            organization_id=other_org, name='Fire', minimum_frequency=30
        )

        drill = self.service.schedule(
            organization_id=other_org,
            vessel_id=self.vessel_id,
            drill_type_id=other_type.id,
            scheduled_date=TODAY,
            today=TODAY,
        )

        self.assertEqual(drill.drill_number, 'DRILL-2024-001')

    def test_taken_number_is_skipped(self):
        Drill.objects.create(
            organization_id=self.org_id,
            vessel_id=self.vessel_id,
            drill_type=self.drill_type,
            drill_number='DRILL-2024-002',
            drill_date_scheduled=TODAY,
        )

        drill = self.schedule()

        # seeded with one existing drill, 002 collides, 003 is free
        self.assertEqual(drill.drill_number, 'DRILL-2024-003')

    def test_number_uses_reporting_year(self):
        drill = self.service.schedule(
            organization_id=self.org_id,
            vessel_id=self.vessel_id,
            drill_type_id=self.drill_type.id,
            scheduled_date=date(2025, 1, 10),
            today=date(2024, 12, 20),
        )

        self.assertEqual(drill.drill_number, 'DRILL-2024-001')

    def test_default_objectives_from_drill_type(self):
        drill = self.schedule()
        self.assertEqual(drill.objectives, ['Raise alarm', 'Muster fire party', 'Boundary cooling'])

    def test_explicit_objectives(self):
        drill = self.schedule(objectives=['Locate casualty'])
        self.assertEqual(drill.objectives, ['Locate casualty'])

    def test_equipment_checklist_prefilled_from_drill_type(self):
        self.drill_type.default_equipment = ['Fire hoses', 'SCBA']
        self.drill_type.save()

        drill = self.schedule()

        checks = list(drill.equipment_checks.order_by('equipment_name'))
        self.assertEqual([c.equipment_name for c in checks], ['Fire hoses', 'SCBA'])
        self.assertFalse(any(c.used for c in checks))

    def test_equipment_checklist_from_standard_table(self):
        boat = DrillType.objects.create(
            organization_id=self.org_id, name='Abandon Ship Drill', minimum_frequency=30,
        )

        drill = self.service.schedule(
            organization_id=self.org_id,
            vessel_id=self.vessel_id,
            drill_type_id=boat.id,
            scheduled_date=TODAY,
            today=TODAY,
        )

        names = set(drill.equipment_checks.values_list('equipment_name', flat=True))
        self.assertIn('EPIRB', names)
        self.assertIn('Lifeboats', names)

    def test_inactive_drill_type_rejected(self):
        self.drill_type.is_active = False
        self.drill_type.save()

        with self.assertRaises(ComplianceValidationError):
            self.schedule()

    def test_missing_vessel_rejected(self):
        with self.assertRaises(ComplianceValidationError):
            self.service.schedule(
                organization_id=self.org_id,
                vessel_id=None,
                drill_type_id=self.drill_type.id,
                scheduled_date=TODAY,
            )

    def test_publishes_scheduled_event_on_commit(self):
        with mock.patch('apps.core.services.drill_service.event_publisher') as publisher:
            with self.captureOnCommitCallbacks(execute=True):
                drill = self.schedule()

        publisher.drill_scheduled.assert_called_once_with(drill)


class DrillLifecycleTest(DrillServiceTestBase):

    def test_start_then_complete(self):
        drill = self.schedule()

        started = self.service.start(drill.id)
        self.assertEqual(started.status, Drill.Status.IN_PROGRESS)

        completed = self.service.complete(drill.id, actual_date=TODAY, overall_rating=4)
        self.assertEqual(completed.status, Drill.Status.COMPLETED)
        self.assertEqual(completed.drill_date_actual, TODAY)

        drill.refresh_from_db()
        self.assertEqual(drill.version, 3)

    def test_complete_directly_from_scheduled(self):
        drill = self.schedule()
        completed = self.service.complete(drill.id, actual_date=TODAY, overall_rating=5)
        self.assertEqual(completed.status, Drill.Status.COMPLETED)

    def test_complete_from_cancelled_is_invalid(self):
        drill = self.schedule()
        self.service.cancel(drill.id, 'Bad weather')

        with self.assertRaises(InvalidTransitionError) as ctx:
            self.service.complete(drill.id, actual_date=TODAY, overall_rating=3)

        self.assertIn('cancelled', ctx.exception.message)
        self.assertIn('completed', ctx.exception.message)
        drill.refresh_from_db()
        self.assertEqual(drill.status, Drill.Status.CANCELLED)
        self.assertIsNone(drill.drill_date_actual)

    def test_terminal_states_are_final(self):
        drill = self.schedule()
        self.service.postpone(drill.id, 'Port state inspection')

        for operation in (
            lambda: self.service.start(drill.id),
            lambda: self.service.cancel(drill.id, 'reason'),
            lambda: self.service.postpone(drill.id, 'again'),
        ):
            with self.assertRaises(InvalidTransitionError):
                operation()

    def test_rating_out_of_range(self):
        drill = self.schedule()

        for rating in (0, 6):
            with self.assertRaises(ComplianceValidationError):
                self.service.complete(drill.id, actual_date=TODAY, overall_rating=rating)

        drill.refresh_from_db()
        self.assertEqual(drill.status, Drill.Status.SCHEDULED)

    def test_blank_reason_rejected(self):
        drill = self.schedule()

        with self.assertRaises(ComplianceValidationError):
            self.service.cancel(drill.id, '   ')
        with self.assertRaises(ComplianceValidationError):
            self.service.postpone(drill.id, '')

        drill.refresh_from_db()
        self.assertEqual(drill.status, Drill.Status.SCHEDULED)

    def test_cancel_records_reason(self):
        drill = self.schedule()
        cancelled = self.service.cancel(drill.id, ' Crew change ')

        self.assertEqual(cancelled.status, Drill.Status.CANCELLED)
        self.assertEqual(cancelled.cancellation_reason, 'Crew change')

    def test_stale_instance_conflicts(self):
        drill = self.schedule()
        stale = Drill.objects.get(id=drill.id)
        self.service.start(drill.id)

        with self.assertRaises(ConcurrentModificationError):
            self.service._transition(stale, Drill.Status.CANCELLED, cancellation_reason='x')

        drill.refresh_from_db()
        self.assertEqual(drill.status, Drill.Status.IN_PROGRESS)

    def test_drill_not_found(self):
        with self.assertRaises(DrillNotFoundError):
            self.service.start(uuid.uuid4())

    def test_other_tenant_cannot_see_drill(self):
        drill = self.schedule()
        with self.assertRaises(DrillNotFoundError):
            self.service.start(drill.id, organization_id=uuid.uuid4())


@override_settings(CORRECTIVE_ACTION_DUE_DAYS=30)
class DrillCompletionRecordsTest(DrillServiceTestBase):

    def complete(self, drill, **kwargs):
        defaults = {'actual_date': TODAY, 'overall_rating': 3}
        defaults.update(kwargs)
        return self.service.complete(drill.id, **defaults)

    def test_sub_records_persisted(self):
        drill = self.schedule()
        crew = [uuid.uuid4(), uuid.uuid4()]

        self.complete(
            drill,
            participants=[
                {'user_id': crew[0], 'attended': True, 'station_assignment': 'Hose team'},
                {'user_id': crew[1], 'attended': False, 'absent_reason': 'On watch'},
            ],
            evaluations=[{'objective_index': 1, 'achieved': True}],
            equipment_checks=[{'equipment_name': 'Fire hose', 'status': 'satisfactory'}],
        )

        self.assertEqual(drill.participants.count(), 2)
        self.assertEqual(drill.equipment_checks.count(), 1)
        evaluation = DrillEvaluation.objects.get(drill=drill)
        self.assertEqual(evaluation.objective_text, 'Muster fire party')

    def test_duplicate_participant_rejected(self):
        drill = self.schedule()
        crew_member = uuid.uuid4()

        with self.assertRaises(ComplianceValidationError) as ctx:
            self.complete(
                drill,
                participants=[
                    {'user_id': crew_member, 'attended': True},
                    {'user_id': crew_member, 'attended': False},
                ],
            )

        self.assertEqual(ctx.exception.details['duplicate_user_ids'], [str(crew_member)])
        drill.refresh_from_db()
        self.assertEqual(drill.status, Drill.Status.SCHEDULED)
        self.assertFalse(DrillParticipant.objects.exists())

    def test_omitted_equipment_keeps_checklist(self):
        self.drill_type.default_equipment = ['Fire hoses']
        self.drill_type.save()
        drill = self.schedule()

        self.complete(drill)
        self.assertEqual(
            list(drill.equipment_checks.values_list('equipment_name', flat=True)), ['Fire hoses']
        )

        other = self.schedule()
        self.complete(other, equipment_checks=[])
        self.assertFalse(other.equipment_checks.exists())

    def test_evaluation_index_out_of_range_rolls_back(self):
        drill = self.schedule()

        with self.assertRaises(ComplianceValidationError):
            self.complete(drill, evaluations=[{'objective_index': 9, 'achieved': True}])

        drill.refresh_from_db()
        self.assertEqual(drill.status, Drill.Status.SCHEDULED)
        self.assertFalse(DrillEvaluation.objects.filter(drill=drill).exists())

    def test_serious_deficiency_raises_corrective_action(self):
        drill = self.schedule()

        self.complete(
            drill,
            deficiencies=[
                {'description': 'Hydrant valve seized', 'severity': 'critical'},
                {'description': 'Slow muster', 'severity': 'minor'},
                {'description': 'SCBA cylinder low', 'severity': 'serious'},
            ],
        )

        actions = CorrectiveAction.objects.filter(source_drill=drill).order_by('action_number')
        self.assertEqual(
            [a.action_number for a in actions],
            ['CAPA-DRILL-2024-001-01', 'CAPA-DRILL-2024-001-03'],
        )
        self.assertTrue(all(a.due_date == TODAY + timedelta(days=30) for a in actions))

        minor = DrillDeficiency.objects.get(drill=drill, severity='minor')
        self.assertIsNone(minor.corrective_action)
        critical = DrillDeficiency.objects.get(drill=drill, severity='critical')
        self.assertEqual(critical.corrective_action.description, 'Hydrant valve seized')

    def test_delete_removes_sub_records(self):
        drill = self.schedule()
        self.complete(
            drill,
            participants=[{'user_id': uuid.uuid4(), 'attended': True}],
            deficiencies=[{'description': 'Alarm inaudible aft', 'severity': 'serious'}],
        )

        self.service.delete_drill(drill.id)

        self.assertFalse(Drill.objects.filter(id=drill.id).exists())
        self.assertFalse(DrillParticipant.objects.exists())
        self.assertFalse(DrillDeficiency.objects.exists())
        # corrective actions outlive the drill
        self.assertIsNone(CorrectiveAction.objects.get().source_drill)


class DrillComplianceTest(DrillServiceTestBase):

    def test_never_completed_is_overdue(self):
        status = self.service.compliance_for(self.org_id, self.vessel_id, self.drill_type.id, TODAY)

        self.assertEqual(status.tier, Tier.OVERDUE)
        self.assertEqual(status.days_until_due, NEVER_SATISFIED_DAYS)

    def test_uses_most_recent_completed_drill(self):
        self.completed_drill(TODAY - timedelta(days=60))
        self.completed_drill(TODAY - timedelta(days=25))

        status = self.service.compliance_for(self.org_id, self.vessel_id, self.drill_type.id, TODAY)

        self.assertEqual(status.days_until_due, 5)
        self.assertEqual(status.tier, Tier.DUE_SOON)

    def test_ignores_non_completed_drills(self):
        self.completed_drill(TODAY - timedelta(days=40))
        self.schedule(scheduled_date=TODAY - timedelta(days=2))
        cancelled = self.schedule(scheduled_date=TODAY - timedelta(days=1))
        self.service.cancel(cancelled.id, 'Weather')

        status = self.service.compliance_for(self.org_id, self.vessel_id, self.drill_type.id, TODAY)

        self.assertEqual(status.days_until_due, -10)
        self.assertEqual(status.tier, Tier.OVERDUE)

    def test_other_vessels_do_not_count(self):
        self.completed_drill(TODAY - timedelta(days=1), vessel_id=uuid.uuid4())

        status = self.service.compliance_for(self.org_id, self.vessel_id, self.drill_type.id, TODAY)

        self.assertEqual(status.tier, Tier.OVERDUE)

    def test_overview_covers_active_types(self):
        boat = DrillType.objects.create(
            organization_id=self.org_id, name='Abandon Ship', minimum_frequency=30
        )
        DrillType.objects.create(
            organization_id=self.org_id, name='Retired', minimum_frequency=30, is_active=False
        )
        self.completed_drill(TODAY - timedelta(days=10))

        overview = self.service.compliance_overview(self.org_id, self.vessel_id, TODAY)

        by_label = {o.label: o for o in overview}
        self.assertEqual(set(by_label), {'Fire', 'Abandon Ship'})
        self.assertEqual(by_label['Fire'].status.tier, Tier.ON_SCHEDULE)
        self.assertEqual(by_label['Fire'].last_satisfied, TODAY - timedelta(days=10))
        self.assertEqual(by_label['Abandon Ship'].status.tier, Tier.OVERDUE)
        self.assertEqual(by_label['Abandon Ship'].reference_id, boat.id)

    def test_overview_without_vessel_spans_fleet(self):
        other_vessel = uuid.uuid4()
        self.completed_drill(TODAY - timedelta(days=10))
        self.completed_drill(TODAY - timedelta(days=50), vessel_id=other_vessel)

        overview = self.service.compliance_overview(self.org_id, None, TODAY)

        tiers = {o.vessel_id: o.status.tier for o in overview}
        self.assertEqual(tiers, {self.vessel_id: Tier.ON_SCHEDULE, other_vessel: Tier.OVERDUE})

    def test_overview_counts_each_vessel_once(self):
        self.completed_drill(TODAY - timedelta(days=10))
        self.schedule(scheduled_date=TODAY + timedelta(days=5))
        self.schedule(scheduled_date=TODAY + timedelta(days=20))

        overview = self.service.compliance_overview(self.org_id, None, TODAY)

        self.assertEqual(len(overview), 1)
        self.assertEqual(overview[0].vessel_id, self.vessel_id)

    def test_completion_stats(self):
        self.completed_drill(TODAY - timedelta(days=20), scheduled_date=TODAY - timedelta(days=20))
        self.completed_drill(TODAY - timedelta(days=10), scheduled_date=TODAY - timedelta(days=12))
        self.schedule(scheduled_date=TODAY - timedelta(days=3))
        self.schedule(scheduled_date=TODAY + timedelta(days=3))

        on_time, completed, currently_due = self.service.completion_stats(
            self.org_id, TODAY, 365
        )

        self.assertEqual((on_time, completed, currently_due), (1, 2, 1))
