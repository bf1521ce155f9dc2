# services/safety-service/src/apps/core/models/drill.py
"""
Drill Models

Scheduled safety drills, their outcome sub-records and the corrective
actions raised from drill deficiencies.
"""

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from common.mixins import BaseModel, UUIDPrimaryKeyMixin, VersionedMixin

from .obligation import DrillType


class Drill(BaseModel, VersionedMixin):
    """
    One scheduled occurrence of a drill obligation on a vessel.

    ``drill_date_actual`` is set only once the drill is completed.
    """

    class Status(models.TextChoices):
        SCHEDULED = 'scheduled', 'Scheduled'
        IN_PROGRESS = 'in_progress', 'In Progress'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'
        POSTPONED = 'postponed', 'Postponed'

    class Weather(models.TextChoices):
        FAIR = 'fair', 'Fair'
        MODERATE_SEA = 'moderate_sea', 'Moderate Sea'
        HEAVY_WEATHER = 'heavy_weather', 'Heavy Weather'
        AT_PORT = 'at_port', 'At Port'
        AT_ANCHOR = 'at_anchor', 'At Anchor'

    TRANSITIONS = {
        Status.SCHEDULED: {Status.IN_PROGRESS, Status.COMPLETED, Status.CANCELLED, Status.POSTPONED},
        Status.IN_PROGRESS: {Status.COMPLETED, Status.CANCELLED, Status.POSTPONED},
        Status.COMPLETED: set(),
        Status.CANCELLED: set(),
        Status.POSTPONED: set(),
    }

    # ==========================================================================
    # Identification
    # ==========================================================================

    drill_number = models.CharField(max_length=30)
    vessel_id = models.UUIDField(db_index=True)
    drill_type = models.ForeignKey(
        DrillType,
        on_delete=models.PROTECT,
        related_name='drills'
    )

    # ==========================================================================
    # Planning
    # ==========================================================================

    drill_date_scheduled = models.DateField()
    drill_date_actual = models.DateField(blank=True, null=True)
    drill_duration_minutes = models.PositiveIntegerField(blank=True, null=True)
    scenario_description = models.TextField(blank=True, default='')
    objectives = models.JSONField(default=list, blank=True)
    conducted_by_id = models.UUIDField(blank=True, null=True)
    location = models.CharField(max_length=255, blank=True, null=True)
    weather_conditions = models.CharField(
        max_length=20,
        choices=Weather.choices,
        blank=True,
        null=True
    )

    # ==========================================================================
    # Status
    # ==========================================================================

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.SCHEDULED
    )
    cancellation_reason = models.TextField(blank=True, null=True)
    postponement_reason = models.TextField(blank=True, null=True)

    # ==========================================================================
    # Outcome
    # ==========================================================================

    lessons_learned_positive = models.TextField(blank=True, null=True)
    lessons_learned_improvement = models.TextField(blank=True, null=True)
    recommendations = models.TextField(blank=True, null=True)
    overall_rating = models.PositiveSmallIntegerField(
        blank=True,
        null=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )

    class Meta:
        db_table = 'drills'
        ordering = ['-drill_date_scheduled', '-created_at']
        verbose_name = 'Drill'
        verbose_name_plural = 'Drills'
        indexes = [
            models.Index(fields=['organization_id', 'vessel_id']),
            models.Index(fields=['drill_type', 'status']),
            models.Index(fields=['drill_date_scheduled']),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['organization_id', 'drill_number'],
                name='unique_drill_number_per_org'
            ),
        ]

    def __str__(self):
        return f"{self.drill_number}: {self.drill_type.name}"

    @property
    def is_terminal(self) -> bool:
        return not self.TRANSITIONS[self.status]

    @property
    def satisfied_on(self):
        """Date the obligation counts as satisfied."""
        return self.drill_date_actual or self.drill_date_scheduled

    def can_transition_to(self, target: str) -> bool:
        return target in self.TRANSITIONS[self.status]


class DrillParticipant(UUIDPrimaryKeyMixin):
    drill = models.ForeignKey(Drill, on_delete=models.CASCADE, related_name='participants')
    user_id = models.UUIDField()
    station_assignment = models.CharField(max_length=150, blank=True, null=True)
    expected_to_attend = models.BooleanField(default=True)
    attended = models.BooleanField(default=False)
    absent_reason = models.CharField(max_length=255, blank=True, null=True)
    arrival_delay_minutes = models.PositiveIntegerField(blank=True, null=True)
    performance_rating = models.PositiveSmallIntegerField(
        blank=True,
        null=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    comments = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'drill_participants'
        constraints = [
            models.UniqueConstraint(fields=['drill', 'user_id'], name='unique_drill_participant'),
        ]

    def __str__(self):
        return f"{self.user_id} @ {self.drill_id}"


class DrillEvaluation(UUIDPrimaryKeyMixin):
    drill = models.ForeignKey(Drill, on_delete=models.CASCADE, related_name='evaluations')
    objective_index = models.PositiveSmallIntegerField()
    objective_text = models.TextField()
    achieved = models.BooleanField(default=False)
    notes = models.TextField(blank=True, null=True)
    evaluator_id = models.UUIDField(blank=True, null=True)

    class Meta:
        db_table = 'drill_evaluations'
        ordering = ['objective_index']

    def __str__(self):
        return f"#{self.objective_index} {'achieved' if self.achieved else 'not achieved'}"


class CorrectiveAction(BaseModel):
    """
    Corrective/preventive action raised from a drill finding.
    """

    class ActionType(models.TextChoices):
        CORRECTIVE = 'corrective', 'Corrective'
        PREVENTIVE = 'preventive', 'Preventive'

    class Status(models.TextChoices):
        OPEN = 'open', 'Open'
        CLOSED = 'closed', 'Closed'

    action_number = models.CharField(max_length=50)
    action_type = models.CharField(
        max_length=20,
        choices=ActionType.choices,
        default=ActionType.CORRECTIVE
    )
    description = models.TextField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.OPEN)
    source_drill = models.ForeignKey(
        Drill,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='corrective_actions'
    )
    assigned_by_id = models.UUIDField(blank=True, null=True)
    assigned_to_id = models.UUIDField(blank=True, null=True)
    due_date = models.DateField()
    closed_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = 'corrective_actions'
        ordering = ['due_date']
        constraints = [
            models.UniqueConstraint(
                fields=['organization_id', 'action_number'],
                name='unique_action_number_per_org'
            ),
        ]

    def __str__(self):
        return self.action_number


class DrillDeficiency(UUIDPrimaryKeyMixin):
    class Severity(models.TextChoices):
        CRITICAL = 'critical', 'Critical'
        SERIOUS = 'serious', 'Serious'
        MINOR = 'minor', 'Minor'
        OBSERVATION = 'observation', 'Observation'

    drill = models.ForeignKey(Drill, on_delete=models.CASCADE, related_name='deficiencies')
    description = models.TextField()
    severity = models.CharField(max_length=20, choices=Severity.choices)
    photo_urls = models.JSONField(default=list, blank=True)
    corrective_action = models.ForeignKey(
        CorrectiveAction,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='deficiencies'
    )

    # Findings at these severities open a corrective action
    ACTIONABLE = (Severity.CRITICAL, Severity.SERIOUS)

    class Meta:
        db_table = 'drill_deficiencies'

    def __str__(self):
        return f"[{self.severity}] {self.description[:50]}"

    @property
    def requires_corrective_action(self) -> bool:
        return self.severity in self.ACTIONABLE


class DrillEquipmentCheck(UUIDPrimaryKeyMixin):
    class Status(models.TextChoices):
        SATISFACTORY = 'satisfactory', 'Satisfactory'
        DEFECTIVE = 'defective', 'Defective'
        NOT_AVAILABLE = 'not_available', 'Not Available'

    drill = models.ForeignKey(Drill, on_delete=models.CASCADE, related_name='equipment_checks')
    equipment_name = models.CharField(max_length=150)
    used = models.BooleanField(default=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.SATISFACTORY)
    notes = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'drill_equipment_checks'

    def __str__(self):
        return f"{self.equipment_name}: {self.status}"
