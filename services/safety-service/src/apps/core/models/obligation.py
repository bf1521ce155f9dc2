# services/safety-service/src/apps/core/models/obligation.py
"""
Obligation Type Models

Recurring requirement classes (drill types) and the per-tenant drill
number counter.
"""

from typing import List

from django.core.validators import MinValueValidator
from django.db import models

from common.mixins import BaseModel

from apps.core.constants import DEFAULT_EQUIPMENT, DEFAULT_OBJECTIVES


class DrillType(BaseModel):
    """
    A class of recurring drill requirement.

    Reference data maintained by administrators; the compliance engine
    only reads it.
    """

    class Category(models.TextChoices):
        SOLAS_REQUIRED = 'solas_required', 'SOLAS Required'
        COMPANY_REQUIRED = 'company_required', 'Company Required'
        VOLUNTARY = 'voluntary', 'Voluntary'

    name = models.CharField(max_length=150)
    description = models.TextField(blank=True, null=True)
    category = models.CharField(
        max_length=30,
        choices=Category.choices,
        default=Category.SOLAS_REQUIRED
    )
    minimum_frequency = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text='Required interval between completed drills, in days'
    )
    solas_reference = models.CharField(max_length=100, blank=True, null=True)
    default_objectives = models.JSONField(default=list, blank=True)
    default_equipment = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'drill_types'
        ordering = ['name']
        verbose_name = 'Drill Type'
        verbose_name_plural = 'Drill Types'
        constraints = [
            models.UniqueConstraint(
                fields=['organization_id', 'name'],
                name='unique_drill_type_name_per_org'
            ),
        ]

    def __str__(self):
        return f"{self.name} (every {self.minimum_frequency} days)"

    def get_default_objectives(self) -> List[str]:
        return list(self.default_objectives or DEFAULT_OBJECTIVES.get(self.name, []))

    def get_default_equipment(self) -> List[str]:
        return list(self.default_equipment or DEFAULT_EQUIPMENT.get(self.name, []))


class DrillNumberSequence(models.Model):
    """
    Monotonic drill number counter, one row per organization.

    Incremented with a single UPDATE ... SET last_value = last_value + 1 so
    concurrent schedulers never read the same value.
    """

    organization_id = models.UUIDField(primary_key=True)
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'drill_number_sequences'

    def __str__(self):
        return f"{self.organization_id}: {self.last_value}"
