# services/safety-service/src/apps/core/models/emergency.py
"""
Emergency response reference data kept per vessel.
"""

from django.db import models

from common.mixins import BaseModel


class EmergencyContact(BaseModel):
    class Category(models.TextChoices):
        COAST_GUARD = 'coast_guard', 'Coast Guard'
        FLAG_STATE = 'flag_state', 'Flag State'
        CLASS_SOCIETY = 'class_society', 'Classification Society'
        P_AND_I = 'p_and_i', 'P&I Club'
        MEDICAL = 'medical', 'Medical'
        SAR = 'sar', 'Search & Rescue'
        PORT_AUTHORITY = 'port_authority', 'Port Authority'
        COMPANY = 'company', 'Company'
        ENVIRONMENTAL = 'environmental', 'Environmental'
        OTHER = 'other', 'Other'

    vessel_id = models.UUIDField(blank=True, null=True, db_index=True)
    category = models.CharField(max_length=30, choices=Category.choices)
    organization_name = models.CharField(max_length=255)
    contact_name = models.CharField(max_length=255, blank=True, null=True)
    primary_phone = models.CharField(max_length=50)
    secondary_phone = models.CharField(max_length=50, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    available_24_7 = models.BooleanField(default=False)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'emergency_contacts'
        ordering = ['display_order', 'organization_name']

    def __str__(self):
        return f"{self.get_category_display()}: {self.organization_name}"


class EmergencyProcedure(BaseModel):
    class EmergencyType(models.TextChoices):
        FIRE = 'fire', 'Fire'
        FLOODING = 'flooding', 'Flooding'
        MAN_OVERBOARD = 'man_overboard', 'Man Overboard'
        ABANDON_SHIP = 'abandon_ship', 'Abandon Ship'
        COLLISION = 'collision', 'Collision'
        GROUNDING = 'grounding', 'Grounding'
        POLLUTION = 'pollution', 'Pollution'
        PIRACY = 'piracy', 'Piracy/Armed Robbery'
        MEDICAL = 'medical', 'Medical Emergency'
        ENCLOSED_SPACE = 'enclosed_space', 'Enclosed Space Emergency'

    vessel_id = models.UUIDField(blank=True, null=True, db_index=True)
    emergency_type = models.CharField(max_length=30, choices=EmergencyType.choices)
    title = models.CharField(max_length=255)
    muster_station = models.CharField(max_length=150, blank=True, null=True)
    key_actions = models.JSONField(default=list, blank=True)
    responsible_officer = models.CharField(max_length=150, blank=True, null=True)

    class Meta:
        db_table = 'emergency_procedures'
        ordering = ['emergency_type']

    def __str__(self):
        return f"{self.get_emergency_type_display()}: {self.title}"
