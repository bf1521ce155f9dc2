# services/safety-service/src/apps/core/models/certificate.py
"""
Certificate Model

Vessel and crew certificates tracked against their expiry date.
"""

from django.db import models

from common.mixins import BaseModel


class Certificate(BaseModel):
    """
    A certificate with a validity window.

    Expiry status is computed on read from ``expiry_date``; only the
    administrative states (suspended, superseded) are stored.
    """

    class CertificateType(models.TextChoices):
        DOC = 'doc', 'Document of Compliance'
        STATUTORY = 'statutory', 'Statutory'
        CLASS = 'class', 'Class'
        CREW = 'crew', 'Crew'
        EQUIPMENT = 'equipment', 'Equipment'

    class Status(models.TextChoices):
        VALID = 'valid', 'Valid'
        SUSPENDED = 'suspended', 'Suspended'
        SUPERSEDED = 'superseded', 'Superseded'

    certificate_type = models.CharField(max_length=20, choices=CertificateType.choices)
    name = models.CharField(max_length=255)
    certificate_number = models.CharField(max_length=100, blank=True, null=True)
    issuing_authority = models.CharField(max_length=255, blank=True, null=True)
    vessel_id = models.UUIDField(blank=True, null=True, db_index=True)
    crew_id = models.UUIDField(blank=True, null=True, db_index=True)
    issue_date = models.DateField(blank=True, null=True)
    expiry_date = models.DateField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.VALID)
    notes = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'certificates'
        ordering = ['expiry_date']
        indexes = [
            models.Index(fields=['organization_id', 'status']),
            models.Index(fields=['expiry_date']),
        ]

    def __str__(self):
        return f"{self.name} ({self.certificate_number or 'n/a'})"
