# services/safety-service/src/apps/core/models/acknowledgment.py
"""
Read-and-understood confirmations for controlled documents.
"""

import uuid

from django.db import models
from django.utils import timezone

from .document import Document


class DocumentAcknowledgment(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization_id = models.UUIDField(db_index=True)
    document = models.ForeignKey(
        Document,
        on_delete=models.PROTECT,
        related_name='acknowledgments'
    )
    user_id = models.UUIDField(db_index=True)
    acknowledged_at = models.DateTimeField(default=timezone.now)
    ip_address = models.GenericIPAddressField(blank=True, null=True)

    class Meta:
        db_table = 'document_acknowledgments'
        ordering = ['-acknowledged_at']
        constraints = [
            models.UniqueConstraint(
                fields=['document', 'user_id'],
                name='unique_acknowledgment_per_user'
            ),
        ]

    def __str__(self):
        return f"{self.user_id} read {self.document_id}"
