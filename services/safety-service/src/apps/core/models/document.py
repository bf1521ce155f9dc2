# services/safety-service/src/apps/core/models/document.py
"""
Controlled Document Models

Safety management system documents with an approval workflow and a
periodic review cycle.
"""

from django.db import models

from common.mixins import BaseModel, VersionedMixin


class DocumentCategory(BaseModel):
    name = models.CharField(max_length=100)
    color = models.CharField(max_length=20, blank=True, null=True)

    class Meta:
        db_table = 'document_categories'
        ordering = ['name']
        verbose_name_plural = 'Document Categories'
        constraints = [
            models.UniqueConstraint(
                fields=['organization_id', 'name'],
                name='unique_document_category_per_org'
            ),
        ]

    def __str__(self):
        return self.name


class Document(BaseModel, VersionedMixin):
    """
    A controlled document.

    Documents are retired through the obsolete status rather than deleted;
    acknowledgments protect them at the database level.
    """

    class Status(models.TextChoices):
        DRAFT = 'draft', 'Draft'
        UNDER_REVIEW = 'under_review', 'Under Review'
        APPROVED = 'approved', 'Approved'
        OBSOLETE = 'obsolete', 'Obsolete'

    # ==========================================================================
    # Identification
    # ==========================================================================

    document_number = models.CharField(max_length=50)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    revision = models.CharField(max_length=20, default='1.0')
    category = models.ForeignKey(
        DocumentCategory,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='documents'
    )
    vessel_id = models.UUIDField(
        blank=True,
        null=True,
        db_index=True,
        help_text='Null for company-wide documents'
    )
    is_mandatory_read = models.BooleanField(default=False)

    # ==========================================================================
    # Workflow
    # ==========================================================================

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.DRAFT
    )
    author_id = models.UUIDField(blank=True, null=True)
    reviewer_id = models.UUIDField(blank=True, null=True)
    approver_id = models.UUIDField(blank=True, null=True)
    approved_by_id = models.UUIDField(blank=True, null=True)

    # ==========================================================================
    # Dates
    # ==========================================================================

    issue_date = models.DateField(blank=True, null=True)
    approved_date = models.DateField(blank=True, null=True)
    next_review_date = models.DateField(blank=True, null=True)

    class Meta:
        db_table = 'documents'
        ordering = ['document_number']
        verbose_name = 'Document'
        verbose_name_plural = 'Documents'
        indexes = [
            models.Index(fields=['organization_id', 'status']),
            models.Index(fields=['next_review_date']),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['organization_id', 'document_number'],
                name='unique_document_number_per_org'
            ),
        ]

    def __str__(self):
        return f"{self.document_number} rev {self.revision}: {self.title}"

    @property
    def is_obsolete(self) -> bool:
        return self.status == self.Status.OBSOLETE


class DocumentReview(BaseModel):
    """
    Append-only trail of review decisions on a document.
    """

    class Kind(models.TextChoices):
        REJECTION = 'rejection', 'Rejection'
        FORWARDED = 'forwarded', 'Forwarded to Approver'
        PERIODIC_REVIEW = 'periodic_review', 'Periodic Review'

    document = models.ForeignKey(
        Document,
        on_delete=models.CASCADE,
        related_name='reviews'
    )
    kind = models.CharField(max_length=20, choices=Kind.choices)
    reviewer_id = models.UUIDField(blank=True, null=True)
    comments = models.TextField(blank=True, default='')
    review_date = models.DateField()
    due_date = models.DateField(
        blank=True,
        null=True,
        help_text='Review date that was due when this review was recorded'
    )
    next_review_date = models.DateField(blank=True, null=True)

    class Meta:
        db_table = 'document_reviews'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.document.document_number} {self.kind} on {self.review_date}"

    @property
    def on_time(self) -> bool:
        return self.due_date is None or self.review_date <= self.due_date
