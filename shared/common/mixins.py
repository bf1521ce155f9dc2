# shared/common/mixins.py
"""
Reusable Mixins for Models and Views
"""

import uuid
from typing import Any, Dict, Optional

from django.db import models
from django.utils import timezone


# =============================================================================
# MODEL MIXINS
# =============================================================================

class UUIDPrimaryKeyMixin(models.Model):
    """
    Mixin that provides UUID as primary key instead of auto-increment integer.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record"
    )

    class Meta:
        abstract = True


class TimestampMixin(models.Model):
    """
    Mixin that provides created_at and updated_at timestamp fields.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="When this record was created"
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When this record was last updated"
    )

    class Meta:
        abstract = True


class OrganizationMixin(models.Model):
    """
    Mixin for multi-tenant models that belong to an organization.
    """

    organization_id = models.UUIDField(
        db_index=True,
        help_text="Organization this record belongs to"
    )

    class Meta:
        abstract = True


class VersionedMixin(models.Model):
    """
    Mixin for optimistic locking using version number.

    Writers call compare_and_set() with the state they observed. The update
    is a single conditional UPDATE; when another writer got there first no
    row matches and the caller is told so instead of overwriting.
    """

    version = models.PositiveIntegerField(
        default=1,
        help_text="Version number for optimistic locking"
    )

    class Meta:
        abstract = True

    def compare_and_set(self, expected: Optional[Dict[str, Any]] = None, **changes) -> bool:
        """
        Apply changes only if the stored row still matches what was read.

        Args:
            expected: Extra column values the row must still have
                (e.g. {'status': 'draft'}); the version is always checked
            **changes: Column values to write

        Returns:
            True if the row was updated, False if it changed underneath us
        """
        filters = {'pk': self.pk, 'version': self.version}
        filters.update(expected or {})

        field_names = {f.name for f in self._meta.concrete_fields}
        if 'updated_at' in field_names:
            changes.setdefault('updated_at', timezone.now())

        updated = type(self)._default_manager.filter(**filters).update(
            version=models.F('version') + 1,
            **changes
        )
        if not updated:
            return False

        for field, value in changes.items():
            setattr(self, field, value)
        self.version += 1
        return True


class BaseModel(UUIDPrimaryKeyMixin, TimestampMixin, OrganizationMixin):
    """
    Combined base model with the common tenant fields.
    Use this as the base for most models in the service.
    """

    class Meta:
        abstract = True
