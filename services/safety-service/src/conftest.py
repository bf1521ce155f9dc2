# services/safety-service/src/conftest.py
"""
Pytest configuration for Safety Service
"""

import os

# Set up Django settings before importing any Django modules
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.testing')

import pytest
import uuid
from datetime import date


@pytest.fixture
def org_id():
    """Generate a test organization ID."""
    return uuid.uuid4()


@pytest.fixture
def vessel_id():
    """Generate a test vessel ID."""
    return uuid.uuid4()


@pytest.fixture
def user_id():
    """Generate a test user ID."""
    return uuid.uuid4()


@pytest.fixture
def today():
    """Fixed reporting date."""
    return date(2024, 6, 15)


@pytest.fixture
def drill_type(org_id):
    """Create a test drill type."""
    from apps.core.models import DrillType

    return DrillType.objects.create(
        organization_id=org_id,
        name='Fire',
        category=DrillType.Category.SOLAS_REQUIRED,
        minimum_frequency=30,
        solas_reference='SOLAS III/19.3.4',
        default_objectives=['Raise alarm', 'Muster fire party', 'Boundary cooling'],
    )


@pytest.fixture
def document(org_id, user_id):
    """Create a draft document."""
    from apps.core.models import Document

    return Document.objects.create(
        organization_id=org_id,
        document_number='SMS-001',
        title='Safety Management Manual',
        author_id=user_id,
    )


@pytest.fixture
def approved_document(org_id, today):
    """Create an approved mandatory-read document."""
    from datetime import timedelta
    from apps.core.models import Document

    return Document.objects.create(
        organization_id=org_id,
        document_number='SMS-100',
        title='Garbage Management Plan',
        status=Document.Status.APPROVED,
        is_mandatory_read=True,
        approved_date=today,
        issue_date=today,
        next_review_date=today + timedelta(days=365),
    )


@pytest.fixture
def api_client(org_id, user_id):
    """API client carrying the gateway identity headers."""
    from rest_framework.test import APIClient

    client = APIClient()
    client.credentials(
        HTTP_X_ORGANIZATION_ID=str(org_id),
        HTTP_X_USER_ID=str(user_id),
    )
    return client
