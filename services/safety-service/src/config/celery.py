# services/safety-service/src/config/celery.py
"""
Celery application for Safety Service
"""

import os

from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('safety_service')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks(['apps.core'])

app.conf.beat_schedule = {
    'safety-compliance-digest': {
        'task': 'apps.core.tasks.publish_compliance_digest',
        'schedule': crontab(hour=5, minute=0),
    },
}

# send_acknowledgment_reminders needs the crew roster, which lives in the
# user service; it is dispatched on demand rather than from beat.
