# services/safety-service/src/apps/api/urls.py
"""
Safety Service API URL Configuration
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    DrillTypeViewSet,
    DrillViewSet,
    DocumentViewSet,
    CertificateViewSet,
    EmergencyContactViewSet,
    EmergencyProcedureViewSet,
    FleetSummaryView,
)

app_name = 'api'

router = DefaultRouter()

# Drills
router.register(r'drill-types', DrillTypeViewSet, basename='drill-type')
router.register(r'drills', DrillViewSet, basename='drill')

# Documents
router.register(r'documents', DocumentViewSet, basename='document')

# Certificates
router.register(r'certificates', CertificateViewSet, basename='certificate')

# Emergency reference data
router.register(r'emergency-contacts', EmergencyContactViewSet, basename='emergency-contact')
router.register(r'emergency-procedures', EmergencyProcedureViewSet, basename='emergency-procedure')

urlpatterns = [
    path('fleet/summary/', FleetSummaryView.as_view(), name='fleet-summary'),
    path('', include(router.urls)),
]
