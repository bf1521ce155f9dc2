"""
Safety Service API Views
"""

from .drill import DrillTypeViewSet, DrillViewSet
from .document import DocumentViewSet
from .certificate import CertificateViewSet
from .emergency import EmergencyContactViewSet, EmergencyProcedureViewSet
from .fleet import FleetSummaryView

__all__ = [
    'DrillTypeViewSet',
    'DrillViewSet',
    'DocumentViewSet',
    'CertificateViewSet',
    'EmergencyContactViewSet',
    'EmergencyProcedureViewSet',
    'FleetSummaryView',
]
