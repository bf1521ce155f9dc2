"""
Safety Service API Serializers
"""

from .drill import (
    DrillTypeSerializer,
    DrillParticipantSerializer,
    DrillEvaluationSerializer,
    DrillDeficiencySerializer,
    DrillEquipmentCheckSerializer,
    CorrectiveActionSerializer,
    DrillSerializer,
    DrillDetailSerializer,
    DrillScheduleSerializer,
    DrillCompleteSerializer,
    DrillReasonSerializer,
)
from .document import (
    DocumentCategorySerializer,
    DocumentReviewSerializer,
    DocumentSerializer,
    DocumentDetailSerializer,
    DocumentCreateSerializer,
    DocumentUpdateSerializer,
    DocumentSubmitSerializer,
    DocumentApproveSerializer,
    DocumentRejectSerializer,
    DocumentMarkReviewedSerializer,
    DocumentAcknowledgmentSerializer,
    AcknowledgeSerializer,
)
from .certificate import CertificateSerializer
from .emergency import EmergencyContactSerializer, EmergencyProcedureSerializer

__all__ = [
    # Drill
    'DrillTypeSerializer',
    'DrillParticipantSerializer',
    'DrillEvaluationSerializer',
    'DrillDeficiencySerializer',
    'DrillEquipmentCheckSerializer',
    'CorrectiveActionSerializer',
    'DrillSerializer',
    'DrillDetailSerializer',
    'DrillScheduleSerializer',
    'DrillCompleteSerializer',
    'DrillReasonSerializer',

    # Document
    'DocumentCategorySerializer',
    'DocumentReviewSerializer',
    'DocumentSerializer',
    'DocumentDetailSerializer',
    'DocumentCreateSerializer',
    'DocumentUpdateSerializer',
    'DocumentSubmitSerializer',
    'DocumentApproveSerializer',
    'DocumentRejectSerializer',
    'DocumentMarkReviewedSerializer',
    'DocumentAcknowledgmentSerializer',
    'AcknowledgeSerializer',

    # Certificate
    'CertificateSerializer',

    # Emergency
    'EmergencyContactSerializer',
    'EmergencyProcedureSerializer',
]
