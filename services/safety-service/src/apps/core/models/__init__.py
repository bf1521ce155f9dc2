"""
Safety Service Models

Drills, controlled documents, acknowledgments, certificates and emergency
reference data.
"""

from .obligation import DrillType, DrillNumberSequence
from .drill import (
    Drill,
    DrillParticipant,
    DrillEvaluation,
    DrillDeficiency,
    DrillEquipmentCheck,
    CorrectiveAction,
)
from .document import DocumentCategory, Document, DocumentReview
from .acknowledgment import DocumentAcknowledgment
from .certificate import Certificate
from .emergency import EmergencyContact, EmergencyProcedure

__all__ = [
    'DrillType',
    'DrillNumberSequence',
    'Drill',
    'DrillParticipant',
    'DrillEvaluation',
    'DrillDeficiency',
    'DrillEquipmentCheck',
    'CorrectiveAction',
    'DocumentCategory',
    'Document',
    'DocumentReview',
    'DocumentAcknowledgment',
    'Certificate',
    'EmergencyContact',
    'EmergencyProcedure',
]
