from django.contrib import admin
from .models import (
    Certificate,
    CorrectiveAction,
    Document,
    DocumentAcknowledgment,
    DocumentCategory,
    DocumentReview,
    Drill,
    DrillDeficiency,
    DrillEquipmentCheck,
    DrillEvaluation,
    DrillParticipant,
    DrillType,
    EmergencyContact,
    EmergencyProcedure,
)


@admin.register(DrillType)
class DrillTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'minimum_frequency', 'solas_reference', 'is_active']
    list_filter = ['category', 'is_active']
    search_fields = ['name', 'solas_reference']
    ordering = ['name']


class DrillParticipantInline(admin.TabularInline):
    model = DrillParticipant
    extra = 0


class DrillEvaluationInline(admin.TabularInline):
    model = DrillEvaluation
    extra = 0


class DrillDeficiencyInline(admin.TabularInline):
    model = DrillDeficiency
    extra = 0


class DrillEquipmentCheckInline(admin.TabularInline):
    model = DrillEquipmentCheck
    extra = 0


@admin.register(Drill)
class DrillAdmin(admin.ModelAdmin):
    list_display = ['drill_number', 'drill_type', 'vessel_id', 'drill_date_scheduled', 'drill_date_actual', 'status']
    list_filter = ['status', 'drill_type']
    search_fields = ['drill_number', 'scenario_description']
    ordering = ['-drill_date_scheduled']
    readonly_fields = ['drill_number', 'version']
    inlines = [
        DrillParticipantInline,
        DrillEvaluationInline,
        DrillDeficiencyInline,
        DrillEquipmentCheckInline,
    ]


@admin.register(CorrectiveAction)
class CorrectiveActionAdmin(admin.ModelAdmin):
    list_display = ['action_number', 'action_type', 'status', 'due_date', 'assigned_to_id']
    list_filter = ['status', 'action_type']
    search_fields = ['action_number', 'description']
    ordering = ['due_date']


@admin.register(DocumentCategory)
class DocumentCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'color']
    search_fields = ['name']


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    list_display = ['document_number', 'title', 'revision', 'status', 'is_mandatory_read', 'next_review_date']
    list_filter = ['status', 'is_mandatory_read', 'category']
    search_fields = ['document_number', 'title']
    ordering = ['document_number']
    readonly_fields = ['version']


@admin.register(DocumentReview)
class DocumentReviewAdmin(admin.ModelAdmin):
    list_display = ['document', 'kind', 'review_date', 'due_date', 'next_review_date']
    list_filter = ['kind']
    ordering = ['-review_date']


@admin.register(DocumentAcknowledgment)
class DocumentAcknowledgmentAdmin(admin.ModelAdmin):
    list_display = ['document', 'user_id', 'acknowledged_at']
    search_fields = ['document__document_number']
    ordering = ['-acknowledged_at']


@admin.register(Certificate)
class CertificateAdmin(admin.ModelAdmin):
    list_display = ['name', 'certificate_type', 'certificate_number', 'expiry_date', 'status']
    list_filter = ['certificate_type', 'status']
    search_fields = ['name', 'certificate_number']
    ordering = ['expiry_date']


@admin.register(EmergencyContact)
class EmergencyContactAdmin(admin.ModelAdmin):
    list_display = ['organization_name', 'category', 'primary_phone', 'available_24_7', 'display_order']
    list_filter = ['category', 'available_24_7']
    ordering = ['display_order']


@admin.register(EmergencyProcedure)
class EmergencyProcedureAdmin(admin.ModelAdmin):
    list_display = ['title', 'emergency_type', 'muster_station', 'responsible_officer']
    list_filter = ['emergency_type']
