# services/safety-service/src/apps/api/serializers/drill.py
"""
Drill Serializers
"""

from rest_framework import serializers

from apps.core.models import (
    CorrectiveAction,
    Drill,
    DrillDeficiency,
    DrillEquipmentCheck,
    DrillEvaluation,
    DrillParticipant,
    DrillType,
)


class DrillTypeSerializer(serializers.ModelSerializer):
    category_display = serializers.CharField(source='get_category_display', read_only=True)

    class Meta:
        model = DrillType
        fields = [
            'id', 'organization_id', 'name', 'description',
            'category', 'category_display', 'minimum_frequency',
            'solas_reference', 'default_objectives', 'default_equipment',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'organization_id', 'created_at', 'updated_at']


# =============================================================================
# Sub-records
# =============================================================================

class DrillParticipantSerializer(serializers.ModelSerializer):
    class Meta:
        model = DrillParticipant
        fields = [
            'id', 'user_id', 'station_assignment', 'expected_to_attend',
            'attended', 'absent_reason', 'arrival_delay_minutes',
            'performance_rating', 'comments',
        ]
        read_only_fields = ['id']


class DrillEvaluationSerializer(serializers.ModelSerializer):
    class Meta:
        model = DrillEvaluation
        fields = ['id', 'objective_index', 'objective_text', 'achieved', 'notes', 'evaluator_id']
        read_only_fields = ['id']
        extra_kwargs = {'objective_text': {'required': False, 'allow_blank': True}}


class DrillDeficiencySerializer(serializers.ModelSerializer):
    severity_display = serializers.CharField(source='get_severity_display', read_only=True)
    corrective_action_number = serializers.CharField(
        source='corrective_action.action_number',
        read_only=True,
        default=None
    )

    class Meta:
        model = DrillDeficiency
        fields = [
            'id', 'description', 'severity', 'severity_display',
            'photo_urls', 'corrective_action', 'corrective_action_number',
        ]
        read_only_fields = ['id', 'corrective_action']


class DrillEquipmentCheckSerializer(serializers.ModelSerializer):
    class Meta:
        model = DrillEquipmentCheck
        fields = ['id', 'equipment_name', 'used', 'status', 'notes']
        read_only_fields = ['id']


class CorrectiveActionSerializer(serializers.ModelSerializer):
    class Meta:
        model = CorrectiveAction
        fields = [
            'id', 'action_number', 'action_type', 'description', 'status',
            'source_drill', 'assigned_by_id', 'assigned_to_id', 'due_date',
            'closed_at', 'created_at',
        ]
        read_only_fields = fields


# =============================================================================
# Drill
# =============================================================================

class DrillSerializer(serializers.ModelSerializer):
    """List representation of a drill."""

    drill_type_name = serializers.CharField(source='drill_type.name', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Drill
        fields = [
            'id', 'organization_id', 'drill_number', 'vessel_id',
            'drill_type', 'drill_type_name',
            'drill_date_scheduled', 'drill_date_actual',
            'status', 'status_display', 'overall_rating',
            'version', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class DrillDetailSerializer(DrillSerializer):
    participants = DrillParticipantSerializer(many=True, read_only=True)
    evaluations = DrillEvaluationSerializer(many=True, read_only=True)
    deficiencies = DrillDeficiencySerializer(many=True, read_only=True)
    equipment_checks = DrillEquipmentCheckSerializer(many=True, read_only=True)
    corrective_actions = CorrectiveActionSerializer(many=True, read_only=True)

    class Meta(DrillSerializer.Meta):
        fields = DrillSerializer.Meta.fields + [
            'drill_duration_minutes', 'scenario_description', 'objectives',
            'conducted_by_id', 'location', 'weather_conditions',
            'cancellation_reason', 'postponement_reason',
            'lessons_learned_positive', 'lessons_learned_improvement',
            'recommendations',
            'participants', 'evaluations', 'deficiencies',
            'equipment_checks', 'corrective_actions',
        ]
        read_only_fields = fields


class DrillScheduleSerializer(serializers.Serializer):
    vessel_id = serializers.UUIDField()
    drill_type_id = serializers.UUIDField()
    scheduled_date = serializers.DateField()
    scenario_description = serializers.CharField(required=False, allow_blank=True, default='')
    objectives = serializers.ListField(
        child=serializers.CharField(),
        required=False,
        allow_null=True,
        default=None
    )
    conducted_by_id = serializers.UUIDField(required=False, allow_null=True)
    location = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    weather_conditions = serializers.ChoiceField(
        choices=Drill.Weather.choices,
        required=False,
        allow_null=True
    )


class DrillCompleteSerializer(serializers.Serializer):
    actual_date = serializers.DateField()
    overall_rating = serializers.IntegerField(min_value=1, max_value=5)
    duration_minutes = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    lessons_learned_positive = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    lessons_learned_improvement = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    recommendations = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    weather_conditions = serializers.ChoiceField(
        choices=Drill.Weather.choices,
        required=False,
        allow_null=True
    )
    participants = DrillParticipantSerializer(many=True, required=False)
    evaluations = DrillEvaluationSerializer(many=True, required=False)
    equipment_checks = DrillEquipmentCheckSerializer(many=True, required=False)
    deficiencies = DrillDeficiencySerializer(many=True, required=False)


class DrillReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=True)
