# services/safety-service/src/apps/api/serializers/emergency.py

from rest_framework import serializers

from apps.core.models import EmergencyContact, EmergencyProcedure


class EmergencyContactSerializer(serializers.ModelSerializer):
    category_display = serializers.CharField(source='get_category_display', read_only=True)

    class Meta:
        model = EmergencyContact
        fields = [
            'id', 'vessel_id', 'category', 'category_display',
            'organization_name', 'contact_name', 'primary_phone',
            'secondary_phone', 'email', 'available_24_7', 'display_order',
        ]
        read_only_fields = ['id']


class EmergencyProcedureSerializer(serializers.ModelSerializer):
    emergency_type_display = serializers.CharField(
        source='get_emergency_type_display',
        read_only=True
    )

    class Meta:
        model = EmergencyProcedure
        fields = [
            'id', 'vessel_id', 'emergency_type', 'emergency_type_display',
            'title', 'muster_station', 'key_actions', 'responsible_officer',
        ]
        read_only_fields = ['id']
