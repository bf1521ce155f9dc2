# services/safety-service/src/apps/api/serializers/certificate.py
"""
Certificate Serializers
"""

from rest_framework import serializers

from apps.core.models import Certificate


class CertificateSerializer(serializers.ModelSerializer):
    certificate_type_display = serializers.CharField(
        source='get_certificate_type_display',
        read_only=True
    )
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    expiry = serializers.SerializerMethodField()

    class Meta:
        model = Certificate
        fields = [
            'id', 'organization_id', 'certificate_type', 'certificate_type_display',
            'name', 'certificate_number', 'issuing_authority',
            'vessel_id', 'crew_id', 'issue_date', 'expiry_date',
            'status', 'status_display', 'expiry', 'notes',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'organization_id', 'created_at', 'updated_at']

    def validate(self, attrs):
        issue_date = attrs.get('issue_date', getattr(self.instance, 'issue_date', None))
        expiry_date = attrs.get('expiry_date', getattr(self.instance, 'expiry_date', None))
        if issue_date and expiry_date and expiry_date < issue_date:
            raise serializers.ValidationError({'expiry_date': 'Expiry date cannot precede issue date'})
        return attrs

    def get_expiry(self, obj):
        service = self.context.get('service')
        today = self.context.get('today')
        if service is None or today is None:
            return None
        status = service.expiry_status(obj, today)
        return status.to_dict() if status else None
