# services/safety-service/src/apps/api/serializers/document.py
"""
Document Serializers
"""

from rest_framework import serializers

from apps.core.models import (
    Document,
    DocumentAcknowledgment,
    DocumentCategory,
    DocumentReview,
)


class DocumentCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = DocumentCategory
        fields = ['id', 'name', 'color']
        read_only_fields = ['id']


class DocumentReviewSerializer(serializers.ModelSerializer):
    kind_display = serializers.CharField(source='get_kind_display', read_only=True)
    on_time = serializers.BooleanField(read_only=True)

    class Meta:
        model = DocumentReview
        fields = [
            'id', 'kind', 'kind_display', 'reviewer_id', 'comments',
            'review_date', 'due_date', 'next_review_date', 'on_time', 'created_at',
        ]
        read_only_fields = fields


class DocumentSerializer(serializers.ModelSerializer):
    """Document representation with its review urgency."""

    status_display = serializers.CharField(source='get_status_display', read_only=True)
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    review_urgency = serializers.SerializerMethodField()

    class Meta:
        model = Document
        fields = [
            'id', 'organization_id', 'document_number', 'title', 'description',
            'revision', 'category', 'category_name', 'vessel_id', 'is_mandatory_read',
            'status', 'status_display',
            'author_id', 'reviewer_id', 'approver_id', 'approved_by_id',
            'issue_date', 'approved_date', 'next_review_date', 'review_urgency',
            'version', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_review_urgency(self, obj):
        service = self.context.get('service')
        today = self.context.get('today')
        if service is None or today is None:
            return None
        return service.review_urgency(obj, today)


class DocumentDetailSerializer(DocumentSerializer):
    reviews = DocumentReviewSerializer(many=True, read_only=True)

    class Meta(DocumentSerializer.Meta):
        fields = DocumentSerializer.Meta.fields + ['reviews']
        read_only_fields = fields


class DocumentCreateSerializer(serializers.Serializer):
    document_number = serializers.CharField(max_length=50)
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    revision = serializers.CharField(max_length=20, required=False)
    category = serializers.PrimaryKeyRelatedField(
        queryset=DocumentCategory.objects.all(),
        required=False,
        allow_null=True
    )
    vessel_id = serializers.UUIDField(required=False, allow_null=True)
    is_mandatory_read = serializers.BooleanField(required=False, default=False)


class DocumentUpdateSerializer(serializers.ModelSerializer):
    """Descriptive fields only; workflow fields move through actions."""

    class Meta:
        model = Document
        fields = ['title', 'description', 'revision', 'category', 'vessel_id', 'is_mandatory_read']


class DocumentSubmitSerializer(serializers.Serializer):
    reviewer_id = serializers.UUIDField(required=False, allow_null=True)
    approver_id = serializers.UUIDField(required=False, allow_null=True)


class DocumentApproveSerializer(serializers.Serializer):
    comments = serializers.CharField(required=False, allow_blank=True, default='')


class DocumentRejectSerializer(serializers.Serializer):
    feedback = serializers.CharField(allow_blank=True)


class DocumentMarkReviewedSerializer(serializers.Serializer):
    next_review_date = serializers.DateField()
    comments = serializers.CharField(required=False, allow_blank=True, default='')


# =============================================================================
# Acknowledgments
# =============================================================================

class DocumentAcknowledgmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = DocumentAcknowledgment
        fields = ['id', 'document', 'user_id', 'acknowledged_at', 'ip_address']
        read_only_fields = fields


class AcknowledgeSerializer(serializers.Serializer):
    acknowledged_at = serializers.DateTimeField(required=False, allow_null=True)
