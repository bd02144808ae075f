from rest_framework import serializers


class ContentSerializer(serializers.Serializer):
    id = serializers.CharField()
    page = serializers.CharField()
    title = serializers.CharField()
    content = serializers.JSONField()
    documentUrl = serializers.CharField(source="document_url", allow_null=True)
    updatedBy = serializers.CharField(source="updated_by", allow_null=True)
    createdAt = serializers.CharField(source="created_at")
    updatedAt = serializers.CharField(source="updated_at")


class ContentUpdateSerializer(serializers.Serializer):
    content = serializers.JSONField()
    documentUrl = serializers.URLField(
        source="document_url", required=False, allow_blank=True, allow_null=True
    )
