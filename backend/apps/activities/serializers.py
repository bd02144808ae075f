from rest_framework import serializers

from apps.api.schemas import PaginationSerializer


class ActivityUserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    email = serializers.EmailField()
    firstName = serializers.CharField(source="first_name", allow_null=True)
    lastName = serializers.CharField(source="last_name", allow_null=True)
    fullName = serializers.CharField(source="full_name", allow_null=True)
    role = serializers.CharField()


class ActivitySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    type = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    userId = serializers.IntegerField(source="user_id", allow_null=True)
    user = ActivityUserSerializer(allow_null=True)
    sessionId = serializers.CharField(source="session_id", allow_blank=True)
    ipAddress = serializers.CharField(source="ip_address", allow_null=True)
    userAgent = serializers.CharField(source="user_agent", allow_blank=True)
    metadata = serializers.JSONField()
    createdAt = serializers.CharField(source="created_at")


class ActivityPageSerializer(serializers.Serializer):
    activities = ActivitySerializer(many=True)
    pagination = PaginationSerializer()


class ActivityCountSerializer(serializers.Serializer):
    type = serializers.CharField()
    count = serializers.IntegerField()


class ActivityStatsSerializer(serializers.Serializer):
    activityCounts = ActivityCountSerializer(source="activity_counts", many=True)
    totalUniqueUsers = serializers.IntegerField(source="total_unique_users")
    recentActivitiesCount = serializers.IntegerField(source="recent_activities_count")
    dateRange = serializers.DictField(
        source="date_range", child=serializers.CharField(), allow_null=True
    )
