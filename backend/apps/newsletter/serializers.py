from rest_framework import serializers


class SubscribeRequestSerializer(serializers.Serializer):
    email = serializers.CharField(max_length=254)
    locale = serializers.CharField(max_length=10, required=False, allow_blank=True)


class SubscriptionDataSerializer(serializers.Serializer):
    id = serializers.IntegerField(allow_null=True)
    email = serializers.CharField()
    registeredAt = serializers.CharField(source="registered_at", allow_null=True)
    needsConfirmation = serializers.BooleanField(source="needs_confirmation")


class SubscribeResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    data = SubscriptionDataSerializer()
