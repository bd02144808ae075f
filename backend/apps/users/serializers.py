from rest_framework import serializers

from .models import Role


class UserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    email = serializers.EmailField()
    username = serializers.CharField()
    firstName = serializers.CharField(source="first_name", allow_blank=True)
    lastName = serializers.CharField(source="last_name", allow_blank=True)
    phone = serializers.CharField(allow_null=True, allow_blank=True)
    role = serializers.ChoiceField(choices=Role.choices)
    isEmailVerified = serializers.BooleanField(source="is_email_verified")
    isActive = serializers.BooleanField(source="is_active")
    createdAt = serializers.CharField(source="date_joined", allow_null=True)
    lastLogin = serializers.CharField(source="last_login", allow_null=True)


class UserUpdateSerializer(serializers.Serializer):
    firstName = serializers.CharField(
        source="first_name", required=False, allow_blank=True, max_length=150
    )
    lastName = serializers.CharField(
        source="last_name", required=False, allow_blank=True, max_length=150
    )
    phone = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=50
    )
    role = serializers.ChoiceField(choices=Role.choices, required=False)
    isEmailVerified = serializers.BooleanField(
        source="is_email_verified", required=False
    )

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide at least one field to update.")
        return attrs


class UserListQuerySerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.choices, required=False)
    search = serializers.CharField(required=False, allow_blank=True)
