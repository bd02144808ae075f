from rest_framework import serializers


class ContactRequestSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=40)
    message = serializers.CharField(max_length=5000)


class ContactResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
