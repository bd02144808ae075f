from rest_framework import serializers

from apps.api.fields import RoundedDecimalField


def _money(**kwargs):
    return serializers.DecimalField(
        max_digits=12, decimal_places=2, coerce_to_string=False, **kwargs
    )


class ShippingRateSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField()
    price = _money()
    estimatedDays = serializers.CharField(source="estimated_days")


class ShippingRatesResponseSerializer(serializers.Serializer):
    country = serializers.CharField()
    rates = ShippingRateSerializer(many=True)


class CurrencySerializer(serializers.Serializer):
    code = serializers.CharField()
    symbol = serializers.CharField()
    name = serializers.CharField()
    decimals = serializers.IntegerField()
    rate = serializers.DecimalField(
        max_digits=18, decimal_places=8, coerce_to_string=False, allow_null=True
    )


class CurrencyRatesSerializer(serializers.Serializer):
    base = serializers.CharField()
    currencies = CurrencySerializer(many=True)


class ShippingAddressSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True)
    line1 = serializers.CharField(required=False, allow_blank=True)
    line2 = serializers.CharField(required=False, allow_blank=True)
    city = serializers.CharField(required=False, allow_blank=True)
    state = serializers.CharField(required=False, allow_blank=True)
    postalCode = serializers.CharField(source="postal_code", required=False, allow_blank=True)
    country = serializers.CharField(required=False, allow_blank=True)


class OrderLineSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField(required=False, allow_blank=True)
    quantity = serializers.IntegerField(min_value=1, default=1)
    price = RoundedDecimalField(max_digits=12, required=False, min_value=0)


class PaymentIntentRequestSerializer(serializers.Serializer):
    amount = RoundedDecimalField(max_digits=12, min_value=0)
    currency = serializers.CharField(max_length=3, required=False, allow_blank=True)
    shippingCost = RoundedDecimalField(max_digits=12, source="shipping_cost", required=False, min_value=0)
    shippingMethod = serializers.CharField(source="shipping_method", required=False, allow_blank=True)
    shippingAddress = ShippingAddressSerializer(source="shipping_address", required=False)
    items = OrderLineSerializer(many=True, required=False)
    metadata = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False)


class PaymentIntentResponseSerializer(serializers.Serializer):
    clientSecret = serializers.CharField(source="client_secret")
    paymentIntentId = serializers.CharField(source="payment_intent_id")


class OrderEmailRequestSerializer(serializers.Serializer):
    paymentIntentId = serializers.CharField(source="payment_intent_id")
    customerEmail = serializers.EmailField(source="customer_email")
    customerName = serializers.CharField(source="customer_name", required=False, allow_blank=True)


class OrderEmailResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    orderId = serializers.CharField(source="order_id")
    recipients = serializers.ListField(child=serializers.CharField())
