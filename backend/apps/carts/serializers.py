from rest_framework import serializers

from apps.api.fields import RoundedDecimalField
from .commands import MERGE_STRATEGIES


def _price_field(**kwargs):
    return serializers.DecimalField(
        max_digits=10, decimal_places=2, coerce_to_string=False, **kwargs
    )


class CartLineSerializer(serializers.Serializer):
    id = serializers.CharField()
    productId = serializers.CharField(source="product_id")
    name = serializers.CharField()
    price = _price_field()
    image = serializers.CharField(allow_blank=True)
    category = serializers.CharField(allow_blank=True)
    description = serializers.CharField(allow_blank=True)
    quantity = serializers.IntegerField()
    variantName = serializers.CharField(source="variant_name", allow_null=True)
    customItems = serializers.JSONField(source="custom_items", allow_null=True)
    basketItems = serializers.JSONField(source="basket_items", allow_null=True)
    createdAt = serializers.CharField(source="created_at")
    updatedAt = serializers.CharField(source="updated_at")


class CartSerializer(serializers.Serializer):
    id = serializers.CharField()
    userId = serializers.CharField(source="user_id", allow_null=True)
    sessionId = serializers.CharField(source="session_id", allow_null=True)
    items = CartLineSerializer(many=True)
    totalPrice = _price_field(source="total_price")
    totalItems = serializers.IntegerField(source="total_items")
    lastSyncedAt = serializers.CharField(source="last_synced_at", allow_null=True)
    createdAt = serializers.CharField(source="created_at")
    updatedAt = serializers.CharField(source="updated_at")


class CartResponseSerializer(serializers.Serializer):
    cart = CartSerializer()


class CartItemSummarySerializer(serializers.Serializer):
    id = serializers.CharField(source="item_id")
    quantity = serializers.IntegerField()


class CartItemResultSerializer(serializers.Serializer):
    cart = CartSerializer()
    item = CartItemSummarySerializer(source="*")


class CartRemoveResultSerializer(serializers.Serializer):
    cart = CartSerializer()
    removedItemId = serializers.CharField()


class CartConflictSerializer(serializers.Serializer):
    itemId = serializers.CharField(source="item_id")
    localQuantity = serializers.IntegerField(source="local_quantity")
    serverQuantity = serializers.IntegerField(source="server_quantity")
    resolution = serializers.CharField()


class CartSyncResultSerializer(serializers.Serializer):
    cart = CartSerializer()
    conflicts = CartConflictSerializer(many=True, required=False)
    syncedAt = serializers.CharField(source="synced_at")

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not data.get("conflicts"):
            data.pop("conflicts", None)
        return data


class CartMergeResultSerializer(serializers.Serializer):
    cart = CartSerializer()
    mergedItems = serializers.ListField(source="merged_items", child=serializers.CharField())


class CartItemInputSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=255)
    productId = serializers.CharField(source="product_id", max_length=255, required=False)
    name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    price = RoundedDecimalField(required=False, min_value=0)
    image = serializers.CharField(required=False, allow_blank=True)
    category = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    quantity = serializers.IntegerField(required=False, min_value=1)
    variantName = serializers.CharField(
        source="variant_name", required=False, allow_blank=True, allow_null=True
    )
    customItems = serializers.ListField(
        source="custom_items",
        child=serializers.DictField(),
        required=False,
        allow_null=True,
    )
    basketItems = serializers.ListField(
        source="basket_items",
        child=serializers.DictField(),
        required=False,
        allow_null=True,
    )


class CartAddItemRequestSerializer(serializers.Serializer):
    item = CartItemInputSerializer()
    quantity = serializers.IntegerField(required=False, min_value=1)


class CartUpdateQuantityRequestSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


class CartSyncRequestSerializer(serializers.Serializer):
    localCart = serializers.ListField(source="local_cart", child=CartItemInputSerializer())
    lastSyncedAt = serializers.DateTimeField(
        source="last_synced_at", required=False, allow_null=True
    )
    mergeStrategy = serializers.ChoiceField(
        source="merge_strategy", choices=MERGE_STRATEGIES, default="merge"
    )


class CartMergeGuestRequestSerializer(serializers.Serializer):
    guestCart = serializers.ListField(source="guest_cart", child=CartItemInputSerializer())
