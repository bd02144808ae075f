from rest_framework import serializers

from apps.api.schemas import PaginationSerializer


def _price_field(**kwargs):
    return serializers.DecimalField(
        max_digits=10, decimal_places=2, coerce_to_string=False, **kwargs
    )


class CategorySerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(max_length=100)
    slug = serializers.SlugField(max_length=120, required=False)
    description = serializers.CharField(required=False, allow_blank=True)


class VariantSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    image = serializers.CharField(allow_blank=True, required=False, default="")
    price = _price_field(min_value=0)


class ProductItemReadSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    category = serializers.CharField(allow_null=True)
    price = _price_field()
    image = serializers.CharField(allow_blank=True)
    inStock = serializers.BooleanField(source="in_stock")
    details = serializers.JSONField()
    variants = VariantSerializer(many=True)


class ProductReadSerializer(ProductItemReadSerializer):
    isFeatured = serializers.BooleanField(source="is_featured")
    isNew = serializers.BooleanField(source="is_new")
    isCustom = serializers.BooleanField(source="is_custom")
    items = ProductItemReadSerializer(many=True)
    createdAt = serializers.CharField(source="created_at")
    updatedAt = serializers.CharField(source="updated_at")


class ProductPageSerializer(serializers.Serializer):
    products = ProductReadSerializer(many=True)
    pagination = PaginationSerializer()


class ProductItemWriteSerializer(serializers.Serializer):
    id = serializers.SlugField(max_length=120, required=False)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    category = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    price = _price_field(min_value=0)
    image = serializers.CharField(required=False, allow_blank=True)
    inStock = serializers.BooleanField(source="in_stock", required=False)
    details = serializers.DictField(required=False)
    variants = VariantSerializer(many=True, required=False)

    def validate_variants(self, value):
        names = [v["name"] for v in value]
        if len(names) != len(set(names)):
            raise serializers.ValidationError("Variant names must be unique.")
        return value


class ProductWriteSerializer(ProductItemWriteSerializer):
    isFeatured = serializers.BooleanField(source="is_featured", required=False)
    isNew = serializers.BooleanField(source="is_new", required=False)
    isCustom = serializers.BooleanField(source="is_custom", required=False)
    items = ProductItemWriteSerializer(many=True, required=False)
