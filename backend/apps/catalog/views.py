from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.activities.container import build_activity_service
from apps.activities.models import ActivityType
from apps.api.permissions import CatalogWritePermission
from apps.api.schemas import ErrorResponseSerializer
from apps.api.utils import error_response, service_error_response
from apps.common import get_logger
from .container import build_category_service, build_product_service
from .serializers import (
    CategorySerializer,
    ProductPageSerializer,
    ProductReadSerializer,
    ProductWriteSerializer,
)

logger = get_logger(__name__).bind(component="catalog", layer="view")


@extend_schema(tags=["Catalog"])
class ProductListView(APIView):
    permission_classes = [CatalogWritePermission]
    service = build_product_service()
    activities = build_activity_service()
    log = logger.bind(view="ProductListView")

    @extend_schema(
        operation_id="products_list",
        summary="List products",
        description="Supports pagination via ?page and ?limit. Cached results may be served.",
        parameters=[
            OpenApiParameter("page", int, required=False),
            OpenApiParameter("limit", int, required=False),
            OpenApiParameter("category", str, description="Category slug or name", required=False),
            OpenApiParameter("search", str, required=False),
            OpenApiParameter("featured", bool, required=False),
        ],
        responses={
            200: ProductPageSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request):
        self.log.debug("Handling product list request", params=dict(request.query_params))
        page, error = self.service.list_products(request.query_params)
        if error:
            return service_error_response(error)
        return Response(ProductPageSerializer(page).data)

    @extend_schema(
        summary="Create product",
        request=ProductWriteSerializer,
        responses={
            201: ProductReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            403: OpenApiResponse(response=ErrorResponseSerializer),
            409: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.log.info("Creating product via API", name=serializer.validated_data.get("name"))
        dto, error = self.service.create_product(serializer.validated_data)
        if error:
            return service_error_response(error)
        self.activities.record_from_request(
            request,
            ActivityType.PRODUCT_CREATED,
            description=f"Created product {dto.name}",
            metadata={"productId": dto.id},
        )
        return Response(ProductReadSerializer(dto).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["Catalog"])
class ProductDetailView(APIView):
    permission_classes = [CatalogWritePermission]
    service = build_product_service()
    activities = build_activity_service()
    log = logger.bind(view="ProductDetailView")

    @extend_schema(
        operation_id="products_retrieve",
        summary="Get product",
        parameters=[OpenApiParameter("product_id", str, OpenApiParameter.PATH)],
        responses={
            200: ProductReadSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, product_id: str):
        self.log.debug("Fetching product detail", product_id=product_id)
        dto = self.service.get_product(product_id)
        if not dto:
            return error_response(
                "PRODUCT_NOT_FOUND", "Product not found", {"id": product_id}
            )
        return Response(ProductReadSerializer(dto).data)

    def _update(self, request, product_id: str, partial: bool):
        serializer = ProductWriteSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        dto, error = self.service.update_product(product_id, serializer.validated_data)
        if error:
            return service_error_response(error)
        self.activities.record_from_request(
            request,
            ActivityType.PRODUCT_UPDATED,
            description=f"Updated product {dto.name}",
            metadata={"productId": dto.id, "fields": sorted(request.data.keys())},
        )
        return Response(ProductReadSerializer(dto).data)

    @extend_schema(
        summary="Replace product",
        request=ProductWriteSerializer,
        responses={
            200: ProductReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def put(self, request, product_id: str):
        self.log.info("Replacing product", product_id=product_id)
        return self._update(request, product_id, partial=False)

    @extend_schema(
        summary="Update product",
        request=ProductWriteSerializer,
        responses={
            200: ProductReadSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def patch(self, request, product_id: str):
        self.log.info("Patching product", product_id=product_id)
        return self._update(request, product_id, partial=True)

    @extend_schema(
        summary="Delete product (admin only)",
        responses={
            204: None,
            403: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def delete(self, request, product_id: str):
        self.log.info("Deleting product", product_id=product_id)
        _, error = self.service.delete_product(product_id)
        if error:
            return service_error_response(error)
        self.activities.record_from_request(
            request,
            ActivityType.PRODUCT_DELETED,
            description=f"Deleted product {product_id}",
            metadata={"productId": product_id},
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(tags=["Catalog"])
class CategoryListView(APIView):
    permission_classes = [CatalogWritePermission]
    service = build_category_service()
    activities = build_activity_service()
    log = logger.bind(view="CategoryListView")

    @extend_schema(summary="List categories", responses={200: CategorySerializer(many=True)})
    def get(self, request):
        self.log.debug("Listing categories")
        return Response(CategorySerializer(self.service.list_categories(), many=True).data)

    @extend_schema(
        summary="Create category",
        request=CategorySerializer,
        responses={
            201: CategorySerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            409: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = CategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto, error = self.service.create_category(serializer.validated_data)
        if error:
            return service_error_response(error)
        self.activities.record_from_request(
            request,
            ActivityType.CATEGORY_CREATED,
            description=f"Created category {dto.name}",
            metadata={"categoryId": dto.id},
        )
        return Response(CategorySerializer(dto).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["Catalog"])
class CategoryDetailView(APIView):
    permission_classes = [CatalogWritePermission]
    service = build_category_service()
    activities = build_activity_service()
    log = logger.bind(view="CategoryDetailView")

    @extend_schema(
        summary="Get category",
        responses={
            200: CategorySerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, category_id: int):
        dto = self.service.get_category(category_id)
        if not dto:
            return error_response("NOT_FOUND", "Category not found", {"id": str(category_id)})
        return Response(CategorySerializer(dto).data)

    @extend_schema(
        summary="Update category",
        request=CategorySerializer,
        responses={
            200: CategorySerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer),
            409: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def patch(self, request, category_id: int):
        serializer = CategorySerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        dto, error = self.service.update_category(category_id, serializer.validated_data)
        if error:
            return service_error_response(error)
        self.activities.record_from_request(
            request,
            ActivityType.CATEGORY_UPDATED,
            description=f"Updated category {dto.name}",
            metadata={"categoryId": dto.id},
        )
        return Response(CategorySerializer(dto).data)

    @extend_schema(
        summary="Delete category (admin only)",
        responses={204: None, 404: OpenApiResponse(response=ErrorResponseSerializer)},
    )
    def delete(self, request, category_id: int):
        _, error = self.service.delete_category(category_id)
        if error:
            return service_error_response(error)
        self.activities.record_from_request(
            request,
            ActivityType.CATEGORY_DELETED,
            description=f"Deleted category {category_id}",
            metadata={"categoryId": category_id},
        )
        return Response(status=status.HTTP_204_NO_CONTENT)
