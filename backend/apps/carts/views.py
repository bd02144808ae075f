from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.activities.container import build_activity_service
from apps.activities.models import ActivityType
from apps.api.schemas import ErrorResponseSerializer
from apps.api.utils import error_response, service_error_response
from apps.common import get_logger
from .commands import CartItemInput, CartSyncCommand
from .container import build_cart_service
from .serializers import (
    CartAddItemRequestSerializer,
    CartItemResultSerializer,
    CartMergeGuestRequestSerializer,
    CartMergeResultSerializer,
    CartRemoveResultSerializer,
    CartResponseSerializer,
    CartSyncRequestSerializer,
    CartSyncResultSerializer,
    CartUpdateQuantityRequestSerializer,
)

logger = get_logger(__name__).bind(component="carts", layer="view")

SESSION_HEADER = "X-Session-ID"

SESSION_PARAMETER = OpenApiParameter(
    SESSION_HEADER, str, OpenApiParameter.HEADER, required=False
)


@extend_schema(tags=["Cart"])
class CartView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_cart_service()
    activities = build_activity_service()
    log = logger.bind(view="CartView")

    @extend_schema(summary="Get the current user's cart", responses={200: CartResponseSerializer})
    def get(self, request):
        cart = self.service.get_cart(request.user.id)
        return Response(CartResponseSerializer({"cart": cart}).data)

    @extend_schema(summary="Clear the current user's cart", responses={200: CartResponseSerializer})
    def delete(self, request):
        self.log.info("Clearing cart", user_id=request.user.id)
        cart = self.service.clear(request.user.id)
        self.activities.record_from_request(
            request, ActivityType.CART_CLEARED, description="Cart cleared"
        )
        return Response(CartResponseSerializer({"cart": cart}).data)


@extend_schema(tags=["Cart"])
class CartItemListView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_cart_service()
    activities = build_activity_service()
    log = logger.bind(view="CartItemListView")

    @extend_schema(
        summary="Add an item to the cart",
        description="Existing lines are incremented. Prices are taken from the catalog.",
        request=CartAddItemRequestSerializer,
        responses={
            200: CartItemResultSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = CartAddItemRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        item = CartItemInput.from_raw(data["item"])
        result, error = self.service.add_item(request.user.id, item, data.get("quantity"))
        if error:
            return service_error_response(error)
        self.activities.record_from_request(
            request,
            ActivityType.CART_ITEM_ADDED,
            description=f"Added {item.name or item.id} to cart",
            metadata={
                "itemId": item.id,
                "productId": item.product_id,
                "quantity": result.quantity,
            },
        )
        return Response(CartItemResultSerializer(result).data)


@extend_schema(tags=["Cart"])
class CartItemDetailView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_cart_service()
    activities = build_activity_service()
    log = logger.bind(view="CartItemDetailView")

    @extend_schema(
        summary="Set an item's quantity (0 removes it)",
        request=CartUpdateQuantityRequestSerializer,
        responses={
            200: CartItemResultSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def put(self, request, item_id: str):
        serializer = CartUpdateQuantityRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quantity = serializer.validated_data["quantity"]
        result, error = self.service.update_quantity(request.user.id, item_id, quantity)
        if error:
            return service_error_response(error)
        activity = ActivityType.CART_ITEM_REMOVED if quantity == 0 else ActivityType.CART_ITEM_UPDATED
        self.activities.record_from_request(
            request,
            activity,
            description=f"Set {item_id} quantity to {quantity}",
            metadata={"itemId": item_id, "quantity": quantity},
        )
        return Response(CartItemResultSerializer(result).data)

    @extend_schema(
        summary="Remove an item from the cart",
        responses={
            200: CartRemoveResultSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def delete(self, request, item_id: str):
        cart, error = self.service.remove_item(request.user.id, item_id)
        if error:
            return service_error_response(error)
        self.activities.record_from_request(
            request,
            ActivityType.CART_ITEM_REMOVED,
            description=f"Removed {item_id} from cart",
            metadata={"itemId": item_id},
        )
        return Response(CartRemoveResultSerializer({"cart": cart, "removedItemId": item_id}).data)


@extend_schema(tags=["Cart"])
class CartSyncView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_cart_service()
    log = logger.bind(view="CartSyncView")

    @extend_schema(
        summary="Reconcile a client cart with the server cart",
        request=CartSyncRequestSerializer,
        responses={
            200: CartSyncResultSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = CartSyncRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.service.sync(
            request.user.id, CartSyncCommand.from_raw(serializer.validated_data)
        )
        return Response(CartSyncResultSerializer(result).data)


@extend_schema(tags=["Cart"])
class CartMergeGuestView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_cart_service()
    log = logger.bind(view="CartMergeGuestView")

    @extend_schema(
        summary="Merge a guest cart into the user's cart after login",
        parameters=[SESSION_PARAMETER],
        request=CartMergeGuestRequestSerializer,
        responses={
            200: CartMergeResultSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = CartMergeGuestRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.service.merge_guest(
            request.user.id,
            CartItemInput.many_from_raw(serializer.validated_data["guest_cart"]),
            session_id=request.headers.get(SESSION_HEADER) or None,
        )
        return Response(CartMergeResultSerializer(result).data)


@extend_schema(tags=["Cart"])
class GuestCartView(APIView):
    permission_classes = [AllowAny]
    service = build_cart_service()
    log = logger.bind(view="GuestCartView")

    @extend_schema(
        summary="Get the anonymous cart for a session",
        parameters=[
            OpenApiParameter(SESSION_HEADER, str, OpenApiParameter.HEADER, required=True)
        ],
        responses={
            200: CartResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request):
        session_id = (request.headers.get(SESSION_HEADER) or "").strip()
        if not session_id:
            return error_response(
                "VALIDATION_ERROR", "Session ID is required", {"header": SESSION_HEADER}
            )
        cart = self.service.guest_cart(session_id)
        return Response(CartResponseSerializer({"cart": cart}).data)
