from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.activities.container import build_activity_service
from apps.activities.models import ActivityType
from apps.api.schemas import ErrorResponseSerializer
from apps.api.utils import service_error_response
from apps.common import get_logger
from .commands import OrderEmailCommand, PaymentIntentCommand
from .container import build_checkout_service
from .serializers import (
    CurrencyRatesSerializer,
    OrderEmailRequestSerializer,
    OrderEmailResponseSerializer,
    PaymentIntentRequestSerializer,
    PaymentIntentResponseSerializer,
    ShippingRatesResponseSerializer,
)

logger = get_logger(__name__).bind(component="checkout", layer="view")


@extend_schema(tags=["Checkout"])
class ShippingRatesView(APIView):
    permission_classes = [AllowAny]
    service = build_checkout_service()

    @extend_schema(
        summary="Shipping rates for a destination country",
        parameters=[OpenApiParameter("country", str, OpenApiParameter.QUERY, required=False)],
        responses={200: ShippingRatesResponseSerializer},
    )
    def get(self, request):
        country = (request.query_params.get("country") or "GB").strip().upper()
        rates = self.service.shipping_rates(country)
        return Response(ShippingRatesResponseSerializer({"country": country, "rates": rates}).data)


@extend_schema(tags=["Checkout"])
class CurrencyRatesView(APIView):
    permission_classes = [AllowAny]
    service = build_checkout_service()

    @extend_schema(summary="Supported currencies and GBP exchange rates", responses={200: CurrencyRatesSerializer})
    def get(self, request):
        return Response(CurrencyRatesSerializer(self.service.currency_rates_overview()).data)


@extend_schema(tags=["Checkout"])
class PaymentIntentView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_checkout_service()
    activities = build_activity_service()
    log = logger.bind(view="PaymentIntentView")

    @extend_schema(
        summary="Create a Stripe payment intent for the current cart",
        request=PaymentIntentRequestSerializer,
        responses={
            200: PaymentIntentResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            402: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = PaymentIntentRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cmd = PaymentIntentCommand.from_raw(serializer.validated_data)
        self.log.info(
            "Creating payment intent", user_id=request.user.id, currency=cmd.currency, amount=cmd.amount
        )
        dto, error = self.service.create_payment_intent(
            cmd, user_id=request.user.id, customer_email=getattr(request.user, "email", None)
        )
        if error:
            return service_error_response(error)
        self.activities.record_from_request(
            request,
            ActivityType.ORDER_CREATED,
            description=f"Checkout started for {cmd.amount} {cmd.currency or 'GBP'}",
            metadata={"orderId": dto.payment_intent_id, "items": len(cmd.items)},
        )
        return Response(PaymentIntentResponseSerializer(dto).data)


@extend_schema(tags=["Checkout"])
class OrderEmailView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_checkout_service()
    activities = build_activity_service()
    log = logger.bind(view="OrderEmailView")

    @extend_schema(
        summary="Send the order confirmation email for a paid intent",
        request=OrderEmailRequestSerializer,
        responses={
            200: OrderEmailResponseSerializer,
            402: OpenApiResponse(response=ErrorResponseSerializer),
            502: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = OrderEmailRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cmd = OrderEmailCommand.from_raw(serializer.validated_data)
        dto, error = self.service.send_order_email(cmd)
        if error:
            self.log.warning(
                "Order email not sent", intent_id=cmd.payment_intent_id, code=error[0]
            )
            return service_error_response(error)
        self.activities.record_from_request(
            request,
            ActivityType.ORDER_PAYMENT_RECEIVED,
            description=f"Payment received for order {dto.order_id}",
            metadata={"orderId": dto.order_id},
        )
        return Response(OrderEmailResponseSerializer(dto).data)
