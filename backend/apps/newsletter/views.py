from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api.schemas import ErrorResponseSerializer
from apps.api.utils import service_error_response
from apps.common import get_logger
from .container import build_newsletter_service
from .serializers import SubscribeRequestSerializer, SubscribeResponseSerializer

logger = get_logger(__name__).bind(component="newsletter", layer="view")


@extend_schema(tags=["Newsletter"])
class NewsletterSubscribeView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    service = build_newsletter_service()
    log = logger.bind(view="NewsletterSubscribeView")

    @extend_schema(
        summary="Subscribe an email address to the newsletter",
        request=SubscribeRequestSerializer,
        responses={
            200: SubscribeResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            409: OpenApiResponse(response=ErrorResponseSerializer),
            503: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = SubscribeRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        dto, error = self.service.subscribe(data["email"], data.get("locale"))
        if error:
            return service_error_response(error)
        payload = {
            "success": True,
            "message": "Successfully subscribed to newsletter!",
            "data": dto,
        }
        return Response(SubscribeResponseSerializer(payload).data)
