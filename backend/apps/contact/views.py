from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api.schemas import ErrorResponseSerializer
from apps.api.utils import service_error_response
from .container import build_contact_service
from .serializers import ContactRequestSerializer, ContactResponseSerializer
from .services import ContactMessageCommand


@extend_schema(tags=["Contact"])
class ContactView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    service = build_contact_service()

    @extend_schema(
        summary="Send a contact-form message to the shop",
        request=ContactRequestSerializer,
        responses={
            200: ContactResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            500: OpenApiResponse(response=ErrorResponseSerializer),
            502: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = ContactRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        _, error = self.service.send_message(
            ContactMessageCommand(
                name=data["name"].strip(),
                email=data["email"].strip().lower(),
                phone=data["phone"].strip(),
                message=data["message"].strip(),
            )
        )
        if error:
            return service_error_response(error)
        payload = {"success": True, "message": "Contact form submitted successfully"}
        return Response(ContactResponseSerializer(payload).data)
