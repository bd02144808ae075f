from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.activities.container import build_activity_service
from apps.activities.models import ActivityType
from apps.api.permissions import StaffWriteOrReadOnly
from apps.api.schemas import ErrorResponseSerializer
from apps.api.utils import service_error_response
from apps.common import get_logger
from .container import build_content_service
from .serializers import ContentSerializer, ContentUpdateSerializer

logger = get_logger(__name__).bind(component="content", layer="view")

PAGE_PARAMETER = OpenApiParameter("page", str, OpenApiParameter.PATH)


@extend_schema(tags=["Content"])
class ContentPageView(APIView):
    permission_classes = [StaffWriteOrReadOnly]
    service = build_content_service()
    activities = build_activity_service()
    log = logger.bind(view="ContentPageView")

    @extend_schema(
        summary="Get editable page content",
        parameters=[PAGE_PARAMETER],
        responses={
            200: ContentSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, page: str):
        dto, error = self.service.get_page(page)
        if error:
            return service_error_response(error)
        return Response(ContentSerializer(dto).data)

    @extend_schema(
        summary="Replace page content",
        description="The About page takes a JSON object; policy pages take HTML.",
        parameters=[PAGE_PARAMETER],
        request=ContentUpdateSerializer,
        responses={
            200: ContentSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            403: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def put(self, request, page: str):
        serializer = ContentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        self.log.info("Updating page content", page=page, user_id=request.user.id)
        dto, error = self.service.update_page(
            page,
            data["content"],
            document_url=data.get("document_url"),
            user_id=request.user.id,
        )
        if error:
            return service_error_response(error)
        self.activities.record_from_request(
            request,
            ActivityType.CONTENT_UPDATED,
            description=f"Updated {dto.title}",
            metadata={"page": page},
        )
        return Response(ContentSerializer(dto).data)
