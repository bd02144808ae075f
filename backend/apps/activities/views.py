from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse

from apps.api.permissions import IsStaffRole
from apps.api.schemas import ErrorResponseSerializer
from apps.api.utils import service_error_response
from apps.common import get_logger
from .container import build_activity_service
from .serializers import ActivityPageSerializer, ActivityStatsSerializer

logger = get_logger(__name__).bind(component="activities", layer="view")

DATE_PARAMS = [
    OpenApiParameter("startDate", str, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("endDate", str, OpenApiParameter.QUERY, required=False),
]


@extend_schema(tags=["Activities"])
class ActivityListView(APIView):
    permission_classes = [IsAuthenticated, IsStaffRole]
    service = build_activity_service()
    log = logger.bind(view="ActivityListView")

    @extend_schema(
        summary="List activity log entries",
        parameters=[
            OpenApiParameter("page", int, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("limit", int, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("type", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("userId", int, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("orderId", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("productId", str, OpenApiParameter.QUERY, required=False),
            *DATE_PARAMS,
        ],
        responses={
            200: ActivityPageSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            403: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request):
        page, error = self.service.list_activities(request.query_params)
        if error:
            return service_error_response(error)
        self.log.debug("Activities listed", total=page.pagination.total)
        return Response(ActivityPageSerializer(page).data)


@extend_schema(tags=["Activities"])
class ActivityStatsView(APIView):
    permission_classes = [IsAuthenticated, IsStaffRole]
    service = build_activity_service()
    log = logger.bind(view="ActivityStatsView")

    @extend_schema(
        summary="Activity statistics",
        parameters=DATE_PARAMS,
        responses={
            200: ActivityStatsSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request):
        stats, error = self.service.stats(request.query_params)
        if error:
            return service_error_response(error)
        return Response(ActivityStatsSerializer(stats).data)
