from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse

from apps.api.permissions import IsAdminRole
from apps.api.schemas import ErrorResponseSerializer
from apps.api.utils import error_response, service_error_response
from apps.common import get_logger
from .container import build_user_service
from .serializers import UserListQuerySerializer, UserSerializer, UserUpdateSerializer

logger = get_logger(__name__).bind(component="users", layer="view")


@extend_schema(tags=["Users"])
class UserListView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]
    service = build_user_service()
    log = logger.bind(view="UserListView")

    @extend_schema(
        summary="List users",
        parameters=[
            OpenApiParameter("role", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("search", str, OpenApiParameter.QUERY, required=False),
        ],
        responses={
            200: UserSerializer(many=True),
            403: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request):
        query = UserListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        self.log.debug("Listing users via API", **query.validated_data)
        data = self.service.list_users(**query.validated_data)
        return Response(UserSerializer(data, many=True).data)


@extend_schema(tags=["Users"])
class UserDetailView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]
    service = build_user_service()
    log = logger.bind(view="UserDetailView")

    @extend_schema(
        summary="Get user by ID",
        parameters=[OpenApiParameter("user_id", int, OpenApiParameter.PATH)],
        responses={
            200: UserSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, user_id: int):
        self.log.debug("Fetching user detail", user_id=user_id)
        dto = self.service.get_user(user_id)
        if not dto:
            return error_response("NOT_FOUND", "User not found", {"id": str(user_id)})
        return Response(UserSerializer(dto).data)

    @extend_schema(
        summary="Update user role, name or verification",
        request=UserUpdateSerializer,
        responses={
            200: UserSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def patch(self, request, user_id: int):
        serializer = UserUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.log.info("Patching user", user_id=user_id, actor_id=request.user.id)
        dto, error = self.service.update_user(user_id, serializer.validated_data)
        if error:
            return service_error_response(error)
        return Response(UserSerializer(dto).data)

    @extend_schema(
        summary="Delete user",
        description="Admins cannot delete their own account.",
        responses={
            204: None,
            403: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def delete(self, request, user_id: int):
        self.log.info("Deleting user via API", user_id=user_id, actor_id=request.user.id)
        _deleted, error = self.service.delete_user(user_id, actor_id=request.user.id)
        if error:
            return service_error_response(error)
        return Response(status=status.HTTP_204_NO_CONTENT)
