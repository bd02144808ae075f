from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiResponse

from apps.activities.container import build_activity_service
from apps.activities.models import ActivityType
from apps.api.schemas import ErrorResponseSerializer
from apps.api.utils import service_error_response
from apps.common import get_logger
from apps.users.dtos import user_to_dto
from apps.users.serializers import UserSerializer
from .container import (
    build_password_reset_service,
    build_registration_service,
    build_session_service,
)
from .serializers import (
    DetailResponseSerializer,
    ForgotPasswordRequestSerializer,
    LoginRequestSerializer,
    LogoutRequestSerializer,
    PasswordResetResponseSerializer,
    RefreshRequestSerializer,
    RefreshResponseSerializer,
    RegisterRequestSerializer,
    ResetPasswordRequestSerializer,
    SessionResponseSerializer,
)

logger = get_logger(__name__).bind(component="auth", layer="view")


@extend_schema(tags=["Auth"])
class RegisterView(APIView):
    permission_classes = [AllowAny]
    service = build_registration_service()
    activities = build_activity_service()
    log = logger.bind(view="RegisterView")

    @extend_schema(
        summary="Register customer account",
        request=RegisterRequestSerializer,
        responses={
            201: UserSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = RegisterRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto, error = self.service.register(serializer.validated_data)
        if error:
            self.log.warning("Registration failed", code=error[0], detail=error[1])
            return service_error_response(error)
        self.activities.record_from_request(
            request,
            ActivityType.USER_REGISTERED,
            description=f"New account {dto.email}",
            user_id=dto.id,
        )
        return Response(UserSerializer(dto).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["Auth"])
class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    service = build_session_service()
    activities = build_activity_service()
    log = logger.bind(view="LoginView")

    @extend_schema(
        summary="Login with email and password",
        request=LoginRequestSerializer,
        responses={
            200: SessionResponseSerializer,
            401: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = LoginRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]
        session, error = self.service.login(email, serializer.validated_data["password"])
        if error:
            self.activities.record_from_request(
                request,
                ActivityType.USER_LOGIN_FAILED,
                description="Failed login attempt",
                metadata={"email": email.lower()},
            )
            return service_error_response(error)
        user = session["user"]
        self.activities.record_from_request(
            request, ActivityType.USER_LOGIN, description="User logged in", user_id=user.id
        )
        return Response(SessionResponseSerializer(session).data)


@extend_schema(tags=["Auth"])
class RefreshView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    service = build_session_service()

    @extend_schema(
        summary="Exchange a refresh token for a new token pair",
        request=RefreshRequestSerializer,
        responses={
            200: RefreshResponseSerializer,
            401: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = RefreshRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tokens, error = self.service.refresh(serializer.validated_data["refreshToken"])
        if error:
            return service_error_response(error)
        return Response(RefreshResponseSerializer(tokens).data)


@extend_schema(tags=["Auth"], summary="Get current user", responses={200: UserSerializer})
class MeView(APIView):
    permission_classes = [IsAuthenticated]
    log = logger.bind(view="MeView")

    def get(self, request):
        self.log.debug("Returning current user profile", user_id=request.user.id)
        return Response(UserSerializer(user_to_dto(request.user)).data)


@extend_schema(tags=["Auth"])
class LogoutView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_session_service()
    activities = build_activity_service()
    log = logger.bind(view="LogoutView")

    @extend_schema(
        summary="Logout (blacklist refresh token)",
        request=LogoutRequestSerializer,
        responses={
            200: DetailResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = LogoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        error = self.service.logout(
            serializer.validated_data.get("refreshToken"), request.user.id
        )
        if error:
            return service_error_response(error)
        self.activities.record_from_request(
            request, ActivityType.USER_LOGOUT, description="User logged out"
        )
        return Response({"detail": "Logged out"}, status=status.HTTP_200_OK)


FORGOT_PASSWORD_MESSAGE = "If an account exists for that email, a reset link has been sent."


@extend_schema(tags=["Auth"])
class ForgotPasswordView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    service = build_password_reset_service()
    activities = build_activity_service()
    log = logger.bind(view="ForgotPasswordView")

    @extend_schema(
        summary="Email a password reset link",
        description="Answers the same way whether or not the email has an account.",
        request=ForgotPasswordRequestSerializer,
        responses={
            200: PasswordResetResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = ForgotPasswordRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"].strip().lower()
        user, error = self.service.request_reset(email)
        if error:
            self.log.warning("Reset email not delivered", code=error[0], detail=error[1])
        self.activities.record_from_request(
            request,
            ActivityType.USER_PASSWORD_RESET_REQUESTED,
            description="Password reset requested",
            user_id=user.id if user else None,
            metadata={
                "email": email,
                "accountFound": user is not None,
                "emailSent": user is not None and not error,
            },
        )
        payload = {"success": True, "message": FORGOT_PASSWORD_MESSAGE}
        return Response(PasswordResetResponseSerializer(payload).data)


@extend_schema(tags=["Auth"])
class ResetPasswordView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    service = build_password_reset_service()
    activities = build_activity_service()

    @extend_schema(
        summary="Set a new password with a reset token",
        request=ResetPasswordRequestSerializer,
        responses={
            200: PasswordResetResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = ResetPasswordRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        user, error = self.service.reset_password(data["token"], data["newPassword"])
        if error:
            return service_error_response(error)
        self.activities.record_from_request(
            request,
            ActivityType.USER_PASSWORD_RESET,
            description="Password reset",
            user_id=user.id,
        )
        payload = {"success": True, "message": "Your password has been reset. Please log in."}
        return Response(PasswordResetResponseSerializer(payload).data)
