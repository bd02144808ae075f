from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    MethodNotAllowed,
    NotAuthenticated,
    ParseError,
    PermissionDenied,
    Throttled,
)
from rest_framework.test import APIRequestFactory

from apps.api.exceptions import EXCEPTION_CODES, ApplicationError, global_exception_handler

factory = APIRequestFactory()


class CheckoutView:
    pass


def _context(request):
    return {"request": request, "view": CheckoutView()}


def _handle(exc, method="get"):
    request = getattr(factory, method)("/api/checkout/payment-intent/")
    return global_exception_handler(exc, _context(request))


def test_application_error_from_service_error_uses_domain_status():
    exc = ApplicationError.from_service_error(
        ("PAYMENT_ERROR", "Payment has not completed", {"status": "requires_payment_method"})
    )
    assert exc.code == "PAYMENT_ERROR"
    assert exc.status_code is None
    response = _handle(exc)
    assert response.status_code == status.HTTP_402_PAYMENT_REQUIRED
    assert response.data["error"] == {
        "code": "PAYMENT_ERROR",
        "message": "Payment has not completed",
        "status": 402,
        "details": {"status": "requires_payment_method"},
    }


def test_application_error_explicit_status_and_headers():
    exc = ApplicationError(
        "SERVICE_UNAVAILABLE",
        "Newsletter provider is down",
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        hint="Try again shortly.",
        headers={"Retry-After": 30},
    )
    response = _handle(exc, "post")
    assert response.status_code == 503
    assert response.data["error"]["hint"] == "Try again shortly."
    assert response["Retry-After"] == "30"


def test_exception_codes_cover_drf_families():
    codes = {families: code for families, code, _ in EXCEPTION_CODES}
    flattened = {cls: code for families, code in codes.items() for cls in families}
    assert flattened[ParseError] == "VALIDATION_ERROR"
    assert flattened[NotAuthenticated] == "UNAUTHORIZED"
    assert flattened[PermissionDenied] == "FORBIDDEN"
    assert flattened[Http404] == "NOT_FOUND"
    assert flattened[Throttled] == "TOO_MANY_REQUESTS"


def test_parse_error_keeps_drf_message():
    response = _handle(ParseError("JSON parse error"), "post")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.data["error"]["code"] == "VALIDATION_ERROR"
    assert response.data["error"]["message"] == "JSON parse error"


def test_not_authenticated_maps_to_unauthorized():
    response = _handle(NotAuthenticated())
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.data["error"]["code"] == "UNAUTHORIZED"


def test_http404_maps_to_not_found():
    response = _handle(Http404("No such product"))
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.data["error"]["code"] == "NOT_FOUND"


def test_method_not_allowed_lists_methods():
    exc = MethodNotAllowed("DELETE")
    exc.allowed_methods = ["GET", "POST"]
    response = _handle(exc, "delete")
    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
    assert response.data["error"]["details"] == {"allowedMethods": ["GET", "POST"]}


def test_throttled_carries_retry_hint():
    response = _handle(Throttled(wait=12))
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert response.data["error"]["details"] == {"retryAfter": 12}
    assert response.data["error"]["hint"] == "Wait before retrying this request."


def test_django_validation_error_becomes_validation_error():
    exc = DjangoValidationError({"email": ["Enter a valid email address."]})
    response = _handle(exc, "post")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.data["error"]["code"] == "VALIDATION_ERROR"
    assert response.data["error"]["details"] == {"email": ["Enter a valid email address."]}


def test_unhandled_exception_hides_internals():
    response = _handle(RuntimeError("stripe key leaked"))
    payload = response.data["error"]
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert payload["code"] == "SERVER_ERROR"
    assert payload["message"] == "Something went wrong"
    assert "details" not in payload
