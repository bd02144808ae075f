from pathlib import Path

from django.conf import settings
from django.contrib import admin
from django.http import HttpResponse, JsonResponse
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

from apps.common.views import live_health, ready_health

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("apps.api.urls")),
    path("health/live", live_health, name="health-live"),
    path("health/ready", ready_health, name="health-ready"),
]


def static_schema(request):  # pragma: no cover (simple IO)
    """Serve the exported OpenAPI document when the dynamic schema is disabled."""
    file_path = Path(settings.BASE_DIR) / "static" / settings.OPENAPI_STATIC_JSON
    if not file_path.exists():
        return JsonResponse(
            {
                "error": "schema_not_found",
                "message": "Static schema not found. Export it with manage.py spectacular or enable DEBUG.",
            },
            status=404,
        )
    return HttpResponse(file_path.read_text(), content_type="application/json")


if settings.DEBUG:
    schema_view = SpectacularAPIView.as_view()
else:
    schema_view = static_schema

urlpatterns += [
    path("schema/", schema_view, name="schema"),
    path(
        "docs/swagger/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger-ui",
    ),
    path("docs/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
]
