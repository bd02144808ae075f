from django.urls import include, path

urlpatterns = [
    path("", include("apps.catalog.urls")),
    path("users/", include("apps.users.urls")),
    path("auth/", include("apps.auth.urls")),
    path("cart/", include("apps.carts.urls")),
    path("checkout/", include("apps.checkout.urls")),
    path("content/", include("apps.content.urls")),
    path("activities/", include("apps.activities.urls")),
    path("newsletter/", include("apps.newsletter.urls")),
    path("contact/", include("apps.contact.urls")),
]
