from django.urls import path

from .views import ContentPageView

urlpatterns = [
    path("<str:page>/", ContentPageView.as_view(), name="api-content-page"),
]
