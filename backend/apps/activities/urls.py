from django.urls import path
from .views import ActivityListView, ActivityStatsView

urlpatterns = [
    path("", ActivityListView.as_view(), name="api-activities-list"),
    path("stats/", ActivityStatsView.as_view(), name="api-activities-stats"),
]
