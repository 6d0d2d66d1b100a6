"""
URL patterns for the `telemetry` app.

Each endpoint maps to one button of the dashboard.
"""
from django.urls import path

from .views import (
    ArchivedDatasetView,
    CurrentSessionView,
    EnrichmentView,
    EquipmentUploadView,
    HistoryListView,
    LoginView,
    LogoutView,
    ReportView,
    SampleDatasetView,
)

urlpatterns = [
    path("upload-equipment/", EquipmentUploadView.as_view(), name="upload-equipment"),
    path("sample-dataset/", SampleDatasetView.as_view(), name="sample-dataset"),
    path("session/", CurrentSessionView.as_view(), name="session"),
    path("session/enrich/", EnrichmentView.as_view(), name="session-enrich"),
    path("history/", HistoryListView.as_view(), name="history"),
    path(
        "history/<str:summary_id>/open/",
        ArchivedDatasetView.as_view(),
        name="history-open",
    ),
    path("report/", ReportView.as_view(), name="report"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
]
