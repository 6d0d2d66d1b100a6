"""
Root URL configuration for the backend project.

We keep it short and simply include the URLs from the `telemetry` app.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),
    # All dashboard endpoints live under /api/
    path("api/", include("telemetry.urls")),
]
