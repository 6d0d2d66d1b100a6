"""
API views for the `telemetry` app.

The idea is:
- accept a CSV file (or generate a demo one) and return the statistics
  straight away,
- let the client ask for the slower AI insight in a second request,
- keep the last uploads around so they can be reopened or printed.

Each view builds a ``DashboardService`` for the requesting user, so all the
storage logic stays in ``session.py`` and the views only translate errors
into HTTP responses.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate, login, logout
from django.http import HttpResponse
from django.utils.http import content_disposition_header
from rest_framework import status
from rest_framework.authentication import BasicAuthentication, SessionAuthentication
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import (
    ArchivedDatasetMissing,
    CSVParseError,
    EmptyDatasetError,
    StorageQuotaExceeded,
    SummaryNotFound,
)
from .parsing import decode_upload
from .reports import build_report_pdf, report_filename
from .serializers import (
    EnrichmentRequestSerializer,
    EquipmentUploadSerializer,
    LoginSerializer,
)
from .session import DashboardService, SessionStateService
from .storage import DatabaseKeyValueStore

logger = logging.getLogger(__name__)

NO_SESSION_MESSAGE = "No dataset loaded yet. Upload a CSV or load the sample data."


class DashboardAPIView(APIView):
    """Shared auth setup plus a per-request service for the signed-in user."""

    authentication_classes = [BasicAuthentication, SessionAuthentication]
    permission_classes = [IsAuthenticated]

    def get_state(self) -> SessionStateService:
        return SessionStateService(DatabaseKeyValueStore(self.request.user))

    def get_service(self) -> DashboardService:
        return DashboardService(self.get_state())


class EquipmentUploadView(DashboardAPIView):
    """
    Upload endpoint used by the desktop client.

    Only the base statistics are computed here; enrichment is a separate
    call so the numbers show up without waiting for it.
    """

    def post(self, request, *args, **kwargs):
        serializer = EquipmentUploadSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        upload = serializer.validated_data["file"]

        try:
            text = decode_upload(upload.read())
            run = self.get_service().ingest(text, upload.name)
        except CSVParseError as exc:
            return Response(
                {"error": "Error parsing CSV. Please check format.", "details": str(exc)},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except EmptyDatasetError as exc:
            return Response(
                {"error": "CSV does not contain any valid data rows.", "details": str(exc)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(
            {"message": "CSV processed successfully.", **run.to_dict()},
            status=status.HTTP_200_OK,
        )


class SampleDatasetView(DashboardAPIView):
    """Same as an upload, but with generated demo data."""

    def post(self, request, *args, **kwargs):
        run = self.get_service().load_demo()
        return Response(
            {"message": "Sample data loaded.", **run.to_dict()},
            status=status.HTTP_200_OK,
        )


class CurrentSessionView(DashboardAPIView):
    def get(self, request, *args, **kwargs):
        """Return the dataset the dashboard should show, if there is one."""
        run = self.get_service().current()
        if run is None:
            return Response({"error": NO_SESSION_MESSAGE}, status=status.HTTP_404_NOT_FOUND)
        return Response(run.to_dict(), status=status.HTTP_200_OK)

    def delete(self, request, *args, **kwargs):
        """Forget the current dataset; the history is left alone."""
        self.get_service().clear()
        return Response(status=status.HTTP_204_NO_CONTENT)


class EnrichmentView(DashboardAPIView):
    """Fetch the AI insight for a summary and merge it into storage."""

    def post(self, request, *args, **kwargs):
        serializer = EnrichmentRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            summary = self.get_service().enrich(
                serializer.validated_data["summary_id"],
                serializer.validated_data.get("generation"),
            )
        except SummaryNotFound as exc:
            return Response({"error": str(exc)}, status=status.HTTP_404_NOT_FOUND)

        return Response(
            {"summary": summary.to_dict(), "enriched": summary.is_enriched},
            status=status.HTTP_200_OK,
        )


class HistoryListView(DashboardAPIView):
    """Read-only list of the latest uploads, newest first."""

    def get(self, request, *args, **kwargs):
        history = self.get_service().history()
        return Response([entry.to_dict() for entry in history], status=status.HTTP_200_OK)


class ArchivedDatasetView(DashboardAPIView):
    """Reopen an archived dataset as the current session."""

    def post(self, request, summary_id: str, *args, **kwargs):
        try:
            run = self.get_service().open_archived(summary_id)
        except ArchivedDatasetMissing as exc:
            return Response({"error": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        return Response(run.to_dict(), status=status.HTTP_200_OK)


class ReportView(DashboardAPIView):
    """Printable PDF report of the current dataset."""

    def get(self, request, *args, **kwargs):
        run = self.get_service().current()
        if run is None:
            return Response({"error": NO_SESSION_MESSAGE}, status=status.HTTP_404_NOT_FOUND)

        pdf_bytes = build_report_pdf(run.summary, run.records)
        response = HttpResponse(pdf_bytes, content_type="application/pdf")
        response["Content-Disposition"] = content_disposition_header(
            True, report_filename(run.summary)
        )
        return response


class LoginView(APIView):
    """
    Sign in with a Django user and remember the username in the user's store.

    The dashboard only uses this as a gate, the real access control is the
    normal DRF authentication on every other view.
    """

    authentication_classes: list = []
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        user = authenticate(
            request,
            username=serializer.validated_data["username"],
            password=serializer.validated_data["password"],
        )
        if user is None:
            return Response(
                {"error": "Invalid username or password."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        login(request, user)
        try:
            SessionStateService(DatabaseKeyValueStore(user)).remember_user(user.get_username())
        except StorageQuotaExceeded:
            logger.exception("Storage limit reached while signing in %s", user.get_username())
        return Response({"username": user.get_username()}, status=status.HTTP_200_OK)


class LogoutView(DashboardAPIView):
    def post(self, request, *args, **kwargs):
        self.get_state().forget_user()
        logout(request)
        return Response(status=status.HTTP_204_NO_CONTENT)
