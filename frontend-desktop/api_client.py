"""
Thin ``requests`` wrapper around the dashboard API.

Kept separate from the Qt code so it can be used (and tested) without a
display.  Every call returns an ``ApiResult`` instead of raising, which is
what the worker threads in ``main.py`` want to hand back to the GUI thread.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import requests

API_BASE_URL = os.environ.get("TELEMETRY_API_URL", "http://127.0.0.1:8000/api")


@dataclass
class ApiResult:
    ok: bool
    error_message: str | None
    payload: Any = None


class DashboardClient:
    """One client per signed-in user; Basic Auth is reused for every call."""

    def __init__(
        self,
        username: str,
        password: str,
        base_url: str = API_BASE_URL,
        timeout: float = 30,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.auth = (username, password)

    def _request(self, method: str, path: str, **kwargs) -> ApiResult:
        try:
            response = self.session.request(
                method, f"{self.base_url}/{path}", timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            return ApiResult(ok=False, error_message=str(exc))

        if response.status_code >= 400:
            try:
                data = response.json()
                msg = data.get("error", response.text) if isinstance(data, dict) else response.text
            except ValueError:
                msg = response.text
            return ApiResult(ok=False, error_message=msg or f"HTTP {response.status_code}")

        if response.status_code == 204:
            return ApiResult(ok=True, error_message=None)
        if response.headers.get("Content-Type", "").startswith("application/pdf"):
            return ApiResult(ok=True, error_message=None, payload=response.content)
        return ApiResult(ok=True, error_message=None, payload=response.json())

    def upload_csv(self, file_path: str) -> ApiResult:
        try:
            with open(file_path, "rb") as f:
                files = {"file": (os.path.basename(file_path), f, "text/csv")}
                return self._request("POST", "upload-equipment/", files=files)
        except OSError as exc:
            return ApiResult(ok=False, error_message=str(exc))

    def load_sample(self) -> ApiResult:
        return self._request("POST", "sample-dataset/")

    def current_session(self) -> ApiResult:
        return self._request("GET", "session/")

    def clear_session(self) -> ApiResult:
        return self._request("DELETE", "session/")

    def enrich(self, summary_id: str, generation: int | None = None) -> ApiResult:
        body: dict[str, Any] = {"summary_id": summary_id}
        if generation is not None:
            body["generation"] = generation
        return self._request("POST", "session/enrich/", json=body)

    def history(self) -> ApiResult:
        return self._request("GET", "history/")

    def open_archived(self, summary_id: str) -> ApiResult:
        return self._request("POST", f"history/{summary_id}/open/")

    def download_report(self, destination: str) -> ApiResult:
        result = self._request("GET", "report/")
        if not result.ok:
            return result
        if not isinstance(result.payload, bytes):
            return ApiResult(ok=False, error_message="Server did not return a PDF.")
        try:
            with open(destination, "wb") as f:
                f.write(result.payload)
        except OSError as exc:
            return ApiResult(ok=False, error_message=str(exc))
        return ApiResult(ok=True, error_message=None, payload=destination)
