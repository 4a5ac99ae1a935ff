"""
HTTP client for the college registry.

Wraps an ``httpx.Client`` so callers can hand in anything that speaks the
httpx API: a real client pointed at the registry, a FastAPI ``TestClient``,
or a client over ``httpx.MockTransport``.
"""

from typing import Any, Dict, List, Mapping, Optional

import httpx
import structlog

from config.settings import PortalConfig
from registration.errors import CollegeNotFound, RegistryError, RegistryFieldErrors
from registration.state import UploadedFile

logger = structlog.get_logger(__name__)


class RegistryClient:
    def __init__(self, http: httpx.Client, token: Optional[str] = None):
        self.http = http
        self.token = token

    @classmethod
    def from_config(cls, config: PortalConfig) -> "RegistryClient":
        http = httpx.Client(base_url=config.registry_url, timeout=config.request_timeout)
        return cls(http, token=config.registry_token)

    def close(self) -> None:
        self.http.close()

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("registry_unreachable", method=method, path=path, error=str(e))
            raise RegistryError("Failed to reach the registry. Please try again.") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            raise RegistryError(f"HTTP error! status: {response.status_code}", response.status_code)

        # {"status": false, "message": {"field": "msg", ...}}
        if body.get("status") is False and isinstance(body.get("message"), dict):
            raise RegistryFieldErrors(
                {str(k): str(v) for k, v in body["message"].items()},
                response.status_code,
            )

        if response.is_error or body.get("success") is False:
            message = body.get("message")
            if not isinstance(message, str) or not message:
                message = f"HTTP error! status: {response.status_code}"
            raise RegistryError(message, response.status_code)

        return body

    def register(self, values: Mapping[str, str], files: Optional[Mapping[str, List[UploadedFile]]] = None) -> Dict[str, Any]:
        headers = self._auth_headers()
        attachments = [
            (slot, (f.name, f.content, f.content_type))
            for slot, items in (files or {}).items()
            for f in items
        ]
        if attachments:
            return self._request("POST", "/verify_email", data=dict(values), files=attachments, headers=headers)
        return self._request("POST", "/verify_email", json=dict(values), headers=headers)

    def get_college(self, college_id: str) -> Dict[str, Any]:
        try:
            body = self._request("GET", f"/get_college/{college_id}")
        except RegistryError as e:
            if e.status_code == 404:
                raise CollegeNotFound(college_id) from e
            raise
        body.pop("success", None)
        return body

    def list_colleges(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/get_all_colleges").get("colleges", [])

    def update_status(self, college_id: str, status: str) -> Dict[str, Any]:
        try:
            body = self._request("PATCH", f"/update_college_status/{college_id}", json={"status": status})
        except RegistryError as e:
            if e.status_code == 404:
                raise CollegeNotFound(college_id) from e
            raise
        college = body.get("college")
        if not isinstance(college, dict):
            raise RegistryError("Malformed registry response: missing college record")
        return college

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")
