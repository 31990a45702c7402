"""Async client for the CivicVoice REST API."""

import logging
import os
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

API_BASE_URL = os.getenv("CIVICVOICE_API_URL", "http://localhost:8000")


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, payload: Any = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.payload = payload


def _error_message(response: httpx.Response) -> tuple[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"Request failed: {response.status_code}", None
    detail = payload.get("detail") if isinstance(payload, dict) else None
    if isinstance(detail, str):
        return detail, payload
    if isinstance(detail, list) and detail:
        first = detail[0]
        field = ".".join(str(p) for p in first.get("loc", [])[1:])
        return f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request"), payload
    return f"Request failed: {response.status_code}", payload


class ApiClient:
    """Thin typed wrapper over the REST endpoints.

    Holds the session token once ``signin`` or ``activate`` succeeds and
    sends it as a bearer header on every later call.
    """

    def __init__(self, base_url: str = API_BASE_URL, token: Optional[str] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 10.0):
        self.token = token
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        path = path if path.startswith("/") else f"/{path}"

        response = await self._client.request(method, path, headers=headers, **kwargs)
        if response.is_error:
            message, payload = _error_message(response)
            logger.debug(f"{method} {path} failed with {response.status_code}: {message}")
            raise ApiError(response.status_code, message, payload)

        if "application/json" not in response.headers.get("content-type", ""):
            return None
        return response.json()

    # --- auth ---

    async def register(self, name: str, email: str, password: str) -> dict:
        return await self._request("POST", "/api/auth/register",
                                   json={"name": name, "email": email, "password": password})

    async def activate(self, email: str, otp: str) -> dict:
        data = await self._request("POST", "/api/auth/activate", json={"email": email, "otp": otp})
        self.token = data["token"]
        return data

    async def resend_otp(self, email: str) -> dict:
        return await self._request("POST", "/api/auth/resend-otp", json={"email": email})

    async def signin(self, email: str, password: str) -> dict:
        data = await self._request("POST", "/api/auth/signin", json={"email": email, "password": password})
        self.token = data["token"]
        return data

    async def me(self) -> dict:
        return await self._request("GET", "/api/auth/me")

    async def logout(self) -> dict:
        data = await self._request("POST", "/api/auth/logout")
        self.token = None
        return data

    async def upload_avatar(self, filename: str, content: bytes, content_type: str = "image/png") -> dict:
        return await self._request("POST", "/api/auth/avatar",
                                   files={"avatar": (filename, content, content_type)})

    # --- services & feedback ---

    async def list_services(self) -> list:
        return await self._request("GET", "/api/services")

    async def list_feedback(self, page: int = 1, limit: int = 10) -> dict:
        return await self._request("GET", "/api/feedback", params={"page": page, "limit": limit})

    async def submit_feedback(self, fields: dict, attachment: Optional[tuple] = None) -> dict:
        """Submit feedback as multipart form data; ``attachment`` is a (filename, bytes, content_type) tuple."""
        form = {k: str(v) for k, v in fields.items() if v is not None}
        files = {"attachment": attachment} if attachment else None
        return await self._request("POST", "/api/feedback", data=form, files=files)

    async def update_feedback_status(self, feedback_id: int, status: str) -> dict:
        return await self._request("PATCH", f"/api/feedback/{feedback_id}/status", json={"status": status})

    async def contact(self, name: str, email: str, subject: str, message: str) -> dict:
        return await self._request("POST", "/api/contact",
                                   json={"name": name, "email": email, "subject": subject, "message": message})

    async def dashboard(self) -> dict:
        return await self._request("GET", "/api/dashboard")

    async def health(self) -> dict:
        return await self._request("GET", "/health")
