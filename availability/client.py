"""HTTP client for the remote rental API."""

import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from .errors import ApiError, AuthError, FetchError
from .interval import Interval
from .loader import intervals_from_records

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:4000/api"


class Session:
    """
    Credentials of one signed-in user.

    Passed explicitly to the ApiClient; renewed in place when the access
    token expires and cleared when renewal fails.
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        user: Optional[Dict[str, Any]] = None,
    ):
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.user = user

    @classmethod
    def from_env(cls) -> "Session":
        return cls(
            os.environ.get("RENTAL_API_TOKEN"),
            os.environ.get("RENTAL_API_REFRESH_TOKEN"),
        )

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    @property
    def tenant_id(self) -> Optional[str]:
        return (self.user or {}).get("tenantId")

    def renew(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        self.access_token = access_token
        if refresh_token:
            self.refresh_token = refresh_token

    def clear(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.user = None


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return response.text or None
    if isinstance(body, dict):
        return body.get("message")
    return None


class ApiClient:
    """Thin wrapper over httpx.Client for the rental API's JSON envelope."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[Session] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url or os.environ.get("RENTAL_API_URL", DEFAULT_API_URL)
        self.session = session or Session()
        self._http = httpx.Client(
            base_url=self.base_url.rstrip("/") + "/",
            headers={"Content-Type": "application/json"},
            transport=transport,
            timeout=timeout,
        )

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = {}
        if self.session.access_token:
            headers["Authorization"] = f"Bearer {self.session.access_token}"
        try:
            return self._http.request(method, path.lstrip("/"), headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise FetchError(f"{method} {path} failed: {e}") from e

    def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """
        Send a request, renewing the session once on a 401.

        A second 401, or a failed renewal, clears the session.
        """
        response = self._send(method, path, **kwargs)
        if response.status_code == 401 and self.session.refresh_token:
            logger.info("Access token rejected, renewing session")
            self.refresh()
            response = self._send(method, path, **kwargs)
        if response.status_code == 401:
            self.session.clear()
            raise AuthError(_error_message(response))
        if response.is_error:
            raise ApiError(response.status_code, _error_message(response))
        return response

    def refresh(self) -> None:
        """Exchange the refresh token for a new token pair."""
        response = self._send(
            "POST", "/auth/refresh", json={"refreshToken": self.session.refresh_token}
        )
        if response.is_error:
            self.session.clear()
            raise AuthError(_error_message(response) or "Session renewal failed")
        self._renew_from(self._data(response), "Session renewal failed")

    def _renew_from(self, data: Any, failure: str) -> None:
        if not isinstance(data, dict) or not data.get("accessToken"):
            self.session.clear()
            raise AuthError(failure)
        self.session.renew(data["accessToken"], data.get("refreshToken"))

    @staticmethod
    def _data(response: httpx.Response) -> Any:
        try:
            body = response.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON from {response.request.url}") from e
        if not isinstance(body, dict) or "data" not in body:
            raise FetchError(f"Unexpected response shape from {response.request.url}")
        return body["data"]

    def get_data(self, path: str, **params) -> Any:
        return self._data(self.request("GET", path, params=params or None))

    def login(self, email: str, password: str) -> Session:
        """Sign in and store the issued tokens on this client's session."""
        response = self._send("POST", "/auth/login", json={"email": email, "password": password})
        if response.is_error:
            raise AuthError(_error_message(response) or "Login failed")
        data = self._data(response)
        self._renew_from(data, "Login failed")
        self.session.user = data.get("user")
        return self.session

    def get_availability(self, tool_id: str) -> List[Interval]:
        """Booked and maintenance intervals for one tool."""
        records = self.get_data(f"/rentals/availability/{tool_id}")
        if not isinstance(records, list):
            raise FetchError(f"Availability for {tool_id} is not a list")
        return intervals_from_records(records)
