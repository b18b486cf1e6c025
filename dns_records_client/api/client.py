"""
API Client - HTTP transport for the DNS records backend

This module wraps a requests session with the base URL, JSON handling and
error mapping shared by every endpoint module. Authenticated clients attach
the current bearer token to each request and end the session on a 401.
"""

import logging
from typing import Any, Callable, Dict, Optional

import requests

from ..core.errors import ApiError, SessionExpired, TransportError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080/api/v1"
DEFAULT_TIMEOUT = 10


def error_message(response: requests.Response) -> Optional[str]:
    """Extract the server-provided message from an error response."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message") or body.get("error")
    return None


def parse_json(response: requests.Response, expected: type = dict) -> Any:
    """
    Decode a successful response body.

    Args:
        response: A 2xx response
        expected: Type the decoded body must have

    Raises:
        ApiError: The body is not JSON of the expected shape
    """
    try:
        body = response.json()
    except ValueError as e:
        logger.error(f"Undecodable {response.status_code} response body: {e}")
        raise ApiError(response.status_code, "Invalid response from server") from e

    if not isinstance(body, expected):
        logger.error(
            f"Expected {expected.__name__} body, got {type(body).__name__}"
        )
        raise ApiError(response.status_code, "Invalid response from server")
    return body


class ApiClient:
    """Thin HTTP client bound to one backend base URL."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Backend API root, e.g. ``http://localhost:8080/api/v1``
            timeout: Per-request timeout in seconds
            token_provider: Returns the current access token; when set, the
                client sends ``Authorization: Bearer`` on every request
            on_unauthorized: Called when an authenticated request gets a 401
            session: Optional pre-built requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token_provider = token_provider
        self.on_unauthorized = on_unauthorized
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    @property
    def authenticated(self) -> bool:
        return self.token_provider is not None

    def _headers(self) -> Dict[str, str]:
        headers = {}
        if self.token_provider is not None:
            access_token = self.token_provider()
            if access_token:
                headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """
        Send a request and map failures onto client errors.

        Returns:
            The successful response

        Raises:
            TransportError: The backend could not be reached
            SessionExpired: An authenticated request was rejected with 401
            ApiError: Any other non-2xx status
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url} params={params}")

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise TransportError(f"Could not reach {self.base_url}: {e}") from e

        if response.ok:
            return response

        message = error_message(response)
        logger.debug(f"{method} {url} returned {response.status_code}: {message}")

        if response.status_code == 401 and self.authenticated:
            # No refresh endpoint exists; a rejected token ends the session.
            logger.warning("Access token rejected, ending session")
            if self.on_unauthorized is not None:
                self.on_unauthorized()
            raise SessionExpired(401, message or "Session expired, please log in again")

        raise ApiError(response.status_code, message)

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> requests.Response:
        return self.request("DELETE", path)
