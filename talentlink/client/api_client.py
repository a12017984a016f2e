"""
TalentLink API Client

Thin wrapper over the REST API using httpx.

    store = TokenStore()
    with ApiClient("http://localhost:8000/api", credentials=store) as api:
        api.login("ada@example.com", "secret1")   # token lands in ``store``
        api.get_jobs(location="berlin")

Configuration is explicit: a base URL, a credential provider (anything with
``get_token()``) and optionally the ``httpx.Client`` to send requests with.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)


class CredentialProvider(Protocol):
    def get_token(self) -> Optional[str]:
        ...


class TokenStore:
    """In-memory credential provider."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def get_token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class ApiError(Exception):
    """Raised for every non-2xx response."""

    def __init__(self, status_code: int, message: str, errors: Optional[List[dict]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class ApiClient:
    """
    Client for the TalentLink REST API.

    Every method returns the decoded JSON body.
    """

    def __init__(
        self,
        base_url: str,
        credentials: Optional[CredentialProvider] = None,
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0
    ):
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials
        self._owns_http = http is None
        self.http = http or httpx.Client(timeout=timeout)

    # ------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.credentials.get_token() if self.credentials else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(self, method: str, endpoint: str, json: Any = None, params: Optional[dict] = None) -> dict:
        """
        Send one request. Raises ApiError on any non-2xx response, carrying
        the server's ``message`` (or a summary of its validation errors).
        """
        if params:
            params = {key: value for key, value in params.items() if value is not None}
        response = self.http.request(
            method,
            f"{self.base_url}{endpoint}",
            json=json,
            params=params or None,
            headers=self._headers()
        )

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            errors = data.get("errors", []) if isinstance(data, dict) else []
            message = data.get("message") if isinstance(data, dict) else None
            if not message and errors:
                message = "; ".join(f"{e.get('field')}: {e.get('message')}" for e in errors)
            message = message or "API request failed"
            logger.debug("API %s %s failed (%s): %s", method, endpoint, response.status_code, message)
            raise ApiError(response.status_code, message, errors)

        return data

    def _remember_token(self, data: dict) -> dict:
        token = data.get("token")
        if token and hasattr(self.credentials, "set_token"):
            self.credentials.set_token(token)
        return data

    # ------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------

    def login(self, email: str, password: str) -> dict:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        return self._remember_token(data)

    def register(self, user_data: dict) -> dict:
        return self._remember_token(self._request("POST", "/auth/register", json=user_data))

    def get_current_user(self) -> dict:
        return self._request("GET", "/auth/me")

    def refresh_token(self) -> dict:
        return self._remember_token(self._request("POST", "/auth/refresh"))

    # ------------------------------------------------------------
    # Users
    # ------------------------------------------------------------

    def update_profile(self, user_data: dict) -> dict:
        return self._request("PUT", "/users/profile", json=user_data)

    def get_user_profile(self, user_id: str) -> dict:
        return self._request("GET", f"/users/{user_id}")

    def search_users(self, query: str, page: int = 1, limit: int = 10) -> dict:
        return self._request(
            "GET", f"/users/search/{quote(query, safe='')}",
            params={"page": page, "limit": limit}
        )

    def send_connection_request(self, user_id: str) -> dict:
        return self._request("POST", f"/users/connect/{user_id}")

    def respond_to_connection(self, user_id: str, status: str) -> dict:
        return self._request("PUT", f"/users/connections/{user_id}", json={"status": status})

    def get_connection_requests(self) -> dict:
        return self._request("GET", "/users/connections/requests")

    # ------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------

    def get_jobs(self, **filters) -> dict:
        """Filters: page, limit, type, location, search."""
        return self._request("GET", "/jobs", params=filters)

    def get_job(self, job_id: str) -> dict:
        return self._request("GET", f"/jobs/{job_id}")

    def create_job(self, job_data: dict) -> dict:
        return self._request("POST", "/jobs", json=job_data)

    def update_job(self, job_id: str, job_data: dict) -> dict:
        return self._request("PUT", f"/jobs/{job_id}", json=job_data)

    def apply_to_job(self, job_id: str, cover_letter: str = "") -> dict:
        return self._request("POST", f"/jobs/{job_id}/apply", json={"coverLetter": cover_letter})

    def update_application_status(self, job_id: str, user_id: str, status: str) -> dict:
        return self._request("PUT", f"/jobs/{job_id}/applications/{user_id}", json={"status": status})

    def get_user_posted_jobs(self, page: int = 1, limit: int = 10) -> dict:
        return self._request("GET", "/jobs/user/posted", params={"page": page, "limit": limit})

    # ------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------

    def get_posts(self, page: int = 1, limit: int = 10) -> dict:
        return self._request("GET", "/posts", params={"page": page, "limit": limit})

    def create_post(self, post_data: dict) -> dict:
        return self._request("POST", "/posts", json=post_data)

    def like_post(self, post_id: str) -> dict:
        return self._request("POST", f"/posts/{post_id}/like")

    def comment_on_post(self, post_id: str, content: str) -> dict:
        return self._request("POST", f"/posts/{post_id}/comment", json={"content": content})

    def get_user_posts(self, user_id: str, page: int = 1, limit: int = 10) -> dict:
        return self._request("GET", f"/posts/user/{user_id}", params={"page": page, "limit": limit})
