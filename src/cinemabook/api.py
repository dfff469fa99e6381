"""
CinemaBook REST API transport
=============================

Thin wrapper around one ``requests.Session``:
- JSON in, JSON out
- ``Authorization: Bearer <token>`` once the user is logged in
- any non-2xx status is raised as ``ApiError("<status>: <body>")``
- no retry, no backoff
"""

import logging
from typing import Any, Callable, Optional, Sequence

import requests

from cinemabook.config import API_URL, HEADERS, REQUEST_TIMEOUT
from cinemabook.errors import ApiError

logger = logging.getLogger(__name__)


def key_to_path(query_key: Sequence[Any]) -> str:
    """("/api/movies", 3, "showtimes") -> "/api/movies/3/showtimes"."""
    return "/".join(str(part) for part in query_key)


class ApiClient:
    """Client for the booking API."""

    def __init__(self, base_url: str = API_URL, token_provider: Optional[Callable[[], Optional[str]]] = None,
                 session: Optional[requests.Session] = None, timeout: float = REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(HEADERS)
        self.stats = {"requests": 0, "errors": 0}

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}{path}"

    def _headers(self, with_body: bool) -> dict:
        headers = {}
        if with_body:
            headers["Content-Type"] = "application/json"
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _send(self, method: str, path: str, data: Any = None) -> requests.Response:
        url = self._url(path)
        self.stats["requests"] += 1
        logger.debug(f"{method} {url}")
        try:
            return self.session.request(
                method,
                url,
                json=data,
                headers=self._headers(data is not None),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            self.stats["errors"] += 1
            logger.error(f"Timeout: {method} {url}")
            raise ApiError(None, f"Request timed out: {method} {path}")
        except requests.RequestException as e:
            self.stats["errors"] += 1
            logger.error(f"Request failed for {method} {url}: {e}")
            raise ApiError(None, str(e))

    def _raise_for_status(self, response: requests.Response, method: str, path: str) -> None:
        if response.ok:
            return
        self.stats["errors"] += 1
        text = response.text or response.reason or ""
        logger.warning(f"HTTP {response.status_code}: {method} {path}")
        raise ApiError(response.status_code, f"{response.status_code}: {text}")

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def request(self, method: str, path: str, data: Any = None) -> Any:
        """Send a request and return the decoded body (``None`` when empty)."""
        method = method.upper()
        response = self._send(method, path, data)
        self._raise_for_status(response, method, path)
        return self._decode(response)

    def get_json(self, query_key: Sequence[Any], on_401: str = "throw") -> Any:
        """GET the URL named by a query key.

        ``on_401="return_null"`` turns an unauthorized response into ``None``
        instead of an error.
        """
        path = key_to_path(query_key)
        response = self._send("GET", path)
        if on_401 == "return_null" and response.status_code == 401:
            logger.debug(f"401 on {path}, returning None")
            return None
        self._raise_for_status(response, "GET", path)
        return self._decode(response)

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, data: Any = None) -> Any:
        return self.request("POST", path, data)

    def put(self, path: str, data: Any = None) -> Any:
        return self.request("PUT", path, data)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def close(self) -> None:
        self.session.close()
