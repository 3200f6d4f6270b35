"""HTTP client for the hotel API with timeout, retry and uniform results.

Every call resolves to an :class:`ApiResponse`; network and HTTP failures
are reported through ``success=False`` and ``error`` rather than raised, so
callers can show the message inline.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Request timeout. Please try again."


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


@dataclass
class ApiResponse:
    success: bool
    data: Any = None
    error: Optional[str] = None
    message: Optional[str] = None
    status_code: Optional[int] = None
    timed_out: bool = False


class ApiClient:
    """Thin wrapper around ``requests.Session``.

    Args:
        base_url: Prefix for every request path.
        timeout: Seconds before a request is abandoned. Timeouts are never retried.
        retries: Extra attempts after a connection failure.
        retry_delay: Fixed pause between attempts, in seconds.
    """

    def __init__(self, base_url: str = "", timeout: float = 10.0, retries: int = 0, retry_delay: float = 1.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = retries
        self.retry_delay = retry_delay
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _send(self, method: str, url: str, timeout: float, retries: int, retry_delay: float,
              **kwargs) -> requests.Response:
        last_error: Optional[Exception] = None
        for attempt in range(retries + 1):
            try:
                return self.session.request(method, url, timeout=timeout, **kwargs)
            except requests.exceptions.Timeout:
                # A timeout is final; retrying would only double the wait
                raise
            except requests.exceptions.RequestException as e:
                last_error = e
                if attempt == retries:
                    raise
                logger.warning("%s %s failed (attempt %d/%d): %s", method, url, attempt + 1, retries + 1, e)
                time.sleep(retry_delay)
        raise last_error or requests.exceptions.RequestException("Request failed")

    def request(self, method: str, path: str, *, timeout: Optional[float] = None, retries: Optional[int] = None,
                retry_delay: Optional[float] = None, **kwargs) -> ApiResponse:
        url = self._url(path)
        logger.debug("API request: %s %s", method, url)
        try:
            response = self._send(
                method,
                url,
                self.timeout if timeout is None else timeout,
                self.retries if retries is None else retries,
                self.retry_delay if retry_delay is None else retry_delay,
                **kwargs,
            )
            return self._parse(response)
        except ApiError as e:
            logger.error("API error: %s - %s", e.status_code, e)
            return ApiResponse(success=False, error=str(e), status_code=e.status_code)
        except requests.exceptions.Timeout:
            logger.error("API timeout: %s", url)
            return ApiResponse(success=False, error=TIMEOUT_MESSAGE, timed_out=True)
        except requests.exceptions.RequestException as e:
            logger.error("API request failed: %s", e)
            return ApiResponse(success=False, error=str(e) or "Request failed")

    @staticmethod
    def _parse(response: requests.Response) -> ApiResponse:
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            if not response.ok:
                raise ApiError(f"HTTP Error {response.status_code}: {response.reason}", response.status_code)
            return ApiResponse(success=True, data=response.text, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError:
            raise ApiError(f"Invalid JSON in response ({response.status_code})", response.status_code)

        if not response.ok:
            message = None
            if isinstance(body, dict):
                message = body.get("error") or body.get("message") or body.get("detail")
            raise ApiError(str(message or f"HTTP Error {response.status_code}"), response.status_code, body)

        if isinstance(body, dict):
            data = body["data"] if "data" in body and body["data"] is not None else body
            if data is body and body.get("success") is True and set(body) <= {"success", "message", "data"}:
                data = None
            return ApiResponse(success=True, data=data, message=body.get("message"), status_code=response.status_code)
        return ApiResponse(success=True, data=body, status_code=response.status_code)

    def get(self, path: str, **kwargs) -> ApiResponse:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, body: Any = None, **kwargs) -> ApiResponse:
        return self.request("POST", path, json=body, **kwargs)

    def put(self, path: str, body: Any = None, **kwargs) -> ApiResponse:
        return self.request("PUT", path, json=body, **kwargs)

    def delete(self, path: str, **kwargs) -> ApiResponse:
        return self.request("DELETE", path, **kwargs)

    def upload(self, path: str, files: dict, data: Optional[dict] = None, **kwargs) -> ApiResponse:
        return self.request("POST", path, files=files, data=data, **kwargs)
