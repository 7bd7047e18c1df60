"""
HTTP client for the remote resource/account API.

All persistent state lives behind this API; the client only reads it and
submits soft-block requests. Configuration is injected through Settings.
"""

import json
from typing import Any, Dict, List, Optional

import requests

from .env import Settings
from .logger import get_logger
from .mapper import (
    extract_array,
    map_account,
    map_api_resource,
    map_api_resources,
    map_statistics,
)
from .models import Account, Resource, ResourceStatistics
from .retry import (
    CircuitBreaker,
    RetryError,
    TransientHTTPError,
    call_with_retry,
    should_retry_http_status,
)

logger = get_logger()

RETRY_BASE_DELAY = 0.5
RETRYABLE_EXCEPTIONS = (
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
    TransientHTTPError,
)


class ApiError(ValueError):
    """The resource API could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def error_message(resp: requests.Response) -> str:
    """Best human-readable message for a failed response."""
    fallback = f"API Error: {resp.status_code} {resp.reason or ''}".rstrip()
    text = resp.text or ""
    if not text:
        return fallback
    try:
        body = json.loads(text)
    except ValueError:
        return f"{fallback} - {text[:200]}"
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if body.get(key):
                return str(body[key])
    return fallback


class ResourceApiClient:
    def __init__(
        self,
        settings: Settings,
        session: Optional[requests.Session] = None,
        breaker: Optional[CircuitBreaker] = None,
        retry_delay: float = RETRY_BASE_DELAY,
    ):
        self.settings = settings
        self.base_url = settings.api_url.rstrip("/")
        self.session = session or requests.Session()
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=5,
            recovery_timeout=60,
            expected_exception=(RetryError, requests.exceptions.RequestException),
        )
        self.retry_delay = retry_delay

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _send(self, method: str, url: str, params, body) -> requests.Response:
        headers = {"Accept": "application/json"}
        data = None
        if body is not None:
            headers["Content-Type"] = "application/json"
            data = json.dumps(body)
        resp = self.session.request(
            method, url, params=params, data=data, headers=headers, timeout=self.settings.timeout
        )
        if should_retry_http_status(resp.status_code):
            raise TransientHTTPError(resp.status_code, resp)
        return resp

    def request(
        self,
        method: str,
        path: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        body: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path under the base URL, e.g. /api/v1/resources
            endpoint: Stable label for metrics, e.g. resources.list

        Raises:
            ApiError: On HTTP errors, unreachable server or invalid JSON
            CircuitOpenError: When recent calls kept failing
        """
        url = f"{self.base_url}{path}"
        logger.record_api_call(endpoint)
        logger.debug("API request", method=method, url=url)

        try:
            resp = self.breaker.call(
                call_with_retry,
                self._send, method, url, params, body,
                max_retries=self.settings.max_retries,
                base_delay=self.retry_delay,
                exceptions=RETRYABLE_EXCEPTIONS,
            )
        except RetryError as e:
            cause = e.__cause__
            if isinstance(cause, TransientHTTPError) and cause.response is not None:
                resp = cause.response
            else:
                logger.record_api_failure(endpoint, type(cause).__name__ if cause else "RetryError")
                logger.error("API unreachable", url=url, error=str(cause or e))
                raise ApiError(
                    f"Network error: Unable to connect to the API server at {self.base_url}. "
                    "Please ensure the backend server is running."
                ) from e
        except requests.exceptions.RequestException as e:
            logger.record_api_failure(endpoint, type(e).__name__)
            logger.error("API request error", url=url, error=str(e))
            raise ApiError(f"API request error: {e}") from e

        if not resp.ok:
            message = error_message(resp)
            logger.record_api_failure(endpoint, f"HTTPError_{resp.status_code}")
            logger.error("API request failed", url=url, status=resp.status_code, detail=message)
            raise ApiError(message, status_code=resp.status_code)

        if not resp.content:
            logger.record_api_success(endpoint)
            return None
        try:
            payload = resp.json()
        except ValueError as e:
            logger.record_api_failure(endpoint, "InvalidJSON")
            raise ApiError(f"API returned invalid JSON from {path}", status_code=resp.status_code) from e

        logger.record_api_success(endpoint)
        return payload

    # Resource endpoints

    def fetch_resource_payloads(self) -> List[Dict[str, Any]]:
        """Raw resource records, unwrapped from any pagination envelope."""
        payload = self.request("GET", "/api/v1/resources", "resources.list")
        records = extract_array(payload)
        return records if isinstance(records, list) else []

    def list_resources(self) -> List[Resource]:
        return map_api_resources(self.fetch_resource_payloads())

    def get_resource(self, resource_id: str) -> Resource:
        payload = self.request("GET", f"/api/v1/resources/{resource_id}", "resources.get")
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        if not isinstance(payload, dict):
            raise ApiError(f"Resource {resource_id} returned no record")
        return map_api_resource(payload)

    def get_statistics(self) -> ResourceStatistics:
        return map_statistics(self.request("GET", "/api/v1/resources/stats", "resources.stats"))

    def _string_list(self, path: str, endpoint: str) -> List[str]:
        values = extract_array(self.request("GET", path, endpoint))
        return [str(v) for v in values if v] if isinstance(values, list) else []

    def list_locations(self) -> List[str]:
        return self._string_list("/api/v1/resources/locations", "resources.locations")

    def list_skills(self) -> List[str]:
        return self._string_list("/api/v1/resources/skills", "resources.skills")

    def search_by_skills(
        self,
        skills: List[str],
        location: str = "",
        experience: float = 0,
        page: int = 0,
        limit: int = 10,
    ) -> List[Resource]:
        body = {
            "skills": skills or [],
            "location": location or "",
            "experience": experience or 0,
            "page": page or 0,
            "limit": limit or 10,
        }
        payload = self.request("POST", "/api/v1/resources/search-by-skills", "resources.search", body=body)
        records = extract_array(payload)
        return map_api_resources(records if isinstance(records, list) else [])

    def soft_block_resource(self, resource_id: str, account_id: str, blocked_until: str) -> Any:
        return self.request(
            "POST",
            f"/api/v1/resources/{resource_id}/soft-block",
            "resources.soft_block",
            params={"accountId": account_id, "blockedUntil": blocked_until},
        )

    # Account endpoints

    def list_accounts(self) -> List[Account]:
        records = extract_array(self.request("GET", "/api/v1/accounts", "accounts.list"))
        if not isinstance(records, list):
            return []
        return [map_account(r) for r in records if isinstance(r, dict)]
