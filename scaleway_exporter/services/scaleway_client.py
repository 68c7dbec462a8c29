"""Thin HTTP client for the Scaleway REST API.

Handles authentication, error mapping and pagination. Each call takes an
explicit timeout so a scrape's deadline bounds every outbound request.
"""

import logging
from typing import Any

import requests

from scaleway_exporter.exceptions import ScalewayClientError, ScalewayResponseError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100

# urllib3 rejects timeouts <= 0
_MIN_TIMEOUT = 0.001


class ScalewayClient:
    """Authenticated session against ``https://api.scaleway.com``."""

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        api_url: str = "https://api.scaleway.com",
        session: requests.Session | None = None,
        user_agent: str = "scaleway-exporter",
    ):
        """Initialize the client.

        Args:
            access_key: Scaleway API access key (also used for S3).
            secret_key: Scaleway API secret key, sent as X-Auth-Token.
            api_url: Base URL of the API.
            session: Optional pre-built requests session.
            user_agent: User-Agent header value.
        """
        if not access_key or not secret_key:
            raise ScalewayClientError("Scaleway access key and secret key are required")

        self.access_key = access_key
        self.secret_key = secret_key
        self.api_url = api_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "X-Auth-Token": secret_key,
                "User-Agent": user_agent,
                "Accept": "application/json",
            }
        )

    def get(
        self, path: str, params: dict[str, Any] | None = None, timeout: float = 5.0
    ) -> dict[str, Any]:
        return self._request("GET", path, params=params, timeout=timeout)

    def post(
        self,
        path: str,
        body: dict[str, Any],
        params: dict[str, Any] | None = None,
        timeout: float = 5.0,
    ) -> dict[str, Any]:
        return self._request("POST", path, params=params, json=body, timeout=timeout)

    def list_all(
        self,
        path: str,
        key: str,
        params: dict[str, Any] | None = None,
        timeout: float = 5.0,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        """Follow ``page``/``page_size`` pagination until every item is gathered.

        Stops when ``total_count`` items have been read or a page comes back
        empty. A failure on any page fails the whole listing.
        """
        items: list[dict[str, Any]] = []
        page = 1

        while True:
            query = dict(params or {})
            query.update({"page": page, "page_size": page_size})
            payload = self._request("GET", path, params=query, timeout=timeout)

            batch = payload.get(key) or []
            items.extend(batch)

            total = payload.get("total_count")
            if not batch or total is None or len(items) >= int(total):
                break
            page += 1

        return items

    def _request(
        self, method: str, path: str, timeout: float, **kwargs: Any
    ) -> dict[str, Any]:
        url = f"{self.api_url}{path}"
        logger.debug(f"Scaleway API {method} {path}", extra={"timeout": timeout})

        try:
            response = self._session.request(
                method, url, timeout=max(timeout, _MIN_TIMEOUT), **kwargs
            )
        except requests.RequestException as e:
            raise ScalewayClientError(f"{method} {path} failed: {e}") from e

        if not response.ok:
            raise ScalewayResponseError(
                response.status_code, _error_message(response), path=path
            )

        if not response.content:
            return {}

        try:
            payload = response.json()
        except ValueError as e:
            raise ScalewayClientError(f"{method} {path} returned invalid JSON") from e

        if not isinstance(payload, dict):
            raise ScalewayClientError(f"{method} {path} returned unexpected payload")
        return payload


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.reason or "error"
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("type") or response.reason)
    return response.reason or "error"
