"""Portal API HTTP client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from kong_adapter.integrations.portal.exceptions import (
    PortalAPIError,
    PortalAuthError,
    PortalConnectionError,
    PortalNotFoundError,
)

if TYPE_CHECKING:
    from kong_adapter.integrations.portal.config import PortalConnectionConfig

logger = structlog.get_logger()


class PortalClient:
    """Read-only HTTP client for the portal API.

    The adapter never writes to the portal; it only reads the API and
    consumer definitions the gateway should converge to.
    """

    def __init__(self, connection_config: PortalConnectionConfig) -> None:
        self.connection_config = connection_config
        self._attempts = max(connection_config.retries, 1)

        headers = {"Accept": "application/json"}
        if connection_config.token:
            headers["Authorization"] = f"Bearer {connection_config.token.get_secret_value()}"

        self._client = httpx.Client(
            base_url=connection_config.base_url,
            timeout=httpx.Timeout(connection_config.timeout),
            verify=connection_config.verify_ssl,
            headers=headers,
        )

        logger.info(
            "Portal API client initialized",
            base_url=connection_config.base_url,
            authenticated=connection_config.token is not None,
        )

    def _handle_response(self, response: httpx.Response, endpoint: str) -> Any:
        """Parse a response and map error statuses to exceptions.

        Returns:
            The JSON body; a collection may come back as an object or a bare array.
        """
        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {"raw": response.text}

        if response.is_success:
            return body

        status = response.status_code
        if not isinstance(body, dict):
            body = {"raw": body}
        message = body.get("message", f"Portal API error: {status}")

        if status in (401, 403):
            raise PortalAuthError(message, status, body, endpoint)
        if status == 404:
            raise PortalNotFoundError(message, status, body, endpoint)
        raise PortalAPIError(message, status, body, endpoint)

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        url = f"/{endpoint.lstrip('/')}"
        log = logger.bind(method=method, endpoint=url)

        try:
            log.debug("Portal API request")
            response = self._client.request(method, url, **kwargs)
            log.debug("Portal API response", status=response.status_code)
            return self._handle_response(response, url)
        except httpx.ConnectError as e:
            log.error("Portal connection error", error=str(e))
            raise PortalConnectionError(
                message=f"Failed to connect to portal: {e}",
                endpoint=url,
                original_error=e,
            ) from e
        except httpx.TimeoutException as e:
            log.error("Portal request timeout", error=str(e))
            raise PortalConnectionError(
                message=f"Portal request timed out: {e}",
                endpoint=url,
                original_error=e,
            ) from e

    def get(self, endpoint: str, **kwargs: Any) -> Any:
        """GET request with connection-failure retries."""
        retry_decorator = retry(
            retry=retry_if_exception_type(PortalConnectionError),
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )
        return retry_decorator(self._request)("GET", endpoint, **kwargs)

    def ping(self) -> bool:
        """Return True if the portal answers its ping endpoint."""
        try:
            self.get("ping")
            return True
        except PortalAPIError:
            return False

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()
        logger.debug("Portal client closed")

    def __enter__(self) -> PortalClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
