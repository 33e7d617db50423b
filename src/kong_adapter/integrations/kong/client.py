"""Kong Admin API HTTP client."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, cast

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from kong_adapter.integrations.kong.exceptions import (
    KongAPIError,
    KongAuthError,
    KongConnectionError,
    KongNotFoundError,
    KongValidationError,
)

if TYPE_CHECKING:
    from kong_adapter.integrations.kong.config import (
        KongAuthConfig,
        KongConnectionConfig,
    )

logger = structlog.get_logger()


class KongAdminClient:
    """HTTP client for the Kong Admin API.

    Wraps an ``httpx.Client`` with authentication, error mapping and
    retries of connection failures.

    Example:
        ```python
        connection = KongConnectionConfig(base_url="http://localhost:8001")
        auth = KongAuthConfig(type="api_key", api_key="my-api-key")

        with KongAdminClient(connection, auth) as client:
            for service in client.iterate("services"):
                print(service["name"])
        ```
    """

    def __init__(
        self,
        connection_config: KongConnectionConfig,
        auth_config: KongAuthConfig | None = None,
    ) -> None:
        """Initialize Kong Admin API client.

        Args:
            connection_config: Connection settings (URL, timeout, SSL, retries).
            auth_config: Authentication settings (type, credentials).
        """
        self.connection_config = connection_config
        self.auth_config = auth_config
        # tenacity counts the first call as an attempt
        self._attempts = max(connection_config.retries, 1)

        client_kwargs: dict[str, Any] = {
            "base_url": connection_config.base_url,
            "timeout": httpx.Timeout(connection_config.timeout),
            "verify": connection_config.verify_ssl,
        }

        headers: dict[str, str] = {}
        if auth_config:
            if auth_config.type == "api_key" and auth_config.api_key:
                headers[auth_config.header_name] = auth_config.api_key
                logger.debug("Kong client configured with API key auth")
            elif auth_config.type == "mtls" and auth_config.cert_path and auth_config.key_path:
                client_kwargs["cert"] = (auth_config.cert_path, auth_config.key_path)
                if auth_config.ca_path:
                    client_kwargs["verify"] = auth_config.ca_path
                logger.debug("Kong client configured with mTLS auth")

        if headers:
            client_kwargs["headers"] = headers

        self._client = httpx.Client(**client_kwargs)

        logger.info(
            "Kong Admin API client initialized",
            base_url=connection_config.base_url,
            auth_type=auth_config.type if auth_config else "none",
        )

    def _make_retry_decorator(self) -> Any:
        """Create a retry decorator that only retries connection failures."""
        return retry(
            retry=retry_if_exception_type(KongConnectionError),
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    def _handle_response(self, response: httpx.Response, endpoint: str) -> dict[str, Any]:
        """Parse a response and map error statuses to exceptions.

        Args:
            response: The HTTP response from Kong.
            endpoint: The endpoint that was called.

        Returns:
            Parsed JSON response body.

        Raises:
            KongAuthError: If authentication failed (401/403).
            KongNotFoundError: If the entity does not exist (404).
            KongValidationError: If the payload was rejected (400).
            KongAPIError: For any other error status.
        """
        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {"raw": response.text}

        if response.is_success:
            return cast(dict[str, Any], body)

        status = response.status_code

        if status in (401, 403):
            raise KongAuthError(
                message=body.get("message", "Authentication failed"),
                status_code=status,
                response_body=body,
                endpoint=endpoint,
            )

        if status == 404:
            raise KongNotFoundError(
                message=body.get("message", "Resource not found"),
                response_body=body,
                endpoint=endpoint,
            )

        if status == 400:
            raise KongValidationError(
                message=body.get("message", "Validation failed"),
                validation_errors=body.get("fields", {}),
                response_body=body,
                endpoint=endpoint,
            )

        raise KongAPIError(
            message=body.get("message", f"Kong API error: {status}"),
            status_code=status,
            response_body=body,
            endpoint=endpoint,
        )

    def _request(
        self,
        method: str,
        endpoint: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Make a single HTTP request to the Admin API.

        Raises:
            KongConnectionError: If the connection fails or times out.
            KongAPIError: If Kong returns an error response.
        """
        url = f"/{endpoint.lstrip('/')}"
        log = logger.bind(method=method, endpoint=url)

        try:
            log.debug("Kong API request")
            response = self._client.request(method, url, **kwargs)
            log.debug("Kong API response", status=response.status_code)
            return self._handle_response(response, url)
        except httpx.ConnectError as e:
            log.error("Kong connection error", error=str(e))
            raise KongConnectionError(
                message=f"Failed to connect to Kong: {e}",
                endpoint=url,
                original_error=e,
            ) from e
        except httpx.TimeoutException as e:
            log.error("Kong request timeout", error=str(e))
            raise KongConnectionError(
                message=f"Kong request timed out: {e}",
                endpoint=url,
                original_error=e,
            ) from e

    def request(self, method: str, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        """Make a request with connection-failure retries."""
        retry_decorator = self._make_retry_decorator()
        return cast(dict[str, Any], retry_decorator(self._request)(method, endpoint, **kwargs))

    def get(self, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        """GET request to the Admin API."""
        return self.request("GET", endpoint, **kwargs)

    def post(
        self,
        endpoint: str,
        json: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """POST request to the Admin API; returns the created entity."""
        return self.request("POST", endpoint, json=json, **kwargs)

    def patch(
        self,
        endpoint: str,
        json: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """PATCH request to the Admin API; returns the updated entity."""
        return self.request("PATCH", endpoint, json=json, **kwargs)

    def delete(self, endpoint: str, **kwargs: Any) -> None:
        """DELETE request to the Admin API."""
        self.request("DELETE", endpoint, **kwargs)

    def iterate(
        self,
        endpoint: str,
        *,
        tags: list[str] | None = None,
        **params: Any,
    ) -> Iterator[dict[str, Any]]:
        """Yield every entity of a collection endpoint, following pagination.

        Args:
            endpoint: Collection endpoint (e.g. "services", "consumers/x/plugins").
            tags: Only yield entities carrying all of these tags.
            **params: Extra query parameters.

        Yields:
            Entity dictionaries in Kong's listing order.
        """
        query: dict[str, Any] = {"size": self.connection_config.page_size, **params}
        if tags:
            query["tags"] = ",".join(tags)

        while True:
            response = self.get(endpoint, params=query)
            yield from response.get("data", [])
            offset = response.get("offset")
            if not offset:
                break
            query["offset"] = offset

    def list_all(
        self,
        endpoint: str,
        *,
        tags: list[str] | None = None,
        **params: Any,
    ) -> list[dict[str, Any]]:
        """Collect every page of a collection endpoint into a list."""
        entities = list(self.iterate(endpoint, tags=tags, **params))
        logger.debug("Kong collection listed", endpoint=endpoint, count=len(entities))
        return entities

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()
        logger.debug("Kong client closed")

    def __enter__(self) -> KongAdminClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def get_status(self) -> dict[str, Any]:
        """Get Kong node status, including database reachability."""
        return self.get("status")

    def check_connection(self) -> bool:
        """Return True if the Admin API answers the status endpoint."""
        try:
            self.get_status()
            return True
        except KongAPIError:
            return False
