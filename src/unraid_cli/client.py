"""Async GraphQL client for the Unraid Docker API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin, urlparse

import aiohttp

from unraid_cli.const import (
    API_KEY_HEADER,
    DEFAULT_TIMEOUT,
    GRAPHQL_PATH,
    OPERATION_LIST_CONTAINERS,
    OPERATION_RESTART,
    OPERATION_START,
    OPERATION_STOP,
    OPERATION_UPDATE,
)
from unraid_cli.exceptions import (
    ContainerNotFoundError,
    UnraidAPIError,
    UnraidAuthenticationError,
    UnraidConnectionError,
    UnraidSSLError,
    UnraidTimeoutError,
)
from unraid_cli.models import DockerContainer

if TYPE_CHECKING:
    from types import TracebackType

    from unraid_cli.models import EffectiveSettings


_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_OK = 200
HTTP_MULTIPLE_CHOICES = 300
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
REDIRECT_STATUSES = (301, 302, 307, 308)

# Operation name -> client method taking a container ID
CONTAINER_ACTIONS = {
    OPERATION_START: "start_container",
    OPERATION_STOP: "stop_container",
    OPERATION_RESTART: "restart_container",
    OPERATION_UPDATE: "update_container",
}
OPERATIONS = (OPERATION_LIST_CONTAINERS, *CONTAINER_ACTIONS)

_CONTAINER_FIELDS = "id names image state status"


def build_endpoint(url: str) -> str:
    """Return the GraphQL endpoint for a configured server URL.

    A URL without scheme is assumed to be HTTPS and a URL without path
    gets ``/graphql`` appended. Any explicit path is kept as given.

    Args:
        url: Server URL as configured (e.g. ``https://192.168.1.100``).

    Returns:
        Full endpoint URL.

    """
    endpoint = url.strip().rstrip("/")
    if "://" not in endpoint:
        endpoint = f"https://{endpoint}"
    if not urlparse(endpoint).path:
        endpoint = f"{endpoint}{GRAPHQL_PATH}"
    return endpoint


class UnraidClient:
    """Async client for the Docker part of the Unraid GraphQL API.

    Example:
        async with UnraidClient("https://192.168.1.100", "your-api-key") as client:
            for container in await client.list_containers():
                print(container.name, container.state)

    """

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        verify_ssl: bool = False,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            url: Server URL or full GraphQL endpoint.
            api_key: Unraid API key.
            timeout: Request deadline in seconds (default 5s).
            verify_ssl: Whether to verify SSL certificates (default False,
                Unraid ships self-signed certificates).
            session: Optional aiohttp session to use instead of owning one.

        """
        self.url = url.strip()
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self._api_key = api_key
        self._session: aiohttp.ClientSession | None = session
        self._owns_session: bool = session is None
        self._endpoint = build_endpoint(self.url)

    @classmethod
    def from_settings(
        cls,
        settings: EffectiveSettings,
        *,
        verify_ssl: bool = False,
        session: aiohttp.ClientSession | None = None,
    ) -> UnraidClient:
        """Create a client from resolved settings."""
        return cls(
            settings.url,
            settings.api_key,
            timeout=settings.timeout,
            verify_ssl=verify_ssl,
            session=session,
        )

    @property
    def session(self) -> aiohttp.ClientSession | None:
        """Get the aiohttp session."""
        return self._session

    @property
    def endpoint(self) -> str:
        """Get the GraphQL endpoint requests are posted to."""
        return self._endpoint

    async def __aenter__(self) -> UnraidClient:
        """Async context manager entry."""
        await self._create_session()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    async def _create_session(self) -> None:
        """Create aiohttp session with the configured SSL mode and deadline."""
        if self._session is not None:
            return

        if not self.verify_ssl:
            _LOGGER.warning(
                "SSL verification disabled for %s. "
                "Connection is encrypted but server identity is not verified.",
                self.url,
            )

        connector = aiohttp.TCPConnector(ssl=self.verify_ssl)
        self._session = aiohttp.ClientSession(
            connector=connector,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            headers={API_KEY_HEADER: self._api_key},
        )
        self._owns_session = True

    async def close(self) -> None:
        """Close the aiohttp session if we created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def _make_request(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Post a GraphQL payload and return the decoded JSON body.

        Args:
            payload: GraphQL query/mutation payload.

        Returns:
            Response body dictionary.

        Raises:
            UnraidConnectionError: On network errors.
            UnraidSSLError: On certificate verification failures.
            UnraidAuthenticationError: On 401/403 responses.
            UnraidTimeoutError: When the deadline expires.
            UnraidAPIError: On other non-2xx responses or invalid bodies.

        """
        if self._session is None:
            await self._create_session()

        if self._session is None:
            raise UnraidConnectionError("Failed to create HTTP session")

        headers = {API_KEY_HEADER: self._api_key}
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        _LOGGER.debug("Posting GraphQL request to %s", self._endpoint)

        try:
            async with self._session.post(
                self._endpoint,
                json=payload,
                headers=headers,
                timeout=timeout,
                allow_redirects=False,
            ) as response:
                if response.status not in REDIRECT_STATUSES:
                    return await self._read_response(response)

                # myunraid.net and HTTPS-only servers answer with a redirect
                redirect_url = response.headers.get("Location")
                if not redirect_url:
                    raise UnraidConnectionError(
                        f"Redirect {response.status} without Location header"
                    )
                redirect_url = urljoin(str(response.url), redirect_url)
                _LOGGER.debug("Following redirect to %s", redirect_url)
                self._endpoint = redirect_url
                async with self._session.post(
                    redirect_url,
                    json=payload,
                    headers=headers,
                    timeout=timeout,
                    allow_redirects=False,
                ) as redirect_response:
                    return await self._read_response(redirect_response)

        except TimeoutError as err:
            raise UnraidTimeoutError(
                f"Request timed out after {self.timeout}s"
            ) from err
        except aiohttp.ClientSSLError as err:
            raise UnraidSSLError(f"SSL certificate verification failed: {err}") from err
        except aiohttp.ClientError as err:
            raise UnraidConnectionError(f"Connection failed: {err}") from err

    @staticmethod
    async def _read_response(response: aiohttp.ClientResponse) -> dict[str, Any]:
        """Check the status of a response and decode its JSON body."""
        if response.status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
            raise UnraidAuthenticationError(
                "Invalid API key or insufficient permissions",
                status=response.status,
            )

        if not HTTP_OK <= response.status < HTTP_MULTIPLE_CHOICES:
            body = (await response.text(errors="replace")).strip()
            raise UnraidAPIError(
                f"HTTP {response.status}: {body or response.reason}",
                status=response.status,
            )

        try:
            result = await response.json(content_type=None)
        except ValueError as err:
            raise UnraidAPIError(
                f"Invalid JSON in response: {err}", status=response.status
            ) from err

        if not isinstance(result, dict):
            raise UnraidAPIError(
                "Unexpected response format", status=response.status
            )
        return result

    async def query(
        self, query: str, variables: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Execute a GraphQL query.

        Args:
            query: GraphQL query string.
            variables: Optional query variables.

        Returns:
            Query response data (the 'data' field from GraphQL response).

        Raises:
            UnraidAPIError: On GraphQL errors with no data.
            UnraidConnectionError: On network errors.
            UnraidAuthenticationError: On authentication failures.

        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        response = await self._make_request(payload)
        data = response.get("data") or {}

        if response.get("errors"):
            errors = response["errors"]
            _LOGGER.debug("Full GraphQL error response: %s", errors)

            if not data:
                raise UnraidAPIError("GraphQL query failed", errors=errors)

            # Partial failure - log and return data
            _LOGGER.debug("GraphQL query returned partial data with errors")

        return dict(data)

    async def mutate(
        self, mutation: str, variables: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Execute a GraphQL mutation.

        Args:
            mutation: GraphQL mutation string.
            variables: Optional mutation variables.

        Returns:
            Mutation response data.

        """
        return await self.query(mutation, variables)

    # =========================================================================
    # Docker Container Methods
    # =========================================================================

    async def list_containers(self) -> list[DockerContainer]:
        """Get all Docker containers.

        Returns:
            List of DockerContainer models, running or not.

        """
        query_str = """
            query {
                docker {
                    containers {
                        id
                        names
                        image
                        state
                        status
                        autoStart
                        ports { ip privatePort publicPort type }
                    }
                }
            }
        """
        result = await self.query(query_str)
        containers = (result.get("docker") or {}).get("containers") or []
        return [DockerContainer.from_api_response(c) for c in containers]

    async def find_container(self, name_or_id: str) -> DockerContainer:
        """Look up a container by name (with or without '/') or ID.

        Raises:
            ContainerNotFoundError: If no container matches.

        """
        for container in await self.list_containers():
            if container.matches(name_or_id):
                return container
        raise ContainerNotFoundError(name_or_id)

    async def _container_mutation(
        self, field: str, container_id: str
    ) -> DockerContainer:
        """Run ``docker { <field>(id: $id) }`` and parse the returned container."""
        mutation = f"""
            mutation ($id: PrefixedID!) {{
                docker {{
                    {field}(id: $id) {{ {_CONTAINER_FIELDS} }}
                }}
            }}
        """
        result = await self.mutate(mutation, {"id": container_id})
        data = (result.get("docker") or {}).get(field) or {"id": container_id}
        return DockerContainer.from_api_response(data)

    async def start_container(self, container_id: str) -> DockerContainer:
        """Start a Docker container.

        Args:
            container_id: Container ID to start.

        Returns:
            The container as reported after the mutation.

        """
        return await self._container_mutation("start", container_id)

    async def stop_container(self, container_id: str) -> DockerContainer:
        """Stop a Docker container.

        Args:
            container_id: Container ID to stop.

        Returns:
            The container as reported after the mutation.

        """
        return await self._container_mutation("stop", container_id)

    async def restart_container(self, container_id: str) -> DockerContainer:
        """Restart a Docker container by stopping and starting it.

        The API has no restart mutation, so this is two requests.

        Args:
            container_id: Container ID to restart.

        Returns:
            The container as reported after the start.

        """
        await self.stop_container(container_id)
        return await self.start_container(container_id)

    async def update_container(self, container_id: str) -> DockerContainer:
        """Update a container to the latest image.

        Args:
            container_id: Container ID to update.

        Returns:
            The container as reported after the mutation.

        """
        return await self._container_mutation("updateContainer", container_id)


async def request(
    settings: EffectiveSettings,
    operation: str,
    params: dict[str, Any] | None = None,
    *,
    verify_ssl: bool = False,
    session: aiohttp.ClientSession | None = None,
) -> list[DockerContainer] | DockerContainer:
    """Run one Docker operation against the server in ``settings``.

    Args:
        settings: Resolved URL, API key and timeout.
        operation: One of ``list_containers``, ``start``, ``stop``,
            ``restart`` or ``update``.
        params: ``{"all": bool}`` for ``list_containers``; ``{"name": str}``
            (container name or ID) for the others.
        verify_ssl: Whether to verify SSL certificates.
        session: Optional aiohttp session to reuse.

    Returns:
        The containers listed (running only unless ``all``), or the
        container the action was applied to.

    Raises:
        ValueError: If the operation is unknown or a name is missing.
        UnraidAPIError: On any API, network or timeout failure.

    """
    params = params or {}
    if operation not in OPERATIONS:
        raise ValueError(f"Unknown operation: {operation}")
    if operation != OPERATION_LIST_CONTAINERS and not params.get("name"):
        raise ValueError(f"Operation '{operation}' requires a container name")

    async with UnraidClient.from_settings(
        settings, verify_ssl=verify_ssl, session=session
    ) as client:
        if operation == OPERATION_LIST_CONTAINERS:
            containers = await client.list_containers()
            if params.get("all"):
                return containers
            return [c for c in containers if c.is_running]

        container = await client.find_container(params["name"])
        action = getattr(client, CONTAINER_ACTIONS[operation])
        _LOGGER.debug("Running %s on container %s", operation, container.id)
        result: DockerContainer = await action(container.id)
        return result
