"""Custom exceptions for the Unraid CLI."""

from __future__ import annotations

from typing import Any


class UnraidError(Exception):
    """Base exception for every error the CLI reports."""

    def __init__(self, message: str) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.

        """
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        """Return string representation."""
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class UnraidConfigError(UnraidError):
    """Base exception for config file and settings resolution errors."""


class ConfigIOError(UnraidConfigError):
    """Exception raised when the config file cannot be read or written."""


class ConfigParseError(UnraidConfigError):
    """Exception raised when the config file is not valid TOML or schema."""


class ProfileNotFoundError(UnraidConfigError):
    """Exception raised when a named server profile does not exist."""

    def __init__(self, name: str) -> None:
        """Initialize the exception.

        Args:
            name: Name of the missing profile.

        """
        super().__init__(f"Server '{name}' not found in configuration")
        self.name = name


class UnknownServerError(UnraidConfigError):
    """Exception raised when --server or UNRAID_SERVER names no profile."""

    def __init__(self, name: str) -> None:
        """Initialize the exception.

        Args:
            name: The server name that was requested.

        """
        super().__init__(
            f"Unknown server '{name}'. "
            "Use 'unraid config list' to see configured servers."
        )
        self.name = name


class MissingCredentialsError(UnraidConfigError):
    """Exception raised when no URL or API key could be resolved."""

    def __init__(self, missing: list[str]) -> None:
        """Initialize the exception.

        Args:
            missing: Names of the settings that could not be resolved.

        """
        super().__init__(
            f"No server configured (missing {', '.join(missing)}). "
            "Use 'unraid config add <name>' to add a server, "
            "or set UNRAID_URL and UNRAID_API_KEY environment variables."
        )
        self.missing = missing


class InvalidTimeoutError(UnraidConfigError):
    """Exception raised when a timeout is not a positive integer."""

    def __init__(self, value: object) -> None:
        """Initialize the exception.

        Args:
            value: The rejected timeout value.

        """
        super().__init__(
            f"Invalid timeout {value!r}: must be a positive integer of seconds"
        )
        self.value = value


# =============================================================================
# API Errors
# =============================================================================


class UnraidAPIError(UnraidError):
    """Base exception for Unraid API errors."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            status: HTTP status code, when the server answered.
            errors: Optional list of GraphQL error objects.

        """
        super().__init__(message)
        self.status = status
        self.errors = errors or []

    def __str__(self) -> str:
        """Return string representation."""
        if self.errors:
            error_msgs = []
            for err in self.errors:
                if isinstance(err, dict):
                    msg = err.get("message", str(err))
                    path = err.get("path")
                    if path:
                        msg = f"{msg} (path: {path})"
                    error_msgs.append(msg)
                else:
                    error_msgs.append(str(err))
            return f"{self.message}: {'; '.join(error_msgs)}"
        return self.message


class UnraidConnectionError(UnraidAPIError):
    """Exception raised when connection to Unraid server fails."""

    def __init__(self, message: str = "Failed to connect to Unraid server") -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.

        """
        super().__init__(message)


class UnraidSSLError(UnraidConnectionError):
    """Exception raised when SSL certificate verification fails.

    Only raised with --verify-ssl, since verification is off by default
    for the self-signed certificates Unraid ships with.
    """

    def __init__(self, message: str = "SSL certificate verification failed") -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.

        """
        super().__init__(message)


class UnraidAuthenticationError(UnraidAPIError):
    """Exception raised when authentication fails."""

    def __init__(
        self, message: str = "Authentication failed", *, status: int | None = None
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            status: HTTP status code (401 or 403).

        """
        super().__init__(message, status=status)


class UnraidTimeoutError(UnraidAPIError):
    """Exception raised when a request times out."""

    def __init__(self, message: str = "Request timed out") -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.

        """
        super().__init__(message)


class ContainerNotFoundError(UnraidAPIError):
    """Exception raised when no container matches a name or ID."""

    def __init__(self, name: str) -> None:
        """Initialize the exception.

        Args:
            name: Container name or ID that was looked up.

        """
        super().__init__(f"Container '{name}' not found")
        self.name = name
