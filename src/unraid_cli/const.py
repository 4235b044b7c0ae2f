"""Constants for the Unraid CLI: environment, config file and API values."""

from __future__ import annotations

# =============================================================================
# Application
# =============================================================================

APP_NAME = "unraid"
CONFIG_FILE_NAME = "config.toml"

# =============================================================================
# Environment Variables
# =============================================================================

ENV_URL = "UNRAID_URL"
ENV_API_KEY = "UNRAID_API_KEY"
ENV_SERVER = "UNRAID_SERVER"
ENV_TIMEOUT = "UNRAID_TIMEOUT"
ENV_CONFIG = "UNRAID_CONFIG"

# =============================================================================
# Request Defaults
# =============================================================================

DEFAULT_TIMEOUT = 5  # seconds
GRAPHQL_PATH = "/graphql"
API_KEY_HEADER = "x-api-key"
API_KEY_PREVIEW_LENGTH = 8

# =============================================================================
# Docker Operations
# =============================================================================

OPERATION_LIST_CONTAINERS = "list_containers"
OPERATION_START = "start"
OPERATION_STOP = "stop"
OPERATION_RESTART = "restart"
OPERATION_UPDATE = "update"

# =============================================================================
# Docker Container States
# =============================================================================

CONTAINER_STATE_RUNNING = "running"
