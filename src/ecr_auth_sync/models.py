"""Data models for ecr-auth-sync.

This module provides the typed values passed between the credential
provider, the renderer, the upsert engine and the sync loop.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ecr_auth_sync.exceptions import ConfigurationError

# Kubernetes DNS subdomain name validation (RFC 1123)
_DNS_SUBDOMAIN_MAX_LENGTH = 253
_DNS_SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")

DEFAULT_INTERVAL = 1200
DEFAULT_SECRET_NAME = "ecr-auth-cfg"


class SecretTypeVariant(str, Enum):
    """Layouts for storing the pull-secret payload inside a Secret.

    Inherits from str so the values can be used directly as CLI choices.
    """

    GENERIC = "generic"
    DOCKER_CONFIG_JSON = "dockerconfigjson"
    DOCKER_CFG = "dockercfg"

    @property
    def data_key(self) -> str:
        """The key the payload is stored under in the Secret data."""
        return _DATA_KEYS[self]

    @property
    def secret_type(self) -> str:
        """The Kubernetes Secret type field for this layout."""
        return _SECRET_TYPES[self]


_DATA_KEYS = {
    SecretTypeVariant.GENERIC: "config.json",
    SecretTypeVariant.DOCKER_CONFIG_JSON: ".dockerconfigjson",
    SecretTypeVariant.DOCKER_CFG: ".dockercfg",
}

_SECRET_TYPES = {
    SecretTypeVariant.GENERIC: "Opaque",
    SecretTypeVariant.DOCKER_CONFIG_JSON: "kubernetes.io/dockerconfigjson",
    SecretTypeVariant.DOCKER_CFG: "kubernetes.io/dockercfg",
}


class ActionTaken(str, Enum):
    """Outcome of a successful upsert."""

    CREATED = "created"
    UPDATED = "updated"


@dataclass(frozen=True, slots=True)
class RegistryCredential:
    """A single authorization record returned by the registry.

    Attributes:
        endpoint: Registry address, usually with an https:// scheme.
        token: Base64 encoded user:password, used verbatim.
        expires_at: Expiry reported by the registry, informational only.

    """

    endpoint: str
    token: str
    expires_at: datetime | None = None

    def __repr__(self) -> str:
        """Return a representation that never includes the token."""
        return f"RegistryCredential(endpoint={self.endpoint!r}, expires_at={self.expires_at!r})"


def validate_k8s_name(name: str) -> bool | str:
    """Validate a Kubernetes resource name (DNS subdomain).

    Args:
        name: The name to validate.

    Returns:
        True if valid, or an error message string if invalid.

    """
    if not name:
        return "Name cannot be empty"
    if len(name) > _DNS_SUBDOMAIN_MAX_LENGTH:
        return f"Name must be {_DNS_SUBDOMAIN_MAX_LENGTH} characters or less"
    if not _DNS_SUBDOMAIN_PATTERN.match(name):
        return "Name must consist of lowercase alphanumeric characters, '-' or '.', and must start and end with an alphanumeric character"
    return True


@dataclass(frozen=True, slots=True)
class SyncSettings:
    """Options that stay fixed for the lifetime of the process.

    Attributes:
        region: AWS region of the registry.
        namespace: Namespace the secret lives in.
        interval: Seconds to sleep between iterations.
        registry_id: Optional AWS account id narrowing the token scope.
        secret_name: Name of the managed secret.
        secret_type: Layout of the payload inside the secret.
        strip_scheme: Drop the URI scheme from the registry key.

    Raises:
        ConfigurationError: If any option is missing or invalid.

    """

    region: str
    namespace: str
    interval: int = DEFAULT_INTERVAL
    registry_id: str | None = None
    secret_name: str = DEFAULT_SECRET_NAME
    secret_type: SecretTypeVariant = SecretTypeVariant.GENERIC
    strip_scheme: bool = False

    def __post_init__(self) -> None:
        if not self.region:
            raise ConfigurationError("Region not specified")
        if not self.namespace:
            raise ConfigurationError("Namespace not specified")
        if self.interval <= 0:
            raise ConfigurationError(f"Interval must be a positive number of seconds, got {self.interval}")
        name_check = validate_k8s_name(self.secret_name)
        if name_check is not True:
            raise ConfigurationError(f"Invalid secret name '{self.secret_name}': {name_check}")
