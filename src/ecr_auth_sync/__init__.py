"""ecr-auth-sync: keep a Kubernetes pull secret in sync with Amazon ECR.

This package periodically requests an ECR authorization token and writes
it into a namespaced Kubernetes Secret as a docker config document.

Example usage:
    from ecr_auth_sync import CredentialSync, EcrCredentialProvider, SecretStore, SyncSettings

    settings = SyncSettings(region="eu-west-1", namespace="default")
    sync = CredentialSync(
        settings,
        provider=EcrCredentialProvider(settings.region),
        store=SecretStore(),
    )
    sync.run_once()
"""

__version__ = "0.1.0"

from ecr_auth_sync.cli import cli
from ecr_auth_sync.cluster import SecretStore
from ecr_auth_sync.exceptions import (
    ClusterConnectionError,
    ConfigurationError,
    EcrAuthSyncError,
    NoCredentialDataError,
    ProviderError,
    StoreError,
    StoreNotFoundError,
)
from ecr_auth_sync.models import ActionTaken, RegistryCredential, SecretTypeVariant, SyncSettings
from ecr_auth_sync.registry import EcrCredentialProvider
from ecr_auth_sync.sync import CredentialSync

__all__ = [
    # Version
    "__version__",
    # Main CLI
    "cli",
    # Classes
    "CredentialSync",
    "EcrCredentialProvider",
    "SecretStore",
    # Models
    "ActionTaken",
    "RegistryCredential",
    "SecretTypeVariant",
    "SyncSettings",
    # Exceptions
    "EcrAuthSyncError",
    "ClusterConnectionError",
    "ConfigurationError",
    "NoCredentialDataError",
    "ProviderError",
    "StoreError",
    "StoreNotFoundError",
]
