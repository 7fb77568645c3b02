"""Custom exceptions for ecr-auth-sync.

This module defines the exception hierarchy used throughout the application.
Components raise these errors and leave the decision to terminate the
process to the command-line entry point.
"""


class EcrAuthSyncError(Exception):
    """Base exception for all ecr-auth-sync errors.

    Catching this class catches every failure the sync loop can raise.
    """

    pass


class ConfigurationError(EcrAuthSyncError):
    """Raised when a required option is missing or invalid.

    Detected at startup, before the first sync iteration runs.
    """

    pass


class ClusterConnectionError(EcrAuthSyncError):
    """Raised when no Kubernetes client configuration can be loaded.

    This can occur when:
    - The process is not running inside a pod
    - The kubeconfig is invalid or missing
    - The requested kubeconfig context does not exist
    """

    pass


class NoCredentialDataError(EcrAuthSyncError):
    """Raised when the registry returned no usable authorization data."""

    pass


class ProviderError(EcrAuthSyncError):
    """Raised when requesting an authorization token from ECR fails.

    This can occur when:
    - AWS credentials are missing or expired
    - The caller is not allowed to call ecr:GetAuthorizationToken
    - The ECR endpoint is unreachable
    """

    pass


class StoreError(EcrAuthSyncError):
    """Raised when writing the pull secret to the cluster fails."""

    pass


class StoreNotFoundError(StoreError):
    """Raised when the target secret does not exist yet.

    The upsert engine handles this one by creating the secret; anywhere
    else it is an ordinary StoreError.
    """

    pass
