"""Credential sync loop.

This module provides the CredentialSync class which fetches a registry
token, renders it, writes it into the cluster and sleeps, forever. The
first failure of any step ends the loop by propagating to the caller.
"""

import threading
from typing import Protocol

from icecream import ic

from ecr_auth_sync import console
from ecr_auth_sync.models import ActionTaken, RegistryCredential, SyncSettings
from ecr_auth_sync.secrets.rendering import render_docker_config
from ecr_auth_sync.secrets.upsert import SecretWriter, upsert_secret


class CredentialProvider(Protocol):
    """Source of registry authorization records."""

    def get_authorization(self) -> list[RegistryCredential]: ...


class CredentialSync:
    """Keeps a pull secret in sync with a fresh registry credential.

    Attributes:
        settings: Options fixed for the lifetime of the loop.
        provider: Source of registry credentials.
        store: Secret store the pull secret is written to.
        stop_event: Event that, once set, aborts the sleep and ends the loop.

    """

    def __init__(
        self,
        settings: SyncSettings,
        *,
        provider: CredentialProvider,
        store: SecretWriter,
        stop_event: threading.Event | None = None,
    ) -> None:
        """Initialize CredentialSync.

        Args:
            settings: Options fixed for the lifetime of the loop.
            provider: Source of registry credentials.
            store: Secret store the pull secret is written to.
            stop_event: Shutdown signal. A private event is created if omitted.

        """
        self.settings: SyncSettings = settings
        self.provider: CredentialProvider = provider
        self.store: SecretWriter = store
        self.stop_event: threading.Event = stop_event if stop_event is not None else threading.Event()

    @property
    def target(self) -> str:
        """The managed secret as 'namespace/name'."""
        return f"{self.settings.namespace}/{self.settings.secret_name}"

    def run_once(self) -> ActionTaken:
        """Run a single fetch and reconcile pass.

        Returns:
            The action the upsert performed.

        Raises:
            NoCredentialDataError: If the registry returned no usable record.
            ProviderError: If the token request failed.
            StoreError: If the secret could not be written.

        """
        console.action(f"Requesting ECR authorization token in {console.highlight(self.settings.region)}")
        credentials = self.provider.get_authorization()
        ic(credentials)
        payload = render_docker_config(credentials, strip_scheme=self.settings.strip_scheme)

        if credentials[0].expires_at is not None:
            console.step(f"Token expires at {credentials[0].expires_at.isoformat()}")

        action = upsert_secret(
            self.store,
            self.settings.namespace,
            self.settings.secret_name,
            payload,
            self.settings.secret_type,
        )
        console.success(f"Secret {console.highlight(self.target)} {action.value}")
        return action

    def run(self, *, once: bool = False) -> int:
        """Sync on a fixed interval until stopped.

        Errors are not caught: the first failing iteration ends the loop.

        Args:
            once: Stop after the first iteration instead of sleeping.

        Returns:
            The number of completed iterations.

        """
        iterations = 0
        while not self.stop_event.is_set():
            self.run_once()
            iterations += 1
            if once:
                break
            console.step(f"Next refresh in {self.settings.interval}s")
            if self.stop_event.wait(self.settings.interval):
                break

        if self.stop_event.is_set():
            console.info("Shutdown requested, stopping")
        return iterations

    def stop(self) -> None:
        """Request the loop to stop at the next suspension point."""
        self.stop_event.set()

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"CredentialSync(target={self.target!r}, interval={self.settings.interval!r})"
