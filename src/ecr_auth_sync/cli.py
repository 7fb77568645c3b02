#!/usr/bin/env python
"""Command-line interface for ecr-auth-sync.

This module provides the main CLI entry point, handling option parsing,
client construction and the process-level reaction to a failed sync.
"""

import signal
import sys
import threading
from collections.abc import Generator
from contextlib import contextmanager

import click
from icecream import ic

from ecr_auth_sync import __version__, console
from ecr_auth_sync.cluster import SecretStore, discover_namespace, load_cluster_config
from ecr_auth_sync.exceptions import ConfigurationError, EcrAuthSyncError
from ecr_auth_sync.models import DEFAULT_INTERVAL, DEFAULT_SECRET_NAME, SecretTypeVariant, SyncSettings
from ecr_auth_sync.registry import EcrCredentialProvider
from ecr_auth_sync.sync import CredentialSync

_STOP_SIGNALS = (signal.SIGTERM, signal.SIGINT)


@contextmanager
def stop_on_signals(stop_event: threading.Event) -> Generator[None, None, None]:
    """Set ``stop_event`` on SIGTERM or SIGINT while the block runs.

    Previous handlers are restored on exit.

    Args:
        stop_event: Event to set when a signal arrives.

    Yields:
        None

    """

    def _handle(signum: int, frame: object) -> None:
        console.warning(f"Received {signal.Signals(signum).name}")
        stop_event.set()

    previous = {sig: signal.signal(sig, _handle) for sig in _STOP_SIGNALS}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def build_settings(
    *,
    region: str | None,
    namespace: str,
    interval: int,
    registry_id: str | None,
    secret_name: str,
    secret_type: str,
    strip_scheme: bool,
) -> SyncSettings:
    """Validate the parsed options into SyncSettings.

    Raises:
        click.UsageError: If an option is missing or invalid.

    """
    try:
        return SyncSettings(
            region=region or "",
            namespace=namespace,
            interval=interval,
            registry_id=registry_id or None,
            secret_name=secret_name,
            secret_type=SecretTypeVariant(secret_type),
            strip_scheme=strip_scheme,
        )
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from None


@click.command(help="Keep a Kubernetes pull secret in sync with an Amazon ECR token")
@click.option("--version", "-v", required=False, is_flag=True, help="print version")
@click.option("--debug", required=False, is_flag=True, help="print debug information")
@click.option("--region", envvar="AWS_REGION", help="AWS region of the registry")
@click.option(
    "--interval",
    envvar="ECR_AUTH_SYNC_INTERVAL",
    type=click.IntRange(min=1),
    default=DEFAULT_INTERVAL,
    show_default=True,
    help="refresh interval in seconds",
)
@click.option(
    "--registry-id",
    "--profile",
    "registry_id",
    envvar="ECR_AUTH_SYNC_REGISTRY_ID",
    help="AWS account id of the registry",
)
@click.option(
    "--secret-name",
    envvar="ECR_AUTH_SYNC_SECRET_NAME",
    default=DEFAULT_SECRET_NAME,
    show_default=True,
    help="name of the managed secret",
)
@click.option(
    "--secret-type",
    envvar="ECR_AUTH_SYNC_SECRET_TYPE",
    type=click.Choice([t.value for t in SecretTypeVariant]),
    default=SecretTypeVariant.GENERIC.value,
    show_default=True,
    help="layout of the credential inside the secret",
)
@click.option(
    "--strip-scheme",
    envvar="ECR_AUTH_SYNC_STRIP_SCHEME",
    is_flag=True,
    help="drop the https:// prefix from the registry key",
)
@click.option("--namespace", "-n", envvar="ECR_AUTH_SYNC_NAMESPACE", help="namespace of the managed secret")
@click.option("--context", required=False, help="kubeconfig context to use outside a cluster")
@click.option("--once", required=False, is_flag=True, help="sync a single time and exit")
def cli(
    version: bool,
    debug: bool,
    region: str | None,
    interval: int,
    registry_id: str | None,
    secret_name: str,
    secret_type: str,
    strip_scheme: bool,
    namespace: str | None,
    context: str | None,
    once: bool,
) -> None:
    """Process CLI arguments and run the sync loop.

    Args:
        version: Print version and exit.
        debug: Enable debug output.
        region: AWS region of the registry.
        interval: Seconds between refreshes.
        registry_id: AWS account id to scope the token to.
        secret_name: Name of the managed secret.
        secret_type: Layout of the credential inside the secret.
        strip_scheme: Drop the URI scheme from the registry key.
        namespace: Namespace of the managed secret, discovered if omitted.
        context: Kubeconfig context to use outside a cluster.
        once: Sync a single time and exit.

    """
    if not debug:
        ic.disable()

    if version:
        click.echo(__version__)
        return

    if not region:
        raise click.UsageError("Region not specified")

    try:
        load_cluster_config(context=context)
        settings = build_settings(
            region=region,
            namespace=discover_namespace(namespace),
            interval=interval,
            registry_id=registry_id,
            secret_name=secret_name,
            secret_type=secret_type,
            strip_scheme=strip_scheme,
        )
        ic(settings)

        stop_event = threading.Event()
        sync = CredentialSync(
            settings,
            provider=EcrCredentialProvider(settings.region, registry_id=settings.registry_id),
            store=SecretStore(),
            stop_event=stop_event,
        )
        with stop_on_signals(stop_event):
            sync.run(once=once)
    except EcrAuthSyncError as e:
        console.error(f"Sync failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
