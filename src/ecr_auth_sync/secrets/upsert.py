"""Idempotent create-or-update of the managed pull secret.

The update is attempted first because in steady state the secret already
exists from a previous iteration; the create call is only paid for on the
first run.
"""

import base64
from typing import Any, Protocol

import yaml
from icecream import ic
from kubernetes import client

from ecr_auth_sync.exceptions import StoreNotFoundError
from ecr_auth_sync.models import ActionTaken, SecretTypeVariant

MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"
MANAGED_BY_VALUE = "ecr-auth-sync"

_REDACTED = "<redacted>"


class SecretWriter(Protocol):
    """The subset of a secret store the upsert engine relies on."""

    def update(self, namespace: str, name: str, body: client.V1Secret) -> Any: ...

    def create(self, namespace: str, name: str, body: client.V1Secret) -> Any: ...


def build_secret_body(name: str, namespace: str, payload: bytes, variant: SecretTypeVariant) -> client.V1Secret:
    """Build the complete managed secret for a rendered payload.

    Args:
        name: Name of the secret.
        namespace: Namespace of the secret.
        payload: Rendered docker config document.
        variant: Layout selecting the data key and Secret type.

    Returns:
        A V1Secret holding only the payload under the variant's key.

    """
    return client.V1Secret(
        api_version="v1",
        kind="Secret",
        metadata=client.V1ObjectMeta(
            name=name,
            namespace=namespace,
            labels={MANAGED_BY_LABEL: MANAGED_BY_VALUE},
        ),
        type=variant.secret_type,
        data={variant.data_key: base64.b64encode(payload).decode("ascii")},
    )


def describe_secret(body: client.V1Secret) -> str:
    """Render a secret manifest as YAML with every data value redacted.

    Args:
        body: The secret to describe.

    Returns:
        The YAML manifest, safe to print.

    """
    manifest = client.ApiClient().sanitize_for_serialization(body)
    manifest["data"] = {key: _REDACTED for key in manifest.get("data", {})}
    return yaml.safe_dump(manifest, sort_keys=False)


def upsert_secret(
    store: SecretWriter,
    namespace: str,
    name: str,
    payload: bytes,
    variant: SecretTypeVariant,
) -> ActionTaken:
    """Create or replace the managed secret.

    Args:
        store: Secret store to write to.
        namespace: Namespace of the secret.
        name: Name of the secret.
        payload: Rendered docker config document.
        variant: Layout selecting the data key and Secret type.

    Returns:
        ActionTaken.UPDATED if the secret existed, ActionTaken.CREATED otherwise.

    Raises:
        StoreError: If the update fails for any reason other than the secret
            being absent, or if the fallback create fails.

    """
    body = build_secret_body(name, namespace, payload, variant)
    if ic.enabled:
        ic(describe_secret(body))

    try:
        store.update(namespace, name, body)
    except StoreNotFoundError:
        store.create(namespace, name, body)
        return ActionTaken.CREATED
    return ActionTaken.UPDATED
