"""Docker pull-secret rendering.

This module turns a registry authorization record into the docker
``config.json`` document that kubelets read when pulling images.
"""

import json
from collections.abc import Sequence

from ecr_auth_sync.exceptions import NoCredentialDataError
from ecr_auth_sync.models import RegistryCredential

_SCHEME_SEPARATOR = "://"


def registry_key(endpoint: str, *, strip_scheme: bool = False) -> str:
    """Return the key a registry is listed under in the ``auths`` map.

    An endpoint without a scheme is returned verbatim even when
    ``strip_scheme`` is set.

    Args:
        endpoint: The registry endpoint, e.g. 'https://123.dkr.ecr.us-east-1.amazonaws.com'.
        strip_scheme: Drop everything up to and including the first '://'.

    Returns:
        The registry key.

    """
    if strip_scheme and _SCHEME_SEPARATOR in endpoint:
        return endpoint.split(_SCHEME_SEPARATOR, 1)[1]
    return endpoint


def render_docker_config(credentials: Sequence[RegistryCredential], *, strip_scheme: bool = False) -> bytes:
    """Render the first credential record as a docker config document.

    The output is compact JSON, byte-identical for identical input:
    ``{"auths":{"<registry>":{"auth":"<token>"}}}``. The token is embedded
    as received.

    Args:
        credentials: Authorization records returned by the registry.
        strip_scheme: Drop the URI scheme from the registry key.

    Returns:
        The UTF-8 encoded document.

    Raises:
        NoCredentialDataError: If there is no record, or the first record
            lacks an endpoint or a token.

    """
    if not credentials:
        raise NoCredentialDataError("Registry returned no authorization data")

    credential = credentials[0]
    if not credential.endpoint:
        raise NoCredentialDataError("Authorization data has no registry endpoint")
    if not credential.token:
        raise NoCredentialDataError("Authorization data has no token")

    document = {"auths": {registry_key(credential.endpoint, strip_scheme=strip_scheme): {"auth": credential.token}}}
    return json.dumps(document, separators=(",", ":")).encode("utf-8")
