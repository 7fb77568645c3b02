"""Pull secret subpackage.

This package contains the docker config renderer and the upsert engine
that writes it into the cluster.
"""

from ecr_auth_sync.secrets.rendering import registry_key, render_docker_config
from ecr_auth_sync.secrets.upsert import build_secret_body, describe_secret, upsert_secret

__all__ = [
    # rendering
    "registry_key",
    "render_docker_config",
    # upsert
    "build_secret_body",
    "describe_secret",
    "upsert_secret",
]
