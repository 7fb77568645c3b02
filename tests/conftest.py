"""Shared test fixtures for ecr-auth-sync tests."""

import threading
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client.rest import ApiException

from ecr_auth_sync.cluster import SecretStore
from ecr_auth_sync.models import RegistryCredential, SyncSettings

ECR_ENDPOINT = "https://123456789012.dkr.ecr.us-east-1.amazonaws.com"
ECR_TOKEN = "QVdTOnNlY3JldC10b2tlbg=="


class RecordingStopEvent(threading.Event):
    """Stop event that never blocks and advances a fake clock instead.

    The event sets itself after ``stop_after`` waits.
    """

    def __init__(self, stop_after: int) -> None:
        super().__init__()
        self.stop_after = stop_after
        self.timeouts: list[float | None] = []
        self.clock = 0.0

    def wait(self, timeout=None):
        self.timeouts.append(timeout)
        self.clock += timeout or 0
        if len(self.timeouts) >= self.stop_after:
            self.set()
        return self.is_set()


@pytest.fixture
def credential():
    """A single ECR authorization record."""
    return RegistryCredential(
        endpoint=ECR_ENDPOINT,
        token=ECR_TOKEN,
        expires_at=datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def settings():
    """Default sync settings for the test namespace."""
    return SyncSettings(region="us-east-1", namespace="test-namespace")


@pytest.fixture
def mock_provider(credential):
    """Credential provider that always succeeds."""
    provider = MagicMock()
    provider.get_authorization.return_value = [credential]
    return provider


@pytest.fixture
def fake_core_v1_api():
    """CoreV1Api double backed by a dict of (namespace, name) -> secret.

    Replacing a missing secret fails with 404, creating an existing one
    with 409, like the real API server.
    """
    api = MagicMock()
    api.secrets = {}

    def replace(name, namespace, body):
        if (namespace, name) not in api.secrets:
            raise ApiException(status=404, reason="Not Found")
        api.secrets[(namespace, name)] = body
        return body

    def create(namespace, body):
        key = (namespace, body.metadata.name)
        if key in api.secrets:
            raise ApiException(status=409, reason="Conflict")
        api.secrets[key] = body
        return body

    api.replace_namespaced_secret.side_effect = replace
    api.create_namespaced_secret.side_effect = create
    return api


@pytest.fixture
def secret_store(fake_core_v1_api):
    """SecretStore over the dict-backed API double."""
    return SecretStore(api=fake_core_v1_api)


@pytest.fixture
def mock_kube_contexts():
    """Mock kubernetes config contexts."""
    with patch("kubernetes.config.list_kube_config_contexts") as mock:
        mock.return_value = ([{"name": "test-context"}], {"name": "test-context", "context": {}})
        yield mock


@pytest.fixture
def stop_event_factory():
    """Factory for stop events that record their waits instead of blocking."""
    return RecordingStopEvent
