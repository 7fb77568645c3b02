"""Tests for cli.py module."""

import signal
import threading
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from ecr_auth_sync import __version__
from ecr_auth_sync.cli import cli, stop_on_signals
from ecr_auth_sync.exceptions import ClusterConnectionError, ProviderError
from ecr_auth_sync.models import SecretTypeVariant

_CLEAN_ENV = {
    "AWS_REGION": None,
    "ECR_AUTH_SYNC_INTERVAL": None,
    "ECR_AUTH_SYNC_REGISTRY_ID": None,
    "ECR_AUTH_SYNC_SECRET_NAME": None,
    "ECR_AUTH_SYNC_SECRET_TYPE": None,
    "ECR_AUTH_SYNC_STRIP_SCHEME": None,
    "ECR_AUTH_SYNC_NAMESPACE": None,
}


@pytest.fixture
def cli_mocks():
    """Patch every collaborator the CLI builds."""
    with (
        patch("ecr_auth_sync.cli.load_cluster_config") as mock_load,
        patch("ecr_auth_sync.cli.discover_namespace") as mock_namespace,
        patch("ecr_auth_sync.cli.EcrCredentialProvider") as mock_provider,
        patch("ecr_auth_sync.cli.SecretStore") as mock_store,
        patch("ecr_auth_sync.cli.CredentialSync") as mock_sync,
    ):
        mock_namespace.side_effect = lambda explicit=None: explicit or "default"
        yield {
            "load": mock_load,
            "namespace": mock_namespace,
            "provider": mock_provider,
            "store": mock_store,
            "sync": mock_sync,
        }


def _invoke(args, env=None):
    runner = CliRunner()
    return runner.invoke(cli, args, env={**_CLEAN_ENV, **(env or {})})


class TestCliVersion:
    """Tests for version command."""

    def test_version_flag(self):
        """Test --version flag prints version."""
        result = _invoke(["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_version_short_flag(self):
        """Test -v flag prints version."""
        result = _invoke(["-v"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestCliHelp:
    """Tests for help output."""

    def test_help_flag(self):
        """Test --help flag shows help text."""
        result = _invoke(["--help"])

        assert result.exit_code == 0
        assert "Keep a Kubernetes pull secret in sync" in result.output
        for option in ["--region", "--interval", "--registry-id", "--secret-name", "--secret-type", "--strip-scheme"]:
            assert option in result.output


class TestCliConfiguration:
    """Tests for option handling."""

    def test_defaults(self, cli_mocks):
        """Test default settings reach the sync loop."""
        result = _invoke(["--region", "us-east-1"])

        assert result.exit_code == 0, result.output
        settings = cli_mocks["sync"].call_args[0][0]
        assert settings.region == "us-east-1"
        assert settings.namespace == "default"
        assert settings.interval == 1200
        assert settings.secret_name == "ecr-auth-cfg"
        assert settings.secret_type is SecretTypeVariant.GENERIC
        assert settings.strip_scheme is False
        assert settings.registry_id is None
        cli_mocks["sync"].return_value.run.assert_called_once_with(once=False)

    def test_all_options(self, cli_mocks):
        """Test every option is passed through."""
        result = _invoke(
            [
                "--region",
                "eu-west-1",
                "--interval",
                "300",
                "--profile",
                "123456789012",
                "--secret-name",
                "registry-creds",
                "--secret-type",
                "dockerconfigjson",
                "--strip-scheme",
                "--namespace",
                "apps",
                "--context",
                "staging",
                "--once",
            ]
        )

        assert result.exit_code == 0, result.output
        settings = cli_mocks["sync"].call_args[0][0]
        assert settings.interval == 300
        assert settings.registry_id == "123456789012"
        assert settings.secret_name == "registry-creds"
        assert settings.secret_type is SecretTypeVariant.DOCKER_CONFIG_JSON
        assert settings.strip_scheme is True
        assert settings.namespace == "apps"
        cli_mocks["load"].assert_called_once_with(context="staging")
        cli_mocks["provider"].assert_called_once_with("eu-west-1", registry_id="123456789012")
        cli_mocks["sync"].return_value.run.assert_called_once_with(once=True)

    def test_environment_variables(self, cli_mocks):
        """Test options can be supplied through the environment."""
        result = _invoke(
            [],
            env={
                "AWS_REGION": "ap-southeast-2",
                "ECR_AUTH_SYNC_SECRET_TYPE": "dockercfg",
                "ECR_AUTH_SYNC_INTERVAL": "60",
            },
        )

        assert result.exit_code == 0, result.output
        settings = cli_mocks["sync"].call_args[0][0]
        assert settings.region == "ap-southeast-2"
        assert settings.secret_type is SecretTypeVariant.DOCKER_CFG
        assert settings.interval == 60

    def test_missing_region(self, cli_mocks):
        """Test a missing region is a usage error raised before the loop."""
        result = _invoke([])

        assert result.exit_code == 2
        assert "Region not specified" in result.output
        cli_mocks["sync"].assert_not_called()

    def test_invalid_interval(self, cli_mocks):
        """Test a non-positive interval is rejected."""
        result = _invoke(["--region", "us-east-1", "--interval", "0"])

        assert result.exit_code == 2
        cli_mocks["sync"].assert_not_called()

    def test_invalid_secret_name(self, cli_mocks):
        """Test an invalid secret name is a usage error."""
        result = _invoke(["--region", "us-east-1", "--secret-name", "Not_Valid"])

        assert result.exit_code == 2
        assert "Invalid secret name" in result.output
        cli_mocks["sync"].assert_not_called()

    def test_invalid_secret_type(self, cli_mocks):
        """Test unknown secret layouts are rejected."""
        result = _invoke(["--region", "us-east-1", "--secret-type", "tls"])

        assert result.exit_code == 2


class TestCliFailures:
    """Tests for process-level failure handling."""

    def test_sync_failure_exits_with_error(self, cli_mocks):
        """Test a failing sync ends the process with exit code 1."""
        cli_mocks["sync"].return_value.run.side_effect = ProviderError("ExpiredTokenException")

        with patch("ecr_auth_sync.cli.console.error") as mock_error:
            result = _invoke(["--region", "us-east-1"])

        assert result.exit_code == 1
        assert "ExpiredTokenException" in mock_error.call_args[0][0]

    def test_cluster_connection_failure(self, cli_mocks):
        """Test a missing cluster configuration ends the process with exit code 1."""
        cli_mocks["load"].side_effect = ClusterConnectionError("Invalid or missing kubeconfig")

        with patch("ecr_auth_sync.cli.console.error"):
            result = _invoke(["--region", "us-east-1"])

        assert result.exit_code == 1
        cli_mocks["sync"].assert_not_called()


class TestStopOnSignals:
    """Tests for signal handling."""

    def test_sigterm_sets_stop_event(self):
        """Test SIGTERM sets the stop event while installed."""
        stop_event = threading.Event()

        with patch("ecr_auth_sync.cli.console.warning"), stop_on_signals(stop_event):
            handler = signal.getsignal(signal.SIGTERM)
            handler(signal.SIGTERM, None)

        assert stop_event.is_set()

    def test_previous_handlers_restored(self):
        """Test the original handlers are restored on exit."""
        original = signal.getsignal(signal.SIGINT)

        with stop_on_signals(threading.Event()):
            assert signal.getsignal(signal.SIGINT) is not original

        assert signal.getsignal(signal.SIGINT) is original
