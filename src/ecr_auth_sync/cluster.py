"""Kubernetes cluster interaction utilities.

This module loads the Kubernetes client configuration, works out which
namespace the pull secret belongs to, and wraps the Secret API calls the
upsert engine needs.
"""

from pathlib import Path

from icecream import ic
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import MaxRetryError

from ecr_auth_sync import console
from ecr_auth_sync.exceptions import ClusterConnectionError, StoreError, StoreNotFoundError

SERVICE_ACCOUNT_NAMESPACE_PATH = Path("/var/run/secrets/kubernetes.io/serviceaccount/namespace")
DEFAULT_NAMESPACE = "default"

_HTTP_NOT_FOUND = 404


def load_cluster_config(*, context: str | None = None) -> None:
    """Load the Kubernetes client configuration.

    In-cluster service account credentials are tried first. When the process
    runs outside a pod, the local kubeconfig is used instead.

    Args:
        context: Kubeconfig context to use outside a pod. Defaults to the
            current context. Must be passed as a keyword argument.

    Raises:
        ClusterConnectionError: If neither configuration can be loaded.

    """
    if context is None:
        try:
            config.load_incluster_config()
        except ConfigException as e:
            ic(e)
        else:
            console.action("Using in-cluster service account configuration")
            return

    try:
        config.load_kube_config(context=context)
    except ConfigException as e:
        raise ClusterConnectionError(f"Invalid or missing kubeconfig: {e}") from e

    active = context or _current_context_name()
    console.action(f"Working with {console.highlight(active)} cluster")


def _current_context_name() -> str:
    """Return the current kubeconfig context name, or 'unknown'."""
    try:
        _, current_context = config.list_kube_config_contexts()
    except ConfigException:
        return "unknown"
    return str(current_context["name"])


def discover_namespace(explicit: str | None = None) -> str:
    """Work out the namespace the pull secret is written to.

    Args:
        explicit: Namespace given by the operator, used as-is when set.

    Returns:
        The explicit namespace, else the pod's service account namespace,
        else the kubeconfig current context namespace, else 'default'.

    """
    if explicit:
        return explicit

    try:
        namespace = SERVICE_ACCOUNT_NAMESPACE_PATH.read_text().strip()
    except OSError:
        namespace = ""
    if namespace:
        ic(namespace)
        return namespace

    try:
        _, current_context = config.list_kube_config_contexts()
    except ConfigException:
        return DEFAULT_NAMESPACE
    namespace = current_context.get("context", {}).get("namespace", "")
    ic(namespace)
    return namespace or DEFAULT_NAMESPACE


class SecretStore:
    """Namespaced create and update operations on Kubernetes Secrets.

    Failures are classified by HTTP status: a 404 becomes
    StoreNotFoundError, everything else StoreError.

    Attributes:
        api: The CoreV1Api instance used for requests.

    """

    def __init__(self, api: client.CoreV1Api | None = None) -> None:
        """Initialize SecretStore.

        Args:
            api: CoreV1Api to use. Built from the loaded configuration if omitted.

        """
        self.api: client.CoreV1Api = api if api is not None else client.CoreV1Api()

    def update(self, namespace: str, name: str, body: client.V1Secret) -> client.V1Secret:
        """Replace an existing secret with the given body.

        Args:
            namespace: Namespace of the secret.
            name: Name of the secret.
            body: The complete secret to store.

        Returns:
            The secret as stored by the API server.

        Raises:
            StoreNotFoundError: If the secret does not exist.
            StoreError: If the request fails for any other reason.

        """
        try:
            return self.api.replace_namespaced_secret(name=name, namespace=namespace, body=body)
        except ApiException as e:
            raise self._classify(e, f"update secret {namespace}/{name}") from e
        except MaxRetryError as e:
            raise StoreError(f"Failed to connect to the Kubernetes API server: {e.reason}") from e

    def create(self, namespace: str, name: str, body: client.V1Secret) -> client.V1Secret:
        """Create a new secret.

        Args:
            namespace: Namespace of the secret.
            name: Name of the secret.
            body: The complete secret to store.

        Returns:
            The secret as stored by the API server.

        Raises:
            StoreError: If the request fails.

        """
        try:
            return self.api.create_namespaced_secret(namespace=namespace, body=body)
        except ApiException as e:
            raise self._classify(e, f"create secret {namespace}/{name}") from e
        except MaxRetryError as e:
            raise StoreError(f"Failed to connect to the Kubernetes API server: {e.reason}") from e

    @staticmethod
    def _classify(error: ApiException, operation: str) -> StoreError:
        ic(error.status, error.reason)
        if error.status == _HTTP_NOT_FOUND:
            return StoreNotFoundError(f"Failed to {operation}: not found")
        return StoreError(f"Failed to {operation}: {error.status} {error.reason}")

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"SecretStore(host={self.api.api_client.configuration.host!r})"
