"""Shared Kubernetes API access for handlers."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from .. import metrics
from ..constants import OPERATOR_CONFIGMAP_NAME, OPERATOR_NAMESPACE
from ..exceptions import PolicyLoadError, ResourceFetchError

_config_lock = threading.Lock()
_config_loaded = False


def load_kube_config_once() -> None:
    """Load in-cluster config, falling back to the local kubeconfig."""
    global _config_loaded

    with _config_lock:
        if _config_loaded:
            return
        try:
            config.load_incluster_config()
        except config.ConfigException:
            config.load_kube_config()
        _config_loaded = True


def get_core_api() -> client.CoreV1Api:
    """Get Kubernetes CoreV1Api client."""
    load_kube_config_once()
    return client.CoreV1Api()


def get_rbac_api() -> client.RbacAuthorizationV1Api:
    """Get Kubernetes RbacAuthorizationV1Api client."""
    load_kube_config_once()
    return client.RbacAuthorizationV1Api()


def call_api(operation: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call a Kubernetes API method, recording call count and duration.

    Args:
        operation: Operation name used as metric label
        fn: Bound API method
        *args: Positional arguments for the call
        **kwargs: Keyword arguments for the call

    Returns:
        Whatever the API method returns

    Raises:
        ApiException: Propagated unchanged from the API client
    """
    start_time = time.time()
    try:
        result = fn(*args, **kwargs)
        metrics.api_call_total.labels(operation=operation, result="success").inc()
        return result
    except ApiException as e:
        result_label = "not_found" if e.status == 404 else "conflict" if e.status == 409 else "error"
        metrics.api_call_total.labels(operation=operation, result=result_label).inc()
        raise
    except Exception:
        metrics.api_call_total.labels(operation=operation, result="error").inc()
        raise
    finally:
        duration = time.time() - start_time
        metrics.api_call_duration_seconds.labels(operation=operation).observe(duration)


def load_policy_document(
    api: client.CoreV1Api,
    name: str = OPERATOR_CONFIGMAP_NAME,
    namespace: str = OPERATOR_NAMESPACE,
) -> dict[str, str]:
    """Read the operator ConfigMap holding the exclusion policy.

    The document is read fresh on every call.

    Args:
        api: CoreV1Api instance
        name: ConfigMap name
        namespace: ConfigMap namespace

    Returns:
        The ConfigMap data, empty if the ConfigMap has no data

    Raises:
        PolicyLoadError: If the ConfigMap is missing or cannot be read
    """
    try:
        config_map = call_api("get_configmap", api.read_namespaced_config_map, name=name, namespace=namespace)
    except ApiException as e:
        if e.status == 404:
            raise PolicyLoadError(f"ConfigMap {namespace}/{name} not found") from e
        raise PolicyLoadError(f"Failed to read ConfigMap {namespace}/{name}: {e.reason}") from e
    except Exception as e:
        raise PolicyLoadError(f"Failed to read ConfigMap {namespace}/{name}: {e}") from e

    return dict(config_map.data or {})


def fetch_namespace(api: client.CoreV1Api, name: str) -> client.V1Namespace | None:
    """Read a Namespace.

    Args:
        api: CoreV1Api instance
        name: Namespace name

    Returns:
        The Namespace, or None if it does not exist

    Raises:
        ResourceFetchError: On any failure other than NotFound
    """
    try:
        return call_api("get_namespace", api.read_namespace, name=name)
    except ApiException as e:
        if e.status == 404:
            return None
        raise ResourceFetchError(name, e.status, f"Failed to read namespace {name}: {e.reason}") from e
    except Exception as e:
        raise ResourceFetchError(name, None, f"Failed to read namespace {name}: {e}") from e


def list_namespace_names(api: client.CoreV1Api) -> list[str]:
    """List the names of all namespaces in the cluster."""
    namespaces = call_api("list_namespaces", api.list_namespace)
    return [ns.metadata.name for ns in namespaces.items]
