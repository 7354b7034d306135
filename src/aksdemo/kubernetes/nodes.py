"""Node and node pool inspection for the AKS exploration walkthroughs."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from kubernetes import client, config  # type: ignore[import-untyped]
from kubernetes.client import ApiException  # type: ignore[import-untyped]
from kubernetes.config import ConfigException  # type: ignore[import-untyped]
from urllib3.exceptions import HTTPError

from aksdemo.errors import SetupError
from aksdemo.observability.logging import get_logger


log = get_logger(__name__)

AGENTPOOL_LABELS = ("kubernetes.azure.com/agentpool", "agentpool")
MODE_LABEL = "kubernetes.azure.com/mode"
INSTANCE_TYPE_LABELS = ("node.kubernetes.io/instance-type", "beta.kubernetes.io/instance-type")
OS_LABELS = ("kubernetes.io/os", "beta.kubernetes.io/os")
ZONE_LABEL = "topology.kubernetes.io/zone"

DEFAULT_POOL = "<none>"
DEFAULT_REQUEST_TIMEOUT = 15


@dataclass(frozen=True)
class NodeInfo:
    """The labels the walkthroughs look at on each node."""

    name: str
    pool: str
    mode: str | None
    vm_size: str | None
    os: str | None
    zone: str | None
    ready: bool


@dataclass
class NodePoolSummary:
    """Nodes grouped by agent pool."""

    name: str
    nodes: list[NodeInfo] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.nodes)

    @property
    def ready_count(self) -> int:
        return sum(1 for n in self.nodes if n.ready)

    @property
    def vm_sizes(self) -> list[str]:
        return sorted({n.vm_size for n in self.nodes if n.vm_size})

    @property
    def modes(self) -> list[str]:
        return sorted({n.mode for n in self.nodes if n.mode})


def _first_label(labels: dict[str, str], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        if labels.get(key):
            return labels[key]
    return None


def _is_ready(node: Any) -> bool:
    conditions = getattr(node.status, "conditions", None) or []
    return any(c.type == "Ready" and c.status == "True" for c in conditions)


def node_info(node: Any) -> NodeInfo:
    """Convert a `V1Node` into `NodeInfo`."""
    labels: dict[str, str] = node.metadata.labels or {}
    return NodeInfo(
        name=node.metadata.name,
        pool=_first_label(labels, AGENTPOOL_LABELS) or DEFAULT_POOL,
        mode=labels.get(MODE_LABEL),
        vm_size=_first_label(labels, INSTANCE_TYPE_LABELS),
        os=_first_label(labels, OS_LABELS),
        zone=labels.get(ZONE_LABEL),
        ready=_is_ready(node),
    )


def load_cluster_config(kubeconfig: str | None = None, context: str | None = None) -> None:
    """Load kubeconfig (written by `az aks get-credentials`)."""
    try:
        config.load_kube_config(config_file=kubeconfig, context=context)
    except (ConfigException, FileNotFoundError) as e:
        raise SetupError(
            code="kubeconfig_unavailable",
            step="nodes",
            message=f"Could not load kubeconfig: {e}",
            details={"kubeconfig": kubeconfig, "context": context},
        ) from e


def list_nodes(core: client.CoreV1Api | None = None) -> list[NodeInfo]:
    """List cluster nodes, sorted by pool then name."""
    core = core or client.CoreV1Api()
    try:
        response = core.list_node(_request_timeout=DEFAULT_REQUEST_TIMEOUT)
    except ApiException as e:
        log.error("list_nodes_failed", status=e.status, reason=e.reason)
        raise SetupError(
            code="kubernetes_api_error",
            step="nodes",
            message=f"Listing nodes failed: {e.status} {e.reason}",
            details={"status": e.status},
        ) from e
    except HTTPError as e:
        log.error("kubernetes_unreachable", error=str(e))
        raise SetupError(
            code="kubernetes_unreachable",
            step="nodes",
            message=f"Kubernetes API server is unreachable: {e}",
            details={"exception_type": type(e).__name__},
        ) from e

    nodes = [node_info(item) for item in response.items]
    log.info("nodes_listed", count=len(nodes))
    return sorted(nodes, key=lambda n: (n.pool, n.name))


def summarize_node_pools(nodes: list[NodeInfo]) -> list[NodePoolSummary]:
    """Group nodes by agent pool, sorted by pool name."""
    grouped: dict[str, list[NodeInfo]] = defaultdict(list)
    for node in nodes:
        grouped[node.pool].append(node)
    return [NodePoolSummary(name=pool, nodes=grouped[pool]) for pool in sorted(grouped)]


def format_node_pools(pools: list[NodePoolSummary]) -> list[str]:
    """Render the pool summary as table lines."""
    header = f"{'POOL':<16}{'MODE':<10}{'NODES':<8}{'READY':<8}VM SIZE"
    lines = [header]
    for pool in pools:
        lines.append(
            f"{pool.name:<16}{','.join(pool.modes) or '-':<10}{pool.count:<8}"
            f"{pool.ready_count:<8}{','.join(pool.vm_sizes) or '-'}"
        )
    return lines


__all__ = [
    "NodeInfo",
    "NodePoolSummary",
    "format_node_pools",
    "list_nodes",
    "load_cluster_config",
    "node_info",
    "summarize_node_pools",
]
