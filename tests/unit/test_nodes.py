"""Unit tests for node pool inspection."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client import ApiException
from urllib3.exceptions import MaxRetryError

from aksdemo.errors import SetupError
from aksdemo.kubernetes.nodes import (
    DEFAULT_POOL,
    format_node_pools,
    list_nodes,
    load_cluster_config,
    node_info,
    summarize_node_pools,
)


def _node(name: str, labels: dict[str, str], ready: str = "True") -> MagicMock:
    node = MagicMock()
    node.metadata.name = name
    node.metadata.labels = labels
    condition = MagicMock()
    condition.type = "Ready"
    condition.status = ready
    node.status.conditions = [condition]
    return node


def _aks_labels(pool: str, mode: str, vm_size: str, os_name: str = "linux") -> dict[str, str]:
    return {
        "kubernetes.azure.com/agentpool": pool,
        "kubernetes.azure.com/mode": mode,
        "node.kubernetes.io/instance-type": vm_size,
        "kubernetes.io/os": os_name,
        "topology.kubernetes.io/zone": "eastus-1",
    }


@pytest.fixture
def core_api() -> MagicMock:
    core = MagicMock()
    core.list_node.return_value.items = [
        _node("aks-userpool-1", _aks_labels("userpool", "User", "Standard_D4s_v5")),
        _node("aks-nodepool1-2", _aks_labels("nodepool1", "System", "Standard_DS2_v2")),
        _node("aks-nodepool1-1", _aks_labels("nodepool1", "System", "Standard_DS2_v2"), ready="False"),
        _node("akswin-1", _aks_labels("win", "User", "Standard_D4s_v5", os_name="windows")),
    ]
    return core


class TestNodeInfo:
    """Tests for label extraction."""

    def test_aks_labels(self) -> None:
        info = node_info(_node("aks-nodepool1-0", _aks_labels("nodepool1", "System", "Standard_DS2_v2")))

        assert info.pool == "nodepool1"
        assert info.mode == "System"
        assert info.vm_size == "Standard_DS2_v2"
        assert info.os == "linux"
        assert info.zone == "eastus-1"
        assert info.ready is True

    def test_legacy_labels(self) -> None:
        info = node_info(
            _node(
                "old",
                {"agentpool": "legacy", "beta.kubernetes.io/instance-type": "Standard_A2"},
            )
        )

        assert info.pool == "legacy"
        assert info.vm_size == "Standard_A2"
        assert info.mode is None

    def test_docker_desktop_node(self) -> None:
        node = _node("docker-desktop", None)
        node.status.conditions = None

        info = node_info(node)

        assert info.pool == DEFAULT_POOL
        assert info.ready is False


class TestListNodes:
    """Tests for list_nodes and summaries."""

    def test_sorted_by_pool_then_name(self, core_api: MagicMock) -> None:
        nodes = list_nodes(core_api)

        assert [n.name for n in nodes] == [
            "aks-nodepool1-1",
            "aks-nodepool1-2",
            "aks-userpool-1",
            "akswin-1",
        ]

    def test_api_error(self) -> None:
        core = MagicMock()
        core.list_node.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(SetupError, match="403 Forbidden") as exc_info:
            list_nodes(core)

        assert exc_info.value.code == "kubernetes_api_error"

    def test_api_server_unreachable(self) -> None:
        core = MagicMock()
        core.list_node.side_effect = MaxRetryError(None, "/api/v1/nodes", reason="Connection refused")

        with pytest.raises(SetupError, match="unreachable") as exc_info:
            list_nodes(core)

        assert exc_info.value.code == "kubernetes_unreachable"
        assert exc_info.value.step == "nodes"

    def test_summarize_node_pools(self, core_api: MagicMock) -> None:
        pools = summarize_node_pools(list_nodes(core_api))

        assert [p.name for p in pools] == ["nodepool1", "userpool", "win"]
        system = pools[0]
        assert system.count == 2
        assert system.ready_count == 1
        assert system.vm_sizes == ["Standard_DS2_v2"]
        assert system.modes == ["System"]

    def test_format_node_pools(self, core_api: MagicMock) -> None:
        lines = format_node_pools(summarize_node_pools(list_nodes(core_api)))

        assert lines[0].startswith("POOL")
        assert lines[1].split() == ["nodepool1", "System", "2", "1", "Standard_DS2_v2"]
        assert len(lines) == 4


class TestLoadClusterConfig:
    """Tests for kubeconfig loading."""

    def test_passes_through_context(self) -> None:
        with patch("kubernetes.config.load_kube_config") as mock_load:
            load_cluster_config("/tmp/kubeconfig", "aks-demo-cluster")

        mock_load.assert_called_once_with(config_file="/tmp/kubeconfig", context="aks-demo-cluster")

    def test_missing_kubeconfig(self) -> None:
        from kubernetes.config import ConfigException

        with patch("kubernetes.config.load_kube_config", side_effect=ConfigException("no config")):
            with pytest.raises(SetupError) as exc_info:
                load_cluster_config()

        assert exc_info.value.code == "kubeconfig_unavailable"
