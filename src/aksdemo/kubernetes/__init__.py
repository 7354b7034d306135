"""Kubernetes API helpers for exploring AKS node pools."""

from aksdemo.kubernetes.nodes import (
    NodeInfo,
    NodePoolSummary,
    format_node_pools,
    list_nodes,
    load_cluster_config,
    summarize_node_pools,
)

__all__ = [
    "NodeInfo",
    "NodePoolSummary",
    "format_node_pools",
    "list_nodes",
    "load_cluster_config",
    "summarize_node_pools",
]
