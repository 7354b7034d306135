"""aksdemo - AKS walkthrough setup toolkit.

Prepares a workstation and an Azure subscription for the Kubernetes and
Azure Kubernetes Service walkthroughs: prerequisite checks, Azure login,
Docker image builds and AKS cluster provisioning.
"""

from aksdemo.version import __version__


__all__ = ["__version__"]
