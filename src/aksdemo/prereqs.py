"""Prerequisite checks for the walkthroughs.

Checks the tools the walkthroughs shell out to: the .NET 9 SDK, Docker,
the Azure CLI, kubectl and jq.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from aksdemo.observability.console import Console
from aksdemo.observability.logging import get_logger
from aksdemo.shell import CommandRunner


log = get_logger(__name__)

REQUIRED_DOTNET_MAJOR = "9"


@dataclass(frozen=True)
class ToolStatus:
    """Outcome of checking one tool."""

    name: str
    found: bool
    version: str | None = None
    missing_as: str | None = None

    @property
    def satisfied(self) -> bool:
        return self.missing_as is None


@dataclass
class PrerequisiteReport:
    """Collected tool statuses."""

    tools: list[ToolStatus] = field(default_factory=list)

    @property
    def missing(self) -> list[str]:
        return [t.missing_as for t in self.tools if t.missing_as is not None]

    @property
    def ok(self) -> bool:
        return not self.missing


def _check_dotnet(runner: CommandRunner, console: Console) -> ToolStatus:
    if not runner.exists("dotnet"):
        return ToolStatus(name="dotnet", found=False, missing_as="dotnet")

    version = runner.probe(["dotnet", "--version"]).stdout or "unknown"
    if not version.startswith(f"{REQUIRED_DOTNET_MAJOR}."):
        console.warning(f".NET {REQUIRED_DOTNET_MAJOR} SDK not found. Current version: {version}")
        return ToolStatus(
            name="dotnet",
            found=True,
            version=version,
            missing_as=f"dotnet{REQUIRED_DOTNET_MAJOR}",
        )

    console.success(f".NET {REQUIRED_DOTNET_MAJOR} SDK found: {version}")
    return ToolStatus(name="dotnet", found=True, version=version)


def _check_docker(runner: CommandRunner, console: Console) -> ToolStatus:
    if not runner.exists("docker"):
        return ToolStatus(name="docker", found=False, missing_as="docker")

    version = runner.probe(["docker", "--version"]).stdout or "unknown"
    console.success(f"Docker found: {version}")
    return ToolStatus(name="docker", found=True, version=version)


def _check_azure_cli(runner: CommandRunner, console: Console) -> ToolStatus:
    if not runner.exists("az"):
        return ToolStatus(name="az", found=False, missing_as="azure-cli")

    version = runner.probe(["az", "version", "--query", '"azure-cli"', "-o", "tsv"]).stdout
    version = version or "unknown"
    console.success(f"Azure CLI found: {version}")
    return ToolStatus(name="az", found=True, version=version)


def parse_kubectl_client_version(raw: str) -> str:
    """Extract `clientVersion.gitVersion` from `kubectl version --client -o json`."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return "unknown"
    if not isinstance(data, dict):
        return "unknown"
    client_version = data.get("clientVersion")
    if not isinstance(client_version, dict):
        return "unknown"
    return str(client_version.get("gitVersion") or "unknown")


def _check_kubectl(runner: CommandRunner, console: Console) -> ToolStatus:
    if not runner.exists("kubectl"):
        return ToolStatus(name="kubectl", found=False, missing_as="kubectl")

    raw = runner.probe(["kubectl", "version", "--client", "-o", "json"]).stdout
    version = parse_kubectl_client_version(raw)
    console.success(f"kubectl found: {version}")
    return ToolStatus(name="kubectl", found=True, version=version)


def _check_jq(runner: CommandRunner, console: Console) -> ToolStatus:
    if not runner.exists("jq"):
        return ToolStatus(name="jq", found=False, missing_as="jq")

    console.success("jq found")
    return ToolStatus(name="jq", found=True)


CHECKS = (_check_dotnet, _check_docker, _check_azure_cli, _check_kubectl, _check_jq)


def check_prerequisites(runner: CommandRunner, console: Console) -> PrerequisiteReport:
    """Check every tool and print one line per result.

    Returns:
        The report; `report.ok` is False when anything is missing.
    """
    console.status("Checking prerequisites...")

    report = PrerequisiteReport(tools=[check(runner, console) for check in CHECKS])

    if report.missing:
        console.error(f"Missing tools: {' '.join(report.missing)}")
        console.status("Please install the missing tools before proceeding.")
        log.warning("prerequisites_missing", missing=report.missing)
        return report

    console.success("All prerequisites are satisfied!")
    log.info("prerequisites_satisfied", tools=[t.name for t in report.tools])
    return report


__all__ = [
    "PrerequisiteReport",
    "ToolStatus",
    "check_prerequisites",
    "parse_kubectl_client_version",
]
