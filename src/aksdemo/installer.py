"""Install missing CLI tools with the platform package manager."""

from __future__ import annotations

import platform

from aksdemo.errors import SetupError
from aksdemo.observability.console import Console
from aksdemo.observability.logging import get_logger
from aksdemo.shell import CommandRunner


log = get_logger(__name__)

PACKAGES = ("azure-cli", "kubectl", "jq")


def install_tools(
    runner: CommandRunner,
    console: Console,
    system: str | None = None,
) -> list[str]:
    """Install the Azure CLI, kubectl and jq.

    Args:
        runner: Command runner.
        console: Output console.
        system: Override for `platform.system()` ("Darwin", "Linux", ...).

    Returns:
        The installed package names.

    Raises:
        SetupError: No supported package manager or operating system.
    """
    console.status("Installing missing tools...")
    system = system or platform.system()
    step = "install_tools"

    if system.startswith("Darwin"):
        if not runner.exists("brew"):
            raise SetupError(
                code="package_manager_missing",
                step=step,
                message="Homebrew not found. Please install Homebrew first: https://brew.sh/",
                details={"system": system},
            )
        console.status("Using Homebrew to install tools...")
        runner.run(["brew", "install", *PACKAGES], capture=False, check=True, step=step)

    elif system.startswith("Linux"):
        if runner.exists("apt-get"):
            console.status("Using apt-get to install tools...")
            runner.run(["sudo", "apt-get", "update"], capture=False, check=True, step=step)
            runner.run(
                ["sudo", "apt-get", "install", "-y", *PACKAGES],
                capture=False,
                check=True,
                step=step,
            )
        elif runner.exists("yum"):
            console.status("Using yum to install tools...")
            runner.run(
                ["sudo", "yum", "install", "-y", *PACKAGES],
                capture=False,
                check=True,
                step=step,
            )
        else:
            raise SetupError(
                code="package_manager_missing",
                step=step,
                message="Unsupported package manager. Please install tools manually.",
                details={"system": system},
            )

    else:
        raise SetupError(
            code="unsupported_os",
            step=step,
            message=f"Unsupported operating system: {system}",
            details={"system": system},
        )

    log.info("tools_installed", system=system, packages=list(PACKAGES))
    return list(PACKAGES)


__all__ = ["PACKAGES", "install_tools"]
