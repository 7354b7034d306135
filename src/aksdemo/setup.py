"""Sequencing of the setup steps."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from aksdemo.azure import create_aks_cluster, setup_azure
from aksdemo.config.settings import (
    DEFAULT_ENV_FILE,
    Settings,
    load_settings,
    write_default_env_file,
)
from aksdemo.docker import build_application, setup_docker
from aksdemo.installer import install_tools
from aksdemo.observability.console import Console
from aksdemo.observability.logging import LogContext, get_logger
from aksdemo.prereqs import check_prerequisites
from aksdemo.shell import CommandRunner


log = get_logger(__name__)


@dataclass
class SetupContext:
    """Everything a setup step needs."""

    runner: CommandRunner = field(default_factory=CommandRunner)
    console: Console = field(default_factory=Console)
    settings: Settings = field(default_factory=Settings)
    prompt: Callable[[str], str] = input
    root: Path = field(default_factory=Path.cwd)
    env_file: Path | None = None
    system: str | None = None

    @property
    def env_path(self) -> Path:
        return self.env_file or self.root / DEFAULT_ENV_FILE


def setup_environment(ctx: SetupContext) -> Settings:
    """Write the .env template if missing and load settings from it."""
    ctx.console.status("Setting up environment variables...")

    if ctx.env_path.exists():
        ctx.console.status(".env file already exists")
    elif ctx.runner.dry_run:
        ctx.console.status(f"Dry run: would create {ctx.env_path} with default values")
    elif write_default_env_file(ctx.env_path):
        ctx.console.success("Created .env file with default values")

    ctx.settings = load_settings(ctx.env_path)
    ctx.console.success("Environment variables loaded")
    log.info(
        "environment_loaded",
        env_file=str(ctx.env_path),
        resource_group=ctx.settings.resource_group,
        cluster=ctx.settings.cluster_name,
    )
    return ctx.settings


def setup_all(ctx: SetupContext) -> None:
    """Run every step in order, installing tools when prerequisites are missing."""
    ctx.console.status("Running complete setup...")

    with LogContext(step="setup_all"):
        if not check_prerequisites(ctx.runner, ctx.console).ok:
            install_tools(ctx.runner, ctx.console, ctx.system)
        setup_azure(ctx.runner, ctx.console, ctx.prompt)
        setup_docker(ctx.runner, ctx.console, ctx.system)
        setup_environment(ctx)
        build_application(ctx.runner, ctx.console, ctx.settings, ctx.root)
        create_aks_cluster(ctx.runner, ctx.console, ctx.settings, ctx.prompt)

    ctx.console.success("Setup completed successfully!")
    ctx.console.status("You can now run individual demos using: aksdemo run-demo <number>")


__all__ = ["SetupContext", "setup_all", "setup_environment"]
