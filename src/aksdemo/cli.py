"""aksdemo Command Line Interface.

Prepares the environment for the Kubernetes and AKS walkthroughs:
prerequisite checks, Azure login, Docker builds and cluster creation.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from aksdemo.config.settings import load_settings
from aksdemo.errors import SetupError, ensure_setup_error
from aksdemo.observability.console import Console
from aksdemo.observability.logging import configure_logging, get_logger
from aksdemo.shell import CommandRunner
from aksdemo.version import __version__

if TYPE_CHECKING:
    from argparse import Namespace

    from aksdemo.setup import SetupContext


log = get_logger(__name__)

DESCRIPTION = "Application Modernization with Azure Kubernetes Service - Demo Setup"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="aksdemo",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  aksdemo check-prereqs        Check that all tools are installed
  aksdemo setup-all            Run the complete setup
  aksdemo run-demo 1           Show where to start demo 1
  aksdemo --dry-run setup-all  Print the commands without running them
        """,
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to the .env file (default: <root>/.env)",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=Path.cwd(),
        help="Walkthrough repository root (default: current directory)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log commands that change state instead of running them (.env is not written)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("check-prereqs", help="Check if all prerequisites are installed")
    subparsers.add_parser("install-tools", help="Install missing tools")
    subparsers.add_parser("setup-azure", help="Setup Azure environment")
    subparsers.add_parser("setup-docker", help="Setup Docker environment")
    subparsers.add_parser("setup-env", help="Setup environment variables")
    subparsers.add_parser("build-app", help="Build .NET 9 application")
    subparsers.add_parser("create-cluster", help="Create AKS cluster")

    demo_parser = subparsers.add_parser("run-demo", help="Run specific demo (1-6)")
    demo_parser.add_argument("number", nargs="?", default=None, help="Demo number")

    subparsers.add_parser("setup-all", help="Run complete setup")

    nodes_parser = subparsers.add_parser("nodes", help="Summarize cluster node pools")
    nodes_parser.add_argument("--kubeconfig", type=str, default=None, help="Kubeconfig path")
    nodes_parser.add_argument("--context", type=str, default=None, help="Kubeconfig context")

    serve_parser = subparsers.add_parser(
        "serve-visits", help="Run the multi-service visit counter app"
    )
    serve_parser.add_argument("--host", type=str, default="0.0.0.0", help="Bind address")  # noqa: S104
    serve_parser.add_argument("--port", type=int, default=None, help="Listen port")

    subparsers.add_parser("help", help="Show this help message")

    return parser


def build_context(args: Namespace, console: Console | None = None) -> SetupContext:
    """Create the setup context from parsed arguments."""
    from aksdemo.setup import SetupContext

    root = Path(args.root)
    env_file = Path(args.env_file) if args.env_file else None
    ctx = SetupContext(
        runner=CommandRunner(dry_run=args.dry_run),
        console=console or Console(),
        root=root,
        env_file=env_file,
    )
    ctx.settings = load_settings(ctx.env_path)
    return ctx


def check_prereqs(ctx: SetupContext, args: Namespace) -> int:  # noqa: ARG001
    """Check prerequisites."""
    from aksdemo.prereqs import check_prerequisites

    return 0 if check_prerequisites(ctx.runner, ctx.console).ok else 1


def install(ctx: SetupContext, args: Namespace) -> int:  # noqa: ARG001
    """Install missing tools."""
    from aksdemo.installer import install_tools

    install_tools(ctx.runner, ctx.console, ctx.system)
    return 0


def azure(ctx: SetupContext, args: Namespace) -> int:  # noqa: ARG001
    """Setup the Azure environment."""
    from aksdemo.azure import setup_azure

    setup_azure(ctx.runner, ctx.console, ctx.prompt)
    return 0


def docker(ctx: SetupContext, args: Namespace) -> int:  # noqa: ARG001
    """Setup the Docker environment."""
    from aksdemo.docker import setup_docker

    setup_docker(ctx.runner, ctx.console, ctx.system)
    return 0


def environment(ctx: SetupContext, args: Namespace) -> int:  # noqa: ARG001
    """Write and load the .env file."""
    from aksdemo.setup import setup_environment

    setup_environment(ctx)
    return 0


def build_app(ctx: SetupContext, args: Namespace) -> int:  # noqa: ARG001
    """Load the environment, then build the sample app."""
    from aksdemo.docker import build_application
    from aksdemo.setup import setup_environment

    setup_environment(ctx)
    build_application(ctx.runner, ctx.console, ctx.settings, ctx.root)
    return 0


def create_cluster(ctx: SetupContext, args: Namespace) -> int:  # noqa: ARG001
    """Load the environment, then create the AKS cluster."""
    from aksdemo.azure import create_aks_cluster
    from aksdemo.setup import setup_environment

    setup_environment(ctx)
    create_aks_cluster(ctx.runner, ctx.console, ctx.settings, ctx.prompt)
    return 0


def demo(ctx: SetupContext, args: Namespace) -> int:
    """Point at a walkthrough directory."""
    from aksdemo.demos import run_demo

    if args.number is None:
        ctx.console.error("Demo number required")
        create_parser().print_help()
        return 1

    run_demo(args.number, ctx.console, ctx.root)
    return 0


def everything(ctx: SetupContext, args: Namespace) -> int:  # noqa: ARG001
    """Run the complete setup."""
    from aksdemo.setup import setup_all

    setup_all(ctx)
    return 0


def nodes(ctx: SetupContext, args: Namespace) -> int:
    """Summarize the node pools of the current cluster."""
    from aksdemo.kubernetes.nodes import (
        format_node_pools,
        list_nodes,
        load_cluster_config,
        summarize_node_pools,
    )

    load_cluster_config(args.kubeconfig, args.context)
    pools = summarize_node_pools(list_nodes())
    if not pools:
        ctx.console.warning("No nodes found")
        return 0
    for line in format_node_pools(pools):
        ctx.console.echo(line)
    return 0


def serve_visits(ctx: SetupContext, args: Namespace) -> int:
    """Run the visit counter app."""
    from aksdemo.visits.app import serve

    return serve(host=args.host, port=args.port, settings=ctx.settings.visits)


COMMAND_HANDLERS = {
    "check-prereqs": check_prereqs,
    "install-tools": install,
    "setup-azure": azure,
    "setup-docker": docker,
    "setup-env": environment,
    "build-app": build_app,
    "create-cluster": create_cluster,
    "run-demo": demo,
    "setup-all": everything,
    "nodes": nodes,
    "serve-visits": serve_visits,
}


def _log_level(verbose: int, default: str) -> str:
    if verbose >= 2:
        return "DEBUG"
    if verbose == 1:
        return "INFO"
    return default


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # --help and --version exit 0; usage errors show help and fail.
        if e.code in (0, None):
            raise
        parser.print_help()
        return 1

    if args.command in (None, "help"):
        parser.print_help()
        return 0

    handler = COMMAND_HANDLERS.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    console = Console()
    try:
        ctx = build_context(args, console)
        observability = ctx.settings.observability
        configure_logging(
            level=_log_level(args.verbose, observability.log_level),
            format_type=observability.log_format,
        )
        return handler(ctx, args)
    except SetupError as e:
        console.error(e.message)
        log.error("setup_failed", command=args.command, **e.to_dict())
        return 1
    except ValidationError as e:
        error = ensure_setup_error(e, code="invalid_settings", step="config")
        console.error(f"Invalid configuration: {error.message}")
        log.error("settings_invalid", command=args.command, **error.to_dict())
        return 1
    except KeyboardInterrupt:
        console.error("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
