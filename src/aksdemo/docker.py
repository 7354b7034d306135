"""Docker environment checks and the sample application build."""

from __future__ import annotations

import platform
from pathlib import Path

from aksdemo.config.settings import Settings
from aksdemo.errors import SetupError
from aksdemo.observability.console import Console
from aksdemo.observability.logging import get_logger
from aksdemo.shell import CommandRunner


log = get_logger(__name__)

APP_DIR = Path("01-container-fundamentals") / "ContainerDemoApp"

# Systems where Kubernetes usually comes from Docker Desktop.
DESKTOP_SYSTEMS = ("Darwin", "Windows", "CYGWIN", "MSYS", "MINGW")

ENABLE_KUBERNETES_STEPS = (
    "1. Open Docker Desktop",
    "2. Go to Settings → Kubernetes",
    "3. Check 'Enable Kubernetes'",
    "4. Click 'Apply & Restart'",
)


def is_desktop_system(system: str) -> bool:
    return system.upper().startswith(tuple(s.upper() for s in DESKTOP_SYSTEMS))


def setup_docker(runner: CommandRunner, console: Console, system: str | None = None) -> bool:
    """Verify the Docker daemon and, on desktop systems, Docker Desktop Kubernetes.

    Returns:
        True when a local Kubernetes cluster answered (always False on Linux).

    Raises:
        SetupError: The Docker daemon is not reachable.
    """
    console.status("Setting up Docker environment...")
    system = system or platform.system()

    if not runner.probe(["docker", "info"]).ok:
        raise SetupError(
            code="docker_not_running",
            step="setup_docker",
            message="Docker is not running. Please start Docker Desktop or Docker daemon.",
        )

    if not is_desktop_system(system):
        return False

    console.status("Checking Docker Desktop Kubernetes...")
    if not runner.probe(["kubectl", "cluster-info"]).ok:
        console.warning("Kubernetes not enabled in Docker Desktop. Please enable it manually:")
        for line in ENABLE_KUBERNETES_STEPS:
            console.status(line)
        return False

    console.success("Docker Desktop Kubernetes is enabled")
    return True


def build_application(
    runner: CommandRunner,
    console: Console,
    settings: Settings,
    root: str | Path = ".",
) -> list[str]:
    """Build the .NET 9 sample app and its container image.

    Returns:
        Image references produced, local first.
    """
    console.status("Building .NET 9 application...")

    app_dir = Path(root) / APP_DIR
    if not app_dir.is_dir():
        raise SetupError(
            code="app_dir_missing",
            step="build_app",
            message="Application directory not found. Please run the demos in order.",
            details={"path": str(app_dir)},
        )

    console.status("Building application...")
    runner.run(["dotnet", "build"], cwd=app_dir, capture=False, check=True, step="build_app")

    console.status("Building Docker image...")
    images = [settings.image_ref]
    runner.run(
        ["docker", "build", "-t", settings.image_ref, "."],
        cwd=app_dir,
        capture=False,
        check=True,
        step="build_app",
    )

    registry_ref = settings.registry_image_ref
    if registry_ref:
        runner.run(
            ["docker", "tag", settings.image_ref, registry_ref],
            check=True,
            step="build_app",
        )
        console.status(f"Image tagged for registry: {registry_ref}")
        images.append(registry_ref)

    log.info("application_built", images=images)
    console.success("Application built successfully")
    return images


__all__ = ["APP_DIR", "build_application", "is_desktop_system", "setup_docker"]
