"""Catalog of the walkthroughs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from aksdemo.errors import SetupError
from aksdemo.observability.console import Console


@dataclass(frozen=True)
class Demo:
    """One walkthrough directory."""

    number: int
    title: str
    directory: str

    @property
    def label(self) -> str:
        return f"Demo {self.number:02d}: {self.title}"


DEMOS: tuple[Demo, ...] = (
    Demo(1, "Container Fundamentals", "01-container-fundamentals"),
    Demo(2, "Why Container Orchestration", "02-why-orchestration"),
    Demo(3, "Kubernetes Fundamentals", "03-kubernetes-basics"),
    Demo(4, "AKS Cluster Setup", "04-aks-cluster-setup"),
    Demo(5, "AKS Node Exploration", "05-aks-node-exploration"),
    Demo(6, "Custom Node Pools", "06-custom-node-pools"),
)


def get_demo(number: int | str) -> Demo:
    """Look up a walkthrough by number.

    Raises:
        SetupError: Unknown or non-numeric demo number.
    """
    try:
        wanted = int(number)
    except (TypeError, ValueError):
        wanted = None

    for demo in DEMOS:
        if demo.number == wanted:
            return demo

    raise SetupError(
        code="invalid_demo",
        step="run_demo",
        message=f"Invalid demo number: {number}",
        details={"valid": [d.number for d in DEMOS]},
    )


def run_demo(number: int | str, console: Console, root: str | Path = ".") -> Path:
    """Point the user at a walkthrough directory.

    A child process cannot change the caller's working directory, so the
    path is printed for the user to `cd` into.
    """
    demo = get_demo(number)
    path = Path(root) / demo.directory

    console.status(f"Running {demo.label}")
    if not path.is_dir():
        console.warning(f"Directory not found: {path}")
    console.status(f"cd {path}")
    console.status("Please follow the README.md instructions")
    return path


__all__ = ["DEMOS", "Demo", "get_demo", "run_demo"]
