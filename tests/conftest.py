"""Pytest configuration and fixtures for aksdemo tests."""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from aksdemo.config.settings import Settings
from aksdemo.observability.console import Console
from aksdemo.observability.logging import configure_logging
from aksdemo.setup import SetupContext
from aksdemo.shell import CommandResult, CommandRunner

if TYPE_CHECKING:
    from collections.abc import Generator


# Keep a developer's real .env or shell exports from leaking into tests.
WALKTHROUGH_VARS = (
    "RESOURCE_GROUP",
    "LOCATION",
    "CLUSTER_NAME",
    "NODE_COUNT",
    "VM_SIZE",
    "APP_NAME",
    "APP_VERSION",
    "NAMESPACE",
    "REGISTRY_NAME",
    "REGISTRY_LOGIN_SERVER",
    "REDIS_HOST",
    "REDIS_PORT",
)


class FakeRunner(CommandRunner):
    """CommandRunner that records argv and returns scripted results.

    Responses are matched on the longest argv prefix; anything unscripted
    succeeds with empty output.
    """

    def __init__(
        self,
        tools: Iterable[str] = (),
        responses: dict[tuple[str, ...], CommandResult | int | str] | None = None,
        *,
        dry_run: bool = False,
    ) -> None:
        super().__init__(dry_run=dry_run)
        self.tools = set(tools)
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, ...]] = []
        self.probes: list[tuple[str, ...]] = []
        self.cwds: list[str | None] = []

    def which(self, tool: str) -> str | None:
        return f"/usr/bin/{tool}" if tool in self.tools else None

    def _respond(self, args: tuple[str, ...]) -> CommandResult:
        best: tuple[str, ...] | None = None
        for prefix in self.responses:
            if args[: len(prefix)] == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is None:
            return CommandResult(argv=args, returncode=0)

        response = self.responses[best]
        if isinstance(response, CommandResult):
            return response
        if isinstance(response, int):
            return CommandResult(argv=args, returncode=response)
        return CommandResult(argv=args, returncode=0, stdout=response)

    def run(self, argv: Sequence[str], *, cwd=None, capture=True, check=False, step="command", timeout=None):
        args = tuple(str(a) for a in argv)
        self.calls.append(args)
        self.history.append(args)
        self.cwds.append(str(cwd) if cwd is not None else None)
        if self.dry_run:
            return CommandResult(argv=args, returncode=0)
        result = self._respond(args)
        if check:
            result.check(step)
        return result

    def probe(self, argv: Sequence[str], *, timeout=30):
        args = tuple(str(a) for a in argv)
        self.probes.append(args)
        return self._respond(args)


class ScriptedPrompt:
    """Answers prompts from a list and remembers the questions."""

    def __init__(self, *answers: str) -> None:
        self.answers = list(answers)
        self.questions: list[str] = []

    def __call__(self, question: str) -> str:
        self.questions.append(question)
        return self.answers.pop(0) if self.answers else ""


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Isolate settings from the developer's environment and cwd."""
    from aksdemo.config.settings import get_settings

    for name in WALKTHROUGH_VARS:
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith("AKSDEMO_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    configure_logging(level="WARNING", format_type="json")

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def console() -> Console:
    """Console without colors, writing to captured stdout."""
    return Console(color=False)


@pytest.fixture
def all_tools() -> set[str]:
    return {"dotnet", "docker", "az", "kubectl", "jq"}


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def make_context(tmp_path: Path, console: Console, settings: Settings):
    """Factory for a SetupContext rooted in a temp walkthrough checkout."""

    def _make(runner: FakeRunner, *answers: str, system: str = "Linux") -> SetupContext:
        return SetupContext(
            runner=runner,
            console=console,
            settings=settings,
            prompt=ScriptedPrompt(*answers),
            root=tmp_path,
            system=system,
        )

    return _make


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    """Create the sample app directory the build step expects."""
    path = tmp_path / "01-container-fundamentals" / "ContainerDemoApp"
    path.mkdir(parents=True)
    (path / "Dockerfile").write_text("FROM mcr.microsoft.com/dotnet/aspnet:9.0\n")
    return path


@pytest.fixture
def make_runner() -> type[FakeRunner]:
    return FakeRunner


@pytest.fixture
def make_prompt() -> type[ScriptedPrompt]:
    return ScriptedPrompt
