"""Thin wrapper around the external CLIs (dotnet, docker, az, kubectl).

Every command goes through `CommandRunner` so that dry runs, logging and
failure reporting behave the same for all tools.
"""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from aksdemo.errors import SetupError
from aksdemo.observability.logging import get_logger


log = get_logger(__name__)

# Exit code a POSIX shell reports for a command that is not on PATH.
NOT_FOUND_RETURNCODE = 127


@dataclass(frozen=True)
class CommandResult:
    """Result of an external command."""

    argv: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command_line(self) -> str:
        return shlex.join(self.argv)

    def check(self, step: str = "command") -> CommandResult:
        """Raise `SetupError` unless the command succeeded."""
        if self.ok:
            return self
        raise SetupError(
            code="command_failed",
            step=step,
            message=(
                f"`{self.command_line}` exited with {self.returncode}"
                + (f": {self.stderr}" if self.stderr else "")
            ),
            details={"argv": list(self.argv), "returncode": self.returncode},
        )


@dataclass
class CommandRunner:
    """Runs external commands, optionally in dry-run mode."""

    dry_run: bool = False
    env: dict[str, str] | None = None
    history: list[tuple[str, ...]] = field(default_factory=list)

    def which(self, tool: str) -> str | None:
        return shutil.which(tool)

    def exists(self, tool: str) -> bool:
        return self.which(tool) is not None

    def _environment(self) -> dict[str, str] | None:
        if not self.env:
            return None
        merged = os.environ.copy()
        merged.update(self.env)
        return merged

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: str | Path | None = None,
        capture: bool = True,
        check: bool = False,
        step: str = "command",
        timeout: float | None = None,
    ) -> CommandResult:
        """Run a command and return its result.

        Args:
            argv: Command and arguments (never passed through a shell).
            cwd: Working directory for the command.
            capture: Capture stdout/stderr; otherwise stream to the terminal.
            check: Raise `SetupError` on a non-zero exit code.
            step: Setup step name used in errors and logs.
            timeout: Seconds before the command is abandoned.
        """
        args = tuple(str(a) for a in argv)
        self.history.append(args)

        if self.dry_run:
            log.info("command_skipped", argv=shlex.join(args), cwd=str(cwd or "."), dry_run=True)
            return CommandResult(argv=args, returncode=0)

        log.info("command_started", argv=shlex.join(args), cwd=str(cwd or "."), step=step)
        try:
            completed = subprocess.run(
                args,
                cwd=cwd,
                capture_output=capture,
                text=True,
                timeout=timeout,
                env=self._environment(),
                check=False,
            )
        except FileNotFoundError as e:
            raise SetupError(
                code="tool_not_found",
                step=step,
                message=f"{args[0]} not found on PATH",
                details={"argv": list(args)},
            ) from e
        except subprocess.TimeoutExpired as e:
            raise SetupError(
                code="command_timeout",
                step=step,
                message=f"`{shlex.join(args)}` timed out after {timeout}s",
                details={"argv": list(args), "timeout": timeout},
            ) from e

        result = CommandResult(
            argv=args,
            returncode=completed.returncode,
            stdout=(completed.stdout or "").strip() if capture else "",
            stderr=(completed.stderr or "").strip() if capture else "",
        )
        log.info("command_finished", argv=result.command_line, returncode=result.returncode)

        if check:
            result.check(step)
        return result

    def probe(self, argv: Sequence[str], *, timeout: float | None = 30) -> CommandResult:
        """Run a read-only command that must never raise.

        Probes run even in dry-run mode since they change nothing.
        """
        args = tuple(str(a) for a in argv)
        try:
            completed = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=timeout,
                env=self._environment(),
                check=False,
            )
        except FileNotFoundError:
            return CommandResult(argv=args, returncode=NOT_FOUND_RETURNCODE)
        except subprocess.TimeoutExpired:
            log.warning("probe_timeout", argv=shlex.join(args), timeout=timeout)
            return CommandResult(argv=args, returncode=1, stderr="timed out")

        return CommandResult(
            argv=args,
            returncode=completed.returncode,
            stdout=(completed.stdout or "").strip(),
            stderr=(completed.stderr or "").strip(),
        )


__all__ = ["CommandResult", "CommandRunner", "NOT_FOUND_RETURNCODE"]
