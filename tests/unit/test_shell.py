"""Unit tests for the command runner."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from aksdemo.errors import SetupError
from aksdemo.shell import NOT_FOUND_RETURNCODE, CommandResult, CommandRunner


class TestCommandResult:
    """Tests for CommandResult."""

    def test_ok(self) -> None:
        assert CommandResult(argv=("az",), returncode=0).ok is True
        assert CommandResult(argv=("az",), returncode=3).ok is False

    def test_check_raises_with_stderr(self) -> None:
        result = CommandResult(
            argv=("az", "group", "create"),
            returncode=1,
            stderr="AuthorizationFailed",
        )

        with pytest.raises(SetupError) as exc_info:
            result.check("create_cluster")

        error = exc_info.value
        assert error.code == "command_failed"
        assert error.step == "create_cluster"
        assert "az group create" in error.message
        assert "AuthorizationFailed" in error.message
        assert error.details["returncode"] == 1

    def test_check_returns_self_on_success(self) -> None:
        result = CommandResult(argv=("jq",), returncode=0)
        assert result.check() is result


class TestCommandRunner:
    """Tests for CommandRunner.run and probe."""

    def test_run_captures_output(self) -> None:
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="9.0.100\n", stderr="")

            result = CommandRunner().run(["dotnet", "--version"])

        assert result.ok
        assert result.stdout == "9.0.100"
        args, kwargs = mock_run.call_args
        assert args[0] == ("dotnet", "--version")
        assert kwargs["capture_output"] is True
        assert kwargs["check"] is False

    def test_run_passes_cwd(self, tmp_path) -> None:
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout=None, stderr=None)

            CommandRunner().run(["dotnet", "build"], cwd=tmp_path, capture=False)

        assert mock_run.call_args.kwargs["cwd"] == tmp_path
        assert mock_run.call_args.kwargs["capture_output"] is False

    def test_run_check_raises(self) -> None:
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=2, stdout="", stderr="boom")

            with pytest.raises(SetupError, match="boom"):
                CommandRunner().run(["docker", "build", "."], check=True, step="build_app")

    def test_run_missing_binary(self) -> None:
        with patch("subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(SetupError) as exc_info:
                CommandRunner().run(["az", "login"], step="azure_login")

        assert exc_info.value.code == "tool_not_found"
        assert exc_info.value.step == "azure_login"

    def test_run_timeout(self) -> None:
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired("az", 5)):
            with pytest.raises(SetupError) as exc_info:
                CommandRunner().run(["az", "aks", "create"], timeout=5)

        assert exc_info.value.code == "command_timeout"

    def test_dry_run_executes_nothing(self) -> None:
        runner = CommandRunner(dry_run=True)

        with patch("subprocess.run") as mock_run:
            result = runner.run(["az", "group", "create", "--name", "rg"], check=True)

        mock_run.assert_not_called()
        assert result.ok
        assert runner.history == [("az", "group", "create", "--name", "rg")]

    def test_env_is_merged(self) -> None:
        runner = CommandRunner(env={"KUBECONFIG": "/tmp/kubeconfig"})

        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
            runner.run(["kubectl", "get", "nodes"])

        env = mock_run.call_args.kwargs["env"]
        assert env["KUBECONFIG"] == "/tmp/kubeconfig"
        assert "PATH" in env

    def test_probe_missing_binary(self) -> None:
        with patch("subprocess.run", side_effect=FileNotFoundError()):
            result = CommandRunner().probe(["kubectl", "cluster-info"])

        assert result.returncode == NOT_FOUND_RETURNCODE
        assert not result.ok

    def test_probe_runs_in_dry_run(self) -> None:
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="not logged in")

            result = CommandRunner(dry_run=True).probe(["az", "account", "show"])

        mock_run.assert_called_once()
        assert result.stderr == "not logged in"

    def test_which(self) -> None:
        with patch("shutil.which", return_value="/usr/local/bin/az"):
            runner = CommandRunner()
            assert runner.which("az") == "/usr/local/bin/az"
            assert runner.exists("az") is True
