"""Tests for subprocess wrapper with rich error context."""

import subprocess
from unittest.mock import Mock, patch

import pytest

from bundlesync.core.subprocess import run_subprocess_with_context


def test_success_case_returns_completed_process() -> None:
    """Test that successful subprocess execution returns CompletedProcess."""
    with patch("bundlesync.core.subprocess.subprocess.run") as mock_run:
        mock_result = Mock(spec=subprocess.CompletedProcess)
        mock_result.returncode = 0
        mock_result.stdout = "Already up to date.\n"
        mock_run.return_value = mock_result

        result = run_subprocess_with_context(
            ["git", "-C", "/bundle/tool", "pull"],
            operation_context="pull in /bundle/tool",
        )

        assert result == mock_result
        mock_run.assert_called_once_with(
            ["git", "-C", "/bundle/tool", "pull"],
            env=None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=True,
        )


def test_env_is_passed_as_plain_dict() -> None:
    with patch("bundlesync.core.subprocess.subprocess.run") as mock_run:
        run_subprocess_with_context(
            ["git", "pull"], operation_context="pull", env={"LC_ALL": "C"}
        )

        assert mock_run.call_args.kwargs["env"] == {"LC_ALL": "C"}


def test_failure_with_stderr_includes_stderr_in_error() -> None:
    """Test that subprocess failure with stderr includes stderr in error message."""
    with patch("bundlesync.core.subprocess.subprocess.run") as mock_run:
        mock_run.side_effect = subprocess.CalledProcessError(
            returncode=128,
            cmd=["git", "clone", "https://github.com/owner/missing"],
            stderr="fatal: repository 'https://github.com/owner/missing/' not found\n",
        )

        with pytest.raises(RuntimeError) as exc_info:
            run_subprocess_with_context(
                ["git", "clone", "https://github.com/owner/missing"],
                operation_context="clone https://github.com/owner/missing",
            )

        error_message = str(exc_info.value)
        assert "Failed to clone https://github.com/owner/missing" in error_message
        assert "Command: git clone https://github.com/owner/missing" in error_message
        assert "Exit code: 128" in error_message
        assert "stderr: fatal: repository" in error_message


def test_failure_without_output_handles_gracefully() -> None:
    with patch("bundlesync.core.subprocess.subprocess.run") as mock_run:
        mock_run.side_effect = subprocess.CalledProcessError(returncode=1, cmd=["git", "pull"])

        with pytest.raises(RuntimeError) as exc_info:
            run_subprocess_with_context(["git", "pull"], operation_context="pull")

        error_message = str(exc_info.value)
        assert "Exit code: 1" in error_message
        assert "stderr:" not in error_message
        assert "stdout:" not in error_message


def test_failure_with_bytes_stdout_is_decoded() -> None:
    with patch("bundlesync.core.subprocess.subprocess.run") as mock_run:
        mock_run.side_effect = subprocess.CalledProcessError(
            returncode=1, cmd=["git", "pull"], output=b"CONFLICT (content)\n"
        )

        with pytest.raises(RuntimeError) as exc_info:
            run_subprocess_with_context(["git", "pull"], operation_context="pull")

        assert "stdout: CONFLICT (content)" in str(exc_info.value)


def test_exception_chaining_preserved() -> None:
    with patch("bundlesync.core.subprocess.subprocess.run") as mock_run:
        original_error = subprocess.CalledProcessError(returncode=1, cmd=["git", "pull"])
        mock_run.side_effect = original_error

        with pytest.raises(RuntimeError) as exc_info:
            run_subprocess_with_context(["git", "pull"], operation_context="pull")

        assert exc_info.value.__cause__ is original_error


def test_missing_binary_becomes_runtime_error() -> None:
    with patch("bundlesync.core.subprocess.subprocess.run") as mock_run:
        mock_run.side_effect = FileNotFoundError(2, "No such file or directory")

        with pytest.raises(RuntimeError) as exc_info:
            run_subprocess_with_context(
                ["vim", "-Nes"], operation_context="generate help tags"
            )

        assert str(exc_info.value).startswith(
            "Command not found while trying to generate help tags: vim"
        )
