"""Fixtures for CLI interface tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner, Result

from docpm.cli import cli
from docpm.config import ENV_VARS
from tests._fakes import RecordingGitClient

Invoke = Callable[..., Result]


@pytest.fixture
def cli_in_project(
    tmp_path: Path,
    cli_runner: CliRunner,
    monkeypatch: pytest.MonkeyPatch,
) -> tuple[Invoke, Path]:
    """Isolated project in tmp_path; returns (invoke, base_dir).

    ``invoke("new", "feature", "login")`` runs the CLI against tmp_path with
    git branching off, a recording git client in place of the git executable,
    and no ambient PM_* settings or docpm.json.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("docpm.cli_common.GitCLIClient", lambda base_dir: RecordingGitClient())

    def invoke(*args: str) -> Result:
        return cli_runner.invoke(cli, ["--base-dir", str(tmp_path), "--no-enable-git", *args])

    return invoke, tmp_path
