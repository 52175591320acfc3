"""Version-control collaborator.

Branches are a convenience, never a requirement: the service must work with
NoOpGitClient, and every call made on its behalf goes through GitIntegration,
which logs failures instead of raising them.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from docpm.errors import GitError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
NOOP_USER = "test-user"


@dataclass
class GitResult:
    """Result of a git command."""

    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out


def run_git(args: list[str], cwd: Path, timeout: int = DEFAULT_TIMEOUT) -> GitResult:
    """Run ``git -C cwd <args>``, capturing output. Never raises for git failures."""
    cmd = ["git", "-C", str(cwd), *args]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout, check=False)
    except subprocess.TimeoutExpired:
        return GitResult(returncode=-1, stdout="", stderr=f"Command timed out after {timeout}s", timed_out=True)
    except FileNotFoundError:
        return GitResult(returncode=127, stdout="", stderr="git executable not found")
    return GitResult(returncode=result.returncode, stdout=result.stdout, stderr=result.stderr)


def repo_root(cwd: Path, timeout: int = DEFAULT_TIMEOUT) -> Path | None:
    """Top-level directory of the repository containing *cwd*, or None outside one."""
    result = run_git(["rev-parse", "--show-toplevel"], cwd, timeout=timeout)
    if result.success and result.stdout.strip():
        return Path(result.stdout.strip())
    return None


def item_branch_name(item_type: str, name: str) -> str:
    """Branch created alongside a new work item: ``{type}/{name}``."""
    return f"{item_type}/{name}"


def phase_branch_name(item_type: str, name: str, phase: str) -> str:
    """Branch created on entering a phase: ``{type}/{name}/{phase}``."""
    return f"{item_type}/{name}/{phase}"


class GitClient(Protocol):
    def branch_exists(self, branch: str) -> bool: ...

    def create_branch(self, branch: str) -> None: ...

    def current_branch(self) -> str: ...

    def user_name(self) -> str: ...


class GitCLIClient:
    """GitClient that shells out to the ``git`` executable."""

    def __init__(self, repo: Path, *, timeout: int = DEFAULT_TIMEOUT) -> None:
        self.repo = repo
        self.timeout = timeout

    def _run(self, args: list[str]) -> GitResult:
        result = run_git(args, self.repo, timeout=self.timeout)
        if not result.success:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            msg = f"git {' '.join(args)} failed: {detail}"
            raise GitError(msg)
        return result

    def branch_exists(self, branch: str) -> bool:
        result = self._run(["branch", "--list", branch])
        return bool(result.stdout.strip())

    def create_branch(self, branch: str) -> None:
        self._run(["checkout", "-b", branch])

    def current_branch(self) -> str:
        return self._run(["branch", "--show-current"]).stdout.strip()

    def user_name(self) -> str:
        name = self._run(["config", "user.name"]).stdout.strip()
        if not name:
            msg = "git user.name is not configured"
            raise GitError(msg)
        return name


class NoOpGitClient:
    """GitClient used when git integration is disabled."""

    def branch_exists(self, branch: str) -> bool:
        return False

    def create_branch(self, branch: str) -> None:
        return None

    def current_branch(self) -> str:
        return ""

    def user_name(self) -> str:
        return NOOP_USER


class GitIntegration:
    """Advisory wrapper: every method logs GitError and reports success as a bool."""

    def __init__(self, client: GitClient, *, enabled: bool) -> None:
        self.client = client
        self.enabled = enabled

    def ensure_branch(self, branch: str, *, gated: bool = True) -> bool:
        """Create *branch* unless it already exists. False when skipped or failed.

        A *gated* request is skipped while integration is disabled.
        """
        if gated and not self.enabled:
            return False
        try:
            if self.client.branch_exists(branch):
                logger.info("Branch %s already exists, not creating", branch)
                return False
            self.client.create_branch(branch)
        except GitError as exc:
            logger.warning("Could not create branch %s: %s", branch, exc, extra={"op": "branch", "error": str(exc)})
            return False
        logger.info("Created branch %s", branch, extra={"op": "branch"})
        return True

    def user_name(self) -> str | None:
        """Current git identity, or None when it cannot be determined."""
        try:
            return self.client.user_name() or None
        except GitError as exc:
            logger.warning("Could not determine git user: %s", exc, extra={"op": "user", "error": str(exc)})
            return None
