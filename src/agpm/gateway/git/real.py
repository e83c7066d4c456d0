"""Production implementation of git operations using subprocess."""

import logging
import os
import subprocess
from pathlib import Path

from agpm.errors import CheckoutError, RepositoryUnavailableError
from agpm.gateway.git.abc import Git

logger = logging.getLogger(__name__)


def _git_env() -> dict[str, str]:
    """Copy of the environment that makes git fail instead of prompting for credentials."""
    env = os.environ.copy()
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


class RealGit(Git):
    """Real implementation of Git using the git CLI."""

    def __init__(self, network_timeout: float | None = None) -> None:
        """Create RealGit.

        Args:
            network_timeout: Seconds allowed for clone/fetch; None waits indefinitely.
                The caller owns this policy.
        """
        self._network_timeout = network_timeout

    def _run_network(self, cmd: list[str], *, url: str, cwd: Path | None) -> None:
        logger.debug("running %s", " ".join(cmd))
        try:
            subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self._network_timeout,
                env=_git_env(),
            )
        except subprocess.CalledProcessError as e:
            raise RepositoryUnavailableError(url, (e.stderr or "").strip()) from e
        except subprocess.TimeoutExpired as e:
            raise RepositoryUnavailableError(
                url, f"timed out after {self._network_timeout} seconds"
            ) from e

    def is_repository(self, repo_path: Path) -> bool:
        if not (repo_path / ".git").exists():
            return False
        result = subprocess.run(
            ["git", "rev-parse", "--is-inside-work-tree"],
            cwd=repo_path,
            capture_output=True,
            text=True,
            check=False,
        )
        return result.returncode == 0 and result.stdout.strip() == "true"

    def rev_parse(self, repo_path: Path, ref: str) -> str | None:
        result = subprocess.run(
            ["git", "rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"],
            cwd=repo_path,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        sha = result.stdout.strip()
        return sha or None

    def clone(self, url: str, destination: Path) -> None:
        self._run_network(["git", "clone", "--quiet", url, str(destination)], url=url, cwd=None)

    def _origin_url(self, repo_path: Path) -> str:
        """URL of the origin remote, falling back to the working copy path."""
        result = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            cwd=repo_path,
            capture_output=True,
            text=True,
            check=False,
        )
        url = result.stdout.strip()
        if result.returncode != 0 or not url:
            return str(repo_path)
        return url

    def fetch_all(self, repo_path: Path) -> None:
        self._run_network(
            ["git", "fetch", "--all", "--tags", "--force", "--prune", "--quiet"],
            url=self._origin_url(repo_path),
            cwd=repo_path,
        )

    def checkout(self, repo_path: Path, sha: str) -> None:
        try:
            subprocess.run(
                ["git", "-c", "advice.detachedHead=false", "checkout", "--quiet", "--force", sha],
                cwd=repo_path,
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise CheckoutError(repo_path, sha, (e.stderr or "").strip()) from e
