"""Git operations used to obtain the diff under review."""

import logging
import subprocess
from typing import List

from vcs.vcs_exceptions import InputUnavailableError


class GitOperator:
    """Runs git commands in a working tree and returns their output."""

    # Fixed a/ and b/ prefixes regardless of diff.mnemonicPrefix or diff.noprefix
    DIFF_OPTIONS = ["--no-color", "--no-ext-diff", "-M", "--src-prefix=a/", "--dst-prefix=b/"]

    def __init__(self, repo_path: str = ".", remote: str = "origin", timeout: float = 60.0) -> None:
        """
        Initialize the git operator.

        Args:
            repo_path: Path to the working tree
            remote: Name of the remote to fetch from and diff against
            timeout: Maximum time in seconds for any single git command
        """
        self._repo_path = repo_path
        self._remote = remote
        self._timeout = timeout
        self._logger = logging.getLogger("GitOperator")

    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """
        Run a git command.

        Args:
            args: Arguments to pass to git
            check: Raise if git exits with a non-zero status

        Returns:
            The completed process

        Raises:
            InputUnavailableError: If git is missing, times out, or fails while check is set
        """
        command = ["git"] + args
        self._logger.debug("Running: %s", " ".join(command))

        try:
            result = subprocess.run(
                command,
                cwd=self._repo_path,
                capture_output=True,
                encoding='utf-8',
                errors='replace',
                timeout=self._timeout,
                check=False
            )

        except FileNotFoundError as e:
            raise InputUnavailableError(
                "git is not installed or not on the PATH",
                {"command": command}
            ) from e

        except subprocess.TimeoutExpired as e:
            raise InputUnavailableError(
                f"git {args[0]} timed out after {self._timeout} seconds",
                {"command": command, "timeout": self._timeout}
            ) from e

        if check and result.returncode != 0:
            stderr = result.stderr.strip()
            raise InputUnavailableError(
                f"git {' '.join(args)} failed: {stderr}",
                {"command": command, "returncode": result.returncode, "stderr": stderr}
            )

        return result

    def ref_exists(self, ref: str) -> bool:
        """
        Check whether a ref can be resolved.

        Args:
            ref: Branch, remote branch or commit name

        Returns:
            True if git can resolve the ref to a commit
        """
        result = self._run(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], check=False)
        return result.returncode == 0

    def current_branch(self) -> str:
        """Name of the currently checked out branch."""
        return self._run(["rev-parse", "--abbrev-ref", "HEAD"]).stdout.strip()

    def fetch_latest_changes(self) -> None:
        """Fetch the latest refs from the remote."""
        self._logger.info("Fetching latest changes from %s", self._remote)
        self._run(["fetch", self._remote])

    def checkout_branch(self, branch: str) -> None:
        """
        Check out a branch and fast-forward it to its remote counterpart.

        Args:
            branch: Branch to check out
        """
        self._logger.info("Checking out branch %s", branch)
        self._run(["checkout", branch])

        if not self.ref_exists(f"{self._remote}/{branch}"):
            return

        result = self._run(["pull", "--ff-only", self._remote, branch], check=False)
        if result.returncode != 0:
            self._logger.warning("Could not fast-forward %s: %s", branch, result.stderr.strip())

    def generate_diff(self, target_branch: str) -> str:
        """
        Diff the checked out branch against the point where it left the target branch.

        Args:
            target_branch: Branch the changes will be merged into

        Returns:
            Raw unified diff text

        Raises:
            InputUnavailableError: If the target branch cannot be found or git fails
        """
        base = f"{self._remote}/{target_branch}"
        if not self.ref_exists(base):
            if not self.ref_exists(target_branch):
                raise InputUnavailableError(
                    f"Target branch '{target_branch}' not found locally or on {self._remote}",
                    {"target_branch": target_branch, "remote": self._remote}
                )

            self._logger.warning("%s not found, diffing against local %s", base, target_branch)
            base = target_branch

        self._logger.info("Generating diff against %s", base)
        return self._run(["diff"] + self.DIFF_OPTIONS + [f"{base}...HEAD"]).stdout

    def generate_local_diff(self) -> str:
        """
        Diff all uncommitted changes, staged and unstaged, against HEAD.

        Returns:
            Raw unified diff text, empty if there are no changes
        """
        self._logger.info("Generating diff of uncommitted changes")
        return self._run(["diff"] + self.DIFF_OPTIONS + ["HEAD"]).stdout
