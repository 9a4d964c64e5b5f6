"""Git operations service.

Core service for git command operations. Encapsulates all subprocess calls
to git commands. Everything else in reftracker works on the text this
service returns.
"""

from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class GitOperationError(Exception):
    """Base class for failed git invocations."""

    pass


class GitRepositoryError(GitOperationError):
    """Raised when directory is not a git repository."""

    pass


class GitDiffError(GitOperationError):
    """Raised when git diff command fails."""

    pass


class GitFileNotFoundError(GitOperationError):
    """Raised when file doesn't exist at specified commit."""

    pass


class GitLogError(GitOperationError):
    """Raised when git log or another history query fails."""

    pass


class GitOperationsService:
    """Core service for git command operations.

    Encapsulates all subprocess calls to git commands.
    """

    def __init__(self, repo_path: str | Path = "."):
        """Initialize with repository path.

        Args:
            repo_path: Path to git repository (default: current directory)
        """
        self.repo_path = Path(repo_path)

    def _run(self, args: list[str], check: bool = True) -> subprocess.CompletedProcess:
        logger.debug("Running git %s", " ".join(args))
        # Non-UTF-8 bytes decode to U+FFFD instead of failing the call
        return subprocess.run(
            ["git", *args],
            cwd=self.repo_path,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            check=check,
        )

    def _require_repository(self) -> None:
        if not self.is_git_repository():
            raise GitRepositoryError(
                f"Not a git repository: {self.repo_path}\n"
                "Make sure you're running from within a git repository."
            )

    # ============================================================
    # Repository
    # ============================================================

    def is_git_repository(self) -> bool:
        """Check if repo_path is a git repository.

        Returns:
            True if valid git repo, False otherwise
        """
        try:
            subprocess.run(
                ["git", "rev-parse", "--git-dir"],
                cwd=self.repo_path,
                capture_output=True,
                check=True,
            )
            return True
        except (subprocess.CalledProcessError, FileNotFoundError):
            return False

    def get_head_revision(self) -> str:
        """Get the commit SHA of HEAD.

        Raises:
            GitLogError: If HEAD cannot be resolved (e.g. no commits yet)
        """
        self._require_repository()
        try:
            return self._run(["rev-parse", "HEAD"]).stdout.strip()
        except subprocess.CalledProcessError as e:
            raise GitLogError(f"Failed to resolve HEAD: {e.stderr}")

    def is_first_commit(self, revision: str) -> bool:
        """Check whether revision is a root commit of the repository."""
        self._require_repository()
        try:
            roots = self._run(["rev-list", "--max-parents=0", "HEAD"]).stdout.split()
            resolved = self._run(["rev-parse", revision]).stdout.strip()
        except subprocess.CalledProcessError as e:
            raise GitLogError(f"Failed to inspect revision {revision}: {e.stderr}")
        return resolved in roots

    # ============================================================
    # History
    # ============================================================

    def get_file_history_log(
        self,
        file_name: str,
        anchor_revision: str | None = None,
        rename_similarity: int = 60,
    ) -> str:
        """Get the change log of every path ending in file_name.

        Output lists commits oldest first, each as a "Commit: <sha>" line
        followed by name-status lines. With an anchor revision the log
        starts at the anchor (inclusive).

        Args:
            file_name: Last path component to search history for
            anchor_revision: Revision to start from, or None for all history
            rename_similarity: Minimum similarity percentage for rename detection

        Raises:
            GitLogError: If git log fails
            GitRepositoryError: If not in a git repository
        """
        self._require_repository()

        args = [
            "log",
            "--name-status",
            f"--find-renames={rename_similarity}%",
            "--reverse",
            "--pretty=format:Commit: %H",
        ]
        if anchor_revision:
            if self.is_first_commit(anchor_revision):
                args.append("HEAD")
            else:
                args.append(f"{anchor_revision}^..HEAD")
        args.extend(["--", f"*{file_name}"])

        try:
            return self._run(args).stdout
        except subprocess.CalledProcessError as e:
            raise GitLogError(f"Failed to read history of {file_name}: {e.stderr}")

    def get_revision_before_last_change(self, path: str) -> str | None:
        """Get the parent of the latest commit that touched path.

        For a path that no longer exists this is the last revision that
        still held it.

        Returns:
            The parent commit SHA, or None when no commit touched path

        Raises:
            GitLogError: If git log fails
        """
        self._require_repository()
        try:
            output = self._run(["log", "-1", "--format=%P", "--", path]).stdout
        except subprocess.CalledProcessError as e:
            raise GitLogError(f"Failed to read history of {path}: {e.stderr}")
        parents = output.split()
        return parents[0] if parents else None

    def get_working_tree_status(self) -> str:
        """Get `git status --porcelain=v1` output, renames included.

        Raises:
            GitLogError: If git status fails
        """
        self._require_repository()
        try:
            return self._run(["status", "--porcelain=v1", "--untracked-files=all"]).stdout
        except subprocess.CalledProcessError as e:
            raise GitLogError(f"Failed to read working tree status: {e.stderr}")

    # ============================================================
    # Contents
    # ============================================================

    def file_exists_at_commit(self, file_path: str, revision: str) -> bool:
        """Check whether file_path exists at revision."""
        self._require_repository()
        result = self._run(["cat-file", "-e", f"{revision}:{file_path}"], check=False)
        return result.returncode == 0

    def path_exists_in_working_tree(self, path: str) -> bool:
        return (self.repo_path / path).exists()

    def get_file_content(self, file_path: str, commit_hash: str) -> str:
        """Get file content at specific commit.

        Args:
            file_path: Path to file in repository
            commit_hash: Git commit SHA or branch name

        Returns:
            File content as string

        Raises:
            GitFileNotFoundError: If file doesn't exist at commit
            GitRepositoryError: If not in a git repository
        """
        self._require_repository()

        try:
            return self._run(["show", f"{commit_hash}:{file_path}"]).stdout
        except subprocess.CalledProcessError as e:
            raise GitFileNotFoundError(
                f"File {file_path} not found at {commit_hash}: {e.stderr}"
            )

    def get_working_tree_content(self, file_path: str) -> str:
        """Get the current on-disk content of a file.

        Raises:
            GitFileNotFoundError: If the file does not exist on disk
        """
        path = self.repo_path / file_path
        if not path.is_file():
            raise GitFileNotFoundError(f"File {file_path} not found in the working tree")
        return path.read_text(encoding="utf-8", errors="replace")

    def list_directory_files(self, directory: str, revision: str) -> list[str]:
        """List every file under directory at revision, recursively.

        Returns:
            Repository-relative file paths; empty if the directory did not
            exist at revision
        """
        self._require_repository()
        prefix = directory.rstrip("/") + "/"
        result = self._run(["ls-tree", "-r", "--name-only", revision, "--", prefix], check=False)
        if result.returncode != 0:
            logger.debug("ls-tree failed for %s at %s: %s", directory, revision, result.stderr.strip())
            return []
        return [line for line in result.stdout.splitlines() if line.strip()]

    # ============================================================
    # Diffs
    # ============================================================

    def get_diff_between_revisions(
        self,
        before_revision: str,
        before_path: str,
        after_revision: str,
        after_path: str,
        context_lines: int = 3,
    ) -> str:
        """Get the unified diff of a file between two revisions.

        The file may live at different paths in the two revisions.

        Raises:
            GitDiffError: If diff command fails
            GitRepositoryError: If not in a git repository
        """
        self._require_repository()

        try:
            result = self._run([
                "diff",
                "--no-color",
                f"-U{context_lines}",
                f"{before_revision}:{before_path}",
                f"{after_revision}:{after_path}",
            ])
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitDiffError(f"Failed to compute diff: {e.stderr}")

    def get_diff_against_working_tree(
        self,
        before_revision: str,
        before_path: str,
        after_path: str,
        context_lines: int = 3,
    ) -> str:
        """Get the unified diff of a committed file against an on-disk file.

        The committed version is written to a temporary file and compared
        with `git diff --no-index`, which exits 1 when the files differ.

        Raises:
            GitDiffError: If diff command fails
            GitFileNotFoundError: If the committed file doesn't exist
        """
        before_text = self.get_file_content(before_path, before_revision)
        working_file = (self.repo_path / after_path).resolve()

        with tempfile.TemporaryDirectory() as tmpdir:
            before_file = Path(tmpdir) / "before.txt"
            before_file.write_text(before_text, encoding="utf-8")

            result = self._run(
                [
                    "diff",
                    "--no-index",
                    "--no-color",
                    f"-U{context_lines}",
                    str(before_file),
                    str(working_file),
                ],
                check=False,
            )

        if result.returncode not in (0, 1):
            raise GitDiffError(f"Failed to compute diff against working tree: {result.stderr}")
        return result.stdout
