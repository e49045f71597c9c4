"""Git configuration management."""

import logging
from pathlib import Path
from typing import Optional

import git

from .exceptions import GexIOError, GitConfigError, NotARepositoryError
from .results import GitIdentity, Scope

logger = logging.getLogger(__name__)


class GitConfig:
    """Reads and writes user.name / user.email in the global or local Git config."""

    def __init__(self, global_config: Path, cwd: Path | None = None) -> None:
        """Initialize Git config adapter.

        Args:
            global_config: Path of the user's global Git config file
            cwd: Directory used to find the local repository (default: current directory)
        """
        self.global_config = global_config
        self.cwd = cwd
        self._git = git.Git()

    def _working_dir(self) -> Path:
        return self.cwd or Path.cwd()

    def find_repository(self) -> git.Repo:
        """Get the repository containing the working directory."""
        working_dir = self._working_dir()
        try:
            repo = git.Repo(working_dir, search_parent_directories=True)
        except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
            raise NotARepositoryError(working_dir) from e
        if repo.bare:
            raise NotARepositoryError(working_dir)
        return repo

    def in_work_tree(self) -> bool:
        try:
            self.find_repository()
        except NotARepositoryError:
            return False
        return True

    def config_path(self, scope: Scope) -> Path:
        """Get the config file backing a scope."""
        if scope is Scope.GLOBAL:
            return self.global_config
        repo = self.find_repository()
        # Linked worktrees share the config of the main repository
        return Path(repo.common_dir) / "config"

    def read(self, scope: Scope) -> Optional[GitIdentity]:
        """Read the identity configured in a scope.

        Only the scope's own file is consulted; includes are not followed.

        Returns:
            GitIdentity, or None if neither user.name nor user.email is set
        """
        path = self.config_path(scope)
        if not path.exists():
            logger.debug(f"No {scope} Git config at {path}")
            return None

        name = self._get(path, "user.name")
        email = self._get(path, "user.email")
        if name is None and email is None:
            logger.debug(f"No identity set in {scope} Git config")
            return None
        return GitIdentity(name=name, email=email)

    def _get(self, path: Path, key: str) -> Optional[str]:
        try:
            return self._git.config("--file", str(path), "--get", key)
        except git.GitCommandError as e:
            # git config exits with 1 when the key is not set
            if e.status == 1:
                return None
            raise GitConfigError(path, _command_message(e)) from e
        except git.GitCommandNotFound as e:
            raise GitConfigError(path, "git executable not found") from e

    def write(self, scope: Scope, name: str, email: str) -> Path:
        """Set user.name and user.email in a scope.

        git edits the file in place, so other keys, sections and comments
        are kept.

        Returns:
            Path of the config file that was written
        """
        path = self.config_path(scope)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise GexIOError(f"Failed to write Git config {path}: {e}", path=path) from e

        try:
            self._git.config("--file", str(path), "user.name", name)
            self._git.config("--file", str(path), "user.email", email)
        except git.GitCommandError as e:
            logger.debug(f"git config failed for {path}: {e}")
            raise GitConfigError(path, _command_message(e)) from e
        except git.GitCommandNotFound as e:
            raise GitConfigError(path, "git executable not found") from e

        logger.info(f"Set {scope} Git identity to {name} <{email}> in {path}")
        return path


def _command_message(error: git.GitCommandError) -> str:
    stderr = (error.stderr or "").strip()
    # GitPython reports stderr as "stderr: '...'"
    if stderr.startswith("stderr:"):
        stderr = stderr[len("stderr:"):].strip().strip("'").strip()
    return stderr or f"git config exited with status {error.status}"
