"""Filesystem locations used by gex."""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

logger = logging.getLogger(__name__)

APP_DIR_NAME = ".github-profile-switcher"
PROFILES_FILE_NAME = "profiles.json"
LOG_FILE_NAME = "gex.log"
# Replaces the extension of the config file name: ~/.ssh/config -> ~/.ssh/config.config.bak
SSH_BACKUP_SUFFIX = ".config.bak"

HOME_ENV = "GEX_HOME"
CONFIG_DIR_ENV = "GEX_CONFIG_DIR"
GIT_CONFIG_GLOBAL_ENV = "GIT_CONFIG_GLOBAL"


def get_home_dir() -> Path:
    """Get the user's home directory, honouring the GEX_HOME override."""
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home()


@dataclass(frozen=True)
class Settings:
    """Resolved paths for the profile store, SSH and Git configuration."""
    home: Path
    config_dir: Path
    ssh_dir: Path
    global_git_config: Path

    @property
    def profiles_file(self) -> Path:
        return self.config_dir / PROFILES_FILE_NAME

    @property
    def log_file(self) -> Path:
        return self.config_dir / LOG_FILE_NAME

    @property
    def ssh_config(self) -> Path:
        return self.ssh_dir / "config"

    @property
    def ssh_backup(self) -> Path:
        return self.ssh_config.with_suffix(SSH_BACKUP_SUFFIX)

    @classmethod
    def for_home(cls, home: Path) -> "Settings":
        """Build settings rooted at an explicit home directory."""
        return cls(
            home=home,
            config_dir=home / APP_DIR_NAME,
            ssh_dir=home / ".ssh",
            global_git_config=home / ".gitconfig",
        )


def load_settings() -> Settings:
    """Resolve settings from the environment."""
    settings = Settings.for_home(get_home_dir())

    config_dir = os.environ.get(CONFIG_DIR_ENV)
    if config_dir:
        settings = replace(settings, config_dir=Path(config_dir).expanduser())

    # Git reads this file instead of ~/.gitconfig when the variable is set
    git_global = os.environ.get(GIT_CONFIG_GLOBAL_ENV)
    if git_global:
        settings = replace(settings, global_git_config=Path(git_global).expanduser())

    logger.debug(f"Using settings: {settings}")
    return settings
