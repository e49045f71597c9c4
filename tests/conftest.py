"""Test configuration and fixtures."""

from pathlib import Path

import git
import pytest

from gex.config import Settings
from gex.git import GitConfig
from gex.profile import ProfileStore
from gex.ssh import SSHConfig
from gex.switcher import ProfileSwitcher


@pytest.fixture
def temp_home(tmp_path: Path, monkeypatch) -> Path:
    """Create a temporary home directory for testing."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("GEX_HOME", str(home))
    monkeypatch.delenv("GEX_CONFIG_DIR", raising=False)
    monkeypatch.delenv("GIT_CONFIG_GLOBAL", raising=False)
    return home


@pytest.fixture
def settings(temp_home: Path) -> Settings:
    return Settings.for_home(temp_home)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """A directory that is not inside any Git repository."""
    path = tmp_path / "plain"
    path.mkdir()
    return path


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create a temporary Git repository."""
    repo_path = tmp_path / "repo"
    git.Repo.init(repo_path)
    return repo_path


@pytest.fixture
def store(settings: Settings) -> ProfileStore:
    return ProfileStore(settings.profiles_file)


@pytest.fixture
def ssh_config(settings: Settings) -> SSHConfig:
    return SSHConfig(settings.ssh_dir, settings.ssh_config, settings.ssh_backup)


def make_switcher(settings: Settings, cwd: Path) -> ProfileSwitcher:
    return ProfileSwitcher(
        store=ProfileStore(settings.profiles_file),
        ssh_config=SSHConfig(settings.ssh_dir, settings.ssh_config, settings.ssh_backup),
        git_config=GitConfig(settings.global_git_config, cwd=cwd),
    )


@pytest.fixture
def switcher(settings: Settings, workdir: Path) -> ProfileSwitcher:
    """Switcher whose working directory is outside any repository."""
    return make_switcher(settings, workdir)


@pytest.fixture
def repo_switcher(settings: Settings, git_repo: Path) -> ProfileSwitcher:
    """Switcher whose working directory is a Git work tree."""
    return make_switcher(settings, git_repo)


@pytest.fixture
def ssh_key(settings: Settings) -> str:
    """Create a dummy key pair in the SSH directory and return its name."""
    settings.ssh_dir.mkdir(mode=0o700, exist_ok=True)
    (settings.ssh_dir / "id_ed25519_work").write_text("private key")
    (settings.ssh_dir / "id_ed25519_work.pub").write_text("ssh-ed25519 AAAA work@example.com")
    return "id_ed25519_work"
