"""Tests for SSH config management."""

from pathlib import Path
from unittest.mock import patch

import pytest

from gex.exceptions import GexIOError, MalformedSSHConfigError
from gex.profile import Profile
from gex.results import WarningKind
from gex.ssh import SSHConfig, parse_blocks

FOREIGN = """Host myserver
    HostName 10.0.0.5
    User admin

Host *
  ServerAliveInterval 60
"""


def profiles(*items: Profile) -> dict[str, Profile]:
    return {p.name: p for p in items}


def make_profile(name: str, ssh_key: str | None = None) -> Profile:
    return Profile(
        name=name,
        username=f"{name}-user",
        email=f"{name}@example.com",
        ssh_key=ssh_key or f"id_ed25519_{name}",
    )


def stanza(ssh_dir: Path, name: str, ssh_key: str | None = None) -> str:
    return (
        f"# GitHub Profile: {name}\n"
        f"Host github.com-{name}\n"
        "  HostName github.com\n"
        "  User git\n"
        f"  IdentityFile {ssh_dir / (ssh_key or f'id_ed25519_{name}')}\n"
        "  IdentitiesOnly yes\n"
    )


def test_sync_creates_config(ssh_config: SSHConfig) -> None:
    """Test syncing into a missing config file."""
    result = ssh_config.sync(profiles(make_profile("work")))

    assert result.changed
    assert result.added == ["work"]
    assert result.backup_path is None
    assert ssh_config.config_path.read_text() == stanza(ssh_config.ssh_dir, "work")
    assert oct(ssh_config.config_path.stat().st_mode)[-3:] == "600"


def test_sync_nothing_to_do_on_missing_file(ssh_config: SSHConfig) -> None:
    result = ssh_config.sync({})

    assert not result.changed
    assert not ssh_config.config_path.exists()


def test_sync_appends_after_foreign_content(ssh_config: SSHConfig) -> None:
    ssh_config.ssh_dir.mkdir()
    ssh_config.config_path.write_text(FOREIGN)

    ssh_config.sync(profiles(make_profile("work"), make_profile("personal")))

    expected = (
        FOREIGN
        + "\n"
        + stanza(ssh_config.ssh_dir, "work")
        + "\n"
        + stanza(ssh_config.ssh_dir, "personal")
    )
    assert ssh_config.config_path.read_text() == expected
    assert ssh_config.owned_profiles() == ["work", "personal"]


def test_sync_is_idempotent(ssh_config: SSHConfig) -> None:
    """Test that a second sync with the same profiles writes nothing."""
    ssh_config.ssh_dir.mkdir()
    ssh_config.config_path.write_text(FOREIGN)
    mapping = profiles(make_profile("work"), make_profile("personal"))

    ssh_config.sync(mapping)
    first = ssh_config.config_path.read_bytes()
    result = ssh_config.sync(mapping)

    assert not result.changed
    assert ssh_config.config_path.read_bytes() == first


def test_sync_removes_only_deleted_stanza(ssh_config: SSHConfig) -> None:
    """Test that removing a profile leaves every other block in place."""
    ssh_dir = ssh_config.ssh_dir
    ssh_dir.mkdir()
    before = (
        stanza(ssh_dir, "personal")
        + "\n"
        + FOREIGN
        + "\n"
        + stanza(ssh_dir, "work")
        + "\n"
        + "Host backup\n  HostName backup.example.com\n"
    )
    ssh_config.config_path.write_text(before)

    result = ssh_config.sync(profiles(make_profile("personal")))

    assert result.removed == ["work"]
    assert ssh_config.config_path.read_text() == (
        stanza(ssh_dir, "personal")
        + "\n"
        + FOREIGN
        + "\n"
        + "Host backup\n  HostName backup.example.com\n"
    )


def test_sync_regenerates_in_place(ssh_config: SSHConfig) -> None:
    """Test that changing a key only touches that profile's IdentityFile line."""
    ssh_dir = ssh_config.ssh_dir
    ssh_dir.mkdir()
    ssh_config.config_path.write_text(
        stanza(ssh_dir, "work") + "\n" + FOREIGN + "\n" + stanza(ssh_dir, "personal")
    )
    before = ssh_config.config_path.read_text().splitlines()

    result = ssh_config.sync(profiles(make_profile("work", "id_rsa_new"), make_profile("personal")))

    after = ssh_config.config_path.read_text().splitlines()
    changed = [(old, new) for old, new in zip(before, after) if old != new]
    assert result.updated == ["work"]
    assert len(before) == len(after)
    assert changed == [
        (f"  IdentityFile {ssh_dir / 'id_ed25519_work'}", f"  IdentityFile {ssh_dir / 'id_rsa_new'}")
    ]


def test_sync_preserves_foreign_bytes(ssh_config: SSHConfig) -> None:
    """Test that CRLF line endings and odd spacing in foreign blocks survive."""
    ssh_config.ssh_dir.mkdir()
    foreign = b"# my servers\r\nHost  legacy\r\n\tUser   root\r\n\r\n"
    ssh_config.config_path.write_bytes(foreign)

    ssh_config.sync(profiles(make_profile("work")))
    ssh_config.sync({})

    assert ssh_config.config_path.read_bytes() == foreign


def test_unmarked_github_host_is_foreign(ssh_config: SSHConfig) -> None:
    ssh_config.ssh_dir.mkdir()
    manual = "Host github.com-work\n  HostName github.com\n  IdentityFile ~/.ssh/manual\n"
    ssh_config.config_path.write_text(manual)

    ssh_config.sync(profiles(make_profile("work")))
    ssh_config.sync({})

    assert ssh_config.config_path.read_text().startswith(manual)
    assert ssh_config.owned_profiles() == []


def test_duplicate_stanzas_are_collapsed(ssh_config: SSHConfig) -> None:
    ssh_dir = ssh_config.ssh_dir
    ssh_dir.mkdir()
    ssh_config.config_path.write_text(
        stanza(ssh_dir, "work") + "\n" + FOREIGN + "\n" + stanza(ssh_dir, "work")
    )

    ssh_config.sync(profiles(make_profile("work")))

    assert ssh_config.owned_profiles() == ["work"]
    assert ssh_config.config_path.read_text() == stanza(ssh_dir, "work") + "\n" + FOREIGN + "\n"


@pytest.mark.parametrize(
    "content",
    [
        "# GitHub Profile: work\n",
        "# GitHub Profile: work\n\n",
        "# GitHub Profile: work\nUser git\n",
        "# GitHub Profile: work\nHost github.com-personal\n  User git\n",
    ],
)
def test_malformed_marker(ssh_config: SSHConfig, content: str) -> None:
    ssh_config.ssh_dir.mkdir()
    ssh_config.config_path.write_text(FOREIGN + content)

    with pytest.raises(MalformedSSHConfigError) as exc_info:
        ssh_config.sync(profiles(make_profile("work")))

    assert exc_info.value.line_number > FOREIGN.count("\n")
    assert ssh_config.config_path.read_text() == FOREIGN + content


def test_marker_like_comments_are_foreign(ssh_config: SSHConfig) -> None:
    """Test that indented or free-text marker comments do not claim a block."""
    ssh_config.ssh_dir.mkdir()
    manual = (
        "Host myserver\n"
        "  HostName example.com\n"
        "  # GitHub Profile: kept for reference\n"
        "  User admin\n"
        "\n"
        "# GitHub Profile: old laptop setup\n"
        "Host legacy\n"
        "  User root\n"
    )
    ssh_config.config_path.write_text(manual)

    result = ssh_config.sync(profiles(make_profile("work")))

    assert result.added == ["work"]
    assert ssh_config.config_path.read_text() == manual + "\n" + stanza(ssh_config.ssh_dir, "work")


def test_blank_lines_after_marker(ssh_config: SSHConfig) -> None:
    """Test that blank lines between a marker and its Host line are accepted."""
    ssh_dir = ssh_config.ssh_dir
    ssh_dir.mkdir()
    ssh_config.config_path.write_text(
        "# GitHub Profile: work\n\nHost github.com-work\n  HostName github.com\n\n" + FOREIGN
    )

    result = ssh_config.sync(profiles(make_profile("work")))

    assert result.updated == ["work"]
    assert ssh_config.owned_profiles() == ["work"]
    assert ssh_config.config_path.read_text() == stanza(ssh_dir, "work") + "\n" + FOREIGN


def test_parse_blocks_keeps_indented_comments() -> None:
    text = (
        "# GitHub Profile: work\n"
        "Host github.com-work\n"
        "  # note\n"
        "  User git\n"
        "\n"
        "# unrelated\n"
        "Host other\n"
    )

    blocks = parse_blocks(text, Path("config"))

    assert [b.owner for b in blocks] == ["work", None]
    assert len(blocks[0].lines) == 4
    assert blocks[0].trailing == ["\n"]
    assert blocks[1].text == "# unrelated\nHost other\n"


def test_backup_taken_once_per_run(ssh_config: SSHConfig) -> None:
    """Test that the backup holds the file as it was before the first edit."""
    ssh_config.ssh_dir.mkdir()
    ssh_config.config_path.write_text(FOREIGN)

    first = ssh_config.sync(profiles(make_profile("work")))
    ssh_config.sync(profiles(make_profile("work"), make_profile("personal")))

    assert first.backup_path == ssh_config.backup_path
    assert ssh_config.backup_path.name == "config.config.bak"
    assert ssh_config.backup_path.read_text() == FOREIGN


def test_backup_failure_is_a_warning(ssh_config: SSHConfig) -> None:
    ssh_config.ssh_dir.mkdir()
    ssh_config.config_path.write_text(FOREIGN)

    with patch("gex.ssh.backup_file", side_effect=GexIOError("permission denied")):
        result = ssh_config.sync(profiles(make_profile("work")))

    assert result.changed
    assert [w.kind for w in result.warnings] == [WarningKind.BACKUP_FAILED]
    assert "github.com-work" in ssh_config.config_path.read_text()


def test_restore(ssh_config: SSHConfig) -> None:
    ssh_config.ssh_dir.mkdir()
    ssh_config.config_path.write_text(FOREIGN)
    ssh_config.sync(profiles(make_profile("work")))

    ssh_config.restore()

    assert ssh_config.config_path.read_text() == FOREIGN


def test_restore_without_backup(ssh_config: SSHConfig) -> None:
    with pytest.raises(GexIOError):
        ssh_config.restore()


def test_key_resolution(ssh_config: SSHConfig, ssh_key: str) -> None:
    assert ssh_config.key_path(ssh_key) == ssh_config.ssh_dir / ssh_key
    assert ssh_config.public_key_path(ssh_key).name == f"{ssh_key}.pub"
    assert ssh_config.key_exists(ssh_key)
    assert not ssh_config.key_exists("id_missing")


def test_restore_existing_installation_backup(settings) -> None:
    """Test that restore reads the backup file name earlier installations wrote."""
    settings.ssh_dir.mkdir()
    (settings.ssh_dir / "config").write_text("Host broken\n")
    (settings.ssh_dir / "config.config.bak").write_text(FOREIGN)

    editor = SSHConfig(settings.ssh_dir)

    assert editor.backup_path == settings.ssh_backup
    editor.restore()
    assert (settings.ssh_dir / "config").read_text() == FOREIGN
