"""SSH config management module for gex.

The SSH client config is shared with other tools, so it is handled as an
ordered sequence of blocks. Blocks that start with a ``# GitHub Profile:``
marker are owned by gex and regenerated from the profile store; everything
else is copied through unchanged.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .backup import backup_file, restore_file
from .config import SSH_BACKUP_SUFFIX
from .exceptions import GexIOError, MalformedSSHConfigError
from .profile import NAME_PATTERN, Profile
from .results import EngineWarning, SyncResult, WarningKind

logger = logging.getLogger(__name__)

MARKER_PREFIX = "# GitHub Profile:"
HOSTNAME = "github.com"
HOST_LINE = re.compile(r"^\s*host(?:\s*=\s*|\s+)(?P<alias>.+?)\s*$", re.IGNORECASE)
STANZA_KEYWORDS = ("host", "match")


@dataclass
class Block:
    """A run of SSH config lines, either foreign or owned by one profile."""
    lines: list[str]
    owner: Optional[str] = None
    # Blank separator lines following an owned stanza
    trailing: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(self.lines + self.trailing)


def _marker_name(line: str) -> Optional[str]:
    """Profile name of a marker line; only an unindented marker naming a valid profile counts."""
    if not line.startswith(MARKER_PREFIX):
        return None
    name = line[len(MARKER_PREFIX):].strip()
    if not NAME_PATTERN.match(name):
        return None
    return name


def _keyword(line: str) -> str:
    return re.split(r"[\s=]", line.strip(), maxsplit=1)[0].lower()


def _belongs_to_stanza(line: str) -> bool:
    """Whether a line after a Host line is still part of that stanza."""
    stripped = line.strip()
    if not stripped:
        return False
    if line[0] in " \t":
        return True
    if stripped.startswith("#"):
        return False
    return _keyword(line) not in STANZA_KEYWORDS


def _ends_with_blank_line(text: str) -> bool:
    lines = text.splitlines()
    return bool(lines) and not lines[-1].strip()


def parse_blocks(text: str, path: Path) -> list[Block]:
    """Split SSH config text into foreign and owned blocks.

    Raises:
        MalformedSSHConfigError: if a marker is not followed by the Host line
            it belongs to
    """
    lines = text.splitlines(keepends=True)
    blocks: list[Block] = []
    foreign: list[str] = []
    i = 0

    while i < len(lines):
        name = _marker_name(lines[i])
        if name is None:
            foreign.append(lines[i])
            i += 1
            continue

        if foreign:
            blocks.append(Block(foreign))
            foreign = []

        start = i
        i += 1
        while i < len(lines) and not lines[i].strip():
            i += 1
        host = HOST_LINE.match(lines[i]) if i < len(lines) else None
        if host is None:
            raise MalformedSSHConfigError(
                path, min(i, len(lines) - 1) + 1, f"marker for '{name}' is not followed by a Host line"
            )
        if host.group("alias") != f"{HOSTNAME}-{name}":
            raise MalformedSSHConfigError(
                path, i + 1, f"expected 'Host {HOSTNAME}-{name}', found '{lines[i].strip()}'"
            )

        i += 1
        while i < len(lines) and _belongs_to_stanza(lines[i]):
            i += 1
        end = i
        while i < len(lines) and not lines[i].strip():
            i += 1
        blocks.append(Block(lines[start:end], owner=name, trailing=lines[end:i]))

    if foreign:
        blocks.append(Block(foreign))
    return blocks


class SSHConfig:
    """Reads and rewrites the SSH client config file."""

    def __init__(self, ssh_dir: Path, config_path: Path | None = None, backup_path: Path | None = None) -> None:
        """Initialize SSH config editor.

        Args:
            ssh_dir: Directory SSH key names are resolved against
            config_path: SSH client config file (default: <ssh_dir>/config)
            backup_path: Backup location (default: config.config.bak beside the config)
        """
        self.ssh_dir = ssh_dir
        self.config_path = config_path or ssh_dir / "config"
        self.backup_path = backup_path or self.config_path.with_suffix(SSH_BACKUP_SUFFIX)
        self._backed_up = False

    def key_path(self, ssh_key: str) -> Path:
        """Get the full path of a private key from its name."""
        return self.ssh_dir / ssh_key

    def public_key_path(self, ssh_key: str) -> Path:
        return self.ssh_dir / f"{ssh_key}.pub"

    def key_exists(self, ssh_key: str) -> bool:
        return self.key_path(ssh_key).is_file()

    def render_stanza(self, profile: Profile) -> str:
        """Build the owned host block for a profile."""
        identity_file = str(self.key_path(profile.ssh_key))
        if " " in identity_file:
            identity_file = f'"{identity_file}"'
        return (
            f"{MARKER_PREFIX} {profile.name}\n"
            f"Host {profile.ssh_host}\n"
            f"  HostName {HOSTNAME}\n"
            "  User git\n"
            f"  IdentityFile {identity_file}\n"
            "  IdentitiesOnly yes\n"
        )

    def read(self) -> str:
        """Read the config file, treating a missing file as empty."""
        if not self.config_path.exists():
            return ""
        try:
            with self.config_path.open("r", encoding="utf-8", newline="") as f:
                return f.read()
        except OSError as e:
            raise GexIOError(f"Failed to read SSH config: {e}", path=self.config_path) from e

    def owned_profiles(self) -> list[str]:
        """Names of the profiles that currently have a stanza in the file."""
        return [b.owner for b in parse_blocks(self.read(), self.config_path) if b.owner is not None]

    def _write(self, text: str) -> None:
        try:
            self.ssh_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
            created = not self.config_path.exists()
            with self.config_path.open("w", encoding="utf-8", newline="") as f:
                f.write(text)
            if created:
                self.config_path.chmod(0o600)
        except OSError as e:
            raise GexIOError(f"Failed to write SSH config: {e}", path=self.config_path) from e

    def _backup(self, result: SyncResult) -> None:
        """Back up the file once per run; failure only produces a warning."""
        if self._backed_up:
            return
        try:
            result.backup_path = backup_file(self.config_path, self.backup_path)
        except GexIOError as e:
            logger.info(f"Continuing without SSH config backup: {e}")
            result.warnings.append(
                EngineWarning(WarningKind.BACKUP_FAILED, f"Could not back up SSH config: {e}")
            )
            return
        self._backed_up = True

    def sync(self, profiles: Mapping[str, Profile]) -> SyncResult:
        """Make the owned stanzas match the given profiles exactly.

        Stanzas of profiles that no longer exist are removed, stanzas of
        known profiles are regenerated where they stand, and stanzas of new
        profiles are appended. Foreign content is left untouched.

        Args:
            profiles: Full profile mapping, keyed by name

        Returns:
            SyncResult describing what changed
        """
        original = self.read()
        blocks = parse_blocks(original, self.config_path)
        result = SyncResult()

        seen: set[str] = set()
        parts: list[str] = []
        for block in blocks:
            if block.owner is None:
                parts.append(block.text)
            elif block.owner in seen:
                logger.warning(f"Dropping duplicate SSH stanza for profile '{block.owner}'")
            elif block.owner in profiles:
                seen.add(block.owner)
                stanza = self.render_stanza(profiles[block.owner])
                if "".join(block.lines) != stanza:
                    result.updated.append(block.owner)
                parts.append(stanza + "".join(block.trailing))
            else:
                result.removed.append(block.owner)

        text = "".join(parts)
        for name, profile in profiles.items():
            if name in seen:
                continue
            if text and not text.endswith("\n"):
                text += "\n"
            if text.strip() and not _ends_with_blank_line(text):
                text += "\n"
            text += self.render_stanza(profile)
            result.added.append(name)

        if text == original:
            logger.debug("SSH config already up to date")
            return result

        self._backup(result)
        self._write(text)
        result.changed = True
        logger.info(
            f"Updated SSH config {self.config_path} "
            f"(added: {result.added}, updated: {result.updated}, removed: {result.removed})"
        )
        return result

    def restore(self) -> Path:
        """Replace the SSH config with its backup."""
        return restore_file(self.backup_path, self.config_path)
