"""Typed outcomes returned by engine operations."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from .profile import Profile


class WarningKind(Enum):
    """Non-fatal conditions reported alongside a successful result."""
    KEY_MISSING = "key_missing"
    BACKUP_FAILED = "backup_failed"


@dataclass(frozen=True)
class EngineWarning:
    kind: WarningKind
    message: str

    def __str__(self) -> str:
        return self.message


class Scope(Enum):
    """Git configuration scope."""
    GLOBAL = "global"
    LOCAL = "local"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class GitIdentity:
    """The user.name / user.email pair found in one config scope."""
    name: Optional[str]
    email: Optional[str]


@dataclass
class SyncResult:
    """Outcome of rewriting the SSH config."""
    changed: bool = False
    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    backup_path: Optional[Path] = None
    warnings: list[EngineWarning] = field(default_factory=list)


class SwitchState(Enum):
    """Progress of a switch; a failed switch keeps the last reached state."""
    VALIDATED = "validated"
    SSH_SYNCED = "ssh_synced"
    GIT_WRITTEN = "git_written"


@dataclass
class SwitchResult:
    profile: Profile
    scope: Scope
    state: SwitchState
    key_path: Path
    warnings: list[EngineWarning] = field(default_factory=list)


class MatchState(Enum):
    MATCHED = "matched"
    UNSET = "unset"
    NO_MATCH = "no_match"


@dataclass
class ScopeStatus:
    """Which stored profile, if any, the identity of a scope corresponds to."""
    scope: Scope
    state: MatchState
    identity: Optional[GitIdentity] = None
    profile: Optional[Profile] = None


@dataclass
class StatusReport:
    global_status: ScopeStatus
    # None when the working directory is not inside a work tree
    local_status: Optional[ScopeStatus] = None


@dataclass
class EditResult:
    profile: Profile
    sync: SyncResult

    @property
    def warnings(self) -> list[EngineWarning]:
        return self.sync.warnings


@dataclass
class DeleteResult:
    profile: Profile
    sync: SyncResult
    # Scopes whose Git identity still matches the deleted profile
    active_scopes: list[Scope] = field(default_factory=list)

    @property
    def warnings(self) -> list[EngineWarning]:
        return self.sync.warnings
