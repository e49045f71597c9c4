"""Profile switching for gex.

The coordinator is the only entry point the CLI and the interactive menu use.
It keeps the profile store as the single source of truth and treats the SSH
and Git config files as side effects derived from it.
"""

import logging
from pathlib import Path
from typing import Optional

from .config import Settings, load_settings
from .exceptions import GexError, NotARepositoryError, PartialSwitchError
from .git import GitConfig
from .profile import Profile, ProfileStore, validate_profile
from .results import (
    DeleteResult,
    EditResult,
    EngineWarning,
    GitIdentity,
    MatchState,
    Scope,
    ScopeStatus,
    StatusReport,
    SwitchResult,
    SwitchState,
    SyncResult,
    WarningKind,
)
from .ssh import SSHConfig

logger = logging.getLogger(__name__)


class ProfileSwitcher:
    """Coordinates the profile store, SSH config and Git config."""

    def __init__(
        self,
        store: ProfileStore,
        ssh_config: SSHConfig,
        git_config: GitConfig,
    ) -> None:
        self.store = store
        self.ssh_config = ssh_config
        self.git_config = git_config

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ProfileSwitcher":
        """Build a switcher wired to the user's files."""
        settings = settings or load_settings()
        return cls(
            store=ProfileStore(settings.profiles_file),
            ssh_config=SSHConfig(settings.ssh_dir, settings.ssh_config, settings.ssh_backup),
            git_config=GitConfig(settings.global_git_config),
        )

    def add_profile(self, name: str, username: str, email: str, ssh_key: str) -> Profile:
        """Create a profile. It takes effect only once switched to."""
        profile = Profile(name=name, username=username, email=email, ssh_key=ssh_key)
        validate_profile(profile)
        if not self.ssh_config.key_exists(ssh_key):
            logger.debug(f"SSH key {self.ssh_config.key_path(ssh_key)} does not exist yet")
        return self.store.add(profile)

    def list_profiles(self) -> list[Profile]:
        return self.store.list()

    def get_profile(self, name: str) -> Profile:
        return self.store.get(name)

    def delete_profile(self, name: str) -> DeleteResult:
        """Delete a profile and its SSH stanza.

        Git config is never unset here. If the deleted identity is still
        active somewhere, the scopes are listed in the result.
        """
        profile = self.store.remove(name)
        sync = self.ssh_config.sync(self.store.profiles)
        active = [
            status.scope
            for status in self._scope_statuses({profile.name: profile})
            if status.state is MatchState.MATCHED
        ]
        if active:
            logger.info(f"Deleted profile '{name}' is still the Git identity in: {active}")
        return DeleteResult(profile=profile, sync=sync, active_scopes=active)

    def edit_profile(
        self,
        name: str,
        username: str | None = None,
        email: str | None = None,
        ssh_key: str | None = None,
    ) -> EditResult:
        """Update a profile and regenerate its SSH stanza.

        Git config is not re-applied; switch again to propagate name or
        email changes.
        """
        profile = self.store.update(name, username=username, email=email, ssh_key=ssh_key)
        sync = self.ssh_config.sync(self.store.profiles)
        return EditResult(profile=profile, sync=sync)

    def switch_profile(self, name: str, scope: Scope) -> SwitchResult:
        """Make a profile the active identity for a scope.

        Steps:
        1. Check the SSH key exists (a missing key is only a warning)
        2. Sync the SSH config so the profile's host alias is present
        3. Write user.name and user.email to the scope's Git config

        Raises:
            ProfileNotFoundError: if the profile does not exist
            NotARepositoryError: for a local switch outside a work tree
            PartialSwitchError: if the Git config write fails after step 2
        """
        profile = self.store.get(name)
        if scope is Scope.LOCAL:
            self.git_config.find_repository()

        state = SwitchState.VALIDATED
        warnings: list[EngineWarning] = []
        key_path = self.ssh_config.key_path(profile.ssh_key)
        if not self.ssh_config.key_exists(profile.ssh_key):
            logger.info(f"SSH key for profile '{name}' not found: {key_path}")
            warnings.append(EngineWarning(WarningKind.KEY_MISSING, f"SSH key not found: {key_path}"))

        sync = self.ssh_config.sync(self.store.profiles)
        warnings.extend(sync.warnings)
        state = SwitchState.SSH_SYNCED

        try:
            self.git_config.write(scope, profile.username, profile.email)
        except GexError as e:
            logger.warning(f"Switch to '{name}' stopped after SSH sync: {e}")
            raise PartialSwitchError(name, "git config", state, e, warnings) from e
        state = SwitchState.GIT_WRITTEN

        logger.info(f"Switched {scope} identity to profile '{name}'")
        return SwitchResult(
            profile=profile,
            scope=scope,
            state=state,
            key_path=key_path,
            warnings=warnings,
        )

    def status(self) -> StatusReport:
        """Report which stored profile each scope's Git identity matches."""
        statuses = self._scope_statuses(self.store.profiles)
        return StatusReport(
            global_status=statuses[0],
            local_status=statuses[1] if len(statuses) > 1 else None,
        )

    def sync_ssh_config(self) -> SyncResult:
        return self.ssh_config.sync(self.store.profiles)

    def restore_ssh_config(self) -> Path:
        """Put the SSH config back to how it was before gex last changed it."""
        return self.ssh_config.restore()

    def _scope_statuses(self, profiles: dict[str, Profile]) -> list[ScopeStatus]:
        scopes = [Scope.GLOBAL]
        if self.git_config.in_work_tree():
            scopes.append(Scope.LOCAL)

        statuses = []
        for scope in scopes:
            try:
                identity = self.git_config.read(scope)
            except NotARepositoryError:
                continue
            statuses.append(self._match(scope, identity, profiles))
        return statuses

    @staticmethod
    def _match(
        scope: Scope,
        identity: Optional[GitIdentity],
        profiles: dict[str, Profile],
    ) -> ScopeStatus:
        if identity is None:
            return ScopeStatus(scope=scope, state=MatchState.UNSET)
        for profile in profiles.values():
            if profile.username == identity.name and profile.email == identity.email:
                return ScopeStatus(scope=scope, state=MatchState.MATCHED, identity=identity, profile=profile)
        return ScopeStatus(scope=scope, state=MatchState.NO_MATCH, identity=identity)
