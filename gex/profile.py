"""Profile storage module for gex."""

import json
import logging
import os
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

from .exceptions import (
    CorruptStoreError,
    DuplicateNameError,
    GexIOError,
    InvalidFieldError,
    ProfileNotFoundError,
)

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
SSH_KEY_FORBIDDEN = set('/\\\0<>:"|?*')
MAX_NAME_LENGTH = 50
MAX_SSH_KEY_LENGTH = 255

PROFILE_FIELDS = ("username", "email", "ssh_key")


@dataclass(frozen=True)
class Profile:
    """Git identity profile."""
    name: str
    username: str
    email: str
    ssh_key: str

    @property
    def ssh_host(self) -> str:
        """Host alias used for this profile in the SSH config."""
        return f"github.com-{self.name}"

    def to_dict(self) -> dict[str, str]:
        """Convert profile to dictionary for serialization.

        The name is the key of the store document, so it is not repeated here.
        """
        return {
            "username": self.username,
            "email": self.email,
            "ssh_key": self.ssh_key,
        }

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> "Profile":
        """Create profile from a store document entry."""
        return cls(
            name=name,
            username=data["username"],
            email=data["email"],
            ssh_key=data["ssh_key"],
        )


def validate_name(name: str) -> None:
    """Check a profile name: 1-50 characters of letters, digits, '-' or '_'."""
    if not name:
        raise InvalidFieldError("name", "profile name cannot be empty")
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidFieldError("name", f"profile name is longer than {MAX_NAME_LENGTH} characters")
    if not NAME_PATTERN.match(name):
        raise InvalidFieldError(
            "name",
            "profile name must contain only alphanumeric characters, hyphens, and underscores",
        )


def validate_username(username: str) -> None:
    if not username or not username.strip():
        raise InvalidFieldError("username", "username cannot be empty")
    if username != username.strip():
        raise InvalidFieldError("username", "username cannot start or end with whitespace")
    if "\n" in username or "\r" in username:
        raise InvalidFieldError("username", "username cannot contain line breaks")


def validate_email(email: str) -> None:
    if not EMAIL_PATTERN.match(email or ""):
        raise InvalidFieldError("email", f"'{email}' is not a valid email address")


def validate_ssh_key(ssh_key: str) -> None:
    """Check an SSH key reference: a file name inside the SSH directory, not a path."""
    if not ssh_key:
        raise InvalidFieldError("ssh_key", "SSH key name cannot be empty")
    if len(ssh_key) > MAX_SSH_KEY_LENGTH:
        raise InvalidFieldError("ssh_key", f"SSH key name is longer than {MAX_SSH_KEY_LENGTH} characters")
    if SSH_KEY_FORBIDDEN.intersection(ssh_key):
        raise InvalidFieldError("ssh_key", "SSH key must be a file name, not a path")
    if ssh_key != ssh_key.strip():
        raise InvalidFieldError("ssh_key", "SSH key name cannot start or end with whitespace")


def validate_profile(profile: Profile) -> None:
    """Run every field check, raising InvalidFieldError on the first failure."""
    validate_name(profile.name)
    validate_username(profile.username)
    validate_email(profile.email)
    validate_ssh_key(profile.ssh_key)


def _reject_duplicate_keys(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise ValueError(f"duplicate key '{key}'")
        result[key] = value
    return result


def _is_legacy_document(data: dict[str, Any]) -> bool:
    return "version" in data and isinstance(data.get("profiles"), list)


class ProfileStore:
    """Durable mapping of profile name to profile, backed by a JSON document."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._profiles: Optional[dict[str, Profile]] = None

    @property
    def profiles(self) -> dict[str, Profile]:
        """Profiles keyed by name, loaded on first access."""
        if self._profiles is None:
            self._profiles = self.load()
        return self._profiles

    def load(self) -> dict[str, Profile]:
        """Load profiles from disk. A missing file yields an empty store."""
        if not self.path.exists():
            logger.debug(f"No profile store at {self.path}, starting empty")
            return {}

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise GexIOError(f"Failed to read profile store: {e}", path=self.path) from e

        try:
            data = json.loads(text, object_pairs_hook=_reject_duplicate_keys)
        except ValueError as e:
            raise CorruptStoreError(self.path, str(e)) from e

        if not isinstance(data, dict):
            raise CorruptStoreError(self.path, "top level is not a JSON object")

        if _is_legacy_document(data):
            logger.info(f"Migrating legacy profile store format in {self.path}")
            return self._load_legacy(data)

        profiles: dict[str, Profile] = {}
        for name, entry in data.items():
            if not isinstance(entry, dict) or not all(
                isinstance(entry.get(field), str) for field in PROFILE_FIELDS
            ):
                raise CorruptStoreError(self.path, f"entry '{name}' is missing fields")
            profiles[name] = Profile.from_dict(name, entry)

        logger.debug(f"Loaded {len(profiles)} profile(s) from {self.path}")
        return profiles

    def _load_legacy(self, data: dict[str, Any]) -> dict[str, Profile]:
        """Read the older {"version", "profiles": [...]} layout."""
        profiles: dict[str, Profile] = {}
        for entry in data["profiles"]:
            try:
                profile = Profile(
                    name=entry["name"],
                    username=entry["username"],
                    email=entry["email"],
                    ssh_key=entry["ssh_key_name"],
                )
            except (KeyError, TypeError) as e:
                raise CorruptStoreError(self.path, f"legacy entry is missing {e}") from e
            if profile.name in profiles:
                raise CorruptStoreError(self.path, f"duplicate profile '{profile.name}'")
            profiles[profile.name] = profile
        return profiles

    def save(self, profiles: dict[str, Profile]) -> None:
        """Write the full mapping, replacing the old document atomically."""
        data = {name: profile.to_dict() for name, profile in profiles.items()}
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise GexIOError(f"Failed to save profiles: {e}", path=self.path) from e

        self._profiles = dict(profiles)
        logger.debug(f"Saved {len(profiles)} profile(s) to {self.path}")

    def exists(self, name: str) -> bool:
        return name in self.profiles

    def add(self, profile: Profile) -> Profile:
        """Add a new profile."""
        validate_profile(profile)
        if profile.name in self.profiles:
            raise DuplicateNameError(profile.name)

        profiles = dict(self.profiles)
        profiles[profile.name] = profile
        self.save(profiles)

        logger.info(f"Added profile '{profile.name}'")
        return profile

    def get(self, name: str) -> Profile:
        """Get a profile by name."""
        try:
            return self.profiles[name]
        except KeyError:
            raise ProfileNotFoundError(name) from None

    def remove(self, name: str) -> Profile:
        """Delete a profile and persist the store."""
        profile = self.get(name)
        profiles = dict(self.profiles)
        del profiles[name]
        self.save(profiles)

        logger.info(f"Removed profile '{name}'")
        return profile

    def update(
        self,
        name: str,
        username: str | None = None,
        email: str | None = None,
        ssh_key: str | None = None,
    ) -> Profile:
        """Apply the supplied fields to an existing profile.

        Args:
            name: Profile name
            username: New Git username, or None to keep the current one
            email: New Git email, or None to keep the current one
            ssh_key: New SSH key name, or None to keep the current one

        Returns:
            The updated profile
        """
        current = self.get(name)
        changes = {
            field: value
            for field, value in (("username", username), ("email", email), ("ssh_key", ssh_key))
            if value is not None
        }
        updated = replace(current, **changes)
        validate_profile(updated)

        profiles = dict(self.profiles)
        profiles[name] = updated
        self.save(profiles)

        logger.info(f"Updated profile '{name}': {', '.join(sorted(changes)) or 'no changes'}")
        return updated

    def list(self) -> list[Profile]:
        """Get all profiles in insertion order."""
        return list(self.profiles.values())

    def validate_store(self) -> bool:
        """Check whether the store file exists and parses."""
        if not self.path.exists():
            return False
        try:
            self.load()
        except CorruptStoreError:
            return False
        return True
