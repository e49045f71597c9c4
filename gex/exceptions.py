"""Custom exceptions for gex."""


class GexError(Exception):
    """Base exception for gex."""

    def __init__(self, message: str, details: str | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ProfileNotFoundError(GexError):
    """Referenced profile does not exist."""

    def __init__(self, name: str) -> None:
        self.profile_name = name
        super().__init__(
            f"Profile '{name}' not found",
            details=(
                "Run 'gex list' to see available profiles, or create it with: "
                f"gex add {name} --username <user> --email <email> --ssh-key <key>"
            ),
        )


class DuplicateNameError(GexError):
    """A profile with the same name already exists."""

    def __init__(self, name: str) -> None:
        self.profile_name = name
        super().__init__(
            f"Profile '{name}' already exists",
            details=f"Use 'gex edit {name}' to modify it or choose a different name",
        )


class InvalidFieldError(GexError):
    """A profile field failed its format check."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(
            f"Invalid {field}: {message}",
            details="Use 'gex <command> --help' for usage information",
        )


class CorruptStoreError(GexError):
    """The profile document exists but cannot be parsed."""

    def __init__(self, path, reason: str) -> None:
        self.path = path
        super().__init__(
            f"Profile store is corrupted: {path} ({reason})",
            details="Fix the JSON by hand, or move the file aside to start fresh",
        )


class MalformedSSHConfigError(GexError):
    """The SSH config holds a managed marker the engine cannot interpret."""

    def __init__(self, path, line_number: int, reason: str) -> None:
        self.path = path
        self.line_number = line_number
        super().__init__(
            f"Malformed SSH config {path}, line {line_number}: {reason}",
            details="Remove or repair the '# GitHub Profile:' block by hand",
        )


class NotARepositoryError(GexError):
    """A local-scope operation was requested outside a Git work tree."""

    def __init__(self, path) -> None:
        self.path = path
        super().__init__(
            f"Not a git repository: {path}",
            details=(
                "Use --global to set the profile globally, or run this command "
                "inside a git repository for local configuration"
            ),
        )


class GexIOError(GexError):
    """Reading or writing a file failed."""

    def __init__(self, message: str, path=None) -> None:
        self.path = path
        super().__init__(message, details="Check file permissions and disk space")


class PartialSwitchError(GexError):
    """A switch failed after the SSH config had already been synced."""

    def __init__(self, profile_name: str, step: str, state, cause: Exception, warnings=()) -> None:
        self.profile_name = profile_name
        self.step = step
        self.state = state
        self.cause = cause
        self.warnings = list(warnings)
        super().__init__(
            f"Switch to '{profile_name}' partially applied: {step} failed: {cause}",
            details=(
                "The SSH config was updated; re-run the switch once the problem "
                "is fixed"
            ),
        )


class GitConfigError(GexError):
    """git could not read or update a config file."""

    def __init__(self, path, reason: str) -> None:
        self.path = path
        super().__init__(
            f"Git config error in {path}: {reason}",
            details=f"Check the file with: git config --file {path} --list",
        )
