"""UI module for gex."""

from rich import box
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from .exceptions import GexError, PartialSwitchError
from .profile import Profile
from .results import EngineWarning, MatchState, ScopeStatus, StatusReport
from .ui_common import console, print_error, print_hint, print_warning

SCOPE_TITLES = {
    "global": "Global",
    "local": "Local (current repository)",
}


def print_profile_table(profiles: list[Profile], ssh_dir=None) -> None:
    """Print profiles in a table format."""
    table = Table(
        title="Git Profiles",
        box=box.ROUNDED,
        header_style="bold cyan",
        border_style="blue",
    )

    table.add_column("Name", style="cyan")
    table.add_column("Username", style="blue")
    table.add_column("Email", style="green")
    table.add_column("SSH Key", style="magenta")
    table.add_column("Host", style="yellow")

    for profile in profiles:
        key = escape(profile.ssh_key)
        if ssh_dir is not None and not (ssh_dir / profile.ssh_key).exists():
            key += " [red](missing)[/red]"
        table.add_row(
            escape(profile.name),
            escape(profile.username),
            escape(profile.email),
            key,
            escape(profile.ssh_host),
        )

    console.print(table)
    console.print()


def print_profile(profile: Profile) -> None:
    """Print the fields of a single profile."""
    console.print(f"  Username: {escape(profile.username)}")
    console.print(f"  Email: {escape(profile.email)}")
    console.print(f"  SSH Key: {escape(profile.ssh_key)}")


def print_scope_status(status: ScopeStatus) -> None:
    console.print(f"[title]{SCOPE_TITLES[status.scope.value]}:[/title]")
    if status.state is MatchState.MATCHED:
        console.print(f"  Profile: [highlight]{escape(status.profile.name)}[/highlight]")
        print_profile(status.profile)
    elif status.state is MatchState.NO_MATCH:
        identity = status.identity
        console.print("  No matching profile")
        console.print(f"  Username: {escape(identity.name or '(unset)')}")
        console.print(f"  Email: {escape(identity.email or '(unset)')}")
    else:
        console.print("  No profile set")


def print_status(report: StatusReport) -> None:
    """Print the profile status of every scope."""
    console.print("\n[bold cyan]Current Profile Status[/bold cyan]\n")
    print_scope_status(report.global_status)
    console.print()
    if report.local_status is None:
        console.print(f"[title]{SCOPE_TITLES['local']}:[/title]")
        console.print("  Not in a git repository")
    else:
        print_scope_status(report.local_status)


def print_warnings(warnings: list[EngineWarning]) -> None:
    for warning in warnings:
        print_warning(escape(warning.message))


def report_error(error: GexError) -> None:
    """Print an engine error with its hint, and any warnings a partial switch collected."""
    if isinstance(error, PartialSwitchError):
        print_warnings(error.warnings)
    print_error(escape(str(error)))
    print_hint(error.details)


def prompt_field(label: str, default: str) -> str:
    """Prompt for a profile field, keeping the current value on Enter."""
    return Prompt.ask(f"[cyan]{label}[/cyan]", default=default, console=console).strip()
