"""Command-line interface."""

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar, cast

import click
from rich.markup import escape

from .exceptions import GexError
from .results import Scope
from .switcher import ProfileSwitcher
from .ui import (
    print_profile,
    print_profile_table,
    print_status,
    print_warnings,
    prompt_field,
    report_error,
)
from .ui_common import (
    confirm_action,
    console,
    print_info,
    print_success,
    print_warning,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def handle_errors(f: F) -> F:
    """Decorator to handle errors in CLI commands."""
    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except GexError as e:
            report_error(e)
            raise click.exceptions.Exit(1)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise
        except Exception as e:
            logger.error(f"Unexpected error: {e}", exc_info=True)
            console.print(f"\n[bold red]Unexpected error:[/bold red] {escape(str(e))}")
            raise click.exceptions.Exit(1)
    return cast(F, wrapper)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(package_name="gex")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Git profile switcher for managing multiple GitHub accounts."""
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug mode enabled")
    if ctx.obj is None:
        ctx.obj = ProfileSwitcher.from_settings()


@cli.command()
@click.argument("name")
@click.option("--username", "-u", required=True, help="GitHub username")
@click.option("--email", "-e", required=True, help="Git email address")
@click.option("--ssh-key", "-s", required=True, help="SSH key file name in ~/.ssh (e.g. id_ed25519_work)")
@click.pass_obj
@handle_errors
def add(switcher: ProfileSwitcher, name: str, username: str, email: str, ssh_key: str) -> None:
    """Add a new profile."""
    profile = switcher.add_profile(name, username, email, ssh_key)
    print_success(f"Profile '{escape(profile.name)}' created")
    if not switcher.ssh_config.key_exists(ssh_key):
        print_warning(f"SSH key not found yet: {switcher.ssh_config.key_path(ssh_key)}")
    print_info(f"Activate it with: gex switch {escape(profile.name)} --global")


@cli.command(name="list")
@click.pass_obj
@handle_errors
def list_profiles(switcher: ProfileSwitcher) -> None:
    """List all profiles."""
    profiles = switcher.list_profiles()
    if not profiles:
        print_info("No profiles found. Create one with: gex add <name> --username <user> --email <email> --ssh-key <key>")
        return
    print_profile_table(profiles, switcher.ssh_config.ssh_dir)


@cli.command()
@click.argument("name")
@click.option("--global", "-g", "global_", is_flag=True, help="Apply to the global Git config")
@click.option("--local", "-l", "local", is_flag=True, help="Apply to the current repository (default)")
@click.pass_obj
@handle_errors
def switch(switcher: ProfileSwitcher, name: str, global_: bool, local: bool) -> None:
    """Switch to a profile."""
    if global_ and local:
        raise click.UsageError("--global and --local are mutually exclusive")
    scope = Scope.GLOBAL if global_ else Scope.LOCAL

    result = switcher.switch_profile(name, scope)
    print_warnings(result.warnings)
    print_success(f"Switched to profile '{escape(name)}' ({scope})")
    print_profile(result.profile)
    console.print(f"  SSH Host: {escape(result.profile.ssh_host)}")
    public_key = switcher.ssh_config.public_key_path(result.profile.ssh_key)
    if public_key.exists():
        console.print(f"  Public key: {escape(str(public_key))}")
        print_info(f"Make sure this key is added to the GitHub account of {escape(result.profile.username)}")


@cli.command()
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
@handle_errors
def delete(switcher: ProfileSwitcher, name: str, yes: bool) -> None:
    """Delete a profile."""
    switcher.get_profile(name)
    if not yes and not confirm_action(f"Are you sure you want to delete profile '{escape(name)}'?", default=False):
        print_info("Deletion cancelled")
        return

    result = switcher.delete_profile(name)
    print_warnings(result.warnings)
    print_success(f"Profile '{escape(name)}' deleted")
    for scope in result.active_scopes:
        print_warning(f"The {scope} Git config still uses this identity; switch to another profile to replace it")


@cli.command()
@click.argument("name")
@click.option("--username", "-u", help="New GitHub username")
@click.option("--email", "-e", help="New Git email address")
@click.option("--ssh-key", "-s", help="New SSH key file name")
@click.pass_obj
@handle_errors
def edit(
    switcher: ProfileSwitcher,
    name: str,
    username: str | None,
    email: str | None,
    ssh_key: str | None,
) -> None:
    """Edit a profile. Prompts for each field when no option is given."""
    if username is None and email is None and ssh_key is None:
        current = switcher.get_profile(name)
        console.print(f"Editing profile '{escape(name)}'")
        console.print("[dim]Press Enter to keep the current value[/dim]\n")
        username = prompt_field("Username", current.username)
        email = prompt_field("Email", current.email)
        ssh_key = prompt_field("SSH Key", current.ssh_key)

    result = switcher.edit_profile(name, username=username, email=email, ssh_key=ssh_key)
    print_warnings(result.warnings)
    print_success(f"Profile '{escape(name)}' updated")
    print_profile(result.profile)
    print_info("Run 'gex switch' again to apply name or email changes to Git")


@cli.command()
@click.pass_obj
@handle_errors
def status(switcher: ProfileSwitcher) -> None:
    """Show current profile status."""
    print_status(switcher.status())


@cli.command()
@click.pass_obj
@handle_errors
def sync(switcher: ProfileSwitcher) -> None:
    """Regenerate the SSH config stanzas from the stored profiles."""
    result = switcher.sync_ssh_config()
    print_warnings(result.warnings)
    if result.changed:
        print_success("SSH config updated")
    else:
        print_info("SSH config already up to date")


@cli.command(name="restore-ssh")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
@handle_errors
def restore_ssh(switcher: ProfileSwitcher, yes: bool) -> None:
    """Restore the SSH config from its backup."""
    backup = switcher.ssh_config.backup_path
    if not yes and not confirm_action(f"Replace the SSH config with {backup}?", default=False):
        print_info("Restore cancelled")
        return
    path = switcher.restore_ssh_config()
    print_success(f"Restored {path}")


@cli.command()
@click.pass_obj
@handle_errors
def tui(switcher: ProfileSwitcher) -> None:
    """Launch the interactive menu."""
    from .tui import run_menu

    run_menu(switcher)
