"""Interactive menu for gex."""

import logging

from rich.markup import escape
from rich.prompt import Prompt

from .exceptions import GexError
from .results import Scope
from .switcher import ProfileSwitcher
from .ui import print_profile_table, print_status, print_warnings, report_error
from .ui_common import console, print_info, print_success

logger = logging.getLogger(__name__)

MENU = {
    "1": "List profiles",
    "2": "Switch profile (global)",
    "3": "Show status",
    "4": "Quit",
}


def print_menu() -> None:
    console.print("\n[title]gex - Git profile switcher[/title]")
    for key, label in MENU.items():
        console.print(f"  [highlight]{key}[/highlight]. {label}")


def choose_profile(switcher: ProfileSwitcher) -> str | None:
    """Ask for a profile by number; returns None when the user backs out."""
    profiles = switcher.list_profiles()
    if not profiles:
        print_info("No profiles found. Create one with: gex add")
        return None

    for index, profile in enumerate(profiles, start=1):
        console.print(f"  [highlight]{index}[/highlight]. {escape(profile.name)} ({escape(profile.email)})")
    choices = [str(i) for i in range(1, len(profiles) + 1)] + ["b"]
    answer = Prompt.ask("Profile number, or b to go back", choices=choices, console=console)
    if answer == "b":
        return None
    return profiles[int(answer) - 1].name


def run_menu(switcher: ProfileSwitcher) -> None:
    """Run the menu loop until the user quits.

    Switching from the menu always targets the global scope; use
    'gex switch --local' for repository-only identities.
    """
    while True:
        print_menu()
        choice = Prompt.ask("Select", choices=list(MENU), default="4", console=console)
        try:
            if choice == "1":
                profiles = switcher.list_profiles()
                if profiles:
                    print_profile_table(profiles, switcher.ssh_config.ssh_dir)
                else:
                    print_info("No profiles found")
            elif choice == "2":
                name = choose_profile(switcher)
                if name is not None:
                    result = switcher.switch_profile(name, Scope.GLOBAL)
                    print_warnings(result.warnings)
                    print_success(f"Switched to profile '{escape(name)}' (global)")
            elif choice == "3":
                print_status(switcher.status())
            else:
                return
        except GexError as e:
            logger.debug(f"Menu action failed: {e}")
            report_error(e)
