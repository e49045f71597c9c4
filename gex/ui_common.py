"""Console and message helpers shared by the CLI and the interactive menu."""

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm
from rich.theme import Theme

from .exceptions import GexError

theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "red",
        "success": "green",
        "title": "bold cyan",
        "highlight": "bold yellow",
        "hint": "dim",
    }
)

console = Console(theme=theme)


def print_error(message: str) -> None:
    console.print(f"[error]Error:[/error] {message}")


def print_warning(message: str) -> None:
    console.print(f"[warning]Warning:[/warning] {message}")


def print_info(message: str) -> None:
    console.print(f"[info]Info:[/info] {message}")


def print_success(message: str) -> None:
    console.print(f"[success]Success:[/success] {message}")


def print_hint(hint: str | None) -> None:
    """Print the suggestion attached to an error, if any."""
    if hint:
        console.print(f"[hint]{escape(hint)}[/hint]")


def confirm_action(prompt: str, default: bool = True) -> bool:
    """Ask a yes/no question; Ctrl+C cancels the command."""
    try:
        return Confirm.ask(prompt, default=default, console=console)
    except KeyboardInterrupt:
        raise GexError("Operation cancelled by user") from None
