"""Main entry point for direct module execution."""

import logging
import sys

from .cli import cli
from .config import load_settings
from .exceptions import GexError
from .ui_common import print_error

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Log everything to the profile directory.

    Only errors go to stderr; warnings reach the user through the console.
    """
    settings = load_settings()
    settings.config_dir.mkdir(parents=True, exist_ok=True)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(settings.log_file),
            stderr_handler,
        ],
    )


def main() -> None:
    """Main entry point."""
    try:
        configure_logging()
        logger.debug("Starting gex")
        cli()
    except GexError as e:
        print_error(str(e))
        sys.exit(1)
    except OSError as e:
        logger.error("Fatal error", exc_info=True)
        print_error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
