"""Backup and restore of configuration files."""

import logging
import shutil
from pathlib import Path

from .exceptions import GexIOError

logger = logging.getLogger(__name__)


def backup_file(path: Path, backup_path: Path) -> Path | None:
    """Copy a configuration file to its backup location.

    Args:
        path: File to back up
        backup_path: Destination of the copy, overwritten if present

    Returns:
        Path to the backup, or None if there was nothing to back up
    """
    if not path.exists():
        logger.debug(f"No file at {path} to back up")
        return None

    try:
        shutil.copy2(path, backup_path)
    except OSError as e:
        logger.warning(f"Failed to back up {path}: {e}")
        raise GexIOError(f"Failed to back up {path}: {e}", path=path) from e

    logger.debug(f"Backed up {path} to {backup_path}")
    return backup_path


def restore_file(backup_path: Path, path: Path) -> Path:
    """Copy a backup over the file it was taken from.

    Args:
        backup_path: Previously created backup
        path: File to restore

    Returns:
        Path to the restored file
    """
    if not backup_path.exists():
        raise GexIOError(f"Backup not found: {backup_path}", path=backup_path)

    try:
        shutil.copy2(backup_path, path)
    except OSError as e:
        logger.warning(f"Failed to restore {path}: {e}")
        raise GexIOError(f"Failed to restore {path} from {backup_path}: {e}", path=path) from e

    logger.info(f"Restored {path} from {backup_path}")
    return path
