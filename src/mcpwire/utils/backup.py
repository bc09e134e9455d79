# ABOUTME: Backups of target configuration files taken before every write.
# ABOUTME: Keeps the newest few copies per configuration file.
import logging
import re
import shutil
from datetime import datetime
from pathlib import Path

from mcpwire.config import get_home_dir

logger = logging.getLogger(__name__)

MAX_BACKUPS_PER_FILE = 5

# {label}_{YYYYMMDD}_{HHMMSS}_{micro}{.ext}
BACKUP_PATTERN = re.compile(r"^(.+?)_(\d{8}_\d{6}_\d{6})(\..+)?$")


def get_backup_dir() -> Path:
    """Return ~/.mcp-wire/backups (not created here)."""
    return get_home_dir() / "backups"


def backup_label(source_path: Path) -> str:
    """Derive a stable per-file label from its path.

    The parent directory name is folded in so that two files called
    settings.json in different tools never share a retention group.

    Examples:
        >>> backup_label(Path("/home/u/.claude.json"))
        'claude'
        >>> backup_label(Path("/home/u/.gemini/settings.json"))
        'gemini-settings'
    """
    stem = source_path.name.lstrip(".").split(".")[0] or "config"
    parent = source_path.parent.name.lstrip(".")
    if parent and source_path.parent != Path.home():
        return f"{parent}-{stem}"
    return stem


def create_backup(source_path: Path, backup_dir: Path | None = None) -> Path | None:
    """Copy a configuration file into the backup directory.

    ABOUTME: Returns None when there is nothing to back up yet
    ABOUTME: Uses shutil.copy2() to preserve file metadata

    Args:
        source_path: File about to be rewritten
        backup_dir: Destination directory (defaults to get_backup_dir())

    Returns:
        Path to the backup, or None if source_path does not exist

    Raises:
        OSError: If the copy fails
    """
    if not source_path.exists():
        return None

    target_dir = backup_dir if backup_dir else get_backup_dir()
    target_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    backup_path = target_dir / f"{backup_label(source_path)}_{timestamp}{source_path.suffix}"

    shutil.copy2(source_path, backup_path)
    logger.debug(f"Backed up {source_path} to {backup_path}")

    cleanup_old_backups(target_dir)
    return backup_path


def cleanup_old_backups(backup_dir: Path, keep: int = MAX_BACKUPS_PER_FILE) -> list[Path]:
    """Delete all but the newest `keep` backups for each label.

    Errors while deleting are logged and skipped.

    Returns:
        List of paths that were deleted
    """
    deleted: list[Path] = []
    if not backup_dir.exists():
        return deleted

    groups: dict[str, list[tuple[str, Path]]] = {}
    for file_path in backup_dir.iterdir():
        if not file_path.is_file():
            continue
        match = BACKUP_PATTERN.match(file_path.name)
        if not match:
            continue
        groups.setdefault(match.group(1), []).append((match.group(2), file_path))

    for backups in groups.values():
        backups.sort(key=lambda item: item[0], reverse=True)
        for _, file_path in backups[keep:]:
            try:
                file_path.unlink()
                deleted.append(file_path)
                logger.debug(f"Deleted old backup: {file_path}")
            except OSError as e:
                logger.warning(f"Failed to delete old backup {file_path}: {e}")

    return deleted
