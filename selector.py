"""Selection of rotated firewall log files by name prefix and age."""
import logging
import os
from datetime import datetime, timedelta
from typing import List, Optional

from config import DEFAULT_FILE_PREFIX


logger = logging.getLogger(__name__)


def select_files(
    path: str,
    days_back: int,
    prefix: str = DEFAULT_FILE_PREFIX,
    now: Optional[datetime] = None,
) -> List[str]:
    """
    Find log files under a directory that were modified within the last days.

    Args:
        path: Directory holding the rotated log files
        days_back: Age window in days; only files modified strictly after
            now - days_back are kept
        prefix: File name prefix a log file must start with
        now: Reference time (naive local); defaults to the current time

    Returns:
        Paths of matching files, sorted by file name

    Raises:
        OSError: If the directory cannot be listed
    """
    if now is None:
        now = datetime.now()
    cutoff = (now - timedelta(days=days_back)).timestamp()

    selected = []
    with os.scandir(path) as entries:
        for entry in entries:
            if not entry.name.startswith(prefix):
                continue
            try:
                if not entry.is_file():
                    continue
                modified = entry.stat().st_mtime
            except OSError as e:
                logger.debug(f"Cannot read metadata for {entry.path}: {e}")
                continue
            if modified > cutoff:
                selected.append(entry.path)

    selected.sort()
    logger.debug(f"Selected {len(selected)} file(s) under {path} newer than {days_back} day(s)")
    return selected
