"""Custom logging handler utilities."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional


class DateStampedFileHandler(logging.FileHandler):
    """File handler that stores logs under date-stamped directories.

    A handler created at 2024-05-26 12:34:56 UTC with prefix ``relay`` writes to
    ``<directory>/2024-05-26/relay_2024-05-26_12-34-56_UTC.log``.
    """

    def __init__(
        self,
        directory: str | Path,
        *,
        prefix: str = "relay",
        encoding: str | None = "utf-8",
        mode: str = "a",
        delay: bool = False,
        errors: Optional[str] = None,
        current_time: datetime | None = None,
    ) -> None:
        timestamp = (current_time or datetime.now(timezone.utc)).astimezone(
            timezone.utc
        )

        date_folder = timestamp.strftime("%Y-%m-%d")
        human_time = timestamp.strftime("%Y-%m-%d_%H-%M-%S")
        log_path = (Path(directory) / date_folder / f"{prefix}_{human_time}_UTC.log").resolve()

        log_path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(
            log_path,
            mode=mode,
            encoding=encoding,
            delay=delay,
            errors=errors,
        )


def cleanup_old_logs(
    log_directory: str | Path,
    retention_hours: int,
    logger: logging.Logger | None = None,
    *,
    now: datetime | None = None,
) -> tuple[int, int]:
    """
    Delete log files older than the specified retention period.

    Args:
        log_directory: Directory holding date-stamped log folders
        retention_hours: Files older than this many hours will be deleted (0 = disabled)
        logger: Optional logger for reporting cleanup activity
        now: Reference time, defaults to the current UTC time

    Returns:
        Tuple of (files_deleted, errors_encountered)
    """
    if retention_hours <= 0:
        return (0, 0)

    dir_path = Path(log_directory).resolve()
    if not dir_path.exists():
        return (0, 0)

    cutoff_time = (now or datetime.now(timezone.utc)) - timedelta(hours=retention_hours)
    files_deleted = 0
    errors = 0

    for log_file in dir_path.rglob("*.log"):
        try:
            mtime = datetime.fromtimestamp(log_file.stat().st_mtime, tz=timezone.utc)
            if mtime < cutoff_time:
                log_file.unlink()
                files_deleted += 1
                if logger:
                    logger.debug(f"Deleted old log file: {log_file}")
        except OSError as e:
            errors += 1
            if logger:
                logger.warning(f"Failed to delete {log_file}: {e}")

    # Remove date directories emptied by the sweep
    for date_dir in dir_path.iterdir():
        if date_dir.is_dir() and not any(date_dir.iterdir()):
            try:
                date_dir.rmdir()
            except OSError as e:
                errors += 1
                if logger:
                    logger.warning(f"Failed to remove {date_dir}: {e}")

    if logger and files_deleted > 0:
        logger.info(
            f"Log cleanup complete: {files_deleted} file(s) deleted, "
            f"{errors} error(s) encountered"
        )

    return (files_deleted, errors)


__all__ = ["DateStampedFileHandler", "cleanup_old_logs"]
