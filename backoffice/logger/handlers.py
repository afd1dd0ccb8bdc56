# =============================================================================
# BACKOFFICE SERVICE - LOG HANDLERS
# =============================================================================
# File: backoffice/logger/handlers.py
# Description: Console handlers split by severity and a file handler with
#              daily plus size based rotation, compression and age purge
# =============================================================================

import gzip
import logging
import os
import shutil
import sys
import threading
from contextlib import suppress
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from logging.handlers import RotatingFileHandler
from typing import Callable, List, Optional


MEGABYTE = 1024 * 1024
DAILY_CHECK_INTERVAL = 3600.0


@dataclass
class FileLoggerConfig:
    """
    File logging settings.

    Attributes:
        log_path: Directory holding the log files
        log_file_name: Base name, e.g. "app"
        max_size: Megabytes before a size rotation (0 disables)
        max_backups: Rotated files kept per log file (0 disables size rotation)
        max_age: Days to keep rotated and dated files (0 keeps them forever)
        compress: Gzip rotated files
        local_time: Use local time rather than UTC for dated file names
        daily_rotate: Write to <name>-<YYYY-MM-DD>.log and switch at midnight
    """

    log_path: str = "./storage/logs"
    log_file_name: str = "app"
    max_size: int = 10
    max_backups: int = 5
    max_age: int = 28
    compress: bool = True
    local_time: bool = True
    daily_rotate: bool = True


# =============================================================================
# CONSOLE HANDLERS
# =============================================================================

class _BelowLevelFilter(logging.Filter):
    def __init__(self, level: int):
        super().__init__()
        self._level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self._level


def console_handlers() -> List[logging.Handler]:
    """
    Handlers for the stdout channel.

    debug/info/warn go to stdout, error/fatal go to stderr.
    """
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.addFilter(_BelowLevelFilter(logging.ERROR))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)

    return [stdout_handler, stderr_handler]


# =============================================================================
# ROTATING FILE HANDLER
# =============================================================================

def _gzip_namer(name: str) -> str:
    return f"{name}.gz"


def _gzip_rotator(source: str, dest: str) -> None:
    with open(source, "rb") as src, gzip.open(dest, "wb") as dst:
        shutil.copyfileobj(src, dst)
    os.remove(source)


class DailyRotatingFileHandler(RotatingFileHandler):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    DAILY ROTATING FILE HANDLER                           │
    │  Size based rotation from RotatingFileHandler plus a dated file per day │
    │  Optional gzip of rotated files and purge of files past max_age         │
    └─────────────────────────────────────────────────────────────────────────┘

    With daily rotation enabled a daemon thread wakes every
    ``check_interval`` seconds. It marks a pending day change and purges
    expired files; it never touches the stream. The switch to the new dated
    file happens in emit() under the handler lock, so the first record of a
    new day triggers exactly one switch and lands in the new file.

    Args:
        config: File logging settings
        clock: Returns the current time; injectable for tests
        check_interval: Seconds between watcher wake-ups
    """

    def __init__(
        self,
        config: FileLoggerConfig,
        clock: Optional[Callable[[], datetime]] = None,
        check_interval: float = DAILY_CHECK_INTERVAL,
    ):
        os.makedirs(config.log_path, exist_ok=True)

        self.config = config
        if clock is None:
            clock = datetime.now if config.local_time else _utc_clock
        self._clock = clock
        self._current_day = clock().date()
        self._day_pending = threading.Event()
        self._stop = threading.Event()
        self._watcher: Optional[threading.Thread] = None

        super().__init__(
            self.path_for(self._current_day),
            maxBytes=max(config.max_size, 0) * MEGABYTE,
            backupCount=max(config.max_backups, 0),
            encoding="utf-8",
        )

        if config.compress:
            self.namer = _gzip_namer
            self.rotator = _gzip_rotator

        self.purge_expired()

        if config.daily_rotate:
            self._watcher = threading.Thread(
                target=self._watch,
                args=(check_interval,),
                name=f"log-rotation-{config.log_file_name}",
                daemon=True,
            )
            self._watcher.start()

    # -------------------------------------------------------------------------
    # FILE NAMING
    # -------------------------------------------------------------------------

    def path_for(self, day: date) -> str:
        """Log file path for a given day."""
        if self.config.daily_rotate:
            file_name = f"{self.config.log_file_name}-{day:%Y-%m-%d}.log"
        else:
            file_name = f"{self.config.log_file_name}.log"
        return os.path.join(self.config.log_path, file_name)

    @property
    def current_day(self) -> date:
        return self._current_day

    # -------------------------------------------------------------------------
    # DAILY ROTATION
    # -------------------------------------------------------------------------

    def _watch(self, interval: float) -> None:
        while not self._stop.wait(interval):
            if self._clock().date() != self._current_day:
                self._day_pending.set()
            self.purge_expired()

    def emit(self, record: logging.LogRecord) -> None:
        if self.config.daily_rotate:
            with self.lock:
                today = self._clock().date()
                if self._day_pending.is_set() or today != self._current_day:
                    self._switch_day(today)
        super().emit(record)

    def _switch_day(self, today: date) -> None:
        self._day_pending.clear()
        if today == self._current_day:
            return

        self._current_day = today
        if self.stream:
            self.stream.close()
            self.stream = None
        self.baseFilename = os.path.abspath(self.path_for(today))
        self.stream = self._open()
        self.purge_expired()

    def doRollover(self) -> None:
        super().doRollover()
        self.purge_expired()

    # -------------------------------------------------------------------------
    # RETENTION
    # -------------------------------------------------------------------------

    def purge_expired(self) -> List[str]:
        """
        Delete rotated or dated siblings older than max_age days.

        Returns:
            Paths that were removed
        """
        if self.config.max_age <= 0:
            return []

        cutoff = self._clock().timestamp() - timedelta(days=self.config.max_age).total_seconds()
        current = os.path.basename(self.baseFilename)
        prefixes = (f"{self.config.log_file_name}-", f"{self.config.log_file_name}.log")
        removed = []

        for entry in os.scandir(self.config.log_path):
            name = entry.name
            if name == current or not name.startswith(prefixes) or ".log" not in name:
                continue
            if not entry.is_file():
                continue
            with suppress(FileNotFoundError):
                if entry.stat().st_mtime < cutoff:
                    os.remove(entry.path)
                    removed.append(entry.path)
        return removed

    def close(self) -> None:
        self._stop.set()
        super().close()


def _utc_clock() -> datetime:
    return datetime.now(timezone.utc)
