# =============================================================================
# BACKOFFICE SERVICE - LOGGER TESTS
# =============================================================================
# File: tests/test_logger.py
# Description: Formatter, channel factory and the daily rotating file handler
# =============================================================================

import gzip
import io
import logging
import os
import sys
import time
from datetime import date, datetime, timedelta

import pytest

from backoffice.core.exceptions import LoggerConfigError
from backoffice.logger import (
    DailyRotatingFileHandler,
    FieldsFormatter,
    FileLoggerConfig,
    close_logger,
    create_logger,
    fields,
)


def make_record(message: str, level: int = logging.INFO, **record_fields) -> logging.LogRecord:
    record = logging.LogRecord(
        name="backoffice.tests",
        level=level,
        pathname="/srv/backoffice/services/user_service.py",
        lineno=42,
        msg=message,
        args=None,
        exc_info=None,
    )
    if record_fields:
        record.fields = record_fields
    return record


class FakeClock:
    """Clock whose time only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def named_logger():
    """Isolated logger namespace, detached after the test."""
    name = "backoffice_test_logger"
    yield name
    close_logger(logging.getLogger(name))


# =============================================================================
# FORMATTER
# =============================================================================

class TestFieldsFormatter:
    """Line layout: [LEVEL] date time file:line: message | k=v"""

    def test_fields_helper(self):
        assert fields(user_id="1", ok=True) == {"fields": {"user_id": "1", "ok": True}}

    def test_format_with_fields(self):
        record = make_record("User updated", user_id="u-1", active=False, note=None)

        line = FieldsFormatter().format(record)

        assert line.startswith("[INFO] ")
        assert "user_service.py:42: User updated" in line
        assert line.endswith("| user_id=u-1, active=false, note=null")

    def test_format_without_fields(self):
        line = FieldsFormatter().format(make_record("Plain message"))
        assert line.endswith("user_service.py:42: Plain message")

    def test_timestamp_layout(self):
        line = FieldsFormatter().format(make_record("x"))
        stamp = line[len("[INFO] "):len("[INFO] ") + 19]

        datetime.strptime(stamp, "%Y/%m/%d %H:%M:%S")

    @pytest.mark.parametrize(
        "level, label",
        [
            (logging.DEBUG, "DEBUG"),
            (logging.WARNING, "WARN"),
            (logging.ERROR, "ERROR"),
            (logging.CRITICAL, "FATAL"),
        ],
    )
    def test_level_labels(self, level, label):
        assert FieldsFormatter().format(make_record("x", level)).startswith(f"[{label}] ")

    def test_exception_traceback(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record("Failed")
            record.exc_info = sys.exc_info()

        line = FieldsFormatter().format(record)

        assert "Traceback" in line
        assert "ValueError: boom" in line


# =============================================================================
# LOGGER FACTORY
# =============================================================================

class TestCreateLogger:
    """Channel selection and configuration errors."""

    def test_unsupported_channel(self, named_logger):
        with pytest.raises(LoggerConfigError) as exc_info:
            create_logger("syslog", name=named_logger)

        assert exc_info.value.message == "unsupported logger type: syslog"

    def test_unsupported_level(self, named_logger):
        with pytest.raises(LoggerConfigError):
            create_logger("stdout", level="verbose", name=named_logger)

    @pytest.mark.parametrize("channel", ["file", "stack"])
    def test_file_channels_need_config(self, channel, named_logger):
        with pytest.raises(LoggerConfigError) as exc_info:
            create_logger(channel, name=named_logger)

        assert exc_info.value.message == "invalid file logger config"

    def test_unusable_log_directory(self, tmp_path, named_logger):
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("")
        config = FileLoggerConfig(log_path=str(blocker / "logs"), daily_rotate=False)

        with pytest.raises(LoggerConfigError):
            create_logger("file", file_config=config, name=named_logger)

    def test_stdout_split_by_severity(self, capsys, named_logger):
        logger = create_logger("stdout", level="debug", name=named_logger)

        logger.info("to stdout", extra=fields(step=1))
        logger.warning("also stdout")
        logger.error("to stderr")
        logger.critical("also stderr")

        captured = capsys.readouterr()
        assert "[INFO]" in captured.out
        assert "step=1" in captured.out
        assert "[WARN]" in captured.out
        assert "to stderr" not in captured.out
        assert "[ERROR]" in captured.err
        assert "[FATAL]" in captured.err
        assert "to stdout" not in captured.err

    def test_level_threshold(self, capsys, named_logger):
        logger = create_logger("stdout", level="warn", name=named_logger)

        logger.info("hidden")
        logger.warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out

    def test_file_channel_writes_dated_file(self, tmp_path, named_logger):
        config = FileLoggerConfig(log_path=str(tmp_path))
        logger = create_logger("file", level="info", file_config=config, name=named_logger)

        logging.getLogger(f"{named_logger}.child").info("from a module logger")
        close_logger(logger)

        expected = tmp_path / f"app-{date.today():%Y-%m-%d}.log"
        assert "from a module logger" in expected.read_text()

    def test_stack_channel(self, tmp_path, capsys, named_logger):
        config = FileLoggerConfig(log_path=str(tmp_path), daily_rotate=False)
        logger = create_logger("stack", file_config=config, name=named_logger)

        logger.info("both places")
        close_logger(logger)

        assert "both places" in capsys.readouterr().out
        assert "both places" in (tmp_path / "app.log").read_text()

    def test_close_with_closed_console_stream(self, monkeypatch, named_logger):
        stream = io.StringIO()
        monkeypatch.setattr(sys, "stdout", stream)
        logger = create_logger("stdout", name=named_logger)
        stream.close()

        close_logger(logger)

        assert logger.handlers == []

    def test_recreate_after_stream_closed(self, monkeypatch, named_logger):
        stream = io.StringIO()
        monkeypatch.setattr(sys, "stdout", stream)
        create_logger("stdout", name=named_logger)
        stream.close()
        monkeypatch.undo()

        logger = create_logger("stdout", name=named_logger)

        assert len(logger.handlers) == 2
        assert all(handler.stream is not stream for handler in logger.handlers)

    def test_recreate_replaces_handlers(self, named_logger):
        create_logger("stdout", name=named_logger)
        logger = create_logger("stdout", name=named_logger)

        assert len(logger.handlers) == 2
        assert logger.propagate is False


# =============================================================================
# DAILY ROTATING FILE HANDLER
# =============================================================================

class TestDailyRotation:
    """Dated files and the lazy switch at midnight."""

    def test_fixed_path_without_daily_rotation(self, tmp_path):
        handler = DailyRotatingFileHandler(
            FileLoggerConfig(log_path=str(tmp_path), log_file_name="api", daily_rotate=False)
        )
        handler.close()

        assert os.path.basename(handler.baseFilename) == "api.log"

    def test_day_switch_happens_once_before_the_write(self, tmp_path, monkeypatch):
        clock = FakeClock(datetime(2024, 1, 1, 23, 59, 30))
        handler = DailyRotatingFileHandler(
            FileLoggerConfig(log_path=str(tmp_path), compress=False, max_age=0),
            clock=clock,
        )
        handler.setFormatter(FieldsFormatter())

        opened = []
        original_open = handler._open

        def counting_open():
            opened.append(handler.baseFilename)
            return original_open()

        monkeypatch.setattr(handler, "_open", counting_open)

        handler.handle(make_record("before midnight"))
        clock.now = datetime(2024, 1, 2, 0, 0, 5)
        handler.handle(make_record("after midnight"))
        handler.handle(make_record("still the new day"))
        handler.close()

        old_day = (tmp_path / "app-2024-01-01.log").read_text()
        new_day = (tmp_path / "app-2024-01-02.log").read_text()

        assert opened == [str(tmp_path / "app-2024-01-02.log")]
        assert handler.current_day == date(2024, 1, 2)
        assert "before midnight" in old_day
        assert "after midnight" not in old_day
        assert "after midnight" in new_day
        assert "still the new day" in new_day

    def test_watcher_marks_pending_day(self, tmp_path):
        clock = FakeClock(datetime(2024, 1, 1, 23, 59, 59))
        handler = DailyRotatingFileHandler(
            FileLoggerConfig(log_path=str(tmp_path), max_age=0),
            clock=clock,
            check_interval=0.01,
        )
        clock.now = datetime(2024, 1, 2, 0, 0, 1)

        deadline = time.monotonic() + 2
        while not handler._day_pending.is_set() and time.monotonic() < deadline:
            time.sleep(0.01)

        # The watcher never touches the stream itself
        assert handler._day_pending.is_set()
        assert handler.baseFilename.endswith("app-2024-01-01.log")

        handler.handle(make_record("first record of the day"))
        handler.close()

        assert handler.baseFilename.endswith("app-2024-01-02.log")
        assert not handler._day_pending.is_set()


class TestSizeRotation:
    """Size based rollover and gzip compression of backups."""

    def _fill(self, handler: DailyRotatingFileHandler) -> None:
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler.handle(make_record("a" * 700_000))
        handler.handle(make_record("b" * 700_000))
        handler.close()

    def test_rotated_file_is_compressed(self, tmp_path):
        handler = DailyRotatingFileHandler(
            FileLoggerConfig(
                log_path=str(tmp_path), max_size=1, max_backups=2, daily_rotate=False
            )
        )

        self._fill(handler)

        backup = tmp_path / "app.log.1.gz"
        assert backup.exists()
        with gzip.open(backup, "rt") as rotated:
            assert rotated.read().startswith("a" * 100)
        assert (tmp_path / "app.log").read_text().startswith("b" * 100)

    def test_uncompressed_rotation(self, tmp_path):
        handler = DailyRotatingFileHandler(
            FileLoggerConfig(
                log_path=str(tmp_path),
                max_size=1,
                max_backups=2,
                compress=False,
                daily_rotate=False,
            )
        )

        self._fill(handler)

        assert (tmp_path / "app.log.1").exists()
        assert not (tmp_path / "app.log.1.gz").exists()


class TestRetention:
    """Files older than max_age days are purged."""

    def _age(self, path, days: int) -> None:
        path.write_text("old")
        stamp = time.time() - timedelta(days=days).total_seconds()
        os.utime(path, (stamp, stamp))

    def test_purge_old_siblings(self, tmp_path):
        self._age(tmp_path / "app-2020-01-01.log", days=30)
        self._age(tmp_path / "app.log.3.gz", days=30)
        self._age(tmp_path / "other.log", days=30)
        self._age(tmp_path / "app-recent.log", days=1)

        handler = DailyRotatingFileHandler(
            FileLoggerConfig(log_path=str(tmp_path), max_age=7)
        )
        handler.close()

        remaining = set(os.listdir(tmp_path))
        assert "app-2020-01-01.log" not in remaining
        assert "app.log.3.gz" not in remaining
        assert "other.log" in remaining
        assert "app-recent.log" in remaining

    def test_zero_max_age_keeps_everything(self, tmp_path):
        self._age(tmp_path / "app-2020-01-01.log", days=400)

        handler = DailyRotatingFileHandler(
            FileLoggerConfig(log_path=str(tmp_path), max_age=0)
        )

        assert handler.purge_expired() == []
        handler.close()
        assert (tmp_path / "app-2020-01-01.log").exists()
