import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

from tts_compare.logging_handlers import DateStampedFileHandler, cleanup_old_logs


def test_date_stamped_file_handler_creates_expected_path(tmp_path) -> None:
    current = datetime(2024, 5, 26, 12, 34, 56, tzinfo=timezone.utc)
    handler = DateStampedFileHandler(
        tmp_path / "logs",
        prefix="warmup",
        current_time=current,
    )
    try:
        expected = (tmp_path / "logs" / "2024-05-26" / "warmup_12-34-56_UTC.log").resolve()
        file_path = Path(handler.baseFilename)
        assert file_path == expected
        assert file_path.exists()

        record = logging.LogRecord(
            name="test",
            level=logging.INFO,
            pathname=__file__,
            lineno=0,
            msg="hume connection warmed up",
            args=(),
            exc_info=None,
        )
        handler.emit(record)

        assert "hume connection warmed up" in file_path.read_text(encoding="utf-8")
    finally:
        handler.close()


def test_handler_converts_to_utc(tmp_path) -> None:
    eastern = timezone(timedelta(hours=-5))
    current = datetime(2023, 1, 1, 22, 4, 5, tzinfo=eastern)
    handler = DateStampedFileHandler(tmp_path, current_time=current)
    try:
        file_path = Path(handler.baseFilename)
        assert file_path.parent.name == "2023-01-02"
        assert file_path.name == "tts_compare_03-04-05_UTC.log"
    finally:
        handler.close()


def test_cleanup_old_logs(tmp_path) -> None:
    log_dir = tmp_path / "logs"
    old_dir = log_dir / "2020-01-01"
    old_dir.mkdir(parents=True)
    recent_dir = log_dir / "2020-01-02"
    recent_dir.mkdir()

    now = datetime.now(timezone.utc)
    old_file = old_dir / "old.log"
    old_file.write_text("old")
    old_time = (now - timedelta(days=3)).timestamp()
    os.utime(old_file, (old_time, old_time))

    recent_file = recent_dir / "recent.log"
    recent_file.write_text("recent")
    recent_time = (now - timedelta(hours=1)).timestamp()
    os.utime(recent_file, (recent_time, recent_time))

    deleted, errors = cleanup_old_logs([log_dir], retention_hours=48)

    assert (deleted, errors) == (1, 0)
    assert not old_file.exists()
    assert not old_dir.exists()
    assert recent_file.exists()


def test_cleanup_disabled_or_missing_directory(tmp_path) -> None:
    log_file = tmp_path / "ancient.log"
    log_file.write_text("x")
    old_time = (datetime.now(timezone.utc) - timedelta(days=30)).timestamp()
    os.utime(log_file, (old_time, old_time))

    assert cleanup_old_logs([tmp_path], retention_hours=0) == (0, 0)
    assert log_file.exists()
    assert cleanup_old_logs([tmp_path / "missing"], retention_hours=1) == (0, 0)
