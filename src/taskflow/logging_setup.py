# src/taskflow/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Minimum console level per logger prefix; longest match wins.
# Anything not listed here (third-party, py.warnings) only reaches the console at ERROR.
CONSOLE_THRESHOLDS: dict[str, int] = {
    "taskflow": logging.NOTSET,
    "taskflow.notify.matrix": logging.WARNING,
}

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def parse_level(value: str | int | None, default: int = logging.INFO) -> int:
    """Accept 'debug', 'INFO', '20' or an int; anything else gives `default`."""
    if isinstance(value, int):
        return value
    text = (value or "").strip()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else default


class ConsoleThresholdFilter(logging.Filter):
    """Keep the interactive console readable while the log file gets everything."""

    def __init__(self, thresholds: dict[str, int] | None = None, fallback: int = logging.ERROR) -> None:
        super().__init__()
        self._thresholds = sorted((thresholds or CONSOLE_THRESHOLDS).items(), key=lambda kv: -len(kv[0]))
        self._fallback = fallback

    def threshold_for(self, name: str) -> int:
        for prefix, level in self._thresholds:
            if name == prefix or name.startswith(prefix + "."):
                return level
        return self._fallback

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= self.threshold_for(record.name)


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskflow",
    console_level: str | int = logging.INFO,
    file_level: str | int = logging.DEBUG,
) -> Path:
    """
    Install a filtered stderr handler and a full log file, replacing any
    handlers already on the root logger. Returns the log file path.

    Call once at startup, before the first log line.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "taskflow.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(parse_level(console_level))
    console.setFormatter(fmt)
    console.addFilter(ConsoleThresholdFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(parse_level(file_level, logging.DEBUG))
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    logging.getLogger("nio").setLevel(logging.WARNING)
    return log_file
