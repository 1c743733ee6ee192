"""Structured JSONL runtime logging for fpath.

The logger is configured lazily and the sink is only resolved, and its
directory only created, when an enabled event is actually written.
"""

from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal

from fpath.paths import default_log_path

LogLevel = Literal["off", "error", "warning", "info", "debug"]

_LEVEL_VALUES: dict[str, int] = {
    "off": 100,
    "error": 40,
    "warning": 30,
    "info": 20,
    "debug": 10,
}

_runtime_logger: "RuntimeLogger | None" = None


def parse_level(value: str | None, default: LogLevel = "warning") -> LogLevel:
    if not value:
        return default
    normalized = value.strip().lower()
    if normalized == "warn":
        normalized = "warning"
    if normalized in {"none", "disabled", "0"}:
        normalized = "off"
    if normalized not in _LEVEL_VALUES:
        return default
    return normalized  # type: ignore[return-value]


def resolve_log_file(path: str | Path | None) -> Path:
    if path is None:
        return default_log_path()
    return Path(path).expanduser().absolute()


@dataclass(slots=True)
class RuntimeLogger:
    level: LogLevel
    log_file: str | Path | None = None
    _sink_path: Path | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock)

    @property
    def sink_path(self) -> Path:
        if self._sink_path is None:
            self._sink_path = resolve_log_file(self.log_file)
        return self._sink_path

    def enabled(self, level: str) -> bool:
        current = _LEVEL_VALUES.get(self.level, _LEVEL_VALUES["warning"])
        incoming = _LEVEL_VALUES.get(level, _LEVEL_VALUES["debug"])
        return incoming >= current and current < _LEVEL_VALUES["off"]

    def log(self, level: str, event: str, **fields: Any) -> None:
        if not self.enabled(level):
            return
        payload = {
            "ts": datetime.now(UTC).isoformat(),
            "level": level,
            "event": event,
            "pid": os.getpid(),
            **fields,
        }
        line = json.dumps(payload, sort_keys=True, default=str)
        with self._lock:
            sink = self.sink_path
            sink.parent.mkdir(parents=True, exist_ok=True)
            with sink.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")

    def debug(self, event: str, **fields: Any) -> None:
        self.log("debug", event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self.log("info", event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self.log("warning", event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self.log("error", event, **fields)


def configure_runtime_logging(
    *,
    level: str | None = None,
    log_file: str | Path | None = None,
) -> RuntimeLogger:
    """Install the process-wide logger.

    Explicit arguments win over ``FPATH_LOG_LEVEL`` and ``FPATH_LOG_FILE``.
    """
    global _runtime_logger

    effective_level = parse_level(level or os.getenv("FPATH_LOG_LEVEL"), default="warning")
    _runtime_logger = RuntimeLogger(level=effective_level, log_file=log_file or os.getenv("FPATH_LOG_FILE"))
    _runtime_logger.info("logging.configured", configured_level=effective_level)
    return _runtime_logger


def get_runtime_logger() -> RuntimeLogger:
    global _runtime_logger
    if _runtime_logger is None:
        _runtime_logger = configure_runtime_logging()
    return _runtime_logger
