"""
DevTrace Logging — Structured JSON-lines audit trail next to stdlib logging.

Every task mutation, API request and lifecycle event becomes one JSON line in

    {directory}/{object_type}/{category}/{YYYY-MM-DD}.jsonl

Callers never touch the disk: entries go onto a bounded in-memory queue and a
single background thread appends them. Without an active queue, log() is a
no-op, so library use and unit tests need no log directory.
"""

from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict
from datetime import date, datetime, timezone
from pathlib import Path
from queue import Empty, Full, Queue
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Union

from devtrace.engine.config import LoggingConfig

logger = logging.getLogger("devtrace.engine.logging")

# Files a LogEntry may be routed to, per object type
LOG_DESTINATIONS: Dict[str, tuple] = {
    "tasks": ("execution", "errors"),
    "web_apis": ("execution",),
    "system": ("execution", "errors"),
}


class LogEntry(NamedTuple):
    object_type: str
    category: str
    data: Dict[str, Any]

    def to_json(self) -> str:
        return json.dumps(self.data, default=str, separators=(",", ":"))


def _check_destination(entry: LogEntry) -> None:
    if entry.category not in LOG_DESTINATIONS.get(entry.object_type, ()):
        raise ValueError(f"No log file for {entry.object_type}/{entry.category}")


class JsonlWriter:
    """Appends entries to the day's file for their object type and category."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self._lock = threading.Lock()
        for object_type, categories in LOG_DESTINATIONS.items():
            for category in categories:
                (self.directory / object_type / category).mkdir(parents=True, exist_ok=True)

    def path_for(self, object_type: str, category: str, day: Optional[date] = None) -> Path:
        day = day or date.today()
        return self.directory / object_type / category / f"{day.isoformat()}.jsonl"

    def append(self, entries: Iterable[LogEntry]) -> int:
        """Write *entries*, opening each target file once. Returns the count written."""
        lines: Dict[Path, List[str]] = defaultdict(list)
        today = date.today()
        for entry in entries:
            lines[self.path_for(entry.object_type, entry.category, today)].append(entry.to_json())

        with self._lock:
            for path, chunk in lines.items():
                with path.open("a", encoding="utf-8") as f:
                    f.write("\n".join(chunk) + "\n")
        return sum(len(chunk) for chunk in lines.values())


class LogQueue:
    """
    Bounded queue drained by one daemon thread.

    The thread waits up to ``flush_interval_ms`` for an entry, then writes it
    together with whatever else is queued, up to ``flush_batch_size`` per
    write. ``push`` never blocks: when ``max_queue_size`` entries are waiting
    the entry is dropped and counted.
    """

    def __init__(self, settings: LoggingConfig, writer: Optional[JsonlWriter] = None):
        self.settings = settings
        self.writer = writer or JsonlWriter(settings.directory)
        self._entries: Queue[LogEntry] = Queue(maxsize=settings.max_queue_size)
        self._stopping = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.dropped = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def pending(self) -> int:
        return self._entries.qsize()

    def start(self) -> None:
        if self.running:
            return
        self._stopping.clear()
        self._thread = threading.Thread(target=self._run, name="devtrace-log-flush", daemon=True)
        self._thread.start()
        logger.debug("Log queue writing to %s", self.writer.directory)

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the thread, then write whatever is still queued."""
        self._stopping.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        self.flush()
        if self.dropped:
            logger.warning("Log queue dropped %d entries", self.dropped)

    def push(self, entry: LogEntry) -> bool:
        """Queue *entry*. False if it was dropped because the queue is full."""
        _check_destination(entry)
        try:
            self._entries.put_nowait(entry)
        except Full:
            self.dropped += 1
            return False
        return True

    def flush(self) -> int:
        """Write everything currently queued from the calling thread."""
        batch: List[LogEntry] = []
        while True:
            try:
                batch.append(self._entries.get_nowait())
            except Empty:
                break
        return self._write(batch)

    def _run(self) -> None:
        timeout = self.settings.flush_interval_ms / 1000.0
        while not self._stopping.is_set():
            try:
                batch = [self._entries.get(timeout=timeout)]
            except Empty:
                continue
            while len(batch) < self.settings.flush_batch_size:
                try:
                    batch.append(self._entries.get_nowait())
                except Empty:
                    break
            self._write(batch)

    def _write(self, batch: List[LogEntry]) -> int:
        if not batch:
            return 0
        try:
            return self.writer.append(batch)
        except OSError as e:
            logger.error("Could not write %d log entries: %s", len(batch), e)
            return 0


# ---------------------------------------------------------------------------
# Entry builders
# ---------------------------------------------------------------------------

def _entry(object_type: str, category: str, event: str, level: str, **fields: Any) -> LogEntry:
    data: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "event": event,
    }
    data.update({key: value for key, value in fields.items() if value is not None})
    return LogEntry(object_type, category, data)


def log_task_operation(
    operation: str,
    task_id: Optional[str],
    quality_score: Optional[int] = None,
    changes: Optional[List[str]] = None,
    error: Optional[str] = None,
) -> LogEntry:
    """
    Task create/update/delete outcome.

    Successful operations land in tasks/execution; passing *error* marks the
    operation failed and routes it to tasks/errors.
    """
    return _entry(
        "tasks",
        "errors" if error else "execution",
        "task_operation",
        "ERROR" if error else "INFO",
        operation=operation,
        task_id=task_id,
        success=error is None,
        quality_score=quality_score,
        changes=changes or None,
        error=error,
    )


def log_web_api_request(
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    client: Optional[str] = None,
) -> LogEntry:
    return _entry(
        "web_apis",
        "execution",
        "web_api_request",
        "INFO" if status_code < 400 else "ERROR",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=duration_ms,
        client=client,
    )


def log_system_event(
    event: str,
    level: str = "INFO",
    details: Optional[Dict[str, Any]] = None,
) -> LogEntry:
    """Startup, shutdown and similar lifecycle events."""
    return _entry("system", "execution", event, level, details=details or None)


def log_error(error_dict: Dict[str, Any], path: Optional[str] = None) -> LogEntry:
    """Unhandled DevTraceError, serialized with DevTraceError.to_dict()."""
    return _entry("system", "errors", "error", "ERROR", error=error_dict, path=path)


# ---------------------------------------------------------------------------
# Process-wide queue
# ---------------------------------------------------------------------------

_queue: Optional[LogQueue] = None


def init_logging(settings: LoggingConfig) -> LogQueue:
    """Start the process-wide queue, replacing (and flushing) any previous one."""
    global _queue
    if _queue is not None:
        _queue.stop()
    _queue = LogQueue(settings)
    _queue.start()
    return _queue


def get_log_queue() -> Optional[LogQueue]:
    return _queue


def log(entry: LogEntry) -> bool:
    """Queue *entry* on the process-wide queue; False when none is running or it is full."""
    if _queue is None:
        return False
    return _queue.push(entry)


def shutdown_logging() -> None:
    global _queue
    if _queue is not None:
        _queue.stop()
        _queue = None
