"""
JSON task store — persists the flat task list to a single JSON file.

The file holds a JSON array of serialized tasks (camelCase keys, indent=2).
All read-modify-write cycles go through ``transaction()``, which holds a
per-store lock so concurrent mutations never interleave and lose an update.
Writes go to a temp file in the same directory and are moved into place
with ``os.replace``.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from pydantic import ValidationError

from devtrace.engine.errors import DevTraceError, DevTraceStorageError
from devtrace.records.task import Task

logger = logging.getLogger("devtrace.storage.json_store")


class JsonTaskStore:
    """
    File-backed task collection.

    Attributes:
        path: Location of the JSON file.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.RLock()

    # -- initialization ------------------------------------------------------

    def initialize(self) -> None:
        """Create the parent directory and an empty task list if missing."""
        with self._lock:
            if not self.path.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._write_raw([])
                logger.info("Initialized task store at %s", self.path)

    # -- reads ---------------------------------------------------------------

    def load(self) -> List[Task]:
        """Return a snapshot of every stored task, in file order."""
        with self._lock:
            return [self._parse_task(item, index) for index, item in enumerate(self._read_raw())]

    def get(self, task_id: str) -> Optional[Task]:
        for task in self.load():
            if task.id == task_id:
                return task
        return None

    def count(self) -> int:
        with self._lock:
            return len(self._read_raw())

    # -- writes --------------------------------------------------------------

    def save(self, tasks: List[Task]) -> None:
        """Overwrite the file with *tasks*."""
        with self._lock:
            self._write_raw([task.to_json_dict() for task in tasks])

    @contextmanager
    def transaction(self) -> Iterator[List[Task]]:
        """
        Hold the store lock, yield the current task list and write it back
        when the block exits normally. On exception nothing is written.
        """
        with self._lock:
            tasks = self.load()
            yield tasks
            self.save(tasks)

    # -- internals -----------------------------------------------------------

    def _read_raw(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            self.initialize()
            return []
        try:
            content = self.path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise DevTraceStorageError(
                f"Could not read task file {self.path}: {e}", path=str(self.path)
            ) from e
        if not content:
            return []
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise DevTraceStorageError(
                f"Task file {self.path} is not valid JSON: {e}", path=str(self.path)
            ) from e
        if not isinstance(data, list):
            raise DevTraceStorageError(
                f"Task file {self.path} must contain a JSON array", path=str(self.path)
            )
        return data

    def _parse_task(self, item: Any, index: int) -> Task:
        if not isinstance(item, dict):
            raise DevTraceStorageError(
                f"Entry {index} in {self.path} is not an object", path=str(self.path), index=index
            )
        try:
            return Task.model_validate(item)
        except (ValidationError, DevTraceError) as e:
            raise DevTraceStorageError(
                f"Entry {index} in {self.path} is not a valid task: {e}",
                path=str(self.path),
                index=index,
            ) from e

    def _write_raw(self, data: List[Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise DevTraceStorageError(
                f"Could not write task file {self.path}: {e}", path=str(self.path)
            ) from e
