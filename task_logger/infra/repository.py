from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Protocol

from task_logger.config import TASK_FILE_NAME, resolve_data_dir
from task_logger.domain.entities import TaskEntity
from task_logger.domain.enums import Priority, TaskStatus

logger = logging.getLogger(__name__)


class StorageRepository(Protocol):
    """Persistence contract for the task collection.

    Lookups are keyed by id only; ids are expected to be unique but that is
    not enforced by implementations.
    """

    def save(self, task: TaskEntity) -> None:
        """Append a task to the collection."""

    def find_by_id(self, task_id: str) -> Optional[TaskEntity]:
        """First task with the given id, or None."""

    def find_all(self) -> list[TaskEntity]:
        """All tasks in insertion order."""

    def find_by_status(self, status: TaskStatus) -> list[TaskEntity]:
        """Tasks with the given status, in insertion order."""

    def find_by_category(self, category: str) -> list[TaskEntity]:
        """Tasks whose category equals ``category`` exactly, in insertion order."""

    def update(self, task_id: str, task: TaskEntity) -> bool:
        """Replace the first task with ``task_id`` in place. False if absent."""

    def delete(self, task_id: str) -> bool:
        """Remove every task with ``task_id``. False if none matched."""

    def search(self, query: str) -> list[TaskEntity]:
        """Case-insensitive substring match on description, category and tags."""


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        raise ValueError(f"timestamp must be timezone-aware: {value.isoformat()}")
    timespec = "milliseconds" if value.microsecond % 1000 == 0 else "microseconds"
    return value.astimezone(timezone.utc).isoformat(timespec=timespec).replace("+00:00", "Z")


def _parse_timestamp(raw: str) -> datetime:
    value = datetime.fromisoformat(raw)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _to_record(task: TaskEntity) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": task.id,
        "description": task.description,
        "category": task.category,
        "priority": task.priority.value,
        "status": task.status.value,
        "createdAt": _format_timestamp(task.created_at),
        "updatedAt": _format_timestamp(task.updated_at),
    }
    if task.completed_at is not None:
        record["completedAt"] = _format_timestamp(task.completed_at)
    record["tags"] = list(task.tags)
    return record


def _to_entity(record: dict[str, Any]) -> TaskEntity:
    completed_at = record.get("completedAt")
    return TaskEntity(
        id=record["id"],
        description=record["description"],
        category=record["category"],
        priority=Priority(record["priority"]),
        status=TaskStatus(record["status"]),
        created_at=_parse_timestamp(record["createdAt"]),
        updated_at=_parse_timestamp(record["updatedAt"]),
        completed_at=_parse_timestamp(completed_at) if completed_at else None,
        tags=tuple(record["tags"]),
    )


class FileStorageRepository(StorageRepository):
    """Keeps the whole collection in one JSON file.

    Every call reloads the file; every write rewrites it whole. There is no
    locking, so concurrent writers race and the last one wins.
    """

    def __init__(self, data_dir: str | os.PathLike[str] | None = None) -> None:
        self._data_dir = resolve_data_dir(data_dir)
        self._task_file = self._data_dir / TASK_FILE_NAME

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def task_file(self) -> Path:
        return self._task_file

    def save(self, task: TaskEntity) -> None:
        tasks = self._load_tasks()
        tasks.append(task)
        self._save_tasks(tasks)

    def find_by_id(self, task_id: str) -> Optional[TaskEntity]:
        return next((task for task in self._load_tasks() if task.id == task_id), None)

    def find_all(self) -> list[TaskEntity]:
        return self._load_tasks()

    def find_by_status(self, status: TaskStatus) -> list[TaskEntity]:
        return [task for task in self._load_tasks() if task.status == status]

    def find_by_category(self, category: str) -> list[TaskEntity]:
        return [task for task in self._load_tasks() if task.category == category]

    def update(self, task_id: str, task: TaskEntity) -> bool:
        tasks = self._load_tasks()
        index = next((i for i, current in enumerate(tasks) if current.id == task_id), None)
        if index is None:
            return False

        tasks[index] = task
        self._save_tasks(tasks)
        return True

    def delete(self, task_id: str) -> bool:
        tasks = self._load_tasks()
        remaining = [task for task in tasks if task.id != task_id]
        if len(remaining) == len(tasks):
            return False

        self._save_tasks(remaining)
        return True

    def search(self, query: str) -> list[TaskEntity]:
        term = query.lower()
        return [
            task
            for task in self._load_tasks()
            if term in task.description.lower()
            or term in task.category.lower()
            or any(term in tag.lower() for tag in task.tags)
        ]

    def _load_tasks(self) -> list[TaskEntity]:
        try:
            raw = self._task_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []

        tasks = [_to_entity(record) for record in json.loads(raw)]
        logger.debug("Loaded %s tasks from %s", len(tasks), self._task_file)
        return tasks

    def _save_tasks(self, tasks: list[TaskEntity]) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([_to_record(task) for task in tasks], indent=2, ensure_ascii=False)

        # Write through a symlinked tasks.json to the file it points at.
        target = self._task_file.resolve()
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".tasks-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(payload)
            if target.exists():
                shutil.copymode(target, tmp_name)
            else:
                os.chmod(tmp_name, 0o666 & ~_current_umask())
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %s tasks to %s", len(tasks), target)
