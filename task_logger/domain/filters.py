from __future__ import annotations

from dataclasses import dataclass

from .enums import TaskStatus


@dataclass(frozen=True)
class TaskFilters:
    status: TaskStatus | None = None
    category: str | None = None
    search: str | None = None
