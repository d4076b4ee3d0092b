from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional, Sequence

from .enums import Priority, TaskStatus

DEFAULT_CATEGORY = "general"


def utcnow() -> datetime:
    # Millisecond precision so timestamps survive the on-disk format unchanged.
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


@dataclass(frozen=True)
class CreateTaskInput:
    description: str
    category: str | None = None
    priority: Priority | None = None
    tags: Optional[Sequence[str]] = None


@dataclass(frozen=True)
class UpdateTaskInput:
    description: str | None = None
    category: str | None = None
    priority: Priority | None = None
    status: TaskStatus | None = None
    tags: Optional[Sequence[str]] = None


@dataclass(frozen=True)
class TaskEntity:
    id: str
    description: str
    category: str
    priority: Priority
    status: TaskStatus
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime]
    tags: tuple[str, ...]

    @classmethod
    def create(cls, data: CreateTaskInput) -> TaskEntity:
        """Build a new pending task. Input is not validated here."""
        now = utcnow()
        return cls(
            id=str(uuid.uuid4()),
            description=data.description,
            category=data.category if data.category is not None else DEFAULT_CATEGORY,
            priority=data.priority if data.priority is not None else Priority.MEDIUM,
            status=TaskStatus.PENDING,
            created_at=now,
            updated_at=now,
            completed_at=None,
            tags=tuple(data.tags) if data.tags is not None else (),
        )

    def update(self, data: UpdateTaskInput) -> TaskEntity:
        """Return a copy with the supplied fields replaced.

        ``updated_at`` is always refreshed. ``completed_at`` is stamped only when
        the task moves into COMPLETED from another status; otherwise it is kept.
        """
        now = utcnow()
        completed_at = self.completed_at
        if data.status == TaskStatus.COMPLETED and self.status != TaskStatus.COMPLETED:
            completed_at = now

        return replace(
            self,
            description=data.description if data.description is not None else self.description,
            category=data.category if data.category is not None else self.category,
            priority=data.priority if data.priority is not None else self.priority,
            status=data.status if data.status is not None else self.status,
            tags=tuple(data.tags) if data.tags is not None else self.tags,
            updated_at=now,
            completed_at=completed_at,
        )
