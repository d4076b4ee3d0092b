from __future__ import annotations

import logging
from typing import Sequence

from task_logger.domain.entities import CreateTaskInput, TaskEntity, UpdateTaskInput
from task_logger.domain.enums import TaskStatus
from task_logger.domain.errors import TaskValidationError
from task_logger.domain.filters import TaskFilters
from task_logger.domain.validators import (
    MAX_CATEGORY_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_TAG_LENGTH,
    MAX_TAGS,
    validate_category,
    validate_description,
    validate_tags,
)
from task_logger.infra.repository import StorageRepository

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(self, repo: StorageRepository) -> None:
        self._repo = repo

    def list_tasks(self, filters: TaskFilters) -> list[TaskEntity]:
        if filters.search is not None:
            tasks = self._repo.search(filters.search)
        elif filters.status is not None:
            tasks = self._repo.find_by_status(filters.status)
        elif filters.category is not None:
            tasks = self._repo.find_by_category(filters.category)
        else:
            tasks = self._repo.find_all()

        if filters.status is not None:
            tasks = [t for t in tasks if t.status == filters.status]
        if filters.category is not None:
            tasks = [t for t in tasks if t.category == filters.category]
        return tasks

    def get_task(self, task_id: str) -> TaskEntity | None:
        return self._repo.find_by_id(task_id)

    def create_task(self, data: CreateTaskInput) -> TaskEntity:
        self._validate(data.description, data.category, data.tags)
        task = TaskEntity.create(data)
        self._repo.save(task)
        logger.info("Created task %s", task.id)
        return task

    def update_task(self, task_id: str, data: UpdateTaskInput) -> TaskEntity | None:
        self._validate(data.description, data.category, data.tags)
        task = self._repo.find_by_id(task_id)
        if not task:
            return None

        updated = task.update(data)
        if not self._repo.update(task_id, updated):
            return None
        logger.info("Updated task %s status=%s", task_id, updated.status.value)
        return updated

    def delete_task(self, task_id: str) -> bool:
        deleted = self._repo.delete(task_id)
        if deleted:
            logger.info("Deleted task %s", task_id)
        return deleted

    def start_task(self, task_id: str) -> TaskEntity | None:
        return self.update_task(task_id, UpdateTaskInput(status=TaskStatus.IN_PROGRESS))

    def mark_done(self, task_id: str) -> TaskEntity | None:
        return self.update_task(task_id, UpdateTaskInput(status=TaskStatus.COMPLETED))

    def cancel_task(self, task_id: str) -> TaskEntity | None:
        return self.update_task(task_id, UpdateTaskInput(status=TaskStatus.CANCELLED))

    def get_stats(self) -> dict[str, int]:
        tasks = self._repo.find_all()
        stats = {"total": len(tasks)}
        for status in TaskStatus:
            stats[status.value] = sum(1 for t in tasks if t.status == status)
        return stats

    @staticmethod
    def _validate(
        description: str | None,
        category: str | None,
        tags: Sequence[str] | None,
    ) -> None:
        if description is not None and not validate_description(description):
            raise TaskValidationError(
                "description", f"must be 1-{MAX_DESCRIPTION_LENGTH} characters"
            )
        if category is not None and not validate_category(category):
            raise TaskValidationError(
                "category",
                f"must match [A-Za-z0-9_-] and be at most {MAX_CATEGORY_LENGTH} characters",
            )
        if tags is not None and not validate_tags(tags):
            raise TaskValidationError(
                "tags",
                f"at most {MAX_TAGS} tags, each [A-Za-z0-9_-] up to {MAX_TAG_LENGTH} characters",
            )
