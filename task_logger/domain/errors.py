from __future__ import annotations


class TaskValidationError(ValueError):
    """Raised by the service layer when task input fails validation."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
