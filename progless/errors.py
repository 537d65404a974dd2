"""Errors raised when a progress instance or task cannot be created."""

__all__ = [
    "EmptyTaskError",
    "EmptyTotalError",
    "ProglessError",
    "TaskOverflowError",
    "TotalOverflowError",
]


class ProglessError(ValueError):
    """Base class for progress construction errors."""

    message = "Invalid progress value."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class EmptyTaskError(ProglessError):
    message = "Task names cannot be empty."


class TaskOverflowError(ProglessError):
    message = "Task names cannot exceed 65,535 bytes."


class EmptyTotalError(ProglessError):
    message = "At least one task is required."


class TotalOverflowError(ProglessError):
    message = "The total number of tasks cannot exceed 4,294,967,295."
