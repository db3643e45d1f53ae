"""IOResult for file-system operations that must not raise.

FileOperations and PathResolver return IOResult; the editor converts
failures into FileNotFoundError / OSError / PathAccessError at the point
where it knows which path and operation were involved.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class IOStatus(str, Enum):
    """Outcome of a file-system operation."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class IOResult(Generic[T]):  # noqa: UP046
    """
    Success value or error message of a file-system operation.

    Usage:
        read_result = FileOperations.read_text(path)
        if not read_result.is_success:
            raise OSError(f"Failed to read file: {read_result.error}")
        content = read_result.value
    """

    status: IOStatus
    value: T | None = None
    error: str | None = None
    not_found: bool = False

    def __post_init__(self) -> None:
        """Reject inconsistent combinations of status, value and error."""
        if self.status == IOStatus.SUCCESS and self.value is None:
            raise ValueError("Success result must have a value")
        if self.status == IOStatus.FAILED and not self.error:
            raise ValueError("Failed result must have an error message")

    @property
    def is_success(self) -> bool:
        return self.status == IOStatus.SUCCESS

    @classmethod
    def success(cls, value: T) -> "IOResult[T]":
        return cls(status=IOStatus.SUCCESS, value=value)

    @classmethod
    def failure(cls, error: str, not_found: bool = False) -> "IOResult[T]":
        """Create a failed result; ``not_found`` marks a missing path."""
        return cls(status=IOStatus.FAILED, error=error, not_found=not_found)

    def unwrap(self) -> T:
        """Return the value or raise the matching built-in exception.

        Raises:
            FileNotFoundError: If the failure was a missing path
            OSError: For any other failure
        """
        if self.is_success:
            assert self.value is not None
            return self.value
        if self.not_found:
            raise FileNotFoundError(self.error)
        raise OSError(self.error)


__all__ = ["IOResult", "IOStatus"]
