"""Error taxonomy for the line-based edit engine.

Validation errors are raised before any line is touched. MatchNotFoundError
can only be detected while applying, because it depends on line content.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .applier import EditOutcome


class EditError(Exception):
    """Base class for every failure raised by the edit engine.

    Attributes:
        outcomes: Per-request outcomes recorded before the failure (may be empty)
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.outcomes: list[EditOutcome] = []


class EditValidationError(EditError):
    """Edit batch rejected by static validation. The file is never touched."""


class InvalidEditRequestError(EditValidationError):
    """Edit request has an unusable shape (missing line, missing text, ...)."""


class EditRangeError(EditValidationError):
    """Line number or range lies outside the file, or start > end."""


class EditConflictError(EditValidationError):
    """Two edits in one batch touch the same line ambiguously."""


class InvalidPatternError(EditValidationError):
    """Regular expression in a match condition does not compile."""

    def __init__(self, pattern: str, reason: str, line_number: int | None = None):
        self.pattern = pattern
        self.reason = reason
        self.line_number = line_number
        where = f" (line {line_number})" if line_number is not None else ""
        super().__init__(f"Invalid regex pattern {pattern!r}{where}: {reason}")


class MatchNotFoundError(EditError):
    """
    Match condition could not be located in the target line(s).

    Attributes:
        line_number: Nominal line number of the failing request
        search_text: Literal text or regex that was searched for
        is_regex: True when search_text is a regular expression
    """

    def __init__(self, line_number: int, search_text: str, is_regex: bool):
        self.line_number = line_number
        self.search_text = search_text
        self.is_regex = is_regex
        kind = "regex" if is_regex else "text"
        super().__init__(f"No match found on line {line_number} for {kind} {search_text!r}")

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return (
            f"MatchNotFoundError(line={self.line_number}, "
            f"search={self.search_text!r}, regex={self.is_regex})"
        )


class StateNotFoundError(EditError):
    """Approval requested for an unknown or expired state id.

    Always recoverable: re-run the dry run to obtain a fresh id.
    """

    def __init__(self, state_id: str):
        self.state_id = state_id
        super().__init__(f"Invalid or expired state ID: {state_id}")


class PathAccessError(PermissionError):
    """Path is outside the allowed directories or the directory is read-only."""


__all__ = [
    "EditConflictError",
    "EditError",
    "EditRangeError",
    "EditValidationError",
    "InvalidEditRequestError",
    "InvalidPatternError",
    "MatchNotFoundError",
    "PathAccessError",
    "StateNotFoundError",
]
