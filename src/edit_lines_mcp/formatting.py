"""Shared formatting utilities for MCP tool responses.

JSON responses are plain dicts built by the engine (EditResult.to_dict);
this module renders the markdown variants and the failure dicts so every
tool reports errors in the same shape.
"""

import re
from typing import Any, Literal

from .engine import (
    EditConflictError,
    EditError,
    EditOutcome,
    EditRangeError,
    EditResult,
    InvalidEditRequestError,
    InvalidPatternError,
    MatchNotFoundError,
    PathAccessError,
    StateNotFoundError,
)

_BACKTICK_RUN = re.compile(r"`+")

# =============================================================================
# Markdown Formatting Utilities
# =============================================================================


def fence_diff(diff: str) -> str:
    """Wrap a diff in a ```diff fence that cannot be closed by its content.

    The fence uses one more backtick than the longest backtick run inside
    the diff (minimum three).
    """
    longest = max((len(run) for run in _BACKTICK_RUN.findall(diff)), default=0)
    fence = "`" * max(3, longest + 1)
    body = diff if diff.endswith("\n") else diff + "\n"
    return f"{fence}diff\n{body}{fence}"


def format_outcome_lines(outcomes: list[EditOutcome]) -> list[str]:
    """One ``Line N: STATUS - message`` row per outcome, in submission order."""
    rows = []
    for outcome in outcomes:
        row = f"Line {outcome.line_number}: {outcome.status.value}"
        if outcome.message:
            row += f" - {outcome.message}"
        rows.append(row)
    return rows


def format_edit_result_markdown(result: EditResult) -> str:
    """Format an edit, dry-run or approval result as markdown.

    Args:
        result: EditResult from FileEditor

    Returns:
        Header, fenced diff (or "No changes."), state id for dry runs and
        per-edit outcome rows
    """
    header = "Dry run complete." if result.dry_run else "File edit complete."
    lines = [header, f"File: {result.path}", ""]

    if result.diff:
        lines.append(fence_diff(result.diff))
    else:
        lines.append("No changes.")

    if result.state_id:
        lines.extend(
            [
                "",
                f"State ID: {result.state_id}",
                f"Use approve_edit(state_id=\"{result.state_id}\") to apply these changes.",
            ]
        )

    if result.outcomes:
        lines.append("")
        lines.append("Edit outcomes:")
        lines.extend(format_outcome_lines(result.outcomes))

    return "\n".join(lines)


# =============================================================================
# Error Formatting
# =============================================================================


def error_type_for(error: Exception) -> str:
    """Stable machine-readable kind for an engine or I/O failure."""
    if isinstance(error, StateNotFoundError):
        return "state_not_found"
    if isinstance(error, MatchNotFoundError):
        return "match_not_found"
    if isinstance(error, InvalidPatternError):
        return "invalid_pattern"
    if isinstance(error, EditConflictError):
        return "conflict"
    if isinstance(error, EditRangeError):
        return "invalid_range"
    if isinstance(error, InvalidEditRequestError):
        return "invalid_request"
    if isinstance(error, PathAccessError):
        return "access_denied"
    if isinstance(error, FileNotFoundError):
        return "file_not_found"
    if isinstance(error, EditError):
        return "validation_error"
    return "io_error"


def format_failure(
    error: Exception,
    format: Literal["json", "markdown"] = "json",  # noqa: A002
) -> dict[str, Any] | str:
    """Format a tool failure.

    Args:
        error: Exception raised while handling the request
        format: Output format (markdown or json)

    Returns:
        Markdown text or a ``{"status": "failure", ...}`` dict
    """
    message = str(error)
    error_type = error_type_for(error)
    outcomes = error.outcomes if isinstance(error, EditError) else []

    if format == "markdown":
        lines = [f"Error ({error_type}): {message}"]
        if isinstance(error, StateNotFoundError):
            lines.append("Run edit_file_lines with dry_run=true again to get a new state ID.")
        if outcomes:
            lines.append("")
            lines.extend(format_outcome_lines(outcomes))
        return "\n".join(lines)

    response: dict[str, Any] = {
        "status": "failure",
        "error": message,
        "error_type": error_type,
    }
    if outcomes:
        response["outcomes"] = [outcome.model_dump(mode="json") for outcome in outcomes]
    return response


__all__ = [
    "error_type_for",
    "fence_diff",
    "format_edit_result_markdown",
    "format_failure",
    "format_outcome_lines",
]
