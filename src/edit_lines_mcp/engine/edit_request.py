"""Edit requests: accepted input shapes and the canonical form.

Three shapes are accepted at the boundary and normalized into one
canonical EditRequest before validation or application sees them:

1. Action-based object: ``{"lineNumber": 3, "action": "insert_before", "text": "..."}``
2. Legacy object: ``{"startLine": 2, "endLine": 4, "content": "...", "strMatch": "..."}``
3. Legacy tuple: ``[startLine, endLine, content, searchText?]``

A ranged legacy edit becomes a single multi-line ``replace_content_at_line``
request covering the whole range.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .exceptions import InvalidEditRequestError
from .line_model import normalize_line_endings


class EditAction(str, Enum):
    """What an edit request does to its target line(s)."""

    INSERT_BEFORE = "insert_before"
    INSERT_AFTER = "insert_after"
    DELETE_LINE = "delete_line"
    REPLACE_CONTENT_AT_LINE = "replace_content_at_line"

    @property
    def is_insert(self) -> bool:
        return self in (EditAction.INSERT_BEFORE, EditAction.INSERT_AFTER)


class MatchKind(str, Enum):
    EXACT = "exact"
    REGEX = "regex"


class MatchCondition(BaseModel):
    """Exact-string or regex constraint that must be found in the target line(s)."""

    model_config = ConfigDict(frozen=True)

    kind: MatchKind
    pattern: str

    @property
    def is_regex(self) -> bool:
        return self.kind == MatchKind.REGEX


class EditRequest(BaseModel):
    """Canonical, normalized edit request.

    Line numbers are 1-based and refer to the file as it was before the
    batch started. Range sanity (positive, start <= end, within the file)
    is checked by the EditValidator, not here, so that range errors carry
    file-aware messages.
    """

    model_config = ConfigDict(frozen=True)

    start_line: int
    end_line: int
    action: EditAction = EditAction.REPLACE_CONTENT_AT_LINE
    text: str | None = None
    match: MatchCondition | None = None

    @model_validator(mode="after")
    def _check_text(self) -> EditRequest:
        if self.action != EditAction.DELETE_LINE and self.text is None:
            raise ValueError(f"action '{self.action.value}' requires text")
        return self

    @property
    def line_number(self) -> int:
        """Nominal line number used to key outcomes."""
        return self.start_line

    @property
    def is_regex(self) -> bool:
        return self.match is not None and self.match.is_regex

    @property
    def lines(self) -> range:
        """1-based line numbers touched by this request."""
        return range(self.start_line, self.end_line + 1)

    def describe(self) -> str:
        span = (
            str(self.start_line)
            if self.start_line == self.end_line
            else f"{self.start_line}-{self.end_line}"
        )
        return f"{self.action.value} @ {span}"

    def fingerprint_payload(self) -> dict[str, Any]:
        """Key-order independent representation used for fingerprinting."""
        payload: dict[str, Any] = {
            "start_line": self.start_line,
            "end_line": self.end_line,
            "action": self.action.value,
            "text": self.text if self.action != EditAction.DELETE_LINE else None,
        }
        if self.match is not None:
            payload["match"] = {"kind": self.match.kind.value, "pattern": self.match.pattern.strip()}
        return payload


class EditOperation(BaseModel):
    """Edit request as submitted by a caller (object form).

    Accepts both camelCase (wire) and snake_case names for every field.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    line_number: int | None = Field(default=None, alias="lineNumber")
    start_line: int | None = Field(default=None, alias="startLine")
    end_line: int | None = Field(default=None, alias="endLine")
    action: EditAction | None = None
    text: str | None = None
    content: str | None = Field(default=None, description="Legacy name for text")
    str_match: str | None = Field(default=None, alias="strMatch")
    regex_match: str | None = Field(default=None, alias="regexMatch")

    def to_request(self) -> EditRequest:
        """Translate into the canonical EditRequest.

        Raises:
            InvalidEditRequestError: If the shape cannot be mapped
        """
        start = self.start_line if self.start_line is not None else self.line_number
        if start is None:
            raise InvalidEditRequestError("Edit must specify lineNumber or startLine")
        end = self.end_line if self.end_line is not None else start

        # Empty match strings carry no condition
        str_match = self.str_match or None
        regex_match = self.regex_match or None
        if str_match is not None and regex_match is not None:
            raise InvalidEditRequestError(
                f"Edit at line {start} specifies both strMatch and regexMatch; use only one"
            )

        match: MatchCondition | None = None
        if regex_match is not None:
            match = MatchCondition(kind=MatchKind.REGEX, pattern=regex_match)
        elif str_match is not None:
            match = MatchCondition(kind=MatchKind.EXACT, pattern=normalize_line_endings(str_match))

        text = self.text if self.text is not None else self.content
        action = self.action or EditAction.REPLACE_CONTENT_AT_LINE
        if action == EditAction.DELETE_LINE:
            text = None
        elif text is not None:
            text = normalize_line_endings(text)

        try:
            return EditRequest(start_line=start, end_line=end, action=action, text=text, match=match)
        except ValidationError as e:
            raise InvalidEditRequestError(
                f"Invalid edit at line {start}: {_first_error(e)}"
            ) from e


def _first_error(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    message = str(details[0].get("msg", error))
    return message.removeprefix("Value error, ")


def _from_tuple(edit: Sequence[Any]) -> EditOperation:
    if len(edit) not in (3, 4):
        raise InvalidEditRequestError(
            f"Tuple edit must be [startLine, endLine, content, searchText?], got {len(edit)} items"
        )
    start, end, content = edit[0], edit[1], edit[2]
    search = edit[3] if len(edit) == 4 else None
    return EditOperation(start_line=start, end_line=end, content=content, str_match=search)


def normalize_edit(edit: Any) -> EditRequest:
    """Map any accepted edit shape to a canonical EditRequest.

    Raises:
        InvalidEditRequestError: If the edit has an unsupported shape or values
    """
    if isinstance(edit, EditRequest):
        return edit
    try:
        if isinstance(edit, EditOperation):
            operation = edit
        elif isinstance(edit, list | tuple):
            operation = _from_tuple(edit)
        elif isinstance(edit, dict):
            operation = EditOperation.model_validate(edit)
        else:
            raise InvalidEditRequestError(f"Unsupported edit type: {type(edit).__name__}")
    except ValidationError as e:
        raise InvalidEditRequestError(f"Invalid edit {edit!r}: {_first_error(e)}") from e
    return operation.to_request()


def normalize_edits(edits: Sequence[Any]) -> list[EditRequest]:
    """Normalize a list of edits, preserving submission order."""
    return [normalize_edit(edit) for edit in edits]


def canonical_edits_json(edits: Sequence[EditRequest]) -> str:
    """Deterministic JSON of an edit set, sorted by target line then end line."""
    payloads = [edit.fingerprint_payload() for edit in edits]
    payloads.sort(
        key=lambda p: (p["start_line"], p["end_line"], json.dumps(p, sort_keys=True))
    )
    return json.dumps(payloads, sort_keys=True, separators=(",", ":"))


__all__ = [
    "EditAction",
    "EditOperation",
    "EditRequest",
    "MatchCondition",
    "MatchKind",
    "canonical_edits_json",
    "normalize_edit",
    "normalize_edits",
]
