"""Edit Applier: applies a validated batch to a Line Model.

Lines are held in an arena of slots, one per original line. Each slot
keeps the lines inserted before/after it and its current content, so
every request resolves against original line numbers no matter how many
lines earlier requests inserted or removed. The output is rebuilt by
walking the slots in original order.

Requests are processed in descending order of target line (ties keep
submission order).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from enum import Enum

from pydantic import BaseModel

from .edit_request import EditAction, EditRequest
from .exceptions import EditError, EditRangeError, MatchNotFoundError
from .line_model import Line, LineModel, split_indent
from .patterns import MatchSpan, find_exact, find_regex

logger = logging.getLogger(__name__)


class OutcomeStatus(str, Enum):
    APPLIED = "APPLIED"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


class EditOutcome(BaseModel):
    """Result of one submitted edit request, keyed by its nominal line number."""

    line_number: int
    status: OutcomeStatus
    message: str | None = None


def rebase_indentation(text: str, base_indent: str, ending: str = "") -> list[Line]:
    """Split replacement text into lines re-indented onto ``base_indent``.

    Each line keeps its indentation relative to the first line of ``text``;
    the first line itself lands exactly on ``base_indent``. Blank lines
    stay empty. Every line is terminated with ``ending``.
    """
    raw_lines = text.split("\n")
    first_indent, _ = split_indent(raw_lines[0])
    result: list[Line] = []
    for raw in raw_lines:
        indent, body = split_indent(raw)
        if not body:
            result.append(Line(body="", ending=ending))
            continue
        extra = len(indent) - len(first_indent)
        if extra >= 0:
            new_indent = base_indent + indent[len(first_indent) :]
        else:
            new_indent = base_indent[: max(0, len(base_indent) + extra)]
        result.append(Line(body=body, indent=new_indent, ending=ending))
    return result


@dataclass
class _Slot:
    """Arena cell for one original line."""

    original: Line
    current: list[Line]
    removed: bool = False
    before: list[Line] = field(default_factory=list)
    after: list[Line] = field(default_factory=list)

    def emit(self) -> list[Line]:
        return [*self.before, *self.current, *self.after]


@dataclass
class ApplyResult:
    """Output lines plus one outcome per submitted request (submission order)."""

    lines: list[Line]
    outcomes: list[EditOutcome]


class EditApplier:
    """Applies canonical edit requests to a Line Model without mutating it."""

    def __init__(self, model: LineModel):
        self._model = model
        self._slots = [_Slot(original=line, current=[line]) for line in model.lines]

    def apply(self, requests: Sequence[EditRequest]) -> ApplyResult:
        """Apply every request and rebuild the line sequence.

        Raises:
            MatchNotFoundError: A match condition was not found; ``outcomes``
                on the error holds whatever was recorded before it
            EditRangeError: A non-delete request targets a missing line
        """
        outcomes: dict[int, EditOutcome] = {}
        order = sorted(range(len(requests)), key=lambda i: -requests[i].start_line)

        for index in order:
            request = requests[index]
            try:
                outcomes[index] = self._apply_one(request)
            except EditError as e:
                outcomes[index] = EditOutcome(
                    line_number=request.line_number,
                    status=OutcomeStatus.FAILED,
                    message=str(e),
                )
                e.outcomes = [outcomes[i] for i in sorted(outcomes)]
                logger.debug(f"Edit {request.describe()} failed: {e}")
                raise

        lines = [line for slot in self._slots for line in slot.emit()]
        return ApplyResult(lines=lines, outcomes=[outcomes[i] for i in range(len(requests))])

    def _apply_one(self, request: EditRequest) -> EditOutcome:
        start, end = request.start_line, request.end_line
        if start < 1 or end > len(self._slots) or start > end:
            if request.action == EditAction.DELETE_LINE:
                return self._outcome(request, OutcomeStatus.SKIPPED, "line out of range")
            raise EditRangeError(
                f"Invalid line range: file has {len(self._slots)} lines "
                f"but range is {start}-{end}"
            )

        slots = self._slots[start - 1 : end]
        if request.match is not None and all(slot.removed for slot in slots):
            return self._outcome(
                request, OutcomeStatus.SKIPPED, "target line was removed by another edit"
            )

        if request.action == EditAction.DELETE_LINE:
            return self._delete(request, slots)
        if request.action.is_insert:
            return self._insert(request, slots[0])
        return self._replace(request, slots)

    def _delete(self, request: EditRequest, slots: list[_Slot]) -> EditOutcome:
        if request.match is not None:
            self._require_match(request, slots)
        if all(slot.removed for slot in slots):
            return self._outcome(request, OutcomeStatus.SKIPPED, "line already removed")
        for slot in slots:
            slot.removed = True
            slot.current = []
        count = len(slots)
        return self._outcome(
            request, OutcomeStatus.APPLIED, f"deleted {count} line{'s' if count != 1 else ''}"
        )

    def _insert(self, request: EditRequest, slot: _Slot) -> EditOutcome:
        if request.match is not None:
            self._require_match(request, [slot])
        assert request.text is not None
        # Inserted lines take the line ending of the line they sit next to
        new_lines = rebase_indentation(request.text, slot.original.indent, slot.original.ending)
        if request.action == EditAction.INSERT_BEFORE:
            slot.before.extend(new_lines)
            where = "before"
        else:
            slot.after.extend(new_lines)
            where = "after"
        return self._outcome(
            request, OutcomeStatus.APPLIED, f"inserted {len(new_lines)} line(s) {where}"
        )

    def _replace(self, request: EditRequest, slots: list[_Slot]) -> EditOutcome:
        assert request.text is not None
        first = slots[0]

        if request.match is None:
            new_lines = rebase_indentation(request.text, first.original.indent)
            message = f"replaced {len(slots)} line(s) with {len(new_lines)}"
        else:
            block, span = self._require_match(request, slots)
            replaced = block[: span.start] + span.replacement + block[span.end :]
            new_lines = [Line.parse(raw) for raw in replaced.split("\n")]
            message = f"replaced match at columns {span.start}-{span.end}"

        # Interior lines end like the first replaced line, the last one keeps
        # the ending of the last replaced line
        inner_ending = first.original.ending
        tail_ending = slots[-1].original.ending
        new_lines = [
            replace(line, ending=inner_ending if i < len(new_lines) - 1 else tail_ending)
            for i, line in enumerate(new_lines)
        ]
        new_lines[0] = replace(new_lines[0], original_index=first.original.original_index)

        first.current = new_lines
        first.removed = False
        for slot in slots[1:]:
            slot.current = []
            slot.removed = True
        return self._outcome(request, OutcomeStatus.APPLIED, message)

    def _require_match(self, request: EditRequest, slots: list[_Slot]) -> tuple[str, MatchSpan]:
        """Locate the match condition in the current text of ``slots``."""
        assert request.match is not None
        block = "\n".join(line.text for slot in slots for line in slot.current)
        replacement = request.text or ""
        if request.match.is_regex:
            span = find_regex(block, request.match.pattern, replacement)
        else:
            span = find_exact(block, request.match.pattern, replacement)
        if span is None:
            raise MatchNotFoundError(
                request.line_number, request.match.pattern, request.match.is_regex
            )
        return block, span

    @staticmethod
    def _outcome(request: EditRequest, status: OutcomeStatus, message: str) -> EditOutcome:
        return EditOutcome(line_number=request.line_number, status=status, message=message)


__all__ = ["ApplyResult", "EditApplier", "EditOutcome", "OutcomeStatus", "rebase_indentation"]
