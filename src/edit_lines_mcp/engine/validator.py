"""Edit Validator: all-or-nothing checks on an edit batch before mutation.

Checks, in order:
1. Range: every line >= 1 and <= line count, start <= end, inserts
   target exactly one line.
2. Pattern: every regex match condition compiles, used or not.
3. Occupancy: a line touched by two edits is rejected unless every edit
   on it is regex-conditioned and their matched spans do not overlap.

Overlap is decided pairwise against the original line content only; a
chain of three or more regex edits whose spans shift after earlier
substitutions is not re-checked. A ranged regex edit is checked against
the shared line on its own, although the applier later matches it against
the range joined with newlines, so a pattern spanning several lines never
counts as overlapping.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from itertools import combinations

from .edit_request import EditRequest
from .exceptions import EditConflictError, EditRangeError
from .line_model import LineModel
from .patterns import MatchSpan, compile_pattern

logger = logging.getLogger(__name__)


@dataclass
class EditBatch:
    """Ordered edit requests plus the derived line occupancy map.

    Attributes:
        requests: Requests in submission order
        occupancy: 1-based line number -> indices into requests touching it
    """

    requests: list[EditRequest]
    occupancy: dict[int, list[int]] = field(default_factory=dict)


class EditValidator:
    """Validates an edit batch against the current Line Model."""

    def __init__(self, model: LineModel):
        self._model = model

    def validate(self, requests: Sequence[EditRequest]) -> EditBatch:
        """Validate the whole batch.

        Returns:
            EditBatch with the occupancy map

        Raises:
            EditRangeError: Bounds violation
            InvalidPatternError: Regex does not compile
            EditConflictError: Ambiguous edits on the same line
        """
        batch = EditBatch(requests=list(requests))

        for request in batch.requests:
            self._check_range(request)

        for request in batch.requests:
            if request.match is not None and request.match.is_regex:
                compile_pattern(request.match.pattern, request.line_number)

        occupancy: dict[int, list[int]] = defaultdict(list)
        for index, request in enumerate(batch.requests):
            for line_number in request.lines:
                occupancy[line_number].append(index)
        batch.occupancy = dict(occupancy)

        for line_number in sorted(batch.occupancy):
            indices = batch.occupancy[line_number]
            if len(indices) > 1:
                self._check_shared_line(line_number, [batch.requests[i] for i in indices])

        logger.debug(
            f"Validated {len(batch.requests)} edit(s) against {len(self._model)} line(s)"
        )
        return batch

    def _check_range(self, request: EditRequest) -> None:
        total = len(self._model)
        start, end = request.start_line, request.end_line

        if start < 1 or end < 1:
            raise EditRangeError(
                f"Line numbers must be positive integers (got range {start}-{end})"
            )
        if start > end:
            raise EditRangeError(
                f"Invalid range: start line {start} is greater than end line {end}"
            )
        if end > total:
            raise EditRangeError(
                f"Invalid line range: file has {total} lines but range is {start}-{end}"
            )
        if request.action.is_insert and start != end:
            raise EditRangeError(
                f"Invalid range: {request.action.value} targets a single line "
                f"(got range {start}-{end})"
            )

    def _check_shared_line(self, line_number: int, requests: list[EditRequest]) -> None:
        if not all(request.is_regex for request in requests):
            raise EditConflictError(f"Line {line_number} is affected by multiple edits")

        text = self._model.line(line_number).text
        spans: list[tuple[str, MatchSpan | None]] = []
        for request in requests:
            assert request.match is not None
            found = compile_pattern(request.match.pattern, line_number).search(text)
            span = MatchSpan(found.start(), found.end(), "") if found else None
            spans.append((request.match.pattern, span))

        for (pattern_a, span_a), (pattern_b, span_b) in combinations(spans, 2):
            if span_a is None or span_b is None:
                continue
            if span_a.overlaps(span_b):
                raise EditConflictError(
                    f"Overlapping regex patterns on line {line_number}: "
                    f"{pattern_a!r} matches [{span_a.start}, {span_a.end}) and "
                    f"{pattern_b!r} matches [{span_b.start}, {span_b.end})"
                )


__all__ = ["EditBatch", "EditValidator"]
