"""Tests for the Edit Validator: ranges, patterns and line occupancy."""

import pytest
from test_utils import SAMPLE_TEXT

from edit_lines_mcp.engine import (
    EditConflictError,
    EditRangeError,
    EditValidator,
    InvalidPatternError,
    LineModel,
    normalize_edits,
)


def validate(content: str, edits: list) -> None:
    EditValidator(LineModel.build(content)).validate(normalize_edits(edits))


class TestRanges:
    def test_start_greater_than_end(self) -> None:
        with pytest.raises(EditRangeError, match="start line 3 is greater than end line 2"):
            validate(SAMPLE_TEXT, [{"startLine": 3, "endLine": 2, "content": "x"}])

    def test_beyond_end_of_file(self) -> None:
        with pytest.raises(EditRangeError, match="Invalid line range"):
            validate(SAMPLE_TEXT, [{"startLine": 100, "endLine": 101, "content": "x"}])

    def test_zero_line(self) -> None:
        with pytest.raises(EditRangeError, match="positive integers"):
            validate(SAMPLE_TEXT, [{"lineNumber": 0, "text": "x"}])

    def test_insert_must_target_one_line(self) -> None:
        with pytest.raises(EditRangeError, match="targets a single line"):
            validate(
                SAMPLE_TEXT,
                [{"startLine": 1, "endLine": 2, "action": "insert_after", "text": "x"}],
            )

    def test_last_line_is_valid(self) -> None:
        validate(SAMPLE_TEXT, [{"lineNumber": 5, "action": "delete_line"}])


class TestOccupancy:
    def test_two_plain_edits_on_one_line(self) -> None:
        with pytest.raises(EditConflictError, match="Line 2 is affected by multiple edits"):
            validate(
                SAMPLE_TEXT,
                [
                    {"startLine": 2, "endLine": 2, "content": "a"},
                    {"startLine": 2, "endLine": 2, "content": "b"},
                ],
            )

    def test_range_overlapping_single_line(self) -> None:
        with pytest.raises(EditConflictError, match="Line 3 is affected by multiple edits"):
            validate(
                SAMPLE_TEXT,
                [
                    {"startLine": 2, "endLine": 4, "content": "block"},
                    {"lineNumber": 3, "action": "insert_before", "text": "x"},
                ],
            )

    def test_string_match_does_not_allow_sharing(self) -> None:
        with pytest.raises(EditConflictError):
            validate(
                SAMPLE_TEXT,
                [
                    {"lineNumber": 1, "text": "One", "strMatch": "Line"},
                    {"lineNumber": 1, "text": "2", "strMatch": "1"},
                ],
            )

    def test_disjoint_regex_edits_may_share_a_line(self) -> None:
        batch = EditValidator(LineModel.build("alpha beta")).validate(
            normalize_edits(
                [
                    {"lineNumber": 1, "text": "A", "regexMatch": "alpha"},
                    {"lineNumber": 1, "text": "B", "regexMatch": "beta"},
                ]
            )
        )
        assert batch.occupancy[1] == [0, 1]

    def test_overlapping_regex_patterns(self) -> None:
        with pytest.raises(EditConflictError, match="Overlapping regex patterns on line 1"):
            validate(
                'color = "blue"',
                [
                    {"lineNumber": 1, "text": "warning", "regexMatch": '(?<=color = ")[^"]*(?=")'},
                    {"lineNumber": 1, "text": "danger", "regexMatch": '"[^"]*"'},
                ],
            )

    def test_ranged_regex_checked_against_shared_line_only(self) -> None:
        # "foo\nbar" cannot match line 2 on its own, so no overlap is seen
        batch = EditValidator(LineModel.build("foo\nbar baz")).validate(
            normalize_edits(
                [
                    {"startLine": 1, "endLine": 2, "text": "X", "regexMatch": "foo\\nbar"},
                    {"lineNumber": 2, "text": "B", "regexMatch": "bar"},
                ]
            )
        )
        assert batch.occupancy[2] == [0, 1]

    def test_adjacent_edits_do_not_conflict(self) -> None:
        validate(
            SAMPLE_TEXT,
            [
                {"startLine": 1, "endLine": 2, "content": "x"},
                {"startLine": 3, "endLine": 3, "content": "y"},
            ],
        )


class TestPatterns:
    def test_invalid_regex_rejected_before_apply(self) -> None:
        with pytest.raises(InvalidPatternError, match="Invalid regex pattern"):
            validate(SAMPLE_TEXT, [{"lineNumber": 2, "text": "x", "regexMatch": "(["}])

    def test_pattern_error_wins_over_conflict(self) -> None:
        with pytest.raises(InvalidPatternError):
            validate(
                SAMPLE_TEXT,
                [
                    {"lineNumber": 1, "text": "a"},
                    {"lineNumber": 1, "text": "b"},
                    {"lineNumber": 4, "text": "x", "regexMatch": "(["},
                ],
            )
