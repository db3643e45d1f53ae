"""Tests for the Edit Applier and in-memory previews.

Covers the arena semantics (all line numbers refer to the original file),
indentation handling, match conditions and per-edit outcomes.
"""

import re

import pytest
from test_utils import SAMPLE_TEXT, TEST_MATCHES_TEXT

from edit_lines_mcp.engine import (
    EditApplier,
    LineModel,
    MatchNotFoundError,
    OutcomeStatus,
    normalize_edits,
    preview_edits,
)
from edit_lines_mcp.engine.applier import rebase_indentation


def apply(content: str, edits: list) -> str:
    return preview_edits(content, edits).modified


class TestBasicActions:
    def test_insert_before(self) -> None:
        preview = preview_edits(
            SAMPLE_TEXT,
            [{"lineNumber": 3, "action": "insert_before", "text": "New line before 3"}],
        )
        assert preview.modified == (
            "Line 1\nLine 2\nNew line before 3\nLine 3\nLine 4\nLine 5"
        )
        assert preview.outcomes_by_line()[3].status == OutcomeStatus.APPLIED

    def test_insert_after_takes_target_indentation(self) -> None:
        content = "def f():\n    x = 1\n    return x"
        result = apply(content, [{"lineNumber": 2, "action": "insert_after", "text": "y = 2"}])
        assert result == "def f():\n    x = 1\n    y = 2\n    return x"

    def test_delete_range(self) -> None:
        preview = preview_edits(SAMPLE_TEXT, [{"startLine": 2, "endLine": 3, "action": "delete_line"}])
        assert preview.modified == "Line 1\nLine 4\nLine 5"
        assert preview.outcomes[0].message == "deleted 2 lines"

    def test_replace_keeps_line_indentation(self) -> None:
        assert apply("    old\nnext", [{"lineNumber": 1, "text": "new"}]) == "    new\nnext"

    def test_multiline_replace_keeps_relative_indentation(self) -> None:
        result = apply("    old", [{"lineNumber": 1, "text": "  if x:\n    y()"}])
        assert result == "    if x:\n      y()"

    def test_empty_batch_round_trips(self) -> None:
        for content in (SAMPLE_TEXT, SAMPLE_TEXT + "\n", "", "a\r\nb\r\n"):
            preview = preview_edits(content, [])
            assert preview.modified == content
            assert preview.diff == ""
            assert not preview.changed

    def test_crlf_preserved(self) -> None:
        assert apply("a\r\nb\r\n", [{"lineNumber": 1, "text": "x"}]) == "x\r\nb\r\n"


class TestLineEndings:
    def test_mixed_endings_survive_an_identity_edit(self) -> None:
        preview = preview_edits("a\r\nb\nc\n", [{"lineNumber": 1, "text": "a"}])
        assert preview.modified == "a\r\nb\nc\n"
        assert not preview.changed

    def test_only_edited_line_changes(self) -> None:
        result = apply("a\r\nb\nc\r\n", [{"lineNumber": 2, "text": "B"}])
        assert result == "a\r\nB\nc\r\n"

    def test_inserted_lines_take_neighbour_ending(self) -> None:
        result = apply(
            "a\r\nb\nc",
            [
                {"lineNumber": 1, "action": "insert_after", "text": "x\ny"},
                {"lineNumber": 2, "action": "insert_before", "text": "z"},
            ],
        )
        assert result == "a\r\nx\r\ny\r\nz\nb\nc"

    def test_multiline_replace_keeps_range_endings(self) -> None:
        result = apply("a\r\nb\r\nc\nd", [{"startLine": 2, "endLine": 3, "content": "x\ny\nz"}])
        assert result == "a\r\nx\r\ny\r\nz\nd"

    def test_insert_after_last_line_uses_dominant_newline(self) -> None:
        result = apply("a\r\nb", [{"lineNumber": 2, "action": "insert_after", "text": "c"}])
        assert result == "a\r\nb\r\nc"

    def test_cr_only_file(self) -> None:
        preview = preview_edits("one\rtwo\rthree", [{"lineNumber": 2, "text": "TWO"}])
        assert preview.modified == "one\rTWO\rthree"
        assert "-two\n+TWO\n" in preview.diff

    def test_cr_only_file_regex_match(self) -> None:
        result = apply("a = 1\rb = 2\r", [{"lineNumber": 2, "text": "3", "regexMatch": r"\d"}])
        assert result == "a = 1\rb = 3\r"


class TestOriginalLineNumbers:
    def test_mixed_batch_uses_original_positions(self) -> None:
        result = apply(
            SAMPLE_TEXT,
            [
                {"lineNumber": 2, "action": "insert_before", "text": "A"},
                {"lineNumber": 4, "action": "delete_line"},
                {"lineNumber": 5, "text": "E"},
            ],
        )
        assert result == "Line 1\nA\nLine 2\nLine 3\nE"

    def test_multiple_inserts_keep_submission_order(self) -> None:
        result = apply(
            "a\nb",
            [
                {"lineNumber": 1, "action": "insert_after", "text": "1"},
                {"lineNumber": 2, "action": "insert_before", "text": "2"},
            ],
        )
        assert result == "a\n1\n2\nb"

    def test_line_conservation_for_replace_only(self) -> None:
        result = apply(
            SAMPLE_TEXT,
            [{"lineNumber": n, "text": f"Row {n}"} for n in (1, 3, 5)],
        )
        assert result.split("\n") == ["Row 1", "Line 2", "Row 3", "Line 4", "Row 5"]

    def test_outcomes_follow_submission_order(self) -> None:
        preview = preview_edits(
            SAMPLE_TEXT,
            [{"lineNumber": 1, "text": "x"}, {"lineNumber": 5, "action": "delete_line"}],
        )
        assert [o.line_number for o in preview.outcomes] == [1, 5]
        assert all(o.status == OutcomeStatus.APPLIED for o in preview.outcomes)

    def test_applier_does_not_mutate_model(self) -> None:
        model = LineModel.build(SAMPLE_TEXT)
        EditApplier(model).apply(normalize_edits([{"lineNumber": 1, "action": "delete_line"}]))
        assert model.render() == SAMPLE_TEXT


class TestMatchConditions:
    def test_match_preserves_indentation(self) -> None:
        result = apply(
            "    line 5", [{"lineNumber": 1, "text": "new content", "strMatch": "line 5"}]
        )
        assert result == "    new content"

    def test_match_not_found(self) -> None:
        with pytest.raises(MatchNotFoundError) as exc_info:
            preview_edits(
                "Line 1\nblue\nLine 3",
                [{"startLine": 2, "endLine": 2, "content": "red", "strMatch": "green"}],
            )
        error = exc_info.value
        assert error.line_number == 2
        assert error.search_text == "green"
        assert not error.is_regex
        assert "line 2" in str(error)
        assert error.outcomes[-1].status == OutcomeStatus.FAILED

    def test_match_guards_insert(self) -> None:
        with pytest.raises(MatchNotFoundError):
            preview_edits(
                SAMPLE_TEXT,
                [{"lineNumber": 2, "action": "insert_after", "text": "x", "strMatch": "nope"}],
            )

    def test_disjoint_regex_edits_on_one_line(self) -> None:
        result = apply(
            "alpha beta",
            [
                {"lineNumber": 1, "text": "A", "regexMatch": "alpha"},
                {"lineNumber": 1, "text": "B", "regexMatch": "beta"},
            ],
        )
        assert result == "A B"

    def test_ranged_regex_shares_line_with_single_line_regex(self) -> None:
        result = apply(
            "foo\nbar baz",
            [
                {"startLine": 1, "endLine": 2, "text": "X", "regexMatch": "bar"},
                {"lineNumber": 2, "text": "B", "regexMatch": "baz"},
            ],
        )
        assert result == "foo\nX B"

    def test_conditioned_edit_on_removed_line_is_skipped(self) -> None:
        preview = preview_edits(
            SAMPLE_TEXT,
            [
                {"lineNumber": 2, "action": "delete_line", "regexMatch": "Line"},
                {"lineNumber": 2, "text": "3", "regexMatch": r"\d"},
            ],
        )
        assert preview.modified == "Line 1\nLine 3\nLine 4\nLine 5"
        assert [o.status for o in preview.outcomes] == [
            OutcomeStatus.APPLIED,
            OutcomeStatus.SKIPPED,
        ]


class TestComponentFile:
    """Edits against a realistic source file."""

    def test_replace_single_line(self) -> None:
        preview = preview_edits(
            TEST_MATCHES_TEXT,
            [{"startLine": 2, "endLine": 2, "content": 'const Button = ({ color = "red", size = "md" }) => {'}],
        )
        assert '-const Button = ({ color = "blue", size = "md" }) => {' in preview.diff
        assert '+const Button = ({ color = "red", size = "md" }) => {' in preview.diff
        assert preview.outcomes_by_line()[2].status == OutcomeStatus.APPLIED

    def test_replace_multiple_lines(self) -> None:
        preview = preview_edits(
            TEST_MATCHES_TEXT,
            [
                {
                    "startLine": 7,
                    "endLine": 12,
                    "content": 'export const Card = ({\n  title,\n  description,\n  theme = "dark",\n  size = "sm"\n}) => {',
                }
            ],
        )
        assert "+  description," in preview.diff
        assert '+  theme = "dark",' in preview.diff
        assert '+  size = "sm"' in preview.diff

    def test_leading_whitespace_in_string_match(self) -> None:
        preview = preview_edits(
            TEST_MATCHES_TEXT,
            [
                {
                    "startLine": 16,
                    "endLine": 16,
                    "content": "    <div myclass={cardClass}>",
                    "strMatch": "    <div className={cardClass}>",
                }
            ],
        )
        assert "-    <div className={cardClass}>" in preview.diff
        assert "+    <div myclass={cardClass}>" in preview.diff

    def test_exact_string_match(self) -> None:
        preview = preview_edits(
            TEST_MATCHES_TEXT,
            [{"startLine": 2, "endLine": 2, "content": '"green"', "strMatch": '"blue"'}],
        )
        assert '+const Button = ({ color = "green", size = "md" }) => {' in preview.diff

    def test_flexible_whitespace_match(self) -> None:
        preview = preview_edits(
            TEST_MATCHES_TEXT,
            [
                {
                    "startLine": 9,
                    "endLine": 9,
                    "content": 'description = "Custom description"',
                    "strMatch": 'subtitle   =   "Default subtitle"',
                }
            ],
        )
        assert '+  description = "Custom description"' in preview.diff

    def test_regex_lookaround(self) -> None:
        preview = preview_edits(
            TEST_MATCHES_TEXT,
            [{"lineNumber": 9, "text": "NewDefault", "regexMatch": '(?<="Default )[^"]*(?=")'}],
        )
        assert '+  subtitle = "Default NewDefault",' in preview.diff

    def test_regex_named_groups(self) -> None:
        preview = preview_edits(
            TEST_MATCHES_TEXT,
            [
                {
                    "startLine": 25,
                    "endLine": 25,
                    "content": "${prefix}White = { bg: ${bg}, text: ${text} }",
                    "regexMatch": r'(?<prefix>\w+):\s*{\s*bg:\s*"(?<bg>[^"]*)",\s*text:\s*"(?<text>[^"]*)"',
                }
            ],
        )
        assert "+  lightWhite = { bg: #ffffff, text: #000000 }" in preview.diff

    def test_multiline_regex(self) -> None:
        preview = preview_edits(
            TEST_MATCHES_TEXT,
            [
                {
                    "startLine": 16,
                    "endLine": 19,
                    "content": (
                        '<div className={cardClass}>\n      <h2 className="title">{title}</h2>\n'
                        '      <p className="subtitle">{subtitle}</p>\n    </div>'
                    ),
                    "regexMatch": r"<div[^>]*>[\s\S]*?</div>",
                }
            ],
        )
        assert '+      <h2 className="title">{title}</h2>' in preview.diff
        assert '+      <p className="subtitle">{subtitle}</p>' in preview.diff
        assert "+    <div className={cardClass}>" not in preview.diff

    def test_multiline_regex_keeps_indentation(self) -> None:
        preview = preview_edits(
            TEST_MATCHES_TEXT,
            [
                {
                    "startLine": 13,
                    "endLine": 18,
                    "content": (
                        "  const cardStyle = useMemo(() => ({\n"
                        "    backgroundColor: theme === 'light' ? '#fff' : '#000',\n"
                        "    padding: size === 'lg' ? '2rem' : '1rem'\n"
                        "  }), [theme, size]);\n\n  return ("
                    ),
                    "regexMatch": r"\s*const cardClass[\s\S]*?return \(",
                }
            ],
        )
        assert re.search(r"^\+\s{2}const cardStyle = useMemo", preview.diff, re.M)
        assert re.search(r"^\+\s{4}backgroundColor", preview.diff, re.M)
        assert re.search(r"^\+\s{2}\}\), \[theme, size\]\);", preview.diff, re.M)


class TestRebaseIndentation:
    def test_relative_indentation_kept(self) -> None:
        lines = rebase_indentation("a\n  b\n\nc", "    ")
        assert [line.text for line in lines] == ["    a", "      b", "", "    c"]

    def test_dedent_below_first_line(self) -> None:
        lines = rebase_indentation("    a\nb", "  ")
        assert [line.text for line in lines] == ["  a", "b"]
