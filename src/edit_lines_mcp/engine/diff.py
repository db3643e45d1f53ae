"""Diff Generator: unified diff between a known before/after pair."""

from __future__ import annotations

import difflib

from .line_model import split_lines

NO_NEWLINE_MARKER = "\\ No newline at end of file\n"


def _diff_lines(text: str) -> list[str]:
    """Split text into newline-terminated lines for difflib.

    CRLF, LF and lone CR all break lines, and every line is emitted with
    a plain newline. A final line without a trailing newline carries the
    standard "No newline at end of file" marker, so adding or removing the
    final newline shows up in the diff.
    """
    if not text:
        return []
    parts = [line for line, _ in split_lines(text)]
    last = parts.pop()
    lines = [part + "\n" for part in parts]
    if last:
        lines.append(last + "\n" + NO_NEWLINE_MARKER)
    return lines


def generate_diff(original: str, modified: str, label: str, context_lines: int = 3) -> str:
    """Render a unified diff of ``original`` -> ``modified``.

    Args:
        original: Content before the edit
        modified: Content after the edit
        label: File name used on both header lines
        context_lines: Unchanged lines shown around each hunk

    Returns:
        Unified diff text with headers ``--- label\\toriginal`` and
        ``+++ label\\tmodified``; empty string when nothing changed
    """
    if original == modified:
        return ""
    return "".join(
        difflib.unified_diff(
            _diff_lines(original),
            _diff_lines(modified),
            fromfile=label,
            tofile=label,
            fromfiledate="original",
            tofiledate="modified",
            n=context_lines,
        )
    )


def diff_stats(original: str, modified: str) -> dict[str, int]:
    """Count added, removed and modified lines between two texts."""
    matcher = difflib.SequenceMatcher(
        None,
        [line for line, _ in split_lines(original)],
        [line for line, _ in split_lines(modified)],
    )

    added = removed = changed = 0
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "replace":
            changed += max(i2 - i1, j2 - j1)
        elif tag == "delete":
            removed += i2 - i1
        elif tag == "insert":
            added += j2 - j1

    return {"added": added, "removed": removed, "modified": changed}


__all__ = ["diff_stats", "generate_diff"]
