"""Line inspection: show requested lines with surrounding context.

Output for ``format_line_info("a\\nb\\nc", [2], context=1)``::

    Line 2:
      1: a
    > 2: b
      3: c

"""

from __future__ import annotations

from collections.abc import Iterable

from .line_model import split_lines


def format_line_info(content: str, line_numbers: Iterable[int], context: int = 0) -> str:
    """Render each unique requested line (ascending) with ``context`` neighbours.

    Out-of-range numbers produce an "Invalid line number" entry instead of
    raising, so one bad number does not hide the others.
    """
    lines = [text for text, _ in split_lines(content)]
    total = len(lines)
    context = max(0, context)
    result: list[str] = []

    for line_number in sorted(set(line_numbers)):
        index = line_number - 1
        if index < 0 or index >= total:
            result.append(f"Line {line_number}: Invalid line number (file has {total} lines)")
            continue

        first = max(0, index - context)
        last = min(total - 1, index + context)
        result.append(f"Line {line_number}:")
        for i in range(first, last + 1):
            prefix = ">" if i == index else " "
            result.append(f"{prefix} {i + 1}: {lines[i]}")
        result.append("")

    return "\n".join(result)


__all__ = ["format_line_info"]
