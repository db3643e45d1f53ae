"""Line Model: file text decomposed into (indentation, body, ending) per line.

Every line keeps its own terminator (``\\r\\n``, ``\\n``, a lone ``\\r``, or
"" for the final segment), so build/render round-trips byte-for-byte even
for files that mix line ending conventions:

    model = LineModel.build("  a\\r\\n  b\\nc")
    assert model.render() == "  a\\r\\n  b\\nc"
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

# original_index carried by lines that did not exist in the file
INSERTED = -1

_INDENT_RE = re.compile(r"[ \t]*")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def split_indent(raw: str) -> tuple[str, str]:
    """Split a raw line into its maximal whitespace prefix and the rest."""
    match = _INDENT_RE.match(raw)
    indent = match.group(0) if match else ""
    return indent, raw[len(indent) :]


def split_lines(content: str) -> list[tuple[str, str]]:
    """Split text into ``(text, ending)`` pairs.

    CRLF, LF and lone CR all count as line breaks. The final pair always
    has ending "" (its text is "" when the content ends with a break), so
    ``"".join(text + ending for text, ending in split_lines(x)) == x``.
    """
    result: list[tuple[str, str]] = []
    position = 0
    for match in _LINE_BREAK_RE.finditer(content):
        result.append((content[position : match.start()], match.group(0)))
        position = match.end()
    result.append((content[position:], ""))
    return result


def normalize_line_endings(text: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    return "\n".join(line for line, _ in split_lines(text))


@dataclass(frozen=True)
class Line:
    """One line of a file.

    Attributes:
        body: Line content after the indentation
        indent: Maximal leading whitespace of the line
        original_index: 0-based position in the source file, or INSERTED
        ending: Terminator that followed the line ("" if none or unknown)
    """

    body: str
    indent: str = ""
    original_index: int = INSERTED
    ending: str = ""

    @classmethod
    def parse(cls, raw: str, original_index: int = INSERTED, ending: str = "") -> Line:
        indent, body = split_indent(raw)
        return cls(body=body, indent=indent, original_index=original_index, ending=ending)

    @property
    def text(self) -> str:
        """Full reconstructed line (indent + body), without its ending."""
        return self.indent + self.body

    @property
    def is_blank(self) -> bool:
        return not self.body.strip()


@dataclass
class LineModel:
    """Sequence of lines plus the dominant line ending detected at build time.

    ``newline`` is only used between two lines when the earlier one has no
    ending of its own (lines created by an edit next to the final line).
    """

    lines: list[Line] = field(default_factory=list)
    newline: str = "\n"

    @classmethod
    def build(cls, content: str) -> LineModel:
        """Decompose file content into lines.

        An empty file yields a single empty line. A file ending in a line
        break yields an empty final line.
        """
        pairs = split_lines(content)
        lines = [
            Line.parse(raw, index, ending) for index, (raw, ending) in enumerate(pairs)
        ]
        endings = Counter(ending for _, ending in pairs if ending)
        newline = endings.most_common(1)[0][0] if endings else "\n"
        return cls(lines=lines, newline=newline)

    def render(self, lines: Iterable[Line] | None = None) -> str:
        """Join lines (the model's own by default) with their own endings.

        The last line is never terminated; any other line without an
        ending is followed by the dominant newline.
        """
        source = list(self.lines if lines is None else lines)
        parts: list[str] = []
        for position, line in enumerate(source):
            parts.append(line.text)
            if position < len(source) - 1:
                parts.append(line.ending or self.newline)
        return "".join(parts)

    def line(self, number: int) -> Line:
        """Return the line at 1-based ``number``."""
        if number < 1 or number > len(self.lines):
            raise IndexError(f"Line {number} out of range (file has {len(self.lines)} lines)")
        return self.lines[number - 1]

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[Line]:
        return iter(self.lines)


__all__ = [
    "INSERTED",
    "Line",
    "LineModel",
    "normalize_line_endings",
    "split_indent",
    "split_lines",
]
