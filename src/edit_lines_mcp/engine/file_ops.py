"""File I/O collaborator and allowed-directory path resolution.

The edit engine itself performs no path filtering; the tool layer resolves
every incoming path against the configured allowed directories first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .io_result import IOResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllowedDirectory:
    """Directory the server may touch; ``read_only`` forbids writes."""

    path: Path
    read_only: bool = False

    @classmethod
    def parse(cls, spec: str) -> AllowedDirectory:
        """Parse ``dir`` or ``dir:ro`` (``~`` is expanded)."""
        read_only = spec.endswith(":ro")
        raw = spec[: -len(":ro")] if read_only else spec
        return cls(path=Path(raw).expanduser().resolve(), read_only=read_only)

    def contains(self, path: Path) -> bool:
        return path == self.path or self.path in path.parents

    def __str__(self) -> str:
        return f"{self.path}{' (ro)' if self.read_only else ''}"


@dataclass(frozen=True)
class ResolvedPath:
    path: Path
    directory: AllowedDirectory


class PathResolver:
    """Resolve caller-supplied paths and confine them to allowed directories.

    Rejects:
    - Paths outside every allowed directory (after resolving ``..``)
    - Symlinks at the target path itself
    """

    @staticmethod
    def resolve_allowed(
        path: str,
        allowed_dirs: list[AllowedDirectory],
        working_dir: Path | None = None,
    ) -> IOResult[ResolvedPath]:
        """Resolve ``path`` and find the allowed directory containing it.

        Args:
            path: File path (absolute, relative to working_dir, or ~-prefixed)
            allowed_dirs: Directories the server may access
            working_dir: Base for relative paths (defaults to cwd)

        Returns:
            IOResult.success(ResolvedPath) or IOResult.failure(error_message)
        """
        if working_dir is None:
            working_dir = Path.cwd()

        file_path = Path(path).expanduser()
        absolute_path = file_path if file_path.is_absolute() else working_dir / file_path

        if absolute_path.is_symlink():
            return IOResult.failure(f"Symlinks not allowed for security: {absolute_path}")

        try:
            resolved_path = absolute_path.resolve()
        except (OSError, RuntimeError) as e:
            return IOResult.failure(f"Failed to resolve path '{path}': {e}")

        for directory in allowed_dirs:
            if directory.contains(resolved_path):
                return IOResult.success(ResolvedPath(path=resolved_path, directory=directory))

        return IOResult.failure(
            f"Access denied: path is not within any allowed directory: {path}"
        )


class FileOperations:
    """Text file reads and writes that report failures via IOResult.

    ``newline=""`` is used on both sides so CRLF files are neither
    translated on read nor on write.
    """

    @staticmethod
    def read_text(path: Path, encoding: str = "utf-8") -> IOResult[str]:
        """Read a whole text file.

        Returns:
            IOResult.success(content) or IOResult.failure(error_message)
        """
        if not path.exists():
            return IOResult.failure(f"File not found: {path}", not_found=True)
        if not path.is_file():
            return IOResult.failure(f"Path is not a file: {path}")

        try:
            with path.open("r", encoding=encoding, newline="") as handle:
                return IOResult.success(handle.read())
        except UnicodeDecodeError as e:
            return IOResult.failure(f"Encoding error reading '{path}' with {encoding}: {e}")
        except OSError as e:
            return IOResult.failure(f"Failed to read file '{path}': {e}")

    @staticmethod
    def write_text(path: Path, content: str, encoding: str = "utf-8") -> IOResult[int]:
        """Overwrite a text file with ``content``.

        Returns:
            IOResult.success(bytes_written) or IOResult.failure(error_message)
        """
        try:
            with path.open("w", encoding=encoding, newline="") as handle:
                handle.write(content)
        except UnicodeEncodeError as e:
            return IOResult.failure(f"Encoding error writing '{path}' with {encoding}: {e}")
        except OSError as e:
            return IOResult.failure(f"Failed to write file '{path}': {e}")

        bytes_written = len(content.encode(encoding))
        logger.debug(f"Wrote {bytes_written} bytes to {path}")
        return IOResult.success(bytes_written)


__all__ = ["AllowedDirectory", "FileOperations", "PathResolver", "ResolvedPath"]
