"""Tests for allowed-directory resolution and text file I/O."""

from pathlib import Path

import pytest

from edit_lines_mcp.engine import AllowedDirectory, FileOperations, IOResult, IOStatus, PathResolver


class TestAllowedDirectory:
    def test_parse_read_write(self, tmp_path: Path) -> None:
        directory = AllowedDirectory.parse(str(tmp_path))
        assert directory.path == tmp_path.resolve()
        assert not directory.read_only

    def test_parse_read_only_suffix(self, tmp_path: Path) -> None:
        directory = AllowedDirectory.parse(f"{tmp_path}:ro")
        assert directory.path == tmp_path.resolve()
        assert directory.read_only
        assert str(directory).endswith("(ro)")

    def test_parse_expands_home(self) -> None:
        assert AllowedDirectory.parse("~").path == Path.home().resolve()

    def test_contains(self, tmp_path: Path) -> None:
        directory = AllowedDirectory(path=tmp_path)
        assert directory.contains(tmp_path / "a" / "b.txt")
        assert directory.contains(tmp_path)
        assert not directory.contains(tmp_path.parent)


class TestPathResolver:
    def test_inside(self, tmp_path: Path) -> None:
        allowed = [AllowedDirectory(path=tmp_path.resolve())]
        result = PathResolver.resolve_allowed(str(tmp_path / "f.txt"), allowed)
        assert result.is_success
        assert result.value is not None
        assert result.value.directory is allowed[0]

    def test_traversal_rejected(self, tmp_path: Path) -> None:
        inner = tmp_path / "inner"
        inner.mkdir()
        allowed = [AllowedDirectory(path=inner.resolve())]
        result = PathResolver.resolve_allowed(str(inner / ".." / "escape.txt"), allowed)
        assert not result.is_success
        assert "Access denied" in (result.error or "")

    def test_relative_to_working_dir(self, tmp_path: Path) -> None:
        allowed = [AllowedDirectory(path=tmp_path.resolve())]
        result = PathResolver.resolve_allowed("sub/f.txt", allowed, working_dir=tmp_path)
        assert result.value is not None
        assert result.value.path == (tmp_path / "sub" / "f.txt").resolve()

    def test_symlink_rejected(self, tmp_path: Path) -> None:
        target = tmp_path / "real.txt"
        target.write_text("x", encoding="utf-8")
        link = tmp_path / "link.txt"
        link.symlink_to(target)
        result = PathResolver.resolve_allowed(str(link), [AllowedDirectory(path=tmp_path.resolve())])
        assert not result.is_success
        assert "Symlinks not allowed" in (result.error or "")


class TestFileOperations:
    def test_read_preserves_crlf(self, tmp_path: Path) -> None:
        path = tmp_path / "f.txt"
        path.write_bytes(b"a\r\nb")
        assert FileOperations.read_text(path).unwrap() == "a\r\nb"

    def test_write_preserves_crlf(self, tmp_path: Path) -> None:
        path = tmp_path / "f.txt"
        assert FileOperations.write_text(path, "a\r\nb\n").unwrap() == 5
        assert path.read_bytes() == b"a\r\nb\n"

    def test_read_missing_file(self, tmp_path: Path) -> None:
        result = FileOperations.read_text(tmp_path / "absent.txt")
        assert result.not_found
        with pytest.raises(FileNotFoundError, match="File not found"):
            result.unwrap()

    def test_read_directory(self, tmp_path: Path) -> None:
        with pytest.raises(OSError, match="not a file"):
            FileOperations.read_text(tmp_path).unwrap()

    def test_decode_error(self, tmp_path: Path) -> None:
        path = tmp_path / "latin.txt"
        path.write_bytes("café".encode("latin-1"))
        result = FileOperations.read_text(path, encoding="utf-8")
        assert not result.is_success
        assert "Encoding error" in (result.error or "")
        assert FileOperations.read_text(path, encoding="latin-1").unwrap() == "café"


class TestIOResult:
    def test_success_requires_value(self) -> None:
        with pytest.raises(ValueError):
            IOResult(status=IOStatus.SUCCESS)

    def test_failure_requires_error(self) -> None:
        with pytest.raises(ValueError):
            IOResult.failure("")
