"""Shared test configuration for edit-lines-mcp tests.

Provides:
- Fixture files written to a per-test temporary directory
- A fake clock for State Cache expiry tests (no sleeps)
- A mock MCP context whose lifespan context is a real AppContext
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from test_utils import SAMPLE_TEXT, TEST_MATCHES_TEXT, FakeClock

from edit_lines_mcp.context import AppContext
from edit_lines_mcp.engine import STATE_TTL_ENV, AllowedDirectory, FileEditor, StateCache


@pytest.fixture(autouse=True)
def clean_ttl_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Every test starts without a TTL override."""
    monkeypatch.delenv(STATE_TTL_ENV, raising=False)


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    path = tmp_path / "sample.txt"
    path.write_text(SAMPLE_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def matches_file(tmp_path: Path) -> Path:
    path = tmp_path / "test-matches.txt"
    path.write_text(TEST_MATCHES_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def state_cache(clock: FakeClock) -> StateCache:
    return StateCache(ttl_ms=60_000, clock=clock)


@pytest.fixture
def editor(state_cache: StateCache) -> FileEditor:
    return FileEditor(state_cache)


@pytest.fixture
def app_context(editor: FileEditor, tmp_path: Path) -> AppContext:
    return AppContext(
        editor=editor,
        allowed_directories=[AllowedDirectory(path=tmp_path.resolve())],
    )


@pytest.fixture
def mock_context(app_context: AppContext) -> MagicMock:
    """Create mock MCP context with AppContext for unit testing MCP tools.

    Returns:
        Mock context object with request_context.lifespan_context structure
    """
    mock_ctx = MagicMock()
    mock_ctx.request_context.lifespan_context = app_context
    return mock_ctx
