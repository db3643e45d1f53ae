"""FastMCP server for edit-lines-mcp.

Owns the FastMCP instance, reads environment configuration and builds the
shared FileEditor / StateCache once per server run in the lifespan context.
Tools live in the tools module and reach these resources through ctx.
"""

import logging
import os
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from .context import AppContext, AppContextType
from .engine import STATE_TTL_ENV, AllowedDirectory, FileEditor, StateCache

logger = logging.getLogger(__name__)

ALLOWED_DIRS_ENV = "EDIT_LINES_ALLOWED_DIRS"
ENCODING_ENV = "EDIT_LINES_ENCODING"
LOG_LEVEL_ENV = "EDIT_LINES_LOG_LEVEL"

# =============================================================================
# Shared Resources and Lifespan Management
# =============================================================================


def get_allowed_directories() -> list[AllowedDirectory]:
    """Parse allowed directories from the environment.

    Reads EDIT_LINES_ALLOWED_DIRS, a comma-separated list of directories.
    A ``:ro`` suffix marks a directory read-only (dry runs only). ``~`` is
    expanded. Entries that do not exist or are not directories are skipped
    with a warning.

    Example:
        EDIT_LINES_ALLOWED_DIRS="~/project,/srv/shared:ro"

    Returns:
        Allowed directories; the current working directory (read-write)
        when the variable is unset or yields no valid entry
    """
    env_value = os.getenv(ALLOWED_DIRS_ENV, "")
    directories: list[AllowedDirectory] = []

    for spec in env_value.split(","):
        spec = spec.strip()
        if not spec:
            continue

        directory = AllowedDirectory.parse(spec)
        if not directory.path.exists():
            logger.warning(f"Allowed directory does not exist, skipping: {directory.path}")
            continue
        if not directory.path.is_dir():
            logger.warning(f"Allowed path is not a directory, skipping: {directory.path}")
            continue
        directories.append(directory)

    if not directories:
        if env_value.strip():
            logger.warning(f"{ALLOWED_DIRS_ENV} provided but no valid directories found")
        directories.append(AllowedDirectory(path=Path.cwd().resolve()))

    return directories


def get_encoding() -> str:
    """Text encoding for file reads/writes (EDIT_LINES_ENCODING, default utf-8)."""
    return os.getenv(ENCODING_ENV, "utf-8").strip() or "utf-8"


def create_app_context() -> AppContext:
    """Build the shared resources used by all tools.

    Raises:
        ValueError: If MCP_EDIT_STATE_TTL is set to a non-positive or
            non-numeric value
    """
    state_cache = StateCache()
    editor = FileEditor(state_cache, encoding=get_encoding())
    return AppContext(editor=editor, allowed_directories=get_allowed_directories())


@asynccontextmanager
async def app_lifespan(_server: FastMCP) -> AsyncIterator[AppContext]:
    """Manage application lifecycle with resource initialization.

    Environment Variables:
        MCP_EDIT_STATE_TTL: Dry-run state lifetime in milliseconds (default: 60000)
        EDIT_LINES_ALLOWED_DIRS: Comma-separated allowed directories (``:ro`` suffix)
        EDIT_LINES_ENCODING: File encoding (default: utf-8)

    Args:
        _server: FastMCP server instance (unused, required by FastMCP signature)

    Yields:
        AppContext with initialized resources
    """
    logger.info("Initializing edit server resources...")

    app_context = create_app_context()

    logger.info(f"Edit state TTL: {app_context.state_cache.ttl_ms:g} ms ({STATE_TTL_ENV})")
    logger.info(f"File encoding: {app_context.editor.encoding}")
    logger.info(
        "Allowed directories: "
        + ", ".join(str(directory) for directory in app_context.allowed_directories)
    )

    try:
        yield app_context
    finally:
        logger.info("Shutting down edit server...")
        # Pending dry runs live only in process memory
        pending = len(app_context.state_cache)
        if pending:
            logger.info(f"Discarding {pending} pending edit state(s)")
        app_context.state_cache.clear()


# Python MCP naming convention: {service}_mcp
mcp = FastMCP("edit_lines_mcp", lifespan=app_lifespan)


# =============================================================================
# Server Entry Point
# =============================================================================


def configure_logging() -> None:
    """Configure stderr logging from EDIT_LINES_LOG_LEVEL (default INFO)."""
    valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    log_level_str = os.getenv(LOG_LEVEL_ENV, "INFO").upper()

    if log_level_str not in valid_log_levels:
        print(
            f"Warning: Invalid {LOG_LEVEL_ENV} '{log_level_str}'. "
            f"Valid levels: {', '.join(sorted(valid_log_levels))}. "
            "Using INFO.",
            file=sys.stderr,
        )
        log_level_str = "INFO"

    # stdout carries the MCP stdio transport, so logs go to stderr
    logging.basicConfig(
        level=getattr(logging, log_level_str),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def main() -> None:
    """Entry point for running the MCP server over stdio.

    Called via ``python -m edit_lines_mcp`` or the ``edit-lines-mcp``
    console script.
    """
    configure_logging()

    logger.info("Starting edit-lines-mcp on stdio...")

    try:
        # anyio.run() (used internally by mcp.run()) raises KeyboardInterrupt on SIGINT
        mcp.run()
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down gracefully...")
    except Exception as e:
        logger.exception(f"Server error: {e}")
        sys.exit(1)

    logger.info("Server shutdown complete")


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "mcp",
    "main",
    "AppContext",
    "AppContextType",
    "configure_logging",
    "create_app_context",
    "get_allowed_directories",
    "get_encoding",
]
