"""Shared context types for MCP server.

This module contains context types used across server and tools modules,
separated to avoid circular imports.
"""

from dataclasses import dataclass, field

from mcp.server.fastmcp import Context
from mcp.server.session import ServerSession

from .engine import (
    AllowedDirectory,
    FileEditor,
    PathAccessError,
    PathResolver,
    ResolvedPath,
    StateCache,
)


@dataclass
class AppContext:
    """Application context containing shared resources for MCP tools.

    Created once during server startup and handed to every tool through
    the Context parameter.
    """

    editor: FileEditor
    allowed_directories: list[AllowedDirectory] = field(default_factory=list)

    @property
    def state_cache(self) -> StateCache:
        return self.editor.state_cache

    def resolve_path(self, path: str, for_write: bool = False) -> ResolvedPath:
        """Resolve a caller path against the allowed directories.

        Raises:
            PathAccessError: Path outside every allowed directory, a symlink,
                or a write into a read-only directory
        """
        result = PathResolver.resolve_allowed(path, self.allowed_directories)
        if not result.is_success:
            raise PathAccessError(result.error)
        assert result.value is not None
        resolved = result.value
        if for_write and resolved.directory.read_only:
            raise PathAccessError(
                f"File is in a read-only directory ({resolved.directory.path}): {path}"
            )
        return resolved


# Type alias for MCP tool context parameter
AppContextType = Context[ServerSession, AppContext]


__all__ = ["AppContext", "AppContextType"]
