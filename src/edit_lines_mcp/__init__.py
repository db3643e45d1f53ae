"""edit-lines-mcp: line-based file editing tools over the Model Context Protocol."""

__version__ = "0.1.0"
