"""Entry point for edit-lines-mcp MCP server.

Runs the server via ``python -m edit_lines_mcp`` or the ``edit-lines-mcp``
console script.

The tools module must be imported before the server starts so its
@mcp.tool() decorators register on the shared FastMCP instance.
"""


def main() -> None:
    """Register tools, then start the MCP server."""
    # Import tools first to register @mcp.tool() decorators
    from . import tools  # noqa: F401 - imported for side effects (decorator registration)

    from .server import main as server_main

    server_main()


if __name__ == "__main__":
    main()
