"""MCP tools for line-based file editing.

Three tools are registered on the shared FastMCP instance:
- edit_file_lines: apply or preview (dry_run) a batch of line edits
- approve_edit: commit a previewed batch by its state id
- get_file_lines: inspect lines with surrounding context

Docstrings become tool descriptions. Anticipated failures are returned as
``{"status": "failure", ...}`` dicts rather than raised through the
protocol layer.
"""

import logging
from typing import Annotated, Any, Literal

from mcp.types import ToolAnnotations
from pydantic import Field

from .context import AppContextType
from .engine import EditError, format_line_info
from .formatting import format_edit_result_markdown, format_failure
from .server import mcp

logger = logging.getLogger(__name__)

NO_CONTEXT_ERROR = "Server context not available. Tool requires context to access resources."

# =============================================================================
# MCP Tools
# =============================================================================


@mcp.tool(
    annotations=ToolAnnotations(
        title="Edit File Lines",
        readOnlyHint=False,
        destructiveHint=True,  # Overwrites file content unless dry_run
        idempotentHint=False,  # Inserts/deletes shift content on repeat
        openWorldHint=False,
    )
)
async def edit_file_lines(
    path: Annotated[
        str,
        Field(description="File to edit (absolute or relative to the server's working directory)"),
    ],
    edits: Annotated[
        list[dict[str, Any] | list[Any]],
        Field(
            description=(
                "Edits to apply, all against ORIGINAL line numbers. Each item: "
                "{lineNumber | startLine/endLine, action?: replace_content_at_line | "
                "insert_before | insert_after | delete_line, text?, strMatch? | regexMatch?} "
                "or legacy [startLine, endLine, content, searchText?]"
            ),
            min_length=1,
        ),
    ],
    dry_run: Annotated[
        bool,
        Field(description="Preview only: return the diff and a state_id for approve_edit"),
    ] = False,
    format: Annotated[  # noqa: A002
        Literal["json", "markdown"],
        Field(description="Output format"),
    ] = "json",
    *,
    ctx: AppContextType,
) -> dict[str, Any] | str:
    """Edit a file by line number. Required: path, edits. Optional: dry_run, format (json|markdown)."""
    if ctx is None:
        return {"status": "failure", "error": NO_CONTEXT_ERROR}

    app_ctx = ctx.request_context.lifespan_context

    try:
        resolved = app_ctx.resolve_path(path, for_write=not dry_run)
        result = app_ctx.editor.edit_file(resolved.path, edits, dry_run=dry_run)
    except (EditError, OSError) as e:
        logger.warning(f"edit_file_lines failed for {path}: {e}")
        return format_failure(e, format)

    if format == "markdown":
        return format_edit_result_markdown(result)

    response = result.to_dict()
    if dry_run:
        response["message"] = (
            f"Dry run complete. Use approve_edit(state_id=\"{result.state_id}\") "
            "to apply these changes."
        )
    return response


@mcp.tool(
    annotations=ToolAnnotations(
        title="Approve Edit",
        readOnlyHint=False,
        destructiveHint=True,
        idempotentHint=False,  # A state id can be approved only once
        openWorldHint=False,
    )
)
async def approve_edit(
    state_id: Annotated[
        str,
        Field(
            description="State ID returned by edit_file_lines(dry_run=true)",
            min_length=1,
            max_length=64,
        ),
    ],
    format: Annotated[  # noqa: A002
        Literal["json", "markdown"],
        Field(description="Output format"),
    ] = "json",
    *,
    ctx: AppContextType,
) -> dict[str, Any] | str:
    """Apply a previewed edit set to the file's current content. Required: state_id."""
    if ctx is None:
        return {"status": "failure", "error": NO_CONTEXT_ERROR}

    app_ctx = ctx.request_context.lifespan_context
    state_id = state_id.strip()

    try:
        entry = app_ctx.state_cache.get(state_id)
        if entry is not None:
            # Access may have changed since the dry run (read-only dirs)
            app_ctx.resolve_path(entry.path, for_write=True)
        result = app_ctx.editor.approve(state_id)
    except (EditError, OSError) as e:
        logger.warning(f"approve_edit failed for state {state_id}: {e}")
        return format_failure(e, format)

    if format == "markdown":
        return format_edit_result_markdown(result)
    return result.to_dict()


@mcp.tool(
    annotations=ToolAnnotations(
        title="Get File Lines",
        readOnlyHint=True,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def get_file_lines(
    path: Annotated[
        str,
        Field(description="File to inspect"),
    ],
    line_numbers: Annotated[
        list[int],
        Field(description="1-based line numbers to show", min_length=1),
    ],
    context: Annotated[
        int,
        Field(description="Lines of context before and after each line", ge=0, le=100),
    ] = 0,
    *,
    ctx: AppContextType,
) -> dict[str, Any] | str:
    """Show specific lines with optional context. Required: path, line_numbers. Optional: context."""
    if ctx is None:
        return {"status": "failure", "error": NO_CONTEXT_ERROR}

    app_ctx = ctx.request_context.lifespan_context

    try:
        resolved = app_ctx.resolve_path(path)
        content = app_ctx.editor.read(resolved.path)
    except OSError as e:
        logger.warning(f"get_file_lines failed for {path}: {e}")
        return format_failure(e)

    return format_line_info(content, line_numbers, context)


__all__ = ["approve_edit", "edit_file_lines", "get_file_lines"]
