"""Line-based edit engine.

Components, leaf-first:
- LineModel: text <-> (indent, body) lines
- EditRequest / normalize_edits: accepted edit shapes -> canonical form
- EditValidator: all-or-nothing range, pattern and overlap checks
- EditApplier: applies a validated batch against original line numbers
- generate_diff: unified diff of before/after text
- StateCache: fingerprinted, TTL-expiring store for dry runs
- FileEditor: preview / apply / approve against files on disk
"""

from .applier import ApplyResult, EditApplier, EditOutcome, OutcomeStatus
from .diff import diff_stats, generate_diff
from .edit_request import (
    EditAction,
    EditOperation,
    EditRequest,
    MatchCondition,
    MatchKind,
    normalize_edit,
    normalize_edits,
)
from .editor import EditPreview, EditResult, FileEditor, preview_edits
from .exceptions import (
    EditConflictError,
    EditError,
    EditRangeError,
    EditValidationError,
    InvalidEditRequestError,
    InvalidPatternError,
    MatchNotFoundError,
    PathAccessError,
    StateNotFoundError,
)
from .file_ops import AllowedDirectory, FileOperations, PathResolver, ResolvedPath
from .io_result import IOResult, IOStatus
from .line_info import format_line_info
from .line_model import INSERTED, Line, LineModel
from .state_cache import (
    DEFAULT_STATE_TTL_MS,
    STATE_TTL_ENV,
    CacheEntry,
    StateCache,
    fingerprint,
)
from .validator import EditBatch, EditValidator

__all__ = [
    # Line model
    "INSERTED",
    "Line",
    "LineModel",
    # Requests
    "EditAction",
    "EditOperation",
    "EditRequest",
    "MatchCondition",
    "MatchKind",
    "normalize_edit",
    "normalize_edits",
    # Validation / application
    "EditBatch",
    "EditValidator",
    "ApplyResult",
    "EditApplier",
    "EditOutcome",
    "OutcomeStatus",
    # Diff
    "diff_stats",
    "generate_diff",
    # State cache
    "DEFAULT_STATE_TTL_MS",
    "STATE_TTL_ENV",
    "CacheEntry",
    "StateCache",
    "fingerprint",
    # Orchestration
    "EditPreview",
    "EditResult",
    "FileEditor",
    "preview_edits",
    "format_line_info",
    # File I/O
    "AllowedDirectory",
    "FileOperations",
    "IOResult",
    "IOStatus",
    "PathResolver",
    "ResolvedPath",
    # Errors
    "EditConflictError",
    "EditError",
    "EditRangeError",
    "EditValidationError",
    "InvalidEditRequestError",
    "InvalidPatternError",
    "MatchNotFoundError",
    "PathAccessError",
    "StateNotFoundError",
]
