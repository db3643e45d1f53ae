"""Edit orchestration: preview, apply and approve line-based edit batches.

Flow for one call:
    read file -> LineModel.build -> EditValidator.validate
    -> EditApplier.apply -> render -> generate_diff
    -> dry run: save (path, edits) in the StateCache, return diff + state id
    -> otherwise: write file, drop any cache entry for the same edit set

Any failure before the write leaves the file and the cache untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .applier import EditApplier, EditOutcome
from .diff import diff_stats, generate_diff
from .edit_request import EditRequest, normalize_edits
from .exceptions import StateNotFoundError
from .file_ops import FileOperations
from .line_model import LineModel
from .state_cache import StateCache, fingerprint
from .validator import EditValidator

logger = logging.getLogger(__name__)


@dataclass
class EditPreview:
    """Pure result of applying an edit set to a text."""

    original: str
    modified: str
    diff: str
    outcomes: list[EditOutcome]

    @property
    def changed(self) -> bool:
        return self.original != self.modified

    def outcomes_by_line(self) -> dict[int, EditOutcome]:
        """Outcomes keyed by nominal line number (later requests win on ties)."""
        return {outcome.line_number: outcome for outcome in self.outcomes}


@dataclass
class EditResult(EditPreview):
    """Result of an edit against a file on disk."""

    path: str = ""
    dry_run: bool = False
    state_id: str | None = None
    stats: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "status": "success",
            "path": self.path,
            "dry_run": self.dry_run,
            "changed": self.changed,
            "diff": self.diff,
            "outcomes": [outcome.model_dump(mode="json") for outcome in self.outcomes],
            "lines_added": self.stats.get("added", 0),
            "lines_removed": self.stats.get("removed", 0),
            "lines_modified": self.stats.get("modified", 0),
        }
        if self.state_id is not None:
            data["state_id"] = self.state_id
        return data


def preview_edits(content: str, edits: Sequence[Any], label: str = "file") -> EditPreview:
    """Apply ``edits`` to ``content`` in memory.

    Args:
        content: Current file text
        edits: Edits in any accepted shape
        label: Name shown in the diff headers

    Returns:
        EditPreview with the new text, unified diff and per-edit outcomes

    Raises:
        EditValidationError: Batch rejected before any change
        MatchNotFoundError: A match condition was not found while applying
    """
    requests = normalize_edits(edits)
    model = LineModel.build(content)
    batch = EditValidator(model).validate(requests)
    result = EditApplier(model).apply(batch.requests)
    modified = model.render(result.lines)
    return EditPreview(
        original=content,
        modified=modified,
        diff=generate_diff(content, modified, label),
        outcomes=result.outcomes,
    )


class FileEditor:
    """Applies edit batches to files and manages the dry-run/approve cycle.

    Args:
        state_cache: Store for pending dry runs
        encoding: Text encoding for reads and writes
    """

    def __init__(self, state_cache: StateCache, encoding: str = "utf-8"):
        self.state_cache = state_cache
        self.encoding = encoding

    def read(self, path: Path) -> str:
        """Read the current file text.

        Raises:
            FileNotFoundError: File does not exist
            OSError: Any other read failure
        """
        return FileOperations.read_text(path, encoding=self.encoding).unwrap()

    def _write(self, path: Path, content: str) -> None:
        FileOperations.write_text(path, content, encoding=self.encoding).unwrap()

    def edit_file(self, path: Path, edits: Sequence[Any], dry_run: bool = False) -> EditResult:
        """Preview or apply an edit batch to ``path``.

        On a dry run the normalized edit set is cached and its state id
        returned for a later approve(). Otherwise the file is written and
        any pending dry run of the same edit set is discarded.
        """
        requests = normalize_edits(edits)
        original = self.read(path)
        preview = preview_edits(original, requests, label=str(path))

        state_id: str | None = None
        if dry_run:
            state_id = self.state_cache.save(str(path), requests)
            logger.info(f"Dry run for {path}: {len(requests)} edit(s), state {state_id}")
        else:
            self._commit(path, preview)
            self.state_cache.delete(fingerprint(str(path), requests))

        return self._result(path, preview, dry_run=dry_run, state_id=state_id)

    def approve(self, state_id: str) -> EditResult:
        """Apply a previously previewed edit set to the file's current content.

        The cache entry is removed only after the file was written, so a
        failed approval can be retried.

        Raises:
            StateNotFoundError: Unknown or expired state id
            EditValidationError / MatchNotFoundError: Edits no longer apply
            FileNotFoundError / OSError: File could not be read or written
        """
        entry = self.state_cache.get(state_id)
        if entry is None:
            raise StateNotFoundError(state_id)

        path = Path(entry.path)
        original = self.read(path)
        preview = preview_edits(original, list(entry.edits), label=entry.path)
        self._commit(path, preview)
        self.state_cache.delete(state_id)
        logger.info(f"Approved edit state {state_id} for {path}")
        return self._result(path, preview, dry_run=False, state_id=None)

    def pending_edits(self, state_id: str) -> list[EditRequest] | None:
        """Copy of the cached edit list for ``state_id``, or None."""
        entry = self.state_cache.get(state_id)
        return list(entry.edits) if entry is not None else None

    def _commit(self, path: Path, preview: EditPreview) -> None:
        if not preview.changed:
            logger.debug(f"No changes for {path}, skipping write")
            return
        self._write(path, preview.modified)
        logger.info(f"Wrote edits to {path}")

    @staticmethod
    def _result(
        path: Path, preview: EditPreview, dry_run: bool, state_id: str | None
    ) -> EditResult:
        return EditResult(
            original=preview.original,
            modified=preview.modified,
            diff=preview.diff,
            outcomes=preview.outcomes,
            path=str(path),
            dry_run=dry_run,
            state_id=state_id,
            stats=diff_stats(preview.original, preview.modified),
        )


__all__ = ["EditPreview", "EditResult", "FileEditor", "preview_edits"]
