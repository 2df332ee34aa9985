"""Record of completed file operations, with undo.

Entries are kept in memory for the session, newest last. Undo reverses the
recorded (original, new) path pairs: moves and renames are moved back, copies
and created folders are removed. Deletes are recorded but cannot be undone.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from datetime import datetime

from .constants import DATE_FORMAT
from .domain import OperationResult


class HistoryError(Exception):
    pass


@dataclass
class HistoryEntry:
    id: int
    operation: str  # move, copy, delete, rename or create_folder
    description: str
    moves: list[tuple[str, str]] = field(default_factory=list)  # (original path, resulting path)
    to_trash: bool = False
    is_undone: bool = False
    created_at: str = ""

    @property
    def files_affected(self) -> int:
        return len(self.moves)

    @property
    def can_undo(self) -> bool:
        return not self.is_undone and self.operation != "delete"


def _plural(n: int) -> str:
    return f"{n} file{'s' if n != 1 else ''}"


class OperationHistory:
    def __init__(self, limit: int = 200):
        self._entries: list[HistoryEntry] = []
        self._next_id = 1
        self._limit = limit

    def entries(self) -> list[HistoryEntry]:
        """Newest first."""
        return list(reversed(self._entries))

    def get(self, entry_id: int) -> HistoryEntry | None:
        return next((e for e in self._entries if e.id == entry_id), None)

    @property
    def can_undo(self) -> bool:
        return any(e.can_undo for e in self._entries)

    def record(self, operation: str, description: str, moves, to_trash: bool = False) -> HistoryEntry:
        entry = HistoryEntry(
            id=self._next_id,
            operation=operation,
            description=description,
            moves=list(moves),
            to_trash=to_trash,
            created_at=datetime.now().strftime(DATE_FORMAT),
        )
        self._next_id += 1
        self._entries.append(entry)
        if len(self._entries) > self._limit:
            self._entries.pop(0)
        logging.debug(f"[history] recorded #{entry.id} {operation}: {description}")
        return entry

    def record_result(self, result: OperationResult, to_trash: bool = False) -> HistoryEntry | None:
        if not result.succeeded:
            return None
        if result.operation == "delete":
            moves = [(p, "") for p in result.succeeded]
            where = "to trash" if to_trash else "permanently"
            description = f"Deleted {_plural(len(moves))} {where}"
        else:
            moves = [(p, result.outputs[p]) for p in result.succeeded if p in result.outputs]
            verb = "Moved" if result.operation == "move" else "Copied"
            description = f"{verb} {_plural(len(moves))} to {result.destination}"
        return self.record(result.operation, description, moves, to_trash=to_trash)

    def undo(self, entry_id: int | None = None) -> HistoryEntry:
        """Undo ``entry_id``, or the newest undoable entry when omitted."""
        if entry_id is None:
            entry = next((e for e in reversed(self._entries) if e.can_undo), None)
            if entry is None:
                raise HistoryError("Nothing to undo")
        else:
            entry = self.get(entry_id)
            if entry is None:
                raise HistoryError(f"Unknown history entry: {entry_id}")
        if entry.is_undone:
            raise HistoryError("Operation has already been undone")
        if entry.operation == "delete":
            if entry.to_trash:
                raise HistoryError("Deleted files are in the trash; restore them from there")
            raise HistoryError("Cannot undo a permanent delete")

        errors = []
        for original, new in reversed(entry.moves):
            try:
                self._reverse(entry.operation, original, new)
            except OSError as e:
                logging.warning(f"[history] could not undo {new} -> {original}: {e}")
                errors.append(f"{os.path.basename(new)}: {e}")
        if errors:
            raise HistoryError(f"Some files could not be restored: {'; '.join(errors)}")
        entry.is_undone = True
        logging.info(f"[history] undone #{entry.id} {entry.description}")
        return entry

    @staticmethod
    def _reverse(operation: str, original: str, new: str):
        if not os.path.lexists(new):
            return
        if operation in ("move", "rename"):
            if os.path.lexists(original):
                raise FileExistsError(f"File already exists: {original}")
            parent = os.path.dirname(original)
            if parent:
                os.makedirs(parent, exist_ok=True)
            shutil.move(new, original)
        elif operation == "copy":
            if os.path.isdir(new) and not os.path.islink(new):
                shutil.rmtree(new)
            else:
                os.remove(new)
        elif operation == "create_folder":
            # only an empty folder is removed
            os.rmdir(new)

    def clear(self):
        self._entries.clear()


__all__ = ["HistoryEntry", "HistoryError", "OperationHistory"]
