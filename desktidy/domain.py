import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class FileItem:
    """One entry of a directory listing.

    ``path`` is the identifier used by the selection model. Position in the
    listing is never stored here; it is recomputed from the listing order.
    """

    path: str
    name: str
    extension: str = ""
    size: int = 0
    size_formatted: str = "0B"
    created_at: str = ""
    modified_at: str = ""
    is_directory: bool = False
    is_hidden: bool = False
    category: str = "others"

    @classmethod
    def from_path(cls, path: str):
        # Imported lazily: listing depends on this module.
        from .listing import file_info

        return file_info(path)

    @classmethod
    def placeholder(cls, path: str):
        """Item with only a path, for listings built from bare identifiers."""
        return cls(path=path, name=os.path.basename(path) or path)


def item_id(item) -> str:
    return item if isinstance(item, str) else item.path


def item_ids(items: Iterable) -> list[str]:
    """Identifiers of a listing, in listing order. Accepts items or plain paths."""
    if not items:
        return []
    return [item_id(it) for it in items]


class OverwriteStrategy(str, Enum):
    OVERWRITE = "overwrite"
    RENAME = "rename"
    SKIP = "skip"

    @classmethod
    def parse(cls, value) -> "OverwriteStrategy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.RENAME


@dataclass
class OperationResult:
    operation: str  # "move", "copy" or "delete"
    destination: str | None = None
    succeeded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)  # source path -> error text
    outputs: dict[str, str] = field(default_factory=dict)  # source path -> resulting path
    to_trash: bool = False  # delete only

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def processed(self) -> int:
        return len(self.succeeded) + len(self.skipped) + len(self.failures)

    def raise_for_failures(self):
        if self.failures:
            from .file_ops import BatchOperationError

            raise BatchOperationError(self)


@dataclass(frozen=True)
class FileBrowserState:
    directory: str
    items: list[FileItem]
    selected: list[str]
    selected_count: int
    total_count: int
    is_all_selected: bool
    busy_task: str | None = None
    can_go_back: bool = False
    view_mode: str = "grid"

    @property
    def has_selection(self) -> bool:
        return self.selected_count > 0
