"""Depth-bounded directory walker behind ``filesystem.list_directory``.

Entries keep the order the operating system enumerates them in. A single entry
that cannot be stat'ed is kept and marked as access denied, and a subdirectory
that cannot be opened is reported the same way without stopping its siblings.

Symbolic links are classified by the link itself, so a link to a directory is
listed as a file and never descended. Termination rests on the depth bound
alone; there is no visited-path bookkeeping.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass, field
from enum import Enum

from ..formatting import format_bytes, format_date

logger = logging.getLogger(__name__)

DIRECTORY_ICON = "📁"
FILE_ICON = "📄"
ACCESS_DENIED = "access denied"


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    path: str
    kind: EntryKind
    accessible: bool = True
    size: int | None = None
    modified: float | None = None

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    def render(self) -> str:
        if self.is_dir:
            detail = format_date(self.modified) if self.accessible and self.modified is not None else ACCESS_DENIED
            return f"{DIRECTORY_ICON} {self.name}/ ({detail})"
        if not self.accessible or self.modified is None:
            return f"{FILE_ICON} {self.name} ({ACCESS_DENIED})"
        if self.size is None:
            return f"{FILE_ICON} {self.name} ({format_date(self.modified)})"
        return f"{FILE_ICON} {self.name} ({format_bytes(self.size)}, {format_date(self.modified)})"


@dataclass
class SubdirectoryListing:
    """Nested listing of one subdirectory; ``listing`` is None when it could not be opened."""

    name: str
    listing: "DirectoryListing | None"


@dataclass
class DirectoryListing:
    path: str
    entries: list[DirectoryEntry] = field(default_factory=list)
    recursed: bool = False
    subdirectories: list[SubdirectoryListing] = field(default_factory=list)

    @property
    def directories(self) -> list[DirectoryEntry]:
        return [entry for entry in self.entries if entry.is_dir]

    @property
    def files(self) -> list[DirectoryEntry]:
        return [entry for entry in self.entries if not entry.is_dir]


def walk_directory(path: str, recursive: bool = False, max_depth: int = 3) -> DirectoryListing:
    """List ``path`` and, while depth remains and recursion is requested, its subdirectories.

    Raises OSError when ``path`` itself cannot be enumerated.
    """
    with os.scandir(path) as iterator:
        raw_entries = list(iterator)

    listing = DirectoryListing(path=path, entries=[_inspect(entry) for entry in raw_entries])
    if not recursive or max_depth <= 0:
        return listing

    listing.recursed = True
    for entry in listing.directories:
        try:
            child = walk_directory(entry.path, True, max_depth - 1)
        except OSError as exc:
            logger.debug("cannot descend into %s: %s", entry.path, exc)
            child = None
        listing.subdirectories.append(SubdirectoryListing(name=entry.name, listing=child))
    return listing


def _inspect(entry: os.DirEntry) -> DirectoryEntry:
    try:
        is_dir = entry.is_dir(follow_symlinks=False)
    except OSError:
        is_dir = False
    kind = EntryKind.DIRECTORY if is_dir else EntryKind.FILE
    try:
        info = os.stat(entry.path)
    except OSError:
        return DirectoryEntry(name=entry.name, path=entry.path, kind=kind, accessible=False)
    # Only regular files carry a size; a link to a directory shows just its date.
    size = info.st_size if stat.S_ISREG(info.st_mode) else None
    return DirectoryEntry(
        name=entry.name,
        path=entry.path,
        kind=kind,
        size=size,
        modified=info.st_mtime,
    )


def render_listing(listing: DirectoryListing) -> str:
    text = f"# Directory Listing: {listing.path}\n\n"
    text += "## Directories:\n" + "\n".join(entry.render() for entry in listing.directories) + "\n\n"
    text += "## Files:\n" + "\n".join(entry.render() for entry in listing.files)

    if listing.recursed:
        text += "\n\n## Subdirectories (recursive):\n"
        for sub in listing.subdirectories:
            if sub.listing is None:
                text += f"\n### {sub.name}/ ({ACCESS_DENIED})\n"
            else:
                text += f"\n### {sub.name}/\n{render_listing(sub.listing)}\n"
    return text
