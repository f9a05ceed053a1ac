"""Change records and folder nodes for change-tree."""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ChangeStatus(str, Enum):
    """Status of a changed file, using git's name-status letters."""

    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_code(cls, code: str) -> ChangeStatus | None:
        """Map a git status letter (optionally with a score, e.g. R100) to a status.

        Renames and copies count as additions of the new path, type changes
        as modifications. Returns None for codes with no counterpart.
        """
        if not code:
            return None
        letter = code.strip()[:1].upper()
        if letter in ("A", "R", "C"):
            return cls.ADDED
        if letter in ("M", "T"):
            return cls.MODIFIED
        if letter == "D":
            return cls.DELETED
        return None


@dataclass(frozen=True)
class ChangeFileRecord:
    """A single changed file, relative to the repository root."""

    path: str
    status: ChangeStatus

    def filename(self, separator: str = os.sep) -> str:
        """Final path segment when the path is split on ``separator``."""
        path = self.path
        if os.altsep and os.altsep != separator:
            path = path.replace(os.altsep, separator)
        return path.rstrip(separator).rsplit(separator, 1)[-1]

    @property
    def name(self) -> str:
        """Filename for the platform separator."""
        return self.filename()

    def to_dict(self, separator: str = os.sep) -> dict[str, Any]:
        return {
            "path": self.path,
            "name": self.filename(separator),
            "status": self.status.label,
        }


@dataclass(eq=False)
class ChangeFolderNode:
    """A directory level in the change tree.

    Children are kept in insertion order and looked up case-insensitively;
    the first-seen casing of a name is the one stored. ``separator`` is the
    one the tree was built with and names the node's direct changes.
    """

    name: str = ""
    children: dict[str, ChangeFolderNode] = field(default_factory=dict)
    direct_changes: list[ChangeFileRecord] = field(default_factory=list)
    separator: str = os.sep
    _index: dict[str, ChangeFolderNode] = field(default_factory=dict, init=False, repr=False)

    def get_child(self, name: str) -> ChangeFolderNode | None:
        """Return the child whose name matches ``name`` ignoring case."""
        if len(self._index) != len(self.children):
            # children was edited directly; first-seen casing still wins
            self._index = {}
            for child_name, child in self.children.items():
                self._index.setdefault(child_name.casefold(), child)
        return self._index.get(name.casefold())

    def add_child(self, name: str) -> ChangeFolderNode:
        """Return the matching child, creating it if none exists."""
        child = self.get_child(name)
        if child is None:
            child = ChangeFolderNode(name=name, separator=self.separator)
            self.children[name] = child
            self._index[name.casefold()] = child
        return child

    def change_name(self, change: ChangeFileRecord) -> str:
        """Filename of one of this node's changes."""
        return change.filename(self.separator)

    def find(self, path: str, separator: str | None = None) -> ChangeFolderNode | None:
        """Find a descendant by its path relative to this node."""
        separator = separator or self.separator
        node: ChangeFolderNode | None = self
        for segment in (s for s in path.split(separator) if s):
            node = node.get_child(segment)
            if node is None:
                return None
        return node

    def walk(
        self, separator: str | None = None, prefix: str = ""
    ) -> Iterator[tuple[str, ChangeFolderNode]]:
        """Yield ``(full_path, node)`` depth-first, parents before children."""
        separator = separator or self.separator
        yield prefix, self
        for child_name, child in self.children.items():
            child_path = f"{prefix}{separator}{child_name}" if prefix else child_name
            yield from child.walk(separator, child_path)

    def iter_changes(self) -> Iterator[ChangeFileRecord]:
        """Yield every change record in this subtree, depth-first."""
        for child in self.children.values():
            yield from child.iter_changes()
        yield from self.direct_changes

    @property
    def depth(self) -> int:
        """Number of folder levels below this node."""
        if not self.children:
            return 0
        return 1 + max(child.depth for child in self.children.values())

    @property
    def total_changes(self) -> int:
        return sum(1 for _ in self.iter_changes())

    @property
    def is_empty(self) -> bool:
        return not self.children and not self.direct_changes

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dictionary for JSON output."""
        return {
            "name": self.name,
            "children": [child.to_dict() for child in self.children.values()],
            "changes": [change.to_dict(self.separator) for change in self.direct_changes],
        }
