"""Build a folder tree from a flat list of change records."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .errors import StructuralInconsistencyError
from .models import ChangeFileRecord, ChangeFolderNode, ChangeStatus

logger = logging.getLogger(__name__)


@dataclass
class BuildStats:
    """Statistics from building a change tree."""

    records_seen: int = 0
    records_assigned: int = 0
    records_excluded: int = 0  # Invalid paths, and root-level files unless kept
    folders_created: int = 0
    distinct_parent_paths: int = 0


def split_path(path: str | None, separator: str = os.sep) -> list[str] | None:
    """Split a file path into segments.

    Returns None when the path cannot name a file: empty, whitespace only,
    or ending in a separator. Empty segments from doubled or leading
    separators are dropped.
    """
    if not path or not path.strip():
        return None
    if os.altsep and os.altsep != separator:
        path = path.replace(os.altsep, separator)
    if path.endswith(separator):
        return None
    segments = [segment for segment in path.split(separator) if segment]
    return segments or None


def parent_path(path: str | None, separator: str = os.sep) -> str | None:
    """Return the parent directory of ``path`` ("" for root-level files)."""
    segments = split_path(path, separator)
    if segments is None:
        return None
    return separator.join(segments[:-1])


def _coerce_record(item: Any) -> ChangeFileRecord | None:
    """Accept records or ``(path, status)`` pairs; None if unusable."""
    if isinstance(item, ChangeFileRecord):
        return item
    try:
        path, status = item
    except (TypeError, ValueError):
        return None
    if not isinstance(path, str):
        return None
    if not isinstance(status, ChangeStatus):
        status = ChangeStatus.from_code(status) if isinstance(status, str) else None
        if status is None:
            return None
    return ChangeFileRecord(path=path, status=status)


class ChangeTreeBuilder:
    """Turns change records into a ``ChangeFolderNode`` hierarchy.

    The builder keeps no state between calls; every build allocates a fresh
    tree.
    """

    def __init__(
        self,
        separator: str = os.sep,
        keep_root_changes: bool = False,
        validate: bool = False,
    ):
        self.separator = separator
        self.keep_root_changes = keep_root_changes
        self.validate = validate

    def build(self, changes: Iterable[Any] | None) -> ChangeFolderNode:
        """Build the tree and return its root."""
        root, _ = self.build_with_stats(changes)
        return root

    def build_with_stats(
        self, changes: Iterable[Any] | None
    ) -> tuple[ChangeFolderNode, BuildStats]:
        """
        Build the tree and report what happened to each record.

        Args:
            changes: Change records or (path, status) pairs, in any order

        Returns:
            Tuple of (root node, BuildStats)
        """
        stats = BuildStats()
        root = ChangeFolderNode(separator=self.separator)

        # (record, parent segments) for every usable record, in input order
        located: list[tuple[ChangeFileRecord, list[str]]] = []
        for item in changes or ():
            stats.records_seen += 1
            record = _coerce_record(item)
            segments = split_path(record.path, self.separator) if record else None
            if segments is None:
                stats.records_excluded += 1
                logger.debug("Skipping change with unusable path: %r", item)
                continue
            located.append((record, segments[:-1]))

        # Distinct parent paths in first-occurrence order
        distinct: dict[str, list[str]] = {}
        for _, parent in located:
            key = self.separator.join(parent)
            if parent and key not in distinct:
                distinct[key] = parent
        stats.distinct_parent_paths = len(distinct)

        assigned: set[str] = set()
        for parent_key, segments in distinct.items():
            node = root
            for segment in segments:
                child = node.get_child(segment)
                if child is None:
                    child = node.add_child(segment)
                    stats.folders_created += 1
                node = child

            folded = parent_key.casefold()
            if folded in assigned:
                continue
            assigned.add(folded)

            matches = [
                record
                for record, parent in located
                if parent and self.separator.join(parent).casefold() == folded
            ]
            node.direct_changes.extend(matches)
            stats.records_assigned += len(matches)

        root_level = [record for record, parent in located if not parent]
        if self.keep_root_changes:
            root.direct_changes.extend(root_level)
            stats.records_assigned += len(root_level)
        else:
            stats.records_excluded += len(root_level)
            for record in root_level:
                logger.debug("Skipping root-level change: %s", record.path)

        if self.validate:
            validate_tree(root, self.separator)

        return root, stats


def build_change_tree(
    changes: Iterable[Any] | None,
    separator: str = os.sep,
    keep_root_changes: bool = False,
) -> ChangeFolderNode:
    """Build a change tree with a one-off builder."""
    return ChangeTreeBuilder(separator, keep_root_changes).build(changes)


def validate_tree(
    root: ChangeFolderNode,
    separator: str | None = None,
    changes: Iterable[ChangeFileRecord] | None = None,
) -> None:
    """
    Check the structural invariants of a built tree.

    Args:
        root: Root node returned by a build
        separator: Separator the tree was built with (default: the root's)
        changes: Optional input records; each one with a parent directory
            must be attached somewhere in the tree

    Raises:
        StructuralInconsistencyError: If any invariant does not hold
    """
    separator = separator or root.separator
    attached_at: dict[int, str] = {}

    for full_path, node in root.walk(separator):
        seen: set[str] = set()
        for name in node.children:
            folded = name.casefold()
            if folded in seen:
                raise StructuralInconsistencyError(
                    f"Duplicate folder {name!r} under {full_path or '<root>'!r}"
                )
            seen.add(folded)

        for record in node.direct_changes:
            expected = parent_path(record.path, separator)
            if expected is None or expected.casefold() != full_path.casefold():
                raise StructuralInconsistencyError(
                    f"{record.path!r} attached to {full_path or '<root>'!r}"
                )
            previous = attached_at.setdefault(id(record), full_path)
            if previous != full_path:
                raise StructuralInconsistencyError(
                    f"{record.path!r} attached to both {previous!r} and {full_path!r}"
                )

    if changes is not None:
        for record in changes:
            if parent_path(record.path, separator) and id(record) not in attached_at:
                raise StructuralInconsistencyError(f"{record.path!r} missing from tree")
