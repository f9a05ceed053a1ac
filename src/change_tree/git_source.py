"""Read working-copy changes from a git repository."""

from pathlib import Path

from git import InvalidGitRepositoryError, NoSuchPathError, Repo

from .errors import RepositoryNotFoundError
from .models import ChangeFileRecord, ChangeFolderNode, ChangeStatus
from .tree import ChangeTreeBuilder


class GitChangeSource:
    """Lists the files that differ between HEAD and the working tree."""

    def __init__(self, repo_path: str | Path | None = None, include_untracked: bool = True):
        self.repo_path = Path(repo_path) if repo_path else Path.cwd()
        self.include_untracked = include_untracked
        try:
            self.repo = Repo(self.repo_path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryNotFoundError(f"Not a git repository: {self.repo_path}") from e

    @property
    def working_dir(self) -> Path:
        return Path(self.repo.working_tree_dir)

    def has_changes(self) -> bool:
        """Check if the working tree differs from HEAD."""
        return self.repo.is_dirty(untracked_files=self.include_untracked)

    def get_changes(self) -> list[ChangeFileRecord]:
        """Get all changed files, staged or not, relative to the repository root."""
        changes: list[ChangeFileRecord] = []

        if self.repo.head.is_valid():
            for item in self.repo.head.commit.diff(None):
                changes.extend(_records_from_diff(item))
        else:
            # No commits yet: everything in the index is new
            for path, _stage in self.repo.index.entries:
                changes.append(ChangeFileRecord(path=path, status=ChangeStatus.ADDED))

        if self.include_untracked:
            for path in self.repo.untracked_files:
                changes.append(ChangeFileRecord(path=path, status=ChangeStatus.ADDED))

        return changes

    def get_change_tree(self, builder: ChangeTreeBuilder | None = None) -> ChangeFolderNode:
        """Build the folder tree for the current changes."""
        builder = builder or ChangeTreeBuilder(separator="/")
        return builder.build(self.get_changes())


def _records_from_diff(item) -> list[ChangeFileRecord]:
    """Convert a GitPython diff entry into change records."""
    if item.renamed_file:
        return [
            ChangeFileRecord(path=item.a_path, status=ChangeStatus.DELETED),
            ChangeFileRecord(path=item.b_path, status=ChangeStatus.ADDED),
        ]

    status = ChangeStatus.from_code(item.change_type)
    if status is None:
        return []
    path = item.a_path if status is ChangeStatus.DELETED else (item.b_path or item.a_path)
    return [ChangeFileRecord(path=path, status=status)]


C_ESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "t": 0x09,
    "n": 0x0A,
    "v": 0x0B,
    "f": 0x0C,
    "r": 0x0D,
    '"': 0x22,
    "\\": 0x5C,
}


def unquote_path(path: str) -> str:
    """Undo git's C-style quoting of unusual paths (``core.quotepath``).

    Octal escapes are raw bytes of the UTF-8 encoded name. Paths that are
    not wrapped in double quotes are returned unchanged.
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path

    inner = path[1:-1]
    raw = bytearray()
    i = 0
    while i < len(inner):
        char = inner[i]
        if char != "\\" or i + 1 == len(inner):
            raw.extend(char.encode("utf-8"))
            i += 1
            continue

        escape = inner[i + 1]
        octal = inner[i + 1 : i + 4]
        if len(octal) == 3 and all(c in "01234567" for c in octal):
            raw.append(int(octal, 8) & 0xFF)
            i += 4
        elif escape in C_ESCAPES:
            raw.append(C_ESCAPES[escape])
            i += 2
        else:
            raw.extend(escape.encode("utf-8"))
            i += 2

    return raw.decode("utf-8", errors="replace")


def records_from_name_status(text: str) -> list[ChangeFileRecord]:
    """
    Parse ``git diff --name-status`` output.

    Each line is ``STATUS<TAB>PATH`` or, for renames and copies,
    ``STATUS<TAB>OLD<TAB>NEW``. Quoted paths are unquoted. Blank lines and
    unknown statuses are skipped.
    """
    records: list[ChangeFileRecord] = []

    for line in text.splitlines():
        parts = line.rstrip("\r\n").split("\t")
        if len(parts) < 2:
            continue
        parts[1:] = [unquote_path(part) for part in parts[1:]]
        code = parts[0].strip().upper()
        status = ChangeStatus.from_code(code)
        if status is None:
            continue

        if code.startswith(("R", "C")) and len(parts) >= 3:
            if code.startswith("R"):
                records.append(ChangeFileRecord(path=parts[1], status=ChangeStatus.DELETED))
            records.append(ChangeFileRecord(path=parts[2], status=ChangeStatus.ADDED))
        else:
            records.append(ChangeFileRecord(path=parts[1], status=status))

    return records
