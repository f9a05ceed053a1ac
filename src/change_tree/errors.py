"""Exceptions raised by change-tree."""


class ChangeTreeError(Exception):
    """Base class for change-tree errors."""


class StructuralInconsistencyError(ChangeTreeError):
    """A built tree violates one of its structural invariants.

    This indicates a defect in the builder, not bad input.
    """


class RepositoryNotFoundError(ChangeTreeError):
    """The given path is not inside a git working copy."""


class ConfigError(ChangeTreeError):
    """The configuration file could not be read or validated."""
