"""Exception hierarchy for descriptor reading and solution writing."""

from __future__ import annotations


class SlnBuilderError(Exception):
    """Base class for all errors raised by slnbuilder."""


class DescriptorError(SlnBuilderError):
    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class UnparseableDescriptor(DescriptorError):
    """A project file could not be opened or is not well-formed XML."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(path, f"cannot parse project file ({reason})")
        self.reason = reason


class UnsupportedDescriptorKind(DescriptorError, ValueError):
    """The file extension is neither a managed nor a native project."""

    def __init__(self, path: str, extension: str) -> None:
        super().__init__(path, f"unknown extension: {extension or '<none>'}")
        self.extension = extension


class MissingReferencedDescriptor(DescriptorError):
    """A project reference points at a file that does not exist."""

    def __init__(self, path: str, referenced_by: str) -> None:
        super().__init__(path, f"referenced by {referenced_by} but not found")
        self.referenced_by = referenced_by


class SolutionWriteError(SlnBuilderError):
    """The solution file could not be written."""

    def __init__(self, path: str, cause: OSError) -> None:
        super().__init__(f"cannot write solution {path}: {cause}")
        self.path = path
        self.cause = cause
