"""Exception hierarchy for swfpatcher.

Every failure surfaced by a patch application derives from SwfPatchError so
callers can catch one type. Optional lookups that miss (patching an absent
tag, removing an unknown ID) are not errors and never raise.
"""

from __future__ import annotations


class SwfPatchError(Exception):
    """Base class for all swfpatcher errors."""


class ConfigError(SwfPatchError):
    """A patch or batch configuration could not be read or validated."""


class PatchIOError(SwfPatchError):
    """Reading or writing a file failed."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{message}: {path}")


class SourceError(SwfPatchError):
    """An asset source (SVG, bitmap, script) could not be used."""


class SVGParseError(SourceError):
    """Malformed SVG document or path data."""


class ArchiveError(SourceError):
    """An archive locator could not be resolved."""


class DocumentCodecError(SwfPatchError):
    """The document decoder or encoder rejected its input."""


class TagPatchError(SwfPatchError):
    """A field override could not be decoded into the field's type."""

    def __init__(self, kind: str, field: str, message: str) -> None:
        self.kind = kind
        self.field = field
        super().__init__(f"Failed to decode field '{field}' of {kind}: {message}")


class TagNotFoundError(SwfPatchError):
    """A tag required by the patch is missing from the document."""


class ElementConflictError(SwfPatchError):
    """A new element would break character ID uniqueness."""


class CompilerError(SwfPatchError):
    """The external script compiler failed or produced no usable output."""
