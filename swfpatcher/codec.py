"""Document codec interface and the JSON interchange codec.

The binary container reader/writer is an external collaborator; anything
implementing ``DocumentCodec`` can be plugged into the pipeline and the batch
driver. ``JsonDocumentCodec`` stores the document model's JSON dump and is
used for exports, authoring modifications and tests.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, get_args

from pydantic import ValidationError

from swfpatcher.exceptions import DocumentCodecError, PatchIOError
from swfpatcher.models.document import CompressionMethod, Document

logger = logging.getLogger(__name__)

COMPRESSION_METHODS: tuple[str, ...] = get_args(CompressionMethod)


class DocumentCodec(Protocol):
    def decode(self, data: bytes) -> Document: ...

    def encode(self, document: Document, compression: str | None = None) -> bytes: ...


class JsonDocumentCodec:
    def __init__(self, indent: int | None = None) -> None:
        self.indent = indent

    def decode(self, data: bytes) -> Document:
        try:
            return Document.model_validate_json(data)
        except ValidationError as e:
            raise DocumentCodecError(f"Invalid document JSON: {e}") from e

    def encode(self, document: Document, compression: str | None = None) -> bytes:
        """Serialize ``document``; ``compression`` overrides the header's method."""
        if compression is not None:
            if compression not in COMPRESSION_METHODS:
                raise DocumentCodecError(
                    f"Unknown compression {compression!r} (expected one of {', '.join(COMPRESSION_METHODS)})"
                )
            header = document.header.model_copy(update={"compression": compression})
            document = document.model_copy(update={"header": header})
        return document.model_dump_json(by_alias=True, indent=self.indent).encode("utf-8")


def export_document_json(document: Document, path: Path | str, indent: int = 2) -> None:
    """Write a pretty-printed JSON dump, e.g. to look up tag IDs for a patch config."""
    out = Path(path)
    try:
        out.write_bytes(JsonDocumentCodec(indent=indent).encode(document))
    except OSError as e:
        raise PatchIOError(str(out), f"Failed to write document JSON ({e.strerror or e})") from e
    logger.info("Exported %d tags to %s", len(document.tags), out)


def load_document_json(path: Path | str) -> Document:
    src = Path(path)
    try:
        data = src.read_bytes()
    except OSError as e:
        raise PatchIOError(str(src), f"Failed to read document JSON ({e.strerror or e})") from e
    return JsonDocumentCodec().decode(data)
