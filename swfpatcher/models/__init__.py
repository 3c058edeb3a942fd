"""Document and patch configuration models."""

from swfpatcher.models.document import Document, Header, Rect, Shape, Tag
from swfpatcher.models.patch_config import PatchConfig

__all__ = ["Document", "Header", "PatchConfig", "Rect", "Shape", "Tag"]
