"""Declarative patching of SWF-style movie documents."""

from swfpatcher.codec import JsonDocumentCodec, export_document_json, load_document_json
from swfpatcher.config import configure_logging, get_settings
from swfpatcher.engine.pipeline import apply_patch, apply_patch_file, load_patch_config
from swfpatcher.models import Document, PatchConfig
from swfpatcher.svg.compiler import compile_svg

__version__ = "0.1.0"

__all__ = [
    "Document",
    "JsonDocumentCodec",
    "PatchConfig",
    "apply_patch",
    "apply_patch_file",
    "compile_svg",
    "configure_logging",
    "export_document_json",
    "get_settings",
    "load_document_json",
    "load_patch_config",
]
