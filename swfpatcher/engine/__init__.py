"""swfpatcher patch engine."""

from swfpatcher.engine.context import PatchContext
from swfpatcher.engine.registry import Phase, get_registry, patch_step

__all__ = [
    "patch_step",
    "Phase",
    "get_registry",
    "PatchContext",
]
