"""Step registry. Every patch step is a plain function registered by decorator.

Usage:
    @patch_step(id="P2.01", phase=Phase.TAGS, dependencies=["P1.01"])
    def tag_modifications(ctx: PatchContext) -> None:
        apply_tag_modifications(ctx.document, ctx.config.swf.modifications)

Phases run in enum order and a step may only depend on steps of its own or an
earlier phase. Within those bounds the dependency chain fixes the application
order, and ``resolve_order`` turns it into a run list.
"""

from __future__ import annotations

import enum
import heapq
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from swfpatcher.engine.context import PatchContext

logger = logging.getLogger(__name__)


class Phase(enum.IntEnum):
    GEOMETRY = 0
    SCRIPTS = 1
    TAGS = 2
    ELEMENTS = 3


@dataclass
class StepSpec:
    id: str
    phase: Phase
    fn: Callable[["PatchContext"], None]
    dependencies: list[str] = field(default_factory=list)
    description: str = ""

    @property
    def sort_key(self) -> tuple[int, str]:
        return (int(self.phase), self.id)


class StepRegistry:
    def __init__(self) -> None:
        self._steps: dict[str, StepSpec] = {}

    def register(self, spec: StepSpec) -> None:
        if spec.id in self._steps:
            raise ValueError(f"Duplicate step ID: {spec.id}")
        self._steps[spec.id] = spec
        logger.debug("Registered step %s (%s)", spec.id, spec.phase.name)

    def validate(self) -> None:
        """Check every dependency exists and never points into a later phase."""
        for spec in self._steps.values():
            for dep_id in spec.dependencies:
                dep = self._steps.get(dep_id)
                if dep is None:
                    raise ValueError(f"Step {spec.id} depends on unknown step {dep_id}")
                if dep.phase > spec.phase:
                    raise ValueError(
                        f"Step {spec.id} ({spec.phase.name}) cannot depend on "
                        f"{dep_id} from later phase {dep.phase.name}"
                    )

    def resolve_order(self) -> list[StepSpec]:
        """Order all steps by phase, then dependencies, then ID."""
        self.validate()

        in_degree = {sid: len(spec.dependencies) for sid, spec in self._steps.items()}
        dependents: dict[str, list[str]] = {sid: [] for sid in self._steps}
        for sid, spec in self._steps.items():
            for dep_id in spec.dependencies:
                dependents[dep_id].append(sid)

        ready = [spec.sort_key for spec in self._steps.values() if in_degree[spec.id] == 0]
        heapq.heapify(ready)
        ordered: list[StepSpec] = []

        while ready:
            _, sid = heapq.heappop(ready)
            ordered.append(self._steps[sid])
            for other_id in dependents[sid]:
                in_degree[other_id] -= 1
                if in_degree[other_id] == 0:
                    heapq.heappush(ready, self._steps[other_id].sort_key)

        if len(ordered) != len(self._steps):
            stuck = sorted(set(self._steps) - {s.id for s in ordered})
            raise ValueError(f"Circular dependency detected among: {stuck}")

        return ordered


_registry = StepRegistry()


def get_registry() -> StepRegistry:
    return _registry


def patch_step(
    *,
    id: str,
    phase: Phase,
    dependencies: list[str] | None = None,
    description: str = "",
):
    """Decorator to register a patch step."""

    def decorator(fn: Callable[["PatchContext"], None]):
        _registry.register(
            StepSpec(id=id, phase=phase, fn=fn, dependencies=dependencies or [], description=description)
        )
        return fn

    return decorator
