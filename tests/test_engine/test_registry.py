"""Tests for the step registry and its ordering."""

import pytest

import swfpatcher.engine.steps  # noqa: F401
from swfpatcher.engine.registry import Phase, StepRegistry, StepSpec, get_registry


def _noop(ctx):
    pass


def _registry(*specs):
    registry = StepRegistry()
    for sid, phase, deps in specs:
        registry.register(StepSpec(id=sid, phase=phase, fn=_noop, dependencies=deps))
    return registry


def _order(registry):
    return [s.id for s in registry.resolve_order()]


# ---------------------------------------------------------------------------
# Built-in steps
# ---------------------------------------------------------------------------


def test_builtin_application_order():
    order = [s.fn.__name__ for s in get_registry().resolve_order()]
    assert order == [
        "transparency",
        "shape_replacement",
        "scripts",
        "tag_modifications",
        "stage_bounds",
        "new_elements",
        "element_removal",
    ]


def test_builtin_phases_never_go_backwards():
    phases = [s.phase for s in get_registry().resolve_order()]
    assert phases == sorted(phases)
    assert phases[0] == Phase.GEOMETRY and phases[-1] == Phase.ELEMENTS


# ---------------------------------------------------------------------------
# Ordering rules
# ---------------------------------------------------------------------------


def test_dependencies_override_id_order():
    registry = _registry(("A", Phase.TAGS, ["B"]), ("B", Phase.TAGS, []))
    assert _order(registry) == ["B", "A"]


def test_phase_wins_over_id():
    registry = _registry(("A", Phase.ELEMENTS, []), ("Z", Phase.GEOMETRY, []), ("M", Phase.TAGS, []))
    assert _order(registry) == ["Z", "M", "A"]


def test_phase_wins_once_dependency_is_met():
    registry = _registry(
        ("A1", Phase.GEOMETRY, []),
        ("A2", Phase.GEOMETRY, ["A1"]),
        ("B1", Phase.SCRIPTS, []),
    )
    assert _order(registry) == ["A1", "A2", "B1"]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def test_duplicate_id_rejected():
    registry = _registry(("A", Phase.TAGS, []))
    with pytest.raises(ValueError, match="Duplicate"):
        registry.register(StepSpec(id="A", phase=Phase.TAGS, fn=_noop))


def test_dependency_on_later_phase_rejected():
    registry = _registry(("A", Phase.GEOMETRY, ["B"]), ("B", Phase.ELEMENTS, []))
    with pytest.raises(ValueError, match="later phase ELEMENTS"):
        registry.resolve_order()


def test_unknown_dependency_rejected():
    registry = _registry(("A", Phase.TAGS, ["missing"]))
    with pytest.raises(ValueError, match="unknown step missing"):
        registry.resolve_order()


def test_cycle_detected():
    registry = _registry(("A", Phase.TAGS, ["B"]), ("B", Phase.TAGS, ["A"]))
    with pytest.raises(ValueError, match="Circular"):
        registry.resolve_order()
