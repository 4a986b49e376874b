from __future__ import annotations

from typing import NamedTuple, Tuple

from statics_solver_backend.schemas.beam import (
    Load,
    MomentLoad,
    PointLoad,
    TriangularLoad,
    UniformDistributedLoad,
)


class EquivalentLoad(NamedTuple):
    force: float
    position: float
    moment: float = 0.0


def equivalent_load(load: Load) -> EquivalentLoad:
    """Reduce a load to a concentrated force at its centroid plus any pure moment."""
    if isinstance(load, PointLoad):
        return EquivalentLoad(load.magnitude, load.position)

    if isinstance(load, UniformDistributedLoad):
        span = load.end - load.start
        return EquivalentLoad(load.magnitude * span, load.start + span / 2.0)

    if isinstance(load, TriangularLoad):
        span = load.end - load.start
        return EquivalentLoad(load.peak_magnitude * span / 2.0, load.start + (2.0 * span) / 3.0)

    if isinstance(load, MomentLoad):
        return EquivalentLoad(0.0, load.position, load.magnitude)

    raise ValueError(f"Unsupported load type: {type(load).__name__}")


def load_boundaries(load: Load) -> Tuple[float, ...]:
    """Positions where the load introduces a kink or jump in the diagrams."""
    if isinstance(load, (PointLoad, MomentLoad)):
        return (load.position,)
    if isinstance(load, (UniformDistributedLoad, TriangularLoad)):
        return (load.start, load.end)
    raise ValueError(f"Unsupported load type: {type(load).__name__}")


def total_vertical_force(loads) -> float:
    return sum(equivalent_load(load).force for load in loads)


def moment_about(loads, reference: float) -> float:
    """Counterclockwise moment of all loads about ``reference``."""
    total = 0.0
    for load in loads:
        equivalent = equivalent_load(load)
        total += equivalent.force * (equivalent.position - reference) + equivalent.moment
    return total
