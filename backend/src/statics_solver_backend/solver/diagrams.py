from __future__ import annotations

import math
from typing import List, NamedTuple, Sequence, Tuple

import numpy as np

from statics_solver_backend.config import CONFIG
from statics_solver_backend.schemas.beam import (
    BeamConfig,
    Extremum,
    Load,
    MomentLoad,
    PointLoad,
    ReactionForce,
    TriangularLoad,
    UniformDistributedLoad,
)
from statics_solver_backend.solver.loads import load_boundaries

# A reaction placed at its support position
PlacedReaction = Tuple[float, ReactionForce]


class DiagramSamples(NamedTuple):
    x: np.ndarray
    shear: np.ndarray
    moment: np.ndarray


class DiagramExtrema(NamedTuple):
    max_shear: Extremum
    max_moment: Extremum
    min_moment: Extremum


def _add_unique_point(points: List[float], value: float, beam_length: float, tol: float = 1e-9) -> None:
    if math.isnan(value) or math.isinf(value):
        return
    clamped = min(max(value, 0.0), beam_length)
    for existing in points:
        if math.isclose(existing, clamped, abs_tol=tol, rel_tol=0.0):
            return
    points.append(clamped)


def build_axis(config: BeamConfig, sampling_points: int = CONFIG.diagram_sampling_points) -> np.ndarray:
    """Uniform samples across the span merged with every support and load boundary."""
    base_axis = np.linspace(0.0, config.length, num=sampling_points, dtype=float, endpoint=True)

    critical_points = base_axis.tolist()
    for support in config.supports:
        _add_unique_point(critical_points, support.position, config.length)
    for load in config.loads:
        for boundary in load_boundaries(load):
            _add_unique_point(critical_points, boundary, config.length)

    return np.array(sorted(critical_points), dtype=float)


def _passed(x_axis: np.ndarray, position: float) -> np.ndarray:
    return x_axis >= position - CONFIG.geometry_epsilon


def _covered_force_and_centroid(load: Load, x_axis: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Resultant and centroid of the part of a range load lying left of each x."""
    span = load.end - load.start
    covered = np.clip(x_axis - load.start, 0.0, span)

    if isinstance(load, UniformDistributedLoad):
        force = load.magnitude * covered
        centroid = load.start + covered / 2.0
    elif isinstance(load, TriangularLoad):
        # Covered part is itself a triangle rising from zero at ``start``
        ratio = covered / span
        force = load.peak_magnitude * covered * ratio / 2.0
        centroid = load.start + (2.0 * covered) / 3.0
    else:
        raise ValueError(f"Unsupported distributed load type: {type(load).__name__}")

    return force, centroid


def shear_diagram(config: BeamConfig, x_axis: np.ndarray, reactions: Sequence[PlacedReaction]) -> np.ndarray:
    shear = np.zeros_like(x_axis, dtype=float)

    for position, reaction in reactions:
        shear += reaction.vertical * _passed(x_axis, position)

    for load in config.loads:
        if isinstance(load, PointLoad):
            shear += load.magnitude * _passed(x_axis, load.position)
        elif isinstance(load, (UniformDistributedLoad, TriangularLoad)):
            force, _ = _covered_force_and_centroid(load, x_axis)
            shear += force
        elif not isinstance(load, MomentLoad):
            raise ValueError(f"Unsupported load type: {type(load).__name__}")

    return shear


def moment_diagram(config: BeamConfig, x_axis: np.ndarray, reactions: Sequence[PlacedReaction]) -> np.ndarray:
    """Sagging-positive bending moment from the free body left of each x."""
    moment = np.zeros_like(x_axis, dtype=float)

    for position, reaction in reactions:
        passed = _passed(x_axis, position)
        moment += reaction.vertical * np.maximum(x_axis - position, 0.0)
        moment -= reaction.moment * passed

    for load in config.loads:
        if isinstance(load, PointLoad):
            moment += load.magnitude * np.maximum(x_axis - load.position, 0.0)
        elif isinstance(load, (UniformDistributedLoad, TriangularLoad)):
            force, centroid = _covered_force_and_centroid(load, x_axis)
            moment += force * (x_axis - centroid)
        elif isinstance(load, MomentLoad):
            moment -= load.magnitude * _passed(x_axis, load.position)
        else:
            raise ValueError(f"Unsupported load type: {type(load).__name__}")

    return moment


def sample_diagrams(config: BeamConfig, reactions: Sequence[PlacedReaction]) -> DiagramSamples:
    x_axis = build_axis(config)
    return DiagramSamples(
        x=x_axis,
        shear=shear_diagram(config, x_axis, reactions),
        moment=moment_diagram(config, x_axis, reactions),
    )


def find_extrema(samples: DiagramSamples) -> DiagramExtrema:
    """Largest |shear| and the moment peaks, each at its first occurrence."""
    if samples.x.size == 0:
        return DiagramExtrema(Extremum(), Extremum(), Extremum())

    shear_idx = int(np.argmax(np.abs(samples.shear)))
    max_idx = int(np.argmax(samples.moment))
    min_idx = int(np.argmin(samples.moment))

    return DiagramExtrema(
        max_shear=Extremum(value=float(samples.shear[shear_idx]), position=float(samples.x[shear_idx])),
        max_moment=Extremum(value=float(samples.moment[max_idx]), position=float(samples.x[max_idx])),
        min_moment=Extremum(value=float(samples.moment[min_idx]), position=float(samples.x[min_idx])),
    )
