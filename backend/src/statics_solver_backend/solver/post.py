from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from statics_solver_backend.config import CONFIG
from statics_solver_backend.schemas.beam import (
    DeflectionEstimate,
    Extremum,
    StressEstimate,
    Support,
)
from statics_solver_backend.solver.diagrams import DiagramSamples

logger = logging.getLogger(__name__)

# kN*m / cm^3 -> N*mm / mm^3
_STRESS_SCALE = 1e6 / 1e3
# MPa * cm^4 -> kN*m^2
_RIGIDITY_SCALE = 1e3 * 1e-8
_M_TO_MM = 1000.0


def estimate_max_stress(max_moment: Extremum, min_moment: Extremum, section_modulus_cm3: float) -> StressEstimate:
    """Bending stress sigma = M / S for the governing moment, in MPa."""
    governing = max(abs(max_moment.value), abs(min_moment.value))
    return StressEstimate(value=governing * _STRESS_SCALE / section_modulus_cm3)


def _cumulative_trapezoid(values: np.ndarray, x_axis: np.ndarray) -> np.ndarray:
    increments = 0.5 * (values[1:] + values[:-1]) * np.diff(x_axis)
    return np.concatenate(([0.0], np.cumsum(increments)))


def estimate_deflection(
    samples: DiagramSamples,
    supports: Sequence[Support],
    elastic_modulus_mpa: float,
    moment_of_inertia_cm4: float,
) -> Optional[DeflectionEstimate]:
    """
    Approximate the elastic line from the sampled moment diagram.

    The particular solution v0(x) = x * A(x) - B(x) uses the trapezoidal area
    A and first moment of area B of the M/EI diagram; the two integration
    constants are fitted to the support conditions (v = 0 at every support,
    plus zero slope at fixed supports) in the least-squares sense.
    """
    x_axis = samples.x
    if x_axis.size < 2:
        return None

    rigidity = elastic_modulus_mpa * moment_of_inertia_cm4 * _RIGIDITY_SCALE
    curvature = samples.moment / rigidity

    area = _cumulative_trapezoid(curvature, x_axis)
    first_moment = _cumulative_trapezoid(curvature * x_axis, x_axis)
    particular = x_axis * area - first_moment

    rows = []
    rhs = []
    for support in supports:
        if support.kind == "free":
            continue
        rows.append([support.position, 1.0])
        rhs.append(-float(np.interp(support.position, x_axis, particular)))
        if support.kind == "fixed":
            rows.append([1.0, 0.0])
            rhs.append(-float(np.interp(support.position, x_axis, area)))

    if not rows:
        return None

    coefficients, _, rank, _ = np.linalg.lstsq(np.array(rows), np.array(rhs), rcond=None)
    if rank < 2:
        logger.debug("Support conditions do not fix the elastic line; skipping deflection")
        return None

    deflection = particular + coefficients[0] * x_axis + coefficients[1]
    idx = int(np.argmax(np.abs(deflection)))
    return DeflectionEstimate(value=float(deflection[idx] * _M_TO_MM), position=float(x_axis[idx]))
