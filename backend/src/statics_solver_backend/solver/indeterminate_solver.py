"""
Closed-form reactions for the two statically indeterminate beam patterns.

Both work in a local coordinate ``u`` measured along the span from a
reference support. Loads are first reduced to three primitives (a force, a
couple, a linearly varying distributed segment); parts lying outside the span
are carried to the nearest support as a force plus the couple they produce
about it. The redundant quantities come from closed-form formulas per
primitive, and the remaining reactions are back-solved from global
equilibrium.
"""

from __future__ import annotations

import logging
from typing import List, NamedTuple, Tuple

from statics_solver_backend.schemas.beam import (
    Load,
    MomentLoad,
    PointLoad,
    ReactionForce,
    Support,
    TriangularLoad,
    UniformDistributedLoad,
)
from statics_solver_backend.solver.loads import moment_about, total_vertical_force

logger = logging.getLogger(__name__)


class _Force(NamedTuple):
    u: float
    force: float


class _Couple(NamedTuple):
    u: float
    moment: float


class _Linear(NamedTuple):
    start: float
    end: float
    q_start: float
    q_end: float
    # True for a constant-intensity segment coming from a UDL
    uniform: bool


def _to_local(load: Load, origin: float, direction: float) -> List[object]:
    """Express a load in the local frame u = direction * (x - origin)."""
    if isinstance(load, PointLoad):
        return [_Force(direction * (load.position - origin), load.magnitude)]

    if isinstance(load, MomentLoad):
        # Mirroring the axis reverses the rotation sense
        return [_Couple(direction * (load.position - origin), direction * load.magnitude)]

    if isinstance(load, UniformDistributedLoad):
        q_start = q_end = load.magnitude
        uniform = True
    elif isinstance(load, TriangularLoad):
        q_start, q_end = 0.0, load.peak_magnitude
        uniform = False
    else:
        raise ValueError(f"Unsupported load type: {type(load).__name__}")

    u_start = direction * (load.start - origin)
    u_end = direction * (load.end - origin)
    if u_start > u_end:
        u_start, u_end, q_start, q_end = u_end, u_start, q_end, q_start
    return [_Linear(u_start, u_end, q_start, q_end, uniform)]


def _intensity_at(segment: _Linear, u: float) -> float:
    ratio = (u - segment.start) / (segment.end - segment.start)
    return segment.q_start + ratio * (segment.q_end - segment.q_start)


def _clip(segment: _Linear, lo: float, hi: float):
    start = max(segment.start, lo)
    end = min(segment.end, hi)
    if end <= start:
        return None
    return _Linear(start, end, _intensity_at(segment, start), _intensity_at(segment, end), segment.uniform)


def _resultant(segment: _Linear) -> _Force:
    length = segment.end - segment.start
    force = 0.5 * (segment.q_start + segment.q_end) * length
    total = segment.q_start + segment.q_end
    if abs(total) < 1e-12:
        return _Force(segment.start + length / 2.0, force)
    centroid = segment.start + length * (segment.q_start + 2.0 * segment.q_end) / (3.0 * total)
    return _Force(centroid, force)


def _split_span(primitives: List[object], span: float) -> Tuple[List[object], List[_Force]]:
    """Separate in-span primitives from resultants of the parts hanging outside."""
    inside: List[object] = []
    outside: List[_Force] = []
    for primitive in primitives:
        if isinstance(primitive, _Linear):
            for lo, hi, target in ((float("-inf"), 0.0, outside), (0.0, span, inside), (span, float("inf"), outside)):
                piece = _clip(primitive, lo, hi)
                if piece is None:
                    continue
                target.append(_resultant(piece) if target is outside else piece)
        else:
            inside.append(primitive)
    return inside, outside


def _local_primitives(loads, origin: float, direction: float) -> List[object]:
    primitives: List[object] = []
    for load in loads:
        primitives.extend(_to_local(load, origin, direction))
    return primitives


# --------------------------------------------------------------------------
# Fixed - fixed
# --------------------------------------------------------------------------

def _fixed_end_moments(primitive, span: float) -> Tuple[float, float]:
    """Counterclockwise support moments (left, right) for one primitive."""
    if isinstance(primitive, _Force):
        u, force = primitive
        if u <= 0.0 or u >= span:
            # Carried to the support as a couple about it
            couple = force * (u if u <= 0.0 else u - span)
            return _fixed_end_moments(_Couple(min(max(u, 0.0), span), couple), span)
        a, b = u, span - u
        return -force * a * b**2 / span**2, force * a**2 * b / span**2

    if isinstance(primitive, _Couple):
        a = min(max(primitive.u, 0.0), span)
        b = span - a
        moment = primitive.moment
        return moment * b * (2.0 * a - b) / span**2, moment * a * (2.0 * b - a) / span**2

    if isinstance(primitive, _Linear):
        resultant = _resultant(primitive)
        if not primitive.uniform:
            return _fixed_end_moments(resultant, span)
        # Partial-UDL approximation: resultant at the centroid, reduced by the
        # spread factor of a centred UDL. Exact only for symmetric placement.
        loaded = primitive.end - primitive.start
        spread = 1.0 - loaded**2 / (3.0 * span**2)
        m_left, m_right = _fixed_end_moments(resultant, span)
        return m_left * spread, m_right * spread

    raise ValueError(f"Unsupported load primitive: {primitive!r}")


def solve_fixed_fixed(left: Support, right: Support, loads) -> Tuple[ReactionForce, ReactionForce]:
    """Approximate reactions for a beam with both ends fixed (degree 2)."""
    span = right.position - left.position
    if span <= 0:
        raise ValueError("Right support must be placed after the left support.")

    inside, outside = _split_span(_local_primitives(loads, left.position, 1.0), span)

    moment_left = 0.0
    moment_right = 0.0
    for primitive in inside + outside:
        m_left, m_right = _fixed_end_moments(primitive, span)
        moment_left += m_left
        moment_right += m_right

    vertical_right = -(moment_left + moment_right + moment_about(loads, left.position)) / span
    vertical_left = -total_vertical_force(loads) - vertical_right

    logger.debug("Fixed-fixed end moments: %.6f / %.6f", moment_left, moment_right)
    return (
        ReactionForce(horizontal=0.0, vertical=vertical_left, moment=moment_left),
        ReactionForce(horizontal=0.0, vertical=vertical_right, moment=moment_right),
    )


# --------------------------------------------------------------------------
# Propped cantilever (fixed + roller)
# --------------------------------------------------------------------------

def _linear_moment_integral(segment: _Linear, span: float) -> float:
    """Integral of q(u) * u^2 * (3L - u) over the segment, q linear in u."""
    slope = (segment.q_end - segment.q_start) / (segment.end - segment.start)
    intercept = segment.q_start - slope * segment.start

    def antiderivative(u: float) -> float:
        return intercept * (span * u**3 - u**4 / 4.0) + slope * (3.0 * span * u**4 / 4.0 - u**5 / 5.0)

    return antiderivative(segment.end) - antiderivative(segment.start)


def _prop_reaction(primitive, span: float) -> float:
    """Roller reaction from zero deflection at the prop of a cantilever."""
    if isinstance(primitive, _Force):
        u, force = primitive
        if u <= 0.0:
            return 0.0
        if u >= span:
            return -force - 3.0 * force * (u - span) / (2.0 * span)
        return -force * u**2 * (3.0 * span - u) / (2.0 * span**3)

    if isinstance(primitive, _Couple):
        u = min(max(primitive.u, 0.0), span)
        return -3.0 * primitive.moment * u * (2.0 * span - u) / (2.0 * span**3)

    if isinstance(primitive, _Linear):
        return -_linear_moment_integral(primitive, span) / (2.0 * span**3)

    raise ValueError(f"Unsupported load primitive: {primitive!r}")


def solve_propped_cantilever(fixed: Support, roller: Support, loads) -> Tuple[ReactionForce, ReactionForce]:
    """Reactions for a fixed + roller beam (degree 1), fixed end first."""
    offset = roller.position - fixed.position
    span = abs(offset)
    if span <= 0:
        raise ValueError("Fixed and roller supports must not coincide.")
    direction = 1.0 if offset > 0 else -1.0

    inside, outside = _split_span(_local_primitives(loads, fixed.position, direction), span)
    vertical_roller = sum(_prop_reaction(primitive, span) for primitive in inside + outside)

    vertical_fixed = -total_vertical_force(loads) - vertical_roller
    moment_fixed = -(moment_about(loads, fixed.position) + vertical_roller * offset)

    logger.debug("Propped cantilever roller reaction: %.6f", vertical_roller)
    return (
        ReactionForce(horizontal=0.0, vertical=vertical_fixed, moment=moment_fixed),
        ReactionForce(horizontal=0.0, vertical=vertical_roller, moment=0.0),
    )
