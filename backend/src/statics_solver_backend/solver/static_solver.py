from __future__ import annotations

import logging
from time import perf_counter
from typing import Dict, List, Tuple

from statics_solver_backend.config import CONFIG
from statics_solver_backend.schemas.beam import (
    AnalysisResult,
    BeamConfig,
    DiagramPoint,
    ReactionForce,
    Support,
)
from statics_solver_backend.solver.determinacy import classify_beam
from statics_solver_backend.solver.diagrams import PlacedReaction, find_extrema, sample_diagrams
from statics_solver_backend.solver.formatting import format_float
from statics_solver_backend.solver.indeterminate_solver import solve_fixed_fixed, solve_propped_cantilever
from statics_solver_backend.solver.loads import equivalent_load, moment_about, total_vertical_force
from statics_solver_backend.solver.post import estimate_deflection, estimate_max_stress

logger = logging.getLogger(__name__)

UNSTABLE_MESSAGE = "Sistem mekaniğe bağlı değil (istikrarsız)."
UNSUPPORTED_MESSAGE = "Desteklenmeyen mesnet düzeni"
COINCIDENT_MESSAGE = "Mesnet konumları ayrı olmalıdır."
EQUILIBRIUM_MESSAGE = "Denge denklemleri sağlanamadı."

IndexedSupport = Tuple[int, Support]


class SupportLayoutError(Exception):
    """Support layout cannot be solved by any closed-form pattern."""


class UnsupportedConfiguration(SupportLayoutError):
    """Support layout matches none of the closed-form patterns."""


def _sorted_with_indices(supports: List[Support]) -> List[IndexedSupport]:
    return sorted(enumerate(supports), key=lambda item: item[1].position)


def _solve_simply_supported(pinned: Support, roller: Support, loads) -> Tuple[ReactionForce, ReactionForce]:
    span = roller.position - pinned.position
    reaction_roller = -moment_about(loads, pinned.position) / span
    reaction_pinned = -total_vertical_force(loads) - reaction_roller
    return (
        ReactionForce(horizontal=0.0, vertical=reaction_pinned),
        ReactionForce(horizontal=0.0, vertical=reaction_roller),
    )


def _solve_cantilever(fixed: Support, loads) -> ReactionForce:
    return ReactionForce(
        horizontal=0.0,
        vertical=-total_vertical_force(loads),
        moment=-moment_about(loads, fixed.position),
    )


def _dispatch(config: BeamConfig, active: List[IndexedSupport]) -> Tuple[str, Dict[int, ReactionForce]]:
    """Match the restraining supports against the recognised patterns, in order."""
    kinds = sorted(support.kind for _, support in active)
    by_kind: Dict[str, List[IndexedSupport]] = {}
    for item in active:
        by_kind.setdefault(item[1].kind, []).append(item)

    if len(active) == 2 and abs(active[0][1].position - active[1][1].position) < CONFIG.geometry_epsilon:
        raise SupportLayoutError(COINCIDENT_MESSAGE)

    if kinds == ["pinned", "roller"]:
        (pin_idx, pinned), (roller_idx, roller) = by_kind["pinned"][0], by_kind["roller"][0]
        pin_reaction, roller_reaction = _solve_simply_supported(pinned, roller, config.loads)
        return "simply_supported", {pin_idx: pin_reaction, roller_idx: roller_reaction}

    if kinds == ["fixed"]:
        fixed_idx, fixed = active[0]
        return "cantilever", {fixed_idx: _solve_cantilever(fixed, config.loads)}

    if kinds == ["fixed", "fixed"]:
        (left_idx, left), (right_idx, right) = active
        left_reaction, right_reaction = solve_fixed_fixed(left, right, config.loads)
        return "fixed_fixed", {left_idx: left_reaction, right_idx: right_reaction}

    if kinds == ["fixed", "roller"]:
        (fixed_idx, fixed), (roller_idx, roller) = by_kind["fixed"][0], by_kind["roller"][0]
        fixed_reaction, roller_reaction = solve_propped_cantilever(fixed, roller, config.loads)
        return "propped_cantilever", {fixed_idx: fixed_reaction, roller_idx: roller_reaction}

    raise UnsupportedConfiguration(", ".join(kinds) or "-")


def verify_equilibrium(
    config: BeamConfig,
    reactions: Dict[int, ReactionForce],
    tolerance: float = CONFIG.equilibrium_tolerance,
) -> bool:
    """Check sum Fx, sum Fy and sum M about the origin against ``tolerance``."""
    sum_fx = 0.0
    sum_fy = 0.0
    sum_m = 0.0

    for idx, reaction in reactions.items():
        position = config.supports[idx].position
        sum_fx += reaction.horizontal
        sum_fy += reaction.vertical
        sum_m += reaction.vertical * position + reaction.moment

    for load in config.loads:
        equivalent = equivalent_load(load)
        sum_fy += equivalent.force
        sum_m += equivalent.force * equivalent.position + equivalent.moment

    return abs(sum_fx) < tolerance and abs(sum_fy) < tolerance and abs(sum_m) < tolerance


def _invalid(message: str, start_time: float, **extra) -> AnalysisResult:
    logger.info("Beam analysis rejected: %s", message)
    return AnalysisResult(
        is_valid=False,
        error_message=message,
        solve_time_ms=format_float((perf_counter() - start_time) * 1000.0),
        **extra,
    )


def solve_beam(config: BeamConfig) -> AnalysisResult:
    """Reactions, internal force diagrams and stress/deflection estimates for a beam."""
    start_time = perf_counter()

    determinacy = classify_beam(config.supports)
    if determinacy.kind == "unstable":
        return _invalid(UNSTABLE_MESSAGE, start_time, determinacy=determinacy)

    indexed = _sorted_with_indices(config.supports)
    active = [item for item in indexed if item[1].kind != "free"]

    try:
        pattern, solved = _dispatch(config, active)
    except UnsupportedConfiguration as exc:
        if determinacy.kind == "indeterminate":
            detail = f"hiperstatik sistem, {determinacy.unknowns} bilinmeyen ({exc})"
        else:
            detail = f"tanınmayan mesnet kombinasyonu ({exc})"
        return _invalid(f"{UNSUPPORTED_MESSAGE}: {detail}.", start_time, determinacy=determinacy)
    except SupportLayoutError as exc:
        return _invalid(str(exc), start_time, determinacy=determinacy)

    logger.debug("Beam solved with pattern %s", pattern)

    # Every support gets an entry, keyed by its position in the caller's list
    reactions: Dict[int, ReactionForce] = {
        idx: solved.get(idx, ReactionForce()) for idx in range(len(config.supports))
    }
    is_valid = verify_equilibrium(config, reactions)

    placed: List[PlacedReaction] = [(config.supports[idx].position, reaction) for idx, reaction in reactions.items()]
    samples = sample_diagrams(config, placed)
    extrema = find_extrema(samples)

    max_stress = estimate_max_stress(extrema.max_moment, extrema.min_moment, config.section_modulus)
    deflection = estimate_deflection(samples, config.supports, config.elastic_modulus, config.moment_of_inertia)

    total_load = total_vertical_force(config.loads)
    derivations = [
        f"Toplam Yük: {total_load:.2f} kN",
        f"Mesnet Düzeni: {pattern} ({determinacy.kind}, {determinacy.unknowns} bilinmeyen)",
    ]
    for idx in sorted(reactions):
        reaction = reactions[idx]
        derivations.append(
            f"Mesnet {idx}: V = {reaction.vertical:.2f} kN, H = {reaction.horizontal:.2f} kN, M = {reaction.moment:.2f} kN.m"
        )

    duration_ms = (perf_counter() - start_time) * 1000.0
    if not is_valid:
        logger.info("Beam equilibrium check failed for pattern %s", pattern)

    return AnalysisResult(
        reactions={
            idx: ReactionForce(
                horizontal=format_float(reaction.horizontal),
                vertical=format_float(reaction.vertical),
                moment=format_float(reaction.moment),
            )
            for idx, reaction in reactions.items()
        },
        is_valid=is_valid,
        error_message=None if is_valid else EQUILIBRIUM_MESSAGE,
        determinacy=determinacy,
        diagram=[
            DiagramPoint(x=format_float(x), shear=format_float(shear), moment=format_float(moment))
            for x, shear, moment in zip(samples.x.tolist(), samples.shear.tolist(), samples.moment.tolist())
        ],
        max_shear=extrema.max_shear,
        max_moment=extrema.max_moment,
        min_moment=extrema.min_moment,
        max_stress=max_stress,
        deflection=deflection,
        derivations=derivations,
        solve_time_ms=format_float(duration_ms),
    )
