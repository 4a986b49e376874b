from __future__ import annotations

import logging
from typing import Iterable

from statics_solver_backend.schemas.beam import SUPPORT_UNKNOWNS, DeterminacyReport, Support
from statics_solver_backend.schemas.truss import TrussConfig

logger = logging.getLogger(__name__)

BEAM_EQUILIBRIUM_EQUATIONS = 3

# Reaction components a planar truss support provides
TRUSS_SUPPORT_REACTIONS = {"pin": 2, "roller": 1}


def _classify(unknowns: int, equations: int) -> str:
    if unknowns < equations:
        return "unstable"
    if unknowns == equations:
        return "determinate"
    return "indeterminate"


def classify_beam(supports: Iterable[Support]) -> DeterminacyReport:
    unknowns = 0
    for support in supports:
        try:
            unknowns += SUPPORT_UNKNOWNS[support.kind]
        except KeyError as exc:
            raise ValueError(f"Unsupported support kind: {support.kind}") from exc

    kind = _classify(unknowns, BEAM_EQUILIBRIUM_EQUATIONS)
    logger.debug("Beam determinacy: %s (%d unknowns)", kind, unknowns)
    return DeterminacyReport(kind=kind, unknowns=unknowns, equations=BEAM_EQUILIBRIUM_EQUATIONS)


def classify_truss(config: TrussConfig) -> DeterminacyReport:
    """Planar truss rule m + r = 2j."""
    reactions = sum(TRUSS_SUPPORT_REACTIONS[node.support] for node in config.nodes if node.support)
    unknowns = len(config.members) + reactions
    equations = 2 * len(config.nodes)

    kind = _classify(unknowns, equations)
    logger.debug("Truss determinacy: %s (m + r = %d, 2j = %d)", kind, unknowns, equations)
    return DeterminacyReport(kind=kind, unknowns=unknowns, equations=equations)
