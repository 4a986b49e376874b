"""
Truss analysis - Method of Joints (Eklem Yöntemi).

Reactions come from global equilibrium of a pin + roller supported truss;
member forces are then peeled joint by joint. A joint is solvable once at
most two of its members are still unknown; solving it can unlock the joints
at the far ends of the members it resolved, so only those are re-queued.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from time import perf_counter
from typing import Deque, Dict, List, Optional, Set, Tuple

from statics_solver_backend.config import CONFIG
from statics_solver_backend.schemas.truss import (
    MaxStress,
    MemberForce,
    NodeReaction,
    TrussConfig,
    TrussMember,
    TrussNode,
    TrussResult,
)
from statics_solver_backend.solver.determinacy import classify_truss
from statics_solver_backend.solver.formatting import format_float, format_significant

logger = logging.getLogger(__name__)

INDETERMINATE_MESSAGE = "Hiperstatik sistem! İndirgeyiciler veya bilgisayar yöntemleri gereklidir."
UNSTABLE_MESSAGE = "Sistem istikrarsız! Yetersiz mesnet."
NO_SUPPORT_MESSAGE = "Mesnet tanımlanmamış!"
SUPPORT_LAYOUT_MESSAGE = "Kafes sistem için bir sabit (pin) ve bir hareketli (roller) mesnet gereklidir."
ALIGNED_SUPPORTS_MESSAGE = "Hareketli (roller) mesnet, sabit (pin) mesnetle aynı düşey hizada olamaz."
UNSOLVED_MESSAGE = "Bazı çubuklar çözülemedi. Sistemi kontrol edin."

_M_TO_MM = 1000.0
_KN_TO_N = 1000.0


def _node_lookup(config: TrussConfig) -> Dict[str, TrussNode]:
    return {node.id: node for node in config.nodes}


def _member_vector(member: TrussMember, nodes: Dict[str, TrussNode]) -> Tuple[float, float]:
    try:
        start = nodes[member.node_start_id]
        end = nodes[member.node_end_id]
    except KeyError as exc:
        raise ValueError(f"Node not found for member {member.id}") from exc
    return end.x - start.x, end.y - start.y


def _member_length(member: TrussMember, nodes: Dict[str, TrussNode]) -> float:
    dx, dy = _member_vector(member, nodes)
    return math.hypot(dx, dy)


def _member_angle(member: TrussMember, nodes: Dict[str, TrussNode]) -> float:
    dx, dy = _member_vector(member, nodes)
    return math.atan2(dy, dx)


def _direction_at(member: TrussMember, node_id: str) -> float:
    # Tension pulls the start joint toward the end joint and vice versa
    return 1.0 if member.node_start_id == node_id else -1.0


def _external_forces(config: TrussConfig, reactions: List[NodeReaction]) -> Dict[str, List[float]]:
    forces: Dict[str, List[float]] = {node.id: [0.0, 0.0] for node in config.nodes}
    for load in config.loads:
        forces[load.node_id][0] += load.fx
        forces[load.node_id][1] += load.fy
    for reaction in reactions:
        forces[reaction.node_id][0] += reaction.rx
        forces[reaction.node_id][1] += reaction.ry
    return forces


def _support_pair(config: TrussConfig) -> Optional[Tuple[TrussNode, TrussNode]]:
    pins = [node for node in config.nodes if node.support == "pin"]
    rollers = [node for node in config.nodes if node.support == "roller"]
    if len(pins) != 1 or len(rollers) != 1:
        return None
    return pins[0], rollers[0]


def _roller_arm(pin: TrussNode, roller: TrussNode) -> float:
    # The vertical roller reaction needs a horizontal lever arm about the pin
    return roller.x - pin.x


def compute_reactions(config: TrussConfig) -> Optional[List[NodeReaction]]:
    """Pin + roller reactions from global equilibrium; None for any other layout."""
    pair = _support_pair(config)
    if pair is None:
        return None

    pin, roller = pair
    arm = _roller_arm(pin, roller)
    if abs(arm) < CONFIG.geometry_epsilon:
        return None

    nodes = _node_lookup(config)
    sum_fx = 0.0
    sum_fy = 0.0
    moment_about_pin = 0.0  # counterclockwise positive
    for load in config.loads:
        node = nodes[load.node_id]
        sum_fx += load.fx
        sum_fy += load.fy
        moment_about_pin += (node.x - pin.x) * load.fy - (node.y - pin.y) * load.fx

    roller_ry = -moment_about_pin / arm
    pin_ry = -(sum_fy + roller_ry)

    return [
        NodeReaction(node_id=pin.id, rx=-sum_fx, ry=pin_ry),
        NodeReaction(node_id=roller.id, rx=0.0, ry=roller_ry),
    ]


def _solve_joint(
    node_id: str,
    unknown: List[TrussMember],
    known_fx: float,
    known_fy: float,
    nodes: Dict[str, TrussNode],
) -> Optional[Dict[str, float]]:
    b1 = -known_fx
    b2 = -known_fy

    if len(unknown) == 1:
        member = unknown[0]
        angle = _member_angle(member, nodes)
        direction = _direction_at(member, node_id)
        # Least-squares projection onto the member axis
        force = b1 * math.cos(angle) * direction + b2 * math.sin(angle) * direction
        return {member.id: force}

    m1, m2 = unknown
    angle1 = _member_angle(m1, nodes)
    angle2 = _member_angle(m2, nodes)
    dir1 = _direction_at(m1, node_id)
    dir2 = _direction_at(m2, node_id)

    a11 = math.cos(angle1) * dir1
    a12 = math.cos(angle2) * dir2
    a21 = math.sin(angle1) * dir1
    a22 = math.sin(angle2) * dir2

    det = a11 * a22 - a12 * a21
    if abs(det) <= CONFIG.geometry_epsilon:
        return None

    return {
        m1.id: (b1 * a22 - a12 * b2) / det,
        m2.id: (a11 * b2 - b1 * a21) / det,
    }


def solve_member_forces(config: TrussConfig, reactions: List[NodeReaction]) -> Optional[Dict[str, float]]:
    """Method of joints; None when members remain unknown after the budget."""
    nodes = _node_lookup(config)
    external = _external_forces(config, reactions)

    connected: Dict[str, List[TrussMember]] = {node.id: [] for node in config.nodes}
    for member in config.members:
        connected[member.node_start_id].append(member)
        connected[member.node_end_id].append(member)

    forces: Dict[str, float] = {}
    solved_nodes: Set[str] = set()
    queue: Deque[str] = deque(node.id for node in config.nodes)
    queued: Set[str] = set(queue)

    budget = CONFIG.joint_iteration_factor * len(config.members)
    iterations = 0

    while queue and len(forces) < len(config.members) and iterations < budget:
        node_id = queue.popleft()
        queued.discard(node_id)
        if node_id in solved_nodes:
            continue

        unknown = [member for member in connected[node_id] if member.id not in forces]
        if len(unknown) not in (1, 2):
            continue
        iterations += 1

        known_fx, known_fy = external[node_id]
        for member in connected[node_id]:
            if member.id in forces:
                angle = _member_angle(member, nodes)
                direction = _direction_at(member, node_id)
                known_fx += forces[member.id] * math.cos(angle) * direction
                known_fy += forces[member.id] * math.sin(angle) * direction

        solution = _solve_joint(node_id, unknown, known_fx, known_fy, nodes)
        if solution is None:
            logger.debug("Joint %s is singular with its current unknowns", node_id)
            continue

        forces.update(solution)
        solved_nodes.add(node_id)

        for member in unknown:
            for neighbour in (member.node_start_id, member.node_end_id):
                if neighbour not in solved_nodes and neighbour not in queued:
                    queue.append(neighbour)
                    queued.add(neighbour)

    if len(forces) < len(config.members):
        logger.info("Method of joints left %d member(s) unsolved", len(config.members) - len(forces))
        return None
    return forces


def _member_result(member: TrussMember, force: float, nodes: Dict[str, TrussNode]) -> MemberForce:
    length_mm = _member_length(member, nodes) * _M_TO_MM
    stress = force * _KN_TO_N / member.area
    strain = stress / member.elastic_modulus
    return MemberForce(
        member_id=member.id,
        axial_force=format_float(force),
        stress=format_float(stress),
        strain=format_significant(strain),
        elongation=format_float(strain * length_mm),
    )


def _rounded(reactions: List[NodeReaction]) -> List[NodeReaction]:
    return [
        NodeReaction(node_id=reaction.node_id, rx=format_float(reaction.rx), ry=format_float(reaction.ry))
        for reaction in reactions
    ]


def find_zero_force_members(config: TrussConfig) -> List[str]:
    """Members at unloaded, unsupported joints with two non-collinear members."""
    nodes = _node_lookup(config)
    loaded = {
        load.node_id
        for load in config.loads
        if abs(load.fx) > CONFIG.geometry_epsilon or abs(load.fy) > CONFIG.geometry_epsilon
    }

    zero_force: List[str] = []
    for node in config.nodes:
        if node.support or node.id in loaded:
            continue
        members = [m for m in config.members if node.id in (m.node_start_id, m.node_end_id)]
        if len(members) != 2:
            continue

        (dx1, dy1), (dx2, dy2) = (_member_vector(m, nodes) for m in members)
        sine = (dx1 * dy2 - dy1 * dx2) / (math.hypot(dx1, dy1) * math.hypot(dx2, dy2))
        if abs(sine) < 0.01:
            continue

        for member in members:
            if member.id not in zero_force:
                zero_force.append(member.id)

    return zero_force


def get_max_stress(member_forces: List[MemberForce]) -> Tuple[float, str]:
    max_stress = 0.0
    member_id = ""
    for result in member_forces:
        if abs(result.stress) > max_stress:
            max_stress = abs(result.stress)
            member_id = result.member_id
    return max_stress, member_id


def _invalid(message: str, start_time: float, reactions: Optional[List[NodeReaction]] = None) -> TrussResult:
    logger.info("Truss analysis rejected: %s", message)
    return TrussResult(
        reactions=_rounded(reactions or []),
        member_forces=[],
        is_valid=False,
        error_message=message,
        solve_time_ms=format_float((perf_counter() - start_time) * 1000.0),
    )


def solve_truss(config: TrussConfig) -> TrussResult:
    """Reactions and member axial forces of a planar pin-jointed truss."""
    start_time = perf_counter()

    determinacy = classify_truss(config)
    if determinacy.kind == "indeterminate":
        return _invalid(INDETERMINATE_MESSAGE, start_time)
    if determinacy.kind == "unstable":
        return _invalid(UNSTABLE_MESSAGE, start_time)

    if not any(node.support for node in config.nodes):
        return _invalid(NO_SUPPORT_MESSAGE, start_time)

    pair = _support_pair(config)
    if pair is None:
        return _invalid(SUPPORT_LAYOUT_MESSAGE, start_time)
    if abs(_roller_arm(*pair)) < CONFIG.geometry_epsilon:
        return _invalid(ALIGNED_SUPPORTS_MESSAGE, start_time)

    reactions = compute_reactions(config)

    forces = solve_member_forces(config, reactions)
    if forces is None:
        return _invalid(UNSOLVED_MESSAGE, start_time, reactions)

    nodes = _node_lookup(config)
    member_forces = [_member_result(member, forces[member.id], nodes) for member in config.members]
    max_value, max_member = get_max_stress(member_forces)

    return TrussResult(
        reactions=_rounded(reactions),
        member_forces=member_forces,
        is_valid=True,
        zero_force_members=find_zero_force_members(config),
        max_stress=MaxStress(value=max_value, member_id=max_member) if max_member else None,
        solve_time_ms=format_float((perf_counter() - start_time) * 1000.0),
    )
