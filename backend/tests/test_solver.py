from __future__ import annotations

from pydantic import ValidationError
from pytest import approx, raises

from statics_solver_backend.schemas.beam import (
    BeamConfig,
    MomentLoad,
    PointLoad,
    ReactionForce,
    Support,
    TriangularLoad,
    UniformDistributedLoad,
)
from statics_solver_backend.solver.loads import equivalent_load
from statics_solver_backend.solver.static_solver import solve_beam, verify_equilibrium


def _supports(length: float):
    """Create the default simply supported boundary conditions for a span."""
    return [
        Support(kind="pinned", position=0.0),
        Support(kind="roller", position=length),
    ]


def _diagram_at(result, x: float):
    """Return the diagram sample located at ``x``."""
    return next(point for point in result.diagram if abs(point.x - x) < 1e-9)


def test_central_point_load_reactions_and_moment():
    """Split a central point load evenly and peak the moment under it."""
    config = BeamConfig(length=6.0, supports=_supports(6.0), loads=[PointLoad(position=3.0, magnitude=-10.0)])

    result = solve_beam(config)

    assert result.is_valid
    assert result.error_message is None
    assert result.reactions[0].vertical == approx(5.0, rel=1e-6)
    assert result.reactions[1].vertical == approx(5.0, rel=1e-6)
    assert result.reactions[0].horizontal == approx(0.0, abs=1e-9)
    assert result.max_moment.value == approx(15.0, rel=1e-6)
    assert result.max_moment.position == approx(3.0, abs=1e-9)
    assert result.max_shear.value == approx(5.0, rel=1e-6)
    assert result.max_shear.position == approx(0.0, abs=1e-9)
    assert _diagram_at(result, 0.0).shear == approx(5.0, rel=1e-6)
    assert _diagram_at(result, 0.0).moment == approx(0.0, abs=1e-6)
    assert _diagram_at(result, 6.0).moment == approx(0.0, abs=1e-6)


def test_stress_and_deflection_estimates():
    """Estimate sigma = M/S and the midspan deflection PL^3/48EI."""
    config = BeamConfig(
        length=6.0,
        supports=_supports(6.0),
        loads=[PointLoad(position=3.0, magnitude=-10.0)],
        elastic_modulus=200000,
        section_modulus=500,
        moment_of_inertia=10000,
    )

    result = solve_beam(config)

    assert result.max_stress.unit == "MPa"
    assert result.max_stress.value == approx(30.0, rel=1e-6)
    assert result.deflection.unit == "mm"
    assert result.deflection.value == approx(-2.25, rel=2e-2)
    assert result.deflection.position == approx(3.0, abs=0.05)


def test_reactions_keyed_by_input_order():
    """Report reactions against the caller's list even when supports are unsorted."""
    config = BeamConfig(
        length=6.0,
        supports=[Support(kind="roller", position=6.0), Support(kind="pinned", position=0.0)],
        loads=[PointLoad(position=2.0, magnitude=-10.0)],
    )

    result = solve_beam(config)

    assert result.is_valid
    assert result.reactions[1].vertical == approx(20.0 / 3.0, rel=1e-5)
    assert result.reactions[0].vertical == approx(10.0 / 3.0, rel=1e-5)


def test_uniform_udl_reactions_and_moment():
    """Ensure a full-span UDL splits reactions evenly and peaks at wL^2/8."""
    config = BeamConfig(
        length=6.0,
        supports=_supports(6.0),
        loads=[UniformDistributedLoad(start=0.0, end=6.0, magnitude=-5.0)],
    )

    result = solve_beam(config)

    assert result.reactions[0].vertical == approx(15.0, rel=1e-6)
    assert result.reactions[1].vertical == approx(15.0, rel=1e-6)
    assert result.max_moment.value == approx(22.5, rel=1e-3)
    assert result.max_moment.position == approx(3.0, abs=0.05)


def test_triangular_load_reactions():
    """Triangular load resultant acts at two thirds of its span."""
    config = BeamConfig(
        length=6.0,
        supports=_supports(6.0),
        loads=[TriangularLoad(start=0.0, end=6.0, peak_magnitude=-4.0)],
    )

    result = solve_beam(config)

    assert result.is_valid
    assert result.reactions[0].vertical == approx(4.0, rel=1e-6)
    assert result.reactions[1].vertical == approx(8.0, rel=1e-6)
    # Shear vanishes where 4 - x^2/3 = 0
    assert result.max_moment.position == approx(12 ** 0.5, abs=0.05)
    assert result.max_moment.value == approx(4.0 * 12 ** 0.5 - 12 ** 1.5 / 9.0, rel=1e-3)


def test_applied_moment_creates_couple_reactions():
    """A concentrated moment is balanced by equal and opposite reactions."""
    config = BeamConfig(length=6.0, supports=_supports(6.0), loads=[MomentLoad(position=3.0, magnitude=20.0)])

    result = solve_beam(config)

    assert result.is_valid
    assert result.reactions[0].vertical == approx(-result.reactions[1].vertical, rel=1e-6)
    assert result.reactions[1].vertical == approx(-20.0 / 6.0, rel=1e-5)
    # Counterclockwise moment drops the sagging moment by its magnitude
    assert _diagram_at(result, 3.0).moment == approx(20.0 / 6.0 * 3.0 - 20.0, rel=1e-5)


def test_overhang_with_udl_and_applied_moment():
    """Exercise an overhanging span with a UDL, a tip load and a clockwise moment."""
    config = BeamConfig(
        length=6.0,
        supports=[Support(kind="pinned", position=0.0), Support(kind="roller", position=4.0)],
        loads=[
            UniformDistributedLoad(start=0.0, end=4.0, magnitude=-16.0),
            PointLoad(position=6.0, magnitude=-20.0),
            MomentLoad(position=0.0, magnitude=-16.0),
        ],
    )

    result = solve_beam(config)

    assert result.is_valid
    assert result.reactions[0].vertical == approx(18.0, rel=1e-6)
    assert result.reactions[1].vertical == approx(66.0, rel=1e-6)
    assert result.min_moment.value == approx(-40.0, rel=1e-5)
    assert result.min_moment.position == approx(4.0, abs=1e-9)


def test_multiple_and_mixed_loads_balance():
    """Total vertical reaction equals the total applied load."""
    configs = [
        BeamConfig(
            length=10.0,
            supports=_supports(10.0),
            loads=[
                PointLoad(position=2.0, magnitude=-10.0),
                PointLoad(position=5.0, magnitude=-15.0),
                PointLoad(position=8.0, magnitude=-10.0),
            ],
        ),
        BeamConfig(
            length=10.0,
            supports=_supports(10.0),
            loads=[
                UniformDistributedLoad(start=0.0, end=5.0, magnitude=-2.0),
                PointLoad(position=7.0, magnitude=-10.0),
                TriangularLoad(start=6.0, end=10.0, peak_magnitude=-3.0),
            ],
        ),
    ]

    for config in configs:
        result = solve_beam(config)
        total_load = sum(equivalent_load(load).force for load in config.loads)
        total_reaction = sum(reaction.vertical for reaction in result.reactions.values())
        assert result.is_valid
        assert total_reaction + total_load == approx(0.0, abs=1e-4)


def test_empty_loads_give_zero_reactions():
    """An unloaded beam has zero reactions."""
    config = BeamConfig(length=6.0, supports=_supports(6.0))

    result = solve_beam(config)

    assert result.is_valid
    assert result.reactions[0].vertical == approx(0.0, abs=1e-9)
    assert result.reactions[1].vertical == approx(0.0, abs=1e-9)


def test_two_rollers_are_unstable():
    """Reject insufficient restraint before attempting a solve."""
    config = BeamConfig(
        length=6.0,
        supports=[Support(kind="roller", position=0.0), Support(kind="roller", position=6.0)],
    )

    result = solve_beam(config)

    assert not result.is_valid
    assert "istikrarsız" in result.error_message
    assert result.determinacy.kind == "unstable"
    assert result.reactions == {}
    assert result.diagram == []


def test_three_supports_are_unsupported():
    """Continuous beams fall outside the closed-form patterns."""
    config = BeamConfig(
        length=12.0,
        supports=[
            Support(kind="pinned", position=0.0),
            Support(kind="roller", position=6.0),
            Support(kind="roller", position=12.0),
        ],
        loads=[UniformDistributedLoad(start=0.0, end=12.0, magnitude=-5.0)],
    )

    result = solve_beam(config)

    assert not result.is_valid
    assert result.error_message.startswith("Desteklenmeyen mesnet düzeni")
    assert "hiperstatik" in result.error_message
    assert result.determinacy.kind == "indeterminate"
    assert result.determinacy.unknowns == 4


def test_determinate_but_unrecognised_layout():
    """Three rollers count as determinate but match no pattern."""
    config = BeamConfig(
        length=9.0,
        supports=[
            Support(kind="roller", position=0.0),
            Support(kind="roller", position=4.5),
            Support(kind="roller", position=9.0),
        ],
    )

    result = solve_beam(config)

    assert not result.is_valid
    assert result.determinacy.kind == "determinate"
    assert "tanınmayan" in result.error_message


def test_two_pins_are_unsupported():
    """Two pins are indeterminate and not a recognised pattern."""
    config = BeamConfig(
        length=6.0,
        supports=[Support(kind="pinned", position=0.0), Support(kind="pinned", position=6.0)],
    )

    result = solve_beam(config)

    assert not result.is_valid
    assert result.error_message.startswith("Desteklenmeyen mesnet düzeni")


def test_coincident_supports_are_rejected():
    """Pattern supports must sit at different positions."""
    config = BeamConfig(
        length=6.0,
        supports=[Support(kind="pinned", position=3.0), Support(kind="roller", position=3.0)],
        loads=[PointLoad(position=1.0, magnitude=-5.0)],
    )

    result = solve_beam(config)

    assert not result.is_valid
    assert result.error_message == "Mesnet konumları ayrı olmalıdır."


def test_free_support_is_ignored_by_dispatch():
    """A free end adds no restraint but still gets a zero reaction entry."""
    config = BeamConfig(
        length=4.0,
        supports=[Support(kind="free", position=4.0), Support(kind="fixed", position=0.0)],
        loads=[PointLoad(position=4.0, magnitude=-10.0)],
    )

    result = solve_beam(config)

    assert result.is_valid
    assert result.reactions[0] == ReactionForce()
    assert result.reactions[1].vertical == approx(10.0, rel=1e-6)
    assert result.reactions[1].moment == approx(40.0, rel=1e-6)


def test_verify_equilibrium_flags_wrong_reactions():
    """Reactions that do not balance the loads fail the check."""
    config = BeamConfig(length=6.0, supports=_supports(6.0), loads=[PointLoad(position=3.0, magnitude=-10.0)])

    assert verify_equilibrium(
        config, {0: ReactionForce(vertical=5.0), 1: ReactionForce(vertical=5.0)}
    )
    assert not verify_equilibrium(
        config, {0: ReactionForce(vertical=6.0), 1: ReactionForce(vertical=4.0)}
    )


def test_solver_is_idempotent():
    """Solving the same beam twice gives identical results."""
    config = BeamConfig(
        length=8.0,
        supports=_supports(8.0),
        loads=[
            UniformDistributedLoad(start=1.0, end=5.0, magnitude=-3.0),
            MomentLoad(position=6.0, magnitude=4.0),
        ],
    )

    first = solve_beam(config).model_dump(exclude={"solve_time_ms"})
    second = solve_beam(config).model_dump(exclude={"solve_time_ms"})

    assert first == second


def test_diagram_contains_critical_points():
    """Support and load positions are sampled exactly."""
    config = BeamConfig(
        length=5.0,
        supports=_supports(5.0),
        loads=[UniformDistributedLoad(start=1.234, end=3.21, magnitude=-2.0)],
    )

    result = solve_beam(config)
    xs = [point.x for point in result.diagram]

    assert xs == sorted(xs)
    assert len(xs) >= 200
    assert any(abs(x - 1.234) < 1e-9 for x in xs)
    assert any(abs(x - 3.21) < 1e-9 for x in xs)


def test_invalid_point_load_position():
    """Reject point loads located outside the beam domain."""
    with raises(ValidationError):
        BeamConfig(length=3.0, supports=_supports(3.0), loads=[PointLoad(position=3.5, magnitude=-5.0)])


def test_invalid_range_order():
    """Range loads must start before they end."""
    with raises(ValidationError):
        BeamConfig(
            length=6.0,
            supports=_supports(6.0),
            loads=[UniformDistributedLoad(start=4.0, end=2.0, magnitude=-1.0)],
        )


def test_non_positive_length_rejected():
    """Beam length must be positive."""
    with raises(ValidationError):
        BeamConfig(length=0.0, supports=[])
