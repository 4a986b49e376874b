from __future__ import annotations

from typing import Callable, Dict, List, NamedTuple, Optional

from statics_solver_backend.schemas.beam import (
    BeamConfig,
    MomentLoad,
    PointLoad,
    Support,
    UniformDistributedLoad,
)
from statics_solver_backend.schemas.presets import BeamPreset, BeamTypeInfo, TrussPreset
from statics_solver_backend.schemas.truss import TrussConfig, TrussLoad, TrussMember, TrussNode

# --- Beam presets ---

PRESET_SYSTEMS: Dict[str, BeamConfig] = {
    "simply-supported-point": BeamConfig(
        length=6.0,
        supports=[Support(kind="pinned", position=0.0), Support(kind="roller", position=6.0)],
        loads=[PointLoad(position=3.0, magnitude=-10.0)],
    ),
    "simply-supported-udl": BeamConfig(
        length=8.0,
        supports=[Support(kind="pinned", position=0.0), Support(kind="roller", position=8.0)],
        loads=[UniformDistributedLoad(start=0.0, end=8.0, magnitude=-5.0)],
    ),
    "cantilever-fixed": BeamConfig(
        length=4.0,
        supports=[Support(kind="fixed", position=0.0)],
        loads=[PointLoad(position=4.0, magnitude=-15.0)],
    ),
    "fixed-fixed-mixed": BeamConfig(
        length=10.0,
        supports=[Support(kind="fixed", position=0.0), Support(kind="fixed", position=10.0)],
        loads=[
            PointLoad(position=5.0, magnitude=-20.0),
            UniformDistributedLoad(start=2.0, end=8.0, magnitude=-3.0),
        ],
    ),
    "propped-cantilever": BeamConfig(
        length=6.0,
        supports=[Support(kind="fixed", position=0.0), Support(kind="roller", position=6.0)],
        loads=[
            UniformDistributedLoad(start=0.0, end=6.0, magnitude=-4.0),
            MomentLoad(position=3.0, magnitude=5.0),
        ],
    ),
    # No closed-form pattern covers three supports; analysis reports it as unsupported.
    "continuous-three-support": BeamConfig(
        length=12.0,
        supports=[
            Support(kind="pinned", position=0.0),
            Support(kind="roller", position=6.0),
            Support(kind="roller", position=12.0),
        ],
        loads=[UniformDistributedLoad(start=0.0, end=12.0, magnitude=-5.0)],
    ),
}

PRESET_LABELS: Dict[str, str] = {
    "simply-supported-point": "1. Basit Mesnetli - Nokta Yükü",
    "simply-supported-udl": "2. Basit Mesnetli - Yayılı Yük",
    "cantilever-fixed": "3. Konsol - Sabit Mesnet",
    "fixed-fixed-mixed": "4. Sabit-Sabit - Karma Yük",
    "propped-cantilever": "5. Tek Ucu Ankastre - Yayılı Yük ve Moment",
    "continuous-three-support": "6. Sürekli Kiriş - Üç Mesnet",
}


def get_preset_keys() -> List[str]:
    return list(PRESET_SYSTEMS)


def get_preset(key: str) -> Optional[BeamConfig]:
    return PRESET_SYSTEMS.get(key)


def get_all_presets() -> Dict[str, BeamPreset]:
    return {
        key: BeamPreset(key=key, label=label, config=PRESET_SYSTEMS[key])
        for key, label in PRESET_LABELS.items()
    }


# --- Beam types ---

class BeamType(NamedTuple):
    id: str
    name: str
    icon: str
    description: str
    default_config: Callable[..., BeamConfig]

    def info(self, length: float = 6.0) -> BeamTypeInfo:
        return BeamTypeInfo(
            id=self.id,
            name=self.name,
            icon=self.icon,
            description=self.description,
            default_config=self.default_config(length),
        )


def _simple(length: float = 6.0) -> BeamConfig:
    return BeamConfig(
        length=length,
        supports=[Support(kind="pinned", position=0.0), Support(kind="roller", position=length)],
    )


def _cantilever(length: float = 6.0) -> BeamConfig:
    return BeamConfig(length=length, supports=[Support(kind="fixed", position=0.0)])


def _fixed_fixed(length: float = 6.0) -> BeamConfig:
    return BeamConfig(
        length=length,
        supports=[Support(kind="fixed", position=0.0), Support(kind="fixed", position=length)],
    )


def _propped(length: float = 6.0) -> BeamConfig:
    return BeamConfig(
        length=length,
        supports=[Support(kind="fixed", position=0.0), Support(kind="roller", position=length)],
    )


BEAM_TYPES: List[BeamType] = [
    BeamType("simple", "Basit Kiriş", "⊣⊢", "Bir ucu sabit, diğer ucu hareketli mesnetli kiriş", _simple),
    BeamType("cantilever", "Konsol Kiriş", "▬╟", "Tek ucundan ankastre, diğer ucu serbest kiriş", _cantilever),
    BeamType("fixed-fixed", "Ankastre Kiriş", "╟▬╢", "İki ucu ankastre kiriş", _fixed_fixed),
    BeamType("propped", "Tek Ucu Ankastre Kiriş", "╟▬△", "Bir ucu ankastre, diğer ucu hareketli mesnetli kiriş", _propped),
]


def get_beam_type_by_id(beam_type_id: str) -> Optional[BeamType]:
    for beam_type in BEAM_TYPES:
        if beam_type.id == beam_type_id:
            return beam_type
    return None


# --- Truss presets ---

def _members(*pairs) -> List[TrussMember]:
    return [TrussMember(id=member_id, node_start_id=start, node_end_id=end) for member_id, start, end in pairs]


TRUSS_PRESETS: Dict[str, TrussConfig] = {
    "triangular-simple": TrussConfig(
        nodes=[
            TrussNode(id="A", x=0.0, y=0.0, support="pin"),
            TrussNode(id="B", x=6.0, y=0.0, support="roller"),
            TrussNode(id="C", x=3.0, y=4.0),
        ],
        members=_members(("AC", "A", "C"), ("BC", "B", "C"), ("AB", "A", "B")),
        loads=[TrussLoad(node_id="C", fx=0.0, fy=-10.0)],
    ),
    "pratt-6m": TrussConfig(
        nodes=[
            TrussNode(id="N0", x=0.0, y=0.0, support="pin"),
            TrussNode(id="N1", x=2.0, y=0.0),
            TrussNode(id="N2", x=4.0, y=0.0),
            TrussNode(id="N3", x=6.0, y=0.0, support="roller"),
            TrussNode(id="N4", x=1.0, y=2.0),
            TrussNode(id="N5", x=3.0, y=2.0),
            TrussNode(id="N6", x=5.0, y=2.0),
        ],
        members=_members(
            # Bottom chord
            ("B0", "N0", "N1"),
            ("B1", "N1", "N2"),
            ("B2", "N2", "N3"),
            # Top chord
            ("T0", "N4", "N5"),
            ("T1", "N5", "N6"),
            # Web
            ("D0", "N0", "N4"),
            ("D1", "N4", "N1"),
            ("D2", "N1", "N5"),
            ("D3", "N5", "N2"),
            ("D4", "N2", "N6"),
            ("D5", "N6", "N3"),
        ),
        loads=[
            TrussLoad(node_id="N4", fx=0.0, fy=-5.0),
            TrussLoad(node_id="N5", fx=0.0, fy=-5.0),
            TrussLoad(node_id="N6", fx=0.0, fy=-5.0),
        ],
    ),
    "warren-8m": TrussConfig(
        nodes=[
            TrussNode(id="A", x=0.0, y=0.0, support="pin"),
            TrussNode(id="B", x=8.0, y=0.0, support="roller"),
            TrussNode(id="C", x=2.0, y=3.46),
            TrussNode(id="D", x=4.0, y=0.0),
            TrussNode(id="E", x=6.0, y=3.46),
        ],
        members=_members(
            ("AD", "A", "D"),
            ("DB", "D", "B"),
            ("AC", "A", "C"),
            ("CD", "C", "D"),
            ("CE", "C", "E"),
            ("DE", "D", "E"),
            ("EB", "E", "B"),
        ),
        loads=[
            TrussLoad(node_id="C", fx=0.0, fy=-10.0),
            TrussLoad(node_id="E", fx=0.0, fy=-10.0),
            TrussLoad(node_id="D", fx=0.0, fy=-10.0),
        ],
    ),
}

TRUSS_LABELS: Dict[str, str] = {
    "triangular-simple": "Basit Üçgen Kiriş",
    "pratt-6m": "Pratt Kafesi (6m)",
    "warren-8m": "Warren Kafesi (8m)",
}


def get_truss_preset(key: str) -> Optional[TrussConfig]:
    return TRUSS_PRESETS.get(key)


def get_all_truss_presets() -> Dict[str, TrussPreset]:
    return {
        key: TrussPreset(key=key, label=label, config=TRUSS_PRESETS[key])
        for key, label in TRUSS_LABELS.items()
    }
