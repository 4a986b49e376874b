from __future__ import annotations

from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from statics_solver_backend.config import CONFIG

SupportKind = Literal["fixed", "pinned", "roller", "free"]
DeterminacyKind = Literal["unstable", "determinate", "indeterminate"]

# Unknown reaction components contributed by each support kind
SUPPORT_UNKNOWNS: Dict[str, int] = {
    "fixed": 3,
    "pinned": 2,
    "roller": 1,
    "free": 0,
}


class Support(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: SupportKind
    position: float = Field(description="Distance from the left end in metres")


class PointLoad(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["point"] = "point"
    position: float = Field(description="Application position in metres")
    magnitude: float = Field(description="Vertical force in kN (negative = downward)")


class UniformDistributedLoad(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["udl"] = "udl"
    start: float = Field(description="Start position in metres")
    end: float = Field(description="End position in metres")
    magnitude: float = Field(description="Load intensity in kN/m (negative = downward)")


class TriangularLoad(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["triangular"] = "triangular"
    start: float = Field(description="Position of the zero-intensity end in metres")
    end: float = Field(description="Position of the peak-intensity end in metres")
    peak_magnitude: float = Field(description="Peak intensity in kN/m (negative = downward)")


class MomentLoad(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["moment"] = "moment"
    position: float = Field(description="Application position in metres")
    magnitude: float = Field(description="Applied moment in kN*m (positive = counterclockwise)")


Load = Annotated[
    Union[PointLoad, UniformDistributedLoad, TriangularLoad, MomentLoad],
    Field(discriminator="type"),
]


class BeamConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    length: float = Field(gt=0, description="Beam length in metres")
    supports: List[Support] = Field(default_factory=list)
    loads: List[Load] = Field(default_factory=list)
    elastic_modulus: float = Field(default=CONFIG.default_elastic_modulus_mpa, gt=0, description="MPa")
    section_modulus: float = Field(default=CONFIG.default_section_modulus_cm3, gt=0, description="cm^3")
    moment_of_inertia: float = Field(default=CONFIG.default_moment_of_inertia_cm4, gt=0, description="cm^4")

    @model_validator(mode="after")
    def validate_domain(self) -> "BeamConfig":
        length = self.length

        for support in self.supports:
            if not 0 <= support.position <= length:
                raise ValueError("Mesnet konumları kiriş boyu içinde olmalıdır.")

        for load in self.loads:
            if isinstance(load, (PointLoad, MomentLoad)):
                if not 0 <= load.position <= length:
                    raise ValueError(f"Pozisyon 0 ile {length:.1f}m arasında olmalıdır")
            elif not (0 <= load.start < load.end <= length):
                if load.start >= load.end:
                    raise ValueError("Başlangıç pozisyonu bitiş pozisyonundan küçük olmalıdır")
                raise ValueError(f"Başlangıç ve bitiş 0 ile {length:.1f}m arasında olmalıdır")

        return self


class ReactionForce(BaseModel):
    horizontal: float = 0.0
    vertical: float = 0.0
    moment: float = Field(default=0.0, description="Support fixing moment (kN*m, counterclockwise positive)")


class DiagramPoint(BaseModel):
    x: float
    shear: float
    moment: float


class Extremum(BaseModel):
    value: float = 0.0
    position: float = 0.0


class StressEstimate(BaseModel):
    value: float
    unit: Literal["MPa"] = "MPa"


class DeflectionEstimate(BaseModel):
    value: float
    position: float
    unit: Literal["mm"] = "mm"


class DeterminacyReport(BaseModel):
    kind: DeterminacyKind
    unknowns: int
    equations: int


class AnalysisResult(BaseModel):
    reactions: Dict[int, ReactionForce] = Field(
        default_factory=dict,
        description="Reactions keyed by the support's index in the input list",
    )
    is_valid: bool
    error_message: Optional[str] = None
    determinacy: Optional[DeterminacyReport] = None
    diagram: List[DiagramPoint] = Field(default_factory=list)
    max_shear: Extremum = Field(default_factory=Extremum)
    max_moment: Extremum = Field(default_factory=Extremum)
    min_moment: Extremum = Field(default_factory=Extremum)
    max_stress: Optional[StressEstimate] = None
    deflection: Optional[DeflectionEstimate] = None
    derivations: List[str] = Field(default_factory=list)
    solve_time_ms: float = 0.0
