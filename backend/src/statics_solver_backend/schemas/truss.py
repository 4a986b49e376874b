from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from statics_solver_backend.config import CONFIG

TrussSupportKind = Literal["pin", "roller"]


class TrussNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    x: float = Field(description="Horizontal coordinate in metres")
    y: float = Field(description="Vertical coordinate in metres")
    support: Optional[TrussSupportKind] = None


class TrussMember(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1)
    node_start_id: str = Field(min_length=1)
    node_end_id: str = Field(min_length=1)
    elastic_modulus: float = Field(
        default=CONFIG.default_member_elastic_modulus_mpa, gt=0, alias="E", description="MPa"
    )
    area: float = Field(default=CONFIG.default_member_area_mm2, gt=0, alias="A", description="mm^2")


class TrussLoad(BaseModel):
    model_config = ConfigDict(frozen=True)

    node_id: str = Field(min_length=1)
    fx: float = Field(default=0.0, description="kN, positive to the right")
    fy: float = Field(default=0.0, description="kN, positive upward")


class TrussConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    nodes: List[TrussNode] = Field(default_factory=list)
    members: List[TrussMember] = Field(default_factory=list)
    loads: List[TrussLoad] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_topology(self) -> "TrussConfig":
        node_ids = [node.id for node in self.nodes]
        if len(set(node_ids)) != len(node_ids):
            raise ValueError("Düğüm kimlikleri benzersiz olmalıdır.")

        member_ids = [member.id for member in self.members]
        if len(set(member_ids)) != len(member_ids):
            raise ValueError("Çubuk kimlikleri benzersiz olmalıdır.")

        known = set(node_ids)
        for member in self.members:
            if member.node_start_id not in known or member.node_end_id not in known:
                raise ValueError(f"Çubuk {member.id} tanımsız bir düğüme bağlanmış.")
            if member.node_start_id == member.node_end_id:
                raise ValueError(f"Çubuk {member.id} iki farklı düğümü bağlamalıdır.")

        for load in self.loads:
            if load.node_id not in known:
                raise ValueError(f"Yük tanımsız bir düğüme uygulanmış: {load.node_id}")

        return self


class NodeReaction(BaseModel):
    node_id: str
    rx: float
    ry: float


class MemberForce(BaseModel):
    member_id: str
    axial_force: float = Field(description="kN, positive = tension, negative = compression")
    stress: float = Field(description="MPa")
    strain: float
    elongation: float = Field(description="mm")


class MaxStress(BaseModel):
    value: float
    member_id: str


class TrussResult(BaseModel):
    reactions: List[NodeReaction] = Field(default_factory=list)
    member_forces: List[MemberForce] = Field(default_factory=list)
    is_valid: bool
    error_message: Optional[str] = None
    zero_force_members: List[str] = Field(default_factory=list)
    max_stress: Optional[MaxStress] = None
    solve_time_ms: float = 0.0
