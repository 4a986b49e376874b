from __future__ import annotations

from pydantic import BaseModel

from statics_solver_backend.schemas.beam import BeamConfig
from statics_solver_backend.schemas.truss import TrussConfig


class BeamPreset(BaseModel):
    key: str
    label: str
    config: BeamConfig


class TrussPreset(BaseModel):
    key: str
    label: str
    config: TrussConfig


class BeamTypeInfo(BaseModel):
    id: str
    name: str
    icon: str
    description: str
    default_config: BeamConfig
