from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException

from statics_solver_backend.schemas.beam import AnalysisResult, BeamConfig
from statics_solver_backend.schemas.presets import BeamPreset, BeamTypeInfo, TrussPreset
from statics_solver_backend.schemas.truss import TrussConfig, TrussResult
from statics_solver_backend.solver.presets import BEAM_TYPES, get_all_presets, get_all_truss_presets
from statics_solver_backend.solver.static_solver import solve_beam
from statics_solver_backend.solver.truss_solver import solve_truss

router = APIRouter()


@router.post("/beam/analyze", response_model=AnalysisResult)
async def analyze_beam(payload: BeamConfig) -> AnalysisResult:
    """Solve a single-span beam; unstable or unsupported layouts come back with is_valid=False."""
    try:
        return solve_beam(payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/truss/analyze", response_model=TrussResult)
async def analyze_truss(payload: TrussConfig) -> TrussResult:
    try:
        return solve_truss(payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/presets/beams", response_model=List[BeamPreset])
async def beam_presets() -> List[BeamPreset]:
    return list(get_all_presets().values())


@router.get("/presets/trusses", response_model=List[TrussPreset])
async def truss_presets() -> List[TrussPreset]:
    return list(get_all_truss_presets().values())


@router.get("/beam-types", response_model=List[BeamTypeInfo])
async def beam_types(length: float = 6.0) -> List[BeamTypeInfo]:
    if length <= 0:
        raise HTTPException(status_code=400, detail="Kiriş boyu sıfırdan büyük olmalıdır.")
    return [beam_type.info(length) for beam_type in BEAM_TYPES]
