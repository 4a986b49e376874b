"""
Engine configuration and defaults.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SolverConfig:
    """Global solver configuration."""

    # Diagram sampling
    diagram_sampling_points: int = 200

    # Tolerances
    equilibrium_tolerance: float = 1e-4
    geometry_epsilon: float = 1e-9

    # Beam material / section defaults
    default_elastic_modulus_mpa: float = 200000.0
    default_section_modulus_cm3: float = 500.0
    default_moment_of_inertia_cm4: float = 10000.0

    # Truss member defaults (steel)
    default_member_elastic_modulus_mpa: float = 200000.0
    default_member_area_mm2: float = 500.0

    # Method of joints budget = factor * member count
    joint_iteration_factor: int = 2

    # Logging (directory can be overridden with STATICS_SOLVER_LOG_DIR)
    log_dir: str = "logs"
    log_file_name: str = "statics_solver.log"
    log_max_bytes: int = 2_000_000
    log_backup_count: int = 3


# Global config instance
CONFIG = SolverConfig()
