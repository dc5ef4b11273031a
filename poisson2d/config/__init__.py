"""設定パッケージ"""

from .base import BaseConfig, load_config_safely
from .run_config import (
    RECOMMENDED_BOUNDARY,
    BoundaryConfig,
    MeshConfig,
    RunConfig,
    StudyConfig,
)
from ..numerics.poisson.config import SolverConfig

__all__ = [
    "BaseConfig",
    "load_config_safely",
    "RECOMMENDED_BOUNDARY",
    "MeshConfig",
    "BoundaryConfig",
    "SolverConfig",
    "StudyConfig",
    "RunConfig",
]
