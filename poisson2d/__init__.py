"""
2次元Poisson方程式ソルバー

単位正方形上の -ΔU = f を、辺ごとのDirichlet境界条件のもとで
5点差分とGauss-Seidel系の反復法で解きます。
"""

from .core import BoundaryConditions, Edge, Mesh
from .catalog import TestCase, TestCaseCatalog, get_test_case
from .numerics.poisson import ConvergenceResult, IterativeSolver, SolverConfig, SolverMethod
from .analysis import ConvergenceStudy, ErrorAnalysis, ErrorAnalyzer, generate_report

__version__ = "0.1.0"

__all__ = [
    "BoundaryConditions",
    "Edge",
    "Mesh",
    "TestCase",
    "TestCaseCatalog",
    "get_test_case",
    "ConvergenceResult",
    "IterativeSolver",
    "SolverConfig",
    "SolverMethod",
    "ConvergenceStudy",
    "ErrorAnalysis",
    "ErrorAnalyzer",
    "generate_report",
]
