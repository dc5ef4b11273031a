"""境界条件パッケージ

単位正方形の4辺に与える一般化Dirichlet境界条件を提供します。
"""

from .base import (
    Edge,
    EdgeFunction,
    ConstantEdge,
    LinearEdge,
    SinusoidalEdge,
    PolynomialEdge,
    ExpressionEdge,
    edge_function_from_dict,
)
from .conditions import BoundaryConditions, BoundaryFamily, PRESETS, CORNER_TOLERANCE

__all__ = [
    "Edge",
    "EdgeFunction",
    "ConstantEdge",
    "LinearEdge",
    "SinusoidalEdge",
    "PolynomialEdge",
    "ExpressionEdge",
    "edge_function_from_dict",
    "BoundaryConditions",
    "BoundaryFamily",
    "PRESETS",
    "CORNER_TOLERANCE",
]
