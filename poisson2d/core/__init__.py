"""格子と境界条件"""

from .boundary import BoundaryConditions, Edge
from .mesh import Mesh

__all__ = ["BoundaryConditions", "Edge", "Mesh"]
