"""反復解法の実装"""

from .gauss_seidel import GaussSeidelMethod
from .sor import SORMethod, optimal_omega
from .red_black import RedBlackMethod, partition_rows

__all__ = [
    "GaussSeidelMethod",
    "SORMethod",
    "RedBlackMethod",
    "optimal_omega",
    "partition_rows",
]
