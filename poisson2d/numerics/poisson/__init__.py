"""
Poisson方程式ソルバーパッケージ

5点差分で離散化した2次元Poisson方程式を、Gauss-Seidel系の反復法で解きます。

主な特徴:
- numbaでコンパイルしたスイープカーネル
- Gauss-Seidel、SOR、赤黒並列の3解法
- 共通の停止規則と収束履歴
"""

from .base import ConvergenceResult, ResidualNorms, RelaxationMethod, SolverMethod
from .config import SolverConfig
from .methods import GaussSeidelMethod, RedBlackMethod, SORMethod, optimal_omega
from .solver import IterativeSolver

__all__ = [
    "ConvergenceResult",
    "ResidualNorms",
    "RelaxationMethod",
    "SolverMethod",
    "SolverConfig",
    "GaussSeidelMethod",
    "SORMethod",
    "RedBlackMethod",
    "optimal_omega",
    "IterativeSolver",
]
