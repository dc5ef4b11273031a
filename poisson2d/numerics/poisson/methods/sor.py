"""逐次過緩和法（SOR: Successive Over-Relaxation）"""

from typing import Any, Dict
import numpy as np

from ..base import RelaxationMethod, SolverMethod
from .kernels import sor_sweep


def optimal_omega(n_interior: int) -> float:
    """N×N内部格子の離散Poisson作用素に対する最適緩和係数

    ω_opt = 2 / (1 + sin(π/(N+1)))。参考値であり強制はしません。

    Raises:
        ValueError: n_interior が1未満の場合
    """
    if n_interior < 1:
        raise ValueError(f"内部点数は1以上である必要があります: {n_interior}")
    return float(2.0 / (1.0 + np.sin(np.pi / (n_interior + 1))))


class SORMethod(RelaxationMethod):
    """Gauss-Seidel値と旧値を緩和係数ωで混合する解法

    - ω = 1: Gauss-Seidel法と同一
    - 1 < ω < 2: 過緩和（加速）
    - 0 < ω < 1: 不足緩和（安定化）

    範囲外のωも受け付けますが、収束は保証されません。
    """

    method = SolverMethod.SOR

    def __init__(self, omega: float = 1.0):
        self.omega = float(omega)

    def sweep(self, u: np.ndarray, f: np.ndarray, h2: float) -> float:
        return float(sor_sweep(u, f, h2, self.omega))

    def describe(self) -> Dict[str, Any]:
        diag = super().describe()
        diag["omega"] = self.omega
        return diag
