"""古典的Gauss-Seidel法"""

import numpy as np

from ..base import RelaxationMethod, SolverMethod
from .kernels import gauss_seidel_sweep


class GaussSeidelMethod(RelaxationMethod):
    """単一スレッドの辞書式Gauss-Seidel法

    同じスイープ内で更新済みの値を直ちに後続のセルが使います。
    """

    method = SolverMethod.GAUSS_SEIDEL

    def sweep(self, u: np.ndarray, f: np.ndarray, h2: float) -> float:
        return float(gauss_seidel_sweep(u, f, h2))
