"""誤差解析の結果を保持するデータクラス"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
import numpy as np

from ..numerics.poisson.base import ConvergenceResult

EXPECTED_ORDER = 2.0


def _frozen_array(values) -> np.ndarray:
    array = np.array(values, dtype=np.float64)
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class ErrorAnalysis:
    """厳密解に対する離散化誤差

    Attributes:
        l2_error: 離散L2ノルム h·sqrt(Σ e²)
        max_error: 最大誤差
        mean_error: 平均絶対誤差 Σ|e| / N_interior²
        error_map: 格子全体の絶対誤差（境界セルは0）
        points_analyzed: 解析した内部点数
        available: 厳密解が利用可能だったか
    """

    l2_error: float
    max_error: float
    mean_error: float
    error_map: np.ndarray = field(repr=False, compare=False)
    points_analyzed: int = 0
    available: bool = True

    def __post_init__(self):
        object.__setattr__(self, "error_map", _frozen_array(self.error_map))

    @classmethod
    def unavailable(cls, n_total: int) -> "ErrorAnalysis":
        """厳密解がない場合の結果（ノルムはNaN）"""
        return cls(
            l2_error=float("nan"),
            max_error=float("nan"),
            mean_error=float("nan"),
            error_map=np.zeros((n_total, n_total)),
            points_analyzed=0,
            available=False,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "l2_error": self.l2_error,
            "max_error": self.max_error,
            "mean_error": self.mean_error,
            "points_analyzed": self.points_analyzed,
            "available": self.available,
        }

    def __str__(self) -> str:
        if not self.available:
            return "Error analysis: exact solution unavailable"
        return (
            f"L2 error: {self.l2_error:.6e}\n"
            f"Max error: {self.max_error:.6e}\n"
            f"Mean error: {self.mean_error:.6e}\n"
            f"Points analyzed: {self.points_analyzed}"
        )


@dataclass(frozen=True)
class ConvergenceStudy:
    """格子細分化による収束次数の調査結果

    ``l2_orders[k]`` と ``max_orders[k]`` は格子 k と k+1 の間の局所次数で、
    どちらかの誤差が 1e-15 以下の組は NaN です。``l2_order`` と
    ``max_order`` は NaN でない局所次数の平均です。
    ``analyses`` は各格子での ``ErrorAnalysis`` です。
    """

    test_case: str
    method: str
    mesh_sizes: Tuple[int, ...]
    h_values: np.ndarray = field(repr=False, compare=False)
    l2_errors: np.ndarray = field(repr=False, compare=False)
    max_errors: np.ndarray = field(repr=False, compare=False)
    l2_orders: np.ndarray = field(repr=False, compare=False)
    max_orders: np.ndarray = field(repr=False, compare=False)
    l2_order: float = float("nan")
    max_order: float = float("nan")
    results: Tuple[ConvergenceResult, ...] = field(default=(), repr=False, compare=False)
    analyses: Tuple[ErrorAnalysis, ...] = field(default=(), repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "mesh_sizes", tuple(int(n) for n in self.mesh_sizes))
        for name in ("h_values", "l2_errors", "max_errors", "l2_orders", "max_orders"):
            object.__setattr__(self, name, _frozen_array(getattr(self, name)))
        object.__setattr__(self, "results", tuple(self.results))
        object.__setattr__(self, "analyses", tuple(self.analyses))

    @property
    def expected_order(self) -> float:
        return EXPECTED_ORDER

    @property
    def all_converged(self) -> bool:
        return all(r.converged for r in self.results)

    @property
    def finest_analysis(self) -> Optional[ErrorAnalysis]:
        """最も細かい格子での誤差（解析結果を保持していない場合はNone）"""
        return self.analyses[-1] if self.analyses else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "test_case": self.test_case,
            "method": self.method,
            "mesh_sizes": list(self.mesh_sizes),
            "h_values": self.h_values.tolist(),
            "l2_errors": self.l2_errors.tolist(),
            "max_errors": self.max_errors.tolist(),
            "l2_orders": self.l2_orders.tolist(),
            "max_orders": self.max_orders.tolist(),
            "l2_order": self.l2_order,
            "max_order": self.max_order,
        }

    def table(self) -> str:
        """格子ごとの誤差と局所次数の表"""
        lines = [f"{'N':>6} {'h':>12} {'L2 error':>14} {'Max error':>14} {'p(L2)':>8} {'p(max)':>8}"]
        for k, n in enumerate(self.mesh_sizes):
            if k == 0:
                p_l2 = p_max = "-"
            else:
                p_l2 = f"{self.l2_orders[k - 1]:.3f}"
                p_max = f"{self.max_orders[k - 1]:.3f}"
            lines.append(
                f"{n:>6} {self.h_values[k]:>12.6f} {self.l2_errors[k]:>14.6e} "
                f"{self.max_errors[k]:>14.6e} {p_l2:>8} {p_max:>8}"
            )
        return "\n".join(lines)

    def __str__(self) -> str:
        return (
            f"Convergence study ({self.test_case}, {self.method})\n"
            f"{self.table()}\n"
            f"Observed order (L2): {self.l2_order:.3f}\n"
            f"Observed order (max): {self.max_order:.3f}\n"
            f"Expected order: {self.expected_order:.1f}"
        )


@dataclass(frozen=True)
class MethodComparison:
    """同一初期状態から解いた1解法分の比較結果"""

    method: str
    result: ConvergenceResult
    analysis: ErrorAnalysis
    convergence_factor: float
    residual: float
    omega: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "omega": self.omega,
            "convergence_factor": self.convergence_factor,
            "residual": self.residual,
            **{f"result_{k}": v for k, v in self.result.to_dict().items() if k != "method"},
            **{f"error_{k}": v for k, v in self.analysis.to_dict().items()},
        }
