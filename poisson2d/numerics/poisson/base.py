"""反復ソルバーの基底クラスと結果の型を提供するモジュール"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union
import numpy as np

ProgressCallback = Callable[[int], None]


class SolverMethod(Enum):
    """反復解法の種類"""

    GAUSS_SEIDEL = "gauss_seidel"
    SOR = "sor"
    RED_BLACK = "red_black"

    @property
    def label(self) -> str:
        """表示用の名前"""
        return {
            SolverMethod.GAUSS_SEIDEL: "Classic Gauss-Seidel",
            SolverMethod.SOR: "Gauss-Seidel with relaxation (SOR)",
            SolverMethod.RED_BLACK: "Parallel red-black Gauss-Seidel",
        }[self]

    @classmethod
    def parse(cls, method: Union["SolverMethod", str]) -> "SolverMethod":
        """列挙値または文字列から解法を取得

        Raises:
            ValueError: 未知の解法名の場合
        """
        if isinstance(method, cls):
            return method
        key = str(method).strip().lower().replace("-", "_")
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        raise ValueError(
            f"未対応の解法です: {method} (利用可能: {', '.join(m.value for m in cls)})"
        )


@dataclass(frozen=True)
class ConvergenceResult:
    """1回の求解の結果

    Attributes:
        iterations: 実行した反復回数
        final_error: 最後のスイープでの最大更新量 max|ΔU|
        converged: final_error <= tolerance で停止したか
        method: 解法の名前
        elapsed_time: 計算時間（秒）
        error_history: 反復ごとの最大更新量（index 0 は未使用で 0.0）
        tolerance: 収束判定に用いた許容誤差
        omega: 緩和係数（SOR以外はNone）
    """

    iterations: int
    final_error: float
    converged: bool
    method: str
    elapsed_time: float
    error_history: np.ndarray = field(repr=False, compare=False)
    tolerance: float = 0.0
    omega: Optional[float] = None

    def __post_init__(self):
        history = np.array(self.error_history, dtype=np.float64)
        history.flags.writeable = False
        object.__setattr__(self, "error_history", history)

    def to_dict(self) -> Dict[str, Any]:
        """結果を辞書形式にシリアライズ"""
        return {
            "method": self.method,
            "iterations": self.iterations,
            "final_error": self.final_error,
            "converged": self.converged,
            "elapsed_time": self.elapsed_time,
            "tolerance": self.tolerance,
            "omega": self.omega,
        }

    def __str__(self) -> str:
        return (
            f"Method: {self.method}\n"
            f"Iterations: {self.iterations}\n"
            f"Final error: {self.final_error:.3e}\n"
            f"Converged: {self.converged}\n"
            f"Elapsed Time: {self.elapsed_time:.3f}s"
        )


@dataclass(frozen=True)
class ResidualNorms:
    """方程式残差 |F + Δ_h U| の内部点でのノルム"""

    max: float
    rms: float


class RelaxationMethod(ABC):
    """1スイープ分の緩和を行う解法の基底クラス

    停止判定と反復ループは ``IterativeSolver`` が共通に持ち、
    サブクラスはスイープのみを実装します。
    """

    method: SolverMethod

    @property
    def name(self) -> str:
        return self.method.label

    @abstractmethod
    def sweep(self, u: np.ndarray, f: np.ndarray, h2: float) -> float:
        """内部セルを1回更新

        Args:
            u: 解（その場で更新）
            f: 右辺
            h2: 格子間隔の2乗

        Returns:
            このスイープでの最大更新量
        """
        pass

    def describe(self) -> Dict[str, Any]:
        """診断用のパラメータ"""
        return {"method": self.method.value}
