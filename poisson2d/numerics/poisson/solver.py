"""5点ステンシル反復ソルバー

-ΔU = f を5点差分で離散化した

    (U[i-1,j] + U[i+1,j] + U[i,j-1] + U[i,j+1] - 4 U[i,j]) / h^2 = -F[i,j]

を、格子上で直接反復して解きます（行列は組み立てません）。
3つの解法（Gauss-Seidel、SOR、赤黒並列）は同じ停止規則を共有します。
各スイープ後に内部セルの最大更新量 e_k を計算し、e_k <= tolerance で
収束、k = max_iterations で打ち切りです。収束しない場合も例外ではなく
``converged=False`` の結果を返します。更新量が非有限値（発散）になった
場合はその反復で打ち切ります。
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional, Union
import numpy as np

from ...core.mesh import Mesh
from .base import (
    ConvergenceResult,
    ProgressCallback,
    RelaxationMethod,
    ResidualNorms,
    SolverMethod,
)
from .config import SolverConfig
from .methods import GaussSeidelMethod, RedBlackMethod, SORMethod, optimal_omega


class IterativeSolver:
    """Gauss-Seidel系反復ソルバー

    赤黒法用のスレッドプールはインスタンスごとに生成され、``shutdown()``
    または ``with`` ブロックの終了で解放されます。

    Example:
        >>> with IterativeSolver() as solver:
        ...     result = solver.solve(mesh, "red_black", 1e-8, 10000)
    """

    def __init__(self, config: Optional[SolverConfig] = None, logger=None):
        """ソルバーを初期化

        Args:
            config: ソルバー設定（既定値の供給元）
            logger: ロガー（Noneの場合はモジュールロガー）
        """
        self.config = config or SolverConfig()
        self.config.validate()
        self.logger = logger or logging.getLogger(__name__)

        self.num_workers = self.config.num_workers or os.cpu_count() or 1
        self._executor = ThreadPoolExecutor(
            max_workers=self.num_workers, thread_name_prefix="red-black"
        )
        self._closed = False
        self._last_result: Optional[ConvergenceResult] = None

        self.logger.debug(
            f"Iterative solver initialized with {self.num_workers} worker thread(s)"
        )

    # ------------------------------------------------------------------
    # リソース管理
    # ------------------------------------------------------------------
    def shutdown(self) -> None:
        """スレッドプールを停止（複数回呼んでもよい）"""
        if not self._closed:
            self._executor.shutdown(wait=True)
            self._closed = True
            self.logger.debug("Iterative solver thread pool shut down")

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "IterativeSolver":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
        return False

    # ------------------------------------------------------------------
    # 求解
    # ------------------------------------------------------------------
    def _create_method(
        self, method: SolverMethod, omega: Optional[float], mesh: Mesh
    ) -> RelaxationMethod:
        if method is SolverMethod.GAUSS_SEIDEL:
            return GaussSeidelMethod()
        if method is SolverMethod.SOR:
            if omega is None:
                omega = self.config.resolve_omega(mesh.n_interior)
            return SORMethod(omega)
        if self._closed:
            raise RuntimeError("Solver has been shut down; red-black method unavailable")
        return RedBlackMethod(self._executor, self.num_workers)

    def solve(
        self,
        mesh: Mesh,
        method: Union[SolverMethod, str, None] = None,
        tolerance: Optional[float] = None,
        max_iterations: Optional[int] = None,
        omega: Optional[float] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ConvergenceResult:
        """格子の解をその場で更新して方程式を解く

        Args:
            mesh: テストケース設定済みの格子
            method: 解法（Noneの場合は設定値）
            tolerance: 最大更新量に対する許容誤差（Noneの場合は設定値）
            max_iterations: 最大反復回数（Noneの場合は設定値）
            omega: SORの緩和係数（SOR以外では無視、Noneの場合は設定値）
            progress_callback: 反復番号を受け取る関数。``progress_interval``
                反復ごとに、スイープ完了後の呼び出しスレッドから呼ばれる

        Returns:
            収束結果

        Raises:
            ValueError: mesh がNone、または tolerance / max_iterations が不正な場合
            RuntimeError: 同じ格子が別の求解で使用中の場合
        """
        if mesh is None:
            raise ValueError("格子が指定されていません")

        method = SolverMethod.parse(method or self.config.method)
        tolerance = self.config.tolerance if tolerance is None else float(tolerance)
        max_iterations = (
            self.config.max_iterations if max_iterations is None else int(max_iterations)
        )
        if tolerance <= 0:
            raise ValueError(f"許容誤差は正の値である必要があります: {tolerance}")
        if max_iterations < 1:
            raise ValueError(f"最大反復回数は1以上である必要があります: {max_iterations}")

        relaxation = self._create_method(method, omega, mesh)
        interval = self.config.progress_interval

        if mesh.test_case is None:
            self.logger.warning("Solving a mesh with no configured test case (F = 0)")
        mesh.verify_consistency()

        self.logger.info(
            f"Starting {relaxation.name}: tolerance = {tolerance:g}, "
            f"max iterations = {max_iterations}"
        )
        self.logger.debug(f"Method parameters: {relaxation.describe()}")

        h2 = mesh.h * mesh.h
        f = mesh.F
        history = np.zeros(max_iterations + 1)
        iteration = 0
        error = np.inf
        diverged = False

        start = time.perf_counter()
        with mesh.exclusive_access() as u:
            while True:
                error = relaxation.sweep(u, f, h2)
                iteration += 1
                history[iteration] = error

                if not np.isfinite(error):
                    diverged = True
                    break

                if progress_callback is not None and iteration % interval == 0:
                    progress_callback(iteration)

                if error <= tolerance or iteration >= max_iterations:
                    break
        elapsed = time.perf_counter() - start

        converged = bool(not diverged and error <= tolerance)
        result = ConvergenceResult(
            iterations=iteration,
            final_error=float(error),
            converged=converged,
            method=relaxation.name,
            elapsed_time=elapsed,
            error_history=history[: iteration + 1],
            tolerance=tolerance,
            omega=getattr(relaxation, "omega", None),
        )
        self._last_result = result

        self.logger.info(
            f"{relaxation.name} finished: iterations = {iteration}, "
            f"final error = {error:.3e}, converged = {converged}, "
            f"time = {elapsed:.3f} s"
        )
        if diverged:
            self.logger.warning(
                f"{relaxation.name} diverged: update is no longer finite",
                extra={"iteration": iteration},
            )
        elif not converged:
            self.logger.warning(
                f"{relaxation.name} did not converge within {max_iterations} iterations "
                f"(last update {error:.3e} > {tolerance:g})"
            )
        return result

    def solve_default(
        self, mesh: Mesh, method: Union[SolverMethod, str, None] = None
    ) -> ConvergenceResult:
        """設定値（既定: tolerance=1e-6, 1000反復, ω=1）で解く"""
        return self.solve(mesh, method)

    def solve_sor(self, mesh: Mesh, omega: float) -> ConvergenceResult:
        """指定した緩和係数のSOR法で解く"""
        return self.solve(mesh, SolverMethod.SOR, omega=omega)

    # ------------------------------------------------------------------
    # 診断
    # ------------------------------------------------------------------
    @staticmethod
    def residual_field(mesh: Mesh) -> np.ndarray:
        """内部点での残差 |F + Δ_h U| （形状は内部格子）"""
        u = mesh.U
        h2 = mesh.h * mesh.h
        laplacian = (
            u[:-2, 1:-1] + u[2:, 1:-1] + u[1:-1, :-2] + u[1:-1, 2:] - 4.0 * u[1:-1, 1:-1]
        ) / h2
        return np.abs(mesh.F[1:-1, 1:-1] + laplacian)

    @classmethod
    def calculate_residual_norms(cls, mesh: Mesh) -> ResidualNorms:
        """残差の最大値とRMSを計算"""
        residual = cls.residual_field(mesh)
        return ResidualNorms(
            max=float(residual.max()), rms=float(np.sqrt(np.mean(residual**2)))
        )

    @classmethod
    def calculate_residual(cls, mesh: Mesh) -> float:
        """方程式残差の最大値 max|F + Δ_h U|

        反復の停止判定とは独立に解の妥当性を確認するためのものです。
        """
        return cls.calculate_residual_norms(mesh).max

    @staticmethod
    def optimal_omega(n_interior: int) -> float:
        """SORの最適緩和係数 2 / (1 + sin(π/(N+1)))"""
        return optimal_omega(n_interior)

    @property
    def last_result(self) -> Optional[ConvergenceResult]:
        return self._last_result

    def get_status(self) -> Dict[str, Any]:
        """ソルバーの現在の状態を取得"""
        status: Dict[str, Any] = {
            "num_workers": self.num_workers,
            "closed": self._closed,
            "config": self.config.to_dict(),
        }
        if self._last_result is not None:
            status["last_result"] = self._last_result.to_dict()
        return status
