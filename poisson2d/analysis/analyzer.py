"""離散化誤差と反復収束の解析

厳密解との比較による誤差ノルム、格子細分化による経験的収束次数、
反復履歴からの漸近収束率を計算します。5点差分は O(h²) の離散化なので、
収束次数の理論値は 2.0 です。
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence, Union
import numpy as np

from ..catalog import TestCase, get_test_case
from ..core.boundary import BoundaryConditions
from ..core.mesh import Mesh
from ..numerics.poisson import IterativeSolver, SolverMethod
from .results import ConvergenceStudy, ErrorAnalysis, MethodComparison

# この値以下の誤差は丸め誤差とみなす
ERROR_FLOOR = 1e-15


class ErrorAnalyzer:
    """誤差解析器

    ``solver`` を渡すとそのスレッドプールを共有し、渡さなければ
    求解のたびに一時的なソルバーを生成して終了時に解放します。
    """

    def __init__(self, solver: Optional[IterativeSolver] = None, logger=None):
        self.solver = solver
        self.logger = logger or logging.getLogger(__name__)

    @contextmanager
    def _solver_scope(self) -> Iterator[IterativeSolver]:
        if self.solver is not None:
            yield self.solver
        else:
            with IterativeSolver(logger=self.logger) as solver:
                yield solver

    # ------------------------------------------------------------------
    # 誤差ノルム
    # ------------------------------------------------------------------
    def compute_errors(self, mesh: Mesh) -> ErrorAnalysis:
        """現在の解と厳密解の差を評価（格子は変更しない）

        Args:
            mesh: 対象の格子

        Returns:
            誤差解析結果。厳密解がない場合は ``available=False``
        """
        if not mesh.has_exact_solution:
            self.logger.info("Exact solution unavailable; skipping error norms")
            return ErrorAnalysis.unavailable(mesh.n_total)

        error_map = np.abs(mesh.U - mesh.exact_solution)
        error_map[mesh.boundary_mask] = 0.0

        interior = error_map[1:-1, 1:-1]
        n_points = interior.size
        analysis = ErrorAnalysis(
            l2_error=float(mesh.h * np.sqrt(np.sum(interior**2))),
            max_error=float(interior.max()),
            mean_error=float(interior.sum() / n_points),
            error_map=error_map,
            points_analyzed=n_points,
            available=True,
        )
        self.logger.debug(
            f"Errors on {mesh.n_total}x{mesh.n_total}: L2 = {analysis.l2_error:.3e}, "
            f"max = {analysis.max_error:.3e}"
        )
        return analysis

    # ------------------------------------------------------------------
    # 収束次数
    # ------------------------------------------------------------------
    @staticmethod
    def local_orders(errors: Sequence[float], h_values: Sequence[float]) -> np.ndarray:
        """隣接する格子の組ごとの局所収束次数 ln(e_k/e_{k+1}) / ln(h_k/h_{k+1})

        どちらかの誤差が ERROR_FLOOR 以下（または非有限）の組は NaN です。
        """
        errors = np.asarray(errors, dtype=np.float64)
        h_values = np.asarray(h_values, dtype=np.float64)
        orders = np.full(max(len(errors) - 1, 0), np.nan)

        for k in range(len(orders)):
            e0, e1 = errors[k], errors[k + 1]
            if not (np.isfinite(e0) and np.isfinite(e1)):
                continue
            if e0 <= ERROR_FLOOR or e1 <= ERROR_FLOOR:
                continue
            if h_values[k] == h_values[k + 1]:
                continue
            orders[k] = np.log(e0 / e1) / np.log(h_values[k] / h_values[k + 1])
        return orders

    @staticmethod
    def mean_order(orders: np.ndarray) -> float:
        """NaN でない局所次数の平均（なければ NaN）"""
        valid = orders[~np.isnan(orders)]
        return float(valid.mean()) if valid.size else float("nan")

    def study_convergence(
        self,
        test_case: Union[TestCase, str],
        mesh_sizes: Sequence[int],
        method: Union[SolverMethod, str] = SolverMethod.GAUSS_SEIDEL,
        boundary_conditions: Optional[BoundaryConditions] = None,
        tolerance: float = 1e-10,
        max_iterations: int = 50000,
        omega: Optional[float] = None,
    ) -> ConvergenceStudy:
        """格子を細分化して経験的な収束次数を求める

        各サイズで新しい格子を作り、テストケースを設定して解き、誤差を
        評価します。反復誤差が離散化誤差を汚さないよう、許容誤差は
        十分小さくしてください。

        Args:
            test_case: テストケースまたはその名前
            mesh_sizes: 格子点数 n_total の列（2つ以上）
            method: 解法
            boundary_conditions: 境界条件（Noneの場合はテストケースの推奨値）
            tolerance: 各求解の許容誤差
            max_iterations: 各求解の最大反復回数
            omega: SORの緩和係数（Noneの場合は設定値）

        Returns:
            収束調査の結果

        Raises:
            ValueError: 格子サイズが2つ未満の場合
        """
        mesh_sizes = [int(n) for n in mesh_sizes]
        if len(mesh_sizes) < 2:
            raise ValueError("収束調査には2つ以上の格子サイズが必要です")

        if isinstance(test_case, str):
            test_case = get_test_case(test_case)
        method = SolverMethod.parse(method)
        if boundary_conditions is None:
            boundary_conditions = test_case.boundary_conditions()

        self.logger.info(
            f"Convergence study for {test_case.name} with {method.label} "
            f"on sizes {mesh_sizes}"
        )

        h_values, l2_errors, max_errors, results, analyses = [], [], [], [], []
        with self._solver_scope() as solver:
            for n_total in mesh_sizes:
                mesh = Mesh(n_total, boundary_conditions)
                mesh.configure_test_case(test_case)
                result = solver.solve(mesh, method, tolerance, max_iterations, omega)
                analysis = self.compute_errors(mesh)

                h_values.append(mesh.h)
                l2_errors.append(analysis.l2_error)
                max_errors.append(analysis.max_error)
                results.append(result)
                analyses.append(analysis)

                self.logger.info(
                    f"N = {n_total}: h = {mesh.h:.6f}, L2 = {analysis.l2_error:.6e}, "
                    f"max = {analysis.max_error:.6e}, iterations = {result.iterations}"
                )

        l2_orders = self.local_orders(l2_errors, h_values)
        max_orders = self.local_orders(max_errors, h_values)
        study = ConvergenceStudy(
            test_case=test_case.name,
            method=method.label,
            mesh_sizes=tuple(mesh_sizes),
            h_values=h_values,
            l2_errors=l2_errors,
            max_errors=max_errors,
            l2_orders=l2_orders,
            max_orders=max_orders,
            l2_order=self.mean_order(l2_orders),
            max_order=self.mean_order(max_orders),
            results=tuple(results),
            analyses=tuple(analyses),
        )
        self.logger.info(
            f"Observed order: L2 = {study.l2_order:.3f}, max = {study.max_order:.3f} "
            f"(expected {study.expected_order:.1f})"
        )
        return study

    # ------------------------------------------------------------------
    # 反復収束
    # ------------------------------------------------------------------
    @staticmethod
    def analyze_iterative_convergence(error_history: Sequence[float]) -> float:
        """漸近収束率 ρ を推定

        履歴の後半で e_{k+1}/e_k を平均します。両方の誤差が ERROR_FLOOR を
        超え、比が (0, 1) にあるものだけを数えます。

        Returns:
            収束率。履歴が3未満か、該当する比がない場合は NaN
        """
        history = np.asarray(error_history, dtype=np.float64)
        if history.size < 3:
            return float("nan")

        ratios = []
        for k in range(history.size // 2, history.size - 1):
            e0, e1 = history[k], history[k + 1]
            if e0 > ERROR_FLOOR and e1 > ERROR_FLOOR:
                ratio = e1 / e0
                if 0.0 < ratio < 1.0:
                    ratios.append(ratio)

        return float(np.mean(ratios)) if ratios else float("nan")

    @staticmethod
    def calculate_discretization_error_estimate(mesh: Mesh) -> float:
        """離散化誤差の目安 h²/12（参考値）"""
        return mesh.h**2 / 12.0

    # ------------------------------------------------------------------
    # 解法比較
    # ------------------------------------------------------------------
    def compare_methods(
        self,
        mesh: Mesh,
        methods: Optional[Sequence[Union[SolverMethod, str]]] = None,
        tolerance: Optional[float] = None,
        max_iterations: Optional[int] = None,
        omega: Optional[float] = None,
    ) -> List[MethodComparison]:
        """同じ初期状態から複数の解法で解いて比較

        各解法の前に内部の解を保存し、終了後に復元するので、呼び出し後の
        格子は呼び出し前と同じ状態です。

        Args:
            mesh: テストケース設定済みの格子
            methods: 比較する解法（Noneの場合は全解法）
            tolerance: 許容誤差（Noneの場合はソルバー設定値）
            max_iterations: 最大反復回数（Noneの場合はソルバー設定値）
            omega: SORの緩和係数（Noneの場合はソルバー設定値）

        Returns:
            解法ごとの比較結果
        """
        methods = [SolverMethod.parse(m) for m in (methods or list(SolverMethod))]
        comparisons = []

        with self._solver_scope() as solver:
            for method in methods:
                saved = mesh.snapshot()
                try:
                    result = solver.solve(mesh, method, tolerance, max_iterations, omega)
                    comparison = MethodComparison(
                        method=result.method,
                        result=result,
                        analysis=self.compute_errors(mesh),
                        convergence_factor=self.analyze_iterative_convergence(
                            result.error_history
                        ),
                        residual=solver.calculate_residual(mesh),
                        omega=result.omega,
                    )
                finally:
                    mesh.restore(saved)
                comparisons.append(comparison)

                self.logger.info(
                    f"{comparison.method}: {result.iterations} iterations, "
                    f"{result.elapsed_time:.3f} s, factor = {comparison.convergence_factor:.4f}"
                )

        return comparisons
