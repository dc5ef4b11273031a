"""差分法のための2次元格子を提供するモジュール

単位正方形 [0,1]×[0,1] を一様格子に分割し、解 U、右辺 F、厳密解、
境界マスクを保持します。格子点数 n_total は境界の行・列を含み、
格子間隔は h = 1/(n_total-1) です。行 i は y = i h、列 j は x = j h に
対応します。
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Tuple
import numpy as np

from .boundary import BoundaryConditions

BOUNDARY_CONSISTENCY_TOLERANCE = 1e-12
BOUNDARY_WRITE_TOLERANCE = 1e-10


def _read_only(array: np.ndarray) -> np.ndarray:
    """書き込み不可のビューを返す（コピーはしない）"""
    view = array.view()
    view.flags.writeable = False
    return view


class Mesh:
    """2次元Poisson問題の格子

    境界セルの値は常に境界条件と一致します（Dirichlet不変条件）。
    境界セルを書き換えられるのは ``apply_boundary_conditions`` のみです。
    """

    def __init__(
        self,
        n_total: int,
        boundary_conditions: Optional[BoundaryConditions] = None,
        logger=None,
    ):
        """格子を初期化

        Args:
            n_total: 1方向あたりの格子点数（境界を含む、3以上）
            boundary_conditions: 境界条件（Noneの場合は同次条件）
            logger: ロガー（Noneの場合はモジュールロガー）

        Raises:
            ValueError: n_total が3未満の場合
        """
        if int(n_total) != n_total or n_total < 3:
            raise ValueError(f"格子点数は3以上の整数である必要があります: {n_total}")

        self._n_total = int(n_total)
        self._h = 1.0 / (self._n_total - 1)
        self.logger = logger or logging.getLogger(__name__)

        shape = (self._n_total, self._n_total)
        self._u = np.zeros(shape)
        self._f = np.zeros(shape)
        self._exact = np.zeros(shape)
        self._boundary = np.zeros(shape, dtype=bool)
        self._boundary[0, :] = self._boundary[-1, :] = True
        self._boundary[:, 0] = self._boundary[:, -1] = True
        self._boundary.flags.writeable = False

        self._boundary_conditions = boundary_conditions or BoundaryConditions.homogeneous()
        self._test_case = None
        self._solve_lock = threading.Lock()

        self.apply_boundary_conditions()
        self.logger.debug(
            f"Mesh initialized: {self._n_total}x{self._n_total} points, h = {self._h}"
        )

    # ------------------------------------------------------------------
    # 基本情報
    # ------------------------------------------------------------------
    @property
    def n_total(self) -> int:
        """1方向あたりの格子点数（境界を含む）"""
        return self._n_total

    @property
    def n_interior(self) -> int:
        """1方向あたりの内部点数"""
        return self._n_total - 2

    @property
    def h(self) -> float:
        """格子間隔"""
        return self._h

    @property
    def shape(self) -> Tuple[int, int]:
        return (self._n_total, self._n_total)

    @property
    def boundary_conditions(self) -> BoundaryConditions:
        return self._boundary_conditions

    @property
    def test_case(self):
        """設定済みのテストケース（未設定ならNone）"""
        return self._test_case

    # 読み取り専用ビュー
    @property
    def U(self) -> np.ndarray:
        return _read_only(self._u)

    @property
    def F(self) -> np.ndarray:
        return _read_only(self._f)

    @property
    def exact_solution(self) -> np.ndarray:
        return _read_only(self._exact)

    @property
    def boundary_mask(self) -> np.ndarray:
        return self._boundary

    @property
    def has_exact_solution(self) -> bool:
        """厳密解が利用可能か（全ゼロの場合は利用不可）"""
        return bool(np.any(self._exact != 0.0))

    # ------------------------------------------------------------------
    # 境界条件とテストケース
    # ------------------------------------------------------------------
    def apply_boundary_conditions(self) -> None:
        """境界セルに境界値を書き込む（内部セルは変更しない）"""
        self._boundary_conditions.apply(self._u, self._h)

    def set_boundary_conditions(self, boundary_conditions: BoundaryConditions) -> None:
        """境界条件を置き換えて境界セルを更新"""
        self._boundary_conditions = boundary_conditions
        self.apply_boundary_conditions()
        boundary_conditions.check_compatibility()

    def configure_test_case(
        self, test_case, boundary_conditions: Optional[BoundaryConditions] = None
    ) -> None:
        """テストケースを設定

        内部の U を0に戻し、全格子点（境界を含む）で F と厳密解を計算して
        から境界条件を適用します。

        Args:
            test_case: テストケース（source と exact を持つオブジェクト）
            boundary_conditions: 新しい境界条件（Noneの場合は現在のもの）
        """
        self.logger.info(f"Configuring {test_case}")

        if boundary_conditions is not None:
            self._boundary_conditions = boundary_conditions
            boundary_conditions.check_compatibility()

        self._u[1:-1, 1:-1] = 0.0

        x, y = self.coordinate_grids()
        self._f[:] = test_case.source(x, y)
        if test_case.exact is not None:
            self._exact[:] = test_case.exact(x, y)
        else:
            self._exact[:] = 0.0

        self._test_case = test_case
        self.apply_boundary_conditions()

        if not self.verify_consistency():
            self.logger.warning("Mesh boundary is inconsistent after configuration")

    def verify_consistency(self, tolerance: float = BOUNDARY_CONSISTENCY_TOLERANCE) -> bool:
        """境界セルの値が境界条件と一致するか検査

        不一致は警告として記録するのみです。

        Returns:
            すべての境界セルが tolerance 以内で一致すれば True
        """
        expected = np.zeros_like(self._u)
        self._boundary_conditions.apply(expected, self._h)
        mismatch = np.abs(self._u - expected) > tolerance
        mismatch &= self._boundary

        count = int(mismatch.sum())
        if count:
            i, j = np.argwhere(mismatch)[0]
            self.logger.warning(
                f"Boundary inconsistency at {count} cell(s); first at ({i}, {j}): "
                f"U = {self._u[i, j]}, expected {expected[i, j]}"
            )
            return False
        return True

    # ------------------------------------------------------------------
    # 点ごとのアクセス
    # ------------------------------------------------------------------
    def _check_index(self, i: int, j: int) -> None:
        if not (0 <= i < self._n_total and 0 <= j < self._n_total):
            raise IndexError(
                f"点 ({i}, {j}) は格子 {self._n_total}x{self._n_total} の外です"
            )

    def is_boundary(self, i: int, j: int) -> bool:
        self._check_index(i, j)
        return bool(self._boundary[i, j])

    def get_u(self, i: int, j: int) -> float:
        self._check_index(i, j)
        return float(self._u[i, j])

    def set_u(self, i: int, j: int, value: float) -> bool:
        """点 (i, j) の値を設定

        内部セルのみ書き込み可能です。境界セルへの書き込みは、境界値と
        一致する場合のみ受理され（値は変わらない）、それ以外は警告を出して
        拒否します。

        Returns:
            書き込みが受理された場合 True

        Raises:
            IndexError: 格子外の点を指定した場合
        """
        self._check_index(i, j)
        if not self._boundary[i, j]:
            self._u[i, j] = value
            return True

        expected = self._boundary_conditions.value_at(i, j, self._n_total, self._h)
        if abs(value - expected) > BOUNDARY_WRITE_TOLERANCE:
            self.logger.warning(
                f"Rejected write to boundary cell ({i}, {j}): "
                f"{value} != boundary value {expected}"
            )
            return False
        return True

    def neighbors(self, i: int, j: int) -> Tuple[float, float, float, float]:
        """内部点 (i, j) の5点ステンシルの隣接値

        Returns:
            (U[i-1,j], U[i+1,j], U[i,j-1], U[i,j+1])

        Raises:
            ValueError: 境界セルを指定した場合
        """
        self._check_index(i, j)
        if self._boundary[i, j]:
            raise ValueError(f"点 ({i}, {j}) は境界セルです")
        u = self._u
        return (
            float(u[i - 1, j]),
            float(u[i + 1, j]),
            float(u[i, j - 1]),
            float(u[i, j + 1]),
        )

    # ------------------------------------------------------------------
    # 座標とインデックス変換
    # ------------------------------------------------------------------
    def coordinates_of(self, i: int, j: int) -> Tuple[float, float]:
        """格子インデックスから物理座標 (x, y) = (j h, i h)"""
        self._check_index(i, j)
        return (j * self._h, i * self._h)

    def coordinate_grids(self) -> Tuple[np.ndarray, np.ndarray]:
        """全格子点の座標配列 (x, y)、x[i, j] = j h、y[i, j] = i h"""
        coords = np.arange(self._n_total) * self._h
        y, x = np.meshgrid(coords, coords, indexing="ij")
        return x, y

    def indices_to_linear(self, i: int, j: int) -> int:
        """内部点 (i, j) の線形インデックス k = (i-1) N + (j-1)

        Raises:
            ValueError: 内部点でない場合
        """
        n = self.n_interior
        if not (1 <= i <= n and 1 <= j <= n):
            raise ValueError(f"点 ({i}, {j}) は内部点ではありません (1..{n})")
        return (i - 1) * n + (j - 1)

    def linear_to_indices(self, k: int) -> Tuple[int, int]:
        """線形インデックス k から内部点 (i, j) を復元

        Raises:
            ValueError: k が範囲外の場合
        """
        n = self.n_interior
        if not (0 <= k < n * n):
            raise ValueError(f"線形インデックス {k} は範囲外です (0..{n * n - 1})")
        return (k // n + 1, k % n + 1)

    # ------------------------------------------------------------------
    # 状態の保存と復元
    # ------------------------------------------------------------------
    def snapshot(self) -> np.ndarray:
        """内部セルの値のコピーを返す"""
        return self._u[1:-1, 1:-1].copy()

    def restore(self, snapshot: np.ndarray) -> None:
        """``snapshot`` で保存した内部セルの値を復元

        境界セルはスナップショットではなく境界条件から再計算します。

        Raises:
            ValueError: 形状が一致しない場合
        """
        snapshot = np.asarray(snapshot, dtype=np.float64)
        n = self.n_interior
        if snapshot.shape == (n, n):
            self._u[1:-1, 1:-1] = snapshot
        elif snapshot.shape == self.shape:
            self._u[1:-1, 1:-1] = snapshot[1:-1, 1:-1]
        else:
            raise ValueError(
                f"スナップショットの形状 {snapshot.shape} が格子と一致しません"
            )
        self.apply_boundary_conditions()
        if not self.verify_consistency():
            self.logger.warning("Boundary mismatch after restore")

    @contextmanager
    def exclusive_access(self) -> Iterator[np.ndarray]:
        """ソルバー用に書き込み可能な U を排他的に貸し出す

        Raises:
            RuntimeError: 既に別の求解が実行中の場合
        """
        if not self._solve_lock.acquire(blocking=False):
            raise RuntimeError("This mesh is already being solved")
        try:
            yield self._u
        finally:
            self._solve_lock.release()

    # ------------------------------------------------------------------
    # 診断
    # ------------------------------------------------------------------
    def get_diagnostics(self) -> Dict[str, Any]:
        """格子の診断情報を取得"""
        interior = self._u[1:-1, 1:-1]
        return {
            "n_total": self._n_total,
            "n_interior": self.n_interior,
            "h": self._h,
            "unknowns": self.n_interior**2,
            "test_case": getattr(self._test_case, "name", None),
            "boundary_conditions": self._boundary_conditions.description,
            "has_exact_solution": self.has_exact_solution,
            "u_min": float(interior.min()),
            "u_max": float(interior.max()),
        }

    def __repr__(self) -> str:
        return f"Mesh(n_total={self._n_total}, h={self._h:.6g})"
