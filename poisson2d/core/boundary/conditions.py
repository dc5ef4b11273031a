"""一般化Dirichlet境界条件を提供するモジュール

単位正方形 [0,1]×[0,1] の各辺で次の条件を与えます。

- U(x, 0) = g0(x)  下辺
- U(x, 1) = g1(x)  上辺
- U(0, y) = h0(y)  左辺
- U(1, y) = h1(y)  右辺
"""

import logging
from enum import Enum
from typing import Dict, Optional, Tuple, Union
import numpy as np

from .base import (
    ArrayLike,
    ConstantEdge,
    Edge,
    EdgeFunction,
    ExpressionEdge,
    LinearEdge,
    PolynomialEdge,
    SinusoidalEdge,
    edge_function_from_dict,
)

CORNER_TOLERANCE = 1e-10


class BoundaryFamily(Enum):
    """境界条件の種類"""

    HOMOGENEOUS = "homogeneous"
    CONSTANT = "constant"
    LINEAR = "linear"
    SINUSOIDAL = "sinusoidal"
    POLYNOMIAL = "polynomial"
    CUSTOM = "custom"


class BoundaryConditions:
    """4辺の境界関数を保持する不変クラス

    Attributes:
        family: 境界条件の種類
        description: 表示用の説明文
    """

    def __init__(
        self,
        bottom: Optional[EdgeFunction] = None,
        top: Optional[EdgeFunction] = None,
        left: Optional[EdgeFunction] = None,
        right: Optional[EdgeFunction] = None,
        description: Optional[str] = None,
        family: BoundaryFamily = BoundaryFamily.CUSTOM,
        logger=None,
    ):
        """境界条件を初期化

        Args:
            bottom: 下辺 g0(x)
            top: 上辺 g1(x)
            left: 左辺 h0(y)
            right: 右辺 h1(y)
            description: 説明文（Noneの場合は各辺から生成）
            family: 境界条件の種類
            logger: ロガー（Noneの場合はモジュールロガー）
        """
        self._edges: Dict[Edge, EdgeFunction] = {
            Edge.BOTTOM: bottom or ConstantEdge(0.0),
            Edge.TOP: top or ConstantEdge(0.0),
            Edge.LEFT: left or ConstantEdge(0.0),
            Edge.RIGHT: right or ConstantEdge(0.0),
        }
        self.family = family
        self._description = description
        self.logger = logger or logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # 代表的な境界条件の生成
    # ------------------------------------------------------------------
    @classmethod
    def homogeneous(cls) -> "BoundaryConditions":
        """すべての辺で U = 0"""
        return cls(
            description="Homogeneous conditions U = 0",
            family=BoundaryFamily.HOMOGENEOUS,
        )

    @classmethod
    def constant(
        cls, bottom: float, top: float, left: float, right: float
    ) -> "BoundaryConditions":
        """各辺で一定値"""
        return cls(
            ConstantEdge(bottom),
            ConstantEdge(top),
            ConstantEdge(left),
            ConstantEdge(right),
            description=(
                f"Constant conditions: bottom={bottom:.2f}, top={top:.2f}, "
                f"left={left:.2f}, right={right:.2f}"
            ),
            family=BoundaryFamily.CONSTANT,
        )

    @classmethod
    def bilinear(
        cls, c00: float, c10: float, c01: float, c11: float
    ) -> "BoundaryConditions":
        """4隅の値 U(0,0), U(1,0), U(0,1), U(1,1) から各辺を線形補間

        隅の値を共有するため、生成される条件は常に隅で整合します。
        """
        return cls(
            LinearEdge(c00, c10),
            LinearEdge(c01, c11),
            LinearEdge(c00, c01),
            LinearEdge(c10, c11),
            description=(
                f"Linear conditions: corners ({c00:.2f}, {c10:.2f}, "
                f"{c01:.2f}, {c11:.2f})"
            ),
            family=BoundaryFamily.LINEAR,
        )

    @classmethod
    def sinusoidal(cls, amplitude: float, frequency: int) -> "BoundaryConditions":
        """すべての辺で A sin(kπt)"""
        edge = SinusoidalEdge(amplitude, frequency)
        return cls(
            edge,
            edge,
            edge,
            edge,
            description=f"Sinusoidal conditions: A={amplitude:.2f}, k={frequency}",
            family=BoundaryFamily.SINUSOIDAL,
        )

    @classmethod
    def quadratic(cls) -> "BoundaryConditions":
        """固定の2次多項式の組

        下辺 t(1-t)、上辺 0.5 t(1-t)、左辺 t^2、右辺 (1-t)^2。
        (0,1)と(1,0)の隅では整合しません。
        """
        return cls(
            PolynomialEdge((0.0, 1.0, -1.0)),
            PolynomialEdge((0.0, 0.5, -0.5)),
            PolynomialEdge((0.0, 0.0, 1.0)),
            PolynomialEdge((1.0, -2.0, 1.0)),
            description="Polynomial conditions (quadratic examples)",
            family=BoundaryFamily.POLYNOMIAL,
        )

    @classmethod
    def from_expressions(
        cls,
        bottom: str,
        top: str,
        left: str,
        right: str,
        description: Optional[str] = None,
    ) -> "BoundaryConditions":
        """各辺を t の数式文字列で与える"""
        return cls(
            ExpressionEdge(bottom),
            ExpressionEdge(top),
            ExpressionEdge(left),
            ExpressionEdge(right),
            description=description,
            family=BoundaryFamily.CUSTOM,
        )

    @classmethod
    def preset(cls, name: str) -> "BoundaryConditions":
        """名前付きの境界条件を生成

        Args:
            name: プリセット名（大文字小文字は区別しない）

        Raises:
            ValueError: 未知のプリセット名の場合
        """
        key = name.strip().lower()
        if key not in PRESETS:
            raise ValueError(
                f"未知の境界条件プリセット: {name} "
                f"(利用可能: {', '.join(sorted(PRESETS))})"
            )
        return PRESETS[key]()

    @classmethod
    def from_dict(cls, config: dict) -> "BoundaryConditions":
        """設定辞書から境界条件を生成

        ``{"preset": "linear"}`` または ``{"bottom": {...}, "top": {...}, ...}``
        の形式を受け付けます。
        """
        if "preset" in config and config["preset"]:
            return cls.preset(config["preset"])
        edges = {
            edge.value: edge_function_from_dict(config.get(edge.value, {}))
            for edge in Edge
        }
        return cls(description=config.get("description"), **edges)

    # ------------------------------------------------------------------
    # 評価
    # ------------------------------------------------------------------
    def edge_function(self, edge: Edge) -> EdgeFunction:
        """指定した辺の境界関数を取得"""
        return self._edges[Edge(edge)]

    def evaluate(self, edge: Union[Edge, str], t: ArrayLike) -> ArrayLike:
        """辺 edge 上のパラメータ t における境界値

        Args:
            edge: 辺（Edge または "bottom" などの文字列）
            t: 辺に沿ったパラメータ（スカラーまたは配列）

        Returns:
            境界値
        """
        return self._edges[Edge(edge)](t)

    def value_at(self, i: int, j: int, n_total: int, h: float) -> float:
        """格子点 (i, j) における境界値

        行 i は y = i h、列 j は x = j h に対応します。4隅では下辺・上辺を
        優先します。

        Args:
            i: 行インデックス
            j: 列インデックス
            n_total: 1方向あたりの格子点数（境界を含む）
            h: 格子間隔

        Returns:
            境界値

        Raises:
            ValueError: (i, j) が境界上にない場合
        """
        last = n_total - 1
        if not (0 <= i <= last and 0 <= j <= last):
            raise ValueError(f"点 ({i}, {j}) は格子 {n_total}x{n_total} の外です")
        if i == 0:
            return float(self.evaluate(Edge.BOTTOM, j * h))
        if i == last:
            return float(self.evaluate(Edge.TOP, j * h))
        if j == 0:
            return float(self.evaluate(Edge.LEFT, i * h))
        if j == last:
            return float(self.evaluate(Edge.RIGHT, i * h))
        raise ValueError(f"点 ({i}, {j}) は境界上にありません")

    def apply(self, grid: np.ndarray, h: float) -> None:
        """正方格子の境界セルに境界値を書き込む

        左右の辺を先に書き、下辺・上辺で隅を上書きするため、結果は
        ``value_at`` と一致します。内部セルには触れません。

        Args:
            grid: (n_total, n_total) の配列（その場で更新）
            h: 格子間隔
        """
        n_total = grid.shape[0]
        coords = np.arange(n_total) * h
        grid[:, 0] = self.evaluate(Edge.LEFT, coords)
        grid[:, -1] = self.evaluate(Edge.RIGHT, coords)
        grid[0, :] = self.evaluate(Edge.BOTTOM, coords)
        grid[-1, :] = self.evaluate(Edge.TOP, coords)

    def corner_values(self) -> Dict[str, Tuple[float, float]]:
        """4隅で隣接する2辺が与える値の組"""
        return {
            "(0,0)": (self.evaluate(Edge.BOTTOM, 0.0), self.evaluate(Edge.LEFT, 0.0)),
            "(1,0)": (self.evaluate(Edge.BOTTOM, 1.0), self.evaluate(Edge.RIGHT, 0.0)),
            "(0,1)": (self.evaluate(Edge.TOP, 0.0), self.evaluate(Edge.LEFT, 1.0)),
            "(1,1)": (self.evaluate(Edge.TOP, 1.0), self.evaluate(Edge.RIGHT, 1.0)),
        }

    def check_compatibility(self, tolerance: float = CORNER_TOLERANCE) -> bool:
        """隅での整合性を検査

        不整合は警告として記録するのみで、例外は送出しません。

        Returns:
            4隅すべてで差が tolerance 以内なら True
        """
        compatible = True
        for corner, (horizontal, vertical) in self.corner_values().items():
            if abs(horizontal - vertical) > tolerance:
                self.logger.warning(
                    f"Incompatible boundary values at corner {corner}: "
                    f"{horizontal} != {vertical}"
                )
                compatible = False
        return compatible

    def with_edge(
        self, edge: Union[Edge, str], function: EdgeFunction
    ) -> "BoundaryConditions":
        """1辺だけを置き換えた新しい境界条件を返す"""
        edges = {e.value: f for e, f in self._edges.items()}
        edges[Edge(edge).value] = function
        return BoundaryConditions(
            family=BoundaryFamily.CUSTOM, logger=self.logger, **edges
        )

    @property
    def description(self) -> str:
        """表示用の説明文"""
        if self._description:
            return self._description
        parts = [f"{e.value}: {f.describe()}" for e, f in self._edges.items()]
        return "Custom conditions: " + ", ".join(parts)

    def __eq__(self, other) -> bool:
        if not isinstance(other, BoundaryConditions):
            return NotImplemented
        return self._edges == other._edges

    def __hash__(self) -> int:
        return hash(tuple(self._edges[e] for e in Edge))

    def __repr__(self) -> str:
        edges = ", ".join(f"{e.value}={f!r}" for e, f in self._edges.items())
        return f"BoundaryConditions({edges})"

    def __str__(self) -> str:
        return self.description


def _harmonic() -> BoundaryConditions:
    """U = x^2 - y^2 の境界値"""
    return BoundaryConditions.from_expressions(
        bottom="t**2",
        top="t**2 - 1",
        left="-t**2",
        right="1 - t**2",
        description="Harmonic conditions U = x^2 - y^2",
    )


PRESETS = {
    "homogeneous": BoundaryConditions.homogeneous,
    "unit_constant": lambda: BoundaryConditions.constant(1.0, 1.0, 1.0, 1.0),
    "variable_constant": lambda: BoundaryConditions.constant(0.0, 1.0, 0.5, 0.8),
    "linear": lambda: BoundaryConditions.bilinear(0.0, 1.0, 0.0, 1.0),
    "sinusoidal": lambda: BoundaryConditions.sinusoidal(0.5, 1),
    "polynomial": BoundaryConditions.quadratic,
    "harmonic": _harmonic,
}
