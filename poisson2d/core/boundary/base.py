"""境界関数の基本型を提供するモジュール

単位正方形の各辺上の Dirichlet 値は、辺に沿ったパラメータ t∈[0,1] の関数
g(t) として与えられます。関数は任意のクロージャではなく、評価に必要な
パラメータだけを持つ不変のバリアント（定数・線形・正弦・多項式・式）で
表現します。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Tuple, Union
import numpy as np
import sympy

ArrayLike = Union[float, np.ndarray]


class Edge(Enum):
    """単位正方形の辺を表す列挙型"""

    BOTTOM = "bottom"  # y = 0, パラメータ t = x
    TOP = "top"  # y = 1, パラメータ t = x
    LEFT = "left"  # x = 0, パラメータ t = y
    RIGHT = "right"  # x = 1, パラメータ t = y


def _shape_like(t: ArrayLike, values: Any) -> ArrayLike:
    """入力がスカラーならfloat、配列なら同形状の配列を返す"""
    if np.ndim(t) == 0:
        return float(values)
    return np.broadcast_to(np.asarray(values, dtype=np.float64), np.shape(t)).copy()


class EdgeFunction(ABC):
    """境界関数 g: [0,1] → R の基底クラス"""

    @abstractmethod
    def __call__(self, t: ArrayLike) -> ArrayLike:
        """辺上のパラメータ t における値を評価

        Args:
            t: 辺に沿ったパラメータ（スカラーまたは配列）

        Returns:
            境界値（入力と同じ形状）
        """
        pass

    @abstractmethod
    def describe(self) -> str:
        """人間向けの説明文"""
        pass


@dataclass(frozen=True)
class ConstantEdge(EdgeFunction):
    """定数 g(t) = value"""

    value: float = 0.0

    def __call__(self, t: ArrayLike) -> ArrayLike:
        return _shape_like(t, self.value)

    def describe(self) -> str:
        return f"{self.value:g}"


@dataclass(frozen=True)
class LinearEdge(EdgeFunction):
    """始点と終点の値を線形補間 g(t) = start + t (end - start)"""

    start: float = 0.0
    end: float = 0.0

    def __call__(self, t: ArrayLike) -> ArrayLike:
        t_arr = np.asarray(t, dtype=np.float64)
        return _shape_like(t, self.start + t_arr * (self.end - self.start))

    def describe(self) -> str:
        return f"{self.start:g} -> {self.end:g}"


@dataclass(frozen=True)
class SinusoidalEdge(EdgeFunction):
    """正弦関数 g(t) = amplitude * sin(frequency * pi * t)"""

    amplitude: float = 1.0
    frequency: int = 1

    def __call__(self, t: ArrayLike) -> ArrayLike:
        t_arr = np.asarray(t, dtype=np.float64)
        return _shape_like(t, self.amplitude * np.sin(self.frequency * np.pi * t_arr))

    def describe(self) -> str:
        return f"{self.amplitude:g} sin({self.frequency}πt)"


@dataclass(frozen=True)
class PolynomialEdge(EdgeFunction):
    """多項式 g(t) = Σ c_k t^k（係数は昇冪順）"""

    coefficients: Tuple[float, ...] = (0.0,)

    def __post_init__(self):
        if len(self.coefficients) == 0:
            raise ValueError("多項式の係数が空です")
        object.__setattr__(
            self, "coefficients", tuple(float(c) for c in self.coefficients)
        )

    def __call__(self, t: ArrayLike) -> ArrayLike:
        t_arr = np.asarray(t, dtype=np.float64)
        return _shape_like(
            t, np.polynomial.polynomial.polyval(t_arr, self.coefficients)
        )

    def describe(self) -> str:
        terms = []
        for power, c in enumerate(self.coefficients):
            if c == 0.0:
                continue
            if power == 0:
                terms.append(f"{c:g}")
            elif power == 1:
                terms.append(f"{c:g}t")
            else:
                terms.append(f"{c:g}t^{power}")
        return " + ".join(terms) if terms else "0"


_T = sympy.Symbol("t")


@dataclass(frozen=True)
class ExpressionEdge(EdgeFunction):
    """文字列の数式で与える境界関数（例: ``"t**2 - 1"``）

    式はsympyで一度だけ解析し、numpy関数に変換して保持します。
    使用できる自由変数は ``t`` のみです。
    """

    expression: str
    _func: Callable = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        try:
            expr = sympy.sympify(self.expression, locals={"t": _T})
        except (sympy.SympifyError, SyntaxError, TypeError) as e:
            raise ValueError(f"境界式を解析できません: {self.expression!r}") from e

        extra = expr.free_symbols - {_T}
        if extra:
            names = ", ".join(sorted(str(s) for s in extra))
            raise ValueError(f"境界式に未知の変数が含まれています: {names}")

        object.__setattr__(self, "_func", sympy.lambdify(_T, expr, modules="numpy"))

    def __call__(self, t: ArrayLike) -> ArrayLike:
        t_arr = np.asarray(t, dtype=np.float64)
        return _shape_like(t, self._func(t_arr))

    def describe(self) -> str:
        return self.expression


def edge_function_from_dict(spec: dict) -> EdgeFunction:
    """設定辞書から境界関数を生成

    Args:
        spec: ``{"type": "constant", "value": 1.0}`` 形式の辞書

    Returns:
        対応する境界関数

    Raises:
        ValueError: 未知の種類が指定された場合
    """
    kind = str(spec.get("type", "constant")).lower()
    if kind == "constant":
        return ConstantEdge(float(spec.get("value", 0.0)))
    if kind == "linear":
        return LinearEdge(float(spec.get("start", 0.0)), float(spec.get("end", 0.0)))
    if kind == "sinusoidal":
        return SinusoidalEdge(
            float(spec.get("amplitude", 1.0)), int(spec.get("frequency", 1))
        )
    if kind == "polynomial":
        return PolynomialEdge(tuple(spec.get("coefficients", (0.0,))))
    if kind == "expression":
        if "expression" not in spec:
            raise ValueError("expression型の境界関数には 'expression' が必要です")
        return ExpressionEdge(str(spec["expression"]))
    raise ValueError(f"未対応の境界関数の種類です: {kind}")
