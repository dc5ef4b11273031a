"""テストケースのカタログ

各テストケースは、-ΔU = f の右辺 f、（あれば）厳密解 U、推奨する境界条件の
プリセット名の組です。関数はすべて numpy 配列 (x, y) に対してベクトル化
されています。
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
import numpy as np

from .core.boundary import BoundaryConditions

GridFunction = Callable[[np.ndarray, np.ndarray], np.ndarray]


@dataclass(frozen=True)
class TestCase:
    """テストケース

    Attributes:
        name: 識別名（例: "CAS1"）
        description: 右辺の説明
        source: 右辺 f(x, y)
        exact: 厳密解 U(x, y)（未知の場合None）
        exact_description: 厳密解の説明
        recommended_boundary: 推奨する境界条件プリセット名
    """

    __test__ = False  # pytestに収集させない

    name: str
    description: str
    source: GridFunction
    exact: Optional[GridFunction] = None
    exact_description: str = "Unknown solution"
    recommended_boundary: str = "homogeneous"

    @property
    def has_exact_solution(self) -> bool:
        return self.exact is not None

    def boundary_conditions(self) -> BoundaryConditions:
        """推奨する境界条件を生成"""
        return BoundaryConditions.preset(self.recommended_boundary)

    def __str__(self) -> str:
        return f"{self.name}: {self.description}"


def _sin_sin_source(x, y):
    return 2.0 * np.pi**2 * np.sin(np.pi * x) * np.sin(np.pi * y)


def _sin_sin_exact(x, y):
    return np.sin(np.pi * x) * np.sin(np.pi * y)


def _sin2_sin2_source(x, y):
    return 8.0 * np.pi**2 * np.sin(2 * np.pi * x) * np.sin(2 * np.pi * y)


def _sin2_sin2_exact(x, y):
    return np.sin(2 * np.pi * x) * np.sin(2 * np.pi * y)


def _unit_source(x, y):
    return np.ones_like(np.asarray(x, dtype=np.float64) + np.asarray(y))


def _radial_source(x, y):
    return x * x + y * y


def _bubble_source(x, y):
    return -2.0 * (x * x + y * y - x - y)


def _bubble_exact(x, y):
    return x * (1 - x) * y * (1 - y)


def _zero_source(x, y):
    return np.zeros_like(np.asarray(x, dtype=np.float64) + np.asarray(y))


def _harmonic_exact(x, y):
    return x * x - y * y


CAS1 = TestCase(
    "CAS1",
    "f = 2π²sin(πx)sin(πy)",
    _sin_sin_source,
    _sin_sin_exact,
    "U_exact = sin(πx)sin(πy)",
)
CAS2 = TestCase(
    "CAS2",
    "f = 8π²sin(2πx)sin(2πy)",
    _sin2_sin2_source,
    _sin2_sin2_exact,
    "U_exact = sin(2πx)sin(2πy)",
)
CAS3 = TestCase("CAS3", "f = 1 (constant)", _unit_source)
CAS4 = TestCase("CAS4", "f = x² + y²", _radial_source)
CAS5 = TestCase(
    "CAS5",
    "f = -2(x²+y²-x-y)",
    _bubble_source,
    _bubble_exact,
    "U_exact = x(1-x)y(1-y)",
)
CAS6 = TestCase(
    "CAS6",
    "f = 0 (harmonic)",
    _zero_source,
    _harmonic_exact,
    "U_exact = x² - y²",
    recommended_boundary="harmonic",
)


class TestCaseCatalog:
    """名前でテストケースを引くためのカタログ"""

    __test__ = False

    def __init__(self, cases: Optional[List[TestCase]] = None):
        cases = cases if cases is not None else [CAS1, CAS2, CAS3, CAS4, CAS5, CAS6]
        self._cases: Dict[str, TestCase] = {c.name.upper(): c for c in cases}

    def get(self, name: str) -> TestCase:
        """名前（大文字小文字を区別しない）でテストケースを取得

        Raises:
            ValueError: 未知の名前の場合
        """
        key = name.strip().upper()
        if key not in self._cases:
            raise ValueError(
                f"未知のテストケース: {name} (利用可能: {', '.join(self.names())})"
            )
        return self._cases[key]

    def register(self, case: TestCase) -> None:
        """テストケースを追加（同名は上書き）"""
        self._cases[case.name.upper()] = case

    def names(self) -> List[str]:
        return list(self._cases)

    def __iter__(self):
        return iter(self._cases.values())

    def __len__(self) -> int:
        return len(self._cases)

    def __contains__(self, name: str) -> bool:
        return name.strip().upper() in self._cases


DEFAULT_CATALOG = TestCaseCatalog()


def get_test_case(name: str) -> TestCase:
    """既定カタログからテストケースを取得"""
    return DEFAULT_CATALOG.get(name)
