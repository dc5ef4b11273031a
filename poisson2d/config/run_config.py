"""実行設定

YAMLファイル1つで、テストケース、格子、境界条件、ソルバー、収束調査、
ロギングの設定をまとめて記述します。

Example:
    test_case: CAS1
    mesh:
      n_total: 33
    boundary:
      preset: homogeneous
    solver:
      method: sor
      omega: optimal
    study:
      mesh_sizes: [9, 17, 33]
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import yaml

from ..catalog import TestCase, get_test_case
from ..core.boundary import PRESETS, BoundaryConditions, Edge
from ..logger import LogConfig
from ..numerics.poisson.config import SolverConfig
from .base import BaseConfig, load_config_safely

# テストケースの推奨境界条件を使う指定
RECOMMENDED_BOUNDARY = "recommended"


@dataclass
class MeshConfig(BaseConfig):
    """格子の設定"""

    n_total: int = 33

    def validate(self) -> None:
        if isinstance(self.n_total, bool) or not isinstance(self.n_total, int):
            raise ValueError(f"n_totalは整数である必要があります: {self.n_total!r}")
        if self.n_total < 3:
            raise ValueError(f"n_totalは3以上である必要があります: {self.n_total}")

    def load(self, config_dict: Dict[str, Any]) -> "MeshConfig":
        merged = load_config_safely(config_dict, self.to_dict())
        return MeshConfig(n_total=merged["n_total"])


@dataclass
class BoundaryConfig(BaseConfig):
    """境界条件の設定

    ``edges`` が空でなければ辺ごとの指定（``{"bottom": {"type": "linear",
    "start": 0, "end": 1}, ...}``）を使い、空ならプリセット名を使います。
    プリセット名 ``"recommended"`` はテストケースの推奨値を意味します。
    """

    preset: str = "homogeneous"
    edges: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def validate(self) -> None:
        if self.edges:
            valid_edges = {edge.value for edge in Edge}
            unknown = set(self.edges) - valid_edges - {"description"}
            if unknown:
                raise ValueError(f"未知の境界の辺: {', '.join(sorted(unknown))}")
            # 式の構文エラーなどをここで検出
            BoundaryConditions.from_dict(self.edges)
        elif self.preset.lower() != RECOMMENDED_BOUNDARY and self.preset.lower() not in PRESETS:
            raise ValueError(
                f"未知の境界条件プリセット: {self.preset} "
                f"(利用可能: {', '.join(sorted(PRESETS))}, {RECOMMENDED_BOUNDARY})"
            )

    def load(self, config_dict: Dict[str, Any]) -> "BoundaryConfig":
        merged = load_config_safely(config_dict, {"preset": self.preset, "edges": {}})
        return BoundaryConfig(preset=str(merged["preset"]), edges=dict(merged["edges"]))

    def build(self, test_case: Optional[TestCase] = None) -> BoundaryConditions:
        """設定から境界条件を生成"""
        if self.edges:
            return BoundaryConditions.from_dict(self.edges)
        if self.preset.lower() == RECOMMENDED_BOUNDARY:
            if test_case is None:
                return BoundaryConditions.homogeneous()
            return test_case.boundary_conditions()
        return BoundaryConditions.preset(self.preset)


@dataclass
class StudyConfig(BaseConfig):
    """収束調査の設定

    反復誤差が離散化誤差より十分小さくなるよう、許容誤差は通常の求解より
    厳しくしています。
    """

    mesh_sizes: List[int] = field(default_factory=lambda: [9, 17, 33])
    tolerance: float = 1e-10
    max_iterations: int = 50000

    def validate(self) -> None:
        if len(self.mesh_sizes) < 2:
            raise ValueError("収束調査には2つ以上の格子サイズが必要です")
        for n in self.mesh_sizes:
            if isinstance(n, bool) or not isinstance(n, int) or n < 3:
                raise ValueError(f"格子サイズは3以上の整数である必要があります: {n!r}")
        if self.tolerance <= 0:
            raise ValueError("収束判定の許容誤差は正の値である必要があります")
        if self.max_iterations <= 0:
            raise ValueError("最大反復回数は正の整数である必要があります")

    def load(self, config_dict: Dict[str, Any]) -> "StudyConfig":
        merged = load_config_safely(config_dict, self.to_dict())
        return StudyConfig(
            mesh_sizes=list(merged["mesh_sizes"]),
            tolerance=float(merged["tolerance"]),
            max_iterations=merged["max_iterations"],
        )


@dataclass
class RunConfig(BaseConfig):
    """実行設定全体"""

    test_case: str = "CAS1"
    mesh: MeshConfig = field(default_factory=MeshConfig)
    boundary: BoundaryConfig = field(default_factory=BoundaryConfig)
    solver: SolverConfig = field(default_factory=SolverConfig)
    study: StudyConfig = field(default_factory=StudyConfig)
    logging: LogConfig = field(default_factory=LogConfig)

    def validate(self) -> None:
        """全体の妥当性を検証

        Raises:
            ValueError: 未知のテストケース名や無効な設定値の場合
        """
        get_test_case(self.test_case)
        self.mesh.validate()
        self.boundary.validate()
        self.solver.validate()
        self.study.validate()
        self.logging.validate()

    def load(self, config_dict: Dict[str, Any]) -> "RunConfig":
        merged = load_config_safely(config_dict, self.to_dict())
        return RunConfig(
            test_case=str(merged["test_case"]),
            mesh=MeshConfig().load(merged["mesh"]),
            boundary=BoundaryConfig().load(merged["boundary"]),
            solver=SolverConfig.from_dict(merged["solver"]),
            study=StudyConfig().load(merged["study"]),
            logging=LogConfig.from_dict(merged["logging"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "test_case": self.test_case,
            "mesh": self.mesh.to_dict(),
            "boundary": self.boundary.to_dict(),
            "solver": self.solver.to_dict(),
            "study": self.study.to_dict(),
            "logging": self.logging.to_dict(),
        }

    def get_test_case(self) -> TestCase:
        return get_test_case(self.test_case)

    def build_boundary_conditions(self) -> BoundaryConditions:
        return self.boundary.build(self.get_test_case())

    @classmethod
    def from_yaml(cls, filepath: Union[str, Path]) -> "RunConfig":
        """YAMLファイルから設定を読み込む（未指定の項目はデフォルト値）"""
        with open(filepath, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f) or {}
        return cls.from_dict(config_dict)

    def save_to_yaml(self, filepath: Union[str, Path]) -> None:
        with open(filepath, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
