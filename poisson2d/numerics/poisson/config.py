"""
Poisson方程式ソルバーの設定管理モジュール

主な設定パラメータ:
1. 解法と反復法のパラメータ
2. 収束判定基準
3. 進捗通知の間隔と並列ワーカー数
"""

from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Optional, Union
import yaml

from .base import SolverMethod
from .methods.sor import optimal_omega


@dataclass
class SolverConfig:
    """
    Poisson方程式ソルバーの設定を管理するデータクラス

    主要な設定パラメータ:
    - method: 解法名（gauss_seidel, sor, red_black）
    - tolerance: 収束判定の許容誤差（最大更新量）
    - max_iterations: 最大反復回数
    - omega: 緩和係数（SOR法のみ）、数値または "optimal"
    - progress_interval: 進捗コールバックを呼ぶ反復間隔
    - num_workers: 赤黒法のワーカー数（Noneの場合はCPU数）
    """

    method: str = SolverMethod.GAUSS_SEIDEL.value
    tolerance: float = 1e-6
    max_iterations: int = 1000
    omega: Union[float, str] = 1.0
    progress_interval: int = 100
    num_workers: Optional[int] = None

    def validate(self) -> None:
        """
        設定値の妥当性を検証

        Raises:
            ValueError: 無効な設定値が検出された場合
        """
        SolverMethod.parse(self.method)

        if self.max_iterations <= 0:
            raise ValueError("最大反復回数は正の整数である必要があります")

        if self.tolerance <= 0:
            raise ValueError("収束判定の許容誤差は正の値である必要があります")

        if isinstance(self.omega, str):
            if self.omega.lower() != "optimal":
                raise ValueError(
                    f"緩和係数は数値または 'optimal' である必要があります: {self.omega}"
                )
        elif not isinstance(self.omega, (int, float)):
            raise ValueError(f"緩和係数が数値ではありません: {self.omega!r}")

        if self.progress_interval <= 0:
            raise ValueError("進捗通知の間隔は正の整数である必要があります")

        if self.num_workers is not None and self.num_workers <= 0:
            raise ValueError("ワーカー数は正の整数である必要があります")

    @property
    def solver_method(self) -> SolverMethod:
        return SolverMethod.parse(self.method)

    def resolve_omega(self, n_interior: int) -> float:
        """"optimal" 指定を格子サイズに応じた数値に解決"""
        if isinstance(self.omega, str):
            return optimal_omega(n_interior)
        return float(self.omega)

    def update(self, config_dict: Dict[str, Any]) -> "SolverConfig":
        """
        設定を更新し、新しい設定インスタンスを返します。

        Args:
            config_dict: 更新する設定の辞書

        Returns:
            更新された設定インスタンス
        """
        updated_config = SolverConfig(**{**self.__dict__, **config_dict})
        updated_config.validate()
        return updated_config

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "SolverConfig":
        unknown = set(config_dict) - {f.name for f in fields(cls)}
        if unknown:
            raise ValueError(f"未知のソルバー設定項目: {', '.join(sorted(unknown))}")
        config = cls(**config_dict)
        config.validate()
        return config

    @classmethod
    def from_yaml(cls, filepath: str) -> "SolverConfig":
        """
        YAMLファイルから設定を読み込みます。

        Args:
            filepath: 設定ファイルのパス

        Returns:
            読み込まれた設定インスタンス
        """
        with open(filepath, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f) or {}
        return cls.from_dict(config_dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def save_to_yaml(self, filepath: str) -> None:
        with open(filepath, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False)
