"""設定の基底クラスと共通ユーティリティ"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional


@dataclass
class BaseConfig(ABC):
    """設定の基底クラス

    サブクラスは ``validate`` と ``load`` を実装します。辞書風のアクセス
    （``config["n_total"]``、``config.get(...)``、``in``）をサポートします。
    """

    @abstractmethod
    def validate(self) -> None:
        """設定値の妥当性を検証

        Raises:
            ValueError: 無効な設定値が検出された場合
        """
        pass

    @abstractmethod
    def load(self, config_dict: Dict[str, Any]) -> "BaseConfig":
        """デフォルト値に辞書の値を上書きした新しい設定を返す"""
        pass

    def to_dict(self) -> Dict[str, Any]:
        """オブジェクトを辞書に変換"""
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "BaseConfig":
        """辞書からオブジェクトを生成して検証"""
        config = cls().load(config_dict or {})
        config.validate()
        return config

    def __getitem__(self, key: str) -> Any:
        """辞書風のインデックスアクセスを可能にする"""
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(
                f"'{self.__class__.__name__}' オブジェクトに '{key}' は存在しません"
            )

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """辞書風のgetメソッド"""
        return getattr(self, key, default)

    def __contains__(self, key: str) -> bool:
        return hasattr(self, key)


def load_config_safely(
    config_dict: Optional[Dict[str, Any]], default_dict: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    設定辞書をデフォルト値に再帰的にマージする

    Args:
        config_dict: 読み込む設定辞書（Noneは空とみなす）
        default_dict: デフォルト値の辞書

    Returns:
        マージされた設定辞書
    """
    if default_dict is None:
        default_dict = {}

    def deep_merge(default, override):
        if isinstance(default, dict) and isinstance(override, dict):
            merged = default.copy()
            for key, value in override.items():
                merged[key] = deep_merge(merged.get(key, {}), value)
            return merged
        return override

    return deep_merge(default_dict, config_dict or {})
