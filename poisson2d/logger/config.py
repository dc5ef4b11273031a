"""ロギング設定を管理するモジュール

このモジュールは、ロギングシステムの設定を管理するためのクラスを提供します。
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from pathlib import Path


@dataclass
class LogConfig:
    """ロギング設定を管理するクラス

    Attributes:
        level: 基本ログレベル
        log_dir: ログファイル出力ディレクトリ
        file_logging: ファイルへのログ出力設定
        console_logging: コンソールへのログ出力設定
        buffer_capacity: メモリ上に保持する最近のログ件数
    """

    level: str = "info"
    log_dir: Path = Path("logs")
    file_logging: Dict[str, Any] = field(
        default_factory=lambda: {
            "enabled": False,
            "filename": "poisson2d.log",
            "level": "debug",
            "max_bytes": 10_000_000,  # 10MB
            "backup_count": 5,
        }
    )
    console_logging: Dict[str, Any] = field(
        default_factory=lambda: {"enabled": True, "level": "info", "color": True}
    )
    buffer_capacity: int = 1000

    def __post_init__(self):
        if isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

    def validate(self):
        """設定の妥当性を検証

        Raises:
            ValueError: 無効な設定値が検出された場合
        """
        valid_levels = {"debug", "info", "warning", "error", "critical"}
        for name, level in [
            ("level", self.level),
            ("file_logging.level", self.file_logging.get("level", "info")),
            ("console_logging.level", self.console_logging.get("level", "info")),
        ]:
            if str(level).lower() not in valid_levels:
                raise ValueError(f"Invalid log level for {name}: {level}")

        if not self.file_logging.get("enabled") and not self.console_logging.get(
            "enabled"
        ):
            raise ValueError("At least one logging handler must be enabled")

        if self.buffer_capacity <= 0:
            raise ValueError("buffer_capacityは正の整数である必要があります")

    def get_file_path(self, filename: Optional[str] = None) -> Path:
        """ログファイルのパスを取得

        Args:
            filename: 指定されたファイル名（Noneの場合はデフォルト使用）

        Returns:
            ログファイルの完全パス
        """
        filename = filename or self.file_logging["filename"]
        return self.log_dir / filename

    def create_directories(self):
        """ファイル出力が有効な場合のみログディレクトリを作成"""
        if self.file_logging.get("enabled"):
            self.log_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "LogConfig":
        """辞書から設定を生成（未指定の項目はデフォルト値）"""
        default = cls()
        file_logging = {**default.file_logging, **config_dict.get("file_logging", {})}
        console_logging = {
            **default.console_logging,
            **config_dict.get("console_logging", {}),
        }
        return cls(
            level=config_dict.get("level", default.level),
            log_dir=Path(config_dict.get("log_dir", default.log_dir)),
            file_logging=file_logging,
            console_logging=console_logging,
            buffer_capacity=config_dict.get("buffer_capacity", default.buffer_capacity),
        )

    def to_dict(self) -> Dict[str, Any]:
        """設定を辞書形式にシリアライズ"""
        return {
            "level": self.level,
            "log_dir": str(self.log_dir),
            "file_logging": dict(self.file_logging),
            "console_logging": dict(self.console_logging),
            "buffer_capacity": self.buffer_capacity,
        }
