"""PoissonLogger が組み立てるログハンドラ

ファイルとコンソールのハンドラは設定で有効な場合のみ生成され、
バッファハンドラは常に最近のログを保持します。
"""

import logging
import logging.handlers
from collections import deque
from typing import List, Optional

from .config import LogConfig
from .formatters import SolverFormatter


def _level(name: str) -> int:
    return getattr(logging, str(name).upper())


def create_file_handler(
    config: LogConfig, root: str
) -> Optional[logging.handlers.RotatingFileHandler]:
    """ローテーション付きファイルハンドラを生成

    Args:
        config: ロギング設定
        root: ルートロガー名

    Returns:
        ハンドラ（``file_logging.enabled`` が偽の場合はNone）
    """
    settings = config.file_logging
    if not settings.get("enabled"):
        return None

    config.create_directories()
    handler = logging.handlers.RotatingFileHandler(
        str(config.get_file_path()),
        maxBytes=settings["max_bytes"],
        backupCount=settings["backup_count"],
        encoding="utf-8",
    )
    handler.setFormatter(SolverFormatter(root, detailed=True))
    handler.setLevel(_level(settings["level"]))
    return handler


def create_console_handler(
    config: LogConfig, root: str
) -> Optional[logging.StreamHandler]:
    """標準エラー出力へのハンドラを生成（無効な場合はNone）"""
    settings = config.console_logging
    if not settings.get("enabled"):
        return None

    handler = logging.StreamHandler()
    handler.setFormatter(SolverFormatter(root, use_color=settings.get("color", False)))
    handler.setLevel(_level(settings.get("level", "info")))
    return handler


class BufferedLogHandler(logging.Handler):
    """最近のログ行をメモリ上に保持するハンドラ

    ``PoissonLogger.save_debug_info`` の出力元であり、セクションの
    子ロガーとも共有されます。
    """

    def __init__(self, capacity: int = 1000, root: str = "poisson2d"):
        super().__init__()
        self.buffer = deque(maxlen=capacity)
        self.setFormatter(SolverFormatter(root))

    def emit(self, record: logging.LogRecord):
        self.buffer.append(self.format(record))

    def get_logs(self) -> List[str]:
        return list(self.buffer)

    def clear(self):
        self.buffer.clear()
