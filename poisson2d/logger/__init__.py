"""ロギングパッケージ

このパッケージは、ソルバー全体で使用される統一的なロギング機能を提供します。
"""

from .logger import PoissonLogger
from .handlers import BufferedLogHandler, create_console_handler, create_file_handler
from .formatters import SolverFormatter
from .config import LogConfig

__all__ = [
    "PoissonLogger",
    "BufferedLogHandler",
    "create_console_handler",
    "create_file_handler",
    "SolverFormatter",
    "LogConfig",
]
