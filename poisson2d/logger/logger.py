"""計算全体で使用するロガーを提供するモジュール

ルートロガー（通常は ``"poisson2d"``）にハンドラを設定すると、
パッケージ内の各モジュールが ``logging.getLogger(__name__)`` で出力した
ログもすべて同じハンドラに集約されます。
"""

import logging
from pathlib import Path
from typing import Optional, Dict, Any, Union
from .config import LogConfig
from .handlers import BufferedLogHandler, create_console_handler, create_file_handler


class PoissonLogger:
    """Poissonソルバー用ロガークラス

    ソルバーの進捗や警告、エラーを一貫した形式で記録します。
    """

    def __init__(
        self,
        name: str = "poisson2d",
        config: Optional[LogConfig] = None,
        parent: Optional["PoissonLogger"] = None,
    ):
        """ロガーを初期化

        Args:
            name: ロガーの名前
            config: ロギング設定
            parent: 親ロガー（セクション用）。指定時はハンドラを追加せず親に伝播
        """
        self.name = name
        self.config = config or LogConfig()
        self.parent = parent

        self.config.validate()

        if parent is None:
            self._debug_buffer = BufferedLogHandler(self.config.buffer_capacity, name)
            self._logger = self._create_logger()
            self._logger.debug(f"ロギングシステムを初期化: {name}")
        else:
            self._debug_buffer = parent._debug_buffer
            self._logger = logging.getLogger(name)

    def _create_logger(self) -> logging.Logger:
        """ロガーを生成して設定

        Returns:
            設定済みのロガーインスタンス
        """
        logger = logging.getLogger(self.name)
        logger.setLevel(getattr(logging, self.config.level.upper()))

        # 既存のハンドラをクリア
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        for handler in (
            create_file_handler(self.config, self.name),
            create_console_handler(self.config, self.name),
            self._debug_buffer,
        ):
            if handler is not None:
                logger.addHandler(handler)
        return logger

    @property
    def logger(self) -> logging.Logger:
        """内部の標準ロガー"""
        return self._logger

    def debug(self, msg: str, *args, **kwargs):
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args, **kwargs):
        self._logger.critical(msg, *args, **kwargs)

    def start_section(self, name: str) -> "PoissonLogger":
        """新しいログセクションを開始

        Args:
            name: セクション名

        Returns:
            セクション用の子ロガー
        """
        return PoissonLogger(f"{self.name}.{name}", self.config, self)

    def get_recent_logs(self, n: int = 100) -> list:
        """最近のログメッセージを取得

        Args:
            n: 取得するメッセージ数

        Returns:
            最近のログメッセージのリスト
        """
        return self._debug_buffer.get_logs()[-n:]

    def save_debug_info(self, path: Union[str, Path]):
        """バッファ内のログをファイルに保存

        Args:
            path: 保存先のファイルパス
        """
        path = Path(path)
        with path.open("w", encoding="utf-8") as f:
            for log in self._debug_buffer.get_logs():
                f.write(f"{log}\n")

    def log_error_with_context(
        self, msg: str, error: Exception, context: Optional[Dict[str, Any]] = None
    ):
        """エラー情報をコンテキスト付きでログ出力

        Args:
            msg: エラーメッセージ
            error: 発生した例外
            context: 追加のコンテキスト情報
        """
        error_info = {
            "message": msg,
            "error_type": type(error).__name__,
            "error_msg": str(error),
            "context": context or {},
        }
        self._logger.error(f"Error occurred: {error_info}", exc_info=error)

    def log_performance(self, section: str, elapsed: float):
        """処理時間をログ出力

        Args:
            section: 計測セクション名
            elapsed: 経過時間（秒）
        """
        self._logger.info(f"Performance - {section}: {elapsed:.3f} seconds")

    def log_state(self, state: Dict[str, Any], level: str = "info"):
        """計算状態（診断情報の辞書）をログ出力

        Args:
            state: 記録する状態情報
            level: ログレベル
        """
        log_func = getattr(self._logger, level.lower())
        log_func(f"State: {state}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """エラーが発生した場合はログに記録し、例外は伝播させる"""
        if exc_type is not None:
            self.log_error_with_context(
                "Error in section", exc_val, {"section": self.name}
            )
        return False
