"""ソルバーのログ用フォーマッタ"""

import logging
from typing import Optional


class SolverFormatter(logging.Formatter):
    """ソルバーのログレコードを整形するフォーマッタ

    ロガー名はルートロガーからの相対セクション名（``numerics.poisson.solver``
    など、ルート自身は ``main``）に短縮されます。``extra={"iteration": k}``
    付きで出力されたレコードには反復番号が付加されます。

    Example:
        >>> logger.warning("SOR diverged", extra={"iteration": 12})
        2024-01-01 12:00:00 - numerics.poisson.solver - WARNING - SOR diverged (iteration 12)
    """

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self, root: str = "poisson2d", use_color: bool = False, detailed: bool = False
    ):
        """フォーマッタを初期化

        Args:
            root: セクション名の基準となるルートロガー名
            use_color: レベルに応じて行全体を色付けするかどうか
            detailed: ミリ秒と出力元のファイル名・行番号を含めるかどうか
        """
        if detailed:
            fmt = (
                "%(asctime)s.%(msecs)03d - %(section)s - %(levelname)s - "
                "[%(filename)s:%(lineno)d] - %(message)s%(iteration_tag)s"
            )
        else:
            fmt = "%(asctime)s - %(section)s - %(levelname)s - %(message)s%(iteration_tag)s"
        super().__init__(fmt, datefmt="%Y-%m-%d %H:%M:%S")
        self.root = root
        self.use_color = use_color

    def section_of(self, name: str) -> str:
        """ロガー名をルートからの相対セクション名に変換"""
        if name == self.root:
            return "main"
        prefix = f"{self.root}."
        if name.startswith(prefix):
            return name[len(prefix):]
        return name

    def format(self, record: logging.LogRecord) -> str:
        record.section = self.section_of(record.name)
        iteration: Optional[int] = getattr(record, "iteration", None)
        record.iteration_tag = "" if iteration is None else f" (iteration {iteration})"

        text = super().format(record)
        if not self.use_color:
            return text
        color = self.LEVEL_COLORS.get(record.levelname, "")
        return f"{color}{text}{self.RESET}"
