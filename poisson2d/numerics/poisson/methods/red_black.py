"""赤黒順序付けによる並列Gauss-Seidel法

(i+j) が偶数のセルを赤、奇数のセルを黒とします。5点ステンシルの隣接セルは
必ず異なる色なので、同色のセルは他色の値だけを読んで同時に更新できます。
1反復は次の順で進みます。

1. 赤セルを並列に更新
2. 全ワーカーの完了を待つ
3. 黒セルを並列に更新
4. 全ワーカーの完了を待つ

内部の行範囲は連続したほぼ等しいブロックに分割され、各ワーカーは自分の
行だけを書き込みます。ブロック境界をまたぐ読み出しは、前の段階で書き
終えた他色の値なので競合しません。
"""

from concurrent.futures import Executor
from typing import Any, Dict, List, Tuple
import numpy as np

from ..base import RelaxationMethod, SolverMethod
from .kernels import color_sweep_rows

RED = 0
BLACK = 1


def partition_rows(n_total: int, num_blocks: int) -> List[Tuple[int, int]]:
    """内部行 1..n_total-2 を連続したほぼ等しいブロックに分割

    Args:
        n_total: 1方向あたりの格子点数
        num_blocks: 希望するブロック数（内部行数を上限とする）

    Returns:
        半開区間 [start, stop) のリスト
    """
    n_rows = n_total - 2
    blocks = max(1, min(num_blocks, n_rows))
    return [
        (1 + k * n_rows // blocks, 1 + (k + 1) * n_rows // blocks)
        for k in range(blocks)
    ]


class RedBlackMethod(RelaxationMethod):
    """スレッドプールを用いる赤黒Gauss-Seidel法

    スレッドプールの所有者は ``IterativeSolver`` であり、このクラスは
    借用するだけです。
    """

    method = SolverMethod.RED_BLACK

    def __init__(self, executor: Executor, num_workers: int):
        self.executor = executor
        self.num_workers = num_workers

    def _color_phase(
        self, u: np.ndarray, f: np.ndarray, h2: float, color: int, blocks
    ) -> float:
        futures = [
            self.executor.submit(color_sweep_rows, u, f, h2, color, start, stop)
            for start, stop in blocks
        ]
        # 全ワーカーの完了を待ってから最大値を畳み込む（NaNは伝播させる）
        return float(np.max([future.result() for future in futures]))

    def sweep(self, u: np.ndarray, f: np.ndarray, h2: float) -> float:
        blocks = partition_rows(u.shape[0], self.num_workers)
        red_error = self._color_phase(u, f, h2, RED, blocks)
        black_error = self._color_phase(u, f, h2, BLACK, blocks)
        return float(np.max([red_error, black_error]))

    def describe(self) -> Dict[str, Any]:
        diag = super().describe()
        diag["num_workers"] = self.num_workers
        return diag
