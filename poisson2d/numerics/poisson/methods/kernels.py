"""5点ステンシルの緩和スイープ（numbaでJITコンパイル）

すべてのカーネルは内部セルをその場で更新し、そのスイープで観測した
最大更新量 max|U_new - U_old| を返します。発散してNaNになった更新量は
そのまま返されます。離散化は

    U[i,j] <- (U[i-1,j] + U[i+1,j] + U[i,j-1] + U[i,j+1] + h^2 F[i,j]) / 4

で、境界セルの値はそのまま隣接値として使われます。
``nogil=True`` なので、赤黒法のワーカースレッドは並列に実行されます。
"""

import numpy as np
from numba import njit


@njit(nogil=True)
def gauss_seidel_sweep(u: np.ndarray, f: np.ndarray, h2: float) -> float:
    """辞書式順序（i昇順、各i内でj昇順）のGauss-Seidelスイープ"""
    n = u.shape[0]
    max_update = 0.0
    for i in range(1, n - 1):
        for j in range(1, n - 1):
            old = u[i, j]
            new = (u[i - 1, j] + u[i + 1, j] + u[i, j - 1] + u[i, j + 1] + h2 * f[i, j]) / 4.0
            u[i, j] = new
            update = abs(new - old)
            if update > max_update or np.isnan(update):
                max_update = update
    return max_update


@njit(nogil=True)
def sor_sweep(u: np.ndarray, f: np.ndarray, h2: float, omega: float) -> float:
    """SORスイープ: new = (1-ω) old + ω GS値"""
    n = u.shape[0]
    max_update = 0.0
    for i in range(1, n - 1):
        for j in range(1, n - 1):
            old = u[i, j]
            gs = (u[i - 1, j] + u[i + 1, j] + u[i, j - 1] + u[i, j + 1] + h2 * f[i, j]) / 4.0
            new = (1.0 - omega) * old + omega * gs
            u[i, j] = new
            update = abs(new - old)
            if update > max_update or np.isnan(update):
                max_update = update
    return max_update


@njit(nogil=True)
def color_sweep_rows(
    u: np.ndarray, f: np.ndarray, h2: float, color: int, row_start: int, row_stop: int
) -> float:
    """行範囲 [row_start, row_stop) のうち (i+j) % 2 == color のセルだけを更新

    同色のセルは互いに隣接しないため、読み出すのは他色の（凍結された）値のみです。
    """
    n = u.shape[0]
    max_update = 0.0
    for i in range(row_start, row_stop):
        # (i + j) % 2 == color となる最初の内部列
        j = 1 if (i + 1) % 2 == color else 2
        while j < n - 1:
            old = u[i, j]
            new = (u[i - 1, j] + u[i + 1, j] + u[i, j - 1] + u[i, j + 1] + h2 * f[i, j]) / 4.0
            u[i, j] = new
            update = abs(new - old)
            if update > max_update or np.isnan(update):
                max_update = update
            j += 2
    return max_update
