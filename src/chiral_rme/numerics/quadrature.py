"""高斯求积工具，用于谐振子基下的径向积分。"""
from __future__ import annotations

from typing import Tuple

import math
import numpy as np


def _gauss_legendre_nodes_weights(n: int, tol: float = 1e-14) -> tuple[np.ndarray, np.ndarray]:
    """返回 n 点 Gauss-Legendre 求积的节点和权重。"""

    if n <= 0:
        raise ValueError("n 必须为正整数。")

    nodes = np.zeros(n, dtype=float)
    weights = np.zeros(n, dtype=float)
    m = (n + 1) // 2

    for i in range(m):
        # 初值来自 F.J.Stieltjes 的余弦近似
        x = math.cos(math.pi * (i + 0.75) / (n + 0.5))
        dp = 0.0

        for _ in range(100):
            p0 = 1.0
            p1 = x
            for k in range(2, n + 1):
                pk = ((2 * k - 1) * x * p1 - (k - 1) * p0) / k
                p0, p1 = p1, pk
            pn = p1
            pn_minus1 = p0
            dp = n * (pn_minus1 - x * pn) / (1.0 - x * x)
            delta = pn / dp
            x -= delta
            if abs(delta) < tol:
                break

        if dp == 0.0:
            raise RuntimeError("Gauss-Legendre 节点迭代未能收敛。")

        nodes[i] = -x
        nodes[n - 1 - i] = x
        weights_value = 2.0 / ((1.0 - x * x) * (dp * dp))
        weights[i] = weights_value
        weights[n - 1 - i] = weights_value

    return nodes, weights


def composite_radial_grid(r_max: float, n_segments: int, n_points: int) -> Tuple[np.ndarray, np.ndarray]:
    """在 ``[0, r_max]`` 上生成分段 Gauss-Legendre 节点与权重。

    Parameters
    ----------
    r_max : float
        截断半径（以谐振子长度为单位）。
    n_segments : int
        等长区段数。
    n_points : int
        每个区段的高斯点数。

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        升序节点与对应权重（不含 ``r^2`` 体积元）。
    """

    if r_max <= 0:
        raise ValueError("r_max 必须为正。")
    if n_segments <= 0 or n_points <= 0:
        raise ValueError("n_segments 与 n_points 必须为正整数。")

    x, w = _gauss_legendre_nodes_weights(n_points)
    edges = np.linspace(0.0, r_max, n_segments + 1)
    nodes = []
    weights = []
    for left, right in zip(edges[:-1], edges[1:]):
        half = 0.5 * (right - left)
        mid = 0.5 * (right + left)
        nodes.append(mid + half * x)
        weights.append(half * w)
    return np.concatenate(nodes), np.concatenate(weights)
