"""按坐标自适应学习率的规则：RMSProp、AdaGrad、AdaDelta。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from ..backend import backend_numpy as B
from .rule import Rule


@dataclass(frozen=True)
class RMSProp(Rule):
    """RMSProp：用梯度平方的滑动平均归一化步长。

    更新规则
    --------
    acc = rho * acc + (1 - rho) * dx^2
    dx' = dx * eta / (sqrt(acc) + epsilon)
    """

    eta: float = 0.001
    rho: float = 0.9
    epsilon: float = B.EPS

    def init(self, x):
        return B.zeros_like(x)

    def apply(self, state, x, dx):
        T = B.float_type(dx)
        eta, rho, eps = B.cast(self.eta, T), B.cast(self.rho, T), B.cast(self.epsilon, T)
        acc = B.ema_(state, rho, B.abs2(dx))

        return acc, B.astype(dx * (eta / (B.sqrt(acc) + eps)), T)


@dataclass(frozen=True)
class AdaGrad(Rule):
    """AdaGrad：按历史梯度平方和缩放每个坐标的学习率。

    累加器以 ``epsilon`` 而非 0 初始化，避免第一步除零。

    更新规则
    --------
    acc = acc + dx^2
    dx' = dx * eta / (sqrt(acc) + epsilon)
    """

    eta: float = 0.1
    epsilon: float = B.EPS

    def init(self, x):
        return B.full_like(x, self.epsilon)

    def apply(self, state, x, dx):
        T = B.float_type(dx)
        eta, eps = B.cast(self.eta, T), B.cast(self.epsilon, T)
        acc = state

        acc += B.abs2(dx)

        return acc, B.astype(dx * eta / (B.sqrt(acc) + eps), T)


class AdaDeltaState(NamedTuple):
    acc: np.ndarray
    delta_acc: np.ndarray


@dataclass(frozen=True)
class AdaDelta(Rule):
    """AdaDelta：用历史更新量的滑动平均代替固定学习率。

    更新规则
    --------
    acc  = rho * acc + (1 - rho) * dx^2
    dx'  = dx * sqrt(dacc + epsilon) / sqrt(acc + epsilon)     # 使用旧的 dacc
    dacc = rho * dacc + (1 - rho) * dx'^2

    epsilon 必须留在两个平方根之内，不能提出或省略。
    """

    rho: float = 0.9
    epsilon: float = B.EPS

    def init(self, x):
        return AdaDeltaState(B.zeros_like(x), B.zeros_like(x))

    def apply(self, state, x, dx):
        T = B.float_type(dx)
        rho, eps = B.cast(self.rho, T), B.cast(self.epsilon, T)
        acc, delta_acc = state

        B.ema_(acc, rho, B.abs2(dx))
        # 新数组：不能与 delta_acc 共享存储
        new_dx = dx * B.sqrt(delta_acc + eps) / B.sqrt(acc + eps)
        B.ema_(delta_acc, rho, B.abs2(new_dx))

        return AdaDeltaState(acc, delta_acc), B.astype(new_dx, T)
