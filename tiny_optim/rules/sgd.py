from __future__ import annotations

from dataclasses import dataclass

from ..backend import backend_numpy as B
from .rule import Rule


@dataclass(frozen=True)
class Descent(Rule):
    """经典梯度下降，学习率为 ``eta``。

    更新规则
    --------
    dx' = eta * dx
    x   = x - dx'
    """

    eta: float = 0.1

    def init(self, x):
        return None

    def apply(self, state, x, dx):
        eta = B.cast(self.eta, B.float_type(dx))
        return state, dx * eta


@dataclass(frozen=True)
class Momentum(Rule):
    """带动量的梯度下降。

    更新规则
    --------
    v_t = rho * v_{t-1} + eta * dx
    dx' = v_t
    """

    eta: float = 0.01
    rho: float = 0.9

    def init(self, x):
        # 速度缓冲，初始为全零
        return B.zeros_like(x)

    def apply(self, state, x, dx):
        T = B.float_type(dx)
        eta, rho = B.cast(self.eta, T), B.cast(self.rho, T)
        vel = state

        vel *= rho
        vel += eta * dx

        return vel, B.astype(vel, T)


@dataclass(frozen=True)
class Nesterov(Rule):
    """Nesterov 动量梯度下降。

    更新规则
    --------
    dx' = -rho^2 * v_{t-1} + (1 + rho) * eta * dx
    v_t = rho * v_{t-1} - eta * dx
    """

    eta: float = 0.001
    rho: float = 0.9

    def init(self, x):
        return B.zeros_like(x)

    def apply(self, state, x, dx):
        T = B.float_type(dx)
        eta, rho = B.cast(self.eta, T), B.cast(self.rho, T)
        vel = state

        # 输出依赖旧速度，必须在原地更新之前算出
        new_dx = -(rho * rho) * vel + (1 + rho) * eta * dx
        vel *= rho
        vel -= eta * dx

        return vel, B.astype(new_dx, T)
