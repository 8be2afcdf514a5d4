"""Adam 系列规则（均带一阶 / 二阶矩估计）。

所有规则的衰减幂 ``beta_t`` 初始化为 ``beta``，每次 ``apply`` 后乘以
``beta``；偏差修正统一使用本次更新之前的 ``beta_t``。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Tuple

import numpy as np

from ..backend import backend_numpy as B
from .clip import WeightDecay
from .container import Chain
from .rule import Rule


def _decay(beta_t: Tuple[float, float], beta: Tuple[float, float]) -> Tuple[float, float]:
    return beta_t[0] * beta[0], beta_t[1] * beta[1]


class AdamState(NamedTuple):
    m: np.ndarray
    v: np.ndarray
    beta_t: Tuple[float, float]


@dataclass(frozen=True)
class Adam(Rule):
    """Adam 优化器（带偏差修正）。

    更新规则
    --------
    m   = beta1 * m + (1 - beta1) * dx
    v   = beta2 * v + (1 - beta2) * dx^2
    dx' = m / (1 - beta1^t) / (sqrt(v / (1 - beta2^t)) + epsilon) * eta
    """

    eta: float = 0.001
    beta: Tuple[float, float] = (0.9, 0.99)
    epsilon: float = B.EPS

    def init(self, x):
        return AdamState(B.zeros_like(x), B.zeros_like(x), tuple(self.beta))

    def apply(self, state, x, dx):
        T = B.float_type(dx)
        eta, eps = B.cast(self.eta, T), B.cast(self.epsilon, T)
        b1, b2 = B.cast_pair(self.beta, T)
        m, v, beta_t = state
        bt1, bt2 = B.cast_pair(beta_t, T)

        B.ema_(m, b1, dx)
        B.ema_(v, b2, B.abs2(dx))
        new_dx = m / (1 - bt1) / (B.sqrt(v / (1 - bt2)) + eps) * eta

        return AdamState(m, v, _decay(beta_t, self.beta)), B.astype(new_dx, T)


class RAdamState(NamedTuple):
    m: np.ndarray
    v: np.ndarray
    beta_t: Tuple[float, float]
    t: int


@dataclass(frozen=True)
class RAdam(Rule):
    """Rectified Adam：二阶矩方差不可靠时退化为带动量的 SGD。

    更新规则
    --------
    rho_inf = 2 / (1 - beta2) - 1
    rho_t   = rho_inf - 2 t beta2^t / (1 - beta2^t)

    rho_t > 4 时：
        r   = sqrt((rho_t - 4)(rho_t - 2) rho_inf / ((rho_inf - 4)(rho_inf - 2) rho_t))
        dx' = m / (1 - beta1^t) / (sqrt(v / (1 - beta2^t)) + epsilon) * eta * r
    否则：
        dx' = m / (1 - beta1^t) * eta
    """

    eta: float = 0.001
    beta: Tuple[float, float] = (0.9, 0.999)
    epsilon: float = B.EPS

    def init(self, x):
        return RAdamState(B.zeros_like(x), B.zeros_like(x), tuple(self.beta), 1)

    def apply(self, state, x, dx):
        T = B.float_type(dx)
        eta, eps = B.cast(self.eta, T), B.cast(self.epsilon, T)
        b1, b2 = B.cast_pair(self.beta, T)
        m, v, beta_t, t = state
        bt1, bt2 = B.cast_pair(beta_t, T)
        rho_inf = 2 / (1 - b2) - 1

        B.ema_(m, b1, dx)
        B.ema_(v, b2, B.abs2(dx))
        rho = rho_inf - 2 * t * bt2 / (1 - bt2)
        if rho > 4:
            r = np.sqrt(
                (rho - 4) * (rho - 2) * rho_inf / ((rho_inf - 4) * (rho_inf - 2) * rho)
            )
            new_dx = m / (1 - bt1) / (B.sqrt(v / (1 - bt2)) + eps) * eta * r
        else:
            new_dx = m / (1 - bt1) * eta

        return RAdamState(m, v, _decay(beta_t, self.beta), t + 1), B.astype(new_dx, T)


class AdaMaxState(NamedTuple):
    m: np.ndarray
    u: np.ndarray
    beta_t: Tuple[float, float]


@dataclass(frozen=True)
class AdaMax(Rule):
    """AdaMax：Adam 基于无穷范数的变体。

    更新规则
    --------
    m   = beta1 * m + (1 - beta1) * dx
    u   = max(beta2 * u, |dx|)
    dx' = (eta / (1 - beta1^t)) * m / (u + epsilon)
    """

    eta: float = 0.001
    beta: Tuple[float, float] = (0.9, 0.999)
    epsilon: float = B.EPS

    def init(self, x):
        return AdaMaxState(B.zeros_like(x), B.zeros_like(x), tuple(self.beta))

    def apply(self, state, x, dx):
        T = B.float_type(dx)
        eta, eps = B.cast(self.eta, T), B.cast(self.epsilon, T)
        b1, b2 = B.cast_pair(self.beta, T)
        m, u, beta_t = state
        bt1 = B.cast(beta_t[0], T)

        B.ema_(m, b1, dx)
        u *= b2
        np.maximum(u, np.abs(dx), out=u)
        new_dx = (eta / (1 - bt1)) * m / (u + eps)

        return AdaMaxState(m, u, _decay(beta_t, self.beta)), B.astype(new_dx, T)


class OAdamState(NamedTuple):
    m: np.ndarray
    v: np.ndarray
    beta_t: Tuple[float, float]
    term: np.ndarray


@dataclass(frozen=True)
class OAdam(Rule):
    """Optimistic Adam：在 Adam 步长上加入乐观外推项，适合对抗训练。

    更新规则
    --------
    term_t = eta * m / (1 - beta1^t) / (sqrt(v / (1 - beta2^t)) + epsilon)
    dx'    = 2 * term_t - term_{t-1}
    """

    eta: float = 0.001
    beta: Tuple[float, float] = (0.5, 0.9)
    epsilon: float = B.EPS

    def init(self, x):
        return OAdamState(
            B.zeros_like(x), B.zeros_like(x), tuple(self.beta), B.zeros_like(x)
        )

    def apply(self, state, x, dx):
        T = B.float_type(dx)
        eta, eps = B.cast(self.eta, T), B.cast(self.epsilon, T)
        b1, b2 = B.cast_pair(self.beta, T)
        m, v, beta_t, term = state
        bt1, bt2 = B.cast_pair(beta_t, T)

        B.ema_(m, b1, dx)
        B.ema_(v, b2, B.abs2(dx))
        prev = term.copy()
        term[...] = eta * m / (1 - bt1) / (B.sqrt(v / (1 - bt2)) + eps)
        new_dx = 2 * term - prev

        return OAdamState(m, v, _decay(beta_t, self.beta), term), B.astype(new_dx, T)


class AMSGradState(NamedTuple):
    m: np.ndarray
    v: np.ndarray
    v_hat: np.ndarray


@dataclass(frozen=True)
class AMSGrad(Rule):
    """AMSGrad：用历史最大的二阶矩代替当前值，保证步长不增。

    三个累加器都以 ``epsilon`` 初始化。

    更新规则
    --------
    m     = beta1 * m + (1 - beta1) * dx
    v     = beta2 * v + (1 - beta2) * dx^2
    v_hat = max(v_hat, v)
    dx'   = eta * m / (sqrt(v_hat) + epsilon)
    """

    eta: float = 0.001
    beta: Tuple[float, float] = (0.9, 0.999)
    epsilon: float = B.EPS

    def init(self, x):
        return AMSGradState(
            B.full_like(x, self.epsilon),
            B.full_like(x, self.epsilon),
            B.full_like(x, self.epsilon),
        )

    def apply(self, state, x, dx):
        T = B.float_type(dx)
        eta, eps = B.cast(self.eta, T), B.cast(self.epsilon, T)
        b1, b2 = B.cast_pair(self.beta, T)
        m, v, v_hat = state

        B.ema_(m, b1, dx)
        B.ema_(v, b2, B.abs2(dx))
        np.maximum(v_hat, v, out=v_hat)

        new_dx = eta * m / (B.sqrt(v_hat) + eps)

        return AMSGradState(m, v, v_hat), B.astype(new_dx, T)


@dataclass(frozen=True)
class NAdam(Rule):
    """NAdam：Nesterov 动量版本的 Adam。

    更新规则
    --------
    dx' = (beta1 * m / (1 - beta1 * beta1^t) + (1 - beta1) * dx / (1 - beta1^t))
          / (sqrt(v * beta2 / (1 - beta2^t)) + epsilon) * eta
    """

    eta: float = 0.001
    beta: Tuple[float, float] = (0.9, 0.999)
    epsilon: float = B.EPS

    def init(self, x):
        return AdamState(B.zeros_like(x), B.zeros_like(x), tuple(self.beta))

    def apply(self, state, x, dx):
        T = B.float_type(dx)
        eta, eps = B.cast(self.eta, T), B.cast(self.epsilon, T)
        b1, b2 = B.cast_pair(self.beta, T)
        m, v, beta_t = state
        bt1, bt2 = B.cast_pair(beta_t, T)

        B.ema_(m, b1, dx)
        B.ema_(v, b2, B.abs2(dx))
        numer = b1 * m / (1 - b1 * bt1) + (1 - b1) * dx / (1 - bt1)
        new_dx = numer / (B.sqrt(v * b2 / (1 - bt2)) + eps) * eta

        return AdamState(m, v, _decay(beta_t, self.beta)), B.astype(new_dx, T)


class AdaBeliefState(NamedTuple):
    m: np.ndarray
    s: np.ndarray


@dataclass(frozen=True)
class AdaBelief(Rule):
    """AdaBelief：以梯度偏离一阶矩的程度（belief）作为二阶项。

    更新规则
    --------
    m   = beta1 * m + (1 - beta1) * dx
    s   = beta2 * s + (1 - beta2) * (dx - m)^2
    dx' = eta * m / (sqrt(s) + epsilon)
    """

    eta: float = 0.001
    beta: Tuple[float, float] = (0.9, 0.999)
    epsilon: float = B.EPS

    def init(self, x):
        return AdaBeliefState(B.zeros_like(x), B.zeros_like(x))

    def apply(self, state, x, dx):
        T = B.float_type(dx)
        eta, eps = B.cast(self.eta, T), B.cast(self.epsilon, T)
        b1, b2 = B.cast_pair(self.beta, T)
        m, s = state

        B.ema_(m, b1, dx)
        B.ema_(s, b2, B.abs2(dx - m))

        new_dx = eta * m / (B.sqrt(s) + eps)

        return AdaBeliefState(m, s), B.astype(new_dx, T)


def AdamW(
    eta: float = 0.001,
    beta: Tuple[float, float] = (0.9, 0.999),
    gamma: float = 0.0,
    epsilon: float = B.EPS,
) -> Chain:
    """AdamW：解耦的权重衰减，即 ``Chain(Adam(eta, beta, epsilon), WeightDecay(gamma))``。"""
    return Chain(Adam(eta, tuple(beta), epsilon), WeightDecay(gamma))
