"""无状态的梯度修饰规则：权重衰减与梯度裁剪。"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from ..backend import backend_numpy as B
from ..errors import NonFiniteNormError
from .rule import Rule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeightDecay(Rule):
    """权重衰减：在梯度上加 ``gamma * x``，等价于损失中的 L2 正则。

    通常放在 Chain 的第一个位置；放在 Adam 之后即为解耦的 AdamW。
    """

    gamma: float = 5e-4

    def init(self, x):
        return None

    def apply(self, state, x, dx):
        T = B.float_type(dx)
        gamma = B.cast(self.gamma, T)
        return state, B.astype(dx + gamma * x, T)


@dataclass(frozen=True)
class ClipGrad(Rule):
    """逐元素裁剪：保证 ``-delta <= dx[i] <= delta``。"""

    delta: float = 10.0

    def init(self, x):
        return None

    def apply(self, state, x, dx):
        delta = B.cast(self.delta, B.float_type(dx))
        return state, B.clamp(dx, -delta, delta)


@dataclass(frozen=True)
class ClipNorm(Rule):
    """按 p-范数裁剪：``norm(dx, p) > omega`` 时把梯度缩放到阈值上，方向不变。

    范数为 inf / nan 时默认抛出 ``NonFiniteNormError``；``throw=False`` 时
    不报错，非有限值会传播到输出中。
    """

    omega: float = 10.0
    p: float = 2
    throw: bool = True

    def init(self, x):
        return None

    def apply(self, state, x, dx):
        T = B.float_type(dx)
        nrm = B.norm(dx, self.p)
        if not np.isfinite(nrm):
            if self.throw:
                raise NonFiniteNormError(self.p, nrm, B.summary(x))
            logger.warning(
                "gradient has %s-norm %s for array %s, passing it through",
                self.p, nrm, B.summary(x),
            )

        with np.errstate(divide="ignore", invalid="ignore"):
            lam = np.minimum(B.cast(self.omega, T) / T.type(nrm), T.type(1))

        return state, dx * lam
