"""容器规则：Chain。"""

from __future__ import annotations

import logging

from .rule import Rule

logger = logging.getLogger(__name__)


class Chain(Rule):
    """顺序组合多个规则，前一个规则输出的梯度作为后一个规则的输入。

    状态是与成员一一对应的列表。空 Chain 是恒等变换，等价于 ``Descent(1)``。
    变换之间不可交换，例如先裁剪再缩放与先缩放再裁剪结果不同：

    >>> import numpy as np
    >>> from tiny_optim import ClipGrad, Descent
    >>> c = Chain(ClipGrad(1), Descent(0.1))
    >>> state = c.init(np.zeros(3))
    >>> c.apply(state, np.zeros(3), np.array([0.3, 1.0, 7.0]))[1]
    array([0.03, 0.1 , 0.1 ])
    """

    def __init__(self, *rules):
        self.rules = tuple(rules)

    def init(self, x):
        return [rule.init(x) for rule in self.rules]

    def apply(self, state, x, dx):
        if len(state) != len(self.rules):
            raise ValueError(
                f"Chain has {len(self.rules)} rules but got {len(state)} states"
            )
        debug = logger.isEnabledFor(logging.DEBUG)
        new_state = [None] * len(self.rules)
        for i, (rule, s) in enumerate(zip(self.rules, state)):
            new_state[i], dx = rule.apply(s, x, dx)
            if debug:
                logger.debug("Chain member %d (%r) applied", i, rule)
        return new_state, dx

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Chain) and self.rules == other.rules

    def __hash__(self) -> int:
        return hash((Chain, self.rules))

    def __repr__(self) -> str:
        return f"Chain({', '.join(repr(rule) for rule in self.rules)})"
