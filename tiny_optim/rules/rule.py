from __future__ import annotations

from typing import Any, Tuple

import numpy as np


class Rule:
    """梯度变换规则基类。

    规则实例只保存超参数，不持有任何逐参数数据，因此可以被多个参数共享。
    逐参数的累加器由 ``init`` 创建、由调用方保存，并在每一步传回 ``apply``。

    约定
    ----
    state = rule.init(x)
    state, dx_new = rule.apply(state, x, dx)
    x = x - dx_new            # 参数更新由调用方完成

    ``apply`` 可以原地修改传入的 state 并将其返回，也可以返回新分配的
    等价对象；调用方必须始终使用返回的 state，不能假定旧的句柄仍然有效。
    """

    def init(self, x: np.ndarray) -> Any:
        """根据参数的形状 / 类型创建初始状态（子类实现）。"""
        raise NotImplementedError

    def apply(self, state: Any, x: np.ndarray, dx: np.ndarray) -> Tuple[Any, np.ndarray]:
        """执行一步梯度变换，返回 (新状态, 变换后的梯度)（子类实现）。"""
        raise NotImplementedError


def init(rule, x) -> Any:
    """为参数 *x* 创建 *rule* 的初始状态。"""
    return rule.init(np.asarray(x))


def apply(rule, state, x, dx) -> Tuple[Any, np.ndarray]:
    """对梯度 *dx* 应用 *rule*，返回 (新状态, 变换后的梯度)。"""
    return rule.apply(state, np.asarray(x), np.asarray(dx))
