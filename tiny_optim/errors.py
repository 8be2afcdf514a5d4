"""tiny_optim 的异常类型。

数值路径上只有 ClipNorm 会主动报错，其余规则让 NaN / Inf 原样传播。
"""

from __future__ import annotations


class OptimError(Exception):
    """tiny_optim 所有异常的基类。"""


class NonFiniteNormError(OptimError, ValueError):
    """梯度的 p-范数为 inf 或 nan（ClipNorm 在 ``throw=True`` 时抛出）。"""

    def __init__(self, p, nrm, summary: str):
        self.p = p
        self.norm = nrm
        super().__init__(f"gradient has {p}-norm {nrm}, for array {summary}")


class RuleConfigError(OptimError, ValueError):
    """规则配置无法解析：未知名称、格式错误或非法超参数名。"""
