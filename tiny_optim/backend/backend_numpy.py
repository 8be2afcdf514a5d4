"""CPU 后端：基于 NumPy 实现各规则共用的逐元素原子操作。

每个函数接收 / 返回的都是原始 ``numpy.ndarray`` 或 NumPy 标量，
规则实现只通过这里分配累加器、做类型转换和范数计算。
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

# float32 的机器精度，作为所有规则 epsilon 的默认值
EPS = float(np.finfo(np.float32).eps)


# ====================== 类型 ======================


def float_type(a) -> np.dtype:
    """返回参与运算的浮点类型：浮点数组保持原类型，其余提升为 float64。"""
    dtype = np.asarray(a).dtype
    if np.issubdtype(dtype, np.floating):
        return dtype
    return np.dtype(np.float64)


def cast(value, dtype: np.dtype):
    """将超参数（Python float）转换为梯度的浮点类型。"""
    return dtype.type(value)


def cast_pair(pair: Tuple[float, float], dtype: np.dtype):
    return dtype.type(pair[0]), dtype.type(pair[1])


def astype(a, dtype: np.dtype):
    """输出统一为梯度的浮点类型（累加器跟随参数类型，可能与梯度不同）。"""
    return np.asarray(a).astype(dtype, copy=False)


# ====================== 状态分配 ======================


def zeros_like(x) -> np.ndarray:
    x = np.asarray(x)
    return np.zeros(x.shape, dtype=float_type(x))


def full_like(x, val) -> np.ndarray:
    x = np.asarray(x)
    dtype = float_type(x)
    return np.full(x.shape, cast(val, dtype), dtype=dtype)


# ====================== 逐元素运算 ======================


def abs2(a):
    return a * a


def sqrt(a):
    return np.sqrt(a)


def clamp(a, lo, hi):
    return np.clip(a, lo, hi)


def ema_(acc: np.ndarray, decay, value) -> np.ndarray:
    """原地更新指数滑动平均：``acc <- decay * acc + (1 - decay) * value``。"""
    acc *= decay
    acc += (1 - decay) * value
    return acc


# ====================== 规约运算 ======================


def norm(a, p) -> float:
    """展平后的 p-范数（p=inf 为最大绝对值，p=0 为非零元素个数）。

    先除以最大绝对值再求范数，避免平方和在低精度类型中溢出。
    """
    a = np.abs(np.ravel(a))
    if a.size == 0 or p == 0:
        return np.linalg.norm(a, ord=p)
    s = a.max()
    if s == 0 or not np.isfinite(s):
        return s
    return s * np.linalg.norm(a / s, ord=p)


def summary(a) -> str:
    a = np.asarray(a)
    dims = "×".join(str(d) for d in a.shape) or "0-dim"
    return f"{dims} ndarray[{a.dtype}]"
