"""从普通数据 / YAML 文件构建规则。

支持的写法::

    Descent                          # 名称，使用默认超参数
    {ClipNorm: {omega: 1.0}}         # 名称 -> 关键字参数
    [ClipNorm, {Adam: {eta: 0.01}}]  # 列表即 Chain
    {chain: [...]}                   # 显式 Chain

示例 rule.yaml::

    chain:
      - WeightDecay: {gamma: 0.0005}
      - ClipNorm: {omega: 1.0, p: 2}
      - Adam:
          eta: 0.001
          beta: [0.9, 0.999]
"""

from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .errors import RuleConfigError
from .rules import (
    Rule,
    Chain,
    Descent,
    Momentum,
    Nesterov,
    RMSProp,
    AdaGrad,
    AdaDelta,
    Adam,
    RAdam,
    AdaMax,
    OAdam,
    AMSGrad,
    NAdam,
    AdaBelief,
    AdamW,
    WeightDecay,
    ClipGrad,
    ClipNorm,
)

logger = logging.getLogger(__name__)

RULES: Dict[str, Any] = {
    "Descent": Descent,
    "Momentum": Momentum,
    "Nesterov": Nesterov,
    "RMSProp": RMSProp,
    "AdaGrad": AdaGrad,
    "AdaDelta": AdaDelta,
    "Adam": Adam,
    "RAdam": RAdam,
    "AdaMax": AdaMax,
    "OAdam": OAdam,
    "AMSGrad": AMSGrad,
    "NAdam": NAdam,
    "AdaBelief": AdaBelief,
    "AdamW": AdamW,
    "WeightDecay": WeightDecay,
    "ClipGrad": ClipGrad,
    "ClipNorm": ClipNorm,
    # 别名
    "ADAM": Adam,
    "RADAM": RAdam,
    "OADAM": OAdam,
    "ADAGrad": AdaGrad,
    "ADADelta": AdaDelta,
    "NADAM": NAdam,
    "ADAMW": AdamW,
}

_CHAIN_KEYS = ("chain", "Chain")


def _normalize_kwargs(kwargs: Dict[str, Any]) -> Dict[str, Any]:
    # YAML 没有元组，beta 读进来是列表
    if isinstance(kwargs.get("beta"), list):
        kwargs = dict(kwargs, beta=tuple(kwargs["beta"]))
    return kwargs


def _make(name: str, kwargs: Optional[Dict[str, Any]]):
    if name not in RULES:
        raise RuleConfigError(f"unknown rule {name!r}")
    if kwargs is None:
        kwargs = {}
    if not isinstance(kwargs, dict):
        raise RuleConfigError(
            f"hyperparameters of {name!r} must be a mapping, got {type(kwargs).__name__}"
        )
    try:
        return RULES[name](**_normalize_kwargs(kwargs))
    except TypeError as err:
        raise RuleConfigError(f"bad hyperparameters for {name!r}: {err}") from err


def build_rule(cfg):
    """把名称 / 映射 / 列表描述转换为规则实例。"""
    if isinstance(cfg, Rule):
        return cfg
    if isinstance(cfg, str):
        return _make(cfg, None)
    if isinstance(cfg, (list, tuple)):
        return Chain(*[build_rule(s) for s in cfg])
    if isinstance(cfg, dict):
        if len(cfg) != 1:
            raise RuleConfigError(
                f"rule mapping must have exactly one key, got {sorted(cfg)}"
            )
        (name, value), = cfg.items()
        if name in _CHAIN_KEYS:
            if not isinstance(value, (list, tuple)):
                raise RuleConfigError(f"{name!r} expects a list of rules")
            return Chain(*[build_rule(s) for s in value])
        return _make(name, value)
    raise RuleConfigError(f"cannot build a rule from {type(cfg).__name__}")


def rule_to_config(rule) -> Union[str, Dict[str, Any]]:
    """``build_rule`` 的逆操作，只支持内置规则。"""
    if isinstance(rule, Chain):
        return {"chain": [rule_to_config(r) for r in rule]}
    if dataclasses.is_dataclass(rule) and type(rule).__name__ in RULES:
        fields = {}
        for f in dataclasses.fields(rule):
            value = getattr(rule, f.name)
            fields[f.name] = list(value) if isinstance(value, tuple) else value
        return {type(rule).__name__: fields}
    raise RuleConfigError(f"cannot serialize {rule!r}")


def load_rule(path: Union[str, Path]):
    """从 YAML 文件加载规则。"""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rule config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raise RuleConfigError(f"rule config file is empty: {path}")

    rule = build_rule(raw)
    logger.info("Loaded rule %r from %s", rule, path)
    return rule


def load_rule_from_env(env_var: str = "TINY_OPTIM_RULE"):
    """从环境变量指定的 YAML 文件加载规则；变量未设置时返回 None。"""
    config_path = os.environ.get(env_var)
    if not config_path:
        return None
    logger.info("Loading rule config from %s=%s", env_var, config_path)
    return load_rule(config_path)


def _field_names(rule):
    if isinstance(rule, Chain):
        names = set()
        for r in rule:
            names |= _field_names(r)
        return names
    if dataclasses.is_dataclass(rule):
        return {f.name for f in dataclasses.fields(rule)}
    return set()


def _adjust_members(chain, changes):
    members = []
    for r in chain:
        if isinstance(r, Chain):
            members.append(_adjust_members(r, changes))
        elif dataclasses.is_dataclass(r):
            own = {k: v for k, v in changes.items() if k in _field_names(r)}
            members.append(dataclasses.replace(r, **own) if own else r)
        else:
            members.append(r)
    return Chain(*members)


def adjust(rule, **changes):
    """返回替换了部分超参数的新规则，原规则与已有状态不受影响。

    对 Chain 递归处理，每个成员只接收自己拥有的字段，例如
    ``adjust(Chain(ClipNorm(), Adam()), eta=0.01)`` 只修改 Adam 的学习率。
    任何成员都没有的字段视为错误。
    """
    changes = _normalize_kwargs(changes)
    if not isinstance(rule, Chain) and not dataclasses.is_dataclass(rule):
        raise RuleConfigError(f"cannot adjust {rule!r}")
    unknown = set(changes) - _field_names(rule)
    if unknown:
        raise RuleConfigError(
            f"{type(rule).__name__} has no hyperparameter(s) {sorted(unknown)}"
        )
    if isinstance(rule, Chain):
        return _adjust_members(rule, changes)
    return dataclasses.replace(rule, **changes)
