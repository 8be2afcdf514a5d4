"""tiny_optim：可组合的有状态梯度变换规则。

    state = tiny_optim.init(rule, x)
    state, dx = tiny_optim.apply(rule, state, x, dx)
    x -= dx
"""

from .backend import EPS
from .errors import OptimError, NonFiniteNormError, RuleConfigError
from .rules import *  # noqa: F401,F403
from .rules import __all__ as _rules_all
from .config import (
    RULES,
    build_rule,
    load_rule,
    load_rule_from_env,
    rule_to_config,
    adjust,
)

__version__ = "0.1.0"

__all__ = _rules_all + [
    "EPS",
    "OptimError",
    "NonFiniteNormError",
    "RuleConfigError",
    "RULES",
    "build_rule",
    "load_rule",
    "load_rule_from_env",
    "rule_to_config",
    "adjust",
]
