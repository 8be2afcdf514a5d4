from .rule import Rule, init, apply
from .sgd import Descent, Momentum, Nesterov
from .adaptive import RMSProp, AdaGrad, AdaDelta, AdaDeltaState
from .clip import WeightDecay, ClipGrad, ClipNorm
from .container import Chain
from .adam import (
    Adam,
    RAdam,
    AdaMax,
    OAdam,
    AMSGrad,
    NAdam,
    AdaBelief,
    AdamW,
    AdamState,
    RAdamState,
    AdaMaxState,
    OAdamState,
    AMSGradState,
    AdaBeliefState,
)

# 论文中的写法
ADAM = Adam
RADAM = RAdam
OADAM = OAdam
ADAGrad = AdaGrad
ADADelta = AdaDelta
NADAM = NAdam
ADAMW = AdamW

__all__ = [
    "Rule",
    "init",
    "apply",
    "Descent",
    "Momentum",
    "Nesterov",
    "RMSProp",
    "AdaGrad",
    "AdaDelta",
    "Adam",
    "RAdam",
    "AdaMax",
    "OAdam",
    "AMSGrad",
    "NAdam",
    "AdaBelief",
    "AdamW",
    "WeightDecay",
    "ClipGrad",
    "ClipNorm",
    "Chain",
    "AdamState",
    "RAdamState",
    "AdaMaxState",
    "OAdamState",
    "AMSGradState",
    "AdaBeliefState",
    "AdaDeltaState",
    "ADAM",
    "RADAM",
    "OADAM",
    "ADAGrad",
    "ADADelta",
    "NADAM",
    "ADAMW",
]
