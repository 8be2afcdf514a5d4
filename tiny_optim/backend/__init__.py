from . import backend_numpy
from .backend_numpy import EPS

__all__ = ["backend_numpy", "EPS"]
