from . import minimization
from ._frobenius_prior import FrobeniusPrior
from ._result import OptimizeResult

__all__ = [
    "FrobeniusPrior",
    "OptimizeResult",
    "minimization",
]
