from typing import NamedTuple, Optional

from torch import Tensor


class OptimizeResult(NamedTuple):
    """Result of a least-squares solve.

    Parameters
    ----------
    x : Tensor
        Solution. For manifold solves this is the ambient parameter block,
        e.g. the column-major entries of a rotation matrix.
    converged : Tensor
        Boolean scalar tensor, True if the gradient norm fell below the
        tolerance.
    num_iterations : Tensor
        Number of iterations performed. ``int64`` scalar.
    fun : Tensor, optional
        Sum of squared residuals at ``x``.
    """

    x: Tensor
    converged: Tensor
    num_iterations: Tensor
    fun: Optional[Tensor] = None
