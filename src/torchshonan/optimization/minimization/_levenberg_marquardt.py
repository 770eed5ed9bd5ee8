import warnings
from typing import Callable, Optional

import torch
from torch import Tensor

from torchshonan.optimization._result import OptimizeResult


def _jacobian(
    residuals: Callable[[Tensor], Tensor],
    jacobian: Optional[Callable[[Tensor], Tensor]],
    retract: Optional[Callable[[Tensor, Tensor], Tensor]],
    x: Tensor,
    tangent_dim: Optional[int],
) -> Tensor:
    if retract is None:
        if jacobian is not None:
            return jacobian(x)
        return torch.func.jacrev(residuals)(x)

    zero = x.new_zeros(tangent_dim)

    if jacobian is None:
        return torch.func.jacrev(lambda delta: residuals(retract(x, delta)))(
            zero
        )

    # Chain rule: ambient Jacobian times d retract(x, delta) / d delta at 0
    return jacobian(x) @ torch.func.jacrev(lambda delta: retract(x, delta))(
        zero
    )


def levenberg_marquardt(
    residuals: Callable[[Tensor], Tensor],
    x0: Tensor,
    *,
    jacobian: Optional[Callable[[Tensor], Tensor]] = None,
    retract: Optional[Callable[[Tensor, Tensor], Tensor]] = None,
    tangent_dim: Optional[int] = None,
    tol: Optional[float] = None,
    maxiter: int = 100,
    damping: float = 1e-3,
) -> OptimizeResult:
    r"""
    Levenberg-Marquardt algorithm for nonlinear least squares.

    Finds parameters x that minimize the sum of squared residuals:

    .. math::

        \min_x \|r(x)\|^2 = \min_x \sum_i r_i(x)^2

    The algorithm interpolates between Gauss-Newton (fast near optimum)
    and gradient descent (robust far from optimum) using an adaptive
    damping parameter.

    When ``retract`` is given, ``x`` lives on a manifold embedded in the
    parameter space (for example a rotation stored as its ``n * n``
    column-major entries). Steps ``delta`` are then solved for in a
    ``tangent_dim``-dimensional tangent space and applied as
    ``retract(x, delta)`` instead of ``x + delta``, so every iterate stays
    on the manifold.

    Parameters
    ----------
    residuals : Callable[[Tensor], Tensor]
        Residual function. Takes parameters of shape ``(n,)`` and returns
        residuals of shape ``(m,)``.
    x0 : Tensor
        Initial parameter guess of shape ``(n,)``.
    jacobian : Callable, optional
        Jacobian of residuals with respect to the parameters, shape
        ``(m, n)``. If None, computed via ``torch.func.jacrev``.
    retract : Callable[[Tensor, Tensor], Tensor], optional
        Manifold update ``retract(x, delta)`` returning parameters of shape
        ``(n,)``, with ``retract(x, 0) == x``. Its derivative with respect to
        ``delta`` is taken with ``torch.func.jacrev``.
    tangent_dim : int, optional
        Size of ``delta``. Required when ``retract`` is given.
    tol : float, optional
        Convergence tolerance on gradient norm. Default: ``sqrt(eps)`` for dtype.
    maxiter : int
        Maximum number of iterations. Default: 100.
    damping : float
        Initial Levenberg-Marquardt damping parameter. Default: 1e-3.

    Returns
    -------
    OptimizeResult
        ``x`` holds the optimized parameters of shape ``(n,)`` and ``fun``
        the final sum of squared residuals.

    Raises
    ------
    ValueError
        If ``retract`` is given without ``tangent_dim``.

    Warns
    -----
    RuntimeWarning
        If ``maxiter`` iterations complete without convergence.

    Examples
    --------
    Fit a line y = ax + b to data:

    >>> x_data = torch.tensor([0., 1., 2., 3.])
    >>> y_data = torch.tensor([1., 3., 5., 7.])  # y = 2x + 1
    >>> def residuals(params):
    ...     a, b = params[0], params[1]
    ...     return a * x_data + b - y_data
    >>> levenberg_marquardt(residuals, torch.zeros(2)).x
    tensor([2., 1.])

    References
    ----------
    - Levenberg, K. "A method for the solution of certain non-linear
      problems in least squares." Quarterly of applied mathematics 2.2
      (1944): 164-168.
    - Marquardt, D.W. "An algorithm for least-squares estimation of
      nonlinear parameters." Journal of the society for Industrial and
      Applied Mathematics 11.2 (1963): 431-441.
    - Absil, P.-A., Mahony, R., Sepulchre, R. "Optimization Algorithms on
      Matrix Manifolds." Princeton University Press (2008).

    See Also
    --------
    https://en.wikipedia.org/wiki/Levenberg%E2%80%93Marquardt_algorithm
    """
    if retract is not None and tangent_dim is None:
        raise ValueError(
            "levenberg_marquardt: tangent_dim is required when retract is given"
        )

    if tol is None:
        tol = torch.finfo(x0.dtype).eps ** 0.5

    x = x0.clone()
    mu = damping
    p = tangent_dim if retract is not None else x.numel()
    eye = torch.eye(p, dtype=x.dtype, device=x.device)

    converged = False
    num_iter = 0

    for k in range(maxiter):
        r = residuals(x)
        J = _jacobian(residuals, jacobian, retract, x, tangent_dim)

        # Ensure J is 2D
        if J.dim() == 1:
            J = J.unsqueeze(0)

        # Gradient: g = J^T @ r
        g = J.T @ r

        if torch.norm(g) < tol:
            converged = True
            break

        num_iter = k + 1

        # Hessian approximation: H = J^T @ J + mu * I
        JtJ = J.T @ J
        H = JtJ + mu * eye

        # Solve H @ delta = -g
        try:
            delta = torch.linalg.solve(H, -g)
        except RuntimeError:
            # Matrix is singular, increase damping
            mu *= 10
            continue

        if retract is None:
            x_new = x + delta
        else:
            x_new = retract(x, delta)
        r_new = residuals(x_new)

        actual_reduction = torch.sum(r**2) - torch.sum(r_new**2)
        predicted_reduction = -2 * (g @ delta) - delta @ JtJ @ delta

        # Non-positive predicted reduction: treat the step as a failure
        if predicted_reduction > 0:
            rho = actual_reduction / predicted_reduction
        else:
            rho = torch.zeros_like(actual_reduction)

        if rho > 0.25:
            # Good step, accept and decrease damping
            x = x_new
            mu = max(mu / 3, 1e-10)
        else:
            # Bad step, reject and increase damping
            mu = min(mu * 2, 1e10)
    else:
        r = residuals(x)
        J = _jacobian(residuals, jacobian, retract, x, tangent_dim)
        if J.dim() == 1:
            J = J.unsqueeze(0)
        converged = bool(torch.norm(J.T @ r) < tol)

    if not converged:
        warnings.warn(
            f"levenberg_marquardt: did not converge in {maxiter} iterations",
            RuntimeWarning,
            stacklevel=2,
        )

    return OptimizeResult(
        x=x,
        converged=torch.tensor(converged, device=x.device),
        num_iterations=torch.tensor(
            num_iter, dtype=torch.int64, device=x.device
        ),
        fun=torch.sum(r**2),
    )
