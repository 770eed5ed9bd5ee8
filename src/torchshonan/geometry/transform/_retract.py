"""Cayley retraction from so(n) to SO(n).

The retraction maps tangent coordinates to a rotation through the Cayley
transform of the half-angle generator,

.. math::

    R(\\xi) = (I + X)(I - X)^{-1}, \\qquad X = \\widehat{\\xi / 2}.

It agrees with the exponential map to first order, is rational rather than
transcendental, and is orthogonal with unit determinant for every
:math:`\\xi`: the eigenvalues of :math:`I - X` are :math:`1 - i\\lambda` with
:math:`\\lambda` real, so the inverse always exists. Accuracy with respect to
the exponential map degrades as :math:`\\|\\xi\\|` grows, so it is meant for
small, local steps.
"""

from __future__ import annotations

import torch
from torch import Tensor

from torchshonan.geometry._exceptions import JacobianNotImplementedError
from torchshonan.geometry.transform._dimension import son_ambient_dimension
from torchshonan.geometry.transform._hat import son_hat
from torchshonan.geometry.transform._special_orthogonal import (
    SpecialOrthogonal,
    _unvec_matrix,
    _vec_matrix,
)


def _cayley(xi: Tensor) -> Tensor:
    X = son_hat(xi / 2.0)
    n = son_ambient_dimension(xi.shape[-1])
    eye = torch.eye(n, dtype=X.dtype, device=X.device)

    # (I - X) is invertible for skew-symmetric X; a singular matrix from
    # floating point degeneracy surfaces as torch.linalg.LinAlgError
    return (eye + X) @ torch.linalg.inv(eye - X)


def son_retract(xi: Tensor, *, jacobian: bool = False) -> SpecialOrthogonal:
    """Retract tangent coordinates onto SO(n) with the Cayley transform.

    Parameters
    ----------
    xi : Tensor
        Tangent coordinates, shape (..., d) with d = n (n - 1) / 2, n >= 2.
    jacobian : bool
        Request the derivative of the retraction with respect to ``xi``.
        Not implemented.

    Returns
    -------
    SpecialOrthogonal
        Rotation with matrix of shape (..., n, n).

    Raises
    ------
    JacobianNotImplementedError
        If ``jacobian`` is True.
    TangentDimensionError
        If d does not correspond to any n >= 2.

    Examples
    --------
    Zero tangent vector gives the identity exactly:

    >>> son_retract(torch.zeros(3)).matrix
    tensor([[1., 0., 0.],
            [0., 1., 0.],
            [0., 0., 1.]])
    """
    if jacobian:
        raise JacobianNotImplementedError(
            "son_retract: jacobian not implemented"
        )

    return SpecialOrthogonal(matrix=_cayley(xi))


def son_retract_vec(values: Tensor, delta: Tensor) -> Tensor:
    """Apply a tangent step to a vectorized rotation.

    Computes ``vec(R @ son_retract(delta))`` where ``R`` is the matrix whose
    column-major entries are ``values``. This is the update a least-squares
    solver performs when its parameter block is the n * n column-major
    rotation and its step lives in the d-dimensional tangent space.

    Parameters
    ----------
    values : Tensor
        Column-major rotation entries, shape (..., n * n).
    delta : Tensor
        Tangent step, shape (..., n (n - 1) / 2).

    Returns
    -------
    Tensor
        Column-major entries of the updated rotation, shape (..., n * n).
    """
    return _vec_matrix(_unvec_matrix(values) @ _cayley(delta))
