"""SpecialOrthogonal representation of SO(n) elements."""

from __future__ import annotations

import math
from typing import Optional

import torch
from tensordict.tensorclass import tensorclass
from torch import Tensor

from torchshonan.geometry._exceptions import JacobianNotImplementedError


@tensorclass
class SpecialOrthogonal:
    """n x n rotation matrix (SO(n) element).

    A rotation matrix R in SO(n) satisfies:
    - Orthogonality: R^T R = I
    - Unit determinant: det(R) = +1

    Attributes
    ----------
    matrix : Tensor
        Rotation matrix, shape (..., n, n) with n >= 2.

    Examples
    --------
    Identity rotation in 4D:
        SpecialOrthogonal(matrix=torch.eye(4))

    Result of a retraction:
        son_retract(torch.tensor([0.1, 0.2, 0.3]))

    Notes
    -----
    Neither the constructor nor :func:`special_orthogonal` checks
    orthogonality or the determinant; a valid rotation matrix is a
    precondition. Use :func:`son_retract` to produce valid elements
    from tangent coordinates.
    """

    matrix: Tensor


def _vec_matrix(matrix: Tensor) -> Tensor:
    n = matrix.shape[-1]
    return matrix.transpose(-1, -2).reshape(*matrix.shape[:-2], n * n)


def _unvec_matrix(vector: Tensor) -> Tensor:
    n = math.isqrt(vector.shape[-1])
    return vector.reshape(*vector.shape[:-1], n, n).transpose(-1, -2)


def special_orthogonal(matrix: Tensor) -> SpecialOrthogonal:
    """Create SpecialOrthogonal from matrix tensor.

    Parameters
    ----------
    matrix : Tensor
        Rotation matrix, shape (..., n, n) with n >= 2.

    Returns
    -------
    SpecialOrthogonal
        SpecialOrthogonal instance wrapping ``matrix`` as is.

    Raises
    ------
    ValueError
        If matrix is not square in its last two dimensions or n < 2.

    Examples
    --------
    >>> R = special_orthogonal(torch.eye(3))
    >>> R.matrix
    tensor([[1., 0., 0.],
            [0., 1., 0.],
            [0., 0., 1.]])
    """
    if matrix.dim() < 2 or matrix.shape[-1] != matrix.shape[-2]:
        raise ValueError(
            f"special_orthogonal: matrix must be square in its last two dimensions, got shape {tuple(matrix.shape)}"
        )
    if matrix.shape[-1] < 2:
        raise ValueError(
            f"special_orthogonal: matrix must be at least 2x2, got {matrix.shape[-1]}x{matrix.shape[-1]}"
        )
    return SpecialOrthogonal(matrix=matrix)


def son_identity(
    n: int,
    *,
    dtype: Optional[torch.dtype] = None,
    device: Optional[torch.device] = None,
) -> SpecialOrthogonal:
    """Identity element of SO(n).

    Raises
    ------
    ValueError
        If n < 2.
    """
    if n < 2:
        raise ValueError(f"son_identity: n must be at least 2, got {n}")
    return SpecialOrthogonal(matrix=torch.eye(n, dtype=dtype, device=device))


def son_vec(rotation: SpecialOrthogonal, *, jacobian: bool = False) -> Tensor:
    """Vectorize a rotation matrix in column-major order.

    Parameters
    ----------
    rotation : SpecialOrthogonal
        Rotation with matrix of shape (..., n, n).
    jacobian : bool
        Request the derivative of the vectorization with respect to the
        tangent coordinates. Not implemented.

    Returns
    -------
    Tensor
        Shape (..., n * n): column 0 top to bottom, then column 1, and so on.

    Raises
    ------
    JacobianNotImplementedError
        If ``jacobian`` is True.

    Examples
    --------
    >>> R = special_orthogonal(torch.tensor([[1.0, 2.0], [3.0, 4.0]]))
    >>> son_vec(R)
    tensor([1., 3., 2., 4.])
    """
    if jacobian:
        raise JacobianNotImplementedError(
            "son_vec: jacobian not implemented"
        )

    return _vec_matrix(rotation.matrix)


def son_from_vec(vector: Tensor) -> SpecialOrthogonal:
    """Unpack a column-major vector into a SpecialOrthogonal.

    Inverse of :func:`son_vec`.

    Parameters
    ----------
    vector : Tensor
        Column-major matrix entries, shape (..., n * n) with n >= 2.

    Raises
    ------
    ValueError
        If the last dimension is not a perfect square of at least 4.
    """
    size = vector.shape[-1] if vector.dim() > 0 else 0
    n = math.isqrt(size)
    if n * n != size or n < 2:
        raise ValueError(
            f"son_from_vec: last dimension must be n * n with n >= 2, got {size}"
        )
    return SpecialOrthogonal(matrix=_unvec_matrix(vector))
