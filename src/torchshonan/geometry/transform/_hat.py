"""Hat and vee operators for the Lie algebra so(n).

The tangent coordinates of SO(n) are packed as a "telescoping" sequence of
sub-algebras: the last element corresponds to so(2), the last 3 to so(3), the
last 6 to so(4), and so on. For example, the vector space isomorphic to so(5)
is laid out as::

    a b c d | u v w | x y | z

and maps to::

     0 -z  y  w -d
     z  0 -x -v  c
    -y  x  0  u -b
    -w  v -u  0  a
     d -c  b -a  0

For n = 2 and n = 3 this coincides with the familiar skew generators.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Tuple

import torch
from torch import Tensor

from torchshonan.geometry._exceptions import TangentDimensionError
from torchshonan.geometry.transform._dimension import (
    son_ambient_dimension,
    son_dimension,
)


_Layout = Tuple[Tuple[Tuple[int, ...], ...], Tuple[Tuple[float, ...], ...]]


def _freeze(index, sign) -> _Layout:
    return (
        tuple(tuple(row) for row in index),
        tuple(tuple(row) for row in sign),
    )


@lru_cache(maxsize=64)
def _hat_layout(n: int) -> _Layout:
    """Source coordinate and sign of every entry of an so(n) generator.

    Entry (r, c) of the generator equals ``sign[r][c] * xi[index[r][c]]``.
    Index ``d`` refers to a zero appended after the d coordinates and is
    used for the diagonal.
    """
    d = son_dimension(n)
    index = [[d] * n for _ in range(n)]
    sign = [[0.0] * n for _ in range(n)]

    if n == 2:
        index[0][1] = index[1][0] = 0
        sign[0][1] = -1.0
        sign[1][0] = 1.0
        return _freeze(index, sign)

    # top-left block is so(n - 1) built from the last dmin coordinates
    dmin = son_dimension(n - 1)
    offset = d - dmin
    sub_index, sub_sign = _hat_layout(n - 1)
    for r in range(n - 1):
        for c in range(n - 1):
            index[r][c] = sub_index[r][c] + offset
            sign[r][c] = sub_sign[r][c]

    # last row and column from the first n - 1 coordinates, alternating sign
    s = 1.0 if d % 2 == 0 else -1.0
    for i in range(n - 1):
        j = n - 2 - i
        index[n - 1][j] = index[j][n - 1] = i
        sign[n - 1][j] = -s
        sign[j][n - 1] = s
        s = -s

    return _freeze(index, sign)


def son_hat(xi: Tensor) -> Tensor:
    """Map tangent coordinates to a skew-symmetric matrix in so(n).

    Parameters
    ----------
    xi : Tensor
        Tangent coordinates, shape (..., d) with d = n (n - 1) / 2, n >= 2,
        in the telescoping layout described in the module docstring.

    Returns
    -------
    Tensor
        Skew-symmetric generator, shape (..., n, n).

    Raises
    ------
    TangentDimensionError
        If d does not correspond to any n >= 2 (including d = 0).

    Notes
    -----
    The construction is recursive. For n = 2,

    .. math::

        \\hat{\\xi} = \\begin{bmatrix} 0 & -\\xi_0 \\\\ \\xi_0 & 0 \\end{bmatrix}.

    For n > 2 the top-left (n - 1) x (n - 1) block is the hat of the last
    (n - 1)(n - 2) / 2 coordinates. The last row and column take the first
    n - 1 coordinates: for i = 0, ..., n - 2 and j = n - 2 - i,
    :math:`X_{n-1,j} = -s\\,\\xi_i` and :math:`X_{j,n-1} = s\\,\\xi_i`, where
    the sign s starts at :math:`(-1)^d` and alternates with i.

    The result is exactly skew-symmetric.

    Examples
    --------
    >>> son_hat(torch.tensor([1.0]))
    tensor([[ 0., -1.],
            [ 1.,  0.]])
    >>> son_hat(torch.tensor([1.0, 2.0, 3.0]))
    tensor([[ 0., -3.,  2.],
            [ 3.,  0., -1.],
            [-2.,  1.,  0.]])
    """
    d = xi.shape[-1] if xi.dim() > 0 else 0
    n = son_ambient_dimension(d)
    if n < 2:
        raise TangentDimensionError(
            f"son_hat: n < 2 not supported, got tangent dimension {d}"
        )
    if son_dimension(n) != d:
        raise TangentDimensionError(
            f"son_hat: tangent dimension {d} is not n(n-1)/2 for any n"
        )

    index, sign = _hat_layout(n)
    index = torch.tensor(index, dtype=torch.long, device=xi.device)
    sign = torch.tensor(sign, dtype=xi.dtype, device=xi.device)

    batch_shape = xi.shape[:-1]
    padded = torch.cat([xi, xi.new_zeros(*batch_shape, 1)], dim=-1)
    entries = padded[..., index.reshape(-1)]

    return sign * entries.reshape(*batch_shape, n, n)


def son_vee(matrix: Tensor) -> Tensor:
    """Extract tangent coordinates from a skew-symmetric matrix.

    Inverse of :func:`son_hat`. Only the strictly lower triangle of
    ``matrix`` is read.

    Parameters
    ----------
    matrix : Tensor
        Skew-symmetric matrix, shape (..., n, n) with n >= 2.

    Returns
    -------
    Tensor
        Tangent coordinates, shape (..., n (n - 1) / 2).

    Raises
    ------
    ValueError
        If matrix is not square or n < 2.
    """
    if (
        matrix.dim() < 2
        or matrix.shape[-1] != matrix.shape[-2]
        or matrix.shape[-1] < 2
    ):
        raise ValueError(
            f"son_vee: matrix must be n x n with n >= 2, got shape {tuple(matrix.shape)}"
        )

    n = matrix.shape[-1]
    d = son_dimension(n)
    index, sign = _hat_layout(n)

    positions = [0] * d
    signs = [0.0] * d
    for r in range(n):
        for c in range(r):
            positions[index[r][c]] = r * n + c
            signs[index[r][c]] = sign[r][c]

    positions = torch.tensor(positions, dtype=torch.long, device=matrix.device)
    signs = torch.tensor(signs, dtype=matrix.dtype, device=matrix.device)

    flat = matrix.reshape(*matrix.shape[:-2], n * n)

    return signs * flat[..., positions]
