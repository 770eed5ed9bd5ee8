"""Dimension bookkeeping between SO(n) and its Lie algebra so(n)."""

import math


def son_ambient_dimension(d: int) -> int:
    """Matrix size n of the group whose tangent space has dimension d.

    Inverts :math:`d = n (n - 1) / 2` as
    :math:`n = (1 + \\sqrt{1 + 8 d}) / 2`, evaluated in floating point and
    truncated. The result is exact for triangular numbers
    (1 -> 2, 3 -> 3, 6 -> 4, 10 -> 5, ...); other values of ``d`` have no
    integer preimage.

    Examples
    --------
    >>> son_ambient_dimension(3)
    3
    >>> son_ambient_dimension(6)
    4
    """
    return int((1 + math.sqrt(1 + 8 * d)) / 2)


def son_dimension(n: int) -> int:
    """Dimension n (n - 1) / 2 of the manifold SO(n).

    Examples
    --------
    >>> son_dimension(4)
    6
    """
    return n * (n - 1) // 2
