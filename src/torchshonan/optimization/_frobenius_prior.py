"""Frobenius prior on SO(n)."""

from __future__ import annotations

from typing import List

import torch
from torch import Tensor

from torchshonan.geometry.transform import (
    SpecialOrthogonal,
    son_dimension,
    son_retract_vec,
    son_vec,
)


class FrobeniusPrior:
    r"""Frobenius distance between a rotation and a fixed "prior mean" matrix.

    The rotation is one parameter block of ``n * n`` values holding its
    matrix entries in column-major order (the layout of
    :func:`~torchshonan.geometry.transform.son_vec`). The cost has ``n * n``
    residuals,

    .. math::

        r_{i + j n} = R_{ij} - M_{ij},

    so that :math:`\|r\|^2 = \|R - M\|_F^2`.

    Parameters
    ----------
    mean : Tensor
        Prior mean :math:`M`, shape ``(n, n)``. It need not be orthogonal.

    Attributes
    ----------
    n : int
        Matrix size.
    nn : int
        Number of residuals and size of the parameter block.
    dim : int
        Tangent dimension of SO(n), ``n (n - 1) / 2``.
    num_residuals : int
        Same as ``nn``.
    parameter_block_sizes : list of int
        ``[nn]``.

    Examples
    --------
    Fit the closest rotation to a prior mean by stepping on SO(n):

    >>> prior = FrobeniusPrior(mean)
    >>> x0 = son_vec(son_identity(n))
    >>> result = levenberg_marquardt(
    ...     prior,
    ...     x0,
    ...     jacobian=prior.jacobian,
    ...     retract=son_retract_vec,
    ...     tangent_dim=prior.dim,
    ... )
    """

    def __init__(self, mean: Tensor):
        if mean.dim() != 2 or mean.shape[0] != mean.shape[1]:
            raise ValueError(
                f"FrobeniusPrior: mean must be a square matrix, got shape {tuple(mean.shape)}"
            )
        if mean.shape[0] < 2:
            raise ValueError(
                f"FrobeniusPrior: mean must be at least 2x2, got {mean.shape[0]}x{mean.shape[0]}"
            )

        self.mean = mean
        self.n = mean.shape[0]
        self.nn = self.n * self.n
        self.dim = son_dimension(self.n)
        self.num_residuals = self.nn
        self.parameter_block_sizes: List[int] = [self.nn]

        self._mean_vec = son_vec(SpecialOrthogonal(matrix=mean))

    def residuals(self, values: Tensor) -> Tensor:
        """Elementwise difference of the parameter block and the mean.

        Parameters
        ----------
        values : Tensor
            Column-major rotation entries, shape ``(n * n,)``.

        Returns
        -------
        Tensor
            Residuals, shape ``(n * n,)``, in the same column-major order.
        """
        if values.shape[-1] != self.nn:
            raise ValueError(
                f"FrobeniusPrior: expected {self.nn} parameters, got {values.shape[-1]}"
            )
        return values - self._mean_vec.to(dtype=values.dtype, device=values.device)

    __call__ = residuals

    def jacobian(self, values: Tensor) -> Tensor:
        """Jacobian of the residuals with respect to the parameter block.

        Row ``k`` holds the derivatives of residual ``k`` (row-major layout),
        which for this cost is the ``(n * n, n * n)`` identity.
        """
        return torch.eye(self.nn, dtype=values.dtype, device=values.device)

    def tangent_jacobian(self, values: Tensor) -> Tensor:
        """Jacobian of the residuals with respect to tangent coordinates.

        Differentiates ``residuals(son_retract_vec(values, delta))`` at
        ``delta = 0`` with automatic differentiation.

        Returns
        -------
        Tensor
            Shape ``(n * n, n (n - 1) / 2)``.
        """
        zero = values.new_zeros(self.dim)

        def local(delta: Tensor) -> Tensor:
            return self.residuals(son_retract_vec(values, delta))

        return torch.func.jacrev(local)(zero)
