"""Rotation groups and their errors."""

from ._exceptions import (
    GeometryError,
    JacobianNotImplementedError,
    TangentDimensionError,
)

__all__ = [
    "GeometryError",
    "JacobianNotImplementedError",
    "TangentDimensionError",
]
