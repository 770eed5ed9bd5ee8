"""Geometry module exceptions."""


class GeometryError(Exception):
    """Base exception for geometry operations."""

    pass


class TangentDimensionError(GeometryError, ValueError):
    """Tangent vector length does not correspond to any SO(n), n >= 2."""

    pass


class JacobianNotImplementedError(GeometryError, NotImplementedError):
    """A closed-form Jacobian was requested but is not available."""

    pass
