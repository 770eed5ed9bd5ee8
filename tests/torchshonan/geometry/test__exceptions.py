"""Tests for the geometry exception hierarchy."""

import pytest
import torch

from torchshonan.geometry import (
    GeometryError,
    JacobianNotImplementedError,
    TangentDimensionError,
)
from torchshonan.geometry.transform import son_hat, son_retract


class TestExceptionHierarchy:
    def test_tangent_dimension_error_is_value_error(self):
        assert issubclass(TangentDimensionError, GeometryError)
        assert issubclass(TangentDimensionError, ValueError)

    def test_jacobian_error_is_not_implemented_error(self):
        assert issubclass(JacobianNotImplementedError, GeometryError)
        assert issubclass(JacobianNotImplementedError, NotImplementedError)

    def test_catch_as_geometry_error(self):
        """Both errors are reachable through the common base."""
        with pytest.raises(GeometryError):
            son_hat(torch.zeros(0))
        with pytest.raises(GeometryError):
            son_retract(torch.zeros(3), jacobian=True)
