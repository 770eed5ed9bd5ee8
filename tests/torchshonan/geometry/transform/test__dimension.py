"""Tests for SO(n) dimension conversions."""

import pytest

from torchshonan.geometry.transform import (
    son_ambient_dimension,
    son_dimension,
)


class TestSOnAmbientDimension:
    """Tests for son_ambient_dimension."""

    @pytest.mark.parametrize(
        "d, n", [(1, 2), (3, 3), (6, 4), (10, 5), (15, 6)]
    )
    def test_small_dimensions(self, d, n):
        """Triangular numbers map to their matrix size."""
        assert son_ambient_dimension(d) == n

    def test_inverts_dimension(self):
        """Exact inverse of son_dimension for large n."""
        for n in range(2, 200):
            assert son_ambient_dimension(son_dimension(n)) == n

    def test_returns_int(self):
        """Result is a Python int."""
        assert isinstance(son_ambient_dimension(6), int)

    def test_zero(self):
        """Empty tangent space implies n = 1."""
        assert son_ambient_dimension(0) == 1


class TestSOnDimension:
    """Tests for son_dimension."""

    @pytest.mark.parametrize(
        "n, d", [(2, 1), (3, 3), (4, 6), (5, 10), (6, 15)]
    )
    def test_small_dimensions(self, n, d):
        assert son_dimension(n) == d

    @pytest.mark.parametrize("d", [1, 3, 6, 10, 15])
    def test_round_trip(self, d):
        assert son_dimension(son_ambient_dimension(d)) == d
