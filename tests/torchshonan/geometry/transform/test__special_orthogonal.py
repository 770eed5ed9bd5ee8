"""Tests for SpecialOrthogonal tensorclass."""

import pytest
import torch

from torchshonan.geometry import JacobianNotImplementedError
from torchshonan.geometry.transform import (
    SpecialOrthogonal,
    son_from_vec,
    son_identity,
    son_retract,
    son_vec,
    special_orthogonal,
)


class TestSpecialOrthogonalConstruction:
    """Tests for SpecialOrthogonal construction."""

    def test_from_tensor(self):
        """Create SpecialOrthogonal from tensor."""
        mat = torch.eye(4)
        R = SpecialOrthogonal(matrix=mat)
        assert R.matrix.shape == (4, 4)
        assert torch.allclose(R.matrix, mat)

    def test_stored_verbatim(self):
        """Construction does not check orthogonality."""
        mat = torch.randn(3, 3)
        R = special_orthogonal(mat)
        assert torch.equal(R.matrix, mat)

    def test_batch(self):
        """Batch of rotation matrices."""
        R = SpecialOrthogonal(matrix=torch.randn(10, 5, 5))
        assert R.matrix.shape == (10, 5, 5)

    def test_factory_function(self):
        """Create via special_orthogonal() factory."""
        mat = torch.eye(2)
        R = special_orthogonal(mat)
        assert isinstance(R, SpecialOrthogonal)
        assert torch.allclose(R.matrix, mat)

    def test_invalid_shape_not_square(self):
        with pytest.raises(ValueError, match="square"):
            special_orthogonal(torch.randn(3, 4))

    def test_invalid_shape_1d(self):
        with pytest.raises(ValueError, match="square"):
            special_orthogonal(torch.randn(9))

    def test_invalid_shape_1x1(self):
        with pytest.raises(ValueError, match="at least 2x2"):
            special_orthogonal(torch.ones(1, 1))


class TestSOnIdentity:
    @pytest.mark.parametrize("n", [2, 3, 6])
    def test_identity(self, n):
        R = son_identity(n, dtype=torch.float64)
        assert torch.equal(R.matrix, torch.eye(n, dtype=torch.float64))

    def test_invalid(self):
        with pytest.raises(ValueError, match="at least 2"):
            son_identity(1)


class TestSOnVec:
    """Tests for son_vec."""

    def test_column_major(self):
        """Entries are read column by column."""
        mat = torch.arange(9.0).reshape(3, 3)
        v = son_vec(special_orthogonal(mat))
        expected = torch.tensor([0.0, 3.0, 6.0, 1.0, 4.0, 7.0, 2.0, 5.0, 8.0])
        assert torch.equal(v, expected)

    def test_rotation_3x3(self):
        """Nine entries matching R[k % 3, k // 3]."""
        R = son_retract(torch.tensor([0.3, -0.2, 0.5], dtype=torch.float64))
        v = son_vec(R)
        assert v.shape == (9,)
        for k in range(9):
            assert v[k] == R.matrix[k % 3, k // 3]

    def test_batch(self):
        mat = torch.randn(4, 3, 3)
        v = son_vec(SpecialOrthogonal(matrix=mat))
        assert v.shape == (4, 9)
        assert torch.equal(v[1], son_vec(SpecialOrthogonal(matrix=mat[1])))

    def test_jacobian_not_implemented(self):
        """Requesting the Jacobian always fails."""
        R = son_identity(3)
        for _ in range(2):
            with pytest.raises(NotImplementedError, match="son_vec"):
                son_vec(R, jacobian=True)

    def test_jacobian_error_type(self):
        with pytest.raises(JacobianNotImplementedError):
            son_vec(son_identity(4), jacobian=True)


class TestSOnFromVec:
    """Tests for son_from_vec."""

    @pytest.mark.parametrize("n", [2, 3, 5])
    def test_inverts_vec(self, n):
        mat = torch.randn(n, n, dtype=torch.float64)
        R = son_from_vec(son_vec(SpecialOrthogonal(matrix=mat)))
        assert torch.equal(R.matrix, mat)

    def test_batch(self):
        v = torch.randn(6, 16)
        R = son_from_vec(v)
        assert R.matrix.shape == (6, 4, 4)
        assert torch.equal(son_vec(R), v)

    @pytest.mark.parametrize("size", [1, 3, 8, 10])
    def test_invalid_length(self, size):
        with pytest.raises(ValueError, match="n \\* n"):
            son_from_vec(torch.zeros(size))


class TestSpecialOrthogonalDtypes:
    @pytest.mark.parametrize(
        "dtype", [torch.float16, torch.bfloat16, torch.float32, torch.float64]
    )
    def test_dtype_support(self, dtype):
        R = special_orthogonal(torch.eye(3, dtype=dtype))
        assert R.matrix.dtype == dtype
        assert son_vec(R).dtype == dtype


class TestSpecialOrthogonalDevice:
    def test_cpu(self):
        R = special_orthogonal(torch.eye(3, device="cpu"))
        assert R.matrix.device.type == "cpu"

    @pytest.mark.skipif(
        not torch.cuda.is_available(), reason="CUDA not available"
    )
    def test_cuda(self):
        R = special_orthogonal(torch.eye(3, device="cuda"))
        assert R.matrix.device.type == "cuda"
