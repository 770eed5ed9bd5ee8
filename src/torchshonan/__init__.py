"""torchshonan: PyTorch rotations in n dimensions for manifold least squares."""

from . import geometry, optimization

__all__ = [
    "geometry",
    "optimization",
]

__version__ = "0.1.0"
