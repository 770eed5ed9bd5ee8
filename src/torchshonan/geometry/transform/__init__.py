"""
Rotation group SO(n)
====================
"""

from torchshonan.geometry.transform._dimension import (
    son_ambient_dimension,
    son_dimension,
)
from torchshonan.geometry.transform._hat import son_hat, son_vee
from torchshonan.geometry.transform._retract import (
    son_retract,
    son_retract_vec,
)
from torchshonan.geometry.transform._special_orthogonal import (
    SpecialOrthogonal,
    son_from_vec,
    son_identity,
    son_vec,
    special_orthogonal,
)

__all__ = [
    "SpecialOrthogonal",
    "son_ambient_dimension",
    "son_dimension",
    "son_from_vec",
    "son_hat",
    "son_identity",
    "son_retract",
    "son_retract_vec",
    "son_vec",
    "son_vee",
    "special_orthogonal",
]
