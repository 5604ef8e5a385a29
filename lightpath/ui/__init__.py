"""pygame view for the lightpath puzzle."""

from .layout import BoardGeometry, compute_geometry
from .toolkit import SessionView, ensure_pygame

__all__ = [
    "BoardGeometry",
    "SessionView",
    "compute_geometry",
    "ensure_pygame",
]
