"""
HIDE Python Core Package

This package hides files inside the pixel data of lossless images and
recovers them exactly.

Subpackages:
    stego: Embedding codec (capacity, bit packing, container, orchestration)

Modules:
    config: Embedding configuration
"""

from . import stego
from .config import StegoConfig

__all__ = ['stego', 'StegoConfig']

__version__ = "1.0.0"
