"""Utility modules for Bridge Client."""

from .sanitizer import mask_sensitive_data

__all__ = [
    'mask_sensitive_data',
]
