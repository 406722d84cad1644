"""Utility helpers shared across the kernel."""

from console_kernel.utils.serialization import (
    canonicalize_json,
    strip_none,
    to_storable,
)

__all__ = [
    "canonicalize_json",
    "strip_none",
    "to_storable",
]
