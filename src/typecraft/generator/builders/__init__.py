"""
Per-variant builders.

Each builder takes a registry entry, its definition narrowed to the variant,
and the full registry, and returns the declarations it produces, keyed by
fully-qualified classname.
"""

from .enum import build_enum
from .marker import build_marker
from .message import build_message
from .record import build_record
from .scalar import build_scalar

__all__ = [
    "build_enum",
    "build_marker",
    "build_message",
    "build_record",
    "build_scalar",
]
