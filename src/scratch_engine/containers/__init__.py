"""Container types that keep section and placeholder order stable."""

from .ordered_map import OrderedMap

__all__ = ["OrderedMap"]
