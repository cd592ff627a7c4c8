"""
Canvas module for Griswold.
Polygon geometry and the shape drawing tool.
"""

from .geometry import bounds_of, contains_point, hit_test
from .drawing import DrawingTool, DrawState

__all__ = [
    'bounds_of',
    'contains_point',
    'hit_test',
    'DrawingTool',
    'DrawState',
]
