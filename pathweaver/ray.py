"""
Rays traced through the scene.

Every ray carries the shutter time at which it was emitted. Moving
spheres are intersected at that time, and scattered rays inherit it,
so a whole light path sees the scene frozen at a single instant.
"""

from __future__ import annotations
from .vec3 import Vec3, Point3


class Ray:
    """A half-line `origin + t * direction` emitted at a shutter time in [0, 1]."""

    __slots__ = ('origin', 'direction', 'time')

    def __init__(self, origin: Point3, direction: Vec3, time: float = 0.0):
        """
        Args:
            origin: Where the ray starts (a camera lens point or a hit point)
            direction: Travel direction; left unnormalized by the camera and materials
            time: Shutter time in [0, 1]; 0 for static scenes
        """
        self.origin = origin
        self.direction = direction
        self.time = time

    def at(self, t: float) -> Point3:
        """Point reached after travelling parameter `t` along the ray."""
        return self.origin + self.direction * t

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin}, direction={self.direction}, time={self.time:.4f})"
