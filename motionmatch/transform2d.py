"""A position and heading on the ground plane."""

from __future__ import annotations

import math
from dataclasses import dataclass

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]


@dataclass
class Transform2d:
    """Translation on the XZ ground plane plus a rotation about the Y axis."""

    translation: Vec2 = (0.0, 0.0)
    angle: float = 0.0

    def set_direction(self, direction: Vec2) -> None:
        """Turn to face ``direction`` (x, z)."""
        self.angle = math.atan2(direction[0], direction[1])

    def translation3d(self) -> Vec3:
        """The translation lifted into 3D with a zero height."""
        x, z = self.translation
        return (float(x), 0.0, float(z))

    def direction3d(self) -> Vec3:
        """The forward direction lifted into 3D with a zero height."""
        x, z = self.forward()
        return (x, 0.0, z)

    def forward(self) -> Vec2:
        """Unit vector the transform faces."""
        return (math.sin(self.angle), math.cos(self.angle))

    def right(self) -> Vec2:
        """Unit vector to the right of the forward direction."""
        x, z = self.forward()
        return (z, -x)