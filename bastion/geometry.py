import math
from dataclasses import dataclass

from .config import Config


@dataclass(frozen=True)
class Position:
    x: int
    y: int

    def distance_to(self, other: "Position") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def within_bounds(self, config: Config) -> bool:
        return 0 <= self.x <= config.width and 0 <= self.y <= config.height

    def with_vector(self, vector: "Vector") -> "Position":
        return Position(self.x + vector.dx, self.y + vector.dy)

    def symetric_position(self, config: Config) -> "Position":
        return Position(*config.mirror(self.x, self.y))

    def __str__(self) -> str:
        return f"({self.x},{self.y})"


@dataclass(frozen=True)
class Vector:
    dx: int
    dy: int

    @property
    def is_null(self) -> bool:
        return self.dx == 0 and self.dy == 0


def distance(a: Position, b: Position) -> float:
    return a.distance_to(b)


def angle_between(ref: Position, other: Position) -> int:
    """Angle in degrees of the vector ref -> other.

    Single-quadrant approximation (atan, not atan2): only meant to bucket
    positions into coarse sectors around a base.
    """
    delta_x = other.x - ref.x
    delta_y = other.y - ref.y
    if delta_x == 0:
        return 90 if delta_y >= 0 else 0
    return int(math.degrees(math.atan(delta_y / delta_x)))


def polar_to_cartesian(
    origin: Position, radius: int, degrees: int, mirror: bool = False
) -> Position:
    if mirror:
        degrees += 180
    theta = math.radians(degrees)
    return Position(
        origin.x + int(radius * math.cos(theta)),
        origin.y + int(radius * math.sin(theta)),
    )
