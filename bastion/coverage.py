"""Search for the position hitting the most targets within a fixed radius.

Every pair of targets (a target paired with itself included) yields the
centers of the circles of the given radius passing through both; each
center is rounded to the integer position a command can carry and scored
by the number of targets that position encloses. This is exact for
what any pair of targets can explain but is not a full maximum coverage
solve: three or more targets all sitting on the circle boundary without a
pair explaining it may be missed.
"""

import math
from dataclasses import dataclass
from itertools import combinations_with_replacement
from typing import List, Optional, Sequence, Tuple

from .geometry import Position

EPSILON = 1e-6

Point = Tuple[float, float]


@dataclass(frozen=True)
class Coverage:
    center: Point
    count: int

    @property
    def position(self) -> Position:
        return _rounded(self.center)

    def covers(self, target: Position, radius: float) -> bool:
        return _encloses(self.position, target, radius)


def _distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def _rounded(center: Point) -> Position:
    return Position(int(round(center[0])), int(round(center[1])))


def _encloses(position: Position, target: Position, radius: float) -> bool:
    return position.distance_to(target) <= radius + EPSILON


def candidate_centers(a: Position, b: Position, radius: float) -> List[Point]:
    if a == b:
        return [(float(a.x), float(a.y))]
    separation = a.distance_to(b)
    if separation > 2 * radius:
        return []
    mid = ((a.x + b.x) / 2, (a.y + b.y) / 2)
    half = separation / 2
    if math.isclose(half, radius):
        return [mid]
    offset = math.sqrt(radius ** 2 - half ** 2)
    # unit normal of a -> b
    nx = -(b.y - a.y) / separation
    ny = (b.x - a.x) / separation
    return [
        (mid[0] + nx * offset, mid[1] + ny * offset),
        (mid[0] - nx * offset, mid[1] - ny * offset),
    ]


def coverages(targets: Sequence[Position], radius: float) -> List[Coverage]:
    found = []
    for a, b in combinations_with_replacement(targets, 2):
        for center in candidate_centers(a, b, radius):
            position = _rounded(center)
            count = sum(1 for t in targets if _encloses(position, t, radius))
            found.append(Coverage(center, count))
    return found


def best_coverage(
    targets: Sequence[Position],
    radius: float,
    reference: Position,
    must_cover: Optional[Position] = None,
) -> Optional[Coverage]:
    """Center enclosing the most targets, nearest to reference on ties."""
    ranked = sorted(
        coverages(targets, radius),
        key=lambda c: (-c.count, _distance(c.center, (reference.x, reference.y))),
    )
    if must_cover is not None:
        ranked = [c for c in ranked if c.covers(must_cover, radius)]
    return ranked[0] if ranked else None
