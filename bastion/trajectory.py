"""Turn by turn projection of monster trajectories against a base."""

from typing import Generator

from .config import Config
from .geometry import Position

UNREACHABLE = -1


def project(monster: "Monster", config: Config) -> Generator[Position, None, None]:
    """Yield the monster positions, current one first, while in the arena.

    A motionless monster only yields its current position.
    """
    current_position = monster.position
    vector = monster.velocity
    while current_position.within_bounds(config):
        yield current_position
        if vector.is_null:
            return
        current_position = current_position.with_vector(vector)


def eta(monster: "Monster", target: Position, config: Config) -> int:
    """Whole turns until the monster enters the capture radius of target.

    Once inside the radius the remaining walk is folded in as
    floor(distance / monster speed). Returns UNREACHABLE when the projection
    leaves the arena first.
    """
    for turns, position in enumerate(project(monster, config)):
        remaining = position.distance_to(target)
        if remaining <= config.base_radius:
            return turns + int(remaining // config.monster_speed)
    return UNREACHABLE


def risk(base: "Base", monster: "Monster", config: Config) -> int:
    # confirmed incoming monsters always outrank possibly reachable ones
    monster_eta = monster.eta(base, config)
    score = 0
    if monster.targeting_base():
        if monster.threat_for == base.threat_code:
            score = 100 - monster_eta
    elif monster_eta >= 0:
        score = 70 - monster_eta
    return max(score, 0)
