import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .actions import Action, SpellWindAction
from .config import Config
from .geometry import Position, Vector
from . import trajectory

log = logging.getLogger(__name__)

MONSTER_TYPE = 0
HERO_TYPE = 1
VILAIN_TYPE = 2

# threat_for / threat_code values
NOBODY = 0
MY_BASE = 1
EVIL_BASE = 2


class UnknownEntityTypeError(ValueError):
    pass


class InsufficientManaError(RuntimeError):
    pass


@dataclass
class Entity:
    id: int
    x: int
    y: int
    shield_life: int = 0
    is_controlled: int = 0
    health: int = 0

    @classmethod
    def deserialize(cls, line: str) -> "Entity":
        args = [int(j) for j in line.split()]
        (
            entity_id,
            entity_type,
            x,
            y,
            shield_life,
            is_controlled,
            health,
            vx,
            vy,
            near_base,
            threat_for,
        ) = args
        common = (entity_id, x, y, shield_life, is_controlled, health)
        if entity_type == MONSTER_TYPE:
            return Monster(*common, vx=vx, vy=vy, near_base=near_base, threat_for=threat_for)
        elif entity_type == HERO_TYPE:
            return Hero(*common)
        elif entity_type == VILAIN_TYPE:
            return Vilain(*common)
        raise UnknownEntityTypeError(f"unknown entity type {entity_type} for #{entity_id}")

    @property
    def position(self) -> Position:
        return Position(self.x, self.y)

    def __hash__(self) -> int:
        return self.id

    def __eq__(self, other) -> bool:
        return isinstance(other, Entity) and self.id == other.id

    def controlled(self) -> bool:
        return bool(self.is_controlled)

    def shielded(self) -> bool:
        return bool(self.shield_life)

    def distance_to(self, other: "Entity") -> float:
        return self.position.distance_to(other.position)


def discover_in_range(entities: List[Entity], position: Position, radius) -> List[Entity]:
    return [e for e in entities if e.position.distance_to(position) <= radius]


@dataclass(eq=False)
class Monster(Entity):
    vx: int = 0
    vy: int = 0
    near_base: int = 0
    threat_for: int = NOBODY
    _etas: Dict[Position, int] = field(default_factory=dict, repr=False, compare=False)

    @property
    def velocity(self) -> Vector:
        return Vector(self.vx, self.vy)

    def targeting_base(self) -> bool:
        return bool(self.near_base)

    def eta(self, base: "Base", config: Config) -> int:
        # snapshot data never changes within a turn
        if base.position not in self._etas:
            self._etas[base.position] = trajectory.eta(self, base.position, config)
        return self._etas[base.position]

    def reachable(self, base: "Base", config: Config) -> bool:
        return self.eta(base, config) != trajectory.UNREACHABLE

    def risk(self, base: "Base", config: Config) -> int:
        return trajectory.risk(base, self, config)

    def __str__(self) -> str:
        return f"Monster {self.id}: hp={self.health}; pos={self.position}; v=({self.vx},{self.vy})"


@dataclass(eq=False)
class Hero(Entity):
    command: Optional[Action] = field(default=None, repr=False, compare=False)

    def issue(self, action: Action) -> None:
        # a new command always replaces the pending one
        self.command = action

    @property
    def has_command(self) -> bool:
        return self.command is not None

    @property
    def casting_wind(self) -> bool:
        return isinstance(self.command, SpellWindAction)

    def discover(self, monsters: List[Monster], config: Config) -> List[Monster]:
        return discover_in_range(monsters, self.position, config.hero_view_range)

    def wind_victims(self, monsters: List[Monster], config: Config) -> List[Monster]:
        return [
            m
            for m in discover_in_range(monsters, self.position, config.wind_radius)
            if not m.shielded()
        ]

    def __str__(self) -> str:
        return f"Hero {self.id}: pos={self.position}; shield={self.shield_life}; mad={self.is_controlled}"


@dataclass(eq=False)
class Vilain(Entity):
    def __str__(self) -> str:
        return f"Vilain {self.id}: pos={self.position}; shield={self.shield_life}"


@dataclass
class Base:
    position: Position
    threat_code: int = MY_BASE
    health: int = 3
    mana: int = 0

    def update_from_inputs(self, line: str):
        self.health, self.mana = [int(j) for j in line.split()]

    @property
    def is_left(self) -> bool:
        return self.position.x == 0

    def position_for_base(self, position_relative_to_left_base: Position, config: Config) -> Position:
        if self.is_left:
            return position_relative_to_left_base
        return position_relative_to_left_base.symetric_position(config)

    def within_range(self, entity: Entity, radius: int) -> bool:
        return self.position.distance_to(entity.position) <= radius

    def can_afford(self, cost: int, reserve: int = 0) -> bool:
        return self.mana >= max(cost, reserve)

    def spend(self, cost: int) -> None:
        if cost > self.mana:
            raise InsufficientManaError(f"cannot spend {cost} mana out of {self.mana}")
        self.mana -= cost

    def __str__(self) -> str:
        return f"hp={self.health}; mp={self.mana}; pos={self.position}"
