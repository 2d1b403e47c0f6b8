import logging
from contextlib import contextmanager
from copy import copy
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

from .actions import Action, WaitAction
from .classifier import Classification, classify
from .config import DEFAULT_CONFIG, Config
from .entities import (
    EVIL_BASE,
    MY_BASE,
    Base,
    Entity,
    Hero,
    Monster,
    Vilain,
)
from .geometry import Position

log = logging.getLogger(__name__)

# how many entries of each monster list the debug dump shows
DUMP_LIMIT = 3


@dataclass
class Gamestate:
    my_base: Base
    evil_base: Base
    config: Config = DEFAULT_CONFIG
    entities: List[Entity] = field(default_factory=list)
    actions: List[Action] = field(default_factory=list)
    heroes: List[Hero] = field(default_factory=list)
    vilains: List[Vilain] = field(default_factory=list)
    monsters: List[Monster] = field(default_factory=list)
    world: Dict[int, Entity] = field(default_factory=dict)
    classification: Classification = field(default_factory=Classification)
    # monsters already handled this turn (lethal attack or spell under way)
    neutralized: Set[int] = field(default_factory=set)
    primary_target: Optional[Monster] = None
    turn: int = 0

    @classmethod
    def from_corner(cls, x: int, y: int, config: Config = DEFAULT_CONFIG) -> "Gamestate":
        my_base = Base(Position(x, y), threat_code=MY_BASE)
        evil_base = Base(my_base.position.symetric_position(config), threat_code=EVIL_BASE)
        return cls(my_base, evil_base, config)

    # Accessors
    @property
    def roster(self) -> List[Hero]:
        # The game expects first command to apply for the first hero (and so on)
        return sorted((e for e in self.entities if isinstance(e, Hero)), key=lambda h: h.id)

    @property
    def defenders(self) -> List[Hero]:
        return self.roster[: self.config.defenders]

    @property
    def attacker(self) -> Optional[Hero]:
        roster = self.roster
        if len(roster) > self.config.defenders:
            return roster[self.config.defenders]
        return None

    @property
    def available_heroes(self) -> List[Hero]:
        return [h for h in self.heroes if not h.has_command and not h.controlled()]

    def lookup(self, entity_id: int) -> Optional[Entity]:
        return self.world.get(entity_id)

    # allow to restrict the list of heroes active
    @contextmanager
    def with_allowed_heroes(self, allowed_heroes: List[Hero]):
        original_heroes = copy(self.heroes)
        self.heroes = [h for h in original_heroes if h in allowed_heroes]
        try:
            yield
        finally:
            self.heroes = original_heroes

    # Mana
    def can_afford(self, reserve: int = 0) -> bool:
        return self.my_base.can_afford(self.config.spell_cost, reserve)

    # Bookkeeping
    def neutralize(self, monster: Monster) -> None:
        self.neutralized.add(monster.id)

    def is_neutralized(self, monster: Monster) -> bool:
        return monster.id in self.neutralized

    def wind_covers(self, monster: Monster, hero: Hero) -> bool:
        """A teammate already blows this monster away."""
        return any(
            other.casting_wind
            and other.position.distance_to(monster.position) <= self.config.wind_radius
            for other in self.roster
            if other != hero
        )

    def queue(self, action: Action) -> None:
        if not action.actor.has_command:
            if action.spell:
                # provisional, the next turn inputs bring the real value
                self.my_base.spend(self.config.spell_cost)
            action.actor.issue(action)
        # double commands are sorted out by commit
        self.actions.append(action)

    def commit(self) -> List[Action]:
        """One action per hero in roster order, first queued action wins."""
        committed: Dict[int, Action] = {}
        for action in self.actions:
            hero = action.actor
            if hero.id in committed:
                log.warning(f"discard {action} for hero {hero.id}, already doing {committed[hero.id]}")
                continue
            committed[hero.id] = action
        turn_actions = []
        for hero in self.roster:
            action = committed.get(hero.id)
            if action is None:
                action = WaitAction(hero)
            hero.issue(action)
            turn_actions.append(action)
        return turn_actions

    # New turn logic
    def begin_new_turn(self, read: Callable[[], str] = input) -> None:
        self.turn += 1
        self.read_turn_inputs(read)

    def read_turn_inputs(self, read: Callable[[], str] = input) -> None:
        self.my_base.update_from_inputs(read())
        self.evil_base.update_from_inputs(read())
        entity_count = int(read())
        entity_inputs = [read() for _ in range(entity_count)]
        self.update_entities([Entity.deserialize(line) for line in entity_inputs])

    def update_entities(self, received_entities: List[Entity]) -> None:
        # nothing survives from the previous turn but the bases
        self.entities = list(received_entities)
        self.world = {e.id: e for e in self.entities}
        self.heroes = self.roster
        self.vilains = [e for e in self.entities if isinstance(e, Vilain)]
        self.monsters = [e for e in self.entities if isinstance(e, Monster)]
        self.actions = []
        self.neutralized = set()
        self.primary_target = None
        self.classification = classify(self.monsters, self.my_base, self.evil_base, self.config)

    # misc utils
    def log_state(self, phase_name: str = "") -> None:
        log.debug(f"=== stage: {phase_name} ({self.turn}) ===")
        log.debug(f"our base: {self.my_base}")
        log.debug(f"their base: {self.evil_base}")
        log.debug(f"=== our heroes ({len(self.heroes)}) ===")
        for hero in self.heroes:
            log.debug(str(hero))
        log.debug(f"=== their heroes ({len(self.vilains)}) ===")
        for vilain in self.vilains:
            log.debug(str(vilain))
        sections = [
            ("our enemies", self.classification.threats, self.my_base),
            ("passengers", self.classification.neutral, self.evil_base),
            ("our allies", self.classification.assets, self.evil_base),
        ]
        for title, monsters, base in sections:
            log.debug(f"=== {title} ({len(monsters)}) ===")
            for monster in monsters[:DUMP_LIMIT]:
                log.debug(f"{monster}; ETA={monster.eta(base, self.config)}")
        handled = [self.lookup(monster_id) for monster_id in sorted(self.neutralized)]
        log.debug(f"=== handled this turn ({len(handled)}) ===")
        for monster in handled:
            log.debug(str(monster))
