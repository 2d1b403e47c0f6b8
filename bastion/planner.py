import logging
import math
from dataclasses import dataclass, field
from typing import Generator, List, Optional, Tuple

from .actions import (
    Action,
    MoveAction,
    SpellControlAction,
    SpellShieldAction,
    SpellWindAction,
)
from .config import DEFAULT_CONFIG, Config
from .coverage import best_coverage
from .entities import Hero, Monster, discover_in_range
from .gamestate import Gamestate
from .geometry import Position, angle_between, polar_to_cartesian
from .phase import Phase, detect_all_in, next_phase
from .utils import timeit

log = logging.getLogger(__name__)


# What survives from one turn to the next, everything else is rebuilt
# from the snapshot.
@dataclass
class PlannerState:
    phase: Phase = Phase.OPENING
    # only moves forward, when the attacker reaches a staging point
    attacker_step: int = 0
    # turns x defenders spent under the opponent control
    madness: int = 0
    all_in: bool = False
    cruise_high: bool = False


# Various helpers shared by tactics
def other_defender(index: int, count: int) -> int:
    if index < 0 or index >= count:
        log.warning(f"Wrong hero index: {index}")
        return 0
    return count - 1 - index


def can_eliminate(gamestate: Gamestate, monster: Monster) -> bool:
    # it dies from physical attacks before reaching our base
    config = gamestate.config
    return monster.health < monster.eta(gamestate.my_base, config) * config.physical_damage


def can_use_wind(gamestate: Gamestate, hero: Hero, monster: Monster) -> bool:
    return (
        hero.distance_to(monster) <= gamestate.config.wind_radius
        and gamestate.can_afford()
        and not monster.shielded()
    )


def ring_position(base_position: Position, radius: int, angle: int) -> Position:
    # angles are measured from the base toward the arena center
    mirror = base_position.x != 0
    return polar_to_cartesian(base_position, radius, angle, mirror=mirror)


def engage_position(gamestate: Gamestate, hero: Hero, monster: Monster) -> Position:
    """Where to stand to hit the monster and as many neighbours as possible."""
    reach = gamestate.config.physical_attack_range
    cluster = [
        m
        for m in discover_in_range(gamestate.monsters, monster.position, 2 * reach)
        if not gamestate.is_neutralized(m) or m == monster
    ]
    if len(cluster) >= 2:
        coverage = best_coverage(
            [m.position for m in cluster], reach, hero.position, must_cover=monster.position
        )
        if coverage is not None and coverage.count >= 2:
            return coverage.position
    return monster.position


def engage(gamestate: Gamestate, hero: Hero, monster: Monster) -> Action:
    config = gamestate.config
    if can_use_wind(gamestate, hero, monster) and not gamestate.wind_covers(monster, hero):
        opponents_near_our_base = sorted(
            discover_in_range(gamestate.vilains, gamestate.my_base.position, config.mid_circle),
            key=lambda v: v.distance_to(gamestate.my_base),
        )
        shall_use_wind = bool(opponents_near_our_base) and (
            opponents_near_our_base[0].distance_to(monster) <= config.hero_view_range
        )
        if shall_use_wind or not can_eliminate(gamestate, monster):
            # no need to handle this monster for a while
            gamestate.neutralize(monster)
            return SpellWindAction(hero, gamestate.evil_base.position).say("Súrë")

    if can_eliminate(gamestate, monster):
        gamestate.neutralize(monster)
    return MoveAction(hero, engage_position(gamestate, hero, monster)).say("Focus!")


# Produce actions for the heroes still free this turn.
# It is acceptable to produce partial or no actions if objectives are not
# reachable nor relevant.
class Tactic:
    def evaluate(self, gamestate: Gamestate, state: PlannerState) -> Generator[Action, None, None]:
        raise NotImplementedError


class ProtectionTactic(Tactic):
    def evaluate(self, gamestate: Gamestate, state: PlannerState) -> Generator[Action, None, None]:
        config = gamestate.config
        defenders = gamestate.defenders
        state.madness += sum(1 for hero in defenders if hero.controlled())

        strongest = max((m.health for m in gamestate.monsters), default=0)
        if state.madness > config.madness_threshold and strongest >= config.self_shield_health:
            for hero in gamestate.available_heroes:
                if not hero.shielded() and gamestate.can_afford():
                    yield SpellShieldAction(hero, hero).say("Aegis")

        for index, hero in enumerate(defenders):
            if not hero.controlled():
                continue
            teammate = defenders[other_defender(index, len(defenders))]
            if teammate == hero or teammate not in gamestate.available_heroes:
                continue
            if teammate.distance_to(hero) > config.hero_view_range:
                continue
            shield = SpellShieldAction(teammate, hero)
            if not hero.shielded() and shield.legal(config.spell_range) and gamestate.can_afford():
                yield shield.say("Hold on")
            else:
                yield MoveAction(teammate, hero.position).say("Coming")


# Send the most dangerous monster inside our base back before it is too
# late for a physical interception
class PullBackTactic(Tactic):
    def evaluate(self, gamestate: Gamestate, state: PlannerState) -> Generator[Action, None, None]:
        config = gamestate.config
        threat = next(
            (
                m
                for m in gamestate.classification.threats
                if gamestate.my_base.within_range(m, config.base_radius)
                and not gamestate.is_neutralized(m)
            ),
            None,
        )
        if threat is None or threat.shielded() or not gamestate.can_afford():
            return
        threat_eta = threat.eta(gamestate.my_base, config)
        for hero in sorted(gamestate.available_heroes, key=lambda h: h.distance_to(threat)):
            spell = SpellControlAction(hero, threat, hero.position)
            if not spell.legal(config.spell_range):
                continue
            turns_to_reach = math.ceil(hero.distance_to(threat) / config.hero_speed)
            if turns_to_reach >= threat_eta - 1:
                gamestate.neutralize(threat)
                yield spell.say("sinomë")
                return


class PrimaryEngagementTactic(Tactic):
    def evaluate(self, gamestate: Gamestate, state: PlannerState) -> Generator[Action, None, None]:
        threat = next(
            (m for m in gamestate.classification.threats if not gamestate.is_neutralized(m)),
            None,
        )
        heroes = gamestate.available_heroes
        if threat is None or not heroes:
            return
        hero = min(heroes, key=lambda h: h.distance_to(threat))
        gamestate.primary_target = threat
        yield engage(gamestate, hero, threat)


class SecondaryEngagementTactic(Tactic):
    def evaluate(self, gamestate: Gamestate, state: PlannerState) -> Generator[Action, None, None]:
        for hero in gamestate.available_heroes:
            target = self.pick_target(gamestate, hero)
            if target is not None:
                yield engage(gamestate, hero, target)

    def pick_target(self, gamestate: Gamestate, hero: Hero) -> Optional[Monster]:
        config = gamestate.config
        my_base = gamestate.my_base
        primary = gamestate.primary_target
        if primary is not None and not gamestate.is_neutralized(primary):
            return primary

        threat = next(
            (
                m
                for m in gamestate.classification.threats
                if my_base.within_range(m, config.base_radius) and not gamestate.is_neutralized(m)
            ),
            None,
        )
        if threat is not None:
            return threat

        wilderness = [
            m
            for m in gamestate.monsters
            if my_base.within_range(m, config.outer_circle) and not gamestate.is_neutralized(m)
        ]
        # nearest first, the riskiest one on equal distance
        wilderness.sort(key=lambda m: (int(m.distance_to(hero)), -m.risk(my_base, config)))
        return wilderness[0] if wilderness else None


class FallbackTactic(Tactic):
    def evaluate(self, gamestate: Gamestate, state: PlannerState) -> Generator[Action, None, None]:
        radius, angles = self.default_posts(gamestate)
        for index, hero in enumerate(gamestate.defenders):
            if hero not in gamestate.available_heroes:
                continue
            position = ring_position(
                gamestate.my_base.position, radius, angles[index % len(angles)]
            )
            yield MoveAction(hero, position).say("Glories")

    def default_posts(self, gamestate: Gamestate) -> Tuple[int, List[int]]:
        config = gamestate.config
        my_base = gamestate.my_base
        radius = config.mid_circle
        angles = list(config.default_post_angles)
        opponents_near_our_base = sorted(
            discover_in_range(gamestate.vilains, my_base.position, config.outer_circle),
            key=lambda v: v.distance_to(my_base),
        )
        if opponents_near_our_base:
            # face the intruders
            nearest = opponents_near_our_base[0]
            radius = min(config.mid_circle, int(nearest.distance_to(my_base)))
            angles[0] = angle_between(my_base.position, nearest.position)
            angles[1] = angles[0] + 30
        if len(opponents_near_our_base) > 1:
            angles[1] = angle_between(my_base.position, opponents_near_our_base[1].position)
        return radius, angles


@dataclass(frozen=True)
class AttackerProfile:
    redirect_health: int
    shield_window: int
    wind_victims: int
    patrol_radius: int
    patrol_angles: Tuple[int, int] = (15, 75)


def attacker_profile(phase: Phase, config: Config) -> AttackerProfile:
    if phase == Phase.ENDING:
        return AttackerProfile(
            redirect_health=14, shield_window=16, wind_victims=2, patrol_radius=config.mid_circle
        )
    return AttackerProfile(
        redirect_health=18, shield_window=13, wind_victims=3, patrol_radius=config.outer_circle
    )


# The attacker farms during the opening then walks to the enemy base to
# send them monsters.
class AttackerTactic(Tactic):
    def evaluate(self, gamestate: Gamestate, state: PlannerState) -> Generator[Action, None, None]:
        hero = gamestate.attacker
        if hero is None or hero not in gamestate.available_heroes:
            return
        config = gamestate.config

        if state.phase == Phase.OPENING:
            yield self.go_hunting(gamestate, state, hero)
            return

        evil_base = gamestate.evil_base
        if state.phase == Phase.ENDING and state.all_in:
            forward = ring_position(evil_base.position, config.inner_circle, 45)
            yield MoveAction(hero, forward).say("Charge")
            return

        staging_points = [
            gamestate.my_base.position_for_base(Position(*config.start_position), config),
            gamestate.my_base.position_for_base(Position(*config.end_position), config),
        ]
        while state.attacker_step < len(staging_points):
            staging_point = staging_points[state.attacker_step]
            if hero.position.distance_to(staging_point) < config.arrival_tolerance:
                state.attacker_step += 1
                log.info(f"attacker reached staging point {state.attacker_step}")
                continue
            yield self.rush(gamestate, hero, staging_point, summon=state.attacker_step > 0)
            return

        yield self.harass(gamestate, state, hero, attacker_profile(state.phase, config))

    def go_hunting(self, gamestate: Gamestate, state: PlannerState, hero: Hero) -> Action:
        config = gamestate.config
        monsters_nearby = hero.discover(gamestate.monsters, config)
        if not monsters_nearby:
            return self.cruise(gamestate, state, hero, config.hunting_radius, (30, 60)).say("Gank")
        nearest = min(monsters_nearby, key=lambda m: m.distance_to(hero))
        return MoveAction(hero, engage_position(gamestate, hero, nearest)).say("Faralë")

    def rush(self, gamestate: Gamestate, hero: Hero, position: Position, summon: bool) -> Action:
        config = gamestate.config
        evil_base = gamestate.evil_base
        if summon and gamestate.can_afford(reserve=config.attacker_mana_reserve):
            for monster in hero.discover(gamestate.monsters, config):
                if (
                    not monster.reachable(evil_base, config)
                    and not monster.shielded()
                    and monster.health >= config.summon_health
                ):
                    return SpellControlAction(hero, monster, evil_base.position).say("Summon")
        return MoveAction(hero, position).say("Alco")

    def harass(
        self, gamestate: Gamestate, state: PlannerState, hero: Hero, profile: AttackerProfile
    ) -> Action:
        config = gamestate.config
        evil_base = gamestate.evil_base
        monsters_nearby = [
            m
            for m in hero.discover(gamestate.monsters, config)
            if m.distance_to(hero) <= config.spell_range
        ]
        if monsters_nearby and gamestate.can_afford(reserve=config.attacker_mana_reserve):
            victims = [
                m
                for m in hero.wind_victims(monsters_nearby, config)
                if evil_base.within_range(m, config.outer_circle)
            ]
            if len(victims) >= profile.wind_victims:
                return SpellWindAction(hero, evil_base.position).say("Súrë")

            # sort from the highest risk to the lowest
            ranked = sorted(monsters_nearby, key=lambda m: m.risk(evil_base, config), reverse=True)
            for monster in ranked:
                if (
                    not monster.reachable(evil_base, config)
                    and not monster.shielded()
                    and monster.health >= profile.redirect_health
                ):
                    return SpellControlAction(hero, monster, evil_base.position).say("sinomë")
            for monster in ranked:
                monster_eta = monster.eta(evil_base, config)
                if not monster.shielded() and 0 <= monster_eta <= profile.shield_window:
                    return SpellShieldAction(hero, monster).say("May force be with you")

        if gamestate.can_afford(reserve=config.attacker_mana_reserve):
            hold = gamestate.my_base.position_for_base(Position(*config.attack_position), config)
            return MoveAction(hero, hold).say("sanomë")
        return self.cruise(
            gamestate, state, hero, profile.patrol_radius, profile.patrol_angles
        ).say("Heru")

    def cruise(
        self,
        gamestate: Gamestate,
        state: PlannerState,
        hero: Hero,
        radius: int,
        angles: Tuple[int, int],
    ) -> Action:
        """Patrol back and forth between two bearings around the enemy base."""
        low, high = angles
        evil_position = gamestate.evil_base.position
        degree = angle_between(evil_position, hero.position)
        if degree < low + 1:
            state.cruise_high = True
        elif degree > high - 1:
            state.cruise_high = False
        angle = high if state.cruise_high else low
        return MoveAction(hero, ring_position(evil_position, radius, angle))


# Eval each tactic sequentially until all heroes are staffed.
# Once an hero has been assigned, it can't be overridden by a downstream tactic.
@dataclass
class PriorityStrategy:
    tactics: List[Tactic] = field(default_factory=list)

    def apply(self, gamestate: Gamestate, state: PlannerState):
        for tactic in self.tactics:
            for action in tactic.evaluate(gamestate, state):
                gamestate.queue(action)


class Planner:
    def __init__(self, config: Config = DEFAULT_CONFIG):
        self.config = config
        self.state = PlannerState()
        self.defender_strategy = PriorityStrategy(
            [
                ProtectionTactic(),
                PullBackTactic(),
                PrimaryEngagementTactic(),
                SecondaryEngagementTactic(),
                FallbackTactic(),
            ]
        )
        self.attacker_strategy = PriorityStrategy([AttackerTactic()])

    def update_phase(self, gamestate: Gamestate) -> None:
        state = self.state
        state.all_in = state.all_in or detect_all_in(gamestate.vilains, gamestate.my_base, self.config)
        state.phase = next_phase(
            state.phase, gamestate.classification, gamestate.my_base, state.all_in, self.config
        )

    @timeit
    def play_turn(self, gamestate: Gamestate) -> List[Action]:
        self.update_phase(gamestate)
        with gamestate.with_allowed_heroes(gamestate.defenders):
            self.defender_strategy.apply(gamestate, self.state)
        attacker = gamestate.attacker
        if attacker is not None:
            with gamestate.with_allowed_heroes([attacker]):
                self.attacker_strategy.apply(gamestate, self.state)
        return gamestate.commit()
