from dataclasses import dataclass
from typing import Tuple


# Every gameplay constant of the arena. Positions are given for the team
# whose base sits at the top-left corner and mirrored for the other team.
@dataclass(frozen=True)
class Config:
    width: int = 17630
    height: int = 9000

    base_radius: int = 5000  # a monster this close to a base targets it
    inner_circle: int = 2800
    mid_circle: int = 6000  # at the outskirt of the base
    outer_circle: int = 7000

    monster_speed: int = 400
    hero_speed: int = 800

    heroes_per_player: int = 3
    defenders: int = 2

    wind_radius: int = 1280
    spell_range: int = 2200
    spell_cost: int = 10
    hero_view_range: int = 2200
    physical_attack_range: int = 800
    physical_damage: int = 2

    # phase thresholds
    mid_phase_health: int = 17
    mid_phase_mana: int = 200
    end_phase_health: int = 24

    # defenders shield themselves once the opponent started using control
    self_shield_health: int = 20
    madness_threshold: int = 1

    # attacker
    start_position: Tuple[int, int] = (2200, 6800)
    end_position: Tuple[int, int] = (11130, 6800)
    # where the staged attacker waits while it has mana to spare
    attack_position: Tuple[int, int] = (12549, 6800)
    arrival_tolerance: int = 400
    hunting_radius: int = 8500
    summon_health: int = 16
    attacker_mana_reserve: int = 30

    default_post_angles: Tuple[int, int] = (30, 60)

    def mirror(self, x: int, y: int) -> Tuple[int, int]:
        return self.width - x, self.height - y


DEFAULT_CONFIG = Config()
