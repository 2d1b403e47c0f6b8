import logging
from enum import IntEnum
from typing import List

from .classifier import Classification
from .config import Config
from .entities import Base, Vilain, discover_in_range

log = logging.getLogger(__name__)


class Phase(IntEnum):
    OPENING = 0
    MID = 1
    ENDING = 2


def detect_all_in(opponents: List[Vilain], my_base: Base, config: Config) -> bool:
    # the whole opposing roster camps around our base
    near = discover_in_range(opponents, my_base.position, config.mid_circle)
    return len(near) >= config.heroes_per_player


def next_phase(
    phase: Phase,
    classification: Classification,
    my_base: Base,
    all_in: bool,
    config: Config,
) -> Phase:
    """Phase for this turn; never lower than the current one."""
    strongest = classification.strongest_threat_health
    candidate = Phase.OPENING
    if phase >= Phase.MID and strongest >= config.end_phase_health:
        candidate = Phase.ENDING
    elif all_in or (strongest >= config.mid_phase_health and my_base.mana >= config.mid_phase_mana):
        candidate = Phase.MID
    new_phase = max(phase, candidate)
    if new_phase != phase:
        log.info(f"phase {phase.name} -> {new_phase.name} (threat hp={strongest}, mana={my_base.mana}, all in={all_in})")
    return new_phase
