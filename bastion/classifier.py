from dataclasses import dataclass, field
from typing import List

from .config import Config
from .entities import Base, Monster


@dataclass
class Classification:
    threats: List[Monster] = field(default_factory=list)  # reaching our base
    assets: List[Monster] = field(default_factory=list)  # reaching their base
    neutral: List[Monster] = field(default_factory=list)  # reaching nobody

    def __len__(self) -> int:
        return len(self.threats) + len(self.assets) + len(self.neutral)

    @property
    def strongest_threat_health(self) -> int:
        return max((m.health for m in self.threats), default=0)


def classify(monsters: List[Monster], my_base: Base, evil_base: Base, config: Config) -> Classification:
    classification = Classification()
    for monster in monsters:
        if monster.reachable(my_base, config):
            classification.threats.append(monster)
        elif monster.reachable(evil_base, config):
            classification.assets.append(monster)
        else:
            classification.neutral.append(monster)

    # sorted() is stable: equal risks keep the snapshot order
    classification.threats.sort(key=lambda m: m.risk(my_base, config), reverse=True)
    classification.assets.sort(key=lambda m: m.risk(evil_base, config), reverse=True)
    classification.neutral.sort(key=lambda m: m.risk(evil_base, config), reverse=True)
    return classification
