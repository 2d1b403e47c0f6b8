from dataclasses import dataclass
from typing import ClassVar

from .geometry import Position


@dataclass
class Action:
    actor: "Hero"

    spell: ClassVar[bool] = False
    # free text appended to the command, no gameplay effect
    message: ClassVar[str] = ""

    def say(self, message: str) -> "Action":
        self.message = message
        return self

    def render(self) -> str:
        if self.message:
            return f"{self.action_message()} {self.message}"
        return self.action_message()

    def action_message(self) -> str:
        raise NotImplementedError


@dataclass
class WaitAction(Action):
    def action_message(self) -> str:
        return "WAIT"


@dataclass
class MoveAction(Action):
    position: Position

    def action_message(self) -> str:
        return f"MOVE {self.position.x} {self.position.y}"


@dataclass
class SpellWindAction(Action):
    position: Position

    spell: ClassVar[bool] = True

    def action_message(self) -> str:
        return f"SPELL WIND {self.position.x} {self.position.y}"


@dataclass
class TargetedSpellAction(Action):
    target: "Entity"

    spell: ClassVar[bool] = True

    def legal(self, spell_range: int) -> bool:
        return self.actor.position.distance_to(self.target.position) <= spell_range


@dataclass
class SpellShieldAction(TargetedSpellAction):
    def action_message(self) -> str:
        return f"SPELL SHIELD {self.target.id}"


@dataclass
class SpellControlAction(TargetedSpellAction):
    position: Position

    def action_message(self) -> str:
        return f"SPELL CONTROL {self.target.id} {self.position.x} {self.position.y}"
