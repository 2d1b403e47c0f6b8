import logging
import sys
from dataclasses import replace
from typing import Callable, TextIO

from .config import DEFAULT_CONFIG, Config
from .gamestate import Gamestate
from .planner import Planner
from .utils import configure_logging

log = logging.getLogger(__name__)

Reader = Callable[[], str]
Writer = Callable[[str], None]


def line_reader(stream: TextIO) -> Reader:
    def read() -> str:
        line = stream.readline()
        if not line:
            raise EOFError
        return line.rstrip("\n")

    return read


def emit(line: str) -> None:
    print(line, flush=True)


def init_gamestate(read: Reader = input, config: Config = DEFAULT_CONFIG) -> Gamestate:
    base_x, base_y = [int(i) for i in read().split()]
    heroes_per_player = int(read())
    if heroes_per_player != config.heroes_per_player:
        log.warning(f"{heroes_per_player} heroes per player, expected {config.heroes_per_player}")
        config = replace(config, heroes_per_player=heroes_per_player)
    return Gamestate.from_corner(base_x, base_y, config)


# game loop
def run(read: Reader = input, write: Writer = emit, config: Config = DEFAULT_CONFIG) -> Gamestate:
    gamestate = init_gamestate(read, config)
    planner = Planner(gamestate.config)
    while True:
        try:
            gamestate.begin_new_turn(read)
        except EOFError:
            log.info(f"end of match after {gamestate.turn - 1} turns")
            return gamestate
        turn_actions = planner.play_turn(gamestate)
        gamestate.log_state(planner.state.phase.name)
        for action in turn_actions:
            log.debug(f"hero {action.actor.id}: {action.render()}")
            write(action.render())


def main() -> None:
    configure_logging()
    run(line_reader(sys.stdin))


if __name__ == "__main__":
    main()
