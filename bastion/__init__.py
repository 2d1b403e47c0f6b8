from .config import DEFAULT_CONFIG, Config
from .gamestate import Gamestate
from .planner import Planner, PlannerState

__all__ = ["Config", "DEFAULT_CONFIG", "Gamestate", "Planner", "PlannerState"]
