"""Shared test fixtures and helpers."""

import pytest

from bastion.config import DEFAULT_CONFIG
from bastion.entities import EVIL_BASE, MY_BASE, Base, Hero, Monster, Vilain
from bastion.gamestate import Gamestate
from bastion.geometry import Position
from bastion.planner import Planner

LEFT_CORNER = (0, 0)
RIGHT_CORNER = (17630, 9000)


# --- Helper functions ---


def make_monster(
    id=100,
    x=8000,
    y=4500,
    vx=0,
    vy=0,
    health=10,
    shield_life=0,
    is_controlled=0,
    near_base=0,
    threat_for=0,
):
    return Monster(
        id,
        x,
        y,
        shield_life,
        is_controlled,
        health,
        vx=vx,
        vy=vy,
        near_base=near_base,
        threat_for=threat_for,
    )


def make_hero(id, x, y, shield_life=0, is_controlled=0):
    return Hero(id, x, y, shield_life, is_controlled)


def make_vilain(id, x, y, shield_life=0, is_controlled=0):
    return Vilain(id, x, y, shield_life, is_controlled)


def make_heroes(positions=((1000, 4000), (4000, 1000), (9000, 4500))):
    return [make_hero(i, x, y) for i, (x, y) in enumerate(positions)]


def make_gamestate(entities, mana=0, corner=LEFT_CORNER, config=DEFAULT_CONFIG):
    gamestate = Gamestate.from_corner(*corner, config=config)
    gamestate.my_base.mana = mana
    gamestate.turn = 1
    gamestate.update_entities(entities)
    return gamestate


def render(actions):
    return [action.render() for action in actions]


# --- Fixtures ---


@pytest.fixture
def config():
    return DEFAULT_CONFIG


@pytest.fixture
def my_base():
    return Base(Position(0, 0), threat_code=MY_BASE)


@pytest.fixture
def evil_base():
    return Base(Position(17630, 9000), threat_code=EVIL_BASE)


@pytest.fixture
def planner():
    return Planner(DEFAULT_CONFIG)
