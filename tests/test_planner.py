import logging

import pytest

from bastion.actions import SpellControlAction, SpellShieldAction, SpellWindAction
from bastion.phase import Phase
from bastion.planner import Planner, other_defender, ring_position

from tests.conftest import make_gamestate, make_heroes, make_monster, make_vilain, render

MY_CORNER = (0, 0)


def play(planner, entities, mana=0):
    gamestate = make_gamestate(entities, mana=mana)
    actions = planner.play_turn(gamestate)
    return render(actions), gamestate


def post(angle, radius=6000):
    position = ring_position(make_gamestate([]).my_base.position, radius, angle)
    return f"MOVE {position.x} {position.y} Glories"


def cruise(radius, angle, message):
    position = ring_position(make_gamestate([]).evil_base.position, radius, angle)
    return f"MOVE {position.x} {position.y} {message}"


def incoming(id=100, x=3000, y=3000, health=30, **kw):
    return make_monster(id=id, x=x, y=y, health=health, near_base=1, threat_for=1, **kw)


# --- turn output ---


@pytest.mark.parametrize(
    "monsters",
    [
        [],
        [incoming()],
        [
            incoming(id=100, x=2000, y=2000),
            incoming(id=101, x=1000, y=2500),
            make_monster(id=102, x=5000, y=3000, vx=400),
            make_monster(id=103, x=9500, y=4500),
            make_monster(id=104, x=9600, y=4700),
        ],
    ],
)
@pytest.mark.parametrize("mana", [0, 10, 100])
def test_one_command_per_hero(planner, monsters, mana):
    lines, gamestate = play(planner, make_heroes() + monsters, mana=mana)
    assert len(lines) == 3
    queued = [action.actor.id for action in gamestate.actions]
    assert len(queued) == len(set(queued))
    assert [hero.command for hero in gamestate.roster] == gamestate.commit()
    assert gamestate.my_base.mana >= 0


def test_mana_is_never_overspent(planner):
    heroes = make_heroes([(1500, 1500), (2500, 1800), (9000, 4500)])
    monsters = [incoming(id=100, x=2000, y=2000, health=40), incoming(id=101, x=1000, y=2500, health=40)]
    lines, gamestate = play(planner, heroes + monsters, mana=10)
    spells = [a for a in gamestate.actions if a.spell]
    assert len(spells) == 1
    assert gamestate.my_base.mana == 0
    # the riskiest threat is blown away, nothing left for the next one
    assert lines[0] == "SPELL WIND 17630 9000 Súrë"
    assert lines[1] == "MOVE 2000 2000 Focus!"


def test_output_is_deterministic():
    def scenario():
        monsters = [incoming(id=100, x=2000, y=2000), make_monster(id=103, x=9500, y=4500)]
        return play(Planner(), make_heroes() + monsters, mana=40)[0]

    assert scenario() == scenario()


# --- defenders ---


def test_both_defenders_focus_the_threat_without_mana(planner):
    heroes = make_heroes([(2500, 2500), (6000, 1000), (9000, 4500)])
    lines, gamestate = play(planner, heroes + [incoming()])
    assert lines[:2] == ["MOVE 3000 3000 Focus!", "MOVE 3000 3000 Focus!"]
    assert gamestate.primary_target.id == 100


def test_defender_winds_the_threat_away(planner):
    heroes = make_heroes([(2500, 2500), (6000, 1000), (9000, 4500)])
    lines, gamestate = play(planner, heroes + [incoming()], mana=100)
    assert lines[:2] == ["SPELL WIND 17630 9000 Súrë", post(60)]
    assert gamestate.my_base.mana == 90
    assert gamestate.is_neutralized(gamestate.lookup(100))


@pytest.mark.parametrize("with_opponent, expected", [(False, "MOVE 3000 3000 Focus!"), (True, "SPELL WIND 17630 9000 Súrë")])
def test_opponent_nearby_justifies_the_wind(planner, with_opponent, expected):
    heroes = make_heroes([(2500, 2500), (6000, 1000), (9000, 4500)])
    entities = heroes + [incoming(health=2)]
    if with_opponent:
        entities.append(make_vilain(10, 3500, 3500))
    lines, _ = play(planner, entities, mana=100)
    assert lines[0] == expected


def test_pull_back_the_closest_threat(planner):
    heroes = make_heroes([(2500, 2500), (6000, 1000), (9000, 4500)])
    lines, gamestate = play(planner, heroes + [incoming(x=1000, y=1000)], mana=20)
    assert lines[:2] == ["SPELL CONTROL 100 2500 2500 sinomë", post(60)]
    assert gamestate.my_base.mana == 10


def test_no_pull_back_when_there_is_time(planner):
    heroes = make_heroes([(2500, 2500), (6000, 1000), (9000, 4500)])
    _, gamestate = play(planner, heroes + [incoming()], mana=100)
    assert not any(isinstance(a, SpellControlAction) for a in gamestate.actions)


def test_teammate_shields_a_controlled_defender(planner):
    heroes = make_heroes([(2000, 2000), (3000, 2000), (9000, 4500)])
    heroes[0].is_controlled = 1
    lines, _ = play(planner, heroes, mana=50)
    assert lines[:2] == ["WAIT", "SPELL SHIELD 0 Hold on"]
    assert planner.state.madness == 1


def test_teammate_joins_a_controlled_defender_without_mana(planner):
    heroes = make_heroes([(2000, 2000), (3000, 2000), (9000, 4500)])
    heroes[0].is_controlled = 1
    lines, _ = play(planner, heroes, mana=0)
    assert lines[:2] == ["WAIT", "MOVE 2000 2000 Coming"]


def test_defenders_shield_themselves_once_mad(planner):
    planner.state.madness = 2
    lines, gamestate = play(planner, make_heroes() + [make_monster(id=100, x=12000, y=8000, health=20)], mana=50)
    assert lines[:2] == ["SPELL SHIELD 0 Aegis", "SPELL SHIELD 1 Aegis"]
    assert gamestate.my_base.mana == 30
    assert planner.state.madness == 2


def test_madness_never_decreases(planner):
    heroes = make_heroes([(2000, 2000), (3000, 2000), (9000, 4500)])
    heroes[0].is_controlled = 1
    play(planner, heroes)
    play(planner, make_heroes())
    assert planner.state.madness == 1


def test_defenders_go_back_to_their_posts(planner):
    lines, _ = play(planner, make_heroes())
    assert lines[:2] == [post(30), post(60)]


def test_defenders_face_intruders(planner):
    lines, _ = play(planner, make_heroes() + [make_vilain(10, 3000, 0)])
    assert lines[0] == "MOVE 3000 0 Glories"
    assert lines[1] == post(30, radius=3000)


def test_secondary_defender_farms_the_nearest_monster(planner):
    heroes = make_heroes([(4800, 3000), (4000, 4200), (9000, 4500)])
    monsters = [
        make_monster(id=100, x=5000, y=3000, vx=400),
        make_monster(id=101, x=4000, y=4500, vx=400),
    ]
    lines, gamestate = play(planner, heroes + monsters)
    assert gamestate.classification.threats == []
    assert lines[:2] == ["MOVE 5000 3000 Focus!", "MOVE 4000 4500 Focus!"]


def test_engagement_covers_a_cluster(planner):
    heroes = make_heroes([(2000, 1700), (6000, 1000), (9000, 4500)])
    monsters = [
        incoming(id=100, x=3000, y=1000),
        make_monster(id=101, x=3000, y=2400, health=30),
    ]
    lines, _ = play(planner, heroes + monsters)
    assert lines[:2] == ["MOVE 2613 1700 Focus!", "MOVE 3387 1700 Focus!"]


def test_other_defender(caplog):
    assert other_defender(0, 2) == 1
    assert other_defender(1, 2) == 0
    assert other_defender(0, 1) == 0
    with caplog.at_level(logging.WARNING, logger="bastion"):
        assert other_defender(5, 2) == 0
    assert "Wrong hero index" in caplog.text


def test_lone_controlled_defender_waits(planner):
    lonely = make_heroes([(2000, 2000)])
    lonely[0].is_controlled = 1
    lines, _ = play(planner, lonely + [incoming()], mana=50)
    assert lines == ["WAIT"]
    assert planner.state.madness == 1


# --- phases ---


def test_all_in_is_sticky(planner):
    camping = [make_vilain(10 + i, 2000 + i * 300, 2000) for i in range(3)]
    play(planner, make_heroes() + camping)
    assert planner.state.all_in
    assert planner.state.phase == Phase.MID
    play(planner, make_heroes())
    assert planner.state.all_in
    assert planner.state.phase == Phase.MID


# --- attacker ---


def test_attacker_hunts_the_nearest_monster(planner):
    lines, _ = play(planner, make_heroes() + [make_monster(id=100, x=10000, y=4500)])
    assert lines[2] == "MOVE 10000 4500 Faralë"


def test_attacker_patrols_when_nothing_is_around(planner):
    lines, _ = play(planner, make_heroes())
    assert lines[2] == cruise(8500, 60, "Gank")
    assert planner.state.cruise_high


def test_attacker_rushes_to_the_staging_point(planner):
    planner.state.phase = Phase.MID
    lines, _ = play(planner, make_heroes())
    assert lines[2] == "MOVE 2200 6800 Alco"
    assert planner.state.attacker_step == 0


def test_attacker_step_advances_on_arrival(planner):
    planner.state.phase = Phase.MID
    lines, _ = play(planner, make_heroes([(1000, 4000), (4000, 1000), (2300, 6800)]))
    assert planner.state.attacker_step == 1
    assert lines[2] == "MOVE 11130 6800 Alco"
    # never goes back
    play(planner, make_heroes([(1000, 4000), (4000, 1000), (2300, 6800)]))
    assert planner.state.attacker_step == 1


def test_attacker_summons_on_the_way(planner):
    planner.state.phase = Phase.MID
    planner.state.attacker_step = 1
    heroes = make_heroes([(1000, 4000), (4000, 1000), (8000, 6000)])
    monster = make_monster(id=100, x=8500, y=6000, vx=-400, health=20)
    lines, gamestate = play(planner, heroes + [monster], mana=100)
    assert lines[2] == "SPELL CONTROL 100 17630 9000 Summon"
    assert gamestate.my_base.mana == 90


HOLD = "MOVE 12549 6800 sanomë"


def staged(planner, phase=Phase.MID):
    planner.state.phase = phase
    planner.state.attacker_step = 2
    return make_heroes([(1000, 4000), (4000, 1000), (13000, 6500)])


def test_attacker_winds_a_cluster_to_their_base(planner):
    heroes = staged(planner)
    monsters = [
        make_monster(id=100, x=13200, y=6500),
        make_monster(id=101, x=13000, y=6800),
        make_monster(id=102, x=12800, y=6400),
    ]
    lines, _ = play(planner, heroes + monsters, mana=100)
    assert lines[2] == "SPELL WIND 17630 9000 Súrë"


def test_attacker_redirects_a_strong_monster(planner):
    heroes = staged(planner)
    lines, _ = play(planner, heroes + [make_monster(id=100, x=12500, y=6000, vx=-400, health=20)], mana=100)
    assert lines[2] == "SPELL CONTROL 100 17630 9000 sinomë"


def test_attacker_shields_an_incoming_asset(planner):
    heroes = staged(planner)
    lines, gamestate = play(planner, heroes + [make_monster(id=100, x=14000, y=7000)], mana=100)
    assert lines[2] == "SPELL SHIELD 100 May force be with you"
    assert isinstance(gamestate.roster[2].command, SpellShieldAction)


@pytest.mark.parametrize("phase", [Phase.MID, Phase.ENDING])
def test_ending_loosens_the_shield_window(planner, phase):
    heroes = staged(planner, phase)
    monster = make_monster(id=100, x=12000, y=6000, vx=300, vy=150)
    lines, gamestate = play(planner, heroes + [monster], mana=100)
    assert monster.eta(gamestate.evil_base, gamestate.config) == 16
    if phase == Phase.ENDING:
        assert lines[2] == "SPELL SHIELD 100 May force be with you"
    else:
        assert lines[2] == HOLD


@pytest.mark.parametrize("phase, expected", [(Phase.MID, HOLD), (Phase.ENDING, "SPELL CONTROL 100 17630 9000 sinomë")])
def test_ending_redirects_weaker_monsters(planner, phase, expected):
    heroes = staged(planner, phase)
    monster = make_monster(id=100, x=12500, y=6000, vx=-400, health=14)
    lines, _ = play(planner, heroes + [monster], mana=100)
    assert lines[2] == expected


@pytest.mark.parametrize("phase, expected", [(Phase.MID, HOLD), (Phase.ENDING, "SPELL WIND 17630 9000 Súrë")])
def test_ending_winds_smaller_clusters(planner, phase, expected):
    heroes = staged(planner, phase)
    monsters = [make_monster(id=100, x=13200, y=6500), make_monster(id=101, x=13000, y=6800)]
    lines, _ = play(planner, heroes + monsters, mana=100)
    assert lines[2] == expected


def test_attacker_holds_between_spells(planner):
    heroes = staged(planner)
    lines, _ = play(planner, heroes, mana=30)
    assert lines[2] == HOLD


def test_hold_point_is_mirrored_for_the_other_corner(planner):
    planner.state.phase = Phase.MID
    planner.state.attacker_step = 2
    heroes = make_heroes([(16000, 5000), (14000, 8000), (4000, 2500)])
    gamestate = make_gamestate(heroes, mana=30, corner=(17630, 9000))
    lines = render(planner.play_turn(gamestate))
    assert lines[2] == "MOVE 5081 2200 sanomë"


def test_attacker_keeps_mana_for_the_defense(planner):
    heroes = staged(planner)
    lines, gamestate = play(planner, heroes + [make_monster(id=100, x=14000, y=7000)], mana=20)
    assert lines[2] == cruise(7000, 15, "Heru")
    assert not any(isinstance(a, SpellWindAction) for a in gamestate.actions)


def test_attacker_charges_when_all_in(planner):
    planner.state.phase = Phase.ENDING
    planner.state.all_in = True
    lines, _ = play(planner, make_heroes())
    assert lines[2] == cruise(2800, 45, "Charge")


def test_controlled_attacker_waits(planner):
    heroes = make_heroes()
    heroes[2].is_controlled = 1
    lines, _ = play(planner, heroes)
    assert lines[2] == "WAIT"


def test_missing_attacker(planner):
    lines, _ = play(planner, make_heroes()[:2])
    assert lines == [post(30), post(60)]
