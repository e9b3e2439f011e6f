import pytest

from gloomcrawl.combat import (
    CombatResolver,
    CombatResult,
    CombatState,
    DeflectionMitigation,
    Monster,
)
from gloomcrawl.exceptions import ContractViolation
from gloomcrawl.map import BossCell
from gloomcrawl.player import Player
from gloomcrawl.rng import ScriptedSource


@pytest.fixture
def hero(config):
    return Player.from_config(config.progression)


def test_one_shot_kill_ends_combat_without_retaliation(config, hero):
    hero.attack_bonus = 5
    monster = Monster("🧌", health=1, attack_bonus=3)
    rng = ScriptedSource([0.5, 0.5])
    combat = CombatResolver(hero, monster, config, rng)
    assert combat.state == CombatState.IDLE

    outcome = combat.exchange()
    assert outcome.hero.hit and outcome.hero.fatal
    assert outcome.hero_message == "Hit: 12 (*)"
    assert (outcome.hero.raw, outcome.hero.damage) == (12, 1)
    assert outcome.monster is None
    assert outcome.monster_message == ""
    assert combat.state == CombatState.CONCLUDED
    assert combat.result == CombatResult.MONSTER_DEFEATED
    assert combat.result.value == "monster defeated"
    assert monster.health == 0
    assert hero.health == 20
    assert rng.remaining == 0


def test_miss_then_monster_hits(config, hero):
    monster = Monster("🧌", health=10, attack_bonus=10)
    rng = ScriptedSource([0.1, 0.0, 0.99])
    combat = CombatResolver(hero, monster, config, rng)
    outcome = combat.exchange()

    assert outcome.hero_message == "Missed"
    assert outcome.monster.raw == 9
    assert outcome.monster_message == "Dam: 9"
    assert hero.health == 11
    assert outcome.hero_health == 11
    assert outcome.monster_health == 10
    assert combat.state == CombatState.RESOLVING
    assert combat.result == CombatResult.ONGOING
    assert not combat.concluded


def test_monster_dodges(config, hero):
    monster = Monster("🧌", health=10, attack_bonus=1)
    # hero misses; monster threshold 0.4 is not beaten by 0.4
    combat = CombatResolver(hero, monster, config, ScriptedSource([0.1, 0.4]))
    outcome = combat.exchange()
    assert outcome.monster_message == "Dodge"
    assert hero.health == 20


def test_player_killed_while_asleep(config, hero):
    hero.health = 5
    hero.add_curse(config.rosters.curse("sleep"))
    monster = Monster("🦇", health=10, attack_bonus=10)
    rng = ScriptedSource([0.1, 0.0, 0.99, 0.0])
    combat = CombatResolver(hero, monster, config, rng)

    outcome = combat.exchange()
    assert hero.health == 0
    assert hero.alive is False
    assert outcome.monster_message == "Dam: 5 (X)"
    assert outcome.inflicted == []
    assert combat.result == CombatResult.PLAYER_DEFEATED
    assert combat.concluded
    assert rng.remaining == 0


def test_status_effect_inflicted_on_hit(config, hero):
    poison = config.rosters.curse("poison")
    monster = Monster("🐍", health=10, attack_bonus=2)
    combat = CombatResolver(hero, monster, config, ScriptedSource([0.1, 0.0, 0.5, 0.2]))
    outcome = combat.exchange()
    assert outcome.inflicted == [poison]
    assert poison in hero.curses
    assert outcome.curses == [poison]
    assert hero.health == 19


def test_status_effect_roll_can_fail(config, hero):
    monster = Monster("🐍", health=10, attack_bonus=2)
    combat = CombatResolver(hero, monster, config, ScriptedSource([0.1, 0.0, 0.5, 0.7]))
    outcome = combat.exchange()
    assert outcome.inflicted == []
    assert hero.curses == set()


def test_one_shot_enchantment_kills_outright(config, hero):
    hero.add_enchantment(config.rosters.enchantment("one_shot"))
    monster = Monster("🐉", health=15, attack_bonus=9)
    combat = CombatResolver(hero, monster, config, ScriptedSource([0.9, 0.0]))
    outcome = combat.exchange()
    assert outcome.hero.raw == 0
    assert outcome.hero.damage == 15
    assert outcome.hero_message == "Hit: 0 (*)"
    assert combat.result == CombatResult.MONSTER_DEFEATED


def test_multi_round_fight(config, hero):
    hero.attack_bonus = 2
    monster = Monster("🧌", health=6, attack_bonus=1)
    # round 1: hit for 5, monster dodges; round 2: hit for 5 kills
    rng = ScriptedSource([0.9, 0.5, 0.1, 0.9, 0.5])
    combat = CombatResolver(hero, monster, config, rng)
    first = combat.exchange()
    assert first.hero_message == "Hit: 5"
    assert first.monster_message == "Dodge"
    second = combat.exchange()
    assert second.hero_message == "Hit: 5 (*)"
    assert second.hero.damage == 1
    assert combat.result == CombatResult.MONSTER_DEFEATED
    assert len(combat.history) == 2


def test_deflection_strategy_is_injectable(config, hero):
    hero.armour_class = 4
    monster = Monster("🧌", health=10, attack_bonus=10)
    combat = CombatResolver(hero, monster, config, ScriptedSource([0.1, 0.0, 0.99]), mitigation=DeflectionMitigation(0.5))
    outcome = combat.exchange()
    assert outcome.monster.damage == 7
    assert hero.health == 13


def test_exchange_after_conclusion(config, hero, strict):
    hero.attack_bonus = 5
    combat = CombatResolver(hero, Monster("🧌", 1, 1), config, ScriptedSource([0.5, 0.5]))
    combat.exchange()
    with pytest.raises(ContractViolation):
        combat.exchange()


def test_exchange_after_conclusion_is_a_no_op_when_lenient(config, hero, lenient):
    hero.attack_bonus = 5
    rng = ScriptedSource([0.5, 0.5])
    combat = CombatResolver(hero, Monster("🧌", 1, 1), config, rng)
    combat.exchange()
    outcome = combat.exchange()
    assert outcome.state == CombatState.CONCLUDED
    assert outcome.result == CombatResult.MONSTER_DEFEATED
    assert len(combat.history) == 1


def test_non_positive_monster_health_is_rejected(config, hero, strict):
    combat = CombatResolver(hero, Monster("🧌", 0, 1), config, ScriptedSource([]))
    with pytest.raises(ContractViolation):
        combat.exchange()


def test_monster_from_boss():
    m = Monster.from_boss(BossCell((4, 2), "🐍", 12, 3))
    assert (m.type, m.health, m.attack_bonus, m.position) == ("🐍", 12, 3, (4, 2))
