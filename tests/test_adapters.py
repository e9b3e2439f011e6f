import pytest

from gloomcrawl.adapters import FALLBACK_COLOR, InputMapper, MessageAdapter, RenderAdapter
from gloomcrawl.combat import CombatResult, CombatState, ExchangeOutcome, StrikeSummary
from gloomcrawl.engine import EventBus, EventKind, GameEvent, GameSession, Intent
from gloomcrawl.fov import CellChange
from gloomcrawl.map import CellKind
from gloomcrawl.player import Player
from gloomcrawl.rng import RandomSource, ScriptedSource


class RecordingSink:
    def __init__(self):
        self.messages = []

    def message(self, channel, text):
        self.messages.append((channel, text))


class RecordingRenderer:
    def __init__(self):
        self.calls = []

    def draw(self, x, y, symbol, color):
        self.calls.append((x, y, symbol, color))

    def clear(self):
        self.calls.append("clear")


def test_stats_are_formatted_per_channel():
    adapter = MessageAdapter(RecordingSink())
    adapter.handle(
        GameEvent(
            EventKind.STATS_CHANGED,
            {
                "health": 17,
                "armour_class": 2,
                "attack_bonus": 3,
                "gold": 40,
                "experience": 5,
                "enchantments": ["🍀", "🏹"],
                "curses": ["☠️"],
            },
        )
    )
    assert adapter.last["HP"] == "HP: 17"
    assert adapter.last["AC"] == "AC: 2"
    assert adapter.last["Attack"] == "Att: 3"
    assert adapter.last["Gold"] == "$$: 40"
    assert adapter.last["Experience"] == "Exp: 5"
    assert adapter.last["enchantments"] == "🍀🏹"
    assert adapter.last["curses"] == "☠️"


def test_coordinates_and_lock_status():
    sink = RecordingSink()
    adapter = MessageAdapter(sink)
    adapter.handle(GameEvent(EventKind.PLAYER_MOVED, {"position": (3, 7)}))
    adapter.handle(GameEvent(EventKind.LOCK_STATUS, {"status": "locked"}))
    assert sink.messages == [("coordinates", "(3, 7)"), ("lockStatus", "locked")]


def _outcome(monster):
    return ExchangeOutcome(
        hero=StrikeSummary(hit=True, damage=4, fatal=False, raw=4),
        monster=monster,
        hero_health=12,
        monster_health=3,
        curses=[],
        inflicted=[],
        state=CombatState.RESOLVING,
        result=CombatResult.ONGOING,
    )


def test_combat_lines():
    adapter = MessageAdapter(RecordingSink())
    adapter.handle(GameEvent(EventKind.COMBAT_EXCHANGE, {"outcome": _outcome(StrikeSummary(hit=False))}))
    assert adapter.last["heroCombat"] == "H: Hit: 4"
    assert adapter.last["monsterCombat"] == "M: Dodge"
    adapter.handle(GameEvent(EventKind.COMBAT_EXCHANGE, {"outcome": _outcome(None)}))
    assert adapter.last["monsterCombat"] == ""


def test_game_over_text():
    adapter = MessageAdapter(RecordingSink())
    adapter.handle(GameEvent(EventKind.GAME_OVER, {"won": False, "experience": 6}))
    assert adapter.last["gameOver"] == "You died, level: 6"
    adapter.handle(GameEvent(EventKind.GAME_OVER, {"won": True, "experience": 50}))
    assert adapter.last["gameOver"] == "You win, level: 50"


def test_unknown_channel_rejected():
    with pytest.raises(ValueError):
        MessageAdapter(RecordingSink()).send("mana", "MP: 3")


def test_message_adapter_follows_a_session(config, make_level):
    config.progression.win_floor = 1
    sink = RecordingSink()
    session = GameSession(config, ScriptedSource([0.5]))
    MessageAdapter(sink).attach(session.bus)
    session.level = make_level(["+++++", "+ D +", "+++++"], exit=(2, 1))
    session.player.init((1, 1))
    session.handle(Intent.MOVE_RIGHT)
    assert ("coordinates", "(2, 1)") in sink.messages
    assert sink.messages[-1] == ("gameOver", "You win, level: 1")


def test_render_adapter_draws_level_with_fallback_colour(config, make_level):
    renderer = RecordingRenderer()
    adapter = RenderAdapter(renderer, config.rosters.colors)
    level = make_level(["+++", "+.+", "+++"], symbols={})
    level.grid.set(1, 1, config.rosters.door)
    adapter.draw_level(level)

    assert renderer.calls[0] == "clear"
    assert len(renderer.calls) == 1 + 9
    assert (0, 0, "+", "black") in renderer.calls
    assert (1, 1, config.rosters.door, FALLBACK_COLOR) in renderer.calls


def test_render_adapter_changes_and_player(config):
    renderer = RecordingRenderer()
    adapter = RenderAdapter.for_symbols(renderer, config.rosters.colors, config.rosters.symbols)
    adapter.draw_changes([CellChange(2, 3, " ", CellKind.REVEALED)])
    adapter.draw_changes([CellChange(4, 4, "💰", CellKind.ITEM)], items=True)
    player = Player(position=(5, 6))
    adapter.draw_player(player)
    player.alive = False
    adapter.draw_player(player)
    assert renderer.calls == [
        (2, 3, " ", "white"),
        (4, 4, "💰", "black"),
        (5, 6, "🧙", "black"),
        (5, 6, "☠️", "black"),
    ]


def test_render_adapter_attached_to_session(config):
    renderer = RecordingRenderer()
    session = GameSession(config, RandomSource(8))
    RenderAdapter.for_symbols(renderer, config.rosters.colors, config.rosters.symbols).attach(session.bus)
    session.start()
    level = session.level
    x, y = session.position

    assert renderer.calls[0] == "clear"
    floor = renderer.calls[1 : 1 + level.width * level.height]
    assert len(floor) == level.width * level.height
    assert (0, 0, config.rosters.border, "black") in floor
    assert (x, y, config.rosters.revealed, "white") in renderer.calls
    assert renderer.calls[-1] == (x, y, "🧙", "black")


def test_render_adapter_follows_floors_and_moves(config, make_level):
    renderer = RecordingRenderer()
    bus = EventBus()
    RenderAdapter.for_symbols(renderer, config.rosters.colors, config.rosters.symbols).attach(bus)
    first_floor = make_level(["++++", "+  +", "++++"])
    second_floor = make_level(["+++", "+ +", "+++"])

    bus.publish(GameEvent(EventKind.LEVEL_GENERATED, {"level": first_floor}))
    bus.publish(GameEvent(EventKind.PLAYER_MOVED, {"position": (1, 1), "alive": True}))
    bus.publish(GameEvent(EventKind.PLAYER_MOVED, {"position": (2, 1), "alive": True}))
    assert renderer.calls[-3:] == [
        (1, 1, "🧙", "black"),
        (1, 1, " ", "white"),
        (2, 1, "🧙", "black"),
    ]

    renderer.calls.clear()
    bus.publish(GameEvent(EventKind.LEVEL_GENERATED, {"level": second_floor}))
    assert renderer.calls[0] == "clear"
    assert len(renderer.calls) == 1 + 9
    bus.publish(GameEvent(EventKind.PLAYER_MOVED, {"position": (1, 1), "alive": True}))
    bus.publish(GameEvent(EventKind.GAME_OVER, {"won": False, "experience": 1}))
    assert renderer.calls[-2:] == [(1, 1, "🧙", "black"), (1, 1, "☠️", "black")]


def test_default_key_bindings():
    mapper = InputMapper.default()
    assert mapper.translate_key("w") == Intent.MOVE_UP
    assert mapper.translate_key(87) == Intent.MOVE_UP
    assert mapper.translate_key(38) == Intent.MOVE_UP
    assert mapper.translate_key("ArrowUp") == Intent.MOVE_UP
    assert mapper.translate_key(68) == Intent.MOVE_RIGHT
    assert mapper.translate_key(39) == Intent.MOVE_RIGHT
    assert mapper.translate_key("s") == Intent.MOVE_DOWN
    assert mapper.translate_key(40) == Intent.MOVE_DOWN
    assert mapper.translate_key(65) == Intent.MOVE_LEFT
    assert mapper.translate_key("LEFT") == Intent.MOVE_LEFT
    assert mapper.translate_key(8) == Intent.REGENERATE
    assert mapper.translate_key("Backspace") == Intent.REGENERATE
    assert mapper.translate_key(88) == Intent.DEBUG_GRANT
    assert mapper.translate_key(32) is None
    assert mapper.translate_key("") is None


def test_rebinding_and_unbinding():
    mapper = InputMapper.default()
    mapper.bind("K", Intent.MOVE_UP)
    assert mapper.translate_key("k") == Intent.MOVE_UP
    mapper.unbind(88)
    assert mapper.translate_key(88) is None
    mapper.set_alias(1001, "W")
    assert mapper.translate_key(1001) == Intent.MOVE_UP
