import logging

import pytest

from gloomcrawl.engine import EventBus, EventKind, GameEvent


def test_subscribe_publish_unsubscribe():
    bus = EventBus()
    got = []

    def on_moved(evt):
        got.append(evt.payload["position"])

    bus.subscribe(EventKind.PLAYER_MOVED, on_moved)
    bus.publish(GameEvent(EventKind.PLAYER_MOVED, {"position": (1, 2)}))
    bus.publish(GameEvent(EventKind.BLOCKED, {"target": (0, 0)}))
    bus.unsubscribe(EventKind.PLAYER_MOVED, on_moved)
    bus.publish(GameEvent(EventKind.PLAYER_MOVED, {"position": (9, 9)}))
    assert got == [(1, 2)]


def test_failing_subscriber_is_logged_and_others_still_run(caplog):
    caplog.set_level(logging.ERROR, logger="gloomcrawl.engine.events")
    bus = EventBus()
    got = []

    def broken(evt):
        raise RuntimeError("boom")

    bus.subscribe(EventKind.GAME_OVER, broken)
    bus.subscribe(EventKind.GAME_OVER, got.append)
    bus.publish(GameEvent(EventKind.GAME_OVER, {"won": False, "experience": 0}))
    assert len(got) == 1
    assert any("Unhandled exception" in r.getMessage() for r in caplog.records)


def test_non_callable_rejected():
    bus = EventBus()
    with pytest.raises(TypeError):
        bus.subscribe(EventKind.GAME_OVER, "nope")
    with pytest.raises(TypeError):
        bus.subscribe_all(None)
