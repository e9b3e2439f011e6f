import pytest

from gloomcrawl.exceptions import ScriptExhausted
from gloomcrawl.rng import RandomSource, ScriptedSource


def test_same_seed_same_stream():
    a = RandomSource("seed-1")
    b = RandomSource("seed-1")
    assert [a.random() for _ in range(20)] == [b.random() for _ in range(20)]


def test_different_seed_changes_stream():
    a = RandomSource(1)
    b = RandomSource(2)
    assert [a.random() for _ in range(5)] != [b.random() for _ in range(5)]


def test_scripted_source_replays_then_raises():
    src = ScriptedSource([0.25, 0.75])
    assert src.remaining == 2
    assert src.random() == 0.25
    assert src.random() == 0.75
    assert src.remaining == 0
    with pytest.raises(ScriptExhausted):
        src.random()


def test_scripted_source_defers_to_fallback():
    fallback = RandomSource(9)
    expected = RandomSource(9).random()
    src = ScriptedSource([0.1], fallback=fallback)
    assert src.random() == 0.1
    assert src.random() == expected


@pytest.mark.parametrize("bad", [1.0, -0.1, 2])
def test_scripted_source_rejects_values_outside_unit_interval(bad):
    with pytest.raises(ValueError):
        ScriptedSource([bad])


def test_derived_draws_use_single_primitive():
    src = ScriptedSource([0.0, 0.999999, 0.0, 0.99, 0.5, 0.49, 0.5])
    assert src.index(3) == 0
    assert src.index(3) == 2
    assert src.randint(1, 20) == 1
    assert src.randint(1, 20) == 20
    assert src.choice(["a", "b", "c", "d"]) == "c"
    assert src.chance(0.5) is True
    assert src.chance(0.5) is False
    assert src.remaining == 0


def test_draw_helpers_reject_empty_inputs():
    src = ScriptedSource([0.5])
    with pytest.raises(ValueError):
        src.index(0)
    with pytest.raises(ValueError):
        src.randint(5, 1)
    with pytest.raises(ValueError):
        src.choice([])
    # nothing consumed by the failed calls
    assert src.remaining == 1
