"""Item effects and per-floor entropy for the player.

Each treasure symbol maps (through the roster) to an effect kind. Effect
functions mutate the player and return the stat deltas they applied. A held
luck enchantment boosts the magnitude of the numeric effects.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from ..config import GameConfig
from ..rng import RandomDraws

if TYPE_CHECKING:  # pragma: no cover
    from .player import Player

logger = logging.getLogger(__name__)

LUCK_MULTIPLIER = 2
LUCKY_GOLD_MULTIPLIER = 5


@dataclass
class PowerUpResult:
    item: str
    kind: Optional[str]
    deltas: Dict[str, int] = field(default_factory=dict)
    granted: Optional[str] = None
    cured: Optional[str] = None
    reveal_secrets: bool = False


@dataclass
class PowerDownResult:
    health_before: int
    health_after: int
    light_before: int
    light_after: int
    lost: List[str] = field(default_factory=list)
    reveal_secrets: bool = False


@dataclass
class _Context:
    config: GameConfig
    rng: RandomDraws
    lucky: bool

    def roll(self, scale: int, lucky_multiplier: int = LUCK_MULTIPLIER) -> int:
        return int(self.rng.random() * scale * (lucky_multiplier if self.lucky else 1))


def _attack(player: "Player", ctx: _Context, result: PowerUpResult) -> None:
    gain = ctx.roll(3) + 1
    player.attack_bonus += gain
    result.deltas["attack_bonus"] = gain


def _armour(player: "Player", ctx: _Context, result: PowerUpResult) -> None:
    gain = ctx.roll(2) + 1
    player.armour_class += gain
    result.deltas["armour_class"] = gain


def _gold(player: "Player", ctx: _Context, result: PowerUpResult) -> None:
    gain = ctx.roll(100, LUCKY_GOLD_MULTIPLIER)
    player.gold += gain
    result.deltas["gold"] = gain


def _heal(player: "Player", ctx: _Context, result: PowerUpResult, scale: int) -> None:
    gain = ctx.roll(scale)
    player.health += gain
    result.deltas["health"] = gain


def _feast(player: "Player", ctx: _Context, result: PowerUpResult) -> None:
    _heal(player, ctx, result, 50)


def _cure(player: "Player", ctx: _Context, result: PowerUpResult, curse: str) -> None:
    symbol = ctx.config.rosters.curse(curse)
    if player.cure(symbol):
        result.cured = symbol


def _antidote(player: "Player", ctx: _Context, result: PowerUpResult) -> None:
    _heal(player, ctx, result, 10)
    _cure(player, ctx, result, "poison")


def _tonic(player: "Player", ctx: _Context, result: PowerUpResult) -> None:
    _heal(player, ctx, result, 10)
    _cure(player, ctx, result, "sleep")


def _grant(player: "Player", ctx: _Context, result: PowerUpResult, name: str) -> None:
    symbol = ctx.config.rosters.enchantment(name)
    if player.add_enchantment(symbol):
        result.granted = symbol


def _bow(player: "Player", ctx: _Context, result: PowerUpResult) -> None:
    _grant(player, ctx, result, "one_shot")


def _clover(player: "Player", ctx: _Context, result: PowerUpResult) -> None:
    _grant(player, ctx, result, "luck")


def _ring(player: "Player", ctx: _Context, result: PowerUpResult) -> None:
    _grant(player, ctx, result, "secrets")
    result.reveal_secrets = True


def _scroll(player: "Player", ctx: _Context, result: PowerUpResult) -> None:
    before = player.light_range
    player.light_range = min(ctx.config.progression.light_max, player.light_range + ctx.roll(5))
    result.deltas["light_range"] = player.light_range - before
    _cure(player, ctx, result, "darkness")


EFFECTS: Dict[str, Callable[["Player", _Context, PowerUpResult], None]] = {
    "attack": _attack,
    "armour": _armour,
    "gold": _gold,
    "feast": _feast,
    "antidote": _antidote,
    "tonic": _tonic,
    "bow": _bow,
    "clover": _clover,
    "ring": _ring,
    "scroll": _scroll,
}


def power_up(player: "Player", item: str, config: GameConfig, rng: RandomDraws) -> PowerUpResult:
    kind = config.rosters.treasures.get(item)
    result = PowerUpResult(item=item, kind=kind)
    effect = EFFECTS.get(kind) if kind else None
    if effect is None:
        logger.warning("No effect registered for item %r", item)
        return result
    lucky = config.rosters.enchantment("luck") in player.enchantments
    effect(player, _Context(config, rng, lucky), result)
    logger.debug("Power up %s (%s, lucky=%s): %s", item, kind, lucky, result.deltas)
    return result


def power_down(player: "Player", since_level: int, config: GameConfig, rng: RandomDraws) -> PowerDownResult:
    """Entropy applied when a new floor starts.

    Health above the soft cap drifts back toward it, each of the secrets, luck and
    one-shot enchantments may be lost (more likely while asleep), and light range
    may fade. A ring of secrets that survives reveals the new floor's secrets.
    """
    prog = config.progression
    rosters = config.rosters
    result = PowerDownResult(
        health_before=player.health,
        health_after=player.health,
        light_before=player.light_range,
        light_after=player.light_range,
    )

    if player.health > prog.health_soft_cap:
        player.health = max(prog.health_soft_cap, player.health - rng.randint(*prog.health_decay))

    retain = prog.retain_chance_asleep if rosters.curse("sleep") in player.curses else prog.retain_chance
    if since_level == 0:
        retain = 1.0

    secrets = rosters.enchantment("secrets")
    if rng.random() > retain:
        if player.remove_enchantment(secrets):
            result.lost.append(secrets)
    elif secrets in player.enchantments:
        result.reveal_secrets = True

    for name in ("luck", "one_shot"):
        symbol = rosters.enchantment(name)
        if rng.random() > retain and player.remove_enchantment(symbol):
            result.lost.append(symbol)

    if rng.chance(prog.light_decay_chance):
        player.light_range -= 1
    player.light_range = max(prog.light_min, player.light_range)

    result.health_after = player.health
    result.light_after = player.light_range
    if result.lost:
        logger.info("Lost enchantments on new floor: %s", "".join(result.lost))
    return result
