from __future__ import annotations

import copy
import dataclasses
import json
import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml
from jsonschema import Draft7Validator

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

_DATA_PKG = "gloomcrawl.data"
_SCHEMA_PKG = "gloomcrawl.data.schemas"

IntRange = Tuple[int, int]


@lru_cache(maxsize=1)
def _packaged_defaults() -> Dict[str, Any]:
    with resources.files(_DATA_PKG).joinpath("default_config.yaml").open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@lru_cache(maxsize=1)
def _validator() -> Draft7Validator:
    with resources.files(_SCHEMA_PKG).joinpath("config.schema.json").open("r", encoding="utf-8") as f:
        schema = json.load(f)
    return Draft7Validator(schema)


def _deep_merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for k, v in (overlay or {}).items():
        if isinstance(v, Mapping) and isinstance(base.get(k), Mapping):
            merged[k] = _deep_merge(base[k], v)
        else:
            merged[k] = v
    return merged


def _range(value: Any) -> IntRange:
    lo, hi = (int(v) for v in value)
    return (lo, hi)


@dataclass
class GridConfig:
    width: int = 25
    height: int = 20


@dataclass
class GenerationConfig:
    """Cellular automaton and placement parameters.

    ``density`` is the probability that an interior cell starts alive (a wall).
    ``born``/``survive`` are Moore neighbour counts for one automaton generation.
    """

    density: float = 0.4
    born: Tuple[int, ...] = (5, 6, 7, 8)
    survive: Tuple[int, ...] = (4, 5, 6, 7, 8)
    smooth_steps: int = 1
    relax_factor: float = 0.5
    max_relaxations: int = 4
    exit_attempts: int = 32
    boss_chance: float = 0.99
    loot_chance: float = 0.8
    lock_chance: float = 0.5
    boss_health: IntRange = (1, 20)
    boss_attack: IntRange = (1, 10)


@dataclass
class CombatConfig:
    base_hit_chance: float = 0.5
    hit_per_attack_point: float = 0.1
    hero_damage_scale: float = 5
    effect_chance: float = 0.5
    mitigation: str = "percentage"
    percentage_per_armour: float = 0.05
    deflection_per_armour: float = 0.5


@dataclass
class ProgressionConfig:
    start_health: int = 20
    start_attack_bonus: int = 1
    start_armour_class: int = 1
    start_light_range: int = 2
    health_soft_cap: int = 100
    health_decay: IntRange = (1, 5)
    retain_chance: float = 0.95
    retain_chance_asleep: float = 0.5
    light_decay_chance: float = 0.5
    light_min: int = 2
    light_max: int = 5
    fountain_chance: float = 0.05
    vitality_chance: float = 0.1
    win_floor: int = 50


@dataclass
class Rosters:
    """Symbol tables: what each stored cell value means and which monsters curse what."""

    symbols: Dict[str, str]
    walls: List[str]
    keys: List[str]
    monsters: List[str]
    treasures: Dict[str, str]
    enchantments: Dict[str, str]
    curses: Dict[str, str]
    status_effects: Dict[str, List[str]]
    colors: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Rosters":
        return cls(
            symbols=dict(data["symbols"]),
            walls=list(data["walls"]),
            keys=list(data["keys"]),
            monsters=list(data["monsters"]),
            treasures=dict(data["treasures"]),
            enchantments=dict(data["enchantments"]),
            curses=dict(data["curses"]),
            status_effects={k: list(v) for k, v in data.get("status_effects", {}).items()},
            colors=dict(data.get("colors", {})),
        )

    @classmethod
    def default(cls) -> "Rosters":
        return cls.from_dict(copy.deepcopy(_packaged_defaults()["rosters"]))

    @property
    def border(self) -> str:
        return self.symbols["border"]

    @property
    def hidden(self) -> str:
        return self.symbols["hidden"]

    @property
    def revealed(self) -> str:
        return self.symbols["revealed"]

    @property
    def door(self) -> str:
        return self.symbols["door"]

    @property
    def chest(self) -> str:
        return self.symbols["chest"]

    def enchantment(self, name: str) -> str:
        return self.enchantments[name]

    def curse(self, name: str) -> str:
        return self.curses[name]


@dataclass
class GameConfig:
    """Central game configuration.

    Built from the packaged ``default_config.yaml`` with an optional user YAML file
    deep-merged on top. The merged document is validated against the bundled JSON
    Schema before any dataclass is built.
    """

    grid: GridConfig = field(default_factory=GridConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    combat: CombatConfig = field(default_factory=CombatConfig)
    progression: ProgressionConfig = field(default_factory=ProgressionConfig)
    rosters: Rosters = field(default_factory=Rosters.default)
    seed: Optional[int | str] = None

    @staticmethod
    def validate(data: Mapping[str, Any]) -> None:
        errors = sorted(_validator().iter_errors(data), key=lambda e: list(e.path))
        if errors:
            raise ConfigError("Configuration validation failed", errors)
        progression = data.get("progression", {})
        if "light_min" in progression and "light_max" in progression:
            if progression["light_min"] > progression["light_max"]:
                raise ConfigError("progression.light_min must not exceed progression.light_max")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameConfig":
        cls.validate(data)
        gen = dict(data.get("generation", {}))
        for key in ("born", "survive"):
            if key in gen:
                gen[key] = tuple(int(v) for v in gen[key])
        for key in ("boss_health", "boss_attack"):
            if key in gen:
                gen[key] = _range(gen[key])
        prog = dict(data.get("progression", {}))
        if "health_decay" in prog:
            prog["health_decay"] = _range(prog["health_decay"])
        rosters_raw = _deep_merge(_packaged_defaults()["rosters"], data.get("rosters", {}))
        return cls(
            grid=GridConfig(**data.get("grid", {})),
            generation=GenerationConfig(**gen),
            combat=CombatConfig(**data.get("combat", {})),
            progression=ProgressionConfig(**prog),
            rosters=Rosters.from_dict(copy.deepcopy(rosters_raw)),
            seed=data.get("seed"),
        )

    @classmethod
    def load(cls, user_path: Optional[Path] = None) -> "GameConfig":
        """Load configuration from built-in defaults and an optional user override file."""
        default_data = copy.deepcopy(_packaged_defaults())
        user_data: Dict[str, Any] = {}
        if user_path is not None:
            user_path = Path(user_path)
            if not user_path.exists():
                raise ConfigError(f"Config file not found: {user_path}")
            try:
                with user_path.open("r", encoding="utf-8") as f:
                    user_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"Failed to parse YAML at {user_path}: {exc}") from exc
            if not isinstance(user_data, dict):
                raise ConfigError(f"Config root must be a mapping: {user_path}")
            logger.info("Loaded user config from %s", user_path)
        merged = _deep_merge(default_data, user_data)
        cfg = cls.from_dict(merged)
        logger.debug("Config merged: grid=%s generation=%s", cfg.grid, cfg.generation)
        return cfg

    def apply_env(self, environ: Optional[Mapping[str, str]] = None) -> "GameConfig":
        """Apply ``GLOOMCRAWL_*`` environment overrides in place and return self."""
        env = os.environ if environ is None else environ
        try:
            if "GLOOMCRAWL_WIDTH" in env:
                self.grid.width = int(env["GLOOMCRAWL_WIDTH"])
            if "GLOOMCRAWL_HEIGHT" in env:
                self.grid.height = int(env["GLOOMCRAWL_HEIGHT"])
            if "GLOOMCRAWL_DENSITY" in env:
                self.generation.density = float(env["GLOOMCRAWL_DENSITY"])
        except ValueError as exc:
            raise ConfigError(f"Invalid numeric environment override: {exc}") from exc
        if "GLOOMCRAWL_SEED" in env:
            raw = env["GLOOMCRAWL_SEED"]
            self.seed = int(raw) if raw.lstrip("-").isdigit() else raw
        if "GLOOMCRAWL_MITIGATION" in env:
            self.combat.mitigation = env["GLOOMCRAWL_MITIGATION"].strip().lower()
        # Re-run the schema over the effective values
        self.validate(self.to_dict())
        return self

    def to_dict(self) -> Dict[str, Any]:
        def plain(obj: Any) -> Dict[str, Any]:
            out = dataclasses.asdict(obj)
            return {k: list(v) if isinstance(v, tuple) else v for k, v in out.items()}

        return {
            "grid": plain(self.grid),
            "generation": plain(self.generation),
            "combat": plain(self.combat),
            "progression": plain(self.progression),
            "rosters": plain(self.rosters),
            "seed": self.seed,
        }

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False, allow_unicode=True)
        logger.info("Saved config to %s", path)


__all__ = [
    "CombatConfig",
    "GameConfig",
    "GenerationConfig",
    "GridConfig",
    "ProgressionConfig",
    "Rosters",
]
