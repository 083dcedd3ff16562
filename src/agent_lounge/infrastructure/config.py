"""Configuration dataclasses for the Agent Lounge engine.

Each config is a plain frozen ``dataclass`` with a ``validate()`` method that
raises ``ValueError`` on invalid values.  Point values, thresholds and timer
durations all live here: they are product configuration, not engine
formulas.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from typing import Any

import yaml


# ===================================================================== #
#  Gamification Configuration                                            #
# ===================================================================== #

@dataclass(frozen=True)
class GamificationConfig:
    """XP values awarded by engine operations and the daily activity targets.

    Attributes
    ----------
    xp_per_level:
        XP width of one level; ``level = xp // xp_per_level + 1``.
    level_up_bonus:
        Bonus XP granted in the same call that crosses a level boundary.
    streak_continue_xp:
        XP granted when a qualifying activity extends the streak.
    lead_added_xp:
        XP for adding a lead to the pipeline.
    quote_created_xp:
        XP for creating a quote.
    call_xp_per_minute:
        XP per minute of a logged call.
    call_xp_cap:
        Maximum XP a single logged call can earn.
    daily_calls_target:
        Calls per day the dashboard measures progress against.
    daily_closes_target:
        Closes per day the dashboard measures progress against.
    """

    xp_per_level: int = 1000
    level_up_bonus: int = 100
    streak_continue_xp: int = 25
    lead_added_xp: int = 15
    quote_created_xp: int = 25
    call_xp_per_minute: int = 2
    call_xp_cap: int = 20
    daily_calls_target: int = 100
    daily_closes_target: int = 3

    def validate(self) -> None:
        """Raise ``ValueError`` if any field is out of valid range."""
        if self.xp_per_level < 1:
            raise ValueError(f"xp_per_level must be >= 1, got {self.xp_per_level}")
        for name in (
            "level_up_bonus",
            "streak_continue_xp",
            "lead_added_xp",
            "quote_created_xp",
            "call_xp_per_minute",
            "call_xp_cap",
            "daily_calls_target",
            "daily_closes_target",
        ):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GamificationConfig:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        cfg = cls(**filtered)
        cfg.validate()
        return cfg


# ===================================================================== #
#  Activity Feed Configuration                                           #
# ===================================================================== #

@dataclass(frozen=True)
class FeedConfig:
    """Activity feed sizing and timer durations.

    Attributes
    ----------
    capacity:
        Maximum number of feed items kept (oldest dropped).
    simulation_interval:
        Seconds between simulated feed events.
    highlight_seconds:
        How long a freshly published item keeps its "new" badge.
    simulate:
        If ``True``, a session starts the simulated feed when its feed view
        is opened.
    """

    capacity: int = 20
    simulation_interval: float = 30.0
    highlight_seconds: float = 5.0
    simulate: bool = False

    def validate(self) -> None:
        if self.capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {self.capacity}")
        if self.simulation_interval <= 0:
            raise ValueError(
                f"simulation_interval must be > 0, got {self.simulation_interval}"
            )
        if self.highlight_seconds < 0:
            raise ValueError(
                f"highlight_seconds must be >= 0, got {self.highlight_seconds}"
            )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FeedConfig:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        cfg = cls(**filtered)
        cfg.validate()
        return cfg


# ===================================================================== #
#  Session Configuration                                                 #
# ===================================================================== #

@dataclass(frozen=True)
class SessionConfig:
    """Per-session settings.

    Attributes
    ----------
    quote_validity_days:
        Days until a newly created quote expires.
    event_history:
        Number of domain events the session's event store keeps
        (0 = unlimited).
    seed_demo_data:
        If ``True``, the CLI seeds the session with the demo data set.
    """

    quote_validity_days: int = 30
    event_history: int = 500
    seed_demo_data: bool = True

    def validate(self) -> None:
        if self.quote_validity_days < 1:
            raise ValueError(
                f"quote_validity_days must be >= 1, got {self.quote_validity_days}"
            )
        if self.event_history < 0:
            raise ValueError(
                f"event_history must be >= 0, got {self.event_history}"
            )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionConfig:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        cfg = cls(**filtered)
        cfg.validate()
        return cfg


# ===================================================================== #
#  Unified config loader                                                 #
# ===================================================================== #

_CONFIG_MAP: dict[str, type] = {
    "gamification": GamificationConfig,
    "feed": FeedConfig,
    "session": SessionConfig,
}


def _load_sections(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ValueError("Top-level config must be a mapping")
    result: dict[str, Any] = {}
    for section, data in raw.items():
        cls = _CONFIG_MAP.get(section)
        if cls is not None and isinstance(data, dict):
            result[section] = cls.from_dict(data)
        else:
            result[section] = data
    return result


def load_config_from_json(json_str: str) -> dict[str, Any]:
    """Parse a JSON string into a dict of typed config objects.

    Top-level keys correspond to config section names (``gamification``,
    ``feed``, ``session``).  Unknown sections are preserved as raw values.
    """
    return _load_sections(json.loads(json_str))


def load_config_from_yaml(yaml_str: str) -> dict[str, Any]:
    """YAML counterpart of :func:`load_config_from_json`."""
    return _load_sections(yaml.safe_load(yaml_str) or {})
