"""Difficulty modes chosen once per session."""

from __future__ import annotations

from dataclasses import dataclass

from cellmaster.exceptions import ConfigurationError


@dataclass(frozen=True)
class GameMode:
    """Difficulty preset.

    Attributes:
        id: Mode key ("rich", "medium", "small", "poor")
        name: Display name
        starting_gold: Gold granted to a new lab
        unlocked_slots: Incubator slots available from the start
        contamination_rate: Session-wide multiplier on every cell's base risk
        event_frequency: Multiplier on each random event's per-check chance
        golden_boost: Multiplier on every new cell's golden-drop chance
    """

    id: str
    name: str
    starting_gold: int
    unlocked_slots: int
    contamination_rate: float
    event_frequency: float
    golden_boost: float = 1.0


GAME_MODES: dict[str, GameMode] = {
    "rich": GameMode("rich", "Well-funded lab", 5000, 7, 1.0, 2.0),
    "medium": GameMode("medium", "Standard lab", 2000, 5, 1.0, 1.0),
    "small": GameMode("small", "Small lab", 800, 4, 1.2, 0.5),
    "poor": GameMode("poor", "Shoestring lab", 300, 2, 1.1, 0.2, golden_boost=1.2),
}

DEFAULT_MODE = "medium"


def get_mode(mode_id: str) -> GameMode:
    """Look up a difficulty mode.

    Raises:
        ConfigurationError: If the mode id is unknown
    """
    try:
        return GAME_MODES[mode_id]
    except KeyError:
        raise ConfigurationError(
            f"Unknown game mode {mode_id!r} (expected one of {sorted(GAME_MODES)})"
        ) from None
