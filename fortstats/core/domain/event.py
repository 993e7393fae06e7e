"""The Event record produced by the line grammar and annotated by the pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from fortstats.contracts.common import BuildingKind, PlayerClass, TeamColor, Weapon
from fortstats.contracts.events import EventType
from fortstats.core.domain.player import Player
from fortstats.core.errors import PipelineInvariantError


@dataclass(frozen=True)
class EventData:
    """Small keyed payload carried by some event kinds."""

    team: TeamColor | None = None
    value: str | None = None
    key: str | None = None
    player_class: PlayerClass | None = None
    building: BuildingKind | None = None
    level: int | None = None

    @property
    def numeric_value(self) -> float | None:
        if self.value is None:
            return None
        try:
            return float(self.value)
        except ValueError:
            return None


@dataclass(eq=False)
class Event:
    """One classified log line.

    Identity is the 1-based line number. The parser fills everything up to
    ``with_weapon``; the pipeline later stamps ``game_time_as_seconds``, the
    actors' classes and ``while_conced``, and the flag tracker may retag a
    capture as a bonus capture.
    """

    event_type: EventType
    line_number: int
    timestamp: datetime
    raw_line: str = ""
    data: EventData | None = None
    player_from: Player | None = None
    player_to: Player | None = None
    with_weapon: Weapon | None = None

    # pipeline annotations
    game_time_as_seconds: int | None = None
    player_from_class: PlayerClass | None = None
    player_to_class: PlayerClass | None = None
    while_conced: bool = False

    @property
    def team(self) -> TeamColor | None:
        return self.data.team if self.data else None

    @property
    def value(self) -> str | None:
        return self.data.value if self.data else None

    @property
    def is_two_actor(self) -> bool:
        return self.player_to is not None

    def require_game_time(self) -> int:
        if self.game_time_as_seconds is None:
            raise PipelineInvariantError(
                "game time not established for event",
                line_number=self.line_number,
                raw_line=self.raw_line,
            )
        return self.game_time_as_seconds

    def __repr__(self) -> str:
        return f"Event({self.event_type.value}, line={self.line_number})"
