"""Player identity and round-scoped player state."""

from __future__ import annotations

from dataclasses import dataclass

from fortstats.contracts.common import PlayerClass, TeamColor
from fortstats.core.domain.time_interval import TimeInterval, TimeIntervalWithContext


@dataclass
class PlayerRoundStats:
    """Counters accumulated by the flag movement tracker."""

    flag_carries: int = 0
    flag_initial_touches: int = 0
    flag_throws: int = 0
    flag_carry_time_in_seconds: int = 0


class Player:
    """A player as seen on one team during one round.

    Identity is (steam number, team): the same account on a different team is
    a different Player, so per-team stat attribution stays unambiguous.
    """

    def __init__(
        self,
        steam_id: str,
        name: str,
        player_id: int,
        team: TeamColor | None = None,
    ) -> None:
        self._steam_num = steam_id.removeprefix("STEAM_")
        self._names: list[str] = [name]
        self._player_ids: list[int] = [player_id]
        self.team = team
        self.team_intervals: list[TimeInterval] = []
        self.class_intervals: list[TimeIntervalWithContext[PlayerClass]] = []
        self.round_stats = PlayerRoundStats()

    def add_name(self, name: str) -> None:
        if name != self._names[-1]:
            self._names.append(name)

    def add_player_id(self, player_id: int) -> None:
        if player_id not in self._player_ids:
            self._player_ids.append(player_id)

    @property
    def name(self) -> str:
        return self._names[-1]

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._names)

    @property
    def steam_id(self) -> str:
        return "STEAM_" + self._steam_num

    @property
    def steam_num(self) -> str:
        return self._steam_num

    @property
    def player_id(self) -> int:
        return self._player_ids[-1]

    @property
    def player_ids(self) -> tuple[int, ...]:
        return tuple(self._player_ids)

    @property
    def key(self) -> tuple[str, TeamColor | None]:
        return (self._steam_num, self.team)

    def is_same_player(self, other: Player | None) -> bool:
        """Same account on the same team."""
        return other is not None and self.key == other.key

    def is_same_account(self, other: Player | None) -> bool:
        """Same account regardless of team."""
        return other is not None and self._steam_num == other._steam_num

    # Team membership

    def record_join_team_time(self, game_time: int) -> None:
        if self.team_intervals and self.team_intervals[-1].is_open:
            # duplicate join events have been observed in real logs
            return
        self.team_intervals.append(TimeInterval(game_time))

    def record_leave_team_time(self, game_time: int) -> None:
        if self.team_intervals and self.team_intervals[-1].is_open:
            self.team_intervals[-1].set_end_time(game_time)

    # Class occupancy (measured in line numbers; see ClassTracker)

    def record_class_start(self, player_class: PlayerClass, position: int) -> None:
        self.record_class_end(position - 1)
        self.class_intervals.append(TimeIntervalWithContext(position, None, player_class))

    def record_class_end(self, position: int) -> None:
        if self.class_intervals and self.class_intervals[-1].is_open:
            current = self.class_intervals[-1]
            current.set_end_time(max(position, current.start))

    @property
    def current_class(self) -> PlayerClass | None:
        """Class of the most recently opened interval."""
        if not self.class_intervals:
            return None
        return self.class_intervals[-1].context

    def __repr__(self) -> str:
        team = self.team.label if self.team else "-"
        return f"Player({self.name!r}, {self.steam_id}, {team})"

    def __str__(self) -> str:
        return self.name
