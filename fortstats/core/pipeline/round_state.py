"""Mutable context shared by the subscribers of one round."""

from __future__ import annotations

from dataclasses import dataclass, field

from fortstats.config.settings import Settings, get_settings
from fortstats.contracts.common import TeamColor
from fortstats.contracts.output import ScoringActivity
from fortstats.core.domain.event import Event
from fortstats.core.domain.player import Player
from fortstats.core.domain.player_list import PlayerList


@dataclass
class FlagStatus:
    """Possession state of one team's flag.

    Keyed by the flag's colour: a blue player carrying the red flag is
    tracked under RED.
    """

    carrier: Player | None = None
    picked_up_at: int | None = None
    bonus_active: bool = False
    has_been_touched: bool = False

    def clear_carrier(self) -> None:
        self.carrier = None
        self.picked_up_at = None
        self.bonus_active = False


@dataclass
class TeamFlagRoundStats:
    """Scoring state of one capturing team."""

    caps: int = 0
    bonus_caps: int = 0
    flag_hold_bonuses: int = 0
    score: int | None = None
    points_per_cap: float = 10
    points_per_bonus_cap: float = 10
    flag_events: list[Event] = field(default_factory=list)


class RoundState:
    """Created once per round, mutated only by subscribers, read by the stats.

    Holds the team snapshots (who is on a team now, and everyone who ever was),
    the flag and conc state structs the trackers work on, and the settings
    the trackers read their tunables from.
    """

    def __init__(self, players: PlayerList | None = None, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.players = players if players is not None else PlayerList()

        self.current_teams: dict[TeamColor, list[Player]] = {team: [] for team in TeamColor}
        self.all_teams: dict[TeamColor, list[Player]] = {team: [] for team in TeamColor}

        self.flag_status: dict[TeamColor, FlagStatus] = {team: FlagStatus() for team in TeamColor}
        self.team_flag_stats: dict[TeamColor, TeamFlagRoundStats] = {
            team: TeamFlagRoundStats(
                points_per_cap=self.settings.default_points_per_cap,
                points_per_bonus_cap=self.settings.default_points_per_cap,
            )
            for team in TeamColor
        }
        self.saw_team_score_event = False
        # line numbers of pickups that were the first touch of a flag at its base
        self.initial_touch_lines: set[int] = set()

        # steam number -> game time of the most recent conc applied to that player
        self.conc_times: dict[str, int | None] = {}

        self.match_start_event: Event | None = None
        self.match_end_event: Event | None = None
        self.round_end_time_in_game_seconds: int | None = None

        self.scoring_activity: ScoringActivity | None = None
        # final score per team, from the score event or counted from captures
        self.scores: dict[TeamColor, float] = {}

    # Team snapshots

    def team_of(self, player: Player) -> TeamColor | None:
        """Team ``player``'s account is currently on, if any."""
        for team, members in self.current_teams.items():
            if any(player.is_same_account(member) for member in members):
                return team
        return None

    def is_on_team(self, player: Player, team: TeamColor) -> bool:
        return any(player.is_same_player(member) for member in self.current_teams[team])

    def add_to_team(self, player: Player, team: TeamColor) -> None:
        self.remove_from_teams(player)
        self.current_teams[team].append(player)
        if not any(player.is_same_player(member) for member in self.all_teams[team]):
            self.all_teams[team].append(player)

    def remove_from_teams(self, player: Player) -> None:
        for team, members in self.current_teams.items():
            self.current_teams[team] = [m for m in members if not player.is_same_account(m)]

    @property
    def teams(self) -> dict[TeamColor, list[Player]]:
        """Team composition: every player who played on each team this round."""
        return {team: list(members) for team, members in self.all_teams.items() if members}

    @property
    def round_end(self) -> int:
        """Round end in game seconds; 0 until the culler has established it."""
        if self.round_end_time_in_game_seconds is None:
            return 0
        return self.round_end_time_in_game_seconds
