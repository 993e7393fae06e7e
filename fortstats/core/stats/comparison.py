"""Cross-round results: offense/defense comparison, awards and the player list."""

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import numpy as np

from fortstats.config.settings import Settings, get_settings
from fortstats.contracts.common import TeamColor, TeamRole
from fortstats.contracts.output import (
    AwardWinner,
    MatchAwards,
    MatchPlayer,
    OutputStats,
    PlayerOutputStatsRound,
    RoundComparison,
    TeamStats,
    TeamStatsDelta,
)

logger = logging.getLogger(__name__)

# (group, stat) pairs feeding the MVP formula, in the order of mvp_weights().
MVP_FEATURES: tuple[tuple[str, str], ...] = (
    ("kills", "kill"),
    ("kills", "sg"),
    ("objectives", "flag_touch"),
    ("objectives", "touches_initial"),
    ("objectives", "flag_bonus_capture"),
    ("kills", "teamkill"),
)


def mvp_weights(settings: Settings) -> np.ndarray:
    return np.array(
        [
            settings.mvp_weight_kill,
            settings.mvp_weight_sg_kill,
            settings.mvp_weight_touch,
            settings.mvp_weight_initial_touch,
            settings.mvp_weight_bonus_capture,
            settings.mvp_weight_team_kill,
        ],
        dtype=float,
    )


def _team(stats: OutputStats, team: TeamColor) -> TeamStats:
    existing = stats.teams.get(int(team))
    if existing is not None:
        return existing
    return TeamStats(team=int(team), role=TeamRole.for_team(team))


def team_delta(minuend: TeamStats, subtrahend: TeamStats, role: TeamRole) -> TeamStatsDelta:
    """Field-wise ``minuend - subtrahend``; None where either side has no value."""
    values: dict[str, int | None] = {}
    for name in TeamStatsDelta.model_fields:
        if name == "role":
            continue
        a = getattr(minuend, name)
        b = getattr(subtrahend, name)
        values[name] = None if a is None or b is None else a - b
    return TeamStatsDelta(role=role, **values)


def compare_rounds(first: OutputStats, second: OutputStats) -> RoundComparison:
    """How the lineup that attacked first did against the one that attacked second.

    Teams swap sides between rounds, so team 1 is always on offense and team 2
    on defense. Offense is first minus second; defense is flipped to second
    minus first so both deltas read from the same lineup's point of view.
    """
    offense = team_delta(
        _team(first, TeamColor.BLUE), _team(second, TeamColor.BLUE), TeamRole.OFFENSE
    )
    defense = team_delta(
        _team(second, TeamColor.RED), _team(first, TeamColor.RED), TeamRole.DEFENSE
    )
    return RoundComparison(offense=offense, defense=defense)


def _player_rows(
    rounds: Sequence[OutputStats],
) -> Iterator[tuple[OutputStats, PlayerOutputStatsRound]]:
    for stats in rounds:
        for team in sorted(stats.teams):
            for row in stats.teams[team].players:
                yield stats, row


@dataclass
class _AccountTotals:
    name: str
    steam_id: str
    features: np.ndarray
    kills: int = 0
    flag_time: int = 0


def _account_totals(rounds: Sequence[OutputStats]) -> dict[str, _AccountTotals]:
    totals: dict[str, _AccountTotals] = {}
    for _, row in _player_rows(rounds):
        entry = totals.get(row.steam_id)
        if entry is None:
            entry = totals[row.steam_id] = _AccountTotals(
                name=row.name,
                steam_id=row.steam_id,
                features=np.zeros(len(MVP_FEATURES)),
            )
        entry.name = row.name
        entry.features = entry.features + np.array(
            [getattr(getattr(row, group), stat).value for group, stat in MVP_FEATURES], dtype=float
        )
        entry.kills += int(row.kills.kill.value)
        entry.flag_time += int(row.objectives.flag_time.value)
    return totals


def _best(
    candidates: list[tuple[_AccountTotals, float]], require_positive: bool
) -> AwardWinner | None:
    winner: tuple[_AccountTotals, float] | None = None
    for candidate in candidates:
        # strictly greater, so the first account seen keeps a tie
        if winner is None or candidate[1] > winner[1]:
            winner = candidate
    if winner is None or (require_positive and winner[1] <= 0):
        return None
    account, value = winner
    return AwardWinner(name=account.name, steam_id=account.steam_id, value=value)


def compute_awards(rounds: Sequence[OutputStats], settings: Settings | None = None) -> MatchAwards:
    """MVP, top fragger and top flag runner across all rounds of a match.

    The MVP score is the dot product of each account's summed counters with the
    configured weights. Top fragger and flag runner are only awarded for a
    positive total.
    """
    settings = settings or get_settings()
    weights = mvp_weights(settings)
    accounts = list(_account_totals(rounds).values())

    mvp_scores = [(account, float(np.dot(account.features, weights))) for account in accounts]
    awards = MatchAwards(
        mvp=_best(mvp_scores, require_positive=False),
        top_fragger=_best([(a, float(a.kills)) for a in accounts], require_positive=True),
        top_flag_runner=_best([(a, float(a.flag_time)) for a in accounts], require_positive=True),
    )
    if awards.mvp is not None:
        logger.info("MVP: %s with %.1f points", awards.mvp.name, awards.mvp.value)
    return awards


def match_players(rounds: Sequence[OutputStats]) -> list[MatchPlayer]:
    """Every account in the match, on the team of the first round it played."""
    players: dict[str, MatchPlayer] = {}
    for stats, row in _player_rows(rounds):
        existing = players.get(row.steam_id)
        if existing is None:
            players[row.steam_id] = MatchPlayer(
                name=row.name,
                steam_id=row.steam_id,
                team=row.team,
                rounds=[stats.round_number],
            )
        elif stats.round_number not in existing.rounds:
            existing.rounds = [*existing.rounds, stats.round_number]
    return sorted(players.values(), key=lambda p: (p.team, p.name.casefold()))
