"""Round and match statistics built from finalized event sequences."""

from fortstats.core.stats.comparison import compare_rounds, compute_awards, match_players
from fortstats.core.stats.output import format_game_time, generate_output_stats
from fortstats.core.stats.player_stats import PlayerEventStats, categorize_events
from fortstats.core.stats.team_stats import build_team_stats

__all__ = [
    "PlayerEventStats",
    "build_team_stats",
    "categorize_events",
    "compare_rounds",
    "compute_awards",
    "format_game_time",
    "generate_output_stats",
    "match_players",
]
