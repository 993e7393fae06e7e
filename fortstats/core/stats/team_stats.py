"""Per-team aggregation of player rows."""

from collections.abc import Sequence

from fortstats.contracts.common import TeamColor, TeamRole
from fortstats.contracts.output import PlayerOutputStatsRound, TeamStats


def toss_percentage(throws: int, touches: int) -> int:
    """Throws as a whole percentage of flag touches."""
    if touches == 0:
        return 0
    return round(throws / touches * 100)


def _total(rows: Sequence[PlayerOutputStatsRound], group: str, stat: str) -> int:
    return int(sum(getattr(getattr(row, group), stat).value for row in rows))


def build_team_stats(team: TeamColor, rows: Sequence[PlayerOutputStatsRound]) -> TeamStats:
    """Sum a team's player rows; the role decides which objective fields apply.

    Team 1 plays offense and reports caps, touches, toss percentage, carry time
    and concs thrown. Team 2 plays defense and reports airshots.
    """
    role = TeamRole.for_team(team)
    kills = _total(rows, "kills", "kill")
    team_kills = _total(rows, "kills", "teamkill")
    d_enemy = _total(rows, "deaths", "death")
    d_self = _total(rows, "deaths", "by_self")
    d_team = _total(rows, "deaths", "by_team")

    stats = TeamStats(
        team=int(team),
        role=role,
        players=list(rows),
        frags=kills - team_kills - d_self,
        kills=kills,
        team_kills=team_kills,
        conc_kills=_total(rows, "kills", "kill_while_conced"),
        sg_kills=_total(rows, "kills", "sg"),
        deaths=d_enemy + d_self + d_team,
        d_enemy=d_enemy,
        d_self=d_self,
        d_team=d_team,
    )

    if role is TeamRole.OFFENSE:
        touches = _total(rows, "objectives", "flag_touch")
        throws = _total(rows, "objectives", "flag_throw")
        stats.caps = _total(rows, "objectives", "flag_capture")
        stats.touches = touches
        stats.toss_percent = toss_percentage(throws, touches)
        stats.flag_time = _total(rows, "objectives", "flag_time")
        stats.concs = _total(rows, "weapons", "concs_thrown")
    else:
        stats.airshots = _total(rows, "weapons", "airshot")
    return stats
