"""
Output statistics contracts.
These are the immutable results handed to renderers and persistence layers.
"""

from datetime import datetime
from typing import Any

from pydantic import Field

from .common import BaseContract, FlagMovementType, TeamRole


def _stat(title: str, description: str | None = None) -> Any:
    return Field(default_factory=lambda: StatDetails(title=title, description=description))


class EventDescriptor(BaseContract):
    """A compact description of one event contributing to a stat."""

    event_type: str
    line_number: int = Field(..., ge=1)
    game_time_as_seconds: int | None = None
    game_time: str | None = Field(None, description="m:ss relative to match start")
    player_from: str | None = None
    player_from_class: str | None = None
    player_to: str | None = None
    player_to_class: str | None = None
    weapon: str | None = None
    value: str | None = None
    while_conced: bool = False


class FacetSummary(BaseContract):
    """One row of a per-opponent or per-weapon breakdown."""

    key: str
    value: int | float
    percentage: float = Field(..., ge=0, le=100, description="Share of the stat total")


class StatDetails(BaseContract):
    """A single named counter with its supporting events."""

    title: str
    value: int | float = Field(0)
    description: str | None = None
    details: list[EventDescriptor] = Field(default_factory=list)
    facets: dict[str, list[FacetSummary]] | None = Field(
        None, description="Breakdowns keyed by facet name ('player', 'weapon')"
    )


class KillStats(BaseContract):
    kill: StatDetails = _stat("Kills", "Enemies killed")
    teamkill: StatDetails = _stat("Team Kills", "Teammates killed")
    kill_while_conced: StatDetails = _stat("Conc Kills", "Kills while concussed")
    sg: StatDetails = _stat("Sentry Kills", "Enemy sentry guns destroyed")
    disp: StatDetails = _stat("Dispenser Kills", "Enemy dispensers destroyed")
    tele: StatDetails = _stat("Teleporter Kills", "Enemy teleporters destroyed")
    team_sg: StatDetails = _stat("Team Sentry Kills", "Friendly sentry guns destroyed")
    team_disp: StatDetails = _stat("Team Dispenser Kills", "Friendly dispensers destroyed")


class DeathStats(BaseContract):
    death: StatDetails = _stat("Deaths", "Killed by an enemy")
    by_team: StatDetails = _stat("Team Deaths", "Killed by a teammate")
    by_self: StatDetails = _stat("Suicides")
    while_conced: StatDetails = _stat("Conc Deaths", "Killed by a concussed enemy")
    by_sg: StatDetails = _stat("Sentry Deaths", "Killed by a sentry gun")


class ObjectiveStats(BaseContract):
    flag_touch: StatDetails = _stat("Flag Touches")
    touches_initial: StatDetails = _stat("Initial Touches", "First touch of an untouched flag")
    flag_capture: StatDetails = _stat("Flag Captures")
    flag_bonus_capture: StatDetails = _stat("Bonus Captures")
    flag_throw: StatDetails = _stat("Flag Throws")
    toss_percent: StatDetails = _stat("Toss %", "Throws as a share of carries")
    flag_time: StatDetails = _stat("Flag Time", "Seconds carrying the flag")
    button: StatDetails = _stat("Security Buttons")
    det_entrance: StatDetails = _stat("Det Entrances")
    arena_capture: StatDetails = _stat("Point Captures")


class WeaponStats(BaseContract):
    conc_jump: StatDetails = _stat("Conc Jumps", "Concussed self")
    concs_thrown: StatDetails = _stat("Concs", "Concussed an enemy")
    conced: StatDetails = _stat("Conced", "Concussed by an enemy")
    airshot: StatDetails = _stat("Airshots")
    airshoted: StatDetails = _stat("Airshotted")
    caltrop: StatDetails = _stat("Caltrops")
    caltropped: StatDetails = _stat("Caltropped")
    tranq: StatDetails = _stat("Tranqs")
    tranqed: StatDetails = _stat("Tranqed")
    pills: StatDetails = _stat("Hallucinations")
    pilled: StatDetails = _stat("Hallucinated")
    infect: StatDetails = _stat("Infections")
    infected: StatDetails = _stat("Infected")
    pass_infect: StatDetails = _stat("Passed Infections")
    cure: StatDetails = _stat("Cures")
    heal: StatDetails = _stat("Heals")
    healed: StatDetails = _stat("Healed")
    reveal_spy: StatDetails = _stat("Spies Revealed")
    douse: StatDetails = _stat("Fires Doused")


class BuildableStats(BaseContract):
    build_sentry: StatDetails = _stat("Sentries Built")
    build_disp: StatDetails = _stat("Dispensers Built")
    build_tele: StatDetails = _stat("Teleporters Built")
    upgrade_sentry: StatDetails = _stat("Sentry Upgrades")
    upgrade_other: StatDetails = _stat("Other Sentry Upgrades", "Upgraded a teammate's sentry")
    repair: StatDetails = _stat("Repairs")
    detonate: StatDetails = _stat("Detonations", "Own buildings detonated")
    dismantle: StatDetails = _stat("Dismantles")
    sentry_lost: StatDetails = _stat("Sentries Lost")
    disp_lost: StatDetails = _stat("Dispensers Lost")
    detpack_set: StatDetails = _stat("Detpacks Set")
    detpack_explode: StatDetails = _stat("Detpacks Exploded")
    detpack_disarm: StatDetails = _stat("Detpacks Disarmed")


class DamageStats(BaseContract):
    dealt: StatDetails = _stat("Damage Dealt")
    taken: StatDetails = _stat("Damage Taken")
    team_dealt: StatDetails = _stat("Team Damage", "Damage dealt to teammates")


class RoleSummary(BaseContract):
    """Time spent as one class, clamped to the match window."""

    player_class: str
    seconds: int = Field(..., ge=0)


class PlayerOutputStatsRound(BaseContract):
    """Per-player stats for one round, on one team."""

    name: str
    names: list[str] = Field(default_factory=list)
    steam_id: str
    id: int
    team: int = Field(..., ge=1, le=5)
    roles: list[RoleSummary] = Field(default_factory=list, description="Most played first")
    round_number: int = Field(..., ge=1, le=2)
    kills: KillStats = Field(default_factory=KillStats)
    deaths: DeathStats = Field(default_factory=DeathStats)
    objectives: ObjectiveStats = Field(default_factory=ObjectiveStats)
    weapons: WeaponStats = Field(default_factory=WeaponStats)
    buildables: BuildableStats = Field(default_factory=BuildableStats)
    damage: DamageStats = Field(default_factory=DamageStats)


class TeamStats(BaseContract):
    """Aggregate of a team's player rows for one round."""

    team: int = Field(..., ge=1, le=5)
    role: TeamRole
    players: list[PlayerOutputStatsRound] = Field(default_factory=list)
    frags: int = Field(0, description="Kills minus team kills minus suicides")
    kills: int = Field(0)
    team_kills: int = Field(0)
    conc_kills: int = Field(0)
    sg_kills: int = Field(0)
    deaths: int = Field(0)
    d_enemy: int = Field(0)
    d_self: int = Field(0)
    d_team: int = Field(0)
    # offense only
    caps: int | None = None
    touches: int | None = None
    toss_percent: int | None = None
    flag_time: int | None = None
    concs: int | None = None
    # defense only
    airshots: int | None = None


class FlagMovement(BaseContract):
    """One change of flag possession, with the team score after it."""

    game_time_as_seconds: int
    carrier: str
    current_score: float = Field(0)
    type: FlagMovementType
    fragger: str | None = None


class ScoringActivity(BaseContract):
    """Per-team flag movements over a round, for charting."""

    flag_movements: dict[int, list[FlagMovement]] = Field(default_factory=dict)
    round_length: int = Field(0, ge=0)

    def score_timeline(self, team: int) -> list[tuple[int, float]]:
        """(game time, running score) samples for ``team``, starting at zero."""
        timeline: list[tuple[int, float]] = [(0, 0)]
        for movement in self.flag_movements.get(int(team), []):
            if movement.current_score != timeline[-1][1]:
                timeline.append((movement.game_time_as_seconds, movement.current_score))
        return timeline


class OutputStats(BaseContract):
    """Everything derived from one round."""

    parse_name: str = Field(..., description="Filesystem/URL friendly slug")
    log_name: str
    round_number: int = Field(1, ge=1, le=2)
    map: str
    server: str
    date: str
    time: str
    timestamp: datetime | None = None
    game_time: str = Field(..., description="m:ss")
    game_time_as_seconds: int = Field(0, ge=0)
    score: dict[int, float] = Field(default_factory=dict)
    teams: dict[int, TeamStats] = Field(default_factory=dict)
    scoring_activity: ScoringActivity | None = None
    damage_stats_exist: bool = False


class TeamStatsDelta(BaseContract):
    """Signed difference between two TeamStats rows (None where not applicable)."""

    role: TeamRole
    frags: int = 0
    kills: int = 0
    team_kills: int = 0
    conc_kills: int = 0
    sg_kills: int = 0
    deaths: int = 0
    d_enemy: int = 0
    d_self: int = 0
    d_team: int = 0
    caps: int | None = None
    touches: int | None = None
    toss_percent: int | None = None
    flag_time: int | None = None
    concs: int | None = None
    airshots: int | None = None


class RoundComparison(BaseContract):
    """How lineup A's offense and defense compare to lineup B's."""

    offense: TeamStatsDelta
    defense: TeamStatsDelta


class AwardWinner(BaseContract):
    name: str
    steam_id: str
    value: float


class MatchAwards(BaseContract):
    mvp: AwardWinner | None = None
    top_fragger: AwardWinner | None = None
    top_flag_runner: AwardWinner | None = None


class MatchPlayer(BaseContract):
    """A player account appearing anywhere in a match."""

    name: str
    steam_id: str
    team: int = Field(..., ge=1, le=5, description="Team in the first round the account played")
    rounds: list[int] = Field(default_factory=list)
