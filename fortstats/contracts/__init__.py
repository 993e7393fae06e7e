"""Contract models: closed vocabularies and output statistics."""

from .common import (
    PLAYING_TEAMS,
    BaseContract,
    BuildingKind,
    FlagMovementType,
    PlayerClass,
    TeamColor,
    TeamRole,
    Weapon,
)
from .events import EVENTS_NOT_TO_CULL, FLAG_CAPTURE_EVENTS, EventType
from .output import (
    AwardWinner,
    EventDescriptor,
    FacetSummary,
    FlagMovement,
    MatchAwards,
    MatchPlayer,
    OutputStats,
    PlayerOutputStatsRound,
    RoleSummary,
    RoundComparison,
    ScoringActivity,
    StatDetails,
    TeamStats,
    TeamStatsDelta,
)

__all__ = [
    "PLAYING_TEAMS",
    "BaseContract",
    "BuildingKind",
    "FlagMovementType",
    "PlayerClass",
    "TeamColor",
    "TeamRole",
    "Weapon",
    "EVENTS_NOT_TO_CULL",
    "FLAG_CAPTURE_EVENTS",
    "EventType",
    "AwardWinner",
    "EventDescriptor",
    "FacetSummary",
    "FlagMovement",
    "MatchAwards",
    "MatchPlayer",
    "OutputStats",
    "PlayerOutputStatsRound",
    "RoleSummary",
    "RoundComparison",
    "ScoringActivity",
    "StatDetails",
    "TeamStats",
    "TeamStatsDelta",
]
