"""Map-specific single-actor trigger strings.

Levels name their flag and objective entities freely, so the same action shows
up under many spellings. Rules are checked in order and the first match wins;
new maps extend the table, existing entries are never reordered or replaced.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

from fortstats.contracts.common import TeamColor
from fortstats.contracts.events import EventType


class TeamSource(str, Enum):
    """How the event's team is determined for a matched trigger."""

    NONE = "none"
    FIXED = "fixed"
    # the flag that belongs to the actor's opponent
    ACTOR_OPPONENT = "actor_opponent"
    ACTOR = "actor"


class MatchKind(str, Enum):
    EXACT = "exact"
    PREFIX = "prefix"


@dataclass(frozen=True)
class MapTriggerRule:
    """One trigger spelling and what it means.

    Matching is case-insensitive; ``trigger`` is stored as it appears in logs.
    """

    trigger: str
    event_type: EventType
    team_source: TeamSource = TeamSource.NONE
    team: TeamColor | None = None
    match: MatchKind = MatchKind.EXACT

    def matches(self, name: str) -> bool:
        folded = name.casefold()
        if self.match is MatchKind.PREFIX:
            return folded.startswith(self.trigger.casefold())
        return folded == self.trigger.casefold()

    def resolve_team(self, actor_team: TeamColor | None) -> TeamColor | None:
        if self.team_source is TeamSource.FIXED:
            return self.team
        if self.team_source is TeamSource.ACTOR_OPPONENT:
            return actor_team.opponent() if actor_team is not None else None
        if self.team_source is TeamSource.ACTOR:
            return actor_team
        return None


def _fixed(trigger: str, event_type: EventType, team: TeamColor) -> MapTriggerRule:
    return MapTriggerRule(trigger, event_type, TeamSource.FIXED, team)


def _opponent(trigger: str, event_type: EventType) -> MapTriggerRule:
    return MapTriggerRule(trigger, event_type, TeamSource.ACTOR_OPPONENT)


def _own(trigger: str, event_type: EventType) -> MapTriggerRule:
    return MapTriggerRule(trigger, event_type, TeamSource.ACTOR)


_PICKUP = EventType.PLAYER_PICKED_UP_FLAG
_BONUS = EventType.PLAYER_PICKED_UP_BONUS_FLAG
_CAP = EventType.PLAYER_CAPTURED_FLAG

MAP_TRIGGER_RULES: Final[tuple[MapTriggerRule, ...]] = (
    # Flag pickups. The event team is the colour of the flag being carried.
    _fixed("Red Flag", _PICKUP, TeamColor.RED),
    _fixed("Blue Flag", _PICKUP, TeamColor.BLUE),
    _fixed("Yellow Flag", _PICKUP, TeamColor.YELLOW),
    _fixed("Green Flag", _PICKUP, TeamColor.GREEN),
    _fixed("red_flag", _PICKUP, TeamColor.RED),
    _fixed("blue_flag", _PICKUP, TeamColor.BLUE),
    _fixed("Team 2 flag", _PICKUP, TeamColor.RED),
    _fixed("Team 1 flag", _PICKUP, TeamColor.BLUE),
    _fixed("rdet", _PICKUP, TeamColor.RED),
    _fixed("bdet", _PICKUP, TeamColor.BLUE),
    _opponent("Took Flag", _PICKUP),
    _opponent("flag_pickup", _PICKUP),
    _opponent("The Flag", _PICKUP),
    _opponent("enemy_flag", _PICKUP),
    # Coast-to-coast style maps: touching the far zone while carrying.
    _opponent("bonus", _BONUS),
    _opponent("Bonus_Flag", _BONUS),
    _opponent("blue_bonus", _BONUS),
    _opponent("red_bonus", _BONUS),
    # Captures. The event team is the capturing team.
    _fixed("Team 1 dropoff", _CAP, TeamColor.BLUE),
    _fixed("Team 2 dropoff", _CAP, TeamColor.RED),
    _fixed("blue_cap", _CAP, TeamColor.BLUE),
    _fixed("red_cap", _CAP, TeamColor.RED),
    _fixed("Blue Cap", _CAP, TeamColor.BLUE),
    _fixed("Red Cap", _CAP, TeamColor.RED),
    _fixed("bcap", _CAP, TeamColor.BLUE),
    _fixed("rcap", _CAP, TeamColor.RED),
    _own("Capture Point", _CAP),
    _own("flag_capture", _CAP),
    _own("Flag_Captured", _CAP),
    _own("goalitem", _CAP),
    MapTriggerRule("capture", _CAP, TeamSource.ACTOR, match=MatchKind.PREFIX),
    # Security / buttons
    _opponent("Red Security", EventType.PLAYER_GOT_SECURITY),
    _opponent("Blue Security", EventType.PLAYER_GOT_SECURITY),
    _opponent("security_button", EventType.PLAYER_GOT_SECURITY),
    _fixed("red_button", EventType.PLAYER_GOT_SECURITY, TeamColor.RED),
    _fixed("blue_button", EventType.PLAYER_GOT_SECURITY, TeamColor.BLUE),
    # Detpack-blown entrances
    _opponent("Det Entrance", EventType.PLAYER_OPENED_DETPACK_ENTRANCE),
    _opponent("det_wall", EventType.PLAYER_OPENED_DETPACK_ENTRANCE),
    _opponent("Detpack_Entrance", EventType.PLAYER_OPENED_DETPACK_ENTRANCE),
    # Arena / multi-point capture maps
    _own("own_point", EventType.PLAYER_CAPTURED_ARENA_OWN),
    _own("center_point", EventType.PLAYER_CAPTURED_ARENA_CENTER),
    _own("Center Point", EventType.PLAYER_CAPTURED_ARENA_CENTER),
    _opponent("enemy_point", EventType.PLAYER_CAPTURED_ARENA_OPPONENT),
)


def match_map_trigger(
    name: str, rules: tuple[MapTriggerRule, ...] = MAP_TRIGGER_RULES
) -> MapTriggerRule | None:
    """First rule matching ``name``, or None."""
    for rule in rules:
        if rule.matches(name):
            return rule
    return None
