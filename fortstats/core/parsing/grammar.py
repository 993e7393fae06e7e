"""Line grammar: one raw log line -> zero or one Event.

Every line starts with the ``L `` sentinel and a 21-character timestamp, then
free-form content. The content sub-grammar depends on how many quoted player
identity tokens it contains:

* none   -> server/world lines, matched by ordered literal/prefix rules
* one    -> single-actor lines (join, role change, say, objective triggers)
* two    -> two-actor lines (frags, building kills, status effects)

Precedence inside each family is significant; the first rule that matches wins.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Callable, Final

from fortstats.contracts.common import BuildingKind, TeamColor, Weapon
from fortstats.contracts.events import EventType
from fortstats.core.domain.event import Event, EventData
from fortstats.core.domain.player import Player
from fortstats.core.domain.player_list import PlayerList
from fortstats.core.errors import ParsingError, UnknownTriggerError
from fortstats.core.parsing.map_triggers import MAP_TRIGGER_RULES, MapTriggerRule, match_map_trigger
from fortstats.core.parsing.vocabulary import (
    parse_class,
    parse_optional_team,
    parse_team,
    parse_weapon,
)

logger = logging.getLogger(__name__)

LOG_SENTINEL: Final = "L "
TIMESTAMP_FORMAT: Final = "%m/%d/%Y - %H:%M:%S"
TIMESTAMP_START: Final = len(LOG_SENTINEL)
TIMESTAMP_END: Final = TIMESTAMP_START + 21
CONTENT_START: Final = TIMESTAMP_END + 2  # skip ": "

PLAYER_RE: Final = re.compile(r'"([^"]*)<(-?\d+)><(STEAM_[^>]*|BOT)><([^>]*)>"')
QUOTED_RE: Final = re.compile(r'"([^"]*)"')
PROPERTY_RE: Final = re.compile(r'\((\w+) "([^"]*)"\)')

CVAR_RE: Final = re.compile(r'^Server cvar "([^"]*)" = "([^"]*)"')
TEAM_SCORE_RE: Final = re.compile(r'^Team "([^"]+)" scored "(-?\d+)"')
TEAM_TRIGGER_RE: Final = re.compile(r'^Team "([^"]+)" triggered "([^"]+)"')
WORLD_TRIGGER_RE: Final = re.compile(r'^World triggered "([^"]+)"')
TRIGGER_RE: Final = re.compile(r'^triggered "([^"]+)"')
WITH_RE: Final = re.compile(r'with "([^"]*)"')

ServerRule = Callable[[str], "tuple[EventType, EventData | None] | None"]

IGNORED_MARKERS: Final[tuple[str, ...]] = ("<HLTV>", "[META]", "[AMXX]")

# World triggers, case-insensitive. Anything else is a generic WORLD_TRIGGER.
WORLD_TRIGGERS: Final[dict[str, tuple[EventType, TeamColor | None]]] = {
    "match_begins_now": (EventType.PREMATCH_END, None),
    "prematch_end": (EventType.PREMATCH_END, None),
    "flag returned": (EventType.FLAG_RETURN, None),
    "red flag returned": (EventType.FLAG_RETURN, TeamColor.RED),
    "blue flag returned": (EventType.FLAG_RETURN, TeamColor.BLUE),
    "red_flag_returned": (EventType.FLAG_RETURN, TeamColor.RED),
    "blue_flag_returned": (EventType.FLAG_RETURN, TeamColor.BLUE),
    "red security up": (EventType.SECURITY_UP, TeamColor.RED),
    "blue security up": (EventType.SECURITY_UP, TeamColor.BLUE),
    "security_up": (EventType.SECURITY_UP, None),
    "gates_open": (EventType.SERVER_GATES_OPEN, None),
    "gates open": (EventType.SERVER_GATES_OPEN, None),
    "switch_sides": (EventType.SERVER_SWITCH_SIDES, None),
    "red_flag_hold_bonus": (EventType.TEAM_FLAG_HOLD_BONUS, TeamColor.RED),
    "blue_flag_hold_bonus": (EventType.TEAM_FLAG_HOLD_BONUS, TeamColor.BLUE),
}

TEAM_TRIGGERS: Final[dict[str, EventType]] = {
    "flag_hold_bonus": EventType.TEAM_FLAG_HOLD_BONUS,
    "team_flag_hold_bonus": EventType.TEAM_FLAG_HOLD_BONUS,
    "flag returned": EventType.FLAG_RETURN,
}

# Single-actor built-in triggers, checked before the map table.
PLAYER_TRIGGERS: Final[dict[str, tuple[EventType, BuildingKind | None]]] = {
    "Sentry_Built_Level_1": (EventType.PLAYER_BUILT_SENTRY_GUN, BuildingKind.SENTRY_GUN),
    "Built_Dispenser": (EventType.PLAYER_BUILT_DISPENSER, BuildingKind.DISPENSER),
    "Teleporter_Entrance_Finished": (
        EventType.PLAYER_BUILT_TELEPORTER,
        BuildingKind.TELEPORTER_ENTRANCE,
    ),
    "Teleporter_Exit_Finished": (EventType.PLAYER_BUILT_TELEPORTER, BuildingKind.TELEPORTER_EXIT),
    "Sentry_Repair": (EventType.PLAYER_REPAIRED_BUILDING, BuildingKind.SENTRY_GUN),
    "Sentry_Dismantle": (EventType.PLAYER_DISMANTLED_BUILDING, BuildingKind.SENTRY_GUN),
    "Dispenser_Dismantle": (EventType.PLAYER_DISMANTLED_BUILDING, BuildingKind.DISPENSER),
    "Teleporter_Entrance_Dismantle": (
        EventType.PLAYER_DISMANTLED_BUILDING,
        BuildingKind.TELEPORTER_ENTRANCE,
    ),
    "Teleporter_Exit_Dismantle": (
        EventType.PLAYER_DISMANTLED_BUILDING,
        BuildingKind.TELEPORTER_EXIT,
    ),
    "Dispenser_Detonated": (EventType.PLAYER_DETONATED_BUILDING, BuildingKind.DISPENSER),
    "Sentry_Destroyed": (EventType.PLAYER_DETONATED_BUILDING, BuildingKind.SENTRY_GUN),
    "Teleporter_Entrance_Detonated": (
        EventType.PLAYER_DETONATED_BUILDING,
        BuildingKind.TELEPORTER_ENTRANCE,
    ),
    "Teleporter_Exit_Detonated": (
        EventType.PLAYER_DETONATED_BUILDING,
        BuildingKind.TELEPORTER_EXIT,
    ),
    "Detpack_Set": (EventType.PLAYER_DETPACK_SET, None),
    "Detpack_Explode": (EventType.PLAYER_DETPACK_EXPLODE, None),
    "info_player_teamspawn": (EventType.PLAYER_SPAWN, None),
    "Flag_Thrown": (EventType.PLAYER_THREW_FLAG, None),
    "Threw_Flag": (EventType.PLAYER_THREW_FLAG, None),
}

SENTRY_UPGRADE_PREFIX: Final = "Sentry_Upgrade_Level_"

# Two-actor "triggered ... against" effects.
EFFECTS: Final[dict[str, tuple[EventType, BuildingKind | None]]] = {
    "Concussion_Grenade": (EventType.PLAYER_CONCED, None),
    "Sentry_Destroyed": (EventType.PLAYER_FRAGGED_GUN, BuildingKind.SENTRY_GUN),
    "Dispenser_Destroyed": (EventType.PLAYER_FRAGGED_DISPENSER, BuildingKind.DISPENSER),
    "Teleporter_Entrance_Destroyed": (
        EventType.PLAYER_FRAGGED_TELEPORTER,
        BuildingKind.TELEPORTER_ENTRANCE,
    ),
    "Teleporter_Exit_Destroyed": (
        EventType.PLAYER_FRAGGED_TELEPORTER,
        BuildingKind.TELEPORTER_EXIT,
    ),
    "Detpack_Disarmed": (EventType.PLAYER_DETPACK_DISARM, None),
    "Medic_Heal": (EventType.PLAYER_HEAL, None),
    "Caltrop_Grenade": (EventType.PLAYER_CALTROPPED_PLAYER, None),
    "Airshot": (EventType.PLAYER_HIT_AIRSHOT, None),
    "Spy_Tranq": (EventType.PLAYER_TRANQED_PLAYER, None),
    "Hallucination_Grenade": (EventType.PLAYER_HALLUCINATED_PLAYER, None),
    "Medic_Infection": (EventType.PLAYER_INFECTED_PLAYER, None),
    "Passed_On_Infection": (EventType.PLAYER_PASSED_INFECTION, None),
    "Medic_Cured_Infection": (EventType.PLAYER_CURED_INFECTION, None),
    "Discovered_Spy": (EventType.PLAYER_REVEALED_SPY, None),
    "Medic_Doused_Fire": (EventType.PLAYER_DOUSED_FIRE, None),
    "Medic_Cured_Hallucinations": (EventType.PLAYER_CURED_HALLUCINATIONS, None),
    "Medic_Cured_Tranquilisation": (EventType.PLAYER_CURED_TRANQUILISATION, None),
    "Damage": (EventType.PLAYER_DAMAGE, None),
}


class LineParser:
    """Classifies lines of one round, resolving players through its PlayerList."""

    def __init__(
        self,
        players: PlayerList,
        map_rules: tuple[MapTriggerRule, ...] = MAP_TRIGGER_RULES,
    ) -> None:
        self.players = players
        self.map_rules = map_rules
        self._server_rules: tuple[tuple[str, ServerRule], ...] = (
            ("Log file started", lambda _: (EventType.START_LOG, None)),
            ("Log file closed", lambda _: (EventType.END_LOG, None)),
            ("Loading map", lambda c: (EventType.MAP_LOADING, _quoted_value(c))),
            ("Started map", lambda c: (EventType.MAP_LOADED, _quoted_value(c))),
            ("Server cvars start", lambda _: (EventType.SERVER_CVAR_START, None)),
            ("Server cvars end", lambda _: (EventType.SERVER_CVAR_END, None)),
            ("Server cvar ", _cvar),
            ("Server name is", lambda c: (EventType.SERVER_NAME, _quoted_value(c))),
            ("Server say", lambda c: (EventType.SERVER_SAY, _quoted_value(c))),
            ("Rcon:", lambda c: (EventType.RCON_COMMAND, _after_prefix(c, "Rcon:"))),
            ("Bad Rcon:", lambda c: (EventType.BAD_RCON, _after_prefix(c, "Bad Rcon:"))),
            ("World triggered", _world_trigger),
            ("Team ", _team_line),
        )

    def parse_line(self, line: str, line_number: int) -> Event | None:
        """Parse one raw line; None for ignorable or unrecognised lines.

        Raises UnknownVocabularyError / UnknownTriggerError (with the line
        attached) when the line is recognised but its vocabulary is not.
        """
        line = line.rstrip("\r\n")
        if not line.startswith(LOG_SENTINEL) or len(line) < CONTENT_START:
            return None
        if any(marker in line for marker in IGNORED_MARKERS):
            return None

        try:
            timestamp = datetime.strptime(line[TIMESTAMP_START:TIMESTAMP_END], TIMESTAMP_FORMAT)
        except ValueError:
            logger.debug("Unparseable timestamp on line %d: %s", line_number, line)
            return None

        content = line[CONTENT_START:].strip()
        try:
            return self._parse_content(content, line, line_number, timestamp)
        except ParsingError as e:
            if e.line_number is None:
                e.line_number = line_number
                e.raw_line = line
            raise

    def _parse_content(
        self, content: str, line: str, line_number: int, timestamp: datetime
    ) -> Event | None:
        def make(
            event_type: EventType,
            data: EventData | None = None,
            player_from: Player | None = None,
            player_to: Player | None = None,
            weapon: Weapon | None = None,
        ) -> Event:
            return Event(
                event_type=event_type,
                line_number=line_number,
                timestamp=timestamp,
                raw_line=line,
                data=data,
                player_from=player_from,
                player_to=player_to,
                with_weapon=weapon,
            )

        matches = list(PLAYER_RE.finditer(content))

        if content.startswith("Kick:") and matches:
            player = self._player(matches[0])
            return make(EventType.PLAYER_KICKED, player_from=player)

        if not matches:
            result = self._parse_server_line(content)
            if result is None:
                logger.warning("Unrecognised server line %d: %s", line_number, content)
                return None
            event_type, data = result
            return make(event_type, data)

        if len(matches) == 1:
            player = self._player(matches[0])
            rest = content[matches[0].end() :].strip()
            result = self._parse_single_actor(rest, player)
            if result is None:
                return None
            event_type, data, weapon = result
            return make(event_type, data, player_from=player, weapon=weapon)

        first, second = matches[0], matches[1]
        verb = content[first.end() : second.start()].strip()
        rest = content[second.end() :].strip()
        player_from = self._player(first)
        player_to = self._player(second)
        event_type, data, weapon = self._parse_two_actor(verb, rest)
        return make(event_type, data, player_from=player_from, player_to=player_to, weapon=weapon)

    def _player(self, match: re.Match[str]) -> Player:
        name, player_id, steam_id, team_name = match.groups()
        if steam_id == "BOT":
            # bots share one steam marker; keep them apart by name
            steam_id = f"BOT:{name}"
        team = parse_optional_team(team_name)
        player = self.players.ensure_player(steam_id, name, int(player_id), team)
        if player is None:
            raise ParsingError(f"could not register player {name!r}")
        return player

    # Zero players

    def _parse_server_line(self, content: str) -> tuple[EventType, EventData | None] | None:
        for prefix, build in self._server_rules:
            if content.startswith(prefix):
                return build(content)
        return None

    # One player

    def _parse_single_actor(
        self, rest: str, player: Player
    ) -> tuple[EventType, EventData | None, Weapon | None] | None:
        if rest.startswith("joined team"):
            return EventType.PLAYER_JOIN_TEAM, EventData(team=parse_team(_first_quoted(rest))), None
        if rest.startswith("entered the game"):
            return EventType.PLAYER_JOIN_SERVER, None, None
        if rest.startswith("connected"):
            # address chatter before "entered the game"
            return None
        if rest.startswith("disconnected"):
            return EventType.PLAYER_LEFT_SERVER, None, None
        if rest.startswith("changed role to"):
            player_class = parse_class(_first_quoted(rest))
            return EventType.PLAYER_CHANGE_ROLE, EventData(player_class=player_class), None
        if rest.startswith("changed name to"):
            return EventType.PLAYER_CHANGED_NAME, EventData(value=_first_quoted(rest)), None
        if rest.startswith("committed suicide with"):
            return EventType.PLAYER_COMMIT_SUICIDE, None, parse_weapon(_first_quoted(rest))
        if rest.startswith("say_team"):
            return EventType.PLAYER_MM2, EventData(value=_first_quoted(rest)), None
        if rest.startswith("say"):
            return EventType.PLAYER_MM1, EventData(value=_first_quoted(rest)), None

        trigger = TRIGGER_RE.match(rest)
        if trigger is None:
            logger.warning("Unrecognised player line: %s", rest)
            return None
        name = trigger.group(1)

        builtin = PLAYER_TRIGGERS.get(name)
        if builtin is not None:
            event_type, building = builtin
            data = EventData(building=building) if building is not None else None
            return event_type, data, None
        if name.startswith(SENTRY_UPGRADE_PREFIX):
            return (
                EventType.PLAYER_UPGRADED_GUN,
                EventData(building=BuildingKind.SENTRY_GUN, level=_upgrade_level(name)),
                None,
            )

        rule = match_map_trigger(name, self.map_rules)
        if rule is None:
            logger.warning("Unrecognised player trigger %r", name)
            return None
        team = rule.resolve_team(player.team)
        return rule.event_type, EventData(team=team, key=name), None

    # Two players

    def _parse_two_actor(
        self, verb: str, rest: str
    ) -> tuple[EventType, EventData | None, Weapon | None]:
        if verb == "killed":
            with_match = WITH_RE.match(rest)
            if with_match is None:
                raise UnknownTriggerError(f"kill without weapon: {rest!r}")
            return EventType.PLAYER_FRAGGED_PLAYER, None, parse_weapon(with_match.group(1))

        trigger = TRIGGER_RE.match(verb)
        if trigger is None or not verb.endswith("against"):
            raise UnknownTriggerError(f"unknown two-player verb: {verb!r}")

        effect = trigger.group(1)
        weapon = None
        with_match = WITH_RE.search(rest)
        if with_match is not None:
            weapon = parse_weapon(with_match.group(1))

        if effect.startswith("Sentry_Upgrade"):
            data = EventData(building=BuildingKind.SENTRY_GUN, level=_upgrade_level(effect))
            return EventType.PLAYER_UPGRADED_OTHER_GUN, data, weapon

        known = EFFECTS.get(effect)
        if known is None:
            raise UnknownTriggerError(f"unknown two-player effect: {effect!r}")
        event_type, building = known

        if event_type is EventType.PLAYER_DAMAGE:
            properties = dict(PROPERTY_RE.findall(rest))
            return event_type, EventData(value=properties.get("damage", "0")), weapon
        data = EventData(building=building) if building is not None else None
        return event_type, data, weapon


def _first_quoted(text: str) -> str:
    match = QUOTED_RE.search(text)
    return match.group(1) if match else ""


def _quoted_value(content: str) -> EventData:
    return EventData(value=_first_quoted(content))


def _after_prefix(content: str, prefix: str) -> EventData:
    return EventData(value=content[len(prefix) :].strip())


def _upgrade_level(name: str) -> int | None:
    digits = name.rsplit("_", 1)[-1]
    return int(digits) if digits.isdigit() else None


def _cvar(content: str) -> tuple[EventType, EventData | None] | None:
    match = CVAR_RE.match(content)
    if match is None:
        return None
    return EventType.SERVER_CVAR, EventData(key=match.group(1), value=match.group(2))


def _world_trigger(content: str) -> tuple[EventType, EventData | None] | None:
    match = WORLD_TRIGGER_RE.match(content)
    if match is None:
        return None
    name = match.group(1)
    known = WORLD_TRIGGERS.get(name.casefold())
    if known is None:
        return EventType.WORLD_TRIGGER, EventData(value=name)
    event_type, team = known
    if event_type is EventType.FLAG_RETURN and team is None:
        # no team attached: every flag goes home
        return event_type, None
    return event_type, EventData(team=team, value=name)


def _team_line(content: str) -> tuple[EventType, EventData | None] | None:
    score = TEAM_SCORE_RE.match(content)
    if score is not None:
        return EventType.TEAM_SCORE, EventData(team=parse_team(score.group(1)), value=score.group(2))
    trigger = TEAM_TRIGGER_RE.match(content)
    if trigger is not None:
        event_type = TEAM_TRIGGERS.get(trigger.group(2).casefold())
        if event_type is not None:
            return event_type, EventData(team=parse_team(trigger.group(1)), value=trigger.group(2))
    return None
