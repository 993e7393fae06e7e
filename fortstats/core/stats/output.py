"""Round output: per-player rows, per-team aggregates and round metadata.

Pure functions of the finalized event sequence and the RoundState left behind
by the trackers; calling ``generate_output_stats`` twice on the same inputs
gives equal results.
"""

import logging
import re
from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime

import numpy as np
from pydantic import BaseModel

from fortstats.config.settings import Settings
from fortstats.contracts.common import TeamColor
from fortstats.contracts.events import EventType
from fortstats.contracts.output import (
    EventDescriptor,
    FacetSummary,
    OutputStats,
    PlayerOutputStatsRound,
    RoleSummary,
    StatDetails,
)
from fortstats.core.domain.event import Event
from fortstats.core.domain.player import Player
from fortstats.core.domain.time_interval import TimeInterval
from fortstats.core.pipeline.round_state import RoundState
from fortstats.core.stats.player_stats import PlayerEventStats, categorize_events
from fortstats.core.stats.team_stats import build_team_stats, toss_percentage

logger = logging.getLogger(__name__)

# Stats whose value is the sum of the events' amounts rather than their count.
SUMMED_STATS = frozenset({"dealt", "taken", "team_dealt"})

# Stats derived below instead of counted from their own events.
DERIVED_STATS = frozenset({"flag_time", "toss_percent"})

# Events that end a flag carry, from the carrier's point of view.
_CARRY_END_STATS = ("flag_capture", "death", "by_team", "flag_throw", "by_self", "left_server")

_SLUG_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_-]+")


def format_game_time(seconds: int) -> str:
    """m:ss, with a leading minus before the match start."""
    sign = "-" if seconds < 0 else ""
    minutes, secs = divmod(abs(seconds), 60)
    return f"{sign}{minutes}:{secs:02d}"


def describe_event(event: Event) -> EventDescriptor:
    game_time = event.game_time_as_seconds
    from_class = event.player_from_class
    to_class = event.player_to_class
    return EventDescriptor(
        event_type=event.event_type.value,
        line_number=event.line_number,
        game_time_as_seconds=game_time,
        game_time=format_game_time(game_time) if game_time is not None else None,
        player_from=event.player_from.name if event.player_from else None,
        player_from_class=from_class.label if from_class is not None else None,
        player_to=event.player_to.name if event.player_to else None,
        player_to_class=to_class.label if to_class is not None else None,
        weapon=event.with_weapon.value if event.with_weapon else None,
        value=event.value,
        while_conced=event.while_conced,
    )


def _amount(event: Event, summed: bool) -> float:
    if not summed:
        return 1
    value = event.data.numeric_value if event.data else None
    return value or 0


def _as_number(value: float) -> int | float:
    return int(value) if float(value).is_integer() else value


def build_facets(
    player: Player, events: Sequence[Event], summed: bool
) -> dict[str, list[FacetSummary]] | None:
    """Breakdowns of a stat by the other player involved and by weapon."""
    by_player: dict[str, float] = defaultdict(float)
    by_weapon: dict[str, float] = defaultdict(float)
    for event in events:
        amount = _amount(event, summed)
        if event.player_to is not None:
            if player.is_same_player(event.player_from):
                other = event.player_to
            else:
                other = event.player_from
            if other is not None:
                by_player[other.name] += amount
        if event.with_weapon is not None:
            by_weapon[event.with_weapon.value] += amount

    facets = {
        name: _summarize(totals)
        for name, totals in (("player", by_player), ("weapon", by_weapon))
        if totals
    }
    return facets or None


def _summarize(totals: dict[str, float]) -> list[FacetSummary]:
    keys = list(totals)
    values = np.array([totals[key] for key in keys], dtype=float)
    total = values.sum()
    if total > 0:
        percentages = np.round(values / total * 100, 1)
    else:
        percentages = np.zeros(len(values))
    rows = [
        FacetSummary(key=key, value=_as_number(value.item()), percentage=percentage.item())
        for key, value, percentage in zip(keys, values, percentages)
    ]
    rows.sort(key=lambda row: (-row.value, row.key))
    return rows


def build_stat_details(
    template: StatDetails,
    player: Player,
    events: Sequence[Event],
    settings: Settings,
    summed: bool = False,
    value: int | float | None = None,
) -> StatDetails:
    """A filled-in copy of ``template`` for ``events``."""
    if value is None:
        value = _as_number(sum(_amount(event, summed) for event in events))
    details = [describe_event(event) for event in events]
    if settings.max_event_details > 0:
        details = details[: settings.max_event_details]
    return StatDetails(
        title=template.title,
        description=template.description,
        value=value,
        details=details,
        facets=build_facets(player, events, summed),
    )


def derive_flag_time(entry: PlayerEventStats, round_end: int) -> tuple[int, list[Event]]:
    """Carry seconds re-derived from the player's own pickups and carry endings.

    Walks the merged pickups and carry endings (capture, death, throw, suicide,
    leaving the server) in game time order. A carry still open at the last
    event runs to the round end.
    """
    merged = list(entry.events("flag_touch"))
    for key in _CARRY_END_STATS:
        merged.extend(entry.events(key))
    merged.sort(key=lambda e: (e.require_game_time(), e.line_number))

    total = 0
    picked_up_at: int | None = None
    for event in merged:
        game_time = event.require_game_time()
        if event.event_type == EventType.PLAYER_PICKED_UP_FLAG:
            if picked_up_at is None:
                picked_up_at = game_time
        elif picked_up_at is not None:
            total += max(0, game_time - picked_up_at)
            picked_up_at = None
    if picked_up_at is not None:
        total += max(0, round_end - picked_up_at)
    return total, merged


def _seconds_on_team(player: Player, start: int, end: int, round_end: int) -> int:
    """Seconds of [start, end) the player spent on their team within the match."""
    if not player.team_intervals:
        return TimeInterval(start, end).get_clamped_duration(0, round_end)
    total = 0
    for membership in player.team_intervals:
        left = round_end if membership.end is None else membership.end
        overlap = TimeInterval(max(start, membership.start), min(end, left))
        total += overlap.get_clamped_duration(0, round_end)
    return total


def build_roles(player: Player, events: Sequence[Event], round_end: int) -> list[RoleSummary]:
    """Classes played, most seconds first.

    Only time inside the match and on the player's team counts, so a role
    stops accruing when its player leaves.
    """
    changes = [
        event
        for event in events
        if event.event_type == EventType.PLAYER_CHANGE_ROLE
        and player.is_same_player(event.player_from)
        and event.data is not None
        and event.data.player_class is not None
        and event.game_time_as_seconds is not None
    ]
    seconds: dict[str, int] = {}
    for index, event in enumerate(changes):
        start = event.require_game_time()
        end = changes[index + 1].require_game_time() if index + 1 < len(changes) else round_end
        player_class = event.data.player_class if event.data else None
        if player_class is None:
            continue
        seconds[player_class.label] = seconds.get(player_class.label, 0) + _seconds_on_team(
            player, start, end, round_end
        )

    roles = [
        RoleSummary(player_class=label, seconds=total)
        for label, total in seconds.items()
        if total > 0
    ]
    roles.sort(key=lambda role: -role.seconds)
    return roles


def _fill_group(
    group: BaseModel,
    entry: PlayerEventStats,
    settings: Settings,
) -> None:
    for name in type(group).model_fields:
        if name in DERIVED_STATS:
            continue
        events = entry.events(name)
        if not events:
            continue
        template: StatDetails = getattr(group, name)
        setattr(
            group,
            name,
            build_stat_details(
                template, entry.player, events, settings, summed=name in SUMMED_STATS
            ),
        )


def build_player_row(
    entry: PlayerEventStats,
    events: Sequence[Event],
    round_state: RoundState,
    round_number: int,
    settings: Settings,
) -> PlayerOutputStatsRound:
    """One player's stats row for the team they played on."""
    player = entry.player
    round_end = round_state.round_end
    row = PlayerOutputStatsRound(
        name=player.name,
        names=list(player.names),
        steam_id=player.steam_id,
        id=player.player_id,
        team=int(player.team) if player.team is not None else int(TeamColor.SPECTATOR),
        roles=build_roles(player, events, round_end),
        round_number=round_number,
    )
    for group in (row.kills, row.deaths, row.objectives, row.weapons, row.buildables, row.damage):
        _fill_group(group, entry, settings)

    objectives = row.objectives
    flag_time, carry_events = derive_flag_time(entry, round_end)
    tracked = player.round_stats.flag_carry_time_in_seconds
    if flag_time != tracked:
        logger.debug(
            "Flag time for %s re-derived as %ds, tracked as %ds",
            player.name,
            flag_time,
            tracked,
        )
    objectives.flag_time = build_stat_details(
        objectives.flag_time, player, carry_events, settings, value=flag_time
    )
    touches = entry.count("flag_touch")
    throws = entry.count("flag_throw")
    objectives.toss_percent = StatDetails(
        title=objectives.toss_percent.title,
        description=objectives.toss_percent.description,
        value=toss_percentage(throws, touches),
    )
    return row


def _first_value(events: Sequence[Event], *event_types: EventType) -> str | None:
    for event_type in event_types:
        for event in events:
            if event.event_type == event_type and event.value:
                return event.value
    return None


def build_parse_name(server: str, timestamp: datetime | None, settings: Settings) -> str:
    """Slug of the server's first word and the log start, e.g. ``coach-2019-Oct-26-19-30``."""
    words = server.split()
    short = words[0][: settings.server_short_name_length] if words else ""
    parts = [short]
    if timestamp is not None:
        parts.append(timestamp.strftime("%Y-%b-%d-%H-%M"))
    slug = "-".join(part for part in parts if part)
    return _SLUG_UNSAFE_RE.sub("", slug) or "round"


def generate_output_stats(
    events: Sequence[Event],
    round_state: RoundState,
    log_name: str,
    round_number: int = 1,
    settings: Settings | None = None,
) -> OutputStats:
    """Aggregate a finalized round into OutputStats."""
    settings = settings or round_state.settings
    placeholder = settings.unknown_value_placeholder
    categorized = categorize_events(events, round_state.initial_touch_lines)

    map_name = _first_value(events, EventType.MAP_LOADING, EventType.MAP_LOADED) or placeholder
    server = _first_value(events, EventType.SERVER_NAME) or placeholder
    timestamp = events[0].timestamp if events else None
    round_end = round_state.round_end

    teams = {}
    for team, members in round_state.teams.items():
        if team is TeamColor.SPECTATOR:
            continue
        rows = [
            build_player_row(
                categorized.get(player.key) or PlayerEventStats(player),
                events,
                round_state,
                round_number,
                settings,
            )
            for player in members
        ]
        teams[int(team)] = build_team_stats(team, rows)

    score = {int(team): value for team, value in sorted(round_state.scores.items())}
    return OutputStats(
        parse_name=build_parse_name(server if server != placeholder else "", timestamp, settings),
        log_name=log_name,
        round_number=round_number,
        map=map_name,
        server=server,
        date=timestamp.strftime("%d %b %Y") if timestamp else placeholder,
        time=timestamp.strftime("%H:%M") if timestamp else placeholder,
        timestamp=timestamp,
        game_time=format_game_time(round_end),
        game_time_as_seconds=max(0, round_end),
        score=score,
        teams=teams,
        scoring_activity=round_state.scoring_activity,
        damage_stats_exist=any(e.event_type == EventType.PLAYER_DAMAGE for e in events),
    )
