"""Event categorisation: which named counters each event feeds, per player."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field

from fortstats.contracts.common import TeamColor, Weapon
from fortstats.contracts.events import EventType
from fortstats.core.domain.event import Event
from fortstats.core.domain.player import Player

logger = logging.getLogger(__name__)

PlayerKey = tuple[str, TeamColor | None]

# Single-actor events that map straight onto one counter of the actor.
SINGLE_ACTOR_STATS: dict[EventType, tuple[str, ...]] = {
    EventType.PLAYER_BUILT_SENTRY_GUN: ("build_sentry",),
    EventType.PLAYER_BUILT_DISPENSER: ("build_disp",),
    EventType.PLAYER_BUILT_TELEPORTER: ("build_tele",),
    EventType.PLAYER_UPGRADED_GUN: ("upgrade_sentry",),
    EventType.PLAYER_REPAIRED_BUILDING: ("repair",),
    EventType.PLAYER_DETONATED_BUILDING: ("detonate",),
    EventType.PLAYER_DISMANTLED_BUILDING: ("dismantle",),
    EventType.PLAYER_DETPACK_SET: ("detpack_set",),
    EventType.PLAYER_DETPACK_EXPLODE: ("detpack_explode",),
    EventType.PLAYER_PICKED_UP_FLAG: ("flag_touch",),
    EventType.PLAYER_CAPTURED_FLAG: ("flag_capture",),
    EventType.PLAYER_CAPTURED_BONUS_FLAG: ("flag_capture", "flag_bonus_capture"),
    EventType.PLAYER_THREW_FLAG: ("flag_throw",),
    EventType.PLAYER_GOT_SECURITY: ("button",),
    EventType.PLAYER_OPENED_DETPACK_ENTRANCE: ("det_entrance",),
    EventType.PLAYER_CAPTURED_ARENA_OWN: ("arena_capture",),
    EventType.PLAYER_CAPTURED_ARENA_CENTER: ("arena_capture",),
    EventType.PLAYER_CAPTURED_ARENA_OPPONENT: ("arena_capture",),
    EventType.PLAYER_COMMIT_SUICIDE: ("by_self",),
    # no output counter; kept so a carry ends when its carrier leaves
    EventType.PLAYER_LEFT_SERVER: ("left_server",),
    EventType.PLAYER_KICKED: ("left_server",),
}

# Single-actor events with nothing to count.
IGNORED_SINGLE_ACTOR = frozenset(
    {
        EventType.PLAYER_CHANGE_ROLE,
        EventType.PLAYER_MM1,
        EventType.PLAYER_MM2,
        EventType.PLAYER_SPAWN,
        EventType.PLAYER_JOIN_SERVER,
        EventType.PLAYER_JOIN_TEAM,
        EventType.PLAYER_CHANGED_NAME,
        EventType.PLAYER_PICKED_UP_BONUS_FLAG,
    }
)

# Two-actor events counted for enemies only: (actor counter, target counter).
ENEMY_ONLY_STATS: dict[EventType, tuple[str | None, str | None]] = {
    EventType.PLAYER_CALTROPPED_PLAYER: ("caltrop", "caltropped"),
    EventType.PLAYER_HIT_AIRSHOT: ("airshot", "airshoted"),
    EventType.PLAYER_TRANQED_PLAYER: ("tranq", "tranqed"),
    EventType.PLAYER_HALLUCINATED_PLAYER: ("pills", "pilled"),
    EventType.PLAYER_INFECTED_PLAYER: ("infect", "infected"),
    EventType.PLAYER_FRAGGED_TELEPORTER: ("tele", None),
}

# Two-actor events credited to the actor whatever the teams.
ACTOR_STATS: dict[EventType, tuple[str | None, str | None]] = {
    EventType.PLAYER_PASSED_INFECTION: ("pass_infect", None),
    EventType.PLAYER_CURED_INFECTION: ("cure", None),
    EventType.PLAYER_CURED_HALLUCINATIONS: ("cure", None),
    EventType.PLAYER_CURED_TRANQUILISATION: ("cure", None),
    EventType.PLAYER_HEAL: ("heal", "healed"),
    EventType.PLAYER_REVEALED_SPY: ("reveal_spy", None),
    EventType.PLAYER_DOUSED_FIRE: ("douse", None),
    EventType.PLAYER_DETPACK_DISARM: ("detpack_disarm", None),
    EventType.PLAYER_UPGRADED_OTHER_GUN: ("upgrade_other", None),
}

SENTRY_WEAPONS = frozenset({Weapon.SENTRY_GUN, Weapon.BUILDING_SENTRY_GUN})


@dataclass
class PlayerEventStats:
    """Events behind each named counter of one player."""

    player: Player
    stats: dict[str, list[Event]] = field(default_factory=lambda: defaultdict(list))

    def add(self, key: str, event: Event) -> None:
        self.stats[key].append(event)

    def events(self, key: str) -> list[Event]:
        return self.stats.get(key, [])

    def count(self, key: str) -> int:
        return len(self.stats.get(key, []))


def players_on_same_team(player: Player, other: Player) -> bool:
    return player.team is not None and player.team == other.team


def categorize_events(
    events: Iterable[Event], initial_touch_lines: Collection[int] = ()
) -> dict[PlayerKey, PlayerEventStats]:
    """Sort every player event into named counters.

    Players are keyed by (steam number, team), so an account that switched
    teams gets one entry per team. Kill-like events are split into enemy and
    teammate variants by comparing the two players' teams. Pickups whose line
    is in ``initial_touch_lines`` also count as initial touches.
    """
    by_player: dict[PlayerKey, PlayerEventStats] = {}

    def stats_for(player: Player) -> PlayerEventStats:
        entry = by_player.get(player.key)
        if entry is None:
            entry = by_player[player.key] = PlayerEventStats(player)
        return entry

    for event in events:
        if event.player_from is None:
            continue
        actor = stats_for(event.player_from)

        if event.player_to is None:
            keys = SINGLE_ACTOR_STATS.get(event.event_type)
            if keys is not None:
                for key in keys:
                    actor.add(key, event)
                if event.line_number in initial_touch_lines:
                    actor.add("touches_initial", event)
            elif event.event_type not in IGNORED_SINGLE_ACTOR:
                logger.debug(
                    "Not counting %s for %s", event.event_type.value, event.player_from.name
                )
            continue

        target = stats_for(event.player_to)
        _categorize_two_actor(event, actor, target)

    return by_player


def _categorize_two_actor(event: Event, actor: PlayerEventStats, target: PlayerEventStats) -> None:
    event_type = event.event_type
    same_player = actor.player.is_same_player(target.player)
    same_team = players_on_same_team(actor.player, target.player)

    if event_type == EventType.PLAYER_FRAGGED_PLAYER:
        if same_player:
            actor.add("by_self", event)
        elif same_team:
            actor.add("teamkill", event)
            target.add("by_team", event)
        else:
            actor.add("kill", event)
            target.add("death", event)
            if event.while_conced:
                actor.add("kill_while_conced", event)
                target.add("while_conced", event)
            if event.with_weapon in SENTRY_WEAPONS:
                target.add("by_sg", event)
    elif event_type == EventType.PLAYER_FRAGGED_GUN:
        actor.add("team_sg" if same_team else "sg", event)
        target.add("sentry_lost", event)
    elif event_type == EventType.PLAYER_FRAGGED_DISPENSER:
        actor.add("team_disp" if same_team else "disp", event)
        target.add("disp_lost", event)
    elif event_type == EventType.PLAYER_CONCED:
        if same_player:
            actor.add("conc_jump", event)
        elif not same_team:
            actor.add("concs_thrown", event)
            target.add("conced", event)
    elif event_type == EventType.PLAYER_DAMAGE:
        if same_team:
            actor.add("team_dealt", event)
        else:
            actor.add("dealt", event)
            target.add("taken", event)
    elif event_type in ENEMY_ONLY_STATS:
        if not same_team:
            _add_pair(event, actor, target, ENEMY_ONLY_STATS[event_type])
    elif event_type in ACTOR_STATS:
        _add_pair(event, actor, target, ACTOR_STATS[event_type])
    else:
        logger.debug(
            "Not counting %s for %s against %s",
            event_type.value,
            actor.player.name,
            target.player.name,
        )


def _add_pair(
    event: Event,
    actor: PlayerEventStats,
    target: PlayerEventStats,
    keys: tuple[str | None, str | None],
) -> None:
    actor_key, target_key = keys
    if actor_key is not None:
        actor.add(actor_key, event)
    if target_key is not None:
        target.add(target_key, event)
