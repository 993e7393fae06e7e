"""Flag possession, carry time and team scoring."""

from __future__ import annotations

import logging

from fortstats.contracts.common import PLAYING_TEAMS, FlagMovementType, TeamColor
from fortstats.contracts.events import FLAG_CAPTURE_EVENTS, EventType
from fortstats.contracts.output import FlagMovement, ScoringActivity
from fortstats.core.domain.event import Event
from fortstats.core.domain.player import Player
from fortstats.core.errors import PipelineInvariantError
from fortstats.core.pipeline.event_subscriber import (
    EventHandlingPhase,
    EventSubscriber,
    HandlerRequest,
)
from fortstats.core.pipeline.round_state import FlagStatus, RoundState, TeamFlagRoundStats

logger = logging.getLogger(__name__)

# Carrier label for movements with no acting player.
TEAM_ACTOR = "<Team>"

# Events that can end a carry.
_DROP_EVENTS = frozenset(
    {
        EventType.PLAYER_THREW_FLAG,
        EventType.PLAYER_FRAGGED_PLAYER,
        EventType.PLAYER_COMMIT_SUICIDE,
        EventType.PLAYER_LEFT_SERVER,
        EventType.PLAYER_KICKED,
    }
)

_MOVEMENT_TYPES: dict[EventType, FlagMovementType] = {
    EventType.PLAYER_PICKED_UP_FLAG: FlagMovementType.PICKUP,
    EventType.PLAYER_FRAGGED_PLAYER: FlagMovementType.FRAGGED,
    EventType.PLAYER_THREW_FLAG: FlagMovementType.THROWN,
    EventType.PLAYER_COMMIT_SUICIDE: FlagMovementType.DROPPED,
    EventType.PLAYER_LEFT_SERVER: FlagMovementType.DROPPED,
    EventType.PLAYER_KICKED: FlagMovementType.DROPPED,
    EventType.FLAG_RETURN: FlagMovementType.RETURNED,
    EventType.PLAYER_CAPTURED_FLAG: FlagMovementType.CAPTURED,
    EventType.PLAYER_CAPTURED_BONUS_FLAG: FlagMovementType.CAPTURED,
    EventType.TEAM_FLAG_HOLD_BONUS: FlagMovementType.CAPTURED,
}


class FlagMovementTracker(EventSubscriber):
    """Main: follows each flag from pickup to drop, return or capture.

    Flag state lives in RoundState.flag_status keyed by the flag's colour;
    capture counts and the events behind a team's score live in
    RoundState.team_flag_stats keyed by the capturing team. Carry time is
    credited to the carrier whenever a carry ends, and open carries are
    credited up to the round end.

    PostMain: estimates points per capture from the final score and builds the
    scoring activity series.
    """

    PHASES = (EventHandlingPhase.MAIN, EventHandlingPhase.POST_MAIN)

    def phase_start(self, phase: EventHandlingPhase, round_state: RoundState) -> None:
        if phase not in self.PHASES:
            raise PipelineInvariantError(f"unexpected phase {phase.value}")

    def phase_end(self, phase: EventHandlingPhase, round_state: RoundState) -> None:
        if phase is EventHandlingPhase.MAIN:
            round_end = round_state.round_end
            for team, status in round_state.flag_status.items():
                if status.carrier is not None:
                    # the flag was being held when the game ended
                    self._credit_carry(status, round_end)
                round_state.flag_status[team] = FlagStatus()
        elif phase is EventHandlingPhase.POST_MAIN:
            for team, stats in round_state.team_flag_stats.items():
                self._compute_points_per_cap(team, stats, round_state)
            round_state.scoring_activity = self._build_scoring_activity(round_state)

    def handle_event(
        self, event: Event, phase: EventHandlingPhase, round_state: RoundState
    ) -> HandlerRequest:
        if phase is not EventHandlingPhase.MAIN:
            return HandlerRequest.NONE

        event_type = event.event_type
        if event_type == EventType.TEAM_FLAG_HOLD_BONUS:
            team = self._require_team(event)
            round_state.team_flag_stats[team].flag_hold_bonuses += 1
            round_state.team_flag_stats[team].flag_events.append(event)
        elif event_type == EventType.TEAM_SCORE:
            team = self._require_team(event)
            score = event.data.numeric_value if event.data else None
            if score is None:
                raise PipelineInvariantError(
                    "expected value with a team score event",
                    line_number=event.line_number,
                    raw_line=event.raw_line,
                )
            round_state.team_flag_stats[team].score = int(score)
            round_state.saw_team_score_event = True
        elif event_type == EventType.PLAYER_PICKED_UP_FLAG:
            self._pickup(event, round_state)
        elif event_type == EventType.PLAYER_PICKED_UP_BONUS_FLAG:
            self._bonus_pickup(event, round_state)
        elif event_type == EventType.FLAG_RETURN:
            self._flag_return(event, round_state)
        elif event_type in _DROP_EVENTS:
            self._drop(event, round_state)
        elif event_type in FLAG_CAPTURE_EVENTS:
            self._capture(event, round_state)
        return HandlerRequest.NONE

    # Main phase handlers

    def _pickup(self, event: Event, round_state: RoundState) -> None:
        player = event.player_from
        if player is None or event.team is None:
            logger.warning("Flag pickup without a player or flag team on line %d", event.line_number)
            return
        status = round_state.flag_status[event.team]
        game_time = event.require_game_time()

        if status.carrier is not None and status.carrier.is_same_player(player):
            # the carry is still open; restarting it would drop the time held so far
            logger.debug(
                "%s picked up the %s flag they were already carrying (line %d)",
                player.name,
                event.team.label,
                event.line_number,
            )
            return
        if status.carrier is not None:
            logger.warning(
                "%s picked up the %s flag while %s was carrying it (line %d)",
                player.name,
                event.team.label,
                status.carrier.name,
                event.line_number,
            )
            self._credit_carry(status, game_time)

        status.carrier = player
        player.round_stats.flag_carries += 1
        if not status.has_been_touched:
            status.has_been_touched = True
            player.round_stats.flag_initial_touches += 1
            round_state.initial_touch_lines.add(event.line_number)
        status.bonus_active = False
        status.picked_up_at = game_time
        self._record(event, player.team, round_state)

    def _bonus_pickup(self, event: Event, round_state: RoundState) -> None:
        if event.team is None:
            logger.warning("Bonus pickup without a flag team on line %d", event.line_number)
            return
        status = round_state.flag_status[event.team]
        if status.carrier is None or not status.carrier.is_same_player(event.player_from):
            logger.warning(
                "Bonus flag pickup by %s who wasn't carrying the flag (carried by %s, line %d)",
                event.player_from.name if event.player_from else None,
                status.carrier.name if status.carrier else None,
                event.line_number,
            )
            return
        status.bonus_active = True

    def _flag_return(self, event: Event, round_state: RoundState) -> None:
        if event.team is None:
            # a return without a team sends every flag home
            for team in round_state.flag_status:
                round_state.flag_status[team] = FlagStatus()
            return
        round_state.flag_status[event.team] = FlagStatus()
        self._record(event, event.team.opponent(), round_state)

    def _drop(self, event: Event, round_state: RoundState) -> None:
        if event.event_type == EventType.PLAYER_FRAGGED_PLAYER:
            dropper = event.player_to
        else:
            dropper = event.player_from
        if dropper is None:
            return
        if event.event_type == EventType.PLAYER_THREW_FLAG:
            dropper.round_stats.flag_throws += 1

        for status in round_state.flag_status.values():
            if dropper.is_same_player(status.carrier):
                self._credit_carry(status, event.require_game_time())
                self._record(event, dropper.team, round_state)

    def _capture(self, event: Event, round_state: RoundState) -> None:
        player = event.player_from
        for team, status in round_state.flag_status.items():
            if player is None or not player.is_same_player(status.carrier):
                continue
            stats = round_state.team_flag_stats[player.team] if player.team else None
            if status.bonus_active:
                event.event_type = EventType.PLAYER_CAPTURED_BONUS_FLAG
                if stats is not None:
                    stats.bonus_caps += 1
            if stats is not None:
                stats.caps += 1
            self._credit_carry(status, event.require_game_time())
            round_state.flag_status[team] = FlagStatus()
            self._record(event, player.team, round_state)
            return

        logger.warning(
            "Flag capture by %s who wasn't carrying a flag (line %d)",
            player.name if player else None,
            event.line_number,
        )

    @staticmethod
    def _credit_carry(status: FlagStatus, game_time: int) -> None:
        if status.carrier is not None and status.picked_up_at is not None:
            status.carrier.round_stats.flag_carry_time_in_seconds += max(0, game_time - status.picked_up_at)
        status.clear_carrier()

    @staticmethod
    def _require_team(event: Event) -> TeamColor:
        if event.team is None:
            raise PipelineInvariantError(
                f"expected team with a {event.event_type.value} event",
                line_number=event.line_number,
                raw_line=event.raw_line,
            )
        return event.team

    @staticmethod
    def _record(event: Event, team: TeamColor | None, round_state: RoundState) -> None:
        if team is not None:
            round_state.team_flag_stats[team].flag_events.append(event)

    # Post-main

    def _compute_points_per_cap(
        self, team: TeamColor, stats: TeamFlagRoundStats, round_state: RoundState
    ) -> None:
        settings = round_state.settings
        default = settings.default_points_per_cap
        stats.points_per_cap = default
        stats.points_per_bonus_cap = default
        if not round_state.saw_team_score_event or not stats.score or stats.caps == 0:
            return

        score = stats.score - stats.flag_hold_bonuses * settings.team_flag_hold_bonus_points
        if stats.bonus_caps > 0:
            # maps with a coast-to-coast bonus: assume regular caps keep the default value
            regular_caps = stats.caps - stats.bonus_caps
            stats.points_per_bonus_cap = (score - default * regular_caps) / stats.bonus_caps
            logger.info("Estimated points for a %s bonus cap: %s", team.label, stats.points_per_bonus_cap)
        else:
            stats.points_per_cap = score / stats.caps
        if stats.points_per_cap != default:
            logger.warning("Points per cap for %s is %s", team.label, stats.points_per_cap)

    def _build_scoring_activity(self, round_state: RoundState) -> ScoringActivity:
        hold_points = round_state.settings.team_flag_hold_bonus_points
        if not round_state.saw_team_score_event:
            # the server may have crashed before the log finished
            logger.warning("No final score in log; counting captures instead")

        movements: dict[int, list[FlagMovement]] = {}
        for team, stats in round_state.team_flag_stats.items():
            running = 0.0
            team_movements: list[FlagMovement] = []
            for event in stats.flag_events:
                if event.event_type == EventType.TEAM_FLAG_HOLD_BONUS:
                    running += hold_points
                elif event.event_type == EventType.PLAYER_CAPTURED_BONUS_FLAG:
                    running += stats.points_per_bonus_cap
                elif event.event_type == EventType.PLAYER_CAPTURED_FLAG:
                    running += stats.points_per_cap
                team_movements.append(self._movement(event, running))

            if round_state.saw_team_score_event:
                final = float(stats.score or 0)
            else:
                final = running
            if team in PLAYING_TEAMS or team_movements or stats.score is not None:
                round_state.scores[team] = final
            if team_movements:
                movements[int(team)] = team_movements

        return ScoringActivity(flag_movements=movements, round_length=max(0, round_state.round_end))

    @staticmethod
    def _movement(event: Event, running_score: float) -> FlagMovement:
        carrier: Player | None = event.player_from
        fragger: str | None = None
        if event.event_type == EventType.PLAYER_FRAGGED_PLAYER:
            carrier = event.player_to
            fragger = event.player_from.name if event.player_from else None
        return FlagMovement(
            game_time_as_seconds=event.require_game_time(),
            carrier=carrier.name if carrier else TEAM_ACTOR,
            current_score=running_score,
            type=_MOVEMENT_TYPES[event.event_type],
            fragger=fragger,
        )
