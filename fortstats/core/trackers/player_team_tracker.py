"""Team membership over the course of a round."""

from __future__ import annotations

import logging

from fortstats.contracts.common import TeamColor
from fortstats.contracts.events import EventType
from fortstats.core.domain.event import Event
from fortstats.core.domain.player import Player
from fortstats.core.errors import PipelineInvariantError
from fortstats.core.pipeline.event_subscriber import (
    EventHandlingPhase,
    EventSubscriber,
    HandlerRequest,
)
from fortstats.core.pipeline.round_state import RoundState

logger = logging.getLogger(__name__)


class PlayerTeamTracker(EventSubscriber):
    """Keeps RoundState's current and all-time team snapshots up to date.

    A join moves the account onto the new team (as the Player for that team),
    closing its membership interval on any previous team. Leaving or being
    kicked removes the account from its team.
    """

    PHASES = (EventHandlingPhase.MAIN,)

    def phase_start(self, phase: EventHandlingPhase, round_state: RoundState) -> None:
        if phase not in self.PHASES:
            raise PipelineInvariantError(f"unexpected phase {phase.value}")

    def handle_event(
        self, event: Event, phase: EventHandlingPhase, round_state: RoundState
    ) -> HandlerRequest:
        if event.event_type == EventType.PLAYER_JOIN_TEAM:
            if event.team is None or event.player_from is None:
                raise PipelineInvariantError(
                    "expected player and team with a 'joined team' event",
                    line_number=event.line_number,
                    raw_line=event.raw_line,
                )
            self.set_player_team(event.player_from, event.team, event.require_game_time(), round_state)
        elif event.event_type in (EventType.PLAYER_LEFT_SERVER, EventType.PLAYER_KICKED):
            if event.player_from is not None:
                self.set_player_team(event.player_from, None, event.require_game_time(), round_state)
        elif event.event_type == EventType.PLAYER_CHANGED_NAME:
            if event.player_from is not None and event.value:
                for player in round_state.players.players_for_account(event.player_from.steam_id):
                    player.add_name(event.value)
        return HandlerRequest.NONE

    def phase_end(self, phase: EventHandlingPhase, round_state: RoundState) -> None:
        round_end = round_state.round_end
        for members in round_state.current_teams.values():
            for player in members:
                player.record_leave_team_time(round_end)

    def set_player_team(
        self,
        player: Player,
        team: TeamColor | None,
        game_time: int,
        round_state: RoundState,
    ) -> None:
        current = round_state.team_of(player)
        if current is not None and current != team:
            # close membership on the team the account is leaving
            previous = round_state.players.get_player(player.steam_id, current)
            if previous is not None:
                previous.record_leave_team_time(game_time)

        if team is None:
            round_state.remove_from_teams(player)
            return

        team_player = round_state.players.ensure_player(
            player.steam_id, player.name, player.player_id, team
        )
        if team_player is None:
            raise PipelineInvariantError(f"couldn't get player {player.steam_id}")
        if round_state.is_on_team(team_player, team):
            logger.debug("%s joined %s again at %ds", team_player.name, team.label, game_time)
            return
        team_player.record_join_team_time(game_time)
        round_state.add_to_team(team_player, team)
        logger.debug("%s joined %s at %ds", team_player.name, team.label, game_time)
