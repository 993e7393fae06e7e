"""Marks events performed while the acting player was concussed."""

from __future__ import annotations

from fortstats.contracts.common import PlayerClass
from fortstats.contracts.events import EventType
from fortstats.core.domain.event import Event
from fortstats.core.errors import PipelineInvariantError
from fortstats.core.pipeline.event_subscriber import (
    EventHandlingPhase,
    EventSubscriber,
    HandlerRequest,
)
from fortstats.core.pipeline.round_state import RoundState

# Events after which the actor is no longer concussed.
ACTOR_RESET_EVENTS = frozenset(
    {
        EventType.PLAYER_COMMIT_SUICIDE,
        EventType.PLAYER_LEFT_SERVER,
        EventType.PLAYER_KICKED,
        EventType.PLAYER_JOIN_TEAM,
    }
)


class WhileConcedTracker(EventSubscriber):
    """Tracks the last conc applied to each account (RoundState.conc_times).

    An event is marked ``while_conced`` when its acting player was conced no
    more than the conc duration ago; medics shake it off in half the time.
    Dying, suiciding, leaving or switching teams clears the state.
    """

    PHASES = (EventHandlingPhase.MAIN,)

    def phase_start(self, phase: EventHandlingPhase, round_state: RoundState) -> None:
        if phase not in self.PHASES:
            raise PipelineInvariantError(f"unexpected phase {phase.value}")

    def handle_event(
        self, event: Event, phase: EventHandlingPhase, round_state: RoundState
    ) -> HandlerRequest:
        conc_times = round_state.conc_times

        if event.event_type == EventType.PLAYER_FRAGGED_PLAYER and event.player_to is not None:
            conc_times[event.player_to.steam_num] = None
        elif event.event_type in ACTOR_RESET_EVENTS and event.player_from is not None:
            conc_times[event.player_from.steam_num] = None

        if event.player_from is not None:
            last_conced = conc_times.get(event.player_from.steam_num)
            if last_conced is not None:
                is_medic = event.player_from_class == PlayerClass.MEDIC
                duration = round_state.settings.conc_duration_for(is_medic)
                if event.require_game_time() - last_conced <= duration:
                    event.while_conced = True

        # updated after marking so an event is judged on earlier concs only
        if event.event_type == EventType.PLAYER_CONCED and event.player_to is not None:
            conc_times[event.player_to.steam_num] = event.require_game_time()

        return HandlerRequest.NONE
