"""Per-player class occupancy, and class stamping on events."""

from __future__ import annotations

from fortstats.contracts.events import EventType
from fortstats.core.domain.event import Event
from fortstats.core.errors import PipelineInvariantError
from fortstats.core.pipeline.event_subscriber import (
    EventHandlingPhase,
    EventSubscriber,
    HandlerRequest,
)
from fortstats.core.pipeline.round_state import RoundState

CLASS_ENDING_EVENTS = frozenset(
    {EventType.PLAYER_JOIN_TEAM, EventType.PLAYER_LEFT_SERVER, EventType.PLAYER_KICKED}
)


class ClassTracker(EventSubscriber):
    """Runs in the Initial phase, before game time exists.

    Intervals are therefore measured in line numbers: a role change closes the
    previous interval at the line before it and opens a new one. Every other
    event gets its actors' current classes stamped on it, so a kill can be
    attributed to "killed as Soldier" even though class and kill are logged on
    different lines.
    """

    PHASES = (EventHandlingPhase.INITIAL,)

    def phase_start(self, phase: EventHandlingPhase, round_state: RoundState) -> None:
        if phase not in self.PHASES:
            raise PipelineInvariantError(f"unexpected phase {phase.value}")

    def handle_event(
        self, event: Event, phase: EventHandlingPhase, round_state: RoundState
    ) -> HandlerRequest:
        if event.event_type == EventType.PLAYER_CHANGE_ROLE:
            player_class = event.data.player_class if event.data else None
            if event.player_from is None or player_class is None:
                raise PipelineInvariantError(
                    "role change without player or class",
                    line_number=event.line_number,
                    raw_line=event.raw_line,
                )
            event.player_from.record_class_start(player_class, event.line_number)
            return HandlerRequest.NONE

        if event.event_type in CLASS_ENDING_EVENTS and event.player_from is not None:
            event.player_from.record_class_end(event.line_number)

        if event.player_from is not None:
            event.player_from_class = event.player_from.current_class
        if event.player_to is not None:
            event.player_to_class = event.player_to.current_class
        return HandlerRequest.NONE
