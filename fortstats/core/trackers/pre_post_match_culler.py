"""Establishes the match window and the game clock, and trims setup chatter."""

from __future__ import annotations

import logging
from typing import cast

from fortstats.contracts.events import EVENTS_NOT_TO_CULL, EventType
from fortstats.core.domain.event import Event
from fortstats.core.errors import PipelineInvariantError
from fortstats.core.pipeline.event_subscriber import (
    EventHandlingPhase,
    EventSubscriber,
    HandlerRequest,
)
from fortstats.core.pipeline.round_state import RoundState

logger = logging.getLogger(__name__)


class PreAndPostMatchCuller(EventSubscriber):
    """Initial: find the match start/end events.

    EarlyFixups: stamp every event's game time relative to the start (negative
    before it), repair wall-clock adjustments so the clock never runs
    backwards, and drop events outside [start, end] unless their kind is
    allow-listed.
    """

    PHASES = (EventHandlingPhase.INITIAL, EventHandlingPhase.EARLY_FIXUPS)

    def __init__(self) -> None:
        self._start: Event | None = None
        self._end: Event | None = None
        self._last: Event | None = None
        self._previous_game_time: int | None = None
        self._adjustment = 0

    def phase_start(self, phase: EventHandlingPhase, round_state: RoundState) -> None:
        if phase not in self.PHASES:
            raise PipelineInvariantError(f"unexpected phase {phase.value}")
        if phase is EventHandlingPhase.EARLY_FIXUPS:
            if self._end is None:
                self._end = self._last
            round_state.match_start_event = self._start
            round_state.match_end_event = self._end

    def handle_event(
        self, event: Event, phase: EventHandlingPhase, round_state: RoundState
    ) -> HandlerRequest:
        if phase is EventHandlingPhase.INITIAL:
            # the first event stands in until a prematch end shows up
            if self._start is None or event.event_type == EventType.PREMATCH_END:
                self._start = event
            if event.event_type == EventType.TEAM_SCORE:
                self._end = event
            self._last = event
            return HandlerRequest.NONE

        if self._start is None or self._end is None:
            raise PipelineInvariantError("match window not established")
        self._stamp_game_time(event, round_state)

        outside = event.line_number < self._start.line_number or event.line_number > self._end.line_number
        if outside and event.event_type not in EVENTS_NOT_TO_CULL:
            return HandlerRequest.REMOVE_EVENT
        return HandlerRequest.NONE

    def phase_end(self, phase: EventHandlingPhase, round_state: RoundState) -> None:
        if phase is EventHandlingPhase.EARLY_FIXUPS and self._end is not None:
            round_state.round_end_time_in_game_seconds = self._end.require_game_time()
            logger.debug(
                "Match window: lines %d-%d, %ds",
                self._start.line_number if self._start else 0,
                self._end.line_number,
                round_state.round_end_time_in_game_seconds,
            )

    def _stamp_game_time(self, event: Event, round_state: RoundState) -> None:
        start = cast(Event, self._start)
        game_time = round((event.timestamp - start.timestamp).total_seconds())

        previous = self._previous_game_time
        if previous is not None:
            game_time += self._adjustment
            threshold = round_state.settings.clock_jump_threshold_seconds
            if game_time < previous or game_time > previous + threshold:
                self._adjustment += previous - game_time
                logger.info(
                    "Clock adjustment of %ds starting on line %d",
                    self._adjustment,
                    event.line_number,
                )
                game_time = previous
        event.game_time_as_seconds = game_time
        self._previous_game_time = game_time
