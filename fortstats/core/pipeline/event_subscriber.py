"""Phased event delivery.

The manager makes one full pass over the event sequence per phase, in phase
order. Within a pass, every event goes to every subscriber registered for the
phase, in registration order. A subscriber may ask for the current event to be
removed; removals take effect once all subscribers have seen the event and are
invisible to later phases.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from fortstats.core.domain.event import Event
from fortstats.core.errors import SubscriberError

if TYPE_CHECKING:
    from fortstats.core.pipeline.round_state import RoundState

logger = logging.getLogger(__name__)

R = TypeVar("R")


class EventHandlingPhase(str, Enum):
    """Pipeline phases, declared in execution order."""

    INITIAL = "initial"
    EARLY_FIXUPS = "early_fixups"
    AFTER_GAME_TIME_EPOCH_ESTABLISHED = "after_game_time_epoch_established"
    MAIN = "main"
    POST_MAIN = "post_main"


ORDERED_PHASES: tuple[EventHandlingPhase, ...] = tuple(EventHandlingPhase)


class HandlerRequest(str, Enum):
    """What a subscriber wants done with the event it just handled."""

    NONE = "none"
    REMOVE_EVENT = "remove_event"


class EventSubscriber(ABC):
    """A stateful consumer of events during one or more phases."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def phase_start(self, phase: EventHandlingPhase, round_state: RoundState) -> None:
        """Called before the first event of ``phase``."""

    @abstractmethod
    def handle_event(
        self, event: Event, phase: EventHandlingPhase, round_state: RoundState
    ) -> HandlerRequest:
        """Observe one event; return REMOVE_EVENT to drop it from later phases."""

    def phase_end(self, phase: EventHandlingPhase, round_state: RoundState) -> None:
        """Called after the last event of ``phase``."""


@dataclass(frozen=True)
class SubscriberRegistration:
    subscriber: EventSubscriber
    phases: tuple[EventHandlingPhase, ...]


class EventSubscriberManager:
    """Drives registered subscribers through every phase of a round."""

    def __init__(
        self,
        registrations: Iterable[SubscriberRegistration],
        round_state: RoundState,
    ) -> None:
        self.round_state = round_state
        self._by_phase: dict[EventHandlingPhase, list[EventSubscriber]] = {
            phase: [] for phase in ORDERED_PHASES
        }
        for registration in registrations:
            for phase in registration.phases:
                self._by_phase[phase].append(registration.subscriber)

    def subscribers_for(self, phase: EventHandlingPhase) -> list[EventSubscriber]:
        return list(self._by_phase[phase])

    def handle_events(self, events: list[Event]) -> list[Event]:
        """Run all phases and return the events that survived.

        Any exception escaping a subscriber aborts processing and is re-raised
        as SubscriberError naming the subscriber, the phase and the line.
        """
        current = sorted(events, key=lambda e: e.line_number)
        for phase in ORDERED_PHASES:
            started = time.perf_counter()
            current = self._run_phase(phase, current)
            logger.debug(
                "Phase %s finished in %.1fms with %d events",
                phase.value,
                (time.perf_counter() - started) * 1000,
                len(current),
            )
        return current

    def _run_phase(self, phase: EventHandlingPhase, events: list[Event]) -> list[Event]:
        subscribers = self._by_phase[phase]
        if not subscribers:
            return events

        for subscriber in subscribers:
            self._call(subscriber, phase, None, subscriber.phase_start, phase, self.round_state)

        kept: list[Event] = []
        for event in events:
            remove = False
            for subscriber in subscribers:
                request = self._call(
                    subscriber,
                    phase,
                    event,
                    subscriber.handle_event,
                    event,
                    phase,
                    self.round_state,
                )
                if request == HandlerRequest.REMOVE_EVENT:
                    remove = True
            if not remove:
                kept.append(event)

        for subscriber in subscribers:
            self._call(subscriber, phase, None, subscriber.phase_end, phase, self.round_state)
        return kept

    @staticmethod
    def _call(
        subscriber: EventSubscriber,
        phase: EventHandlingPhase,
        event: Event | None,
        fn: Callable[..., R],
        *args: Any,
    ) -> R:
        try:
            return fn(*args)
        except Exception as e:
            raise SubscriberError(
                subscriber.name,
                phase.value,
                e,
                line_number=event.line_number if event is not None else None,
                raw_line=event.raw_line if event is not None else None,
            ) from e
