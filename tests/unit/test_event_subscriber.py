"""Phased event delivery: phase order, drop semantics and error wrapping."""

from datetime import datetime

import pytest

from fortstats.contracts.events import EventType
from fortstats.core.domain.event import Event
from fortstats.core.errors import PipelineInvariantError, SubscriberError
from fortstats.core.pipeline.event_subscriber import (
    ORDERED_PHASES,
    EventHandlingPhase,
    EventSubscriber,
    EventSubscriberManager,
    HandlerRequest,
    SubscriberRegistration,
)
from fortstats.core.pipeline.round_state import RoundState


def _event(line_number: int, event_type: EventType = EventType.SERVER_SAY) -> Event:
    return Event(
        event_type=event_type,
        line_number=line_number,
        timestamp=datetime(2019, 10, 26, 19, 30),
        raw_line=f"line {line_number}",
    )


class RecordingSubscriber(EventSubscriber):
    """Records every call; optionally drops or fails on chosen lines."""

    def __init__(
        self,
        label: str,
        calls: list[tuple[str, str, int | None]],
        drop_lines: frozenset[int] = frozenset(),
        fail_line: int | None = None,
    ) -> None:
        self.label = label
        self.calls = calls
        self.drop_lines = drop_lines
        self.fail_line = fail_line

    @property
    def name(self) -> str:
        return self.label

    def phase_start(self, phase: EventHandlingPhase, round_state: RoundState) -> None:
        self.calls.append((self.label, f"start:{phase.value}", None))

    def handle_event(
        self, event: Event, phase: EventHandlingPhase, round_state: RoundState
    ) -> HandlerRequest:
        if event.line_number == self.fail_line:
            raise KeyError("boom")
        self.calls.append((self.label, phase.value, event.line_number))
        if event.line_number in self.drop_lines:
            return HandlerRequest.REMOVE_EVENT
        return HandlerRequest.NONE

    def phase_end(self, phase: EventHandlingPhase, round_state: RoundState) -> None:
        self.calls.append((self.label, f"end:{phase.value}", None))


def test_phases_are_declared_in_execution_order() -> None:
    assert ORDERED_PHASES == (
        EventHandlingPhase.INITIAL,
        EventHandlingPhase.EARLY_FIXUPS,
        EventHandlingPhase.AFTER_GAME_TIME_EPOCH_ESTABLISHED,
        EventHandlingPhase.MAIN,
        EventHandlingPhase.POST_MAIN,
    )


def test_events_are_delivered_in_line_order_to_subscribers_in_registration_order(
    round_state: RoundState,
) -> None:
    calls: list[tuple[str, str, int | None]] = []
    first = RecordingSubscriber("first", calls)
    second = RecordingSubscriber("second", calls)
    manager = EventSubscriberManager(
        [
            SubscriberRegistration(first, (EventHandlingPhase.MAIN,)),
            SubscriberRegistration(second, (EventHandlingPhase.MAIN,)),
        ],
        round_state,
    )

    manager.handle_events([_event(2), _event(1)])

    assert calls == [
        ("first", "start:main", None),
        ("second", "start:main", None),
        ("first", "main", 1),
        ("second", "main", 1),
        ("first", "main", 2),
        ("second", "main", 2),
        ("first", "end:main", None),
        ("second", "end:main", None),
    ]


def test_phase_without_subscribers_is_skipped(round_state: RoundState) -> None:
    calls: list[tuple[str, str, int | None]] = []
    subscriber = RecordingSubscriber("only", calls)
    manager = EventSubscriberManager(
        [SubscriberRegistration(subscriber, (EventHandlingPhase.INITIAL, EventHandlingPhase.POST_MAIN))],
        round_state,
    )

    manager.handle_events([_event(1)])

    phases = [phase for _, phase, _ in calls]
    assert phases == [
        "start:initial",
        "initial",
        "end:initial",
        "start:post_main",
        "post_main",
        "end:post_main",
    ]
    assert manager.subscribers_for(EventHandlingPhase.MAIN) == []


def test_dropped_event_is_seen_by_all_subscribers_of_the_phase_then_removed(
    round_state: RoundState,
) -> None:
    calls: list[tuple[str, str, int | None]] = []
    dropper = RecordingSubscriber("dropper", calls, drop_lines=frozenset({2}))
    watcher = RecordingSubscriber("watcher", calls)
    manager = EventSubscriberManager(
        [
            SubscriberRegistration(dropper, (EventHandlingPhase.EARLY_FIXUPS,)),
            SubscriberRegistration(watcher, (EventHandlingPhase.EARLY_FIXUPS, EventHandlingPhase.MAIN)),
        ],
        round_state,
    )

    survivors = manager.handle_events([_event(1), _event(2), _event(3)])

    assert [e.line_number for e in survivors] == [1, 3]
    assert ("watcher", "early_fixups", 2) in calls
    assert ("watcher", "main", 2) not in calls
    assert [line for label, phase, line in calls if phase == "main"] == [1, 3]


def test_handler_exception_is_wrapped_with_subscriber_phase_and_line(
    round_state: RoundState,
) -> None:
    calls: list[tuple[str, str, int | None]] = []
    failing = RecordingSubscriber("Failing", calls, fail_line=2)
    manager = EventSubscriberManager(
        [SubscriberRegistration(failing, (EventHandlingPhase.MAIN,))], round_state
    )

    with pytest.raises(SubscriberError) as exc_info:
        manager.handle_events([_event(1), _event(2), _event(3)])

    error = exc_info.value
    assert error.subscriber == "Failing"
    assert error.phase == "main"
    assert error.line_number == 2
    assert error.raw_line == "line 2"
    assert isinstance(error.__cause__, KeyError)
    # processing stops at the failing line
    assert ("Failing", "main", 3) not in calls


def test_phase_hook_failure_is_wrapped_without_a_line(round_state: RoundState) -> None:
    class Broken(EventSubscriber):
        def phase_end(self, phase: EventHandlingPhase, round_state: RoundState) -> None:
            raise PipelineInvariantError("missing round end")

        def handle_event(
            self, event: Event, phase: EventHandlingPhase, round_state: RoundState
        ) -> HandlerRequest:
            return HandlerRequest.NONE

    manager = EventSubscriberManager(
        [SubscriberRegistration(Broken(), (EventHandlingPhase.POST_MAIN,))], round_state
    )

    with pytest.raises(SubscriberError) as exc_info:
        manager.handle_events([_event(1)])

    assert exc_info.value.subscriber == "Broken"
    assert exc_info.value.line_number is None
    assert isinstance(exc_info.value.__cause__, PipelineInvariantError)
