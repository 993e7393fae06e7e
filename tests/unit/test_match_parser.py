"""Round and match orchestration, sync and async."""

import logging
from collections.abc import Iterator

import pytest
from structlog.contextvars import get_contextvars

from conftest import FakePlayer, LogBuilder
from fortstats.config.settings import Settings
from fortstats.core.domain.event import Event
from fortstats.core.errors import RoundParseError, SubscriberError, UnknownVocabularyError
from fortstats.core.pipeline.event_subscriber import (
    EventHandlingPhase,
    EventSubscriber,
    HandlerRequest,
    SubscriberRegistration,
)
from fortstats.core.pipeline.round_state import RoundState
from fortstats.core.services import match_parser
from fortstats.core.services.match_parser import (
    RoundLog,
    parse_match,
    parse_match_async,
    parse_round,
)


@pytest.fixture
def match_logs(alice: FakePlayer, bob: FakePlayer) -> list[RoundLog]:
    first = (
        LogBuilder()
        .map_loading(0, "2fort")
        .join(1, alice, "Blue")
        .join(1, bob, "Red")
        .prematch_end(5)
        .frag(10, alice, bob)
        .trigger(20, alice, "Red Flag")
        .trigger(40, alice, "Team 1 dropoff")
        .team_score(65, "Blue", 10)
    )
    # sides swap for the second round
    second = (
        LogBuilder()
        .map_loading(0, "2fort")
        .join(1, bob, "Blue")
        .join(1, alice, "Red")
        .prematch_end(5)
        .frag(10, bob.on("Blue"), alice.on("Red"))
        .team_score(65, "Blue", 0)
    )
    return [RoundLog(first.text(), "round1.log"), RoundLog(second.text(), "round2.log")]


def test_two_round_match(match_logs: list[RoundLog]) -> None:
    result = parse_match(match_logs)

    assert [(r.round_number, r.log_name) for r in result.rounds] == [
        (1, "round1.log"),
        (2, "round2.log"),
    ]
    assert result.rounds[0].stats.score == {1: 10, 2: 0}
    assert result.comparison is not None
    assert (result.comparison.offense.caps, result.comparison.offense.kills) == (1, 0)
    assert result.awards.mvp is not None and result.awards.mvp.name == "Alice"
    assert [(p.name, p.team, p.rounds) for p in result.players] == [
        ("Alice", 1, [1, 2]),
        ("Bob", 2, [1, 2]),
    ]


@pytest.mark.asyncio
async def test_async_match_matches_the_sync_result(match_logs: list[RoundLog]) -> None:
    expected = parse_match(match_logs)

    result = await parse_match_async(match_logs)

    assert [r.round_number for r in result.rounds] == [1, 2]
    assert [r.stats.model_dump_json() for r in result.rounds] == [
        r.stats.model_dump_json() for r in expected.rounds
    ]
    assert result.comparison == expected.comparison
    assert result.awards == expected.awards


@pytest.fixture
def restore_root_level() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    level = root.level
    yield root
    root.setLevel(level)


def test_match_applies_the_configured_log_level(
    match_logs: list[RoundLog], restore_root_level: logging.Logger
) -> None:
    parse_match(match_logs, Settings(app_log_level="warning"))

    assert restore_root_level.level == logging.WARNING


@pytest.mark.asyncio
async def test_async_match_applies_the_configured_log_level(
    match_logs: list[RoundLog], restore_root_level: logging.Logger
) -> None:
    await parse_match_async(match_logs, Settings(app_log_level="DEBUG"))

    assert restore_root_level.level == logging.DEBUG


def test_single_round_has_no_comparison(match_logs: list[RoundLog]) -> None:
    result = parse_match(match_logs[:1])

    assert len(result.rounds) == 1
    assert result.comparison is None
    assert result.awards.top_flag_runner is not None
    assert result.awards.top_flag_runner.name == "Alice"


@pytest.mark.parametrize("count", [0, 3])
def test_match_needs_one_or_two_rounds(match_logs: list[RoundLog], count: int) -> None:
    logs = (match_logs * 2)[:count]

    with pytest.raises(ValueError):
        parse_match(logs)


def test_unknown_vocabulary_fails_the_round(log: LogBuilder, alice, bob) -> None:
    log.join(0, alice, "Blue").join(0, bob, "Red").frag(5, alice, bob, "banana")

    with pytest.raises(RoundParseError) as exc_info:
        parse_round(log.text(), "bad.log", round_number=2)

    error = exc_info.value
    assert (error.log_name, error.round_number, error.line_number) == ("bad.log", 2, 3)
    assert isinstance(error.__cause__, UnknownVocabularyError)
    assert "banana" in str(error)


def test_log_without_events_fails_the_round() -> None:
    with pytest.raises(RoundParseError, match="no events"):
        parse_round("garbage\nmore garbage\n", "empty.log")


class Exploding(EventSubscriber):
    def handle_event(
        self, event: Event, phase: EventHandlingPhase, round_state: RoundState
    ) -> HandlerRequest:
        raise RuntimeError("tracker bug")


def test_subscriber_failure_fails_the_round(monkeypatch, log: LogBuilder, alice, bob) -> None:
    monkeypatch.setattr(
        match_parser,
        "default_subscribers",
        lambda: [SubscriberRegistration(Exploding(), (EventHandlingPhase.MAIN,))],
    )
    log.join(0, alice, "Blue").frag(5, alice, bob)

    with pytest.raises(RoundParseError) as exc_info:
        parse_round(log.text(), "broken.log")

    cause = exc_info.value.__cause__
    assert isinstance(cause, SubscriberError)
    assert cause.subscriber == "Exploding"
    assert exc_info.value.line_number == 1


@pytest.mark.asyncio
async def test_async_match_surfaces_a_failing_round(
    match_logs: list[RoundLog], alice: FakePlayer, bob: FakePlayer
) -> None:
    broken = LogBuilder().join(0, alice, "Blue").frag(5, alice, bob, "banana")
    logs = [match_logs[0], RoundLog(broken.text(), "broken.log")]

    with pytest.raises(RoundParseError) as exc_info:
        await parse_match_async(logs)

    assert exc_info.value.round_number == 2


def test_round_context_is_cleared_after_a_failure() -> None:
    with pytest.raises(RoundParseError):
        parse_round("", "empty.log")

    assert "log_name" not in get_contextvars()
