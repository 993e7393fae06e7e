"""Round and match orchestration.

A round runs parse -> phased trackers -> stats strictly in order. Rounds share
no state, so a two-round match can parse them on worker threads and join for
the comparison and awards.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from fortstats.config.settings import Settings, get_settings
from fortstats.contracts.common import TeamColor
from fortstats.contracts.output import MatchAwards, MatchPlayer, OutputStats, RoundComparison
from fortstats.core.domain.event import Event
from fortstats.core.domain.player import Player
from fortstats.core.domain.player_list import PlayerList
from fortstats.core.errors import ParsingError, RoundParseError
from fortstats.core.observability import (
    bind_round_context,
    clear_round_context,
    configure_logging,
    trace_stage,
)
from fortstats.core.parsing.log_parser import parse_log
from fortstats.core.pipeline.event_subscriber import EventSubscriberManager
from fortstats.core.pipeline.round_state import RoundState
from fortstats.core.stats.comparison import compare_rounds, compute_awards, match_players
from fortstats.core.stats.output import generate_output_stats
from fortstats.core.trackers import default_subscribers

logger = logging.getLogger(__name__)

MAX_ROUNDS = 2


@dataclass(frozen=True)
class RoundLog:
    """The full text of one round's server log."""

    text: str
    log_name: str


@dataclass
class RoundResult:
    log_name: str
    round_number: int
    events: list[Event]
    stats: OutputStats
    players: PlayerList
    teams: dict[TeamColor, list[Player]]
    round_state: RoundState


@dataclass
class MatchResult:
    rounds: list[RoundResult]
    players: list[MatchPlayer] = field(default_factory=list)
    comparison: RoundComparison | None = None
    awards: MatchAwards = field(default_factory=MatchAwards)


@trace_stage("parse_round")
def parse_round(
    text: str,
    log_name: str,
    round_number: int = 1,
    settings: Settings | None = None,
) -> RoundResult:
    """Parse one log and aggregate its stats.

    Raises:
        RoundParseError: if the log has no events, uses vocabulary or triggers
            with no mapping, or a tracker fails. Nothing partial is returned.
    """
    settings = settings or get_settings()
    bind_round_context(log_name, round_number)
    try:
        parsed = parse_log(text)
        if not parsed.events:
            raise ParsingError("no events found in log")

        round_state = RoundState(parsed.players, settings)
        manager = EventSubscriberManager(default_subscribers(), round_state)
        events = manager.handle_events(parsed.events)
        stats = generate_output_stats(events, round_state, log_name, round_number, settings)
    except ParsingError as e:
        raise RoundParseError(log_name, round_number, e) from e
    finally:
        clear_round_context()

    logger.info(
        "Round %d (%s): %d events on %s, score %s",
        round_number,
        log_name,
        len(events),
        stats.map,
        stats.score,
    )
    return RoundResult(
        log_name=log_name,
        round_number=round_number,
        events=events,
        stats=stats,
        players=parsed.players,
        teams=round_state.teams,
        round_state=round_state,
    )


def _check_round_count(logs: Sequence[RoundLog]) -> None:
    if not logs:
        raise ValueError("a match needs at least one round log")
    if len(logs) > MAX_ROUNDS:
        raise ValueError(f"a match has at most {MAX_ROUNDS} rounds, got {len(logs)}")


def _join_rounds(rounds: list[RoundResult], settings: Settings) -> MatchResult:
    round_stats = [r.stats for r in rounds]
    comparison = compare_rounds(round_stats[0], round_stats[1]) if len(round_stats) == 2 else None
    return MatchResult(
        rounds=rounds,
        players=match_players(round_stats),
        comparison=comparison,
        awards=compute_awards(round_stats, settings),
    )


@trace_stage("parse_match")
def parse_match(logs: Sequence[RoundLog], settings: Settings | None = None) -> MatchResult:
    """Parse one or two round logs in order and join them into a match."""
    _check_round_count(logs)
    settings = settings or get_settings()
    configure_logging(settings.app_log_level)
    rounds = [
        parse_round(log.text, log.log_name, round_number, settings)
        for round_number, log in enumerate(logs, start=1)
    ]
    return _join_rounds(rounds, settings)


@trace_stage("parse_match_async")
async def parse_match_async(
    logs: Sequence[RoundLog], settings: Settings | None = None
) -> MatchResult:
    """Like ``parse_match`` but parses the rounds concurrently on worker threads.

    A failing round surfaces as its RoundParseError; no partial match is
    returned.
    """
    _check_round_count(logs)
    settings = settings or get_settings()
    configure_logging(settings.app_log_level)
    rounds = await asyncio.gather(
        *(
            asyncio.to_thread(parse_round, log.text, log.log_name, round_number, settings)
            for round_number, log in enumerate(logs, start=1)
        )
    )
    return _join_rounds(list(rounds), settings)
