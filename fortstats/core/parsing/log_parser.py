"""Whole-log parsing: raw text -> ordered Event sequence."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from fortstats.core.domain.event import Event
from fortstats.core.domain.player_list import PlayerList
from fortstats.core.parsing.grammar import LineParser

logger = logging.getLogger(__name__)


@dataclass
class ParsedLog:
    """Events of one log in line order, plus the players they reference."""

    events: list[Event]
    players: PlayerList
    line_count: int = 0
    skipped_lines: int = 0
    unrecognised_lines: list[int] = field(default_factory=list)


def parse_log(text: str, players: PlayerList | None = None) -> ParsedLog:
    """Parse every line of ``text``.

    Lines are numbered from 1 and the number becomes the event's identity.
    Unrecognised lines are skipped; vocabulary and two-actor trigger failures
    propagate to the caller.
    """
    players = players if players is not None else PlayerList()
    parser = LineParser(players)
    events: list[Event] = []
    skipped = 0
    unrecognised: list[int] = []

    lines = text.splitlines()
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            skipped += 1
            continue
        event = parser.parse_line(line, line_number)
        if event is None:
            skipped += 1
            unrecognised.append(line_number)
            continue
        events.append(event)

    logger.info(
        "Parsed %d events from %d lines (%d skipped, %d players)",
        len(events),
        len(lines),
        skipped,
        len(players),
    )
    return ParsedLog(
        events=events,
        players=players,
        line_count=len(lines),
        skipped_lines=skipped,
        unrecognised_lines=unrecognised,
    )
