"""Round and match entry points."""

from fortstats.core.services.match_parser import (
    MatchResult,
    RoundLog,
    RoundResult,
    parse_match,
    parse_match_async,
    parse_round,
)

__all__ = [
    "MatchResult",
    "RoundLog",
    "RoundResult",
    "parse_match",
    "parse_match_async",
    "parse_round",
]
