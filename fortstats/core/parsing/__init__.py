"""Log line grammar and vocabulary mappings."""

from fortstats.core.parsing.grammar import LineParser
from fortstats.core.parsing.log_parser import ParsedLog, parse_log
from fortstats.core.parsing.map_triggers import MAP_TRIGGER_RULES, MapTriggerRule, match_map_trigger

__all__ = [
    "LineParser",
    "ParsedLog",
    "parse_log",
    "MAP_TRIGGER_RULES",
    "MapTriggerRule",
    "match_map_trigger",
]
