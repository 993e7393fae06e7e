"""Domain objects: events, players and time intervals."""

from fortstats.core.domain.event import Event, EventData
from fortstats.core.domain.player import Player, PlayerRoundStats
from fortstats.core.domain.player_list import PlayerList
from fortstats.core.domain.time_interval import TimeInterval, TimeIntervalWithContext

__all__ = [
    "Event",
    "EventData",
    "Player",
    "PlayerRoundStats",
    "PlayerList",
    "TimeInterval",
    "TimeIntervalWithContext",
]
