"""Phased event delivery and the round state it mutates."""

from fortstats.core.pipeline.event_subscriber import (
    ORDERED_PHASES,
    EventHandlingPhase,
    EventSubscriber,
    EventSubscriberManager,
    HandlerRequest,
    SubscriberRegistration,
)
from fortstats.core.pipeline.round_state import FlagStatus, RoundState, TeamFlagRoundStats

__all__ = [
    "ORDERED_PHASES",
    "EventHandlingPhase",
    "EventSubscriber",
    "EventSubscriberManager",
    "HandlerRequest",
    "SubscriberRegistration",
    "FlagStatus",
    "RoundState",
    "TeamFlagRoundStats",
]
