"""Stateful event subscribers and the default wiring of a round."""

from fortstats.core.pipeline.event_subscriber import EventHandlingPhase, SubscriberRegistration
from fortstats.core.trackers.class_tracker import ClassTracker
from fortstats.core.trackers.flag_movement_tracker import FlagMovementTracker
from fortstats.core.trackers.player_team_tracker import PlayerTeamTracker
from fortstats.core.trackers.pre_post_match_culler import PreAndPostMatchCuller
from fortstats.core.trackers.while_conced_tracker import WhileConcedTracker


def default_subscribers() -> list[SubscriberRegistration]:
    """Fresh subscribers for one round, in delivery order.

    Within a phase the order matters: team membership is updated before flag
    and conc state look at an event.
    """
    return [
        SubscriberRegistration(
            PreAndPostMatchCuller(),
            (EventHandlingPhase.INITIAL, EventHandlingPhase.EARLY_FIXUPS),
        ),
        SubscriberRegistration(ClassTracker(), (EventHandlingPhase.INITIAL,)),
        SubscriberRegistration(PlayerTeamTracker(), (EventHandlingPhase.MAIN,)),
        SubscriberRegistration(
            FlagMovementTracker(),
            (EventHandlingPhase.MAIN, EventHandlingPhase.POST_MAIN),
        ),
        SubscriberRegistration(WhileConcedTracker(), (EventHandlingPhase.MAIN,)),
    ]


__all__ = [
    "ClassTracker",
    "FlagMovementTracker",
    "PlayerTeamTracker",
    "PreAndPostMatchCuller",
    "WhileConcedTracker",
    "default_subscribers",
]
