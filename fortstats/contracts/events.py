"""
Event kinds produced by the line grammar.
The set is closed: every parsed line maps to exactly one of these or to nothing.
"""

from enum import Enum


class EventType(str, Enum):
    """All possible event kinds in a server log."""

    # Server / world
    START_LOG = "START_LOG"
    END_LOG = "END_LOG"
    MAP_LOADING = "MAP_LOADING"
    MAP_LOADED = "MAP_LOADED"
    SERVER_CVAR_START = "SERVER_CVAR_START"
    SERVER_CVAR = "SERVER_CVAR"
    SERVER_CVAR_END = "SERVER_CVAR_END"
    SERVER_NAME = "SERVER_NAME"
    SERVER_SAY = "SERVER_SAY"
    RCON_COMMAND = "RCON_COMMAND"
    BAD_RCON = "BAD_RCON"
    WORLD_TRIGGER = "WORLD_TRIGGER"
    PREMATCH_END = "PREMATCH_END"
    SERVER_SWITCH_SIDES = "SERVER_SWITCH_SIDES"
    SERVER_GATES_OPEN = "SERVER_GATES_OPEN"
    SECURITY_UP = "SECURITY_UP"
    FLAG_RETURN = "FLAG_RETURN"
    TEAM_SCORE = "TEAM_SCORE"
    TEAM_FLAG_HOLD_BONUS = "TEAM_FLAG_HOLD_BONUS"

    # Single actor
    PLAYER_JOIN_SERVER = "PLAYER_JOIN_SERVER"
    PLAYER_LEFT_SERVER = "PLAYER_LEFT_SERVER"
    PLAYER_KICKED = "PLAYER_KICKED"
    PLAYER_JOIN_TEAM = "PLAYER_JOIN_TEAM"
    PLAYER_CHANGE_ROLE = "PLAYER_CHANGE_ROLE"
    PLAYER_CHANGED_NAME = "PLAYER_CHANGED_NAME"
    PLAYER_SPAWN = "PLAYER_SPAWN"
    PLAYER_COMMIT_SUICIDE = "PLAYER_COMMIT_SUICIDE"
    PLAYER_MM1 = "PLAYER_MM1"
    PLAYER_MM2 = "PLAYER_MM2"
    PLAYER_DETPACK_SET = "PLAYER_DETPACK_SET"
    PLAYER_DETPACK_EXPLODE = "PLAYER_DETPACK_EXPLODE"
    PLAYER_BUILT_SENTRY_GUN = "PLAYER_BUILT_SENTRY_GUN"
    PLAYER_BUILT_DISPENSER = "PLAYER_BUILT_DISPENSER"
    PLAYER_BUILT_TELEPORTER = "PLAYER_BUILT_TELEPORTER"
    PLAYER_UPGRADED_GUN = "PLAYER_UPGRADED_GUN"
    PLAYER_REPAIRED_BUILDING = "PLAYER_REPAIRED_BUILDING"
    PLAYER_DETONATED_BUILDING = "PLAYER_DETONATED_BUILDING"
    PLAYER_DISMANTLED_BUILDING = "PLAYER_DISMANTLED_BUILDING"
    PLAYER_PICKED_UP_FLAG = "PLAYER_PICKED_UP_FLAG"
    PLAYER_PICKED_UP_BONUS_FLAG = "PLAYER_PICKED_UP_BONUS_FLAG"
    PLAYER_THREW_FLAG = "PLAYER_THREW_FLAG"
    PLAYER_CAPTURED_FLAG = "PLAYER_CAPTURED_FLAG"
    PLAYER_CAPTURED_BONUS_FLAG = "PLAYER_CAPTURED_BONUS_FLAG"
    PLAYER_CAPTURED_ARENA_OWN = "PLAYER_CAPTURED_ARENA_OWN"
    PLAYER_CAPTURED_ARENA_CENTER = "PLAYER_CAPTURED_ARENA_CENTER"
    PLAYER_CAPTURED_ARENA_OPPONENT = "PLAYER_CAPTURED_ARENA_OPPONENT"
    PLAYER_GOT_SECURITY = "PLAYER_GOT_SECURITY"
    PLAYER_OPENED_DETPACK_ENTRANCE = "PLAYER_OPENED_DETPACK_ENTRANCE"

    # Two actors
    PLAYER_FRAGGED_PLAYER = "PLAYER_FRAGGED_PLAYER"
    PLAYER_FRAGGED_GUN = "PLAYER_FRAGGED_GUN"
    PLAYER_FRAGGED_DISPENSER = "PLAYER_FRAGGED_DISPENSER"
    PLAYER_FRAGGED_TELEPORTER = "PLAYER_FRAGGED_TELEPORTER"
    PLAYER_CONCED = "PLAYER_CONCED"
    PLAYER_CALTROPPED_PLAYER = "PLAYER_CALTROPPED_PLAYER"
    PLAYER_HIT_AIRSHOT = "PLAYER_HIT_AIRSHOT"
    PLAYER_TRANQED_PLAYER = "PLAYER_TRANQED_PLAYER"
    PLAYER_HALLUCINATED_PLAYER = "PLAYER_HALLUCINATED_PLAYER"
    PLAYER_INFECTED_PLAYER = "PLAYER_INFECTED_PLAYER"
    PLAYER_PASSED_INFECTION = "PLAYER_PASSED_INFECTION"
    PLAYER_CURED_INFECTION = "PLAYER_CURED_INFECTION"
    PLAYER_CURED_HALLUCINATIONS = "PLAYER_CURED_HALLUCINATIONS"
    PLAYER_CURED_TRANQUILISATION = "PLAYER_CURED_TRANQUILISATION"
    PLAYER_REVEALED_SPY = "PLAYER_REVEALED_SPY"
    PLAYER_DOUSED_FIRE = "PLAYER_DOUSED_FIRE"
    PLAYER_DETPACK_DISARM = "PLAYER_DETPACK_DISARM"
    PLAYER_UPGRADED_OTHER_GUN = "PLAYER_UPGRADED_OTHER_GUN"
    PLAYER_HEAL = "PLAYER_HEAL"
    PLAYER_DAMAGE = "PLAYER_DAMAGE"


# Events kept even when they fall outside the [match start, match end] window;
# they carry setup/context needed by later stats.
EVENTS_NOT_TO_CULL: frozenset[EventType] = frozenset(
    {
        EventType.MAP_LOADING,
        EventType.SERVER_NAME,
        EventType.PLAYER_JOIN_TEAM,
        EventType.PLAYER_CHANGE_ROLE,
        EventType.PLAYER_MM1,
        EventType.PLAYER_MM2,
        EventType.SERVER_SAY,
        EventType.SERVER_CVAR,
        EventType.PREMATCH_END,
        EventType.TEAM_SCORE,
    }
)

FLAG_CAPTURE_EVENTS: frozenset[EventType] = frozenset(
    {EventType.PLAYER_CAPTURED_FLAG, EventType.PLAYER_CAPTURED_BONUS_FLAG}
)
