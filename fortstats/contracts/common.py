"""
Common data types and base models for fortstats.
All models use Pydantic V2.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class TeamColor(int, Enum):
    """Team colors as numbered by the game server (1-based)."""

    BLUE = 1
    RED = 2
    YELLOW = 3
    GREEN = 4
    SPECTATOR = 5

    @property
    def label(self) -> str:
        return self.name.capitalize()

    def opponent(self) -> "TeamColor | None":
        """The other team on a two-team map; None for yellow/green/spectator."""
        if self is TeamColor.BLUE:
            return TeamColor.RED
        if self is TeamColor.RED:
            return TeamColor.BLUE
        return None


PLAYING_TEAMS: tuple[TeamColor, ...] = (TeamColor.BLUE, TeamColor.RED)


class PlayerClass(int, Enum):
    """Player classes."""

    CIVILIAN = 0
    SCOUT = 1
    SNIPER = 2
    SOLDIER = 3
    DEMOMAN = 4
    MEDIC = 5
    HWGUY = 6
    PYRO = 7
    SPY = 8
    ENGINEER = 9

    @property
    def label(self) -> str:
        return "HWGuy" if self is PlayerClass.HWGUY else self.name.capitalize()


class Weapon(str, Enum):
    """Weapons and other causes of death."""

    NONE = "none"
    NORMAL_GRENADE = "normal_grenade"
    NAIL_GRENADE = "nail_grenade"
    MIRV_GRENADE = "mirv_grenade"
    EMP_GRENADE = "emp_grenade"
    NAPALM_GRENADE = "napalm_grenade"
    GAS_GRENADE = "gas_grenade"
    CALTROP = "caltrop"
    SUPERNAILS = "supernails"
    NAILS = "nails"
    CROWBAR = "crowbar"
    SPANNER = "spanner"
    MEDKIT = "medkit"
    KNIFE = "knife"
    SHOTGUN = "shotgun"
    SUPER_SHOTGUN = "super_shotgun"
    ROCKET = "rocket"
    AUTO_CANNON = "auto_cannon"
    RAILGUN = "railgun"
    FLAMES = "flames"
    SNIPER_RIFLE = "sniper_rifle"
    HEADSHOT = "headshot"
    AUTO_RIFLE = "auto_rifle"
    TRANQ = "tranq"
    INFECTION = "infection"
    SENTRY_GUN = "sentry_gun"
    BUILDING_DISPENSER = "building_dispenser"
    BUILDING_SENTRY_GUN = "building_sentry_gun"
    GREEN_PIPE = "green_pipe"
    BLUE_PIPE = "blue_pipe"
    DETPACK = "detpack"
    WORLD_SPAWN = "world_spawn"
    TRAIN = "train"
    LASERS = "lasers"
    PIT = "pit"


class BuildingKind(str, Enum):
    """Engineer buildings."""

    SENTRY_GUN = "sentry_gun"
    DISPENSER = "dispenser"
    TELEPORTER_ENTRANCE = "teleporter_entrance"
    TELEPORTER_EXIT = "teleporter_exit"


class TeamRole(str, Enum):
    """Offense/defense designation, assigned by team number."""

    OFFENSE = "offense"
    DEFENSE = "defense"

    @classmethod
    def for_team(cls, team: TeamColor | int) -> "TeamRole":
        return cls.OFFENSE if int(team) == TeamColor.BLUE else cls.DEFENSE


class FlagMovementType(str, Enum):
    """How a flag changed hands, for scoring activity samples."""

    PICKUP = "pickup"
    FRAGGED = "fragged"
    THROWN = "thrown"
    DROPPED = "dropped"
    RETURNED = "returned"
    CAPTURED = "captured"


class BaseContract(BaseModel):
    """Base model for all output contracts with common configuration."""

    model_config = ConfigDict(
        # Validate data on assignment
        validate_assignment=True,
        # Use enum values in JSON
        use_enum_values=True,
        # Forbid extra fields to ensure data integrity
        extra="forbid",
    )
