"""String -> enum mappings for weapons, teams and player classes.

Each mapping covers every synonym observed in historical logs. A name with no
mapping raises UnknownVocabularyError: it means a new log dialect that needs an
explicit entry here, never a silent default.
"""

from __future__ import annotations

from typing import Final

from fortstats.contracts.common import PlayerClass, TeamColor, Weapon
from fortstats.core.errors import UnknownVocabularyError

WEAPON_NAMES: Final[dict[str, Weapon]] = {
    "normalgrenade": Weapon.NORMAL_GRENADE,
    "grenade": Weapon.NORMAL_GRENADE,
    "nailgrenade": Weapon.NAIL_GRENADE,
    "nailgren": Weapon.NAIL_GRENADE,
    "mirvgrenade": Weapon.MIRV_GRENADE,
    "mirvlet": Weapon.MIRV_GRENADE,
    "mirv": Weapon.MIRV_GRENADE,
    "empgrenade": Weapon.EMP_GRENADE,
    "emp": Weapon.EMP_GRENADE,
    "napalmgrenade": Weapon.NAPALM_GRENADE,
    "napalm": Weapon.NAPALM_GRENADE,
    "gasgrenade": Weapon.GAS_GRENADE,
    "caltrop": Weapon.CALTROP,
    "caltrops": Weapon.CALTROP,
    "supernails": Weapon.SUPERNAILS,
    "superng": Weapon.SUPERNAILS,
    "nails": Weapon.NAILS,
    "ng": Weapon.NAILS,
    "crowbar": Weapon.CROWBAR,
    "axe": Weapon.CROWBAR,
    "spanner": Weapon.SPANNER,
    "medikit": Weapon.MEDKIT,
    "medkit": Weapon.MEDKIT,
    "knife": Weapon.KNIFE,
    "shotgun": Weapon.SHOTGUN,
    "supershotgun": Weapon.SUPER_SHOTGUN,
    "rocket": Weapon.ROCKET,
    "ac": Weapon.AUTO_CANNON,
    "autocannon": Weapon.AUTO_CANNON,
    "assaultcannon": Weapon.AUTO_CANNON,
    "railgun": Weapon.RAILGUN,
    "flames": Weapon.FLAMES,
    "flamethrower": Weapon.FLAMES,
    "fire": Weapon.FLAMES,
    "incendiary": Weapon.FLAMES,
    "sniperrifle": Weapon.SNIPER_RIFLE,
    "headshot": Weapon.HEADSHOT,
    "autorifle": Weapon.AUTO_RIFLE,
    "tranq": Weapon.TRANQ,
    "infection": Weapon.INFECTION,
    "timer": Weapon.INFECTION,
    "sentrygun": Weapon.SENTRY_GUN,
    "sentry": Weapon.SENTRY_GUN,
    "building_dispenser": Weapon.BUILDING_DISPENSER,
    "building_sentrygun": Weapon.BUILDING_SENTRY_GUN,
    "pipebomb": Weapon.GREEN_PIPE,
    "gl_grenade": Weapon.BLUE_PIPE,
    "detpack": Weapon.DETPACK,
    "world": Weapon.WORLD_SPAWN,
    "worldspawn": Weapon.WORLD_SPAWN,
    "train": Weapon.TRAIN,
    "lasers": Weapon.LASERS,
    "laser": Weapon.LASERS,
    "pit": Weapon.PIT,
    "trigger_hurt": Weapon.PIT,
}

TEAM_NAMES: Final[dict[str, TeamColor]] = {
    "blue": TeamColor.BLUE,
    "red": TeamColor.RED,
    "yellow": TeamColor.YELLOW,
    "green": TeamColor.GREEN,
    "spectator": TeamColor.SPECTATOR,
    "spectators": TeamColor.SPECTATOR,
    "1": TeamColor.BLUE,
    "2": TeamColor.RED,
    "3": TeamColor.YELLOW,
    "4": TeamColor.GREEN,
    "#dustbowl_team1": TeamColor.BLUE,
    "#dustbowl_team2": TeamColor.RED,
    "#hunted_team1": TeamColor.BLUE,
    "#hunted_team2": TeamColor.RED,
    "#hunted_team3": TeamColor.YELLOW,
}

# Team markers in a player identity token that mean "not on a team yet".
NO_TEAM_NAMES: Final[frozenset[str]] = frozenset({"", "unassigned"})

CLASS_NAMES: Final[dict[str, PlayerClass]] = {
    "civilian": PlayerClass.CIVILIAN,
    "scout": PlayerClass.SCOUT,
    "sniper": PlayerClass.SNIPER,
    "soldier": PlayerClass.SOLDIER,
    "demoman": PlayerClass.DEMOMAN,
    "medic": PlayerClass.MEDIC,
    "hwguy": PlayerClass.HWGUY,
    "hw guy": PlayerClass.HWGUY,
    "heavy": PlayerClass.HWGUY,
    "pyro": PlayerClass.PYRO,
    "spy": PlayerClass.SPY,
    "engineer": PlayerClass.ENGINEER,
}


def _normalise(name: str) -> str:
    name = name.strip()
    if name.startswith("with "):
        name = name[len("with ") :]
    return name.replace('"', "").strip().lower()


def parse_weapon(name: str) -> Weapon:
    """Map a weapon string (optionally prefixed by ``with`` and quoted)."""
    key = _normalise(name)
    try:
        return WEAPON_NAMES[key]
    except KeyError:
        raise UnknownVocabularyError("weapon", key) from None


def parse_team(name: str) -> TeamColor:
    """Map a team name, case-insensitively."""
    key = _normalise(name)
    try:
        return TEAM_NAMES[key]
    except KeyError:
        raise UnknownVocabularyError("team", key) from None


def parse_optional_team(name: str) -> TeamColor | None:
    """Team marker from a player identity token; empty/unassigned means no team."""
    if _normalise(name) in NO_TEAM_NAMES:
        return None
    return parse_team(name)


def parse_class(name: str) -> PlayerClass:
    key = _normalise(name)
    try:
        return CLASS_NAMES[key]
    except KeyError:
        raise UnknownVocabularyError("class", key) from None
