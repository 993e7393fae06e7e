"""Vocabulary mappings: every synonym resolves, unknown names fail loudly."""

import pytest

from fortstats.contracts.common import PlayerClass, TeamColor, Weapon
from fortstats.core.errors import ParsingError, UnknownVocabularyError
from fortstats.core.parsing.vocabulary import (
    parse_class,
    parse_optional_team,
    parse_team,
    parse_weapon,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("rocket", Weapon.ROCKET),
        ('with "rocket"', Weapon.ROCKET),
        ("ac", Weapon.AUTO_CANNON),
        ("assaultcannon", Weapon.AUTO_CANNON),
        ("sentrygun", Weapon.SENTRY_GUN),
        ("gl_grenade", Weapon.BLUE_PIPE),
        ("pipebomb", Weapon.GREEN_PIPE),
        ("Headshot", Weapon.HEADSHOT),
        ("world", Weapon.WORLD_SPAWN),
        ("trigger_hurt", Weapon.PIT),
    ],
)
def test_parse_weapon_synonyms(raw: str, expected: Weapon) -> None:
    assert parse_weapon(raw) is expected


def test_unknown_weapon_is_fatal_vocabulary_error() -> None:
    with pytest.raises(UnknownVocabularyError) as exc_info:
        parse_weapon("banana_gun")

    assert exc_info.value.vocabulary == "weapon"
    assert exc_info.value.value == "banana_gun"
    assert isinstance(exc_info.value, ParsingError)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Blue", TeamColor.BLUE),
        ("RED", TeamColor.RED),
        ("1", TeamColor.BLUE),
        ("2", TeamColor.RED),
        ("#Dustbowl_team1", TeamColor.BLUE),
        ("Spectator", TeamColor.SPECTATOR),
    ],
)
def test_parse_team(raw: str, expected: TeamColor) -> None:
    assert parse_team(raw) is expected


def test_optional_team_treats_empty_and_unassigned_as_no_team() -> None:
    assert parse_optional_team("") is None
    assert parse_optional_team("Unassigned") is None
    assert parse_optional_team("Red") is TeamColor.RED


def test_unknown_team_raises() -> None:
    with pytest.raises(UnknownVocabularyError, match="team"):
        parse_team("Purple")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Scout", PlayerClass.SCOUT),
        ("HWGuy", PlayerClass.HWGUY),
        ("hw guy", PlayerClass.HWGUY),
        ("Medic", PlayerClass.MEDIC),
        ("Engineer", PlayerClass.ENGINEER),
    ],
)
def test_parse_class(raw: str, expected: PlayerClass) -> None:
    assert parse_class(raw) is expected


def test_class_labels() -> None:
    assert PlayerClass.HWGUY.label == "HWGuy"
    assert PlayerClass.SOLDIER.label == "Soldier"
