"""Pytest configuration and shared fixtures for fortstats tests.

Logs are built line by line with ``LogBuilder`` so each test states exactly the
events it cares about. Times are seconds after BASE_TIME.
"""

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

import pytest

from fortstats.config.settings import Settings
from fortstats.core.domain.player_list import PlayerList
from fortstats.core.parsing.grammar import LineParser
from fortstats.core.pipeline.round_state import RoundState

BASE_TIME = datetime(2019, 10, 26, 19, 30, 0)


@dataclass(frozen=True)
class FakePlayer:
    """A player identity token as printed in server logs."""

    name: str
    uid: int
    steam: str
    team: str = ""

    @property
    def steam_id(self) -> str:
        return f"STEAM_{self.steam}"

    def token(self, team: str | None = None) -> str:
        team = self.team if team is None else team
        return f'"{self.name}<{self.uid}><{self.steam_id}><{team}>"'

    def on(self, team: str) -> "FakePlayer":
        return replace(self, team=team)

    def __str__(self) -> str:
        return self.token()


def log_line(seconds: int, content: str, start: datetime = BASE_TIME) -> str:
    stamp = (start + timedelta(seconds=seconds)).strftime("%m/%d/%Y - %H:%M:%S")
    return f"L {stamp}: {content}"


class LogBuilder:
    """Accumulates log lines; every method returns the builder for chaining."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.start = start
        self.lines: list[str] = []

    def line(self, seconds: int, content: str) -> "LogBuilder":
        self.lines.append(log_line(seconds, content, self.start))
        return self

    # server

    def map_loading(self, seconds: int, name: str) -> "LogBuilder":
        return self.line(seconds, f'Loading map "{name}"')

    def server_name(self, seconds: int, name: str) -> "LogBuilder":
        return self.line(seconds, f'Server name is "{name}"')

    def prematch_end(self, seconds: int) -> "LogBuilder":
        return self.line(seconds, 'World triggered "Match_Begins_Now"')

    def world(self, seconds: int, name: str) -> "LogBuilder":
        return self.line(seconds, f'World triggered "{name}"')

    def team_score(self, seconds: int, team: str, score: int, players: int = 4) -> "LogBuilder":
        return self.line(seconds, f'Team "{team}" scored "{score}" with "{players}" players')

    # one player

    def join(self, seconds: int, player: FakePlayer, team: str) -> "LogBuilder":
        return self.line(seconds, f'{player.token("")} joined team "{team}"')

    def role(self, seconds: int, player: FakePlayer, player_class: str) -> "LogBuilder":
        return self.line(seconds, f'{player} changed role to "{player_class}"')

    def trigger(self, seconds: int, player: FakePlayer, name: str) -> "LogBuilder":
        return self.line(seconds, f'{player} triggered "{name}"')

    def suicide(self, seconds: int, player: FakePlayer, weapon: str = "world") -> "LogBuilder":
        return self.line(seconds, f'{player} committed suicide with "{weapon}"')

    def disconnect(self, seconds: int, player: FakePlayer) -> "LogBuilder":
        return self.line(seconds, f"{player} disconnected")

    # two players

    def frag(
        self, seconds: int, killer: FakePlayer, victim: FakePlayer, weapon: str = "rocket"
    ) -> "LogBuilder":
        return self.line(seconds, f'{killer} killed {victim} with "{weapon}"')

    def effect(
        self,
        seconds: int,
        actor: FakePlayer,
        target: FakePlayer,
        effect: str,
        suffix: str = "",
    ) -> "LogBuilder":
        content = f'{actor} triggered "{effect}" against {target}'
        if suffix:
            content = f"{content} {suffix}"
        return self.line(seconds, content)

    def conc(self, seconds: int, actor: FakePlayer, target: FakePlayer) -> "LogBuilder":
        return self.effect(seconds, actor, target, "Concussion_Grenade")

    def text(self) -> str:
        return "\n".join(self.lines) + "\n"


@pytest.fixture
def log() -> LogBuilder:
    return LogBuilder()


@pytest.fixture
def make_player() -> Callable[..., FakePlayer]:
    return FakePlayer


@pytest.fixture
def alice() -> FakePlayer:
    return FakePlayer("Alice", 2, "0:1:1001", "Blue")


@pytest.fixture
def bob() -> FakePlayer:
    return FakePlayer("Bob", 3, "0:1:1002", "Red")


@pytest.fixture
def carol() -> FakePlayer:
    return FakePlayer("Carol", 4, "0:0:1003", "Blue")


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def players() -> PlayerList:
    return PlayerList()


@pytest.fixture
def parser(players: PlayerList) -> LineParser:
    return LineParser(players)


@pytest.fixture
def round_state(players: PlayerList, settings: Settings) -> RoundState:
    return RoundState(players, settings)
