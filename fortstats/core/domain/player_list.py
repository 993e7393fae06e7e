"""Registry of the players seen during a round."""

from __future__ import annotations

from collections.abc import Iterator

from fortstats.contracts.common import TeamColor
from fortstats.core.domain.player import Player


class PlayerList:
    """Owns every Player of a round, keyed by (steam number, team).

    ``ensure_player`` is idempotent: an id already seen on the same team returns
    the existing instance (recording any new display name or in-round handle);
    the same id on another team yields a new logical player.
    """

    def __init__(self) -> None:
        self._players: dict[tuple[str, TeamColor | None], Player] = {}

    @staticmethod
    def _steam_num(steam_id: str) -> str:
        return steam_id.removeprefix("STEAM_")

    def ensure_player(
        self,
        steam_id: str,
        name: str | None = None,
        player_id: int | None = None,
        team: TeamColor | None = None,
    ) -> Player | None:
        key = (self._steam_num(steam_id), team)
        player = self._players.get(key)
        if player is not None:
            if name is not None:
                player.add_name(name)
            if player_id is not None:
                player.add_player_id(player_id)
            return player

        if name is None or player_id is None:
            # reuse the account's last known name when moving it to a new team
            known = self.players_for_account(steam_id)
            if not known:
                return None
            name = known[-1].name if name is None else name
            player_id = known[-1].player_id if player_id is None else player_id

        player = Player(steam_id, name, player_id, team)
        self._players[key] = player
        return player

    def get_player(self, steam_id: str, team: TeamColor | None = None) -> Player | None:
        return self._players.get((self._steam_num(steam_id), team))

    def players_for_account(self, steam_id: str) -> list[Player]:
        steam_num = self._steam_num(steam_id)
        return [p for (num, _), p in self._players.items() if num == steam_num]

    @property
    def players(self) -> list[Player]:
        return list(self._players.values())

    def __len__(self) -> int:
        return len(self._players)

    def __iter__(self) -> Iterator[Player]:
        return iter(list(self._players.values()))
