"""Player identity, the round's player registry and time intervals."""

from fortstats.contracts.common import PlayerClass, TeamColor
from fortstats.core.domain.player import Player
from fortstats.core.domain.player_list import PlayerList
from fortstats.core.domain.time_interval import TimeInterval, TimeIntervalWithContext


def test_ensure_player_is_idempotent_per_team() -> None:
    players = PlayerList()

    first = players.ensure_player("STEAM_0:1:1", "Alice", 2, TeamColor.BLUE)
    again = players.ensure_player("STEAM_0:1:1", "Alice", 2, TeamColor.BLUE)

    assert first is again
    assert len(players) == 1


def test_same_account_on_another_team_is_a_new_player() -> None:
    players = PlayerList()

    blue = players.ensure_player("STEAM_0:1:1", "Alice", 2, TeamColor.BLUE)
    red = players.ensure_player("STEAM_0:1:1", "Alice", 2, TeamColor.RED)

    assert blue is not red
    assert blue is not None and red is not None
    assert blue.is_same_account(red)
    assert not blue.is_same_player(red)
    assert players.players_for_account("STEAM_0:1:1") == [blue, red]


def test_iterating_the_registry_yields_players_in_creation_order() -> None:
    players = PlayerList()
    alice = players.ensure_player("STEAM_0:1:1", "Alice", 2, TeamColor.BLUE)
    bob = players.ensure_player("STEAM_0:1:2", "Bob", 3, TeamColor.RED)

    assert [player for player in players] == [alice, bob]


def test_new_name_is_recorded_and_becomes_the_display_name() -> None:
    players = PlayerList()
    players.ensure_player("STEAM_0:1:1", "Alice", 2, TeamColor.BLUE)

    player = players.ensure_player("STEAM_0:1:1", "Alicia", 9, TeamColor.BLUE)

    assert player is not None
    assert player.name == "Alicia"
    assert player.names == ("Alice", "Alicia")
    assert player.player_ids == (2, 9)


def test_unknown_account_without_name_is_not_created() -> None:
    players = PlayerList()

    assert players.ensure_player("STEAM_0:1:1", team=TeamColor.RED) is None


def test_known_account_moves_team_with_last_name() -> None:
    players = PlayerList()
    players.ensure_player("STEAM_0:1:1", "Alice", 2)

    moved = players.ensure_player("STEAM_0:1:1", team=TeamColor.RED)

    assert moved is not None
    assert moved.name == "Alice"
    assert moved.team is TeamColor.RED
    assert players.get_player("STEAM_0:1:1", TeamColor.RED) is moved


def test_steam_prefix_is_normalised() -> None:
    player = Player("STEAM_0:0:42", "Dave", 5, TeamColor.RED)

    assert player.steam_num == "0:0:42"
    assert player.steam_id == "STEAM_0:0:42"
    assert player.key == ("0:0:42", TeamColor.RED)


def test_class_intervals_do_not_overlap() -> None:
    player = Player("STEAM_0:0:42", "Dave", 5, TeamColor.RED)

    player.record_class_start(PlayerClass.SCOUT, 10)
    player.record_class_start(PlayerClass.MEDIC, 20)
    player.record_class_start(PlayerClass.SOLDIER, 35)

    spans = [(i.start, i.end, i.context) for i in player.class_intervals]
    assert spans == [
        (10, 19, PlayerClass.SCOUT),
        (20, 34, PlayerClass.MEDIC),
        (35, None, PlayerClass.SOLDIER),
    ]
    assert player.current_class is PlayerClass.SOLDIER


def test_duplicate_team_join_keeps_one_open_interval() -> None:
    player = Player("STEAM_0:0:42", "Dave", 5, TeamColor.RED)

    player.record_join_team_time(0)
    player.record_join_team_time(3)
    player.record_leave_team_time(60)

    assert [(i.start, i.end) for i in player.team_intervals] == [(0, 60)]


def test_time_interval_clamping() -> None:
    closed = TimeInterval(-30, 50)
    open_ = TimeInterval(100)

    assert closed.get_duration() == 80
    assert closed.get_clamped_duration(0, 600) == 50
    assert open_.is_open
    assert open_.get_duration() is None
    assert open_.get_clamped_duration(0, 600) == 500
    assert TimeInterval(700).get_clamped_duration(0, 600) == 0


def test_interval_keeps_its_context() -> None:
    interval = TimeIntervalWithContext(10, 20, "Blue")

    assert interval.get_duration() == 10
    assert interval.context == "Blue"
