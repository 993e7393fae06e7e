"""Cross-round comparison, match awards and the match player list."""

from fortstats.config.settings import Settings
from fortstats.contracts.common import TeamColor, TeamRole
from fortstats.contracts.output import OutputStats, PlayerOutputStatsRound
from fortstats.core.stats.comparison import compare_rounds, compute_awards, match_players
from fortstats.core.stats.team_stats import build_team_stats


def make_row(
    name: str, steam: str, team: int, round_number: int = 1, **values: int
) -> PlayerOutputStatsRound:
    """A player row with the given ``group__stat`` counters filled in."""
    row = PlayerOutputStatsRound(
        name=name, steam_id=f"STEAM_{steam}", id=1, team=team, round_number=round_number
    )
    for path, value in values.items():
        group, stat = path.split("__")
        getattr(getattr(row, group), stat).value = value
    return row


def make_round(round_number: int, *rows: PlayerOutputStatsRound) -> OutputStats:
    by_team: dict[int, list[PlayerOutputStatsRound]] = {}
    for row in rows:
        by_team.setdefault(row.team, []).append(row)
    return OutputStats(
        parse_name=f"round-{round_number}",
        log_name=f"round{round_number}.log",
        round_number=round_number,
        map="2fort",
        server="Coach",
        date="26 Oct 2019",
        time="19:30",
        game_time="10:00",
        game_time_as_seconds=600,
        teams={
            team: build_team_stats(TeamColor(team), members) for team, members in by_team.items()
        },
    )


def test_offense_and_defense_deltas() -> None:
    first = make_round(
        1,
        make_row("Alice", "0:1:1", 1, kills__kill=5, objectives__flag_capture=2),
        make_row("Bob", "0:1:2", 2, weapons__airshot=1, kills__kill=1),
    )
    second = make_round(
        2,
        make_row("Bob", "0:1:2", 1, round_number=2, kills__kill=3, objectives__flag_capture=1),
        make_row("Alice", "0:1:1", 2, round_number=2, weapons__airshot=4, kills__kill=2),
    )

    comparison = compare_rounds(first, second)

    offense, defense = comparison.offense, comparison.defense
    assert offense.role == TeamRole.OFFENSE
    assert (offense.kills, offense.caps, offense.frags) == (2, 1, 2)
    assert offense.airshots is None
    assert defense.role == TeamRole.DEFENSE
    # defense reads second minus first
    assert (defense.airshots, defense.kills) == (3, 1)
    assert defense.caps is None and defense.touches is None


def test_missing_team_compares_against_zero() -> None:
    first = make_round(1, make_row("Alice", "0:1:1", 1, kills__kill=4))
    second = make_round(2, make_row("Bob", "0:1:2", 1, round_number=2, kills__kill=1))

    comparison = compare_rounds(first, second)

    assert comparison.offense.kills == 3
    assert comparison.defense.kills == 0
    assert comparison.defense.airshots is None


def test_mvp_is_the_weighted_sum_across_rounds(settings: Settings) -> None:
    rounds = [
        make_round(
            1,
            make_row(
                "Alice",
                "0:1:1",
                1,
                kills__kill=2,
                objectives__flag_capture=1,
                objectives__flag_bonus_capture=1,
            ),
            make_row("Bob", "0:1:2", 2, kills__kill=6),
        ),
        make_round(
            2,
            make_row("Bob", "0:1:2", 1, round_number=2, objectives__touches_initial=1),
            make_row("Alice", "0:1:1", 2, round_number=2, kills__sg=1),
        ),
    ]

    awards = compute_awards(rounds, settings)

    # Alice: 2 kills + 1 bonus cap * 5 + 1 sg * 2; Bob: 6 kills + 1 initial touch * 2
    assert awards.mvp is not None
    assert (awards.mvp.name, awards.mvp.value) == ("Alice", 9.0)
    assert awards.top_fragger is not None
    assert (awards.top_fragger.name, awards.top_fragger.value) == ("Bob", 6.0)


def test_team_kills_count_against_the_mvp(settings: Settings) -> None:
    rounds = [
        make_round(
            1,
            make_row("Alice", "0:1:1", 1, kills__kill=2, kills__teamkill=2),
            make_row("Bob", "0:1:2", 2, kills__kill=1),
        )
    ]

    awards = compute_awards(rounds, settings)

    assert awards.mvp is not None and awards.mvp.name == "Bob"


def test_mvp_weights_come_from_settings() -> None:
    rounds = [
        make_round(
            1,
            make_row(
                "Alice", "0:1:1", 1, objectives__flag_capture=1, objectives__flag_bonus_capture=1
            ),
            make_row("Bob", "0:1:2", 2, kills__kill=3),
        )
    ]

    default = compute_awards(rounds, Settings())
    cheap_caps = compute_awards(rounds, Settings(mvp_weight_bonus_capture=1.0))

    assert default.mvp is not None and default.mvp.name == "Alice"
    assert cheap_caps.mvp is not None and cheap_caps.mvp.name == "Bob"


def test_only_bonus_captures_earn_mvp_points(settings: Settings) -> None:
    regular = make_row("Alice", "0:1:1", 1, objectives__flag_touch=1, objectives__flag_capture=1)
    bonus = make_row(
        "Alice",
        "0:1:1",
        1,
        objectives__flag_touch=1,
        objectives__flag_capture=1,
        objectives__flag_bonus_capture=1,
    )
    bob = make_row("Bob", "0:1:2", 2, kills__kill=4)

    plain = compute_awards([make_round(1, regular, bob)], settings)
    with_bonus = compute_awards([make_round(1, bonus, bob)], settings)

    # a regular capture earns nothing beyond the touch that started it
    assert plain.mvp is not None and plain.mvp.name == "Bob"
    assert with_bonus.mvp is not None
    assert (with_bonus.mvp.name, with_bonus.mvp.value) == ("Alice", 6.0)


def test_first_account_keeps_a_tie(settings: Settings) -> None:
    rounds = [
        make_round(
            1,
            make_row("Bob", "0:1:2", 2, kills__kill=1),
            make_row("Alice", "0:1:1", 1, kills__kill=1),
        )
    ]

    awards = compute_awards(rounds, settings)

    # team 1 rows are visited first
    assert awards.mvp is not None and awards.mvp.name == "Alice"
    assert awards.top_fragger is not None and awards.top_fragger.name == "Alice"


def test_no_fragger_or_flag_runner_without_positive_totals(settings: Settings) -> None:
    rounds = [make_round(1, make_row("Alice", "0:1:1", 1), make_row("Bob", "0:1:2", 2))]

    awards = compute_awards(rounds, settings)

    assert awards.mvp is not None and awards.mvp.value == 0
    assert awards.top_fragger is None
    assert awards.top_flag_runner is None


def test_top_flag_runner(settings: Settings) -> None:
    rounds = [
        make_round(
            1,
            make_row("Alice", "0:1:1", 1, objectives__flag_time=40),
            make_row("Carol", "0:0:3", 1, objectives__flag_time=95),
        )
    ]

    awards = compute_awards(rounds, settings)

    assert awards.top_flag_runner is not None
    assert (awards.top_flag_runner.name, awards.top_flag_runner.value) == ("Carol", 95.0)


def test_match_players_keep_their_first_team() -> None:
    rounds = [
        make_round(
            1,
            make_row("Alice", "0:1:1", 1),
            make_row("aaron", "0:1:9", 1),
            make_row("Bob", "0:1:2", 2),
        ),
        make_round(
            2,
            make_row("Bob", "0:1:2", 1, round_number=2),
            make_row("Alice", "0:1:1", 2, round_number=2),
            make_row("Carol", "0:0:3", 2, round_number=2),
        ),
    ]

    players = match_players(rounds)

    assert [(p.name, p.team, p.rounds) for p in players] == [
        ("aaron", 1, [1]),
        ("Alice", 1, [1, 2]),
        ("Bob", 2, [1, 2]),
        ("Carol", 2, [2]),
    ]
