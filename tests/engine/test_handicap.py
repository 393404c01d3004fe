import pytest
from tests.test_utils import LeagueScenario

from golfleague.core.errors import PlayerNotFoundError
from golfleague.engine.handicap import (
    best_differential_count,
    calculate_handicap,
    format_handicap,
    handicap_category,
    recalculate_all_handicaps,
    update_player_handicap,
)


@pytest.mark.parametrize(
    ("rounds", "expected"),
    [
        (4, 0),
        (5, 1),
        (6, 1),
        (7, 2),
        (8, 2),
        (9, 3),
        (11, 3),
        (12, 4),
        (14, 4),
        (15, 5),
        (16, 5),
        (17, 6),
        (18, 6),
        (19, 7),
        (20, 8),
        (45, 8),
    ],
)
def test_best_differential_count(rounds: int, expected: int):
    assert best_differential_count(rounds) == expected


def test_unrated_below_five_rounds():
    assert calculate_handicap([(80, 72)] * 4) is None
    assert calculate_handicap([]) is None


def test_five_rounds_use_single_best_differential():
    # differentials 2, 4, 6, 8, 10 -> best 2 -> 2 * 0.96 = 1.92
    rounds = [(74, 72), (76, 72), (78, 72), (80, 72), (82, 72)]
    assert calculate_handicap(rounds) == 1.9


def test_seven_rounds_average_two_best():
    # best differentials 1 and 3 -> 2 * 0.96
    rounds = [(73, 72), (75, 72), (80, 72), (81, 72), (84, 72), (90, 72), (77, 72)]
    assert calculate_handicap(rounds) == 1.9


def test_differentials_use_each_course_par():
    # 68 on a par 70 is the best round (-2)
    rounds = [(68, 70), (74, 72), (76, 72), (78, 72), (80, 72)]
    assert calculate_handicap(rounds) == -1.9


def test_twenty_rounds_cap_at_eight():
    rounds = [(72 + d, 72) for d in range(20)]
    # best eight: 0..7, average 3.5 -> 3.36
    assert calculate_handicap(rounds) == 3.4


@pytest.mark.parametrize(
    ("handicap", "text", "category"),
    [
        (None, "N/A", "Unrated"),
        (-1.2, "-1.2", "Scratch or Better"),
        (0.0, "0.0", "Scratch or Better"),
        (5.0, "+5.0", "Low Handicap"),
        (7.3, "+7.3", "Mid Handicap"),
        (20.0, "+20.0", "Average Handicap"),
        (24.1, "+24.1", "High Handicap"),
    ],
)
def test_format_and_category(handicap, text: str, category: str):
    assert format_handicap(handicap) == text
    assert handicap_category(handicap) == category


def test_update_player_handicap_persists(scenario: type[LeagueScenario]):
    league = scenario(["alice"], rounds=5)
    for game, raw in enumerate([74, 76, 78, 80, 82]):
        league.add_score("alice", raw, game=game)

    assert update_player_handicap(league.db, league.pid("alice")) == 1.9
    assert league.db.get_player(league.pid("alice")).handicap == 1.9


def test_update_player_handicap_resets_to_unrated(scenario: type[LeagueScenario]):
    league = scenario(["alice"], rounds=5)
    league.db.set_handicap(league.pid("alice"), 12.0)
    league.add_score("alice", 90)

    assert update_player_handicap(league.db, league.pid("alice")) is None
    assert league.db.get_player(league.pid("alice")).handicap is None


def test_update_unknown_player(scenario: type[LeagueScenario]):
    league = scenario(["alice"])
    with pytest.raises(PlayerNotFoundError):
        update_player_handicap(league.db, "ghost")


def test_recalculate_all_handicaps_reports_failures(scenario: type[LeagueScenario]):
    league = scenario(["alice", "bob"], rounds=5)
    for game in range(5):
        league.add_score("alice", 80, game=game)

    refresh = recalculate_all_handicaps(
        league.db,
        [league.pid("alice"), "ghost", league.pid("bob")],
    )

    assert refresh.updated == {league.pid("alice"): 7.7, league.pid("bob"): None}
    assert list(refresh.failed) == ["ghost"]


def test_recalculate_all_handicaps_defaults_to_every_player(scenario: type[LeagueScenario]):
    league = scenario(["alice", "bob", "carol"])
    refresh = league.league.recalculate_all_handicaps()
    assert set(refresh.updated) == {league.pid(n) for n in ("alice", "bob", "carol")}
    assert refresh.failed == {}
