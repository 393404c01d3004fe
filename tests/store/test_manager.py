import datetime

import pytest
from tests.test_utils import LeagueScenario

from golfleague.core.errors import SeasonNotFoundError, StoreError
from golfleague.core.registry import ACHIEVEMENT_RULES
from golfleague.core.types import GLOBAL_SCOPE
from golfleague.store.manager import CODE_ALPHABET, LeagueDatabase, generate_code


def test_leaderboard_orders_by_points_then_username(scenario: type[LeagueScenario]):
    league = scenario(["carol", "alice", "bob", "dave"], rounds=2)
    league.add_score("alice", 80, game=0)  # 4
    league.add_score("bob", 80, game=0)  # 4
    league.add_score("carol", 70, game=0, bonus_points=1)  # 7
    league.add_score("carol", 90, game=1)  # 2

    rows = league.db.get_season_leaderboard(league.season.id)

    assert [r.username for r in rows] == ["carol", "alice", "bob", "dave"]
    assert [r.total_points for r in rows] == [9, 4, 4, 0]
    assert rows[0].games_played == 2
    assert rows[0].avg_score == pytest.approx(80.0)
    assert rows[-1].games_played == 0
    assert rows[-1].avg_score == 0.0


def test_leaderboard_ignores_other_seasons(scenario: type[LeagueScenario]):
    league = scenario(["alice"])
    other = league.db.create_season("Autumn", "AUTUMN")
    league.db.join_season(other.code, league.pid("alice"))
    other_game = league.db.create_game("Autumn 1", league.course.id, other.id, datetime.date(2024, 9, 1))
    league.add_score("alice", 80)
    league.league.submit_score(other_game.id, league.pid("alice"), 70)

    (row,) = league.db.get_season_leaderboard(league.season.id)
    assert row.games_played == 1
    assert row.total_points == 4
    assert len(league.db.get_player_history(league.pid("alice"))) == 2
    assert len(league.db.get_player_history(league.pid("alice"), other.id)) == 1


def test_award_scope_keeps_global_and_season_records_apart(scenario: type[LeagueScenario]):
    league = scenario(["alice"])
    pid = league.pid("alice")

    assert league.db.award_achievement(pid, "first_score") is True
    assert league.db.award_achievement(pid, "first_score", league.season.id) is True
    assert league.db.award_achievement(pid, "first_score") is False
    assert league.db.award_achievement(pid, "first_score", league.season.id) is False

    earned = league.db.get_player_achievements(pid)
    assert {(ua.scope, ua.season_id) for ua in earned} == {
        (GLOBAL_SCOPE, None),
        (league.season.id, league.season.id),
    }


def test_achievement_catalog_is_seeded_once():
    db = LeagueDatabase()
    db.init_db()
    assert {a.key for a in db.get_achievements()} == set(ACHIEVEMENT_RULES)
    assert len(db.get_achievements()) == len(ACHIEVEMENT_RULES)
    db.close()


def test_join_season(scenario: type[LeagueScenario]):
    league = scenario(["alice"])
    newcomer = league.db.add_player("erin")

    league.db.join_season("spring", newcomer.id)
    league.db.join_season("SPRING", newcomer.id)

    assert league.db.is_participant(league.season.id, newcomer.id)
    assert len(league.db.get_season_leaderboard(league.season.id)) == 2

    with pytest.raises(SeasonNotFoundError):
        league.db.join_season("NOPE", newcomer.id)


def test_codes_are_case_insensitive(scenario: type[LeagueScenario]):
    league = scenario(["alice"])
    season = league.db.create_season("Fall", "fall")
    game = league.db.create_game("Fall 1", league.course.id, season.id, datetime.date(2024, 9, 7), "ab12cd")

    assert season.code == "FALL"
    assert league.db.find_season_by_code("fall") == season
    assert league.db.find_game_by_code("AB12CD") == game
    assert league.db.find_game_by_code("ab12cd") == game


def test_generated_codes():
    code = generate_code()
    assert len(code) == 6
    assert set(code) <= set(CODE_ALPHABET)


def test_find_player_by_id_or_username(scenario: type[LeagueScenario]):
    league = scenario(["alice"])
    alice = league.players["alice"]

    assert league.db.find_player("alice") == alice
    assert league.db.find_player(alice.id) == alice
    assert league.db.find_player("nobody") is None


def test_game_status(scenario: type[LeagueScenario]):
    league = scenario(["alice"])
    assert league.game().status == "active"

    league.db.set_game_status(league.game().id, "completed")
    assert league.db.get_game(league.game().id).status == "completed"


def test_update_score_round_trip(scenario: type[LeagueScenario]):
    league = scenario(["alice"])
    score = league.add_score("alice", 80)

    league.db.set_bonus_points(score.id, 1)
    stored = league.db.get_score(score.id)

    assert stored.bonus_points == 1
    assert stored.total_points == 5
    assert stored.submitted_at == score.submitted_at


def test_driver_errors_become_store_errors(scenario: type[LeagueScenario]):
    league = scenario(["alice"])
    league.db.conn.execute("DROP TABLE scores")

    with pytest.raises(StoreError):
        league.db.get_game_scores(league.game().id)


def test_file_database_persists(tmp_path):
    path = tmp_path / "league.duckdb"
    db = LeagueDatabase(path)
    course = db.add_course("Links", 71)
    db.close()

    reopened = LeagueDatabase(path)
    assert reopened.get_course(course.id) == course
    assert len(reopened.get_achievements()) == len(ACHIEVEMENT_RULES)
    reopened.close()
