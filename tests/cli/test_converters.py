import datetime

import cappa
import pytest
from tests.test_utils import LeagueScenario

from golfleague.cli.converters import (
    parse_date,
    resolve_game,
    resolve_player,
    resolve_season,
    validate_status,
)


def test_parse_date():
    assert parse_date("2024-05-01") == datetime.date(2024, 5, 1)
    assert parse_date(" Today ") == datetime.date.today()
    with pytest.raises(cappa.Exit):
        parse_date("May 1st")


def test_validate_status():
    assert validate_status("Completed") == "completed"
    assert validate_status(" active ") == "active"
    with pytest.raises(cappa.Exit):
        validate_status("paused")


def test_resolve_game_by_code_or_id(scenario: type[LeagueScenario]):
    league = scenario(["alice"])
    game = league.game()

    assert resolve_game(league.db, game.round_code.lower()) == game
    assert resolve_game(league.db, game.id) == game
    with pytest.raises(cappa.Exit):
        resolve_game(league.db, "ZZZZZZ")


def test_resolve_season_by_code_or_id(scenario: type[LeagueScenario]):
    league = scenario(["alice"])

    assert resolve_season(league.db, "spring") == league.season
    assert resolve_season(league.db, league.season.id) == league.season
    with pytest.raises(cappa.Exit):
        resolve_season(league.db, "WINTER")


def test_resolve_player(scenario: type[LeagueScenario]):
    league = scenario(["alice", "alicia"])

    assert resolve_player(league.db, "alice") == league.players["alice"]
    with pytest.raises(cappa.Exit) as exc:
        resolve_player(league.db, "alise")
    assert exc.value.code == 1
