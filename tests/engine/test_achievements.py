import datetime
from unittest.mock import MagicMock, patch

from tests.test_utils import SEASON_START, LeagueScenario

from golfleague.core.registry import ACHIEVEMENT_RULES
from golfleague.core.types import GLOBAL_SCOPE
from golfleague.engine.achievements import (
    METRICS,
    AchievementContext,
    best_bonus_streak,
    evaluate_rule,
    rule_applies,
)


def _at(days: int, hours: int = 18) -> datetime.datetime:
    return datetime.datetime.combine(SEASON_START, datetime.time()) + datetime.timedelta(
        days=days,
        hours=hours,
    )


def _keys(results) -> set[str]:
    return {r.key for r in results}


def test_award_is_idempotent(scenario: type[LeagueScenario]):
    league = scenario(["alice"])
    engine = league.league.achievements

    first = engine.award(league.pid("alice"), "first_score", league.season.id)
    second = engine.award(league.pid("alice"), "first_score", league.season.id)

    assert first.already_earned is False
    assert second.already_earned is True
    assert league.earned("alice") == {("first_score", league.season.id)}


def test_check_and_award_reports_only_new_earnings(scenario: type[LeagueScenario]):
    league = scenario(["alice"])
    league.add_score("alice", 80, bonus_points=1)

    first = league.league.check_and_award_achievements(league.pid("alice"))
    again = league.league.check_and_award_achievements(league.pid("alice"))

    assert {"first_score", "first_win"} <= _keys(first)
    assert again == []


def test_same_achievement_per_season_and_globally(scenario: type[LeagueScenario]):
    league = scenario(["alice"])
    league.add_score("alice", 80)

    league.league.check_and_award_achievements(league.pid("alice"))
    league.league.check_and_award_achievements(league.pid("alice"), league.season.id)

    assert ("first_score", GLOBAL_SCOPE) in league.earned("alice")
    assert ("first_score", league.season.id) in league.earned("alice")


def test_best_bonus_streak_walks_chronologically(scenario: type[LeagueScenario]):
    league = scenario(["alice"], rounds=6)
    # submitted out of order on purpose; chronological bonuses: 1 1 0 1 1 1
    for game, bonus in [(5, 1), (0, 1), (3, 1), (1, 1), (4, 1), (2, 0)]:
        league.add_score("alice", 80, game=game, bonus_points=bonus, submitted_at=_at(7 * game))

    history = league.db.get_player_history(league.pid("alice"))
    assert best_bonus_streak(history) == 3

    earned = league.league.check_and_award_achievements(league.pid("alice"))
    assert "hot_streak_3" in _keys(earned)
    assert "hot_streak_5" not in _keys(earned)


def test_games_milestone_is_always_global(scenario: type[LeagueScenario]):
    league = scenario(["alice"], rounds=5)
    for game in range(5):
        league.add_score("alice", 90, game=game)

    league.league.check_and_award_achievements(league.pid("alice"), league.season.id)

    assert ("games_5", GLOBAL_SCOPE) in league.earned("alice")
    assert ("games_5", league.season.id) not in league.earned("alice")


def test_points_milestone_needs_a_season(scenario: type[LeagueScenario]):
    league = scenario(["alice"], rounds=8)
    for game in range(8):
        league.add_score("alice", 70, game=game, bonus_points=1)  # 7 points each

    without = league.league.check_and_award_achievements(league.pid("alice"))
    assert "points_50" not in _keys(without)

    within = league.league.check_and_award_achievements(league.pid("alice"), league.season.id)
    assert {"points_50", "domination"} <= _keys(within)
    assert "points_100" not in _keys(within)


def test_consistent_scorer_uses_last_five_rounds(scenario: type[LeagueScenario]):
    league = scenario(["alice", "bob"], rounds=6)
    # alice: an old blow-up round, then five rounds within 4 strokes
    for game, raw in enumerate([110, 80, 82, 81, 83, 84]):
        league.add_score("alice", raw, game=game, submitted_at=_at(7 * game))
    # bob: spread of exactly 5 over his last five
    for game, raw in enumerate([80, 80, 82, 81, 83, 85]):
        league.add_score("bob", raw, game=game, submitted_at=_at(7 * game))

    assert "consistent_scorer" in _keys(
        league.league.check_and_award_achievements(league.pid("alice")),
    )
    assert "consistent_scorer" not in _keys(
        league.league.check_and_award_achievements(league.pid("bob")),
    )


def test_early_bird_window(scenario: type[LeagueScenario]):
    league = scenario(["alice", "bob"])
    league.add_score("alice", 80, submitted_at=_at(0, hours=20))
    league.add_score("bob", 80, submitted_at=_at(1, hours=6))  # 30 hours later

    assert "early_bird" in _keys(league.league.check_and_award_achievements(league.pid("alice")))
    assert "early_bird" not in _keys(league.league.check_and_award_achievements(league.pid("bob")))


def test_under_par_round(scenario: type[LeagueScenario]):
    league = scenario(["alice", "bob"], par=72)
    league.add_score("alice", 71)
    league.add_score("bob", 72)

    assert "perfect_score" in _keys(league.league.check_and_award_achievements(league.pid("alice")))
    assert "perfect_score" not in _keys(league.league.check_and_award_achievements(league.pid("bob")))


def test_standings_judged_when_checking_a_season(scenario: type[LeagueScenario]):
    league = scenario(["alice", "bob"])
    league.add_score("alice", 70, bonus_points=1)
    league.add_score("bob", 80)

    keys = _keys(
        league.league.check_and_award_achievements(league.pid("alice"), league.season.id),
    )

    assert {"season_champion", "perfect_attendance"} <= keys
    assert ("season_champion", league.season.id) in league.earned("alice")
    # without a season there are no standings to judge
    assert "season_champion" not in _keys(
        league.league.check_and_award_achievements(league.pid("bob")),
    )


def test_finalize_sweeps_players_not_rechecked_since_their_round(scenario: type[LeagueScenario]):
    league = scenario(["alice", "bob", "carol", "dave"], rounds=2)
    league.add_score("alice", 70, game=0)
    league.add_score("alice", 72, game=1)
    league.league.check_and_award_achievements(league.pid("alice"), league.season.id)
    league.add_score("bob", 80, game=0)
    league.add_score("bob", 81, game=1)
    league.add_score("carol", 90, game=0)
    # dave never plays

    awarded = league.league.finalize_season(league.season.id)
    keys = {name: _keys(awarded[league.pid(name)]) for name in ("alice", "bob", "carol", "dave")}

    assert keys["alice"] == set()
    assert ("season_champion", league.season.id) in league.earned("alice")
    assert {"runner_up", "perfect_attendance"} <= keys["bob"]
    assert "top_three" in keys["carol"]
    assert "perfect_attendance" not in keys["carol"]
    assert keys["dave"] == set()
    # rank awards are exact: the champion does not also get the podium
    assert ("top_three", league.season.id) not in league.earned("alice")


def test_rule_scoping():
    champion = ACHIEVEMENT_RULES["season_champion"]
    points_50 = ACHIEVEMENT_RULES["points_50"]
    first_score = ACHIEVEMENT_RULES["first_score"]

    assert rule_applies(champion, "s1")
    assert not rule_applies(champion, None)
    assert not rule_applies(points_50, None)
    assert rule_applies(points_50, "s1")
    assert rule_applies(first_score, None)


def test_missing_metric_never_earns():
    ctx = AchievementContext(player_id="alice", all_scores=[])
    for rule in ACHIEVEMENT_RULES.values():
        assert evaluate_rule(rule, ctx) is False, rule.key


def test_progress_toward_targets(scenario: type[LeagueScenario]):
    league = scenario(["alice"], rounds=3)
    for game in range(3):
        league.add_score("alice", 85, game=game)

    progress = league.league.achievement_progress(league.pid("alice"))
    assert progress["games_5"].current == 3
    assert progress["games_5"].target == 5
    assert "points_50" not in progress
    assert "season_champion" not in progress

    seasonal = league.league.achievement_progress(league.pid("alice"), league.season.id)
    assert seasonal["points_50"].current == 9
    assert seasonal["season_champion"].current == 1


def test_metric_computed_once_per_rule(scenario: type[LeagueScenario]):
    league = scenario(["alice"])
    league.add_score("alice", 80)
    games_played = MagicMock(side_effect=lambda ctx: len(ctx.all_scores))

    with patch.dict(METRICS, {"games_played": games_played}):
        earned = league.league.check_and_award_achievements(league.pid("alice"))

    assert "first_score" in _keys(earned)
    assert games_played.call_count == sum(
        1 for rule in ACHIEVEMENT_RULES.values() if rule.metric == "games_played"
    )
    records = {ua.achievement_key: ua for ua in league.db.get_player_achievements(league.pid("alice"))}
    assert records["first_score"].metadata == '{"games_played":1}'
