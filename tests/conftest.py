import pytest
from tests.test_utils import LeagueScenario


@pytest.fixture
def scenario():
    """Factory fixture to create league scenarios."""
    created: list[LeagueScenario] = []

    def _builder(usernames, rounds=1, par=72):
        league = LeagueScenario(usernames, rounds=rounds, par=par)
        created.append(league)
        return league

    yield _builder

    for league in created:
        league.db.close()
