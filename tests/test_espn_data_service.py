"""
Tests for EspnDataService against canned ESPN responses.
"""
from espn_scrape.schemas.espn import EspnTeam, Inline, Reference
from tests.conftest import CORE, SITE, FakeEspn, envelope

ODDS_URL = f"{CORE}/events/401/competitions/401/odds"


class TestResolveTeamId:
    async def test_reads_id_from_reference_url_without_fetch(self):
        fake = FakeEspn()
        espn = fake.service()

        team_id = await espn.resolve_team_id(Reference(f"{CORE}/seasons/2025/teams/22?lang=en", EspnTeam))

        assert team_id == "22"
        assert fake.requests == []

    async def test_inline_team(self):
        espn = FakeEspn().service()
        assert await espn.resolve_team_id(Inline(EspnTeam(id="12"))) == "12"

    async def test_unparseable_reference_falls_back_to_fetch(self):
        fake = FakeEspn({f"{CORE}/franchises/9": {"id": "9", "abbreviation": "GB"}})
        espn = fake.service()

        team_id = await espn.resolve_team_id(Reference(f"{CORE}/franchises/9", EspnTeam))

        assert team_id == "9"
        assert len(fake.requests) == 1

    async def test_none(self):
        espn = FakeEspn().service()
        assert await espn.resolve_team_id(None) is None


class TestOdds:
    async def test_inline_first_item(self):
        fake = FakeEspn({
            ODDS_URL: {
                "count": 2,
                "items": [
                    {"provider": {"id": "58", "name": "ESPN BET"}, "overUnder": 47.5, "spread": -3.5},
                    {"provider": {"id": "40", "name": "Other"}, "overUnder": 44, "spread": 1},
                ],
            },
        })
        odds = await fake.service().get_odds(ODDS_URL)

        assert odds.provider.name == "ESPN BET"
        assert odds.over_under == 47.5
        assert odds.spread == -3.5

    async def test_referenced_first_item(self):
        item_url = f"{ODDS_URL}/58"
        fake = FakeEspn({
            ODDS_URL: envelope([item_url]),
            item_url: {"overUnder": "44.5", "spread": "N/A"},
        })
        odds = await fake.service().get_odds(ODDS_URL)

        assert odds.over_under == 44.5
        assert odds.spread == 0.0

    async def test_empty_collection(self):
        fake = FakeEspn({ODDS_URL: {"count": 0, "items": []}})
        assert await fake.service().get_odds(ODDS_URL) is None

    async def test_http_failure(self):
        fake = FakeEspn({ODDS_URL: 500})
        assert await fake.service().get_odds(ODDS_URL) is None


class TestGameSummary:
    async def test_decodes_box_score(self):
        fake = FakeEspn({
            f"{SITE}/summary?event=401": {
                "boxscore": {
                    "players": [{
                        "team": {"id": "22", "abbreviation": "ARI", "displayName": "Arizona Cardinals"},
                        "statistics": [{
                            "name": "passing",
                            "keys": ["completions/passingAttempts", "passingYards"],
                            "athletes": [{
                                "athlete": {"id": "3917315", "firstName": "Kyler", "lastName": "Murray",
                                            "displayName": "Kyler Murray"},
                                "stats": ["18/25", "220"],
                            }],
                        }],
                    }],
                },
            },
        })
        summary = await fake.service().get_game_summary("401")

        team = summary.boxscore.players[0]
        assert team.team.abbreviation == "ARI"
        line = team.statistics[0].athletes[0]
        assert line.athlete.id == "3917315"
        assert line.stats == ["18/25", "220"]
        assert fake.requests[0].url.params["event"] == "401"

    async def test_failure_returns_none(self):
        assert await FakeEspn().service().get_game_summary("401") is None


async def test_week_games_url():
    events_url = f"{CORE}/seasons/2025/types/3/weeks/2/events"
    fake = FakeEspn({events_url: envelope([])})

    games = await fake.service().get_week_games(2025, 2, season_type=3)

    assert games == []
    assert fake.paths() == ["/nfl/seasons/2025/types/3/weeks/2/events"]


class TestEntities:
    async def test_get_game(self):
        fake = FakeEspn({f"{CORE}/events/401": {"id": "401", "shortName": "BUF @ ARI", "competitions": []}})
        game = await fake.service().get_game("401")
        assert game.short_name == "BUF @ ARI"

    async def test_get_athlete(self):
        fake = FakeEspn({f"{CORE}/athletes/3917315": {
            "id": "3917315", "firstName": "Kyler", "lastName": "Murray", "displayName": "Kyler Murray",
            "position": {"abbreviation": "QB"},
            "headshot": {"href": "https://a.espncdn.com/h/3917315.png", "alt": "Kyler Murray"},
        }})
        athlete = await fake.service().get_athlete("3917315")
        assert athlete.position.abbreviation == "QB"
        assert athlete.headshot.href.endswith("3917315.png")

    async def test_missing_entity_is_none(self):
        assert await FakeEspn().service().get_athlete("1") is None

    async def test_get_teams(self):
        fake = FakeEspn({
            f"{CORE}/teams": envelope([f"{CORE}/teams/12"]),
            f"{CORE}/teams/12": {"id": "12", "abbreviation": "KC"},
        })
        teams = await fake.service().get_teams()
        assert [t.id for t in teams] == ["12"]

    async def test_get_team_roster(self):
        fake = FakeEspn({
            f"{CORE}/seasons/2025/teams/12/athletes": envelope([f"{CORE}/seasons/2025/athletes/3139477"]),
            f"{CORE}/seasons/2025/athletes/3139477": {"id": "3139477", "firstName": "Patrick",
                                                      "lastName": "Mahomes"},
        })
        roster = await fake.service().get_team_roster(2025, "12")
        assert [a.last_name for a in roster] == ["Mahomes"]
