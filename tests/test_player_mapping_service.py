"""
PlayerMappingService tests. The store is an AsyncMock so call counts can be
asserted directly.
"""
from unittest.mock import AsyncMock, call

import pytest

from espn_scrape.schemas.espn import EspnAthlete
from espn_scrape.services.player_mapping_service import PlayerMappingService
from espn_scrape.services.store_service import StoreService
from tests.conftest import make_player


def athlete(**overrides) -> EspnAthlete:
    data = dict(id="3917315", first_name="Kyler", last_name="Murray", display_name="Kyler Murray")
    data.update(overrides)
    return EspnAthlete(**data)


@pytest.fixture
def store():
    mock = AsyncMock()
    mock.get_player_by_espn_id.return_value = None
    mock.search_players_by_name.return_value = []
    mock.update_player_espn_id.return_value = True
    return mock


class TestMapEspnPlayer:
    async def test_espn_id_hit_skips_name_search(self, store):
        existing = make_player(id=7, espn_player_id="3917315")
        store.get_player_by_espn_id.return_value = existing

        player = await PlayerMappingService(store).map_espn_player(athlete(), team_id=1)

        assert player is existing
        store.search_players_by_name.assert_not_awaited()
        store.update_player_espn_id.assert_not_awaited()

    async def test_single_candidate_is_linked(self, store):
        candidate = make_player(id=12, first_name="Kyler", last_name="Murray", team_id=1)
        store.search_players_by_name.return_value = [candidate]

        player = await PlayerMappingService(store).map_espn_player(athlete(), team_id=1)

        assert player is candidate
        store.search_players_by_name.assert_awaited_once_with("Kyler", "Murray", team_id=1)
        store.update_player_espn_id.assert_awaited_once_with(12, "3917315")

    async def test_multiple_candidates_are_ambiguous(self, store):
        store.search_players_by_name.return_value = [
            make_player(id=1, first_name="Josh", last_name="Allen"),
            make_player(id=2, first_name="Josh", last_name="Allen"),
        ]

        player = await PlayerMappingService(store).map_espn_player(athlete(first_name="Josh", last_name="Allen"))

        assert player is None
        store.update_player_espn_id.assert_not_awaited()

    async def test_no_candidates(self, store):
        assert await PlayerMappingService(store).map_espn_player(athlete()) is None
        store.update_player_espn_id.assert_not_awaited()

    async def test_update_failure_still_returns_player(self, store):
        candidate = make_player(id=12, first_name="Kyler", last_name="Murray")
        store.search_players_by_name.return_value = [candidate]
        store.update_player_espn_id.side_effect = RuntimeError("database is locked")

        player = await PlayerMappingService(store).map_espn_player(athlete())

        assert player is candidate

    async def test_falls_back_to_unscoped_search(self, store):
        candidate = make_player(id=12, first_name="Kyler", last_name="Murray", team_id=3)
        store.search_players_by_name.side_effect = [[], [candidate]]

        player = await PlayerMappingService(store).map_espn_player(athlete(), team_id=1)

        assert player is candidate
        assert store.search_players_by_name.await_args_list == [
            call("Kyler", "Murray", team_id=1),
            call("Kyler", "Murray"),
        ]

    async def test_candidate_linked_to_other_espn_id_is_not_a_match(self, store):
        linked = make_player(id=4, first_name="Josh", last_name="Allen", team_id=4, espn_player_id="3918298")
        store.search_players_by_name.side_effect = [[], [linked]]

        player = await PlayerMappingService(store).map_espn_player(
            athlete(id="3915511", first_name="Josh", last_name="Allen", display_name="Josh Allen"), team_id=15
        )

        assert player is None
        store.update_player_espn_id.assert_not_awaited()

    async def test_linked_namesake_does_not_make_match_ambiguous(self, store):
        linked = make_player(id=4, first_name="Josh", last_name="Allen", team_id=4, espn_player_id="3918298")
        unlinked = make_player(id=9, first_name="Josh", last_name="Allen", team_id=15)
        store.search_players_by_name.return_value = [linked, unlinked]

        player = await PlayerMappingService(store).map_espn_player(
            athlete(id="3915511", first_name="Josh", last_name="Allen", display_name="Josh Allen")
        )

        assert player is unlinked
        store.update_player_espn_id.assert_awaited_once_with(9, "3915511")

    async def test_display_name_used_when_parts_missing(self, store):
        await PlayerMappingService(store).map_espn_player(
            athlete(first_name="", last_name="", display_name="Amon-Ra St. Brown")
        )
        store.search_players_by_name.assert_awaited_once_with("Amon-Ra", "St. Brown", team_id=None)

    async def test_missing_id(self, store):
        assert await PlayerMappingService(store).map_espn_player(athlete(id="")) is None
        store.get_player_by_espn_id.assert_not_awaited()


async def test_links_real_row(store_service_with_player):
    service, player = store_service_with_player

    mapped = await PlayerMappingService(service).map_espn_player(
        athlete(first_name="Kyler", last_name="Murray"), team_id=1
    )

    assert mapped.id == player.id
    assert (await service.get_player_by_espn_id("3917315")).id == player.id


@pytest.fixture
async def store_service_with_player(session_factory, add_players):
    (player,) = await add_players(make_player(first_name="Kyler", last_name="Murray", team_id=1))
    return StoreService(session_factory), player


async def test_existing_link_survives_namesake_from_other_team(session_factory, add_players):
    (qb,) = await add_players(
        make_player(first_name="Josh", last_name="Allen", team_id=4, espn_player_id="3918298")
    )
    service = StoreService(session_factory)

    mapped = await PlayerMappingService(service).map_espn_player(
        athlete(id="3915511", first_name="Josh", last_name="Allen", display_name="Josh Allen"), team_id=15
    )

    assert mapped is None
    assert (await service.get_player_by_id(qb.id)).espn_player_id == "3918298"
    assert await service.get_player_by_espn_id("3915511") is None
