from espn_scrape.services.team_mapper import (
    all_teams,
    get_internal_team_id,
    get_team_by_espn_id,
    map_abbreviation,
)


def test_thirty_two_unique_teams():
    teams = all_teams()
    assert len(teams) == 32
    assert len({t.espn_id for t in teams}) == 32
    assert sorted(t.internal_id for t in teams) == list(range(1, 33))


def test_espn_id_to_internal_id():
    assert get_internal_team_id("22") == 1
    assert get_internal_team_id("28") == 32
    assert get_internal_team_id(" 12 ") == 16
    assert get_internal_team_id("99") is None
    assert get_internal_team_id(None) is None


def test_team_lookup():
    team = get_team_by_espn_id("12")
    assert team.abbreviation == "KAN"
    assert team.espn_abbreviation == "KC"


def test_map_abbreviation():
    assert map_abbreviation("KC") == "KAN"
    assert map_abbreviation("wsh") == "WAS"
    assert map_abbreviation("GNB") == "GNB"
    assert map_abbreviation("XYZ") == "XYZ"
    assert map_abbreviation("") is None
