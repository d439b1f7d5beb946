"""
Static ESPN <-> internal team mapping.

ESPN identifies teams by small numeric ids and its own abbreviations; the
store uses ids 1..32 (alphabetical by city) and Pro-Football-Reference style
abbreviations. The tables below are fixed configuration and are exposed as
read-only mappings.
"""
from types import MappingProxyType
from typing import NamedTuple, Optional, List


class TeamInfo(NamedTuple):
    espn_id: str
    internal_id: int
    abbreviation: str
    espn_abbreviation: str
    full_name: str


_TEAMS = (
    TeamInfo("22", 1, "ARI", "ARI", "Arizona Cardinals"),
    TeamInfo("1", 2, "ATL", "ATL", "Atlanta Falcons"),
    TeamInfo("33", 3, "BAL", "BAL", "Baltimore Ravens"),
    TeamInfo("2", 4, "BUF", "BUF", "Buffalo Bills"),
    TeamInfo("29", 5, "CAR", "CAR", "Carolina Panthers"),
    TeamInfo("3", 6, "CHI", "CHI", "Chicago Bears"),
    TeamInfo("4", 7, "CIN", "CIN", "Cincinnati Bengals"),
    TeamInfo("5", 8, "CLE", "CLE", "Cleveland Browns"),
    TeamInfo("6", 9, "DAL", "DAL", "Dallas Cowboys"),
    TeamInfo("7", 10, "DEN", "DEN", "Denver Broncos"),
    TeamInfo("8", 11, "DET", "DET", "Detroit Lions"),
    TeamInfo("9", 12, "GNB", "GB", "Green Bay Packers"),
    TeamInfo("34", 13, "HOU", "HOU", "Houston Texans"),
    TeamInfo("11", 14, "IND", "IND", "Indianapolis Colts"),
    TeamInfo("30", 15, "JAX", "JAX", "Jacksonville Jaguars"),
    TeamInfo("12", 16, "KAN", "KC", "Kansas City Chiefs"),
    TeamInfo("24", 17, "LAC", "LAC", "Los Angeles Chargers"),
    TeamInfo("14", 18, "LAR", "LAR", "Los Angeles Rams"),
    TeamInfo("13", 19, "LVR", "LV", "Las Vegas Raiders"),
    TeamInfo("15", 20, "MIA", "MIA", "Miami Dolphins"),
    TeamInfo("16", 21, "MIN", "MIN", "Minnesota Vikings"),
    TeamInfo("18", 22, "NOR", "NO", "New Orleans Saints"),
    TeamInfo("17", 23, "NWE", "NE", "New England Patriots"),
    TeamInfo("19", 24, "NYG", "NYG", "New York Giants"),
    TeamInfo("20", 25, "NYJ", "NYJ", "New York Jets"),
    TeamInfo("21", 26, "PHI", "PHI", "Philadelphia Eagles"),
    TeamInfo("23", 27, "PIT", "PIT", "Pittsburgh Steelers"),
    TeamInfo("25", 28, "SFO", "SF", "San Francisco 49ers"),
    TeamInfo("26", 29, "SEA", "SEA", "Seattle Seahawks"),
    TeamInfo("27", 30, "TAM", "TB", "Tampa Bay Buccaneers"),
    TeamInfo("10", 31, "TEN", "TEN", "Tennessee Titans"),
    TeamInfo("28", 32, "WAS", "WSH", "Washington Commanders"),
)

TEAMS_BY_ESPN_ID = MappingProxyType({t.espn_id: t for t in _TEAMS})
ABBREVIATION_MAP = MappingProxyType(
    {t.espn_abbreviation: t.abbreviation for t in _TEAMS}
    | {t.abbreviation: t.abbreviation for t in _TEAMS}
)


def all_teams() -> List[TeamInfo]:
    return list(_TEAMS)


def get_team_by_espn_id(espn_team_id: Optional[str]) -> Optional[TeamInfo]:
    if espn_team_id is None:
        return None
    return TEAMS_BY_ESPN_ID.get(str(espn_team_id).strip())


def get_internal_team_id(espn_team_id: Optional[str]) -> Optional[int]:
    """Map an ESPN team id to the store's team id, or None if unknown."""
    team = get_team_by_espn_id(espn_team_id)
    return team.internal_id if team else None


def map_abbreviation(espn_abbreviation: Optional[str]) -> Optional[str]:
    """ESPN abbreviation -> store abbreviation. Unknown values pass through upper-cased."""
    if not espn_abbreviation:
        return None
    key = espn_abbreviation.strip().upper()
    return ABBREVIATION_MAP.get(key, key)
