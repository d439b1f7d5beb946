"""Utility functions for the ESPN NFL ingestion jobs."""

import re
import unicodedata
from datetime import date, datetime, timedelta, timezone
from typing import Optional, List, Any, Tuple

SUFFIX_PATTERN = re.compile(r'\s+(JR|SR|III|IV|II)\.?$')
REGULAR_SEASON_WEEKS = 18
POSTSEASON_WEEKS = 5  # wild card, divisional, conference, (pro bowl), super bowl


def normalize_name(name: Optional[str]) -> str:
    """
    Normalize one name part (first or last) for identity matching.

    - Removes accents (é → E, ñ → N)
    - Converts to uppercase and trims
    - Removes periods ("St. Brown" == "St Brown")
    - Collapses runs of whitespace to a single space
    - Drops a trailing suffix token (Jr, Sr, II, III, IV)

    Args:
        name: The name part to normalize

    Returns:
        Normalized name string for comparison
    """
    if not name:
        return ""
    normalized = unicodedata.normalize('NFD', name)
    without_accents = ''.join(c for c in normalized if unicodedata.category(c) != 'Mn')
    result = without_accents.strip().upper().replace('.', '')
    result = re.sub(r'\s+', ' ', result)
    result = SUFFIX_PATTERN.sub('', result)
    return result.strip()


def _first_names_similar(espn_first: str, db_first: str) -> bool:
    # "PAT" vs "PATRICK", "MIKE" vs "MIKE ALLEN"
    if db_first.startswith(espn_first) or espn_first.startswith(db_first):
        return True
    espn_parts = espn_first.split(' ')
    db_parts = db_first.split(' ')
    if len(espn_parts) > 1 and len(db_parts) > 1:
        return espn_parts[0] == db_parts[0]
    return False


def find_player_by_name(first_name: Optional[str], last_name: Optional[str], candidates: List[Any]):
    """
    Find a player among candidates (already scoped to one team) by name.

    An exact normalized first+last match wins. Otherwise the first candidate with
    the same last name and a similar first name is returned. Returns None when
    either name part is missing or nothing matches.
    """
    espn_first = normalize_name(first_name)
    espn_last = normalize_name(last_name)
    if not espn_first or not espn_last:
        return None

    for player in candidates:
        if normalize_name(player.first_name) == espn_first and normalize_name(player.last_name) == espn_last:
            return player

    for player in candidates:
        db_first = normalize_name(player.first_name)
        if not db_first or normalize_name(player.last_name) != espn_last:
            continue
        if _first_names_similar(espn_first, db_first):
            return player

    return None


def split_display_name(display_name: Optional[str]) -> Tuple[str, str]:
    """Split "Amon-Ra St. Brown" into ("Amon-Ra", "St. Brown") on the first space."""
    if not display_name:
        return "", ""
    parts = display_name.strip().split(' ', 1)
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[1]


def current_nfl_season(today: Optional[date] = None) -> int:
    """The NFL season year. January through July belong to the previous season."""
    today = today or date.today()
    return today.year - 1 if today.month <= 7 else today.year


def season_kickoff(season: int) -> date:
    """Kickoff is the Thursday after Labor Day (first Monday of September)."""
    first_of_september = date(season, 9, 1)
    labor_day = first_of_september + timedelta(days=(7 - first_of_september.weekday()) % 7)
    return labor_day + timedelta(days=3)


def estimate_current_week(today: Optional[date] = None) -> int:
    """Estimate the regular season week (1..18) for a calendar date."""
    today = today or date.today()
    kickoff = season_kickoff(current_nfl_season(today))
    if today < kickoff:
        return 1
    week = (today - kickoff).days // 7 + 1
    return min(week, REGULAR_SEASON_WEEKS)


def default_week_range(today: Optional[date] = None) -> Tuple[int, int]:
    """The previous and current week, so late-finishing games are not missed."""
    current = estimate_current_week(today)
    return max(1, current - 1), current


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo; treat naive datetimes read back from the store as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_espn_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse ESPN timestamps such as "2025-09-07T17:00Z"."""
    if not value:
        return None
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return as_utc(parsed)


def last_week_of(season_type: Optional[int]) -> int:
    """Last week number ESPN lists for a season type (type 3 uses playoff numbering 1-5)."""
    return REGULAR_SEASON_WEEKS if season_type in (None, 2) else POSTSEASON_WEEKS
