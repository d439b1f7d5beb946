"""
Wire models for the ESPN core and site APIs.

ESPN mixes ``{"$ref": url}`` pointers and embedded objects under the same
field. Such fields are kept raw on the models and exposed as a ``Link``:
either a ``Reference`` that needs a fetch, or an ``Inline`` value that is
already materialized.
"""
from dataclasses import dataclass
from typing import Annotated, Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, BeforeValidator, Field
from pydantic.alias_generators import to_camel

from espn_scrape.services.numeric import coerce_espn_number

T = TypeVar("T", bound=BaseModel)

EspnNumber = Annotated[float, BeforeValidator(coerce_espn_number)]


@dataclass(frozen=True)
class Reference(Generic[T]):
    """A pointer to an entity that has not been fetched yet."""
    url: str
    model: Type[T]

    async def resolve(self, fetcher) -> Optional[T]:
        return await fetcher.fetch_entity(self.url, self.model)


@dataclass(frozen=True)
class Inline(Generic[T]):
    """An entity embedded directly in its parent document."""
    value: T

    async def resolve(self, fetcher) -> Optional[T]:
        return self.value


Link = Union[Reference, Inline]


def to_link(raw: Any, model: Type[T]) -> Optional[Link]:
    """
    Classify a raw ESPN field as a Reference or an Inline entity.

    ESPN embeds a self ``$ref`` in most inline objects, so only a dict whose
    sole key is ``$ref`` counts as a pointer.
    """
    if raw is None:
        return None
    if isinstance(raw, model):
        return Inline(raw)
    if not isinstance(raw, dict):
        return None
    ref = raw.get("$ref")
    if ref and set(raw.keys()) <= {"$ref"}:
        return Reference(ref, model)
    return Inline(model.model_validate(raw))


class EspnModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        coerce_numbers_to_str = True
        extra = "ignore"


class ReferenceEnvelope(EspnModel):
    count: int = 0
    page_index: int = 0
    page_size: int = 0
    page_count: int = 0
    items: Optional[List[Dict[str, Any]]] = None


class EspnTeam(EspnModel):
    id: str = ""
    uid: Optional[str] = None
    location: Optional[str] = None
    name: Optional[str] = None
    abbreviation: Optional[str] = None
    display_name: Optional[str] = None
    short_display_name: Optional[str] = None


class Headshot(EspnModel):
    href: str = ""
    alt: str = ""


class Position(EspnModel):
    name: Optional[str] = None
    abbreviation: Optional[str] = None


class EspnAthlete(EspnModel):
    id: str = ""
    first_name: str = ""
    last_name: str = ""
    full_name: Optional[str] = None
    display_name: str = ""
    jersey: Optional[str] = None
    position: Optional[Position] = None
    headshot: Optional[Headshot] = None
    team: Optional[Dict[str, Any]] = None

    @property
    def team_link(self) -> Optional[Link]:
        return to_link(self.team, EspnTeam)


class Competitor(EspnModel):
    id: str = ""
    home_away: str = ""
    winner: Optional[bool] = None
    team: Optional[Dict[str, Any]] = None

    @property
    def team_link(self) -> Optional[Link]:
        return to_link(self.team, EspnTeam)


class Competition(EspnModel):
    id: str = ""
    date: Optional[str] = None
    competitors: List[Competitor] = []
    odds: Optional[Dict[str, Any]] = None

    @property
    def odds_ref(self) -> Optional[str]:
        if self.odds:
            return self.odds.get("$ref")
        return None


class EspnGame(EspnModel):
    id: str = ""
    date: Optional[str] = None
    name: Optional[str] = None
    short_name: Optional[str] = None
    competitions: List[Competition] = []


class OddsProvider(EspnModel):
    id: Optional[str] = None
    name: Optional[str] = None


class Odds(EspnModel):
    provider: Optional[OddsProvider] = None
    details: Optional[str] = None
    over_under: EspnNumber = 0.0
    spread: EspnNumber = 0.0


# Site API game summary (box score)

class AthleteStatLine(EspnModel):
    athlete: EspnAthlete = Field(default_factory=EspnAthlete)
    stats: List[Any] = []


class StatCategory(EspnModel):
    name: str = ""
    text: Optional[str] = None
    keys: List[str] = []
    labels: List[str] = []
    athletes: List[AthleteStatLine] = []


class TeamPlayerStats(EspnModel):
    team: Optional[EspnTeam] = None
    statistics: List[StatCategory] = []


class GameBoxScore(EspnModel):
    players: List[TeamPlayerStats] = []


class GameSummary(EspnModel):
    boxscore: Optional[GameBoxScore] = None
