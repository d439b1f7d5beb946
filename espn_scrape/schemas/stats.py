"""
Readers for the passing/rushing/receiving JSON blobs on player_stats.

The blobs are schema-on-read: keys are matched case-insensitively, unknown
keys are ignored and missing keys read as None. A blob that is not a mapping
(or not valid JSON) reads as an empty record.
"""
import json
from typing import Any, Optional

from pydantic import BaseModel, ValidationError, field_validator, model_validator


class StatBlob(BaseModel):
    class Config:
        extra = "ignore"

    @model_validator(mode="before")
    @classmethod
    def _lower_keys(cls, data: Any) -> Any:
        if isinstance(data, (str, bytes)):
            try:
                data = json.loads(data)
            except ValueError:
                return {}
        if not isinstance(data, dict):
            return {}
        return {str(k).lower(): v for k, v in data.items()}

    @field_validator("*", mode="wrap")
    @classmethod
    def _lenient(cls, value: Any, handler) -> Any:
        # A malformed value reads as missing rather than failing the whole blob
        try:
            return handler(value)
        except ValidationError:
            return None


def _ratio(numerator: Optional[float], denominator: Optional[float], scale: float = 1.0) -> Optional[float]:
    if numerator is None or not denominator:
        return None
    return numerator / denominator * scale


class PassingStats(StatBlob):
    completions: Optional[int] = None
    passingattempts: Optional[int] = None
    passingyards: Optional[int] = None
    yardsperpassattempt: Optional[float] = None
    passingtouchdowns: Optional[int] = None
    interceptions: Optional[int] = None
    sacks: Optional[int] = None
    sackyardslost: Optional[int] = None
    adjqbr: Optional[float] = None
    qbrating: Optional[float] = None

    @property
    def completion_percentage(self) -> Optional[float]:
        return _ratio(self.completions, self.passingattempts, 100.0)

    @property
    def completion_attempts_display(self) -> str:
        return f"{self.completions or 0}/{self.passingattempts or 0}"


class RushingStats(StatBlob):
    rushingattempts: Optional[int] = None
    rushingyards: Optional[int] = None
    yardsperrushattempt: Optional[float] = None
    rushingtouchdowns: Optional[int] = None
    longrushing: Optional[int] = None
    rushingfirstdowns: Optional[int] = None

    @property
    def yards_per_carry(self) -> Optional[float]:
        return _ratio(self.rushingyards, self.rushingattempts)


class ReceivingStats(StatBlob):
    receptions: Optional[int] = None
    receivingtargets: Optional[int] = None
    receivingyards: Optional[int] = None
    yardsperreception: Optional[float] = None
    receivingtouchdowns: Optional[int] = None
    longreception: Optional[int] = None
    receivingfirstdowns: Optional[int] = None

    @property
    def catch_percentage(self) -> Optional[float]:
        return _ratio(self.receptions, self.receivingtargets, 100.0)

    @property
    def reception_targets_display(self) -> str:
        return f"{self.receptions or 0}/{self.receivingtargets or 0}"
