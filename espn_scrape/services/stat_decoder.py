"""
Decoding of box score stat categories into typed stat mappings.

A box score category carries parallel ``keys[]`` and per-athlete ``stats[]``
string arrays. Keys are resolved per category: "yds" is passing yards under
"passing" and rushing yards under "rushing", so every category has its own
alias table.

Decoding is total. A value that does not parse is left out of the result,
never zero-filled, and a category with no recognized key decodes to None.
"""
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

from espn_scrape.services.numeric import parse_int, parse_float

StatValue = Union[int, float]

COMPOSITE_DELIMITERS = ("/", "-")


class StatKind(str, Enum):
    PASSING = "passing"
    RUSHING = "rushing"
    RECEIVING = "receiving"
    FUMBLES = "fumbles"
    INTERCEPTIONS = "interceptions"

    @classmethod
    def from_category(cls, name: Optional[str]) -> Optional["StatKind"]:
        try:
            return cls((name or "").strip().lower())
        except ValueError:
            return None


# Categories that contribute to a stat record
DECODED_KINDS = frozenset({StatKind.PASSING, StatKind.RUSHING, StatKind.RECEIVING, StatKind.FUMBLES})


class FieldRule(NamedTuple):
    kind: str                   # "int", "float" or "composite"
    fields: Tuple[str, ...]


def _int(field: str) -> FieldRule:
    return FieldRule("int", (field,))


def _float(field: str) -> FieldRule:
    return FieldRule("float", (field,))


def _pair(first: str, second: str) -> FieldRule:
    return FieldRule("composite", (first, second))


def _table(entries: Sequence[Tuple[Sequence[str], FieldRule]]) -> MappingProxyType:
    table = {}
    for aliases, rule in entries:
        for alias in aliases:
            table[alias] = rule
    return MappingProxyType(table)


ALIAS_TABLES = MappingProxyType({
    StatKind.PASSING: _table([
        (("completions/passingattempts", "completions/attempts", "c/att"), _pair("completions", "passingattempts")),
        (("passingyards", "yds"), _int("passingyards")),
        (("yardsperpassattempt", "avg"), _float("yardsperpassattempt")),
        (("passingtouchdowns", "td"), _int("passingtouchdowns")),
        (("interceptions", "int"), _int("interceptions")),
        (("sacks-sackyardslost", "sacks"), _pair("sacks", "sackyardslost")),
        (("adjqbr", "qbr"), _float("adjqbr")),
        (("qbrating", "rtg"), _float("qbrating")),
    ]),
    StatKind.RUSHING: _table([
        (("rushingattempts", "car", "carries"), _int("rushingattempts")),
        (("rushingyards", "yds"), _int("rushingyards")),
        (("yardsperrushattempt", "avg"), _float("yardsperrushattempt")),
        (("rushingtouchdowns", "td"), _int("rushingtouchdowns")),
        (("longrushing", "long", "lng"), _int("longrushing")),
        (("rushingfirstdowns",), _int("rushingfirstdowns")),
    ]),
    StatKind.RECEIVING: _table([
        (("receptions", "rec"), _int("receptions")),
        (("receivingyards", "yds"), _int("receivingyards")),
        (("yardsperreception", "avg"), _float("yardsperreception")),
        (("receivingtouchdowns", "td"), _int("receivingtouchdowns")),
        (("longreception", "long", "lng"), _int("longreception")),
        (("receivingtargets", "targ", "targets", "tgts"), _int("receivingtargets")),
        (("receivingfirstdowns",), _int("receivingfirstdowns")),
    ]),
    StatKind.FUMBLES: _table([
        (("fumbles", "fum"), _int("fumbles")),
        (("fumbleslost", "lost"), _int("fumbles_lost")),
    ]),
})


def split_composite(value: Any) -> Optional[Tuple[int, int]]:
    """
    Split "18/25" or "2-11" at the first delimiter present into two integers.

    Returns None unless both parts parse as integers.
    """
    if value is None:
        return None
    text = str(value).strip()
    positions = [text.find(d) for d in COMPOSITE_DELIMITERS if d in text]
    if not positions:
        return None
    index = min(positions)
    first = parse_int(text[:index])
    second = parse_int(text[index + 1:])
    if first is None or second is None:
        return None
    return first, second


def _apply_rule(rule: FieldRule, raw: Any, output: Dict[str, StatValue]) -> None:
    text = None if raw is None else str(raw)
    if rule.kind == "composite":
        pair = split_composite(text)
        if pair is not None:
            output[rule.fields[0]], output[rule.fields[1]] = pair
        return

    parsed = parse_int(text) if rule.kind == "int" else parse_float(text)
    if parsed is not None:
        output[rule.fields[0]] = parsed


def decode_stat_values(kind: StatKind, keys: List[str], values: List[Any]) -> Optional[Dict[str, StatValue]]:
    """
    Map one athlete's stat values for a category onto canonical field names.

    Pairs ``keys[i]`` with ``values[i]``; extra entries on either side are
    ignored. The first occurrence of a field wins. Returns None when nothing
    was recognized.
    """
    table = ALIAS_TABLES.get(kind)
    if table is None:
        return None

    output: Dict[str, StatValue] = {}
    for key, raw in zip(keys, values):
        rule = table.get((key or "").strip().lower())
        if rule is None or any(f in output for f in rule.fields):
            continue
        _apply_rule(rule, raw, output)

    return output or None


def decode_category(category_name: str, keys: List[str], values: List[Any]) -> Optional[Dict[str, StatValue]]:
    kind = StatKind.from_category(category_name)
    if kind is None or kind not in DECODED_KINDS:
        return None
    return decode_stat_values(kind, keys, values)
