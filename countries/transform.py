"""
Turning one raw country payload into a storable record.

estimated_gdp = population * multiplier / exchange_rate, where the
multiplier is drawn uniformly from [1000, 2000] for every country on every
refresh. The multiplier is never stored, so the same source data yields a
different estimate on each refresh.
"""
import random
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Optional

from .exceptions import MalformedRecord

MULTIPLIER_MIN = 1000
MULTIPLIER_MAX = 2000
# Largest value a BigIntegerField column holds.
MAX_POPULATION = 2 ** 63 - 1


@dataclass
class CountryRecord:
    name: str
    capital: Optional[str] = None
    region: Optional[str] = None
    population: int = 0
    currency_code: Optional[str] = None
    exchange_rate: Optional[float] = None
    estimated_gdp: Optional[float] = None
    flag_url: Optional[str] = None

    def as_fields(self):
        return asdict(self)


def make_multiplier(rng=None):
    return (rng or random).randint(MULTIPLIER_MIN, MULTIPLIER_MAX)


def _text(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def first_currency_code(currencies):
    """
    Code of the first currency in source order, upper-cased.

    v2 payloads carry a list of {"code": ...}; v3 payloads a mapping keyed
    by code. Anything that is not a three-letter code counts as absent.
    """
    if not currencies:
        return None
    if isinstance(currencies, Mapping):
        code = next(iter(currencies))
    elif isinstance(currencies, (list, tuple)):
        first = currencies[0] or {}
        code = first.get("code") if isinstance(first, Mapping) else None
    else:
        return None
    code = _text(code)
    if not code or len(code) != 3 or not code.isalpha():
        return None
    return code.upper()


def _positive_rate(value):
    try:
        rate = float(value)
    except (TypeError, ValueError):
        return None
    return rate if rate > 0 else None


def transform_country(raw, rates, rng=None):
    """Build a CountryRecord from a raw payload and the USD rate table.

    Missing optional fields become None; only a payload that is not an
    object, or one without a name or with an invalid population, raises
    MalformedRecord.
    """
    if not isinstance(raw, Mapping):
        raise MalformedRecord(f"country payload is not an object: {raw!r}")

    name = _text(raw.get("name"))
    if not name:
        raise MalformedRecord("country payload has no name")

    try:
        population = int(raw.get("population") or 0)
    except (TypeError, ValueError, OverflowError):
        raise MalformedRecord(f"{name}: population is not a number")
    if population < 0:
        raise MalformedRecord(f"{name}: population is negative")
    if population > MAX_POPULATION:
        raise MalformedRecord(f"{name}: population is out of range")

    record = CountryRecord(
        name=name,
        capital=_text(raw.get("capital")),
        region=_text(raw.get("region")),
        population=population,
        flag_url=_text(raw.get("flag")),
        currency_code=first_currency_code(raw.get("currencies")),
    )

    if record.currency_code and record.currency_code in rates:
        rate = _positive_rate(rates[record.currency_code])
        if rate is not None:
            record.exchange_rate = rate
            record.estimated_gdp = population * make_multiplier(rng) / rate

    return record
