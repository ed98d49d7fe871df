import logging
from datetime import datetime, timezone

import requests
from django.conf import settings
from django.utils.dateparse import parse_datetime

from .exceptions import SourceUnavailable

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class SourceGateway:
    """
    Read-only access to the two upstream sources.

    No retries: any transport error, non-200 status, unparseable body or
    empty payload raises SourceUnavailable straight away.
    """

    def __init__(self, countries_url=None, rates_url=None, timeout=None):
        self._countries_url = countries_url
        self._rates_url = rates_url
        self._timeout = timeout

    @property
    def countries_url(self):
        return self._countries_url or settings.RESTCOUNTRIES_API

    @property
    def rates_url(self):
        return self._rates_url or settings.EXCHANGERATE_API

    @property
    def timeout(self):
        if self._timeout is not None:
            return self._timeout
        return (settings.EXTERNAL_CONNECT_TIMEOUT, settings.EXTERNAL_READ_TIMEOUT)

    def _get_json(self, source, url, params=None):
        try:
            resp = requests.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("%s request failed: %s", source, e)
            raise SourceUnavailable(f"Failed to fetch {source} data: {e}")

        if resp.status_code != 200:
            logger.warning("%s returned status %s", source, resp.status_code)
            raise SourceUnavailable(f"{source} returned non-200 status code: {resp.status_code}")

        try:
            return resp.json()
        except ValueError as e:
            logger.warning("%s returned an unparseable body: %s", source, e)
            raise SourceUnavailable(f"Failed to parse {source} response: {e}")

    def fetch_countries(self):
        data = self._get_json(
            "Countries API",
            self.countries_url,
            params={"fields": settings.RESTCOUNTRIES_FIELDS},
        )
        if not isinstance(data, list) or not data:
            raise SourceUnavailable("Countries API returned empty or invalid data")
        return data

    def fetch_exchange_rates(self):
        data = self._get_json("Exchange Rate API", self.rates_url)
        rates = data.get("rates") if isinstance(data, dict) else None
        if not isinstance(rates, dict) or not rates:
            raise SourceUnavailable("Exchange Rate API returned invalid data structure")
        return rates


def get_now():
    """Return current UTC datetime (aware)."""
    return datetime.now(timezone.utc)


def format_timestamp(value):
    """
    Render a timestamp as UTC with second precision (2024-01-31T12:00:00Z).

    Strings that cannot be parsed are returned unchanged; None stays None.
    """
    if value is None:
        return None
    if isinstance(value, str):
        try:
            parsed = parse_datetime(value)
        except ValueError:
            parsed = None
        if parsed is None:
            return value
        value = parsed
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)
