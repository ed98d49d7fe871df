from countries.transform import CountryRecord


class FakeResp:
    def __init__(self, json_data, status=200):
        self._json = json_data
        self.status_code = status

    def json(self):
        if isinstance(self._json, Exception):
            raise self._json
        return self._json


class FixedRng:
    """Stands in for random.Random; always rolls the same multiplier."""

    def __init__(self, value=1500):
        self.value = value

    def randint(self, a, b):
        return self.value


def raw_country(name, population=1000, code="USD", region="Test Region", **extra):
    data = {
        "name": name,
        "capital": f"{name} City",
        "region": region,
        "population": population,
        "flag": f"http://example.com/{name.lower()}.png",
        "currencies": [{"code": code}] if code else [],
    }
    data.update(extra)
    return data


def record(name, estimated_gdp=None, **extra):
    fields = {
        "capital": f"{name} City",
        "region": "Test Region",
        "population": 1000,
        "currency_code": "USD",
        "exchange_rate": 1.0 if estimated_gdp is not None else None,
        "estimated_gdp": estimated_gdp,
        "flag_url": f"http://example.com/{name.lower()}.png",
    }
    fields.update(extra)
    return CountryRecord(name=name, **fields)


class FakeGateway:
    def __init__(self, countries=None, rates=None, error=None):
        self.countries = countries or []
        self.rates = rates or {}
        self.error = error
        self.calls = []

    def fetch_countries(self):
        self.calls.append("countries")
        if self.error is not None:
            raise self.error
        return self.countries

    def fetch_exchange_rates(self):
        self.calls.append("rates")
        return self.rates


class RecordingRenderer:
    def __init__(self, error=None):
        self.error = error
        self.rendered = []

    def render(self, stats):
        if self.error is not None:
            raise self.error
        self.rendered.append(stats)
        return "/tmp/summary.png"
