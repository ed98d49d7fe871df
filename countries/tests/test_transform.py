import random

from django.test import SimpleTestCase

from countries.exceptions import MalformedRecord
from countries.transform import (
    MULTIPLIER_MAX,
    MULTIPLIER_MIN,
    first_currency_code,
    make_multiplier,
    transform_country,
)

from .helpers import FixedRng, raw_country


class TransformCountryTests(SimpleTestCase):

    def test_matched_rate_gives_exact_gdp_with_pinned_multiplier(self):
        raw = raw_country("Nigeria", population=200, code="NGN")
        rec = transform_country(raw, {"NGN": 1600.0}, rng=FixedRng(1200))

        self.assertEqual(rec.name, "Nigeria")
        self.assertEqual(rec.capital, "Nigeria City")
        self.assertEqual(rec.region, "Test Region")
        self.assertEqual(rec.flag_url, "http://example.com/nigeria.png")
        self.assertEqual(rec.currency_code, "NGN")
        self.assertEqual(rec.exchange_rate, 1600.0)
        self.assertEqual(rec.estimated_gdp, 200 * 1200 / 1600.0)

    def test_gdp_multiplier_stays_in_range(self):
        rng = random.Random(7)
        for _ in range(50):
            rec = transform_country(raw_country("Ghana", population=1000, code="GHS"), {"GHS": 2.0}, rng=rng)
            multiplier = rec.estimated_gdp * 2.0 / 1000
            self.assertGreaterEqual(multiplier, MULTIPLIER_MIN)
            self.assertLessEqual(multiplier, MULTIPLIER_MAX)

    def test_seeded_rng_is_reproducible(self):
        raw = raw_country("Kenya", population=5000, code="KES")
        first = transform_country(raw, {"KES": 130.0}, rng=random.Random(42))
        second = transform_country(raw, {"KES": 130.0}, rng=random.Random(42))
        self.assertEqual(first.estimated_gdp, second.estimated_gdp)

    def test_unmatched_currency_leaves_rate_and_gdp_absent(self):
        rec = transform_country(raw_country("Atlantis", code="ATL"), {"USD": 1.0}, rng=FixedRng())
        self.assertEqual(rec.currency_code, "ATL")
        self.assertIsNone(rec.exchange_rate)
        self.assertIsNone(rec.estimated_gdp)
        self.assertEqual(rec.population, 1000)
        self.assertEqual(rec.capital, "Atlantis City")

    def test_no_currencies_leaves_code_rate_and_gdp_absent(self):
        rec = transform_country(raw_country("Antarctica", code=None), {"USD": 1.0})
        self.assertIsNone(rec.currency_code)
        self.assertIsNone(rec.exchange_rate)
        self.assertIsNone(rec.estimated_gdp)

    def test_non_positive_rate_is_treated_as_absent(self):
        for rate in (0, -3.5, "not-a-number", None):
            rec = transform_country(raw_country("Zeroland", code="ZRL"), {"ZRL": rate})
            self.assertIsNone(rec.exchange_rate, rate)
            self.assertIsNone(rec.estimated_gdp, rate)

    def test_missing_optional_fields_default(self):
        rec = transform_country({"name": "Bare"}, {})
        self.assertEqual(rec.population, 0)
        self.assertIsNone(rec.capital)
        self.assertIsNone(rec.region)
        self.assertIsNone(rec.flag_url)
        self.assertIsNone(rec.currency_code)

    def test_population_is_coerced_to_int(self):
        rec = transform_country({"name": "Stringland", "population": "1234"}, {})
        self.assertEqual(rec.population, 1234)

    def test_structural_problems_raise_malformed_record(self):
        for raw in (None, "Japan", [], {"capital": "Nowhere"}, {"name": "  "},
                    {"name": "X", "population": "many"}, {"name": "Y", "population": -1}):
            with self.assertRaises(MalformedRecord, msg=repr(raw)):
                transform_country(raw, {})

    def test_population_out_of_range_raises_malformed_record(self):
        for population in (float("inf"), float("nan"), 10 ** 20, 2 ** 63):
            with self.assertRaises(MalformedRecord, msg=repr(population)):
                transform_country({"name": "Huge", "population": population}, {"USD": 1.0})

    def test_largest_storable_population_is_accepted(self):
        rec = transform_country({"name": "Max", "population": 2 ** 63 - 1}, {})
        self.assertEqual(rec.population, 2 ** 63 - 1)


class FirstCurrencyCodeTests(SimpleTestCase):

    def test_takes_first_in_source_order_and_uppercases(self):
        self.assertEqual(first_currency_code([{"code": "eur"}, {"code": "USD"}]), "EUR")

    def test_mapping_keyed_by_code(self):
        self.assertEqual(first_currency_code({"CHF": {"name": "Swiss franc"}}), "CHF")

    def test_invalid_codes_are_absent(self):
        self.assertIsNone(first_currency_code([{"code": "(none)"}]))
        self.assertIsNone(first_currency_code([{"name": "no code"}]))
        self.assertIsNone(first_currency_code([None]))
        self.assertIsNone(first_currency_code("USD"))

    def test_make_multiplier_uses_given_rng(self):
        self.assertEqual(make_multiplier(FixedRng(1999)), 1999)
