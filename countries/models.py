from django.db import models
from django.db.models.functions import Lower


class Country(models.Model):
    # id: auto-generated
    # name: identity of the row, unique regardless of case
    name = models.CharField(max_length=200)
    capital = models.CharField(max_length=200, null=True, blank=True)
    region = models.CharField(max_length=100, null=True, blank=True)
    population = models.BigIntegerField(default=0)
    # currency_code: first currency listed by the source, upper-cased
    currency_code = models.CharField(max_length=3, null=True, blank=True)
    # exchange_rate: local currency per USD; null when unknown or not positive
    exchange_rate = models.FloatField(null=True, blank=True)
    # estimated_gdp: derived on refresh; null exactly when exchange_rate is
    estimated_gdp = models.FloatField(null=True, blank=True, db_index=True)
    flag_url = models.URLField(max_length=500, null=True, blank=True)
    # last_refreshed_at: stamped on every write made by a refresh
    last_refreshed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "countries"
        ordering = ["name"]
        verbose_name_plural = "countries"
        constraints = [
            models.UniqueConstraint(Lower("name"), name="countries_name_ci_unique"),
        ]

    def __str__(self):
        return self.name


class ApiStatus(models.Model):
    """Aggregate refresh metadata; only the row with pk=1 is ever used."""

    SINGLETON_ID = 1

    total_countries = models.IntegerField(default=0)
    last_refreshed_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "api_status"
        verbose_name_plural = "api status"

    def __str__(self):
        return f"ApiStatus (last refreshed: {self.last_refreshed_at})"
