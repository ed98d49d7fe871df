import logging

from django.db import DEFAULT_DB_ALIAS, connections, transaction
from django.db.models import F

from .exceptions import NotFound
from .models import ApiStatus, Country
from .utils import format_timestamp, get_now

logger = logging.getLogger(__name__)

SORT_GDP_DESC = "gdp_desc"

# Fields a refresh is allowed to overwrite on an existing row.
MUTABLE_FIELDS = [
    "capital", "region", "population", "currency_code",
    "exchange_rate", "estimated_gdp", "flag_url",
]


class CountryStore:
    """
    Persistence for countries and the singleton status row.

    Individual calls never open the outer transaction themselves; a refresh
    brackets its writes with begin()/commit()/rollback().
    """

    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using
        self._atomic = None

    # --- transaction boundary --- #

    @property
    def in_transaction(self):
        return self._atomic is not None

    def begin(self):
        if self._atomic is not None:
            raise RuntimeError("A transaction is already open on this store")
        atomic = transaction.atomic(using=self.using)
        atomic.__enter__()
        self._atomic = atomic

    def commit(self):
        atomic, self._atomic = self._atomic, None
        if atomic is None:
            raise RuntimeError("No open transaction to commit")
        atomic.__exit__(None, None, None)

    def rollback(self):
        atomic, self._atomic = self._atomic, None
        if atomic is None:
            return
        transaction.set_rollback(True, using=self.using)
        atomic.__exit__(None, None, None)

    # --- countries --- #

    def _countries(self):
        return Country.objects.using(self.using)

    def find_by_name(self, name):
        return self._countries().filter(name__iexact=name).first()

    def upsert(self, record):
        """
        Insert or update by case-insensitive name; returns True if a row changed.

        Runs in its own savepoint so a failing row leaves the surrounding
        transaction usable. A row that vanishes between lookup and update is
        inserted again.
        """
        fields = record.as_fields()
        name = fields.pop("name")
        changes = {field: fields[field] for field in MUTABLE_FIELDS}
        now = get_now()
        with transaction.atomic(using=self.using):
            updated = self._countries().filter(name__iexact=name).update(
                last_refreshed_at=now, updated_at=now, **changes
            )
            if updated:
                return True
            Country(name=name, last_refreshed_at=now, **fields).save(using=self.using, force_insert=True)
            return True

    def delete_by_name(self, name):
        country = self.find_by_name(name)
        if country is None:
            raise NotFound(f"Country '{name}' not found")
        deleted, _ = self._countries().filter(pk=country.pk).delete()
        return deleted > 0

    def all(self, region=None, currency=None, sort=None):
        qs = self._countries().all()
        if region:
            qs = qs.filter(region=region)
        if currency:
            qs = qs.filter(currency_code=currency.upper())
        if sort == SORT_GDP_DESC:
            return qs.order_by(F("estimated_gdp").desc(nulls_last=True), "name")
        return qs.order_by("name")

    def top_by_gdp(self, limit=5):
        return list(
            self._countries()
            .filter(estimated_gdp__isnull=False)
            .order_by("-estimated_gdp", "name")[:limit]
        )

    def count(self):
        return self._countries().count()

    # --- status --- #

    def update_api_status(self):
        status, _ = ApiStatus.objects.using(self.using).update_or_create(
            pk=ApiStatus.SINGLETON_ID,
            defaults={"total_countries": self.count(), "last_refreshed_at": get_now()},
        )
        return status

    def get_api_status(self):
        """Singleton status as a dict, or None before the first refresh."""
        status = ApiStatus.objects.using(self.using).filter(pk=ApiStatus.SINGLETON_ID).first()
        if status is None:
            return None
        return {
            "total_countries": status.total_countries,
            "last_refreshed_at": format_timestamp(status.last_refreshed_at),
        }

    # --- health --- #

    def ping(self):
        with connections[self.using].cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
