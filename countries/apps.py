import random

from django.apps import AppConfig
from django.conf import settings


class CountriesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "countries"

    def ready(self):
        # Shared handles, built once per process and handed to the views.
        from .report import SummaryReportRenderer
        from .store import CountryStore
        from .utils import SourceGateway

        self.store = CountryStore()
        self.gateway = SourceGateway()
        self.renderer = SummaryReportRenderer()
        self.renderer.ensure_cache_dir()
        self.rng = random.Random(settings.GDP_MULTIPLIER_SEED)
