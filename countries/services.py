import enum
import logging
import threading

from django.db import DataError, IntegrityError

from .exceptions import MalformedRecord
from .report import collect_stats
from .transform import transform_country
from .utils import format_timestamp, get_now

logger = logging.getLogger(__name__)

# Failures confined to one country; anything else aborts the batch.
RECORD_ERRORS = (
    MalformedRecord, ValueError, TypeError, KeyError, AttributeError, OverflowError,
    IntegrityError, DataError,
)

# One refresh at a time per process.
_refresh_lock = threading.Lock()


class RefreshState(enum.Enum):
    FETCHING = "fetching"
    TRANSACTING = "transacting"
    COMMITTED = "committed"
    FINALIZING = "finalizing"
    DONE = "done"
    ABORTED = "aborted"


class RefreshService:
    """
    Full-snapshot refresh: fetch both sources, upsert every country in one
    transaction, stamp the status row, then redraw the summary image.

    Source failures raise SourceUnavailable before anything is written.
    Bad individual records are counted in ``errors`` and skipped. Any other
    error inside the transaction rolls the whole batch back and is re-raised.
    Image failures are logged and never fail the refresh.
    """

    def __init__(self, store, gateway, renderer, rng=None, lock=None):
        self.store = store
        self.gateway = gateway
        self.renderer = renderer
        self.rng = rng
        self.lock = lock or _refresh_lock
        self.state = None

    def _enter(self, state):
        self.state = state
        logger.info("Refresh %s", state.value)

    def refresh(self):
        with self.lock:
            return self._refresh()

    def _refresh(self):
        self._enter(RefreshState.FETCHING)
        try:
            countries = self.gateway.fetch_countries()
            rates = self.gateway.fetch_exchange_rates()
        except Exception:
            self._enter(RefreshState.ABORTED)
            raise

        self._enter(RefreshState.TRANSACTING)
        processed, errors = 0, 0
        try:
            self.store.begin()
            for raw in countries:
                try:
                    record = transform_country(raw, rates, rng=self.rng)
                    self.store.upsert(record)
                    processed += 1
                except RECORD_ERRORS as e:
                    errors += 1
                    logger.warning("Skipping country %s: %s", _label(raw), e)
            self.store.commit()
        except Exception:
            logger.exception("Refresh failed after %d records, rolling back", processed + errors)
            self.store.rollback()
            self._enter(RefreshState.ABORTED)
            raise

        self._enter(RefreshState.COMMITTED)
        self.store.update_api_status()

        self._enter(RefreshState.FINALIZING)
        self.regenerate_report()

        self._enter(RefreshState.DONE)
        summary = {
            "message": "Countries data refreshed successfully",
            "processed": processed,
            "errors": errors,
            "total_countries": self.store.count(),
            "timestamp": format_timestamp(get_now()),
        }
        logger.info("Refresh done: %(processed)d processed, %(errors)d errors, %(total_countries)d total", summary)
        return summary

    def regenerate_report(self):
        try:
            return self.renderer.render(collect_stats(self.store))
        except Exception:
            logger.exception("Summary image generation failed")
            return None


def _label(raw):
    if isinstance(raw, dict) and raw.get("name"):
        return repr(raw["name"])
    return "<unnamed>"
