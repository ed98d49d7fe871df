import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import List, Optional

from django.conf import settings
from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

SUMMARY_IMAGE_NAME = "summary.png"
CANVAS_SIZE = (800, 600)
TOP_LIMIT = 5

WHITE = (255, 255, 255)
DARK_GRAY = (50, 50, 50)
LIGHT_GRAY = (200, 200, 200)
BLUE = (41, 128, 185)
GREEN = (39, 174, 96)


@dataclass
class ReportStats:
    total_countries: int
    top_countries: List = field(default_factory=list)
    last_refreshed_at: Optional[str] = None


def collect_stats(store):
    status = store.get_api_status() or {}
    return ReportStats(
        total_countries=store.count(),
        top_countries=store.top_by_gdp(TOP_LIMIT),
        last_refreshed_at=status.get("last_refreshed_at"),
    )


def summary_lines(stats):
    """Ranked "{rank}. {name} - ${gdp}" lines, or the empty-data placeholder."""
    lines = [
        f"{rank}. {country.name} - ${country.estimated_gdp:,.2f}"
        for rank, country in enumerate(stats.top_countries[:TOP_LIMIT], 1)
    ]
    return lines or ["No data available yet"]


def _font(size):
    return ImageFont.load_default(size=size)


class SummaryReportRenderer:
    """Draws the summary PNG into a single, overwritten cache slot."""

    def __init__(self, cache_dir=None):
        self._cache_dir = cache_dir

    @property
    def cache_dir(self):
        return self._cache_dir or settings.CACHE_DIR

    @property
    def image_path(self):
        return os.path.join(self.cache_dir, SUMMARY_IMAGE_NAME)

    def get_summary_image_path(self):
        """Path of the artifact if it exists on disk, else None."""
        path = self.image_path
        return path if os.path.isfile(path) else None

    def ensure_cache_dir(self):
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
        except OSError:
            logger.warning("Cache directory %s cannot be created", self.cache_dir)

    def cache_dir_writable(self):
        return os.path.isdir(self.cache_dir) and os.access(self.cache_dir, os.W_OK)

    def render(self, stats):
        width, height = CANVAS_SIZE
        img = Image.new("RGB", CANVAS_SIZE, color=WHITE)
        draw = ImageDraw.Draw(img)
        title_font = _font(24)
        body_font = _font(18)
        small_font = _font(16)

        # Header
        draw.rectangle([(0, 0), (width, 80)], fill=BLUE)
        title = "Country & Currency Summary"
        title_width = draw.textlength(title, font=title_font)
        draw.text(((width - title_width) / 2, 28), title, fill=WHITE, font=title_font)

        y = 120
        draw.text((50, y), f"Total Countries: {stats.total_countries}", fill=DARK_GRAY, font=body_font)

        y += 40
        draw.line([(50, y), (width - 50, y)], fill=LIGHT_GRAY)
        y += 30
        draw.text((50, y), "Top 5 Countries by Estimated GDP:", fill=BLUE, font=body_font)

        y += 40
        color = DARK_GRAY if stats.top_countries else LIGHT_GRAY
        for line in summary_lines(stats):
            draw.text((70, y), line, fill=color, font=small_font)
            y += 30

        # Footer
        y = height - 60
        draw.line([(50, y), (width - 50, y)], fill=LIGHT_GRAY)
        draw.text(
            (50, y + 20),
            f"Last Refreshed: {stats.last_refreshed_at or 'Never'}",
            fill=GREEN,
            font=small_font,
        )

        os.makedirs(self.cache_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.cache_dir, prefix=".summary-", suffix=".png")
        try:
            with os.fdopen(fd, "wb") as fh:
                img.save(fh, "PNG")
            os.replace(tmp_path, self.image_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logger.info("Summary image written to %s", self.image_path)
        return self.image_path
