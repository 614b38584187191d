"""Runtime settings for the crawler.

Values come from environment variables (optionally via a `.env` file in the
working directory) and can be overridden per run from the CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .errors import SetupError


DEFAULT_BASE_URL = "https://2022electionresults.comelec.gov.ph"
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:100.0) Gecko/20100101 Firefox/100.0"


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Remote service
    # ------------------------------------------------------------------
    base_url: str = field(
        default_factory=lambda: os.environ.get("CRAWL_BASE_URL", DEFAULT_BASE_URL)
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get("CRAWL_USER_AGENT", DEFAULT_USER_AGENT)
    )
    request_delay: float = field(
        default_factory=lambda: float(os.environ.get("CRAWL_REQUEST_DELAY", "0.5"))
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("CRAWL_REQUEST_TIMEOUT", "30.0"))
    )

    # ------------------------------------------------------------------
    # Concurrency
    # ------------------------------------------------------------------
    workers: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_WORKERS", "5"))
    )
    # 0 means "same as workers"
    queue_size: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_QUEUE_SIZE", "0"))
    )

    # ------------------------------------------------------------------
    # Local layout
    # ------------------------------------------------------------------
    output_dir: Path = field(
        default_factory=lambda: Path(os.environ.get("CRAWL_OUTPUT_DIR", "output"))
    )
    leaf_label: str = field(
        default_factory=lambda: os.environ.get("CRAWL_LEAF_LABEL", "Barangay")
    )
    listing_batch: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_LISTING_BATCH", "10"))
    )

    @property
    def root_path(self) -> Path:
        """Local path of the tree root document."""
        return self.output_dir / "root.json"

    @property
    def leaf_dir(self) -> Path:
        """Directory holding the deepest structural tier."""
        return self.output_dir / self.leaf_label

    @property
    def effective_queue_size(self) -> int:
        return self.queue_size if self.queue_size > 0 else self.workers


def load_settings(env_file: Path | None = None, **overrides: Any) -> Settings:
    """Build a Settings object from the environment plus explicit overrides.

    Overrides whose value is None are ignored so CLI flags that were not given
    fall through to the environment defaults.

    Raises:
        SetupError: An environment value does not parse or a count is out of range.
    """
    load_dotenv(env_file or Path.cwd() / ".env", override=False)
    try:
        settings = Settings()
    except ValueError as exc:
        raise SetupError(f"Invalid CRAWL_* environment value: {exc}") from exc
    given = {k: v for k, v in overrides.items() if v is not None}
    if "output_dir" in given:
        given["output_dir"] = Path(given["output_dir"])
    settings = replace(settings, **given)

    if settings.workers < 1:
        raise SetupError(f"workers must be at least 1, got {settings.workers}")
    if settings.queue_size < 0:
        raise SetupError(f"queue_size must not be negative, got {settings.queue_size}")
    if settings.listing_batch < 1:
        raise SetupError(f"listing_batch must be at least 1, got {settings.listing_batch}")
    return settings
