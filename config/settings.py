"""
Configuration Management

Loads runtime settings from environment variables (and a local .env file).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_WEBSITE = "https://www.ligapokemon.com.br/"


def _env_float(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got '{raw}'") from e


def _env_int(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got '{raw}'") from e


def _env_bool(name, default=False):
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Runtime settings for the scraper, the monitor and the web app."""

    website: str = DEFAULT_WEBSITE
    settle_delay: float = 4.0       # seconds to let dynamic content render
    click_delay: float = 1.0        # seconds after each click
    output_folder: Path = field(default_factory=Path.cwd)
    results_csv: str = "scrape_results.csv"
    history_csv: str = "price_history.csv"
    monitor_interval: int = 60      # seconds between check cycles
    monitor_variance: int = 30      # random jitter added to the interval, [0, variance)
    retry_delay: float = 10.0       # wait after a failed cycle setup
    pause_poll_interval: float = 1.0
    debug: bool = False             # debug runs a visible browser
    chromedriver_path: str = None
    timezone: str = "America/Sao_Paulo"

    def __post_init__(self):
        self.output_folder = Path(self.output_folder)
        if self.monitor_interval < 0 or self.monitor_variance < 0:
            raise ValueError("Monitor interval and variance cannot be negative")

    @property
    def results_path(self):
        return self.output_folder / self.results_csv

    @property
    def history_path(self):
        return self.output_folder / self.history_csv

    @property
    def headless(self):
        return not self.debug

    @classmethod
    def from_env(cls):
        """
        Build settings from the environment.

        Returns:
            Settings: Settings with environment overrides applied

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        load_dotenv()
        return cls(
            website=os.getenv("LIGA_WEBSITE", DEFAULT_WEBSITE),
            settle_delay=_env_float("LIGA_SETTLE_DELAY", 4.0),
            click_delay=_env_float("LIGA_CLICK_DELAY", 1.0),
            output_folder=Path(os.getenv("LIGA_OUTPUT_FOLDER") or Path.cwd()),
            results_csv=os.getenv("LIGA_RESULTS_CSV", "scrape_results.csv"),
            history_csv=os.getenv("LIGA_HISTORY_CSV", "price_history.csv"),
            monitor_interval=_env_int("LIGA_MONITOR_INTERVAL", 60),
            monitor_variance=_env_int("LIGA_MONITOR_VARIANCE", 30),
            retry_delay=_env_float("LIGA_RETRY_DELAY", 10.0),
            debug=_env_bool("LIGA_DEBUG"),
            chromedriver_path=os.getenv("CHROMEDRIVER_PATH") or None,
            timezone=os.getenv("LIGA_TIMEZONE", "America/Sao_Paulo"),
        )
