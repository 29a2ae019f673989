"""
Price Monitor Scheduler

Runs the listing scraper over a card list in a background thread, again and
again, merging prices into the price history and appending them to the
result log.

Control (start / toggle pause / stop) is cooperative. The background thread
looks at the run state in exactly two places:
    - before starting a check cycle
    - once per second while sleeping between cycles
A stop or pause requested while a check cycle is running therefore takes
effect only after the cycle has finished.
"""

import logging
import random
import threading
import time
from enum import Enum

from monitoring.browser import open_session
from monitoring.errors import (
    NavigationError,
    PersistenceError,
    ProvisioningError,
    SessionError,
)
from monitoring.listing_scraper import ListingScraper
from monitoring.price_history import PriceHistoryStore
from monitoring.tabular import ResultLog
from utils.clock import now_in_timezone, observation_timestamp

logger = logging.getLogger(__name__)


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


class MonitorControl:
    """
    Run state shared by the background thread and the control callers.

    All reads and writes go through one lock. The card list is set once when a
    start is accepted and only read afterwards.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._state = RunState.IDLE
        self._cards = []

    @property
    def state(self):
        with self._lock:
            return self._state

    @property
    def cards(self):
        with self._lock:
            return list(self._cards)

    def try_start(self, cards):
        """Move IDLE -> RUNNING. Returns False while a run is active or still stopping."""
        with self._lock:
            if self._state is not RunState.IDLE:
                return False
            self._state = RunState.RUNNING
            self._cards = list(cards)
            return True

    def toggle_pause(self):
        """Flip RUNNING <-> PAUSED. Returns the new state, or None when not running."""
        with self._lock:
            if self._state is RunState.RUNNING:
                self._state = RunState.PAUSED
            elif self._state is RunState.PAUSED:
                self._state = RunState.RUNNING
            else:
                return None
            return self._state

    def request_stop(self):
        """Ask the background thread to exit. Returns False when nothing is running."""
        with self._lock:
            if self._state in (RunState.RUNNING, RunState.PAUSED):
                self._state = RunState.STOPPED
                return True
            return False

    def mark_idle(self):
        with self._lock:
            self._state = RunState.IDLE
            self._cards = []


class PriceMonitor:
    """
    Background price monitor.

    Args:
        settings (Settings): Runtime settings
        session_factory (callable): settings -> AutomationSession; one per check cycle
        history (PriceHistoryStore, optional): Defaults to settings.history_path
        result_log (ResultLog, optional): Defaults to settings.results_path
        sleep (callable): Blocking wait, injectable for tests
        rng (random.Random, optional): Source of interval jitter
    """

    def __init__(self, settings, session_factory=open_session, history=None,
                 result_log=None, sleep=time.sleep, rng=None):
        self.settings = settings
        self.session_factory = session_factory
        self.history = history or PriceHistoryStore(settings.history_path)
        self.result_log = result_log or ResultLog(settings.results_path)
        self.sleep = sleep
        self.rng = rng or random.Random()

        self.control = MonitorControl()
        self.launch_count = 0
        self.check_count = 0
        self.last_check_at = None
        self._thread = None

    @property
    def state(self):
        return self.control.state

    def start(self, cards):
        """
        Start monitoring a card list in the background.

        Returns:
            bool: False when a monitor is already running (nothing is started)
        """
        cards = list(cards)
        if not self.control.try_start(cards):
            logger.info("Monitor already running.")
            return False

        self.launch_count += 1
        self.check_count = 0
        self._thread = threading.Thread(
            target=self._run, args=(cards,), name="price-monitor", daemon=True
        )
        self._thread.start()
        logger.info(f"Monitoring started for {len(cards)} card(s).")
        return True

    def toggle_pause(self):
        new_state = self.control.toggle_pause()
        if new_state is None:
            logger.info("Monitor is not running.")
        elif new_state is RunState.PAUSED:
            logger.info("Monitor paused.")
        else:
            logger.info("Monitor resumed.")
        return new_state

    def stop(self):
        if self.control.request_stop():
            logger.info("Monitor stop requested.")
            return True
        return False

    def join(self, timeout=None):
        """Wait for the background thread to exit. Returns True once it has."""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def shutdown(self, timeout=None):
        """Request a stop and block until the background thread has exited."""
        self.stop()
        return self.join(timeout)

    def status(self):
        return {
            "state": self.state.value,
            "cards": len(self.control.cards),
            "checks": self.check_count,
            "last_check_at": self.last_check_at.isoformat() if self.last_check_at else None,
        }

    def scrape_once(self, cards):
        """
        Scrape cards right now with a dedicated browser session.

        The monitor's own cycle session is never shared with this call.

        Raises:
            ProvisioningError: If no driver is available
            SessionError: If the browser could not be started
        """
        with self.session_factory(self.settings) as session:
            scraper = ListingScraper(session, self.settings, sleep=self.sleep)
            observations = scraper.scrape_many(cards)
        self._save_results(observations)
        return observations

    def run_check_cycle(self, cards):
        """
        Run one pass over the card list with a fresh browser session.

        Returns:
            list: ListingObservation objects found in this cycle

        Raises:
            ProvisioningError: If no driver is available
            SessionError: If the browser could not be started
        """
        observations = []
        total = len(cards)
        with self.session_factory(self.settings) as session:
            scraper = ListingScraper(session, self.settings, sleep=self.sleep)
            for index, card in enumerate(cards, start=1):
                percent = int(index / total * 100)
                logger.info(f"{card.label()}: {percent}%")

                try:
                    observation = scraper.scrape(card)
                except (NavigationError, SessionError) as e:
                    logger.warning(f"Could not check {card.label()}: {e}")
                    continue

                if observation is None:
                    logger.info(f"NM listing not found for {card.name}")
                    continue

                observations.append(observation)
                self._record_price(observation)
                logger.info(f"{card.name} price {observation.price:.2f}")

        self._save_results(observations)
        return observations

    def _record_price(self, observation):
        observed_at = observation_timestamp(self.settings.timezone)
        try:
            self.history.upsert(observation.card, observation.price, observed_at)
        except PersistenceError as e:
            logger.error(f"Price history not saved for {observation.card.name}: {e}")

    def _save_results(self, observations):
        if not observations:
            return
        try:
            self.result_log.append(observations)
        except PersistenceError as e:
            logger.error(f"Results not saved: {e}")

    def _next_wait(self):
        variance = self.settings.monitor_variance
        jitter = self.rng.randrange(variance) if variance > 0 else 0
        return self.settings.monitor_interval + jitter

    def _wait_between_cycles(self, seconds):
        """
        Sleep one second at a time, honoring stop and pause.

        Paused seconds do not count towards the wait.

        Returns:
            bool: False when a stop was requested
        """
        remaining = seconds
        while remaining > 0:
            state = self.control.state
            if state is RunState.STOPPED:
                return False
            self.sleep(1)
            if state is not RunState.PAUSED:
                remaining -= 1
        return True

    def _run(self, cards):
        try:
            while True:
                state = self.control.state
                if state is RunState.STOPPED:
                    break
                if state is RunState.PAUSED:
                    self.sleep(self.settings.pause_poll_interval)
                    continue

                self.check_count += 1
                logger.info(f"=== Check #{self.check_count} for {len(cards)} card(s) ===")

                try:
                    self.run_check_cycle(cards)
                except (ProvisioningError, SessionError) as e:
                    logger.error(f"Check cycle setup failed: {e}")
                    self.sleep(self.settings.retry_delay)
                    continue
                except Exception as e:
                    logger.error(f"Error in check cycle: {e}", exc_info=True)
                self.last_check_at = now_in_timezone(self.settings.timezone)

                wait_time = self._next_wait()
                logger.info(f"Waiting {wait_time} seconds before next check...")
                if not self._wait_between_cycles(wait_time):
                    break
        finally:
            self.control.mark_idle()
            logger.info("Monitor finished.")
