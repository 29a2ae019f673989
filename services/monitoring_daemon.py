"""
Monitoring Daemon

Headless runner that monitors a card list in the foreground, without the
web API, until it receives SIGINT or SIGTERM.

Usage:
    python -m services.monitoring_daemon cards.csv
"""

import argparse
import logging
import signal
import sys

from config.settings import Settings
from monitoring.scheduler import PriceMonitor
from monitoring.tabular import load_card_list

logger = logging.getLogger(__name__)


def install_signal_handlers(monitor):
    """Stop the monitor on SIGINT/SIGTERM; the main thread keeps joining."""

    def signal_handler(signum, frame):
        logger.info("Received shutdown signal. Stopping gracefully...")
        monitor.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def run(monitor, cards, poll_interval=1.0):
    """
    Start the monitor and block until its background thread exits.

    Returns:
        int: Process exit code
    """
    if not cards:
        logger.error("No cards to monitor.")
        return 1
    if not monitor.start(cards):
        return 1
    while not monitor.join(timeout=poll_interval):
        pass
    logger.info("Monitoring Daemon stopped")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Card price monitoring daemon")
    parser.add_argument("cards", help="Card list CSV (name;collection;number)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler("monitoring_daemon.log"), logging.StreamHandler()],
    )

    settings = Settings.from_env()
    monitor = PriceMonitor(settings)
    install_signal_handlers(monitor)

    logger.info("Starting Monitoring Daemon")
    logger.info("Press Ctrl+C to stop")
    return run(monitor, load_card_list(args.cards))


if __name__ == "__main__":
    sys.exit(main())
