"""
Price History Store

Tracks, per card, the first and the latest observed price. Backed by a
semicolon-delimited file that is rewritten in full after every upsert, which
is fine for the few hundred cards a collector tracks.
"""

import logging
import threading

from monitoring.errors import PersistenceError
from monitoring.models import CardIdentity, PriceHistoryRecord
from monitoring.tabular import TabularFile
from utils.clock import format_timestamp

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = [
    "name", "collection", "number", "current_price",
    "current_date", "initial_price", "initial_date",
]


def _parse_stored_price(value, column, path):
    try:
        return float(value)
    except ValueError as e:
        raise PersistenceError(f"Invalid {column} '{value}' in {path}") from e


class PriceHistoryStore:
    """
    Upsert-only mapping of CardIdentity -> PriceHistoryRecord.

    Every upsert reloads the file, merges the observation and writes the whole
    file back. When the file cannot be read the merge still happens on the last
    records held in memory, the file is left untouched and PersistenceError is
    raised to the caller.
    """

    def __init__(self, path):
        self.table = TabularFile(path, HISTORY_COLUMNS)
        self._records = {}
        self._lock = threading.Lock()

    @property
    def path(self):
        return self.table.path

    def load_all(self):
        """
        Returns:
            dict: CardIdentity -> PriceHistoryRecord, empty when the file is absent

        Raises:
            PersistenceError: If the file exists but is malformed
        """
        records = {}
        for row in self.table.read_all():
            try:
                card = CardIdentity.create(row["name"], row["collection"], row["number"])
            except ValueError as e:
                raise PersistenceError(f"Invalid card row in {self.path}: {e}") from e
            records[card] = PriceHistoryRecord(
                card=card,
                current_price=_parse_stored_price(row["current_price"], "current_price", self.path),
                current_date=row["current_date"],
                initial_price=_parse_stored_price(row["initial_price"], "initial_price", self.path),
                initial_date=row["initial_date"],
            )
        return records

    def save_all(self, records):
        self.table.overwrite_all([record.to_row() for record in records.values()])

    def upsert(self, card, price, observed_at):
        """
        Record an observed price for a card.

        Args:
            card (CardIdentity): Card observed
            price (float): Observed price
            observed_at (datetime or str): Observation time

        Returns:
            PriceHistoryRecord: The merged record

        Raises:
            PersistenceError: If the file could not be read or written
        """
        observed_at = format_timestamp(observed_at)
        with self._lock:
            load_error = None
            try:
                self._records = self.load_all()
            except PersistenceError as e:
                load_error = e

            record = self._records.get(card)
            if record is None:
                record = PriceHistoryRecord(card, price, observed_at, price, observed_at)
                self._records[card] = record
                logger.info(f"Started price history for {card.name} ({price:.2f})")
            else:
                record.observe(price, observed_at)

            if load_error is not None:
                raise load_error
            self.save_all(self._records)
            return record

    def get(self, card):
        with self._lock:
            return self._records.get(card)

    def records(self):
        """Return the persisted records, falling back to the in-memory copy when unreadable."""
        with self._lock:
            try:
                self._records = self.load_all()
            except PersistenceError as e:
                logger.error(f"Using in-memory price history: {e}")
            return list(self._records.values())
