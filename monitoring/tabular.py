"""
Tabular Files

Semicolon-delimited CSV files with a header row: the persisted backing of
the price history, the append-only result log and the card list input.
"""

import csv
import logging
from pathlib import Path

from monitoring.errors import PersistenceError
from monitoring.models import CardIdentity

logger = logging.getLogger(__name__)

DELIMITER = ";"

RESULT_COLUMNS = [
    "name", "collection", "number",
    "condition", "quantity", "price",
    "total_price", "language",
]

# Portuguese headers used by older card list files
CARD_COLUMN_ALIASES = {
    "nome": "name",
    "colecao": "collection",
    "numero": "number",
}


class TabularFile:
    """
    A delimited file whose rows are dicts keyed by column name.

    Args:
        path (Path): File location
        columns (list): Column order used when writing; also required on read
    """

    def __init__(self, path, columns, delimiter=DELIMITER):
        self.path = Path(path)
        self.columns = list(columns)
        self.delimiter = delimiter

    def exists(self):
        return self.path.exists()

    def read_all(self):
        """
        Read every data row.

        Returns:
            list: Row dicts; empty when the file does not exist

        Raises:
            PersistenceError: If the file is unreadable or lacks required columns
        """
        try:
            with open(self.path, "r", newline="", encoding="utf-8") as f:
                reader = csv.reader(f, delimiter=self.delimiter)
                header = next(reader, None)
                if header is None:
                    return []
                index = {col.strip().lower(): i for i, col in enumerate(header)}
                missing = [col for col in self.columns if col not in index]
                if missing:
                    raise PersistenceError(
                        f"{self.path} is missing column(s): {', '.join(missing)}"
                    )
                rows = []
                for line in reader:
                    if not line:
                        continue
                    if len(line) < len(header):
                        raise PersistenceError(
                            f"{self.path} line {reader.line_num} has {len(line)} field(s), "
                            f"expected {len(header)}"
                        )
                    rows.append({col: line[index[col]] for col in self.columns})
                return rows
        except FileNotFoundError:
            return []
        except (OSError, csv.Error, UnicodeDecodeError) as e:
            raise PersistenceError(f"Could not read {self.path}: {e}") from e

    def append_rows(self, rows):
        """Append rows, creating the file with its header first when absent."""
        new_file = not self.path.exists()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", newline="", encoding="utf-8") as f:
                writer = csv.DictWriter(f, fieldnames=self.columns, delimiter=self.delimiter)
                if new_file:
                    writer.writeheader()
                writer.writerows(rows)
        except OSError as e:
            raise PersistenceError(f"Could not append to {self.path}: {e}") from e

    def overwrite_all(self, rows):
        """Replace the whole file with a header plus the given rows."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", newline="", encoding="utf-8") as f:
                writer = csv.DictWriter(f, fieldnames=self.columns, delimiter=self.delimiter)
                writer.writeheader()
                writer.writerows(rows)
        except OSError as e:
            raise PersistenceError(f"Could not write {self.path}: {e}") from e

    def delete(self):
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise PersistenceError(f"Could not delete {self.path}: {e}") from e


class ResultLog:
    """Append-only log of listing observations."""

    def __init__(self, path):
        self.table = TabularFile(path, RESULT_COLUMNS)

    @property
    def path(self):
        return self.table.path

    def append(self, observations):
        if not observations:
            logger.info("No results to save.")
            return
        self.table.append_rows([obs.to_row() for obs in observations])
        logger.info(f"Saved {len(observations)} result(s) to {self.path}")

    def read_all(self):
        return self.table.read_all()

    def clear(self):
        self.table.delete()
        logger.info(f"Removed result log {self.path}")


def _sniff_delimiter(path):
    with open(path, "r", newline="", encoding="utf-8") as f:
        header = f.readline()
    if DELIMITER not in header and "," in header:
        return ","
    return DELIMITER


def load_card_list(path):
    """
    Load the cards to track from a CSV file.

    The file may be ';' or ',' delimited and use either English
    (name, collection, number) or Portuguese (nome, colecao, numero) headers.
    Rows with an empty field are skipped.

    Args:
        path (str or Path): Card list file

    Returns:
        list: CardIdentity objects in file order

    Raises:
        PersistenceError: If the file cannot be read or lacks a required column
    """
    path = Path(path)
    try:
        delimiter = _sniff_delimiter(path)
        with open(path, "r", newline="", encoding="utf-8") as f:
            reader = csv.reader(f, delimiter=delimiter)
            header = next(reader, None)
            if header is None:
                raise PersistenceError(f"{path} is empty")

            index = {}
            for i, col in enumerate(header):
                col = col.strip().lower()
                index[CARD_COLUMN_ALIASES.get(col, col)] = i

            for required in ("name", "collection", "number"):
                if required not in index:
                    raise PersistenceError(f"Column '{required}' missing from {path}")

            cards = []
            for line in reader:
                try:
                    cards.append(CardIdentity.create(
                        line[index["name"]],
                        line[index["collection"]],
                        line[index["number"]],
                    ))
                except (IndexError, ValueError):
                    continue
            return cards
    except (OSError, csv.Error, UnicodeDecodeError) as e:
        raise PersistenceError(f"Could not read card list {path}: {e}") from e
