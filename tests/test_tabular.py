"""
Tabular file, result log and card list tests.
"""

import pytest

from monitoring.errors import PersistenceError
from monitoring.models import CardIdentity, ListingObservation
from monitoring.tabular import RESULT_COLUMNS, ResultLog, TabularFile, load_card_list


def test_load_card_list_semicolon(tmp_path):
    path = tmp_path / "cards.csv"
    path.write_text(
        "name;collection;number\n"
        " Pikachu ; SVP ;27\n"
        "Charizard;OBF;125\n",
        encoding="utf-8",
    )

    cards = load_card_list(path)

    assert cards == [
        CardIdentity("Pikachu", "SVP", "27"),
        CardIdentity("Charizard", "OBF", "125"),
    ]


def test_load_card_list_comma_with_portuguese_headers(tmp_path):
    path = tmp_path / "cards.csv"
    path.write_text("Nome,Colecao,Numero\nMew,MEW,151\n", encoding="utf-8")

    assert load_card_list(path) == [CardIdentity("Mew", "MEW", "151")]


def test_load_card_list_skips_incomplete_rows(tmp_path):
    path = tmp_path / "cards.csv"
    path.write_text("name;collection;number\nMew;;151\nMew;MEW\nEevee;SVP;7\n", encoding="utf-8")

    assert load_card_list(path) == [CardIdentity("Eevee", "SVP", "7")]


def test_load_card_list_requires_columns(tmp_path):
    path = tmp_path / "cards.csv"
    path.write_text("name;number\nMew;151\n", encoding="utf-8")

    with pytest.raises(PersistenceError):
        load_card_list(path)


def test_load_card_list_missing_file(tmp_path):
    with pytest.raises(PersistenceError):
        load_card_list(tmp_path / "absent.csv")


def test_result_log_writes_header_once(tmp_path, pikachu):
    log = ResultLog(tmp_path / "out" / "results.csv")
    observation = ListingObservation(pikachu, "NM", "Português", 3, 10.0, 10.0)

    log.append([observation])
    log.append([observation])

    lines = log.path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == ";".join(RESULT_COLUMNS)
    assert lines[1] == "Pikachu;SVP;27;NM;3;10.00;10.00;Português"
    assert len(lines) == 3


def test_result_log_ignores_empty_batches(tmp_path):
    log = ResultLog(tmp_path / "results.csv")

    log.append([])

    assert not log.path.exists()


def test_result_log_clear(tmp_path, pikachu):
    log = ResultLog(tmp_path / "results.csv")
    log.append([ListingObservation(pikachu, "NM", "", 1, 1.0, 1.0)])

    log.clear()
    log.clear()

    assert not log.path.exists()


def test_tabular_overwrite_replaces_rows(tmp_path):
    table = TabularFile(tmp_path / "t.csv", ["a", "b"])
    table.append_rows([{"a": "1", "b": "2"}])

    table.overwrite_all([{"a": "3", "b": "4"}])

    assert table.read_all() == [{"a": "3", "b": "4"}]


def test_tabular_read_rejects_short_rows(tmp_path):
    path = tmp_path / "t.csv"
    path.write_text("a;b\n1;2\n3\n", encoding="utf-8")

    with pytest.raises(PersistenceError, match="expected 2"):
        TabularFile(path, ["a", "b"]).read_all()


def test_tabular_read_skips_blank_lines(tmp_path):
    path = tmp_path / "t.csv"
    path.write_text("a;b\n1;2\n\n3;4\n", encoding="utf-8")

    assert TabularFile(path, ["a", "b"]).read_all() == [
        {"a": "1", "b": "2"},
        {"a": "3", "b": "4"},
    ]
