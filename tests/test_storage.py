from __future__ import annotations

import json
import sqlite3
from pathlib import Path

import pytest

from hourly_glucose.errors import ErrorReason, PersistenceError
from hourly_glucose.model import HOURS_PER_DAY, ReadingSet
from hourly_glucose.storage import (
    READINGS_KEY,
    AppConfig,
    SQLiteStore,
    deserialize_readings,
    serialize_readings,
)


def _sample() -> ReadingSet:
    rs = ReadingSet.empty().set_reading(0, 0).set_reading(7, 95.5)
    return rs.set_reading(23, 600)


def test_serialized_form_is_24_numbers_or_null() -> None:
    payload = json.loads(serialize_readings(_sample()))
    assert len(payload) == HOURS_PER_DAY
    assert payload[0] == 0
    assert payload[7] == 95.5
    assert payload[23] == 600
    assert payload[1] is None


def test_serialize_roundtrip() -> None:
    rs = _sample()
    assert deserialize_readings(serialize_readings(rs)) == rs
    empty = ReadingSet.empty()
    assert deserialize_readings(serialize_readings(empty)) == empty


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "not json",
        '{"0": 100}',
        json.dumps([None] * 23),
        json.dumps([None] * 25),
        json.dumps([700] + [None] * 23),
        json.dumps([-1] + [None] * 23),
        json.dumps(["120"] + [None] * 23),
        json.dumps([True] + [None] * 23),
        "[NaN" + ", null" * 23 + "]",
        "[" + "1" * 400 + ", null" * 23 + "]",
    ],
)
def test_invalid_payloads_fall_back_to_empty(raw: str | None) -> None:
    assert deserialize_readings(raw) == ReadingSet.empty()


def test_store_readings_roundtrip(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "nested" / "app.sqlite3")
    assert store.load_readings() == ReadingSet.empty()

    store.save_readings(_sample())
    assert SQLiteStore(tmp_path / "nested" / "app.sqlite3").load_readings() == _sample()

    store.save_readings(ReadingSet.empty())
    assert store.load_readings() == ReadingSet.empty()


def test_store_ignores_corrupted_readings(tmp_path: Path) -> None:
    db = tmp_path / "app.sqlite3"
    store = SQLiteStore(db)
    with sqlite3.connect(db) as conn:
        conn.execute(
            "INSERT INTO app_config(key, value) VALUES(?, ?)",
            (READINGS_KEY, json.dumps([1, 2, 3])),
        )
        conn.commit()
    assert store.load_readings() == ReadingSet.empty()


def test_store_config_defaults_and_roundtrip(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    assert store.load_config() == AppConfig(export_dir="", auto_advance=True)

    store.save_config(AppConfig(export_dir="/data/out", auto_advance=False))
    loaded = store.load_config()
    assert loaded.export_dir == "/data/out"
    assert loaded.auto_advance is False


def test_store_wraps_sqlite_errors(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")

    def _broken() -> sqlite3.Connection:
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(store, "_connect", _broken)
    with pytest.raises(PersistenceError) as exc_info:
        store.save_readings(_sample())
    assert exc_info.value.reason is ErrorReason.PERSISTENCE_FAILURE
    with pytest.raises(PersistenceError):
        store.load_readings()


def test_store_closes_its_connections(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    opened: list[sqlite3.Connection] = []
    connect = store._connect

    def _tracking() -> sqlite3.Connection:
        conn = connect()
        opened.append(conn)
        return conn

    monkeypatch.setattr(store, "_connect", _tracking)
    store.save_readings(_sample())
    assert store.load_readings() == _sample()

    assert len(opened) == 2
    for conn in opened:
        with pytest.raises(sqlite3.ProgrammingError):
            conn.execute("SELECT 1")


def test_store_loads_empty_day_when_value_overflows(tmp_path: Path) -> None:
    db = tmp_path / "app.sqlite3"
    store = SQLiteStore(db)
    with sqlite3.connect(db) as conn:
        conn.execute(
            "INSERT INTO app_config(key, value) VALUES(?, ?)",
            (READINGS_KEY, "[" + "9" * 400 + ", null" * 23 + "]"),
        )
        conn.commit()
    assert store.load_readings() == ReadingSet.empty()


def test_store_cannot_be_created_under_a_file(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(PersistenceError):
        SQLiteStore(blocker / "app.sqlite3")
