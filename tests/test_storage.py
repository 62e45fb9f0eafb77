import json
from datetime import date, time

import pytest
import sqlalchemy as sa

from poolladder.core.config import Settings
from poolladder.models import AuditLog
from poolladder.services.errors import PersistenceError
from poolladder.services.ladder import LadderStore
from poolladder.storage.json_files import JsonFileStorage
from poolladder.storage.memory import MemoryStorage
from poolladder.storage.repository import LadderRepository, build_repository
from poolladder.storage.sql import SqlStorage
from scripts import import_json_to_sql

from tests.testkit import FailingStorage, FakeClock


def sample_store() -> LadderStore:
    clock = FakeClock()
    store = LadderStore(clock=clock)
    a = store.add_player("Alice")
    b = store.add_player("Bob")
    c = store.add_player("Cara")
    m = store.schedule_match(a.id, b.id, date(2025, 2, 1), time(19, 0))
    store.record_result(m.id, 5, 3)
    store.schedule_match(c.id, a.id, date(2025, 2, 8))
    store.remove_player(b.id)
    return store


def assert_same_ladder(loaded: LadderStore, original: LadderStore):
    assert loaded.players() == original.players()
    assert loaded.matches() == original.matches()
    assert loaded.snapshot().next_player_id == original.snapshot().next_player_id
    assert loaded.snapshot().next_match_id == original.snapshot().next_match_id


# -- json ------------------------------------------------------------------

def test_json_storage_missing_directory_is_not_available(tmp_path):
    assert JsonFileStorage(tmp_path / "nope").load().available is False


def test_json_storage_round_trip(tmp_path):
    original = sample_store()
    repo = LadderRepository([JsonFileStorage(tmp_path)])

    repo.save(original)

    assert sorted(p.name for p in tmp_path.iterdir()) == ["matches.json", "meta.json", "players.json"]
    players = json.loads((tmp_path / "players.json").read_text())
    assert [p["name"] for p in players] == ["Alice", "Cara"]
    assert_same_ladder(repo.load(), original)


def test_json_storage_corrupt_file_is_not_available(tmp_path):
    (tmp_path / "players.json").write_text("{not json")
    assert JsonFileStorage(tmp_path).load().available is False


def test_json_storage_undecodable_file_is_not_available(tmp_path):
    (tmp_path / "players.json").write_bytes(b'[{"id": 1, "name": "\xff\xfe"}]')

    assert JsonFileStorage(tmp_path).load().available is False
    assert LadderRepository([JsonFileStorage(tmp_path)]).load().players() == ()


def test_json_storage_write_failure_raises_persistence_error(tmp_path):
    blocker = tmp_path / "data"
    blocker.write_text("a file, not a directory")

    with pytest.raises(PersistenceError):
        JsonFileStorage(blocker).save([], [], {})


# -- sql -------------------------------------------------------------------

@pytest.fixture
def sql_storage(tmp_path):
    return SqlStorage(f"sqlite:///{tmp_path / 'ladder.db'}")


def test_sql_storage_empty_database_is_not_available(sql_storage):
    assert sql_storage.load().available is False


def test_sql_storage_round_trip(sql_storage):
    original = sample_store()
    repo = LadderRepository([sql_storage])

    repo.save(original)
    repo.save(original)

    assert_same_ladder(repo.load(), original)


def test_sql_storage_writes_an_audit_row_per_save(sql_storage):
    repo = LadderRepository([sql_storage])
    repo.save(sample_store())
    repo.save(sample_store())

    with sql_storage.SessionLocal() as db:
        rows = db.execute(sa.select(AuditLog)).scalars().all()
    assert len(rows) == 2
    assert (rows[0].action, rows[0].player_count, rows[0].match_count) == ("snapshot_saved", 2, 2)
    assert rows[0].next_player_id == 4


# -- memory / repository ---------------------------------------------------

def test_memory_storage_copies_on_save_and_load():
    storage = MemoryStorage()
    assert storage.load().available is False

    players = [{"id": 1, "name": "A", "rank": 1}]
    storage.save(players, [], {})
    players[0]["name"] = "changed"

    assert storage.load().players[0]["name"] == "A"


def test_repository_loads_from_first_available_storage(tmp_path):
    original = sample_store()
    json_storage = JsonFileStorage(tmp_path)
    LadderRepository([json_storage]).save(original)

    memory = MemoryStorage()
    repo = LadderRepository([memory, json_storage])

    assert_same_ladder(repo.load(), original)
    assert memory.load().available is False


def test_repository_save_writes_every_storage(tmp_path):
    memory = MemoryStorage()
    json_storage = JsonFileStorage(tmp_path)
    repo = LadderRepository([memory, json_storage])

    snapshot = repo.save(sample_store())

    assert len(snapshot.players) == 2
    assert memory.load().available is True
    assert json_storage.load().available is True


def test_repository_with_no_data_starts_empty():
    store = LadderRepository([MemoryStorage()]).load()
    assert store.players() == ()


def test_repository_save_failure_propagates():
    with pytest.raises(PersistenceError):
        LadderRepository([MemoryStorage(), FailingStorage()]).save(sample_store())


def test_build_repository_honours_backend_order(tmp_path):
    settings = Settings(
        STORAGE_BACKENDS="sql, memory,json",
        DATABASE_URL=f"sqlite:///{tmp_path / 'ladder.db'}",
        DATA_DIR=str(tmp_path / "data"),
    )

    repo = build_repository(settings)

    assert [s.name for s in repo.storages] == ["sql", "memory", "json"]


def test_build_repository_skips_sql_without_url(tmp_path):
    settings = Settings(STORAGE_BACKENDS="sql,json", DATABASE_URL=None, DATA_DIR=str(tmp_path))
    assert [s.name for s in build_repository(settings).storages] == ["json"]


def test_build_repository_falls_back_to_memory():
    settings = Settings(STORAGE_BACKENDS=" , ")
    assert [s.name for s in build_repository(settings).storages] == ["memory"]


def test_build_repository_rejects_unknown_backend():
    with pytest.raises(ValueError):
        build_repository(Settings(STORAGE_BACKENDS="json,redis"))


def test_import_script_copies_json_into_sql(tmp_path, monkeypatch, capsys):
    original = sample_store()
    LadderRepository([JsonFileStorage(tmp_path / "data")]).save(original)
    url = f"sqlite:///{tmp_path / 'ladder.db'}"
    monkeypatch.setattr("sys.argv", ["import_json_to_sql", str(tmp_path / "data"), url])

    import_json_to_sql.main()

    assert "players=2 matches=2" in capsys.readouterr().out
    assert_same_ladder(LadderRepository([SqlStorage(url)]).load(), original)
