import json

import pytest

from cortexmem.db.database import Database
from cortexmem.db.observations import NewObservation
from cortexmem.export import (
    ExportData,
    export_data,
    import_data,
    run_export,
    run_import,
)


def _seed(db):
    db.create_session("alpha", "/work/alpha")
    ids = [
        db.insert_observation(
            NewObservation(
                project="alpha",
                title="Use WAL",
                content="journal mode wal is faster",
                obs_type="decision",
                concepts=["sqlite", "wal"],
            )
        ),
        db.insert_observation(
            NewObservation(
                project="beta",
                title="Fix crash",
                content="null pointer in parser",
                obs_type="bug_fix",
            )
        ),
    ]
    for obs_id in ids:
        db.sync_observation_to_fts(obs_id)
    return ids


@pytest.fixture
def db():
    database = Database.open_in_memory()
    yield database
    database.close()


@pytest.fixture
def env_db(tmp_path, monkeypatch):
    path = tmp_path / "data" / "cortexmem.db"
    monkeypatch.setenv("CORTEXMEM_DB", str(path))
    path.parent.mkdir(parents=True)
    return path


def test_export_contains_everything(db):
    _seed(db)
    data = export_data(db, None)
    assert data.version == "1.4.0"
    assert data.project_filter is None
    assert [o.title for o in data.observations] == ["Use WAL", "Fix crash"]
    assert [s.project for s in data.sessions] == ["alpha"]


def test_export_project_filter(db):
    _seed(db)
    data = export_data(db, "beta")
    assert data.project_filter == "beta"
    assert [o.project for o in data.observations] == ["beta"]
    assert data.sessions == []


def test_json_round_trip(db):
    _seed(db)
    data = export_data(db, None)
    assert ExportData.from_json(data.to_json()) == data


def test_json_uses_type_key(db):
    _seed(db)
    raw = json.loads(export_data(db, None).to_json())
    assert raw["observations"][0]["type"] == "decision"
    assert "obs_type" not in raw["observations"][0]


@pytest.mark.parametrize("text", ["not json", "[]", '{"version": "1"}'])
def test_from_json_rejects_bad_input(text):
    with pytest.raises(ValueError, match="Invalid export file format"):
        ExportData.from_json(text)


def test_import_into_fresh_db_then_skips_duplicates(db):
    _seed(db)
    data = export_data(db, None)
    with Database.open_in_memory() as target:
        assert import_data(target, data, False) == (2, 0)
        assert import_data(target, data, False) == (0, 2)
        assert target.count_active(None) == 2


def test_import_preserves_deleted_at(db):
    ids = _seed(db)
    db.soft_delete(ids[0])
    data = export_data(db, None)
    with Database.open_in_memory() as target:
        import_data(target, data, False)
        exported = target.list_all_observations_for_export(None)
        assert exported[0].deleted_at == data.observations[0].deleted_at
        assert target.count_active(None) == 1


def test_import_replace_clears_existing(db):
    _seed(db)
    data = export_data(db, "beta")
    with Database.open_in_memory() as target:
        obs_id = target.insert_observation(
            NewObservation(project="gamma", title="Old", content="old", obs_type="note")
        )
        target.sync_observation_to_fts(obs_id)
        target.create_session("gamma", "/g")
        assert import_data(target, data, True) == (1, 0)
        titles = [o.title for o in target.list_all_observations_for_export(None)]
        assert titles == ["Fix crash"]
        assert target.list_all_sessions_for_export(None) == []


def test_run_export_writes_file(env_db, tmp_path):
    with Database.open(env_db) as seed_db:
        _seed(seed_db)
    out = tmp_path / "out.json"
    assert run_export(out, "alpha") == out
    raw = json.loads(out.read_text(encoding="utf-8"))
    assert [o["title"] for o in raw["observations"]] == ["Use WAL"]
    assert raw["project_filter"] == "alpha"


def test_run_export_default_path(env_db, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = run_export(None, None)
    assert path.name == "cortexmem-export.json"
    assert (tmp_path / "cortexmem-export.json").exists()


def test_run_import_merges(env_db, tmp_path):
    with Database.open_in_memory() as source:
        _seed(source)
        export_file = tmp_path / "export.json"
        export_file.write_text(export_data(source, None).to_json(), encoding="utf-8")
    assert run_import(export_file, False) == (2, 0)
    assert run_import(export_file, False) == (0, 2)


def test_run_import_replace_declined(env_db, tmp_path):
    with Database.open(env_db) as existing:
        _seed(existing)
    export_file = tmp_path / "export.json"
    with Database.open(env_db) as existing:
        export_file.write_text(export_data(existing, None).to_json(), encoding="utf-8")
    prompts = []

    def decline(prompt):
        prompts.append(prompt)
        return False

    assert run_import(export_file, True, decline) is None
    assert prompts == ["Replace mode will DELETE all existing data. Continue?"]
    with Database.open(env_db) as check:
        assert check.count_active(None) == 2


def test_run_import_replace_accepted(env_db, tmp_path):
    with Database.open(env_db) as existing:
        _seed(existing)
        export_file = tmp_path / "export.json"
        export_file.write_text(export_data(existing, "alpha").to_json(), encoding="utf-8")
    assert run_import(export_file, True, lambda _prompt: True) == (1, 0)
    with Database.open(env_db) as check:
        assert check.count_active(None) == 1


def test_run_import_missing_file(env_db, tmp_path):
    with pytest.raises(OSError, match="Could not read"):
        run_import(tmp_path / "missing.json", False)


def test_run_import_bad_format(env_db, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{}", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid export file format"):
        run_import(bad, False)