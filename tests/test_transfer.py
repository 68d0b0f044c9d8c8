import json

import pytest

from conftest import FlakyStore, make_repo
from habit_tracker.errors import ImportMalformedError, ImportVersionError
from habit_tracker.transfer import dumps, export_all, export_filename, import_all


def seed(repo):
    read = repo.create_habit("Read", color="#22c55e")
    gym = repo.create_habit("Gym", frequency="weekly", target_days=3)
    old = repo.create_habit("Old")
    repo.archive_habit(old.id)
    repo.upsert_log(read.id, "2024-01-01", True)
    repo.upsert_log(read.id, "2024-01-02", False)
    repo.upsert_log(gym.id, "2024-01-03", True)
    repo.save_note("2024-01-02", "Rainy")
    return read, gym, old


def test_export_document_shape(repo):
    seed(repo)
    doc = export_all(repo, exported_at="2024-01-07T12:00:00")
    assert doc["version"] == 1
    assert doc["exported_at"] == "2024-01-07T12:00:00"
    assert len(doc["habits"]) == 3
    assert len(doc["logs"]) == 3
    assert doc["notes"][0]["note"] == "Rainy"
    assert json.loads(dumps(doc)) == doc
    assert export_filename("2024-01-07") == "habits-export-2024-01-07.json"


def test_round_trip_into_empty_store(repo, store, tmp_path):
    seed(repo)
    text = dumps(export_all(repo))

    other = make_repo(FlakyStore(str(tmp_path / "other.db")))
    report = import_all(other, text)

    assert report.ok
    assert (report.habits, report.logs, report.notes) == (3, 3, 1)
    for name in ("logs", "notes"):
        assert other.store.get_all(name) == store.get_all(name)
    assert other.store.get_all("habits", include_archived=True) == store.get_all("habits", include_archived=True)
    assert [h.name for h in other.list_active_display_habits()] == ["Read", "Gym"]


def test_import_merges_by_key(repo, tmp_path):
    read, _, _ = seed(repo)
    doc = export_all(repo)

    target = make_repo(FlakyStore(str(tmp_path / "other.db")))
    keep = target.create_habit("Keep me")
    import_all(target, doc)
    doc["habits"][0]["name"] = "Read more"
    first_read = next(r for r in doc["logs"] if r["habit_id"] == read.id and r["date"] == "2024-01-01")
    first_read["completed"] = False
    import_all(target, json.dumps(doc).encode("utf-8"))

    names = [h.name for h in target.list_active_display_habits()]
    assert "Keep me" in names and "Read more" in names
    assert target.get_habit(keep.id).name == "Keep me"
    assert target.log_for(read.id, "2024-01-01") is False
    assert len(target.store.get_all("logs")) == 3


@pytest.mark.parametrize("version", [2, 0, "1", None, True])
def test_wrong_version_writes_nothing(repo, store, version):
    doc = {"version": version, "habits": [{"id": "x", "name": "X", "color": "#6366f1", "created_at": "2024-01-01"}]}
    with pytest.raises(ImportVersionError):
        import_all(repo, doc)
    assert store.get_all("habits", include_archived=True) == []


@pytest.mark.parametrize(
    "document",
    [
        "{not json",
        b"\xff\xfe",
        "[1, 2]",
        {"version": 1, "habits": "nope"},
        {"version": 1, "logs": [42]},
        {"version": 1, "logs": [{"date": "2024-01-01"}]},
        {"version": 1, "habits": [{"id": "x"}]},
    ],
)
def test_malformed_documents(repo, store, document):
    with pytest.raises(ImportMalformedError):
        import_all(repo, document)
    assert store.get_all("logs") == []


def test_failed_records_are_reported(repo):
    doc = {
        "version": 1,
        "habits": [
            {"id": "a", "name": "A", "color": "#6366f1", "created_at": "2024-01-01"},
            {"id": "b", "name": "B", "color": "#6366f1", "created_at": None},
        ],
    }
    report = import_all(repo, doc)
    assert report.habits == 1
    assert [(section, record["id"]) for section, record, _ in report.failed] == [("habits", "b")]
    assert [h.id for h in repo.list_active_display_habits()] == ["a"]


@pytest.mark.parametrize(
    "record",
    [
        {"habit_id": "a", "date": "2024-1-5", "completed": True},
        {"habit_id": "a", "date": 20240105, "completed": True},
        {"habit_id": "a", "date": "2024-01-05", "completed": "false"},
        {"habit_id": "a", "date": "2024-01-05", "completed": 2},
    ],
)
def test_log_values_are_checked(repo, store, record):
    with pytest.raises(ImportMalformedError):
        import_all(repo, {"version": 1, "logs": [record]})
    assert store.get_all("logs") == []


def test_note_dates_are_checked(repo, store):
    with pytest.raises(ImportMalformedError):
        import_all(repo, {"version": 1, "notes": [{"date": "Jan 5", "note": "hi"}]})
    assert store.get_all("notes") == []


def test_numeric_completed_flags_are_stored_as_bools(repo):
    doc = {
        "version": 1,
        "habits": [{"id": "a", "name": "A", "color": "#6366f1", "created_at": "2024-01-01"}],
        "logs": [
            {"habit_id": "a", "date": "2024-01-05", "completed": 1},
            {"habit_id": "a", "date": "2024-01-06", "completed": 0},
        ],
    }
    import_all(repo, doc)
    assert repo.log_for("a", "2024-01-05") is True
    assert repo.log_for("a", "2024-01-06") is False
