import pytest

from conftest import TODAY
from habit_tracker.errors import StoreError
from habit_tracker.notes import NoteAutosave


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def autosave(repo, clock):
    return NoteAutosave(repo, clock=clock)


def test_rapid_edits_write_once(autosave, repo, store, clock):
    store.writes.clear()
    for text in ("F", "Fe", "Fel", "Felt good"):
        autosave.edit(TODAY, text)
        clock.advance(0.1)
        assert autosave.poll() == []

    assert store.writes == []
    clock.advance(0.5)
    assert autosave.poll() == ["2024-01-07"]
    assert store.writes == ["put"]
    assert repo.note_for(TODAY) == "Felt good"
    assert not autosave.pending()


def test_flush_writes_immediately(autosave, repo):
    autosave.edit("2024-01-06", "Tired")
    autosave.edit(TODAY, "Fine")
    assert autosave.pending("2024-01-06")

    assert sorted(autosave.flush()) == ["2024-01-06", "2024-01-07"]
    assert repo.note_for("2024-01-06") == "Tired"
    assert repo.note_for(TODAY) == "Fine"
    assert autosave.flush() == []


def test_blank_edit_removes_note(autosave, repo):
    repo.save_note(TODAY, "Old")
    autosave.edit(TODAY, "")
    autosave.flush()
    assert repo.note_for(TODAY) == ""


def test_future_note_is_dropped(autosave, store):
    autosave.edit("2024-01-08", "Tomorrow")
    assert autosave.flush() == []
    assert not autosave.pending()
    assert store.get_all("notes") == []


def test_failed_write_stays_queued(autosave, repo, store, clock):
    store.fail.add("put")
    autosave.edit(TODAY, "Keep me")
    clock.advance(1)

    with pytest.raises(StoreError):
        autosave.poll()
    assert autosave.pending(TODAY)

    store.fail.clear()
    assert autosave.poll() == ["2024-01-07"]
    assert repo.note_for(TODAY) == "Keep me"
