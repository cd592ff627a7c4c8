"""
Tests for the bounded undo/redo history, on its own and through the store.

Run with: python -m pytest griswold/tests/test_history.py -v
"""

import pytest

from griswold.timeline.history import HistoryManager
from griswold.timeline.models import KeyFrame, Project, TrackedSlice
from griswold.timeline.store import ProjectStore


def named(name: str) -> TrackedSlice:
    return TrackedSlice(project=Project(name=name))


class TestHistoryManager:
    def test_starts_empty(self):
        history = HistoryManager(named("start"))
        assert not history.can_undo
        assert not history.can_redo
        assert history.undo() is None
        assert history.redo() is None
        assert history.present.project.name == "start"

    def test_record_then_undo_redo(self):
        history = HistoryManager(named("a"))
        history.record(named("b"))
        history.record(named("c"))

        assert history.undo().project.name == "b"
        assert history.undo().project.name == "a"
        assert history.undo() is None
        assert history.redo().project.name == "b"
        assert history.redo().project.name == "c"
        assert history.redo() is None

    def test_future_is_nearest_first(self):
        history = HistoryManager(named("a"))
        history.record(named("b"))
        history.record(named("c"))
        history.undo()
        history.undo()
        assert [s.project.name for s in history.future] == ["b", "c"]
        assert [s.project.name for s in history.past] == []

    def test_record_clears_future(self):
        history = HistoryManager(named("a"))
        history.record(named("b"))
        history.undo()
        history.record(named("x"))
        assert not history.can_redo
        assert [s.project.name for s in history.past] == ["a"]

    def test_limit_evicts_oldest(self):
        history = HistoryManager(named("0"), limit=3)
        for i in range(1, 6):
            history.record(named(str(i)))
        assert [s.project.name for s in history.past] == ["2", "3", "4"]

    def test_snapshots_do_not_alias_recorded_state(self):
        state = named("a")
        history = HistoryManager(limit=10)
        history.record(state)
        state.project.name = "mutated"
        assert history.present.project.name == "a"

    def test_returned_snapshots_are_copies(self):
        history = HistoryManager(named("a"))
        history.record(named("b"))
        undone = history.undo()
        undone.project.name = "mutated"
        assert history.present.project.name == "a"
        assert history.redo().project.name == "b"
        assert history.undo().project.name == "a"

    def test_clear(self):
        history = HistoryManager(named("a"))
        history.record(named("b"))
        history.clear(named("fresh"))
        assert not history.can_undo
        assert history.present.project.name == "fresh"

    def test_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            HistoryManager(limit=0)


class TestStoreHistory:
    def test_bounded_to_one_hundred(self):
        store = ProjectStore()
        for i in range(150):
            store.set_project(name=f"name-{i}")

        undos = 0
        while store.undo():
            undos += 1

        assert undos == 100
        # The 50 oldest states (the blank project and names 0..48) are gone
        assert store.project.name == "name-49"

    def test_undo_redo_undo_round_trip(self, store, actor_id):
        store.add_keyframe(actor_id, KeyFrame(1, 1))
        before = store.snapshot()
        store.add_keyframe(actor_id, KeyFrame(2, 0))

        store.undo()
        assert store.snapshot() == before
        store.redo()
        store.undo()
        assert store.snapshot() == before

    def test_noop_actions_are_not_recorded(self, store):
        store.remove_actor("missing")
        store.update_actor("missing", label="x")
        store.add_keyframe("missing", KeyFrame(1, 1))
        assert not store.can_undo

    def test_untracked_changes_are_not_recorded(self, store, actor_id):
        store.add_keyframe(actor_id, KeyFrame(0, 1))
        past = len(store.history.past)

        store.select_actor(actor_id)
        store.set_tool("rectangle")
        store.set_zoom(250)
        store.set_audio("song.mp3", 30)
        store.seek(12)
        store.play()

        assert len(store.history.past) == past
        store.undo()
        # Undo only touched the tracked slice
        assert store.playback.current_time == 12
        assert store.playback.is_playing
        assert store.ui.zoom == 250
        assert store.get_actor(actor_id).keyframes == []

    def test_undo_clears_selection_of_vanished_actor(self, store):
        store.add_actor("first")
        new_id = store.add_actor("second")
        store.select_actor(new_id)

        store.undo()
        assert store.get_actor(new_id) is None
        assert store.ui.selected_actor_id is None

    def test_undo_keeps_valid_selection(self, store, actor_id):
        store.select_actor(actor_id)
        store.update_actor(actor_id, label="renamed")
        store.undo()
        assert store.ui.selected_actor_id == actor_id

    def test_redo_clears_selection_of_removed_actor(self, store, actor_id):
        store.remove_actor(actor_id)
        store.undo()
        store.select_actor(actor_id)
        store.redo()
        assert store.ui.selected_actor_id is None

    def test_live_edits_do_not_leak_into_history(self, store, actor_id):
        store.add_keyframe(actor_id, KeyFrame(1, 1))
        live = store.get_actor(actor_id)
        live.label = "tampered"

        store.add_keyframe(actor_id, KeyFrame(2, 0))
        store.undo()
        store.undo()
        assert store.get_actor(actor_id).label == "Lamp"

    def test_new_action_after_undo_drops_redo(self, store, actor_id):
        store.update_actor(actor_id, label="one")
        store.undo()
        store.update_actor(actor_id, label="two")
        assert not store.can_redo
