from __future__ import annotations

from buffer_bridge.sync import UNKNOWN_REVISION, RevisionTracker, SyncState


def make_tracker(revision: int = UNKNOWN_REVISION) -> RevisionTracker:
    return RevisionTracker(SyncState(revision=revision))


def test_first_observation_always_syncs() -> None:
    tracker = make_tracker()
    assert tracker.should_sync(0) is True
    assert tracker.revision == 0


def test_equal_counter_is_skipped() -> None:
    tracker = make_tracker(5)
    assert tracker.should_sync(5) is False
    assert tracker.revision == 5


def test_burst_collapses_to_latest_counter() -> None:
    tracker = make_tracker(5)
    assert tracker.should_sync(9) is True
    assert tracker.should_sync(9) is False
    assert tracker.revision == 9


def test_lower_counter_is_skipped_but_stored() -> None:
    tracker = make_tracker(9)
    assert tracker.should_sync(3) is False
    assert tracker.revision == 3
    assert tracker.should_sync(4) is True


def test_reset_restores_sentinel() -> None:
    state = SyncState(revision=12)
    tracker = RevisionTracker(state)
    tracker.reset()
    assert state.revision == UNKNOWN_REVISION
    assert tracker.should_sync(0) is True


def test_state_reset_adopts_identity() -> None:
    state = SyncState(filetype="python", file="a.py", cwd="/w", revision=7)
    state.reset(cwd="/x", file="b.js", filetype="javascript")
    assert (state.cwd, state.file, state.filetype) == ("/x", "b.js", "javascript")
    assert state.revision == UNKNOWN_REVISION
