"""
Tests for the session registry and per-session serialization.
"""

import threading

import pytest

from ..engine_core.errors import GameNotFoundError, InvalidPlayerCountError
from ..engine_core.move import GamePhase
from ..session import SessionManager, SessionState
from .conftest import STANDARD_PLACEMENTS, play_setup, raise_cells


def _start(manager: SessionManager, players=("alice", "bob")):
    session = manager.create_session(len(players))
    with manager.locked(session.session_id) as game:
        for pid in players:
            game.add_player(pid)
        game.start()
    return session


class TestSessionLifecycle:
    """Create, look up, and end sessions."""

    def test_create_assigns_unique_ids(self, manager):
        first = manager.create_session(2)
        second = manager.create_session(2)
        assert first.session_id != second.session_id
        assert first.game.session_id == first.session_id

    def test_create_with_explicit_id(self, manager):
        session = manager.create_session(3, session_id="table-7")
        assert manager.get_session("table-7") is session
        assert session.game.player_count == 3

    def test_invalid_count_registers_nothing(self, manager):
        with pytest.raises(InvalidPlayerCountError):
            manager.create_session(6)
        assert manager.list_sessions() == []

    def test_get_missing_returns_none(self, manager):
        assert manager.get_session("nope") is None

    def test_require_missing_raises(self, manager):
        with pytest.raises(GameNotFoundError) as exc_info:
            manager.require_session("nope")
        assert exc_info.value.http_status == 404

    def test_locked_missing_raises(self, manager):
        with pytest.raises(GameNotFoundError):
            with manager.locked("nope"):
                pass

    def test_end_session(self, manager):
        session = manager.create_session(2)
        assert manager.end_session(session.session_id)
        assert manager.get_session(session.session_id) is None
        assert not manager.end_session(session.session_id)

    def test_state_follows_phase(self, manager):
        session = manager.create_session(2)
        assert session.state == SessionState.WAITING
        with manager.locked(session.session_id) as game:
            game.add_player("alice")
            game.add_player("bob")
            game.start()
        assert session.state == SessionState.ACTIVE


class TestListing:
    """Active listing and stale cleanup."""

    def _finished(self, manager):
        session = _start(manager)
        with manager.locked(session.session_id) as game:
            raise_cells(game, [(1, 0), (1, 1), (0, 2), (1, 2)], 2)
            play_setup(game, [(0, 0), (4, 4), (0, 1), (4, 3)])
            assert game.phase == GamePhase.FINISHED
        return session

    def test_active_excludes_finished(self, manager):
        waiting = manager.create_session(2)
        finished = self._finished(manager)

        assert manager.list_active_sessions() == [waiting.session_id]
        assert set(manager.list_sessions()) == {waiting.session_id, finished.session_id}
        assert finished.state == SessionState.GAME_OVER

    def test_cleanup_only_old_finished(self, manager):
        old_waiting = manager.create_session(2)
        old_finished = self._finished(manager)
        new_finished = self._finished(manager)
        old_waiting.created_at -= 7200
        old_finished.game.finished_at -= 7200

        removed = manager.cleanup_stale_sessions(max_age_seconds=3600)

        assert removed == [old_finished.session_id]
        assert manager.get_session(old_waiting.session_id) is old_waiting
        assert manager.get_session(new_finished.session_id) is new_finished

    def test_cleanup_measures_from_finish(self, manager):
        """A long match that has only just finished survives cleanup."""
        session = self._finished(manager)
        session.created_at -= 7200

        assert manager.cleanup_stale_sessions(max_age_seconds=3600) == []
        assert manager.get_session(session.session_id) is session


class TestSerialization:
    """Concurrent submissions to one session are applied one at a time."""

    def test_same_move_accepted_once(self, manager, service):
        session = _start(manager)
        session_id = session.session_id
        move = {"kind": "place", "position": {"x": 2, "y": 2}}

        results = []
        barrier = threading.Barrier(8)

        def submit():
            barrier.wait()
            results.append(service.submit_move(session_id, "alice", move))

        threads = [threading.Thread(target=submit) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        accepted = [r for r in results if r.success]
        assert len(accepted) == 1
        assert {r.error_code for r in results if not r.success} == {"NOT_CURRENT_PLAYER"}
        with manager.locked(session_id) as game:
            assert len(game.history) == 1
            assert game.version == accepted[0].snapshot.version

    def test_sessions_are_independent(self, manager):
        first = _start(manager)
        second = _start(manager)

        with manager.locked(first.session_id) as game:
            play_setup(game, STANDARD_PLACEMENTS)

        assert first.game.phase == GamePhase.MOVE
        assert second.game.phase == GamePhase.SETUP
