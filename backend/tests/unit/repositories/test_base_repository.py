"""
Unit tests for BaseRepository.

Tests session handling, CRUD helpers and performance logging against the
plugin_info table in in-memory SQLite.
"""

import logging
from unittest.mock import MagicMock

import pytest

from plugininfo.database import PluginInfoRecord, create_session_factory, utcnow
from plugininfo.repositories.base_repository import BaseRepository


class StubRepository(BaseRepository[PluginInfoRecord]):
    """Concrete repository for testing BaseRepository logic."""

    def __init__(self, session_factory) -> None:
        super().__init__(PluginInfoRecord, session_factory)


# --- Helpers ---


def _make_row(row_id: str, service: str = "orca") -> PluginInfoRecord:
    now = utcnow()
    return PluginInfoRecord(
        id=row_id, service=service, body={"id": row_id}, created_at=now, last_modified=now
    )


@pytest.fixture
def repo(settings) -> StubRepository:
    return StubRepository(create_session_factory(settings))


# --- session_scope ---


@pytest.mark.unit
class TestSessionScope:
    """Test commit and rollback behaviour."""

    def test_commits_on_success(self, repo) -> None:
        with repo.session_scope() as session:
            repo.add(session, _make_row("acme.a"))

        with repo.session_scope() as session:
            assert repo.get(session, "acme.a") is not None

    def test_rolls_back_and_reraises(self, repo) -> None:
        with pytest.raises(RuntimeError):
            with repo.session_scope() as session:
                repo.add(session, _make_row("acme.a"))
                raise RuntimeError("boom")

        with repo.session_scope() as session:
            assert repo.get(session, "acme.a") is None

    def test_closes_session(self) -> None:
        session = MagicMock()
        repo = StubRepository(MagicMock(return_value=session))

        with repo.session_scope():
            pass

        session.commit.assert_called_once()
        session.close.assert_called_once()


# --- get / find_many ---


@pytest.mark.unit
class TestReads:
    """Test BaseRepository.get and find_many."""

    def test_get_returns_none_when_missing(self, repo) -> None:
        with repo.session_scope() as session:
            assert repo.get(session, "acme.none") is None

    def test_find_many_orders_by_primary_key(self, repo) -> None:
        with repo.session_scope() as session:
            for row_id in ["acme.c", "acme.a", "acme.b"]:
                repo.add(session, _make_row(row_id))

        with repo.session_scope() as session:
            rows = repo.find_many(session)
            assert [r.id for r in rows] == ["acme.a", "acme.b", "acme.c"]

    def test_find_many_applies_filters(self, repo) -> None:
        with repo.session_scope() as session:
            repo.add(session, _make_row("acme.a", service="orca"))
            repo.add(session, _make_row("acme.b", service="deck"))

        with repo.session_scope() as session:
            rows = repo.find_many(session, {"service": "deck"})
            assert [r.id for r in rows] == ["acme.b"]

    def test_get_logs_and_reraises_errors(self, repo, caplog) -> None:
        session = MagicMock()
        session.get.side_effect = RuntimeError("db down")

        with caplog.at_level(logging.ERROR):
            with pytest.raises(RuntimeError):
                repo.get(session, "acme.a")

        assert "Error in get with key acme.a" in caplog.text


# --- add / remove ---


@pytest.mark.unit
class TestWrites:
    """Test BaseRepository.add and remove."""

    def test_add_duplicate_key_raises(self, repo) -> None:
        with repo.session_scope() as session:
            repo.add(session, _make_row("acme.a"))

        with pytest.raises(Exception):
            with repo.session_scope() as session:
                repo.add(session, _make_row("acme.a"))

    def test_remove(self, repo) -> None:
        with repo.session_scope() as session:
            repo.add(session, _make_row("acme.a"))

        with repo.session_scope() as session:
            repo.remove(session, repo.get(session, "acme.a"))

        with repo.session_scope() as session:
            assert repo.find_many(session) == []


# --- _log_query_performance ---


@pytest.mark.unit
class TestLogQueryPerformance:
    """Test slow query logging."""

    def test_slow_query_logs_warning(self, repo, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            repo._log_query_performance("find_many", {"service": "orca"}, 2.5, result_count=3)

        assert "SLOW QUERY: find_many completed in 2.500s (3 results)" in caplog.text

    def test_fast_query_logs_debug(self, repo, caplog) -> None:
        with caplog.at_level(logging.DEBUG):
            repo._log_query_performance("get", {"key": "acme.a"}, 0.01)

        assert "get completed in 0.010s" in caplog.text
        assert "SLOW QUERY" not in caplog.text

    def test_logger_named_after_model(self, repo) -> None:
        assert repo.logger.name.endswith(".PluginInfoRecord")
