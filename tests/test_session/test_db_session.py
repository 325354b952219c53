from __future__ import annotations

import pytest
import uuid
from sqlalchemy.orm import Session
from unittest.mock import Mock
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import StaticPool

from bookstore.core.config import Settings
from bookstore.db.session import Database, get_db
from bookstore.models.book import Book


class TestDatabase:
    """Test the storage handle."""

    def test_session_factory_configuration(self):
        database = Database("sqlite://")
        try:
            factory = database.session_factory
            assert factory.kw.get('autocommit') is False
            assert factory.kw.get('autoflush') is False
            assert factory.kw.get('expire_on_commit') is False
            assert isinstance(database.session(), Session)
        finally:
            database.dispose()

    def test_in_memory_sqlite_uses_static_pool(self):
        database = Database("sqlite://")
        try:
            assert isinstance(database.engine.pool, StaticPool)
        finally:
            database.dispose()

    def test_from_settings(self, tmp_path):
        settings = Settings(DATABASE_URL=f"sqlite:///{tmp_path / 'from_settings.db'}")
        database = Database.from_settings(settings)
        try:
            assert database.url == settings.DATABASE_URL
            assert database.engine.dialect.name == "sqlite"
        finally:
            database.dispose()

    def test_create_all_and_drop_all(self):
        database = Database("sqlite://")
        try:
            database.create_all()
            tables = set(inspect(database.engine).get_table_names())
            assert {"genres", "books", "users", "orders", "order_items"} <= tables

            database.drop_all()
            assert inspect(database.engine).get_table_names() == []
        finally:
            database.dispose()

    def test_sqlite_foreign_keys_enforced(self):
        database = Database("sqlite://")
        database.create_all()
        session = database.session()
        try:
            assert session.execute(text("PRAGMA foreign_keys")).scalar() == 1

            session.add(
                Book(
                    title="Orphan",
                    writer="Nobody",
                    publisher="Nowhere",
                    publication_year=2000,
                    price=1,
                    stock_quantity=1,
                    genre_id=uuid.uuid4(),
                )
            )
            with pytest.raises(IntegrityError):
                session.commit()
        finally:
            session.close()
            database.dispose()


class TestGetDb:
    """Test the request-scoped session dependency."""

    def _request_with(self, mock_db: Mock) -> Mock:
        mock_request = Mock()
        mock_request.app.state.db.session.return_value = mock_db
        return mock_request

    def test_get_db_yields_and_closes(self):
        mock_db = Mock(spec=Session)
        mock_request = self._request_with(mock_db)

        generator = get_db(mock_request)
        session = next(generator)

        mock_request.app.state.db.session.assert_called_once()
        assert session == mock_db
        mock_db.close.assert_not_called()

        # Clean up generator to test finally block
        try:
            next(generator)
        except StopIteration:
            pass

        mock_db.close.assert_called_once()

    def test_get_db_closes_on_error(self):
        mock_db = Mock(spec=Session)
        generator = get_db(self._request_with(mock_db))
        next(generator)

        with pytest.raises(RuntimeError, match="handler failed"):
            generator.throw(RuntimeError("handler failed"))

        mock_db.close.assert_called_once()

    def test_get_db_close_error_propagates(self):
        mock_db = Mock(spec=Session)
        mock_db.close.side_effect = Exception("Database error")
        generator = get_db(self._request_with(mock_db))
        next(generator)

        with pytest.raises(Exception, match="Database error"):
            next(generator)

        mock_db.close.assert_called_once()

    def test_sessions_are_independent(self):
        mock_db1 = Mock(spec=Session)
        mock_db2 = Mock(spec=Session)
        mock_request = Mock()
        mock_request.app.state.db.session.side_effect = [mock_db1, mock_db2]

        generator1 = get_db(mock_request)
        generator2 = get_db(mock_request)
        assert next(generator1) is mock_db1
        assert next(generator2) is mock_db2

        for generator in (generator1, generator2):
            try:
                next(generator)
            except StopIteration:
                pass

        mock_db1.close.assert_called_once()
        mock_db2.close.assert_called_once()
