"""
Tests for the database connection bootstrap.

Uses an in-memory SQLite database and a mocked unreachable engine;
no PostgreSQL instance is required.
"""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from faultline.infrastructure.database import connect_database
from faultline.shared.errors import AppError, ErrorCode, FaultKind


class TestConnectDatabase:
    def test_connects(self) -> None:
        engine = connect_database("sqlite://")
        try:
            assert engine.url.drivername == "sqlite"
        finally:
            engine.dispose()

    def test_unreachable_database_is_connection_fault(self) -> None:
        engine = MagicMock()
        engine.connect.side_effect = OperationalError("SELECT 1", {}, Exception("refused"))
        with patch("faultline.infrastructure.database.create_engine", return_value=engine):
            with pytest.raises(AppError) as info:
                connect_database("postgresql+psycopg://app@db/app")
        assert info.value.kind is FaultKind.DATABASE_CONNECTION
        assert info.value.http_status == 503
        assert info.value.error_code is ErrorCode.STORAGE_CONNECTION_ERROR
        engine.dispose.assert_called_once()
