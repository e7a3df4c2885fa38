"""
Unit tests for database helpers.

Clients and connections are mocks; both plain and awaitable driver methods
are covered.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from e2e_harness.core.exceptions import DatabaseError
from e2e_harness.utils.db import DBConfig, DBUtils


class TestDBConfig:
    """Test cases for configuration lookup."""

    def test_oracle(self):
        config = DBUtils.get_config(
            "oracle",
            env={
                "ORACLE_DB_USER": "scott",
                "ORACLE_DB_PASS": "tiger",
                "ORACLE_DB_URL": "db.test:1521/XE",
            },
        )

        assert config.user == "scott"
        assert config.connect_string == "db.test:1521/XE"
        assert config.port is None

    def test_mysql_default_port(self):
        config = DBUtils.get_config("mysql", env={"MYSQL_DB_HOST": "mysql.test"})

        assert config.host == "mysql.test"
        assert config.port == 3306

    def test_postgres_port_from_env(self):
        config = DBUtils.get_config(
            "postgres", env={"POSTGRES_DB_PORT": "6543", "POSTGRES_DB_NAME": "app"}
        )

        assert config.port == 6543
        assert config.database == "app"

    def test_invalid_port(self):
        with pytest.raises(DatabaseError):
            DBUtils.get_config("postgres", env={"POSTGRES_DB_PORT": "five"})

    def test_unsupported_type(self):
        with pytest.raises(DatabaseError) as exc_info:
            DBUtils.get_config("sqlite", env={})

        assert exc_info.value.db_type == "sqlite"
        assert "Unsupported DB type: sqlite" in str(exc_info.value)

    def test_redacted_hides_password(self):
        config = DBConfig(db_type="mysql", user="app", password="secret", host="h")

        redacted = config.redacted()

        assert redacted["password"] == "***"
        assert "connect_string" not in redacted


class TestDBOperations:
    """Test cases for connect, query and close."""

    @pytest.fixture
    def config(self):
        return DBConfig(db_type="postgres", user="app", password="secret", host="db.test")

    @pytest.mark.asyncio
    async def test_get_connection_sync_client(self, config):
        client = MagicMock()
        client.get_connection.return_value = "connection"

        assert await DBUtils.get_connection(client, config) == "connection"
        client.get_connection.assert_called_once_with(config)

    @pytest.mark.asyncio
    async def test_get_connection_async_client(self, config):
        client = MagicMock()
        client.get_connection = AsyncMock(return_value="async-connection")

        assert await DBUtils.get_connection(client, config) == "async-connection"

    @pytest.mark.asyncio
    async def test_get_connection_without_config(self):
        with pytest.raises(DatabaseError, match="Missing DB configuration"):
            await DBUtils.get_connection(MagicMock(), None)

    @pytest.mark.asyncio
    async def test_get_connection_failure_wrapped(self, config):
        client = MagicMock()
        client.get_connection.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(DatabaseError) as exc_info:
            await DBUtils.get_connection(client, config)

        assert str(exc_info.value) == "Failed to connect: refused"
        assert exc_info.value.operation == "connect"

    @pytest.mark.asyncio
    async def test_execute_query_rows(self):
        connection = MagicMock()
        connection.execute = AsyncMock(return_value=MagicMock(rows=[(1,), (2,)]))

        rows = await DBUtils.execute_query(connection, "SELECT id FROM users WHERE a = $1", [5])

        assert rows == [(1,), (2,)]
        connection.execute.assert_awaited_once_with("SELECT id FROM users WHERE a = $1", [5])

    @pytest.mark.asyncio
    async def test_execute_query_list_result(self):
        connection = MagicMock()
        connection.execute.return_value = [{"id": 1}]

        assert await DBUtils.execute_query(connection, "SELECT 1") == [{"id": 1}]
        connection.execute.assert_called_once_with("SELECT 1", [])

    @pytest.mark.asyncio
    async def test_execute_query_no_rows(self):
        connection = MagicMock()
        connection.execute.return_value = None

        assert await DBUtils.execute_query(connection, "UPDATE users SET a = 1") == []

    @pytest.mark.asyncio
    async def test_execute_query_failure(self):
        connection = MagicMock()
        connection.execute.side_effect = RuntimeError("syntax error")

        with pytest.raises(DatabaseError, match="Query execution failed"):
            await DBUtils.execute_query(connection, "SELEC 1")

    @pytest.mark.asyncio
    async def test_close_connection(self):
        connection = MagicMock()
        connection.close = AsyncMock()

        assert await DBUtils.close_connection(connection) is True
        connection.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_none(self):
        assert await DBUtils.close_connection(None) is False

    @pytest.mark.asyncio
    async def test_close_failure_reported(self):
        connection = MagicMock()
        connection.close.side_effect = RuntimeError("already closed")

        assert await DBUtils.close_connection(connection) is False
