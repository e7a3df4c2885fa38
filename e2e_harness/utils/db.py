"""
Database helpers.

Connection settings come from environment variables. Drivers are not bundled:
callers pass a client exposing ``get_connection(config)`` and connections
exposing ``execute(query, params)`` and ``close()``. Any of these may be
plain or awaitable.
"""

import inspect
import os
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.exceptions import DatabaseError
from ..core.logging_config import get_logger

logger = get_logger(__name__)

SUPPORTED_DB_TYPES = ["oracle", "mysql", "postgres"]


class DBConfig(BaseModel):
    """Connection settings for one database."""

    model_config = ConfigDict(extra="forbid")

    db_type: str = Field(..., description="oracle, mysql or postgres")
    user: str = Field("", description="User name")
    password: str = Field("", description="Password")
    connect_string: Optional[str] = Field(None, description="Oracle connect string")
    host: Optional[str] = Field(None, description="Server host")
    database: Optional[str] = Field(None, description="Database name")
    port: Optional[int] = Field(None, description="Server port")

    def redacted(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_none=True)
        if data.get("password"):
            data["password"] = "***"
        return data


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _port(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise DatabaseError(f"Invalid port in {key}: {raw!r}", operation="config")


class DBUtils:
    """Static helpers for configuring and using database connections."""

    @staticmethod
    def get_config(db_type: str, env: Optional[Mapping[str, str]] = None) -> DBConfig:
        """
        Build the connection settings for ``db_type`` from the environment.

        Raises:
            DatabaseError: for unsupported database types
        """
        env = os.environ if env is None else env
        logger.info(f"Getting database configuration for {db_type}")

        if db_type == "oracle":
            return DBConfig(
                db_type=db_type,
                user=env.get("ORACLE_DB_USER", ""),
                password=env.get("ORACLE_DB_PASS", ""),
                connect_string=env.get("ORACLE_DB_URL", ""),
            )
        if db_type == "mysql":
            return DBConfig(
                db_type=db_type,
                host=env.get("MYSQL_DB_HOST", ""),
                user=env.get("MYSQL_DB_USER", ""),
                password=env.get("MYSQL_DB_PASS", ""),
                database=env.get("MYSQL_DB_NAME", ""),
                port=_port(env, "MYSQL_DB_PORT", 3306),
            )
        if db_type == "postgres":
            return DBConfig(
                db_type=db_type,
                host=env.get("POSTGRES_DB_HOST", ""),
                user=env.get("POSTGRES_DB_USER", ""),
                password=env.get("POSTGRES_DB_PASS", ""),
                database=env.get("POSTGRES_DB_NAME", ""),
                port=_port(env, "POSTGRES_DB_PORT", 5432),
            )

        logger.error(f"Unsupported DB type: {db_type}")
        raise DatabaseError(f"Unsupported DB type: {db_type}", db_type=db_type, operation="config")

    @staticmethod
    async def get_connection(client: Any, config: Optional[DBConfig]) -> Any:
        if config is None:
            raise DatabaseError("Missing DB configuration.", operation="connect")

        logger.info(
            "Attempting to connect to database...",
            extra={"metadata": config.redacted()},
        )
        try:
            connection = await _resolve(client.get_connection(config))
        except Exception as e:
            logger.error(f"Error establishing DB connection: {e}")
            raise DatabaseError(
                f"Failed to connect: {e}", db_type=config.db_type, operation="connect"
            ) from e
        logger.info("Database connection established.")
        return connection

    @staticmethod
    async def execute_query(
        connection: Any, query: str, params: Optional[List[Any]] = None
    ) -> List[Any]:
        """
        Run ``query`` and return its rows.

        Results exposing ``rows`` return those rows; list results are returned
        as is; anything else yields an empty list.
        """
        logger.info(f"Executing query: {query[:100]}")
        try:
            result = await _resolve(connection.execute(query, params or []))
        except Exception as e:
            logger.error(f"Error executing query: {e}")
            raise DatabaseError(f"Query execution failed: {e}", operation="execute") from e

        rows = getattr(result, "rows", None)
        if rows is not None:
            return list(rows)
        if isinstance(result, (list, tuple)):
            return list(result)
        return []

    @staticmethod
    async def close_connection(connection: Any) -> bool:
        """Close ``connection``; errors are logged and reported as False."""
        if connection is None:
            logger.warning("No connection to close.")
            return False
        try:
            await _resolve(connection.close())
        except Exception as e:
            logger.error(f"Error closing DB connection: {e}")
            return False
        logger.info("Database connection closed.")
        return True
