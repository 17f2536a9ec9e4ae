from __future__ import annotations

import logging
from typing import Any, Iterable

import psycopg
from psycopg.rows import dict_row

from ..errors import CatalogError
from ..logging_utils import log_extra
from .models import ColumnInfo

# information_schema reports PostgreSQL arrays as "ARRAY"; udt_name carries
# the element type with a leading underscore.
_PG_UDT_NAMES = {
    "int2": "smallint",
    "int4": "integer",
    "int8": "bigint",
    "float4": "real",
    "float8": "double precision",
    "numeric": "numeric",
    "bool": "boolean",
    "text": "text",
    "varchar": "character varying",
    "bpchar": "character",
    "timestamp": "timestamp without time zone",
    "timestamptz": "timestamp with time zone",
    "json": "json",
    "jsonb": "jsonb",
    "uuid": "uuid",
}


class CatalogClient:
    """Read-only access to one schema of an ``information_schema`` catalog.

    One connection is opened by :meth:`connect` (or on entering the context
    manager) and reused for every query until :meth:`close`.
    """

    dialect = "generic"
    tables_sql = (
        "SELECT table_name "
        "FROM information_schema.tables "
        "WHERE table_schema = {p} "
        "ORDER BY table_name"
    )
    columns_sql = (
        "SELECT column_name, data_type, is_nullable "
        "FROM information_schema.columns "
        "WHERE table_schema = {p} AND table_name = {p} "
        "ORDER BY ordinal_position"
    )
    placeholder = "%s"

    def __init__(self, schema: str) -> None:
        self.schema = schema
        self._connection: Any = None
        self._log = logging.getLogger(__name__)

    def __enter__(self) -> "CatalogClient":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def connect(self) -> None:
        if self._connection is not None:
            return
        try:
            self._connection = self._open_connection()
        except Exception as exc:
            self._log.error(
                "Catalog connection failed",
                extra=log_extra(dialect=self.dialect, error_message=str(exc)),
            )
            raise CatalogError(f"Could not connect to {self.dialect} catalog: {exc}") from exc
        self._log.info("Catalog connection opened", extra=log_extra(dialect=self.dialect))

    def close(self) -> None:
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        try:
            connection.close()
        except Exception as exc:
            self._log.warning(
                "Catalog connection close failed",
                extra=log_extra(dialect=self.dialect, error_message=str(exc)),
            )
            return
        self._log.info("Catalog connection closed", extra=log_extra(dialect=self.dialect))

    def list_tables(self, schema: str | None = None) -> list[str]:
        rows = self._execute(self._sql(self.tables_sql), (schema or self.schema,))
        return [row["table_name"] for row in rows]

    def list_columns(self, table_name: str) -> list[ColumnInfo]:
        rows = self._execute(self._sql(self.columns_sql), (self.schema, table_name))
        return [
            ColumnInfo.from_row(
                row["column_name"], self.normalize_type(row), row.get("is_nullable")
            )
            for row in rows
        ]

    def normalize_type(self, row: dict[str, Any]) -> str:
        return row["data_type"]

    def _sql(self, template: str) -> str:
        return template.format(p=self.placeholder)

    def _open_connection(self) -> Any:
        raise NotImplementedError

    def _fetch(self, sql: str, params: Iterable[Any]) -> list[dict[str, Any]]:
        raise NotImplementedError

    def _execute(self, sql: str, params: Iterable[Any]) -> list[dict[str, Any]]:
        if self._connection is None:
            raise CatalogError("Catalog client is not connected")
        try:
            rows = self._fetch(sql, params)
        except CatalogError:
            raise
        except Exception as exc:
            self._log.warning(
                "Catalog query failed",
                extra=log_extra(dialect=self.dialect, error_message=str(exc)),
            )
            raise CatalogError(f"Catalog query failed: {exc}") from exc
        self._log.debug(
            "Catalog query executed",
            extra=log_extra(dialect=self.dialect, row_count=len(rows)),
        )
        return rows


class PostgresCatalogClient(CatalogClient):
    dialect = "postgres"
    columns_sql = (
        "SELECT column_name, data_type, udt_name, is_nullable "
        "FROM information_schema.columns "
        "WHERE table_schema = {p} AND table_name = {p} "
        "ORDER BY ordinal_position"
    )

    def __init__(self, conninfo: str, schema: str = "public") -> None:
        super().__init__(schema)
        self._conninfo = conninfo

    def _open_connection(self) -> psycopg.Connection:
        return psycopg.connect(self._conninfo, autocommit=True, row_factory=dict_row)

    def _fetch(self, sql: str, params: Iterable[Any]) -> list[dict[str, Any]]:
        with self._connection.cursor() as cursor:
            cursor.execute(sql, tuple(params))
            return list(cursor.fetchall())

    def normalize_type(self, row: dict[str, Any]) -> str:
        data_type = row["data_type"]
        udt_name = row.get("udt_name") or ""
        if data_type == "ARRAY" and udt_name.startswith("_"):
            element = udt_name[1:]
            return f"{_PG_UDT_NAMES.get(element, element)}[]"
        return data_type
