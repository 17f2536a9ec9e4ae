from __future__ import annotations

import re
from typing import Any, Iterable

import databricks.sql

from ..auth import TokenProvider
from ..errors import CatalogError
from .client import CatalogClient

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_ARRAY_RE = re.compile(r"^array<(?P<element>.+)>$", re.IGNORECASE)

# Databricks SQL type names expressed in the PostgreSQL spelling used by
# the type mapping table.
_DATABRICKS_TYPES = {
    "STRING": "text",
    "VARCHAR": "character varying",
    "CHAR": "character",
    "TINYINT": "smallint",
    "BYTE": "smallint",
    "SMALLINT": "smallint",
    "SHORT": "smallint",
    "INT": "integer",
    "INTEGER": "integer",
    "BIGINT": "bigint",
    "LONG": "bigint",
    "FLOAT": "real",
    "REAL": "real",
    "DOUBLE": "double precision",
    "DECIMAL": "numeric",
    "DEC": "numeric",
    "NUMERIC": "numeric",
    "BOOLEAN": "boolean",
    "TIMESTAMP_NTZ": "timestamp without time zone",
    "TIMESTAMP": "timestamp with time zone",
    "DATE": "date",
    "BINARY": "bytea",
}


def normalize_databricks_type(type_name: str) -> str:
    """Translate a Databricks type (``STRING``, ``DECIMAL(10,2)``, ``array<int>``)."""
    stripped = type_name.strip()
    array_match = _ARRAY_RE.match(stripped)
    if array_match:
        return f"{normalize_databricks_type(array_match.group('element'))}[]"
    base = stripped.split("(", 1)[0].strip().upper()
    return _DATABRICKS_TYPES.get(base, stripped.lower())


class DatabricksCatalogClient(CatalogClient):
    dialect = "databricks"
    placeholder = "?"

    def __init__(
        self,
        host: str,
        http_path: str,
        token_provider: TokenProvider,
        schema: str,
        catalog: str | None = None,
    ) -> None:
        super().__init__(schema)
        self._host = host
        self._http_path = http_path
        self._token_provider = token_provider
        prefix = ""
        if catalog:
            if not _IDENTIFIER_RE.match(catalog):
                raise CatalogError(f"Invalid catalog identifier: {catalog}")
            prefix = f"`{catalog}`."
        self.tables_sql = (
            "SELECT table_name "
            f"FROM {prefix}information_schema.tables "
            "WHERE table_schema = {p} "
            "ORDER BY table_name"
        )
        self.columns_sql = (
            "SELECT column_name, data_type, full_data_type, is_nullable "
            f"FROM {prefix}information_schema.columns "
            "WHERE table_schema = {p} AND table_name = {p} "
            "ORDER BY ordinal_position"
        )

    def _open_connection(self) -> Any:
        return databricks.sql.connect(
            server_hostname=self._host,
            http_path=self._http_path,
            access_token=self._token_provider.get_token(),
            session_configuration={"ansi_mode": "true"},
        )

    def _fetch(self, sql: str, params: Iterable[Any]) -> list[dict[str, Any]]:
        with self._connection.cursor() as cursor:
            cursor.execute(sql, list(params))
            rows_raw = cursor.fetchall()
            description = cursor.description or []
        columns = [col[0] for col in description]
        return [dict(zip(columns, row)) for row in rows_raw]

    def normalize_type(self, row: dict[str, Any]) -> str:
        return normalize_databricks_type(row.get("full_data_type") or row["data_type"])
