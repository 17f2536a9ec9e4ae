"""Catalog client tests with the database drivers mocked out."""

from unittest.mock import MagicMock, patch

import pytest

from dtogen.auth import StaticTokenProvider
from dtogen.config import load_config
from dtogen.db import (
    ColumnInfo,
    DatabricksCatalogClient,
    PostgresCatalogClient,
    create_catalog_client,
)
from dtogen.db.databricks import normalize_databricks_type
from dtogen.errors import CatalogError


def mock_pg_connection(*results: list[dict]) -> MagicMock:
    cursor = MagicMock()
    cursor.fetchall.side_effect = list(results)
    connection = MagicMock()
    connection.cursor.return_value.__enter__.return_value = cursor
    return connection


class TestPostgresCatalogClient:
    def test_list_tables(self) -> None:
        connection = mock_pg_connection([{"table_name": "orders"}, {"table_name": "users"}])
        with patch("dtogen.db.client.psycopg.connect", return_value=connection) as mock_connect:
            with PostgresCatalogClient("postgresql://localhost/app") as client:
                assert client.list_tables() == ["orders", "users"]

        mock_connect.assert_called_once()
        assert mock_connect.call_args.args[0] == "postgresql://localhost/app"
        cursor = connection.cursor.return_value.__enter__.return_value
        sql, params = cursor.execute.call_args.args
        assert "FROM information_schema.tables" in sql
        assert "table_schema = %s" in sql
        assert params == ("public",)
        connection.close.assert_called_once()

    def test_list_columns(self) -> None:
        connection = mock_pg_connection(
            [
                {"column_name": "name", "data_type": "text", "udt_name": "text", "is_nullable": "YES"},
                {"column_name": "id", "data_type": "integer", "udt_name": "int4", "is_nullable": "NO"},
                {"column_name": "tags", "data_type": "ARRAY", "udt_name": "_text", "is_nullable": "NO"},
                {"column_name": "mood", "data_type": "USER-DEFINED", "udt_name": "mood", "is_nullable": "YES"},
            ]
        )
        with patch("dtogen.db.client.psycopg.connect", return_value=connection):
            with PostgresCatalogClient("postgresql://localhost/app", schema="crm") as client:
                columns = client.list_columns("users")

        assert columns == [
            ColumnInfo("name", "text", True),
            ColumnInfo("id", "integer", False),
            ColumnInfo("tags", "text[]", False),
            ColumnInfo("mood", "USER-DEFINED", True),
        ]
        cursor = connection.cursor.return_value.__enter__.return_value
        sql, params = cursor.execute.call_args.args
        assert "ORDER BY ordinal_position" in sql
        assert params == ("crm", "users")

    def test_connection_failure_raises_catalog_error(self) -> None:
        with patch("dtogen.db.client.psycopg.connect", side_effect=OSError("refused")):
            with pytest.raises(CatalogError, match="refused"):
                PostgresCatalogClient("postgresql://localhost/app").connect()

    def test_query_failure_closes_connection(self) -> None:
        connection = MagicMock()
        cursor = connection.cursor.return_value.__enter__.return_value
        cursor.execute.side_effect = RuntimeError("relation does not exist")
        with patch("dtogen.db.client.psycopg.connect", return_value=connection):
            with pytest.raises(CatalogError, match="relation does not exist"):
                with PostgresCatalogClient("postgresql://localhost/app") as client:
                    client.list_tables()

        connection.close.assert_called_once()

    def test_close_failure_does_not_mask_query_error(self) -> None:
        connection = MagicMock()
        cursor = connection.cursor.return_value.__enter__.return_value
        cursor.execute.side_effect = RuntimeError("relation does not exist")
        connection.close.side_effect = RuntimeError("connection already broken")
        with patch("dtogen.db.client.psycopg.connect", return_value=connection):
            with pytest.raises(CatalogError, match="relation does not exist"):
                with PostgresCatalogClient("postgresql://localhost/app") as client:
                    client.list_tables()

    def test_close_failure_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        connection = MagicMock()
        connection.close.side_effect = RuntimeError("socket closed")
        with patch("dtogen.db.client.psycopg.connect", return_value=connection):
            client = PostgresCatalogClient("postgresql://localhost/app")
            client.connect()
            with caplog.at_level("WARNING", logger="dtogen.db.client"):
                client.close()
            client.close()

        assert "Catalog connection close failed" in caplog.text
        connection.close.assert_called_once()

    def test_query_without_connection(self) -> None:
        with pytest.raises(CatalogError, match="not connected"):
            PostgresCatalogClient("postgresql://localhost/app").list_tables()


class TestDatabricksCatalogClient:
    def test_list_columns_normalizes_types(self) -> None:
        cursor = MagicMock()
        cursor.description = [
            ("column_name",),
            ("data_type",),
            ("full_data_type",),
            ("is_nullable",),
        ]
        cursor.fetchall.return_value = [
            ("name", "STRING", "string", "YES"),
            ("amount", "DECIMAL", "decimal(10,2)", "NO"),
            ("tags", "ARRAY", "array<string>", "NO"),
        ]
        connection = MagicMock()
        connection.cursor.return_value.__enter__.return_value = cursor

        client = DatabricksCatalogClient(
            host="test.databricks.com",
            http_path="/sql/1.0/warehouses/test",
            token_provider=StaticTokenProvider("mock_token"),
            schema="default",
            catalog="main",
        )
        with patch(
            "dtogen.db.databricks.databricks.sql.connect", return_value=connection
        ) as mock_connect:
            with client:
                columns = client.list_columns("orders")

        assert mock_connect.call_args.kwargs["access_token"] == "mock_token"
        assert columns == [
            ColumnInfo("name", "text", True),
            ColumnInfo("amount", "numeric", False),
            ColumnInfo("tags", "text[]", False),
        ]
        sql, params = cursor.execute.call_args.args
        assert "FROM `main`.information_schema.columns" in sql
        assert "table_schema = ? AND table_name = ?" in sql
        assert params == ["default", "orders"]

    def test_invalid_catalog_identifier(self) -> None:
        with pytest.raises(CatalogError, match="Invalid catalog"):
            DatabricksCatalogClient(
                host="h",
                http_path="/p",
                token_provider=StaticTokenProvider("t"),
                schema="default",
                catalog="main`; DROP",
            )


@pytest.mark.parametrize(
    "type_name,expected",
    [
        ("STRING", "text"),
        ("INT", "integer"),
        ("BIGINT", "bigint"),
        ("DOUBLE", "double precision"),
        ("FLOAT", "real"),
        ("decimal(38,0)", "numeric"),
        ("BOOLEAN", "boolean"),
        ("TIMESTAMP_NTZ", "timestamp without time zone"),
        ("array<int>", "integer[]"),
        ("map<string,int>", "map<string,int>"),
    ],
)
def test_normalize_databricks_type(type_name: str, expected: str) -> None:
    assert normalize_databricks_type(type_name) == expected


def test_create_catalog_client_by_driver(tmp_path) -> None:
    postgres = create_catalog_client(load_config(None, env={"DATABASE_URL": "postgresql://db/app"}))
    assert isinstance(postgres, PostgresCatalogClient)

    cfg_path = tmp_path / "config.yml"
    cfg_path.write_text(
        """
database:
  driver: databricks
  host: example.cloud.databricks.com
  http_path: /sql/1.0/warehouses/abc
  access_token: dapi-token
generation:
  schema: default
"""
    )
    databricks_client = create_catalog_client(load_config(cfg_path, env={}))
    assert isinstance(databricks_client, DatabricksCatalogClient)
    assert databricks_client.schema == "default"
