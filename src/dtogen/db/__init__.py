"""Catalog clients for reading table and column listings."""

from __future__ import annotations

from ..auth import token_provider_for
from ..config import AppConfig
from .client import CatalogClient, PostgresCatalogClient
from .databricks import DatabricksCatalogClient
from .models import ColumnInfo


def create_catalog_client(config: AppConfig) -> CatalogClient:
    database = config.database
    schema = config.generation.schema
    if database.driver == "databricks":
        return DatabricksCatalogClient(
            host=database.host or "",
            http_path=database.http_path or "",
            token_provider=token_provider_for(database),
            schema=schema,
            catalog=database.catalog,
        )
    return PostgresCatalogClient(database.url or "", schema=schema)


__all__ = [
    "CatalogClient",
    "ColumnInfo",
    "DatabricksCatalogClient",
    "PostgresCatalogClient",
    "create_catalog_client",
]
