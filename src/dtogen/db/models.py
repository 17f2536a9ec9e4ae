"""Catalog records handed from the catalog clients to the generator."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ColumnInfo:
    name: str
    data_type: str
    nullable: bool

    @classmethod
    def from_row(cls, name: str, data_type: str, is_nullable: str | None) -> "ColumnInfo":
        return cls(
            name=name,
            data_type=data_type,
            nullable=(is_nullable or "").upper() == "YES",
        )
