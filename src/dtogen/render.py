"""Render TypeScript DTO classes from catalog columns."""

from __future__ import annotations

from typing import Iterable

from .db.models import ColumnInfo
from .type_mapping import annotation_symbols, map_annotations, map_type

INDENT = "  "
VALIDATOR_MODULE = "class-validator"


def render_preamble() -> str:
    symbols = ", ".join(annotation_symbols())
    return f'import {{ {symbols} }} from "{VALIDATOR_MODULE}";\n'


def render_field(column: ColumnInfo) -> str:
    lines = [
        f"{INDENT}{annotation.decorator}"
        for annotation in map_annotations(column.data_type, column.nullable)
    ]
    marker = "?" if column.nullable else "!"
    lines.append(f"{INDENT}{column.name}{marker}: {map_type(column.data_type).ts_name};")
    return "\n".join(lines)


def class_name_for(table_name: str, suffix: str = "BaseModel") -> str:
    return f"{table_name}{suffix}"


def render_dto(
    table_name: str, columns: Iterable[ColumnInfo], class_suffix: str = "BaseModel"
) -> str:
    """Return the full source file for one table.

    Fields keep the order of ``columns``; consecutive fields are separated by
    a blank line.
    """
    fields = [render_field(column) for column in columns]
    name = class_name_for(table_name, class_suffix)
    if not fields:
        body = f"export class {name} {{}}\n"
    else:
        body = f"export class {name} {{\n" + "\n\n".join(fields) + "\n}\n"
    return f"{render_preamble()}\n{body}"
