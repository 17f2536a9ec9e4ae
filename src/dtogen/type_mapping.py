"""SQL catalog type to TypeScript type and class-validator decorator mapping.

Type names are the canonical ``information_schema.columns.data_type`` spellings
(PostgreSQL style). Catalog clients for other dialects normalise to these
names before the mapping runs.
"""

from __future__ import annotations

from enum import Enum

ARRAY_MARKER = "[]"


class TargetType(str, Enum):
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    DATE = "Date"
    ANY = "any"
    # Explicit variant for catalog types outside TYPE_MAP.
    UNKNOWN = "unknown"

    @property
    def ts_name(self) -> str:
        return self.value


class Annotation(Enum):
    IS_OPTIONAL = ("IsOptional", "@IsOptional()")
    IS_ARRAY = ("IsArray", "@IsArray()")
    IS_STRING_EACH = ("IsString", "@IsString({ each: true })")
    IS_STRING = ("IsString", "@IsString()")
    IS_BOOLEAN = ("IsBoolean", "@IsBoolean()")
    IS_DATE = ("IsDate", "@IsDate()")
    IS_NUMBER = ("IsNumber", "@IsNumber()")

    def __init__(self, symbol: str, decorator: str) -> None:
        self.symbol = symbol
        self.decorator = decorator


NUMERIC_TYPES = ("integer", "bigint", "numeric", "double precision", "real")
STRING_TYPES = ("character varying", "text")
BOOLEAN_TYPE = "boolean"
DATE_TYPE = "timestamp without time zone"
JSON_TYPES = ("json", "jsonb")

TYPE_MAP: dict[str, TargetType] = {
    **{name: TargetType.NUMBER for name in NUMERIC_TYPES},
    **{name: TargetType.STRING for name in STRING_TYPES},
    BOOLEAN_TYPE: TargetType.BOOLEAN,
    DATE_TYPE: TargetType.DATE,
    **{name: TargetType.ANY for name in JSON_TYPES},
}

# Order of the symbols in the generated import line.
PREAMBLE_SYMBOLS = ("IsOptional", "IsString", "IsArray", "IsBoolean", "IsDate", "IsNumber")


def map_type(sql_type: str) -> TargetType:
    return TYPE_MAP.get(sql_type, TargetType.UNKNOWN)


def is_array_type(sql_type: str) -> bool:
    return ARRAY_MARKER in sql_type


def map_annotations(sql_type: str, nullable: bool) -> list[Annotation]:
    """Return the decorators for a column, optional marker first.

    At most one type-specific group follows the optional marker. Arrays are
    assumed to hold strings.
    """
    annotations: list[Annotation] = []
    if nullable:
        annotations.append(Annotation.IS_OPTIONAL)

    if is_array_type(sql_type):
        annotations.extend([Annotation.IS_ARRAY, Annotation.IS_STRING_EACH])
    elif sql_type in STRING_TYPES:
        annotations.append(Annotation.IS_STRING)
    elif sql_type == BOOLEAN_TYPE:
        annotations.append(Annotation.IS_BOOLEAN)
    elif sql_type == DATE_TYPE:
        annotations.append(Annotation.IS_DATE)
    elif sql_type in NUMERIC_TYPES:
        annotations.append(Annotation.IS_NUMBER)
    return annotations


def annotation_symbols() -> list[str]:
    return list(PREAMBLE_SYMBOLS)
