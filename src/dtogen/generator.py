from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from .db.client import CatalogClient
from .errors import FormatError, OutputError
from .logging_utils import log_extra
from .render import render_dto
from .type_mapping import TargetType, map_type

Formatter = Callable[[str, str], str]

OUTPUT_SUFFIX = ".ts"


@dataclass
class GenerationReport:
    written: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    format_failures: list[str] = field(default_factory=list)


def ensure_output_dir(path: str | Path) -> Path:
    output_dir = Path(path)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputError(f"Could not create output directory {output_dir}: {exc}") from exc
    return output_dir


class DtoGenerator:
    """Write one DTO source file per catalog table, one table at a time.

    Catalog errors propagate and end the run; files already written stay on
    disk. Formatter errors are logged and the unformatted source is written.
    """

    def __init__(
        self,
        catalog: CatalogClient,
        output_dir: str | Path,
        formatter: Formatter | None = None,
        skip_prefix: str = "_",
        class_suffix: str = "BaseModel",
    ) -> None:
        self._catalog = catalog
        self._output_dir = Path(output_dir)
        self._formatter = formatter
        self._skip_prefix = skip_prefix
        self._class_suffix = class_suffix
        self._log = logging.getLogger(__name__)

    def should_skip(self, table_name: str) -> bool:
        return bool(self._skip_prefix) and table_name.startswith(self._skip_prefix)

    def run(self) -> GenerationReport:
        report = GenerationReport()
        schema = self._catalog.schema
        tables = self._catalog.list_tables(schema)
        self._log.info(
            "Catalog tables listed",
            extra=log_extra(schema=schema, table_count=len(tables)),
        )
        for table_name in tables:
            if self.should_skip(table_name):
                self._log.info(f"Skipping table: {table_name}")
                report.skipped.append(table_name)
                continue
            path, formatted = self.generate_table(table_name)
            report.written.append(path)
            if not formatted:
                report.format_failures.append(table_name)
        return report

    def generate_table(self, table_name: str) -> tuple[Path, bool]:
        """Render, format and write one table; return the path and whether formatting succeeded."""
        columns = self._catalog.list_columns(table_name)
        for column in columns:
            if map_type(column.data_type) is TargetType.UNKNOWN:
                self._log.warning(
                    f"Unmapped SQL type {column.data_type!r} for {table_name}.{column.name}",
                    extra=log_extra(table=table_name, column=column.name),
                )

        content = render_dto(table_name, columns, self._class_suffix)
        file_name = f"{table_name}{OUTPUT_SUFFIX}"
        path = self._output_dir / file_name

        formatted = True
        if self._formatter is not None:
            try:
                content = self._formatter(content, str(path))
            except FormatError as exc:
                formatted = False
                self._log.warning(f"Formatter failed for {file_name}: {exc}")

        path.write_text(content, encoding="utf-8")
        self._log.info(f"Generated DTO: {path}")
        return path, formatted
