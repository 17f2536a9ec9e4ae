"""Command-line entry point for the DTO generator.

Installed as the ``dtogen`` console script (see pyproject.toml)::

    dtogen --config dtogen.yml
    DATABASE_URL=postgresql://localhost/app dtogen --output-dir ./src
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from .config import CONFIG_ENV_VAR, AppConfig, load_config
from .db import create_catalog_client
from .errors import CatalogError, ConfigError, OutputError
from .formatter import PrettierFormatter
from .generator import DtoGenerator, ensure_output_dir
from .logging_utils import configure_logging, log_extra

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dtogen",
        description="Generate class-validator DTO classes from an information_schema catalog",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"YAML config file (default: ${CONFIG_ENV_VAR} if set)",
    )
    parser.add_argument(
        "--env-file", type=Path, default=None, help="dotenv file to load (default: ./.env)"
    )
    parser.add_argument("--schema", default=None, help="Catalog schema to read")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Base directory; DTOs are written to <output-dir>/models",
    )
    parser.add_argument(
        "--no-format", action="store_true", help="Write sources without running Prettier"
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: info)")
    return parser


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    generation = config.generation
    if args.schema:
        generation = dataclasses.replace(generation, schema=args.schema)
    if args.output_dir is not None:
        generation = dataclasses.replace(generation, output_base=args.output_dir)

    formatter = config.formatter
    if args.no_format:
        formatter = dataclasses.replace(formatter, enabled=False)

    observability = config.observability
    if args.log_level:
        observability = dataclasses.replace(observability, log_level=args.log_level)

    return dataclasses.replace(
        config, generation=generation, formatter=formatter, observability=observability
    )


def run(config: AppConfig) -> int:
    """Generate every DTO for the configured schema and return the exit status."""
    generation = config.generation
    try:
        output_dir = ensure_output_dir(generation.output_dir)
    except OutputError:
        logger.error("Error creating output directory", exc_info=True)
        return EXIT_FAILURE

    formatter = PrettierFormatter(config.formatter) if config.formatter.enabled else None
    try:
        catalog = create_catalog_client(config)
        with catalog:
            generator = DtoGenerator(
                catalog,
                output_dir,
                formatter=formatter,
                skip_prefix=generation.skip_prefix,
                class_suffix=generation.class_suffix,
            )
            report = generator.run()
    except (CatalogError, OSError):
        logger.error("Error generating DTOs", exc_info=True)
        return EXIT_FAILURE

    logger.info(
        f"Generated {len(report.written)} DTO(s) in {output_dir}",
        extra=log_extra(
            written=len(report.written),
            skipped=len(report.skipped),
            format_failures=len(report.format_failures) or None,
        ),
    )
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv(args.env_file or Path.cwd() / ".env")

    config_path = args.config or os.environ.get(CONFIG_ENV_VAR)
    try:
        config = apply_overrides(load_config(config_path), args)
    except ConfigError as exc:
        sys.stderr.write(f"Configuration error: {exc}\n")
        return EXIT_CONFIG_ERROR

    configure_logging(config.observability.log_level)
    return run(config)


if __name__ == "__main__":
    raise SystemExit(main())
