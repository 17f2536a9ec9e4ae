"""Prettier invocation for generated TypeScript sources."""

from __future__ import annotations

import logging
import subprocess

from .config import FormatterConfig
from .errors import FormatError
from .logging_utils import log_extra


class PrettierFormatter:
    """Pipe source text through the configured Prettier command.

    The file name is passed with ``--stdin-filepath`` so Prettier resolves
    project configuration (``.prettierrc``) relative to the output file.
    """

    def __init__(self, config: FormatterConfig) -> None:
        self._config = config
        self._log = logging.getLogger(__name__)

    def build_command(self, file_name: str) -> list[str]:
        return [
            *self._config.command,
            "--stdin-filepath",
            file_name,
            "--parser",
            self._config.parser,
            "--print-width",
            str(self._config.print_width),
        ]

    def __call__(self, source: str, file_name: str) -> str:
        command = self.build_command(file_name)
        try:
            completed = subprocess.run(
                command,
                input=source,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self._config.timeout_seconds,
                check=False,
            )
        except FileNotFoundError as exc:
            raise FormatError(f"Formatter executable not found: {command[0]}") from exc
        except subprocess.TimeoutExpired as exc:
            raise FormatError(
                f"Formatter timed out after {self._config.timeout_seconds}s"
            ) from exc
        except OSError as exc:
            raise FormatError(f"Formatter could not be started: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise FormatError(f"Formatter output is not valid UTF-8: {exc}") from exc

        if completed.returncode != 0:
            message = completed.stderr.strip() or f"exit status {completed.returncode}"
            raise FormatError(message)

        self._log.debug("Formatted source", extra=log_extra(file_name=file_name))
        return completed.stdout


def identity_formatter(source: str, file_name: str) -> str:
    return source
