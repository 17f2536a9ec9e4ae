from __future__ import annotations

import os
import re
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigError

CONFIG_ENV_VAR = "DTOGEN_CONFIG"
DATABASE_URL_ENV_VAR = "DATABASE_URL"
OUTPUT_BASE_ENV_VAR = "DTOGEN_OUTPUT_BASE"

_DRIVERS = {"postgres", "databricks"}
_PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
_DEFAULT_FORMATTER_COMMAND = ["npx", "--no-install", "prettier"]
_BOOLEAN_STRINGS = {"true": True, "yes": True, "1": True, "false": False, "no": False, "0": False}


@dataclass
class OAuthConfig:
    client_id: str
    client_secret: str
    token_url: str
    scope: str | None = None


@dataclass
class DatabaseConfig:
    driver: str = "postgres"
    url: str | None = None
    host: str | None = None
    http_path: str | None = None
    access_token: str | None = None
    catalog: str | None = None
    oauth: OAuthConfig | None = None


@dataclass
class GenerationConfig:
    schema: str = "public"
    output_base: Path = Path(".")
    models_dir: str = "models"
    skip_prefix: str = "_"
    class_suffix: str = "BaseModel"

    @property
    def output_dir(self) -> Path:
        return self.output_base / self.models_dir


@dataclass
class FormatterConfig:
    enabled: bool = True
    command: list[str] = field(default_factory=lambda: list(_DEFAULT_FORMATTER_COMMAND))
    parser: str = "typescript"
    print_width: int = 120
    timeout_seconds: int = 30


@dataclass
class ObservabilityConfig:
    log_level: str = "info"


@dataclass
class AppConfig:
    database: DatabaseConfig
    generation: GenerationConfig
    formatter: FormatterConfig
    observability: ObservabilityConfig


def _resolve_env(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):

        def _lookup(match: re.Match[str]) -> str:
            key = match.group(1)
            if key not in env:
                raise ConfigError(f"Environment variable {key} is required but not set")
            return env[key]

        return _PLACEHOLDER_RE.sub(_lookup, value)
    if isinstance(value, list):
        return [_resolve_env(v, env) for v in value]
    if isinstance(value, dict):
        return {k: _resolve_env(v, env) for k, v in value.items()}
    return value


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"Config section {name} must be a mapping")
    return section


def _boolean(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _BOOLEAN_STRINGS:
        return _BOOLEAN_STRINGS[value.strip().lower()]
    raise ConfigError(f"{field_name} must be true or false")


def _positive_int(value: Any, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be an integer") from exc
    if number <= 0:
        raise ConfigError(f"{field_name} must be greater than 0")
    return number


def _command(value: Any) -> list[str]:
    if value is None:
        return list(_DEFAULT_FORMATTER_COMMAND)
    parts = shlex.split(value) if isinstance(value, str) else [str(v) for v in value]
    if not parts:
        raise ConfigError("formatter.command must not be empty")
    return parts


def _load_database(raw: Mapping[str, Any], env: Mapping[str, str]) -> DatabaseConfig:
    driver = str(raw.get("driver", "postgres")).lower()
    if driver not in _DRIVERS:
        raise ConfigError(f"Unsupported database driver: {driver}")

    oauth = None
    oauth_raw = raw.get("oauth")
    if oauth_raw:
        try:
            oauth = OAuthConfig(
                client_id=oauth_raw["client_id"],
                client_secret=oauth_raw["client_secret"],
                token_url=oauth_raw["token_url"],
                scope=oauth_raw.get("scope"),
            )
        except KeyError as exc:
            raise ConfigError(f"Missing OAuth setting: {exc.args[0]}") from exc

    database = DatabaseConfig(
        driver=driver,
        url=raw.get("url") or env.get(DATABASE_URL_ENV_VAR),
        host=raw.get("host"),
        http_path=raw.get("http_path"),
        access_token=raw.get("access_token"),
        catalog=raw.get("catalog"),
        oauth=oauth,
    )

    if driver == "postgres" and not database.url:
        raise ConfigError(
            f"database.url or {DATABASE_URL_ENV_VAR} is required for the postgres driver"
        )
    if driver == "databricks":
        if not database.host or not database.http_path:
            raise ConfigError("database.host and database.http_path are required for databricks")
        if not database.access_token and database.oauth is None:
            raise ConfigError("databricks needs either database.access_token or database.oauth")
    return database


def load_config(
    path: str | Path | None = None, env: Mapping[str, str] | None = None
) -> AppConfig:
    """Build the run configuration from an optional YAML file and the environment.

    Values of the form ``${NAME}`` anywhere in the file are replaced from
    ``env``. Settings absent from the file fall back to environment defaults
    (``DATABASE_URL``, ``DTOGEN_OUTPUT_BASE``) and then to built-in defaults.
    """
    env = os.environ if env is None else env
    raw: Any = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        try:
            raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"Could not read config file {config_path}: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise ConfigError("Config file must contain a mapping at the top level")
    resolved = _resolve_env(dict(raw), env)

    database = _load_database(_section(resolved, "database"), env)

    generation_raw = _section(resolved, "generation")
    output_base = generation_raw.get("output_base") or env.get(OUTPUT_BASE_ENV_VAR) or "."
    generation = GenerationConfig(
        schema=str(generation_raw.get("schema", "public")),
        output_base=Path(output_base).expanduser(),
        models_dir=str(generation_raw.get("models_dir", "models")),
        skip_prefix=str(generation_raw.get("skip_prefix", "_")),
        class_suffix=str(generation_raw.get("class_suffix", "BaseModel")),
    )
    if not generation.schema:
        raise ConfigError("generation.schema must not be empty")

    formatter_raw = _section(resolved, "formatter")
    formatter = FormatterConfig(
        enabled=_boolean(formatter_raw.get("enabled", True), "formatter.enabled"),
        command=_command(formatter_raw.get("command")),
        parser=str(formatter_raw.get("parser", "typescript")),
        print_width=_positive_int(formatter_raw.get("print_width", 120), "print_width"),
        timeout_seconds=_positive_int(
            formatter_raw.get("timeout_seconds", 30), "timeout_seconds"
        ),
    )

    observability_raw = _section(resolved, "observability")
    observability = ObservabilityConfig(
        log_level=str(observability_raw.get("log_level", "info")),
    )

    return AppConfig(
        database=database,
        generation=generation,
        formatter=formatter,
        observability=observability,
    )
