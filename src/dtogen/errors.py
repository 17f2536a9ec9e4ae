class ConfigError(ValueError):
    """Configuration is missing or invalid."""


class AuthError(RuntimeError):
    """Authentication or token exchange failed."""


class CatalogError(RuntimeError):
    """Catalog connection or query failed."""


class FormatError(RuntimeError):
    """Source formatter could not format the generated text."""


class OutputError(OSError):
    """Output directory could not be prepared."""
