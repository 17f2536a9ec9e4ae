"""Generate class-validator DTO classes from an information_schema catalog."""

__version__ = "0.1.0"

__all__ = [
    "config",
    "generator",
    "type_mapping",
]
