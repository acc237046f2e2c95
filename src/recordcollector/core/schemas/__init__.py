# recordcollector/core/schemas/__init__.py
"""Schema registry and YAML catalog loading."""

from recordcollector.core.schemas.config import build_schema, cursor_constructor, load_schemas_config
from recordcollector.core.schemas.registry import SchemaRegistry

__all__ = [
    "SchemaRegistry",
    "build_schema",
    "cursor_constructor",
    "load_schemas_config",
]
