# recordcollector/core/schemas/registry.py
"""
Schema registry – named catalog of schemas.

Lets default sources reference other schemas by name, which is how YAML
catalogs express dependencies.
"""
from __future__ import annotations

import logging
from typing import Any, Iterator

from recordcollector.contracts.schema import Schema
from recordcollector.core.errors import UnknownSchemaError

logger = logging.getLogger(__name__)


def _describe_strategy(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return getattr(value, "__qualname__", repr(value))


class SchemaRegistry:
    """In-memory registry of schemas by name."""

    def __init__(self) -> None:
        self._schemas: dict[str, Schema] = {}

    def register(self, schema: Schema) -> None:
        if schema.name in self._schemas:
            raise ValueError(f"Schema '{schema.name}' already registered")
        self._schemas[schema.name] = schema
        logger.info("Registered schema: %s (%s)", schema.name, schema.api_method)

    def get(self, name: str) -> Schema:
        try:
            return self._schemas[name]
        except KeyError:
            raise UnknownSchemaError(name, self.list()) from None

    def resolve(self, ref: Schema | str) -> Schema:
        """Return ``ref`` itself, or the registered schema it names."""
        if isinstance(ref, Schema):
            return ref
        return self.get(ref)

    def has(self, name: str) -> bool:
        return name in self._schemas

    def list(self) -> list[str]:
        return list(self._schemas.keys())

    def describe(self, name: str) -> dict[str, Any]:
        s = self.get(name)
        return {
            "name": s.name,
            "api_method": s.api_method,
            "namespace": s.namespace_details.name,
            "params": dict(s.params),
            "required_params": {
                pname: {
                    "max": d.max,
                    "default_source": (
                        None
                        if d.default_source is None
                        else {
                            "schema": d.default_source.schema
                            if isinstance(d.default_source.schema, str)
                            else d.default_source.schema.name,
                            "params": dict(d.default_source.params),
                        }
                    ),
                }
                for pname, d in s.required_params.items()
            },
            "value": {
                "path": _describe_strategy(s.value.path),
                "sort_by": _describe_strategy(s.value.sort_by),
            },
            "incomplete_indicator": s.incomplete_indicator,
        }

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __iter__(self) -> Iterator[Schema]:
        return iter(self._schemas.values())

    def __len__(self) -> int:
        return len(self._schemas)
