# recordcollector/core/schemas/config.py
"""
Schema catalog loading.

Schemas are usually declared in code; YAML catalogs cover the common
shapes and reference strategy functions by import path.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping

from recordcollector.contracts.schema import (
    DefaultSource,
    NamespaceDetails,
    ParamDescriptor,
    ParamSet,
    Schema,
    ValueSpec,
)
from recordcollector.core.loader import import_callable, load_yaml_files, substitute_env_vars
from recordcollector.core.paths import get_path
from recordcollector.core.schemas.registry import SchemaRegistry

logger = logging.getLogger(__name__)


def cursor_constructor(cursor_path: str, param: str | None = None) -> Callable[[ParamSet, Any], ParamSet]:
    """Next-page builder for cursor APIs: copy ``cursor_path`` of the
    response into the ``param`` request parameter (same name by default)."""
    target = param or cursor_path

    def build(prev_params: ParamSet, response: Any) -> ParamSet:
        return {**prev_params, target: get_path(response, cursor_path)}

    build.__qualname__ = f"cursor_constructor({cursor_path!r}, {target!r})"
    return build


def _namespace(raw: Any) -> NamespaceDetails:
    if isinstance(raw, str):
        return NamespaceDetails(name=raw)
    return NamespaceDetails(
        name=raw["name"],
        constructor_args=dict(raw.get("constructor_args") or {}),
    )


def _value(raw: Mapping[str, Any]) -> ValueSpec:
    if "extract" in raw:
        path: Any = import_callable(raw["extract"])
    elif "path" in raw:
        path = raw["path"]
    else:
        raise ValueError("value requires 'path' or 'extract'")
    sort_by: Any = raw.get("sort_by")
    if "sort_key" in raw:
        sort_by = import_callable(raw["sort_key"])
    return ValueSpec(path=path, sort_by=sort_by)


def _next_params(raw: Any) -> Callable[[ParamSet, Any], ParamSet] | None:
    if raw is None or isinstance(raw, str):
        return import_callable(raw)
    return cursor_constructor(raw["cursor"], raw.get("param"))


def _required(raw: Mapping[str, Any]) -> dict[str, ParamDescriptor]:
    out: dict[str, ParamDescriptor] = {}
    for pname, desc in raw.items():
        desc = desc or {}
        source = desc.get("default_source")
        out[pname] = ParamDescriptor(
            max=int(desc.get("max", 1)),
            detect_array=import_callable(desc.get("detect_array")),
            default_source=(
                None
                if source is None
                else DefaultSource(schema=source["schema"], params=dict(source.get("params") or {}))
            ),
        )
    return out


def build_schema(name: str, raw: Mapping[str, Any]) -> Schema:
    """Build one :class:`Schema` from its YAML mapping."""
    for key in ("api_method", "namespace", "value"):
        if key not in raw:
            raise ValueError(f"Schema '{name}' missing required '{key}' field")

    return Schema(
        name=name,
        api_method=raw["api_method"],
        namespace_details=_namespace(raw["namespace"]),
        value=_value(raw["value"]),
        required_params=_required(raw.get("required_params") or {}),
        params=dict(raw.get("params") or {}),
        incomplete_indicator=raw.get("incomplete_indicator"),
        next_batch_param_constructor=_next_params(raw.get("next_batch_params")),
        on_error=import_callable(raw.get("on_error")),
        merge_operator=import_callable(raw.get("merge_operator")),
        merge_individual=import_callable(raw.get("merge_individual")),
    )


def load_schemas_config(
    patterns: Iterable[str],
    registry: SchemaRegistry | None = None,
) -> SchemaRegistry:
    """Load schema catalogs from YAML into a registry.

    Expected structure::

        schemas:
          Accounts:
            api_method: listAccounts
            namespace: organizations
            value: {path: Accounts, sort_by: Id}
            incomplete_indicator: NextToken
            next_batch_params: {cursor: NextToken}
          Instances:
            api_method: describeInstances
            namespace: {name: ec2, constructor_args: {region: "${AWS_REGION:-us-east-1}"}}
            value: {extract: "my.pkg.extract:instances"}
            required_params:
              accountId:
                max: 1
                default_source: {schema: Accounts}

    Later files override earlier ones per schema name. Default sources
    name other schemas and are resolved lazily through the registry.
    """
    registry = registry if registry is not None else SchemaRegistry()

    schemas_map: dict[str, dict[str, Any]] = {}
    for data in load_yaml_files(patterns):
        for name, raw in (data.get("schemas") or {}).items():
            schemas_map[name] = raw or {}

    for name, raw in schemas_map.items():
        try:
            schema = build_schema(name, substitute_env_vars(raw))
        except (KeyError, ValueError, TypeError) as exc:
            raise ValueError(f"Schema '{name}' config error: {exc}") from exc
        registry.register(schema)

    logger.info("Loaded %d schema(s): %s", len(schemas_map), list(schemas_map))
    return registry
