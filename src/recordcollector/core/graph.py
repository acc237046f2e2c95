# recordcollector/core/graph.py
"""
Dependency graph for one top-level request.

Nodes are (schema, params) pairs; an edge ``A --param--> B`` means node A
is missing ``param`` and takes it from the records of node B (the
parameter's default source). The graph is built and checked before any
remote call is made, so configuration defects (missing sources, cycles,
unknown schema names) fail fast.
"""
from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from recordcollector.contracts.schema import Schema
from recordcollector.core.errors import (
    CyclicDependencyError,
    UnknownSchemaError,
    UnresolvableParameterError,
)
from recordcollector.core.params import missing_params
from recordcollector.core.schemas.registry import SchemaRegistry


def node_key(schema: Schema, params: Mapping[str, Any]) -> str:
    """Stable identity of a (schema, params) pair."""
    return f"{schema.name}:{json.dumps(params, sort_keys=True, default=repr)}"


@dataclass
class DependencyNode:
    key: str
    schema: Schema
    params: dict[str, Any]
    # parameter name -> key of the node supplying it
    dependencies: dict[str, str] = field(default_factory=dict)


class DependencyGraph:
    """Directed acyclic graph of the requests needed to satisfy a root request."""

    def __init__(self, root: str, nodes: dict[str, DependencyNode]) -> None:
        self.root = root
        self.nodes = nodes

    @classmethod
    def build(
        cls,
        schema: Schema,
        params: Mapping[str, Any] | None,
        *,
        schemas: SchemaRegistry | None = None,
    ) -> "DependencyGraph":
        """Walk default sources depth-first from the root request.

        Raises:
            UnresolvableParameterError: a missing parameter has no default source.
            UnknownSchemaError: a default source names an unregistered schema.
            CyclicDependencyError: default sources lead back to a node
                already being resolved.
        """
        nodes: dict[str, DependencyNode] = {}
        done: set[str] = set()
        stack: list[str] = []

        def resolve_ref(ref: Schema | str) -> Schema:
            if isinstance(ref, Schema):
                return ref
            if schemas is None:
                raise UnknownSchemaError(ref, [])
            return schemas.get(ref)

        def visit(node_schema: Schema, node_params: dict[str, Any]) -> str:
            key = node_key(node_schema, node_params)
            if key in done:
                return key
            if key in stack:
                cycle = stack[stack.index(key) :] + [key]
                raise CyclicDependencyError([nodes[k].schema.name for k in cycle])

            node = DependencyNode(key=key, schema=node_schema, params=node_params)
            nodes[key] = node
            stack.append(key)

            for pname in missing_params(node_schema, node_params):
                source = node_schema.required_params[pname].default_source
                if source is None:
                    raise UnresolvableParameterError(node_schema.name, pname, node_params)
                child_schema = resolve_ref(source.schema)
                node.dependencies[pname] = visit(child_schema, copy.deepcopy(dict(source.params)))

            stack.pop()
            done.add(key)
            return key

        root = visit(schema, copy.deepcopy(dict(params or {})))
        return cls(root, nodes)

    def dependencies(self, key: str) -> dict[str, str]:
        return dict(self.nodes[key].dependencies)

    def depth(self) -> int:
        """Length of the longest dependency chain below the root."""

        def walk(key: str) -> int:
            deps = self.nodes[key].dependencies.values()
            return 1 + max((walk(child) for child in deps), default=0)

        return walk(self.root) - 1

    def __len__(self) -> int:
        return len(self.nodes)
