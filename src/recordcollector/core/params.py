# recordcollector/core/params.py
"""
Param-set construction.

Turns one logical request (schema + parameter bag) into the concrete
parameter objects of the individual remote calls. A required parameter
fans out when it is array-shaped, or when it is a single sequence longer
than the descriptor's ``max`` (it is then chunked). All fan-out
parameters of one request must agree in length; scalar parameters are
copied into every call.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Mapping

from recordcollector.contracts.schema import ParamDescriptor, ParamSet, Schema
from recordcollector.core.errors import (
    EmptyParamSetError,
    MissingParameterError,
    ParameterAlignmentError,
)

logger = logging.getLogger(__name__)


def sufficient_params(schema: Schema, params: Mapping[str, Any] | None) -> bool:
    """True when every required parameter is present (by key, not truthiness)."""
    params = params or {}
    return all(name in params for name in schema.required_params)


def missing_params(schema: Schema, params: Mapping[str, Any] | None) -> list[str]:
    params = params or {}
    return [name for name in schema.required_params if name not in params]


def chunk(value: Any, size: int) -> list[list[Any]]:
    """Split a sequence into contiguous chunks of at most ``size`` items."""
    items = list(value)
    return [items[i : i + size] for i in range(0, len(items), size)]


def needs_split(descriptor: ParamDescriptor, value: Any) -> bool:
    """One oversized value (not already array-shaped) that must be batched.

    Strings, bytes and mappings are single values and never split.
    """
    if descriptor.is_array(value):
        return False
    if isinstance(value, (str, bytes, Mapping)):
        return False
    try:
        return len(value) > descriptor.max
    except TypeError:
        return False


def build_param_sets(schema: Schema, params: Mapping[str, Any] | None) -> list[ParamSet]:
    """Build the per-call parameter sets for ``schema``.

    Raises:
        MissingParameterError: a required parameter is absent from ``params``.
        ParameterAlignmentError: fan-out parameters disagree in length.
        EmptyParamSetError: a fan-out parameter has no values, so no call
            can be built.
    """
    params = dict(params or {})
    base = {**schema.params, **params}

    param_sets: list[ParamSet] = []
    scalars: list[str] = []

    for name, descriptor in schema.required_params.items():
        if name not in params:
            raise MissingParameterError(schema.name, name, params)
        value = params[name]

        if descriptor.is_array(value):
            values = list(value)
        elif needs_split(descriptor, value):
            values = chunk(value, descriptor.max)
            logger.debug(
                "Schema %s: split '%s' (%d items) into %d batch(es) of <= %d",
                schema.name,
                name,
                len(value),
                len(values),
                descriptor.max,
            )
        else:
            scalars.append(name)
            continue

        if not values:
            logger.warning("Schema %s: fan-out parameter '%s' is empty", schema.name, name)
            raise EmptyParamSetError(schema.name, params)

        if param_sets and len(values) != len(param_sets):
            raise ParameterAlignmentError(
                schema.name, name, len(param_sets), len(values), params
            )
        if not param_sets:
            param_sets = [copy.deepcopy(base) for _ in values]

        for param_set, item in zip(param_sets, values):
            param_set[name] = copy.deepcopy(item)

    if scalars and not param_sets:
        param_sets.append(copy.deepcopy(base))
    for name in scalars:
        for param_set in param_sets:
            param_set[name] = copy.deepcopy(params[name])

    # no required parameters: one call with defaults merged with params
    if not param_sets:
        param_sets.append(copy.deepcopy(base))

    return param_sets
