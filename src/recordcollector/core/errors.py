# recordcollector/core/errors.py
"""
Error taxonomy for the collection engine.

Every failure surfaced by :func:`lookup_records` is a :class:`CollectorError`
carrying the schema name and the parameters that were being processed.
Only :class:`TransientCallError` is ever retried, and only per page.
"""
from __future__ import annotations

import json
from typing import Any, Mapping


def _dump(params: Mapping[str, Any] | None) -> str:
    try:
        return json.dumps(params, default=str, sort_keys=True)
    except (TypeError, ValueError):
        return repr(params)


class CollectorError(Exception):
    """Base class for all engine errors."""

    code = "collector_error"

    def __init__(
        self,
        message: str,
        *,
        schema: str | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.schema = schema
        self.params = dict(params) if params is not None else None
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "schema": self.schema,
            "params": self.params,
        }

    def __str__(self) -> str:
        return self.message


class MissingParameterError(CollectorError):
    """A required parameter has no value when building param sets."""

    code = "missing_parameter"

    def __init__(self, schema: str, param: str, params: Mapping[str, Any]) -> None:
        self.param = param
        super().__init__(
            f"Problem creating individual call params for {schema}: "
            f"looking for '{param}' but did not find it in params {_dump(params)}",
            schema=schema,
            params=params,
        )


class ParameterAlignmentError(CollectorError):
    """Two fan-out parameters of one request disagree in cardinality."""

    code = "parameter_alignment"

    def __init__(
        self, schema: str, param: str, expected: int, actual: int, params: Mapping[str, Any]
    ) -> None:
        self.param = param
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Problem constructing parameters for schema {schema}: '{param}' fans out "
            f"to {actual} value(s) but earlier parameters produced {expected}; "
            f"multiple arrays of parameters must be the same length {_dump(params)}",
            schema=schema,
            params=params,
        )


class EmptyParamSetError(CollectorError):
    """Required parameters are declared but none produced a param set."""

    code = "empty_param_set"

    def __init__(self, schema: str, params: Mapping[str, Any]) -> None:
        super().__init__(
            f"Schema {schema} declares required parameters but none of them "
            f"produced a call; nothing to execute for {_dump(params)}",
            schema=schema,
            params=params,
        )


class UnresolvableParameterError(CollectorError):
    """A required parameter has neither a literal value nor a default source."""

    code = "unresolvable_parameter"

    def __init__(self, schema: str, param: str, params: Mapping[str, Any] | None) -> None:
        self.param = param
        super().__init__(
            f"No acceptable value provided for the '{param}' parameter in the "
            f"{schema} schema: pass a literal value or declare a default_source",
            schema=schema,
            params=params,
        )


class CyclicDependencyError(CollectorError):
    """Default sources form a cycle across schemas."""

    code = "cyclic_dependency"

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = list(cycle)
        super().__init__(
            "Cyclic parameter dependency: " + " -> ".join(self.cycle),
            schema=self.cycle[0] if self.cycle else None,
        )


class UnknownSchemaError(CollectorError):
    """A default source references a schema name that is not registered."""

    code = "unknown_schema"

    def __init__(self, name: str, available: list[str]) -> None:
        super().__init__(
            f"Schema '{name}' not found. Available: {available}",
            schema=name,
        )


class ExtractionError(CollectorError):
    """The response has no data at the schema's declared value path."""

    code = "extraction_error"

    def __init__(self, schema: str, path: Any, response: Any) -> None:
        self.path = path
        super().__init__(
            f"{schema} specifies path as {path!r} but that path is not present "
            f"on {_dump(response) if isinstance(response, Mapping) else repr(response)}",
            schema=schema,
        )


class TransientCallError(CollectorError):
    """A Remote Call failed in a way that is eligible for retry."""

    code = "transient_call_error"

    def __init__(
        self,
        schema: str,
        method: str,
        params: Mapping[str, Any],
        cause: BaseException,
    ) -> None:
        self.method = method
        self.cause = cause
        super().__init__(
            f"Call {method} for schema {schema} failed: {cause}",
            schema=schema,
            params=params,
        )


class RetryExhaustedError(CollectorError):
    """Every retry attempt for one page failed."""

    code = "retry_exhausted"

    def __init__(
        self,
        schema: str,
        method: str,
        params: Mapping[str, Any],
        attempts: int,
        last_error: BaseException | None,
    ) -> None:
        self.method = method
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Error fetching results for schema {schema} via {method} with params "
            f"{_dump(params)} after {attempts} attempt(s): {last_error}",
            schema=schema,
            params=params,
        )


class DeadlineExceededError(CollectorError):
    """The request ran past its deadline."""

    code = "deadline_exceeded"

    def __init__(self, schema: str | None, params: Mapping[str, Any] | None = None) -> None:
        super().__init__(
            f"Deadline exceeded while collecting records for schema {schema}",
            schema=schema,
            params=params,
        )


class UnknownClientError(CollectorError):
    """A schema's client namespace is not registered, or its client cannot be built."""

    code = "unknown_client"

    def __init__(
        self,
        schema: str,
        namespace: str,
        available: list[str],
        cause: BaseException | None = None,
    ) -> None:
        self.namespace = namespace
        self.available = available
        self.cause = cause
        detail = (
            f"client '{namespace}' could not be created: {cause}"
            if cause is not None
            else f"client namespace '{namespace}' is not registered. Available: {available}"
        )
        super().__init__(f"Schema {schema}: {detail}", schema=schema)


class SortError(CollectorError):
    """Records could not be ordered by the schema's ``sort_by`` key."""

    code = "sort_error"

    def __init__(self, schema: str | None, sort_by: Any, cause: BaseException) -> None:
        self.sort_by = sort_by
        self.cause = cause
        super().__init__(
            f"Cannot sort records of schema {schema} by {sort_by!r}: {cause}",
            schema=schema,
        )
