# recordcollector/__init__.py
"""Declarative collection of paginated, batch-limited records from remote APIs."""

from recordcollector.contracts.schema import (
    DefaultSource,
    NamespaceDetails,
    ParamDescriptor,
    Schema,
    ValueSpec,
)
from recordcollector.core.collector import RecordCollector
from recordcollector.core.errors import (
    CollectorError,
    CyclicDependencyError,
    DeadlineExceededError,
    EmptyParamSetError,
    ExtractionError,
    MissingParameterError,
    ParameterAlignmentError,
    RetryExhaustedError,
    SortError,
    TransientCallError,
    UnknownClientError,
    UnknownSchemaError,
    UnresolvableParameterError,
)
from recordcollector.core.params import sufficient_params

__all__ = [
    "CollectorError",
    "CyclicDependencyError",
    "DeadlineExceededError",
    "DefaultSource",
    "EmptyParamSetError",
    "ExtractionError",
    "MissingParameterError",
    "NamespaceDetails",
    "ParamDescriptor",
    "ParameterAlignmentError",
    "RecordCollector",
    "RetryExhaustedError",
    "Schema",
    "SortError",
    "TransientCallError",
    "UnknownClientError",
    "UnknownSchemaError",
    "UnresolvableParameterError",
    "ValueSpec",
    "sufficient_params",
]
