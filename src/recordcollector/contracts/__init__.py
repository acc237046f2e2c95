# recordcollector/contracts/__init__.py
"""Public contracts: schemas, the remote client boundary and API models."""

from recordcollector.contracts.records import RecordsRequest, RecordsResponse
from recordcollector.contracts.remote import RemoteClient
from recordcollector.contracts.schema import (
    DefaultSource,
    NamespaceDetails,
    ParamDescriptor,
    ParamSet,
    Schema,
    ValueSpec,
    concat,
    flatten,
    is_array,
)

__all__ = [
    "DefaultSource",
    "NamespaceDetails",
    "ParamDescriptor",
    "ParamSet",
    "RecordsRequest",
    "RecordsResponse",
    "RemoteClient",
    "Schema",
    "ValueSpec",
    "concat",
    "flatten",
    "is_array",
]
