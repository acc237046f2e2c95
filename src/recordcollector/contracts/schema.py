# recordcollector/contracts/schema.py
"""
Schema contracts.

A schema is a declarative description of one kind of remote request: which
parameters it needs, how to page through results, how to pull records out
of a response and how to merge partial results. Strategy fields are plain
callables so schemas stay data.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence, Union

Response = Any
Records = Any
ParamSet = dict[str, Any]

PathSpec = Union[str, Callable[[Response], Any]]
"""Dotted/indexed lookup path (``"Reservations[0].Instances"``) or extractor."""

SortSpec = Union[str, Callable[[Any], Any]]
ArrayDetector = Callable[[Any], bool]
NextParamsBuilder = Callable[[ParamSet, Response], ParamSet]
ErrorHook = Callable[[BaseException, Response], tuple[Union[BaseException, None], Response]]
MergeOperator = Callable[[Records, Records], Records]
MergeIndividual = Callable[[Sequence[Records]], Records]


def is_array(value: Any) -> bool:
    """Default fan-out detector: lists and tuples fan out, everything else is one value."""
    return isinstance(value, (list, tuple))


def concat(accumulated: Records, page: Records) -> Records:
    """Default page merge: sequence concatenation."""
    return [*accumulated, *page]


def flatten(results: Sequence[Records]) -> Records:
    """Default merge across param sets: flatten one level, in param-set order."""
    out: list[Any] = []
    for result in results:
        if isinstance(result, (list, tuple)):
            out.extend(result)
        else:
            out.append(result)
    return out


@dataclass(frozen=True)
class NamespaceDetails:
    """Selects the remote client for a schema.

    Attributes:
        name: Client namespace registered in the clients registry.
        constructor_args: Keyword arguments for the client factory; deep-merged
            on top of the request's ambient client configuration.
    """

    name: str
    constructor_args: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ValueSpec:
    """Where the records live in a response and how to order the final result."""

    path: PathSpec
    sort_by: SortSpec | None = None


@dataclass(frozen=True)
class DefaultSource:
    """Another schema (or schema name) whose records supply a missing parameter."""

    schema: "Schema | str"
    params: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ParamDescriptor:
    """Batching and resolution rules for one required parameter.

    Attributes:
        max: Largest number of items one call may carry for this parameter.
        detect_array: Predicate telling "many values to fan out over" apart
            from "one value"; defaults to :func:`is_array`.
        default_source: Where to fetch the value when the caller omits it.
    """

    max: int
    detect_array: ArrayDetector | None = None
    default_source: DefaultSource | None = None

    def __post_init__(self) -> None:
        if self.max < 1:
            raise ValueError(f"ParamDescriptor.max must be >= 1, got {self.max}")

    def is_array(self, value: Any) -> bool:
        return (self.detect_array or is_array)(value)


@dataclass(frozen=True)
class Schema:
    """Declarative description of one paginated remote request.

    Attributes:
        name: Identifier used in diagnostics and catalogs.
        api_method: Remote method invoked for every page.
        namespace_details: Client selection and constructor arguments.
        value: Record extraction path and optional final sort.
        required_params: Ordered mapping of parameter name to descriptor.
        params: Defaults merged into every call.
        incomplete_indicator: Lookup path; truthy means more pages remain.
        next_batch_param_constructor: ``(prev_params, response) -> next_params``.
        on_error: ``(error, response) -> (error | None, response)`` recovery hook.
        merge_operator: ``(accumulated, page) -> accumulated``; defaults to :func:`concat`.
        merge_individual: ``(results) -> result``; defaults to :func:`flatten`.
    """

    name: str
    api_method: str
    namespace_details: NamespaceDetails
    value: ValueSpec
    required_params: Mapping[str, ParamDescriptor] = field(default_factory=dict)
    params: Mapping[str, Any] = field(default_factory=dict)
    incomplete_indicator: str | None = None
    next_batch_param_constructor: NextParamsBuilder | None = None
    on_error: ErrorHook | None = None
    merge_operator: MergeOperator | None = None
    merge_individual: MergeIndividual | None = None

    def merge_pages(self, accumulated: Records, page: Records) -> Records:
        return (self.merge_operator or concat)(accumulated, page)

    def merge_results(self, results: Sequence[Records]) -> Records:
        return (self.merge_individual or flatten)(results)
