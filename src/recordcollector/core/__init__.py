# recordcollector/core/__init__.py
"""Collection engine: param sets, pagination, fan-out and dependency resolution."""

from recordcollector.core.collector import RecordCollector, sort_records
from recordcollector.core.context import CollectContext
from recordcollector.core.executor import ParallelExecutor
from recordcollector.core.fetcher import PaginatingFetcher
from recordcollector.core.graph import DependencyGraph
from recordcollector.core.params import build_param_sets, sufficient_params
from recordcollector.core.resolver import DependencyResolver
from recordcollector.core.retry import RetryPolicy

__all__ = [
    "CollectContext",
    "DependencyGraph",
    "DependencyResolver",
    "PaginatingFetcher",
    "ParallelExecutor",
    "RecordCollector",
    "RetryPolicy",
    "build_param_sets",
    "sort_records",
    "sufficient_params",
]
