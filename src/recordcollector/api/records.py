# recordcollector/api/records.py
"""
Schema discovery and record collection endpoints.

    GET  /schemas
    GET  /schemas/{name}
    POST /schemas/{name}/records
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from recordcollector.contracts.records import RecordsRequest, RecordsResponse
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
    UnknownClientError,
    UnknownSchemaError,
    UnresolvableParameterError,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["schemas"])

_STATUS: list[tuple[type[CollectorError], int]] = [
    (UnknownSchemaError, 404),
    (MissingParameterError, 400),
    (ParameterAlignmentError, 400),
    (EmptyParamSetError, 400),
    (UnresolvableParameterError, 422),
    (CyclicDependencyError, 422),
    (ExtractionError, 502),
    (RetryExhaustedError, 502),
    (DeadlineExceededError, 504),
    (UnknownClientError, 500),
    (SortError, 502),
]


def status_for(exc: CollectorError) -> int:
    for cls, status in _STATUS:
        if isinstance(exc, cls):
            return status
    return 500


def _collector(request: Request) -> RecordCollector:
    collector = getattr(request.app.state, "collector", None)
    if collector is None:
        raise HTTPException(status_code=503, detail="Collector not initialized")
    return collector


@router.get("/schemas")
async def list_schemas(request: Request) -> list[dict]:
    collector = _collector(request)
    return [
        {
            "name": s.name,
            "api_method": s.api_method,
            "required_params": list(s.required_params),
        }
        for s in collector.schemas
    ]


@router.get("/schemas/{name}")
async def describe_schema(name: str, request: Request) -> dict:
    collector = _collector(request)
    try:
        return collector.schemas.describe(name)
    except UnknownSchemaError:
        raise HTTPException(status_code=404, detail=f"Schema '{name}' not found")


@router.post("/schemas/{name}/records", response_model=RecordsResponse, response_model_by_alias=True)
async def collect_records(name: str, body: RecordsRequest, request: Request):
    collector = _collector(request)
    kwargs = {} if body.timeout is None else {"timeout": body.timeout}
    try:
        items = await collector.lookup_records(
            name,
            body.params,
            client_config=body.client_config,
            **kwargs,
        )
    except CollectorError as exc:
        status = status_for(exc)
        logger.warning("Collect %s failed (%d): %s", name, status, exc)
        return JSONResponse(status_code=status, content=exc.to_dict())

    items = list(items) if isinstance(items, (list, tuple)) else [items]
    return RecordsResponse(schema=name, count=len(items), items=items)
