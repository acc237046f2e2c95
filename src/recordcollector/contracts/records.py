# recordcollector/contracts/records.py
"""
HTTP contracts for the records API.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RecordsRequest(BaseModel):
    """POST body for ``/schemas/{name}/records``."""

    params: dict[str, Any] = Field(default_factory=dict)
    client_config: dict[str, Any] = Field(default_factory=dict)
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Wall-clock bound in seconds (defaults to settings.request_timeout)",
    )


class RecordsResponse(BaseModel):
    schema_name: str = Field(alias="schema")
    count: int
    items: list[Any]

    model_config = {"populate_by_name": True}
